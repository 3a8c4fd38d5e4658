"""File system writer module."""

from run_lifecycle.writers.filesystem.config import FileSystemWriterConfig
from run_lifecycle.writers.filesystem.manifest import filesystem_manifest
from run_lifecycle.writers.filesystem.writer import FileSystemWriter

__all__ = ["FileSystemWriter", "FileSystemWriterConfig", "filesystem_manifest"]
