"""File system writer manifest."""

from run_lifecycle.writers.filesystem.config import FileSystemWriterConfig
from run_lifecycle.writers.filesystem.writer import FileSystemWriter
from run_lifecycle.writers.manifest import WriterManifest

filesystem_manifest = WriterManifest(
    config_cls=FileSystemWriterConfig,
    writer_factory=FileSystemWriter.from_config,
)
