"""In-memory writer module."""

from run_lifecycle.writers.memory.config import InMemoryWriterConfig
from run_lifecycle.writers.memory.manifest import memory_manifest
from run_lifecycle.writers.memory.writer import InMemoryWriter

__all__ = ["InMemoryWriter", "InMemoryWriterConfig", "memory_manifest"]
