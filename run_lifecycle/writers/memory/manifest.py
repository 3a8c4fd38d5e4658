"""In-memory writer manifest."""

from run_lifecycle.writers.manifest import WriterManifest
from run_lifecycle.writers.memory.config import InMemoryWriterConfig
from run_lifecycle.writers.memory.writer import InMemoryWriter

memory_manifest = WriterManifest(
    config_cls=InMemoryWriterConfig,
    writer_factory=InMemoryWriter.from_config,
)
