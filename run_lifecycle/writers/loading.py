"""Discovery of writer plugins registered as entry points."""

from importlib.metadata import EntryPoints, entry_points
from typing import Any

from run_lifecycle.errors import WriterNotFoundError
from run_lifecycle.writers.manifest import WriterManifest

ENTRY_POINT_GROUP = "run_lifecycle.writers"


def available_writers() -> list[str]:
    """Keys of every installed writer, sorted."""
    return sorted(entry.name for entry in _writer_entries())


def load_writer_manifest(key: str) -> WriterManifest[Any]:
    """Load the manifest of the writer registered under key.

    Raises:
        WriterNotFoundError: If no writer is registered under key, or the
            entry point does not resolve to a writer manifest

    """
    for entry in _writer_entries().select(name=key):
        manifest = entry.load()
        if not isinstance(manifest, WriterManifest):
            raise WriterNotFoundError(
                f"Entry point '{key}' ({entry.value}) is not a writer manifest"
            )
        return manifest

    raise WriterNotFoundError(
        f"Writer '{key}' not found. Available writers: {available_writers()}"
    )


def _writer_entries() -> EntryPoints:
    return entry_points(group=ENTRY_POINT_GROUP)
