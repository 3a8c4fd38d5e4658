"""Configuration for file system writer."""

from pathlib import Path

from pydantic import BaseModel


class FileSystemWriterConfig(BaseModel):
    """Configuration for file system writer."""

    results_dir: Path = Path("lifecycle-results")
