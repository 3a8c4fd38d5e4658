"""Reporter configuration and writer construction."""

import logging
from typing import Any

from pydantic import BaseModel, Field

from run_lifecycle.writers.base import ResultsWriter
from run_lifecycle.writers.loading import load_writer_manifest

log = logging.getLogger(__name__)


class ReporterConfig(BaseModel):
    """Configuration of a lifecycle reporter."""

    writer: str = Field(default="filesystem", description="Writer plugin key")
    writer_config: dict[str, Any] = Field(
        default_factory=dict, description="Options passed to the writer plugin"
    )

    @classmethod
    def from_json(cls, text: str) -> "ReporterConfig":
        """Parse configuration from a JSON document."""
        return cls.model_validate_json(text)


def build_writer(config: ReporterConfig) -> ResultsWriter:
    """Instantiate the writer selected by the configuration.

    Raises:
        WriterNotFoundError: If the writer key is not registered
        pydantic.ValidationError: If the writer options are invalid

    """
    log.debug("Loading writer: %s", config.writer)
    return load_writer_manifest(config.writer).build(config.writer_config)
