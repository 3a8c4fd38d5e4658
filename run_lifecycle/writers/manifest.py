"""Writer plugin manifests."""

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel

from run_lifecycle.writers.base import ResultsWriter

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class WriterManifest[ConfigT: BaseModel]:
    """Pairs a writer's options model with the function creating the writer."""

    config_cls: type[ConfigT]
    writer_factory: Callable[[ConfigT], ResultsWriter]

    def build(self, options: Mapping[str, Any]) -> ResultsWriter:
        """Validate raw writer options and create the writer.

        Raises:
            pydantic.ValidationError: If the options do not fit ``config_cls``

        """
        config = self.config_cls.model_validate(options)
        writer = self.writer_factory(config)
        log.debug("Created %s with %r", type(writer).__name__, config)
        return writer
