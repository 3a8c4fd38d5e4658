"""File system writer implementation."""

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path

from run_lifecycle.models.record import FixtureRecord, ScopeRecord, TestRecord
from run_lifecycle.models.result import AttachmentOptions
from run_lifecycle.writers.base import (
    AttachmentContent,
    ResultsWriter,
    attachment_file_name,
    content_bytes,
)
from run_lifecycle.writers.filesystem.config import FileSystemWriterConfig

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class FileSystemWriter(ResultsWriter):
    """Writes one file per result, fixture, scope and attachment.

    Result files are named ``{uuid}-result.json``, fixtures
    ``{uuid}-fixture.json``, scopes ``{uuid}-container.json`` and attachments
    ``{uuid}-attachment{ext}``. The results directory is created before every
    write, so removing it between writes is harmless.
    """

    results_dir: Path

    @classmethod
    def from_config(cls, config: FileSystemWriterConfig) -> "FileSystemWriter":
        """Create writer from its configuration."""
        return cls(results_dir=config.results_dir)

    def write_result(self, record: TestRecord | FixtureRecord) -> None:
        """Write a test or fixture record as JSON."""
        suffix = "fixture" if isinstance(record, FixtureRecord) else "result"
        self._write_json(
            f"{record.uuid}-{suffix}.json", record.model_dump_json(by_alias=True)
        )

    def write_group(self, record: ScopeRecord) -> None:
        """Write a scope record as JSON."""
        self._write_json(
            f"{record.uuid}-container.json", record.model_dump_json(by_alias=True)
        )

    def write_attachment(
        self,
        content: AttachmentContent,
        options: str | AttachmentOptions,
    ) -> str:
        """Write an attachment blob and return its file name."""
        attachment_options = AttachmentOptions.coerce(options)
        file_name = attachment_file_name(attachment_options)
        target = self._ensure_dir() / file_name

        if isinstance(content, Path):
            shutil.copyfile(content, target)
        else:
            target.write_bytes(content_bytes(content, attachment_options))

        log.debug("Wrote attachment %s (%s)", target, attachment_options.content_type)
        return file_name

    def _write_json(self, file_name: str, payload: str) -> None:
        target = self._ensure_dir() / file_name
        target.write_text(payload, encoding="utf-8")
        log.debug("Wrote %s", target)

    def _ensure_dir(self) -> Path:
        self.results_dir.mkdir(parents=True, exist_ok=True)
        return self.results_dir
