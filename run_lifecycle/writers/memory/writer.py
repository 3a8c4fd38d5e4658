"""In-memory writer implementation."""

from dataclasses import dataclass, field

from run_lifecycle.models.record import FixtureRecord, ScopeRecord, TestRecord
from run_lifecycle.models.result import AttachmentOptions
from run_lifecycle.writers.base import (
    AttachmentContent,
    ResultsWriter,
    attachment_file_name,
    content_bytes,
)
from run_lifecycle.writers.memory.config import InMemoryWriterConfig


@dataclass(kw_only=True)
class InMemoryWriter(ResultsWriter):
    """Keeps every written record and attachment in memory."""

    results: list[TestRecord] = field(default_factory=list)
    fixtures: list[FixtureRecord] = field(default_factory=list)
    groups: list[ScopeRecord] = field(default_factory=list)
    attachments: dict[str, bytes] = field(default_factory=dict)

    @classmethod
    def from_config(cls, config: InMemoryWriterConfig) -> "InMemoryWriter":
        """Create an empty writer."""
        return cls()

    def write_result(self, record: TestRecord | FixtureRecord) -> None:
        """Store a test or fixture record."""
        if isinstance(record, FixtureRecord):
            self.fixtures.append(record)
        else:
            self.results.append(record)

    def write_group(self, record: ScopeRecord) -> None:
        """Store a scope record."""
        self.groups.append(record)

    def write_attachment(
        self,
        content: AttachmentContent,
        options: str | AttachmentOptions,
    ) -> str:
        """Store attachment bytes under a new file name."""
        attachment_options = AttachmentOptions.coerce(options)
        file_name = attachment_file_name(attachment_options)
        self.attachments[file_name] = content_bytes(content, attachment_options)
        return file_name
