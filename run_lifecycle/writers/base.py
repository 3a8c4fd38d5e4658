"""Abstract base class for result writers."""

import mimetypes
import uuid
from abc import ABC, abstractmethod
from collections.abc import Mapping
from pathlib import Path

from run_lifecycle.models.record import FixtureRecord, ScopeRecord, TestRecord
from run_lifecycle.models.result import AttachmentOptions

type AttachmentContent = bytes | str | Path

EXTENSIONS: Mapping[str, str] = {
    "text/plain": ".txt",
    "text/html": ".html",
    "text/csv": ".csv",
    "text/xml": ".xml",
    "application/json": ".json",
    "application/xml": ".xml",
    "application/yaml": ".yaml",
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/svg+xml": ".svg",
    "video/mp4": ".mp4",
}


def file_extension(options: AttachmentOptions) -> str:
    """Resolve the file extension for an attachment, with leading dot."""
    if options.file_extension:
        extension = options.file_extension
        return extension if extension.startswith(".") else f".{extension}"
    if (known := EXTENSIONS.get(options.content_type)) is not None:
        return known
    return mimetypes.guess_extension(options.content_type) or ""


def attachment_file_name(options: AttachmentOptions) -> str:
    """Generate a unique file name for a new attachment."""
    return f"{uuid.uuid4()}-attachment{file_extension(options)}"


def content_bytes(content: AttachmentContent, options: AttachmentOptions) -> bytes:
    """Read attachment content into bytes."""
    if isinstance(content, Path):
        return content.read_bytes()
    if isinstance(content, str):
        return content.encode(options.encoding)
    return content


class ResultsWriter(ABC):
    """Abstract base for persistence of finalized execution units.

    Records reach a writer only after they are finalized, so writers never
    observe a half-built result. Writes must be safe to repeat against the
    same destination across process lifetimes.
    """

    @abstractmethod
    def write_result(self, record: TestRecord | FixtureRecord) -> None:
        """Persist a finalized test or fixture.

        Args:
            record: Finalized record with all nested steps embedded

        """

    @abstractmethod
    def write_group(self, record: ScopeRecord) -> None:
        """Persist a closed scope.

        Args:
            record: Scope with the ids of its fixtures, tests and sub-scopes

        """

    @abstractmethod
    def write_attachment(
        self,
        content: AttachmentContent,
        options: str | AttachmentOptions,
    ) -> str:
        """Persist an attachment blob.

        Args:
            content: Raw bytes, text encoded with the options' encoding, or a
                path to a file whose content is copied
            options: Content type or full attachment options

        Returns:
            File reference that result records use to point at the blob

        """
