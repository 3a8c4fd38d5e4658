"""Models for execution units tracked while a run is in progress."""

import traceback
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import StrEnum
from typing import Literal

from pydantic import Field

from run_lifecycle.models.base import Model

type Status = Literal["passed", "failed", "broken", "skipped"]
type Stage = Literal["scheduled", "running", "finished", "pending", "interrupted"]
type FixtureKind = Literal["before", "after"]


class LabelName(StrEnum):
    """Well-known label names."""

    PARENT_SUITE = "parentSuite"
    SUITE = "suite"
    SUB_SUITE = "subSuite"
    OWNER = "owner"
    SEVERITY = "severity"
    TAG = "tag"
    EPIC = "epic"
    FEATURE = "feature"
    STORY = "story"


class Label(Model):
    """A name/value pair attached to a test."""

    name: str
    value: str


class Parameter(Model):
    """A named parameter of a test, step or fixture."""

    name: str
    value: str
    mode: Literal["default", "masked", "hidden"] | None = None
    excluded: bool = False


class Attachment(Model):
    """Reference to an attachment blob persisted by a writer."""

    name: str
    type: str = Field(..., description="Content type of the attachment")
    source: str = Field(..., description="File reference returned by the writer")


class StatusDetails(Model):
    """Failure message and trace of an execution unit."""

    message: str | None = None
    trace: str | None = None


class AttachmentOptions(Model):
    """How an attachment blob is stored."""

    content_type: str
    file_extension: str | None = None
    encoding: str = "utf-8"

    @classmethod
    def coerce(cls, options: "str | AttachmentOptions") -> "AttachmentOptions":
        """Accept either a bare content type or full options."""
        if isinstance(options, AttachmentOptions):
            return options
        return cls(content_type=options)


def now() -> datetime:
    """Current time in UTC."""
    return datetime.now(timezone.utc)


def status_details_from(error: BaseException) -> StatusDetails:
    """Build status details from a raised exception."""
    trace = "".join(
        traceback.format_exception(type(error), error, error.__traceback__)
    )
    return StatusDetails(message=str(error), trace=trace)


def status_from(error: BaseException) -> Status:
    """Classify an exception: failed assertions fail, anything else breaks."""
    return "failed" if isinstance(error, AssertionError) else "broken"


@dataclass(kw_only=True)
class ExecutableItem:
    """Common shape of tests, steps and fixtures."""

    uuid: str
    name: str
    status: Status | None = None
    stage: Stage = "scheduled"
    status_details: StatusDetails = field(default_factory=StatusDetails)
    start: datetime | None = None
    stop: datetime | None = None
    parameters: list[Parameter] = field(default_factory=list)
    steps: list["StepResult"] = field(default_factory=list)
    attachments: list[Attachment] = field(default_factory=list)


@dataclass(kw_only=True)
class StepResult(ExecutableItem):
    """A named sub-operation nested in a test, fixture or another step."""


@dataclass(kw_only=True)
class TestResult(ExecutableItem):
    """A single test case."""

    __test__ = False

    full_name: str | None = None
    history_id: str | None = None
    labels: list[Label] = field(default_factory=list)


@dataclass(kw_only=True)
class FixtureResult(ExecutableItem):
    """A setup or teardown hook run as its own execution unit."""

    scope: str
    kind: FixtureKind


@dataclass(kw_only=True)
class TestScope:
    """Grouping node for nested suites.

    Child collections only ever grow; a closed scope is never reopened.
    """

    __test__ = False

    uuid: str
    name: str
    fixtures: list[str] = field(default_factory=list)
    tests: list[str] = field(default_factory=list)
    sub_scopes: list[str] = field(default_factory=list)
    start: datetime | None = None
    stop: datetime | None = None
