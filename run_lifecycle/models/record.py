"""Immutable records handed to writers once an execution unit finishes."""

from collections.abc import Sequence
from datetime import datetime

from run_lifecycle.models.base import Model
from run_lifecycle.models.result import (
    Attachment,
    FixtureKind,
    Label,
    Parameter,
    Stage,
    Status,
    StatusDetails,
)


class StepRecord(Model):
    """Finalized step, embedded in its parent record."""

    uuid: str
    name: str
    status: Status | None = None
    stage: Stage
    status_details: StatusDetails = StatusDetails()
    start: datetime | None = None
    stop: datetime | None = None
    parameters: Sequence[Parameter] = ()
    steps: Sequence["StepRecord"] = ()
    attachments: Sequence[Attachment] = ()


class TestRecord(StepRecord):
    """Finalized test result."""

    __test__ = False

    full_name: str | None = None
    history_id: str | None = None
    labels: Sequence[Label] = ()


class FixtureRecord(StepRecord):
    """Finalized setup or teardown fixture."""

    scope: str
    kind: FixtureKind


class ScopeRecord(Model):
    """Closed grouping scope with the ids of everything it contains."""

    uuid: str
    name: str
    fixtures: Sequence[str] = ()
    tests: Sequence[str] = ()
    sub_scopes: Sequence[str] = ()
    start: datetime | None = None
    stop: datetime | None = None
