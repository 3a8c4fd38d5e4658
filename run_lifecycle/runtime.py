"""Lifecycle runtime tracking what is currently running in a test process."""

import hashlib
import logging
import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Literal

from run_lifecycle.errors import (
    NoActiveGroupError,
    NoActiveTestError,
    NoActiveUnitError,
    StepOrderError,
    TestAlreadyRunningError,
    UnknownEntityError,
)
from run_lifecycle.models.outcome import SKIPPED_OUTCOMES, OutcomeStatus, TestOutcome
from run_lifecycle.models.record import FixtureRecord, ScopeRecord, TestRecord
from run_lifecycle.models.result import (
    Attachment,
    AttachmentOptions,
    FixtureKind,
    FixtureResult,
    Label,
    LabelName,
    Parameter,
    Status,
    StatusDetails,
    StepResult,
    TestResult,
    TestScope,
    now,
    status_details_from,
    status_from,
)
from run_lifecycle.state import LifecycleState
from run_lifecycle.writers.base import AttachmentContent, ResultsWriter

log = logging.getLogger(__name__)

PENDING_DEFAULT_MESSAGE = "Suite disabled"
INTERRUPTED_STEP_MESSAGE = "Timeout"
TEST_WRAPPER_NAME = "Test wrapper"

SUITE_LABELS = (LabelName.PARENT_SUITE, LabelName.SUITE, LabelName.SUB_SUITE)

OUTCOME_TO_STATUS: Mapping[OutcomeStatus, Status] = {
    "passed": "passed",
    "failed": "failed",
    "broken": "broken",
    "pending": "skipped",
    "disabled": "skipped",
    "excluded": "skipped",
}


class ContextKind(StrEnum):
    """Kind of execution unit new steps and attachments go to."""

    NONE = "none"
    TEST = "test"
    FIXTURE = "fixture"
    STEP = "step"


@dataclass(frozen=True, kw_only=True)
class CurrentUnit:
    """The execution unit currently receiving steps and attachments."""

    kind: ContextKind
    uuid: str | None = None


@dataclass(frozen=True, kw_only=True)
class StepHandle:
    """Handle returned by start_step, required to close the step."""

    uuid: str
    name: str


@dataclass(frozen=True, kw_only=True)
class _OpenGroup:
    uuid: str
    name: str
    wrapper: bool = False
    labels: list[Label] = field(default_factory=list)


@dataclass(frozen=True, kw_only=True)
class _OpenStep:
    uuid: str
    # Test or fixture the step stack was rooted in when this step started
    owner: str


def new_uuid() -> str:
    """Generate an identifier for a new entity."""
    return str(uuid.uuid4())


def history_id(full_name: str) -> str:
    """Stable identifier correlating the same test across runs."""
    return hashlib.md5(full_name.encode("utf-8")).hexdigest()


@dataclass(kw_only=True)
class LifecycleRuntime:
    """Tracks groups, tests, steps and fixtures of one logical thread.

    The runtime keeps a stack of open groups (suites plus one synthetic
    wrapper per test hosting that test's own hooks), a stack of open steps,
    at most one active test and at most one active fixture. Finished units are
    turned into immutable records, handed to the writer and evicted.

    A runtime instance is not thread safe; concurrent lanes each need their
    own instance.
    """

    writer: ResultsWriter
    state: LifecycleState = field(default_factory=LifecycleState)
    _groups: list[_OpenGroup] = field(default_factory=list, init=False, repr=False)
    _steps: list[_OpenStep] = field(default_factory=list, init=False, repr=False)
    _test_uuid: str | None = field(default=None, init=False)
    _test_wrapper_uuid: str | None = field(default=None, init=False, repr=False)
    _fixture_uuid: str | None = field(default=None, init=False)

    # Groups

    @property
    def current_group(self) -> TestScope:
        """Innermost open scope."""
        return self._scope(self._innermost_group().uuid)

    @property
    def open_group_count(self) -> int:
        """Number of groups currently open, test wrappers included."""
        return len(self._groups)

    def start_group(self, name: str) -> str:
        """Open a scope nested in the innermost open group (or a root scope)."""
        scope_uuid = self._push_group(name)
        log.debug("Started group %r (%s)", name, scope_uuid)
        return scope_uuid

    def end_group(self) -> None:
        """Close the innermost suite group.

        Test wrappers left open above it by a test that never stopped are
        closed first; the test itself stays active and the anomaly is logged.
        """
        self._innermost_group()
        if self._test_uuid is not None:
            log.error("Group ended while test %s is still running", self._test_uuid)
        while self._groups[-1].wrapper and len(self._groups) > 1:
            self._pop_group()
        self._pop_group()

    def add_label(self, name: str, value: str) -> None:
        """Buffer a label for every test later started in the innermost suite.

        Does nothing when no group is open.
        """
        for group in reversed(self._groups):
            if not group.wrapper:
                group.labels.append(Label(name=name, value=value))
                return

    # Tests

    @property
    def has_active_test(self) -> bool:
        """Whether a test is running."""
        return self._test_uuid is not None

    @property
    def current_test(self) -> TestResult:
        """The running test."""
        if self._test_uuid is None:
            raise NoActiveTestError()
        return self._live_test(self._test_uuid)

    def start_test(self, name: str, full_name: str | None = None) -> str:
        """Start a test inside the innermost open group.

        A synthetic wrapper group is opened first so that hooks scoped to this
        test attach to it. The test receives suite labels for the open suites
        followed by every label buffered across the group stack, outermost
        first.

        Raises:
            TestAlreadyRunningError: If another test is active
            NoActiveGroupError: If no group is open

        """
        if self._test_uuid is not None:
            raise TestAlreadyRunningError(self._test_uuid)
        self._innermost_group()

        suites = [group.name for group in self._groups if not group.wrapper]
        wrapper_uuid = self._push_group(TEST_WRAPPER_NAME, wrapper=True)

        test = TestResult(
            uuid=new_uuid(),
            name=name,
            full_name=full_name,
            history_id=history_id(full_name or name),
            stage="running",
            start=now(),
        )
        for label_name, suite in zip(SUITE_LABELS, suites, strict=False):
            test.labels.append(Label(name=label_name, value=suite))
        for group in self._groups:
            test.labels.extend(group.labels)

        self.state.set_test_result(test)
        self._scope(wrapper_uuid).tests.append(test.uuid)
        self._test_uuid = test.uuid
        self._test_wrapper_uuid = wrapper_uuid

        log.debug("Started test %r (%s)", name, test.uuid)
        return test.uuid

    def stop_test(self, outcome: TestOutcome) -> TestRecord:
        """Finalize the running test, write it and close its wrapper group.

        Steps still open are interrupted first (innermost first).

        Raises:
            NoActiveTestError: If no test is running

        """
        test = self.current_test
        self._interrupt_steps(owner=None, unit=f"test {test.name!r}")

        test.status = OUTCOME_TO_STATUS[outcome.status]
        if outcome.status in SKIPPED_OUTCOMES:
            test.stage = "pending"
            test.status_details = StatusDetails(
                message=outcome.pending_reason or PENDING_DEFAULT_MESSAGE
            )
        else:
            test.stage = "finished"

        if (failure := outcome.failure_detail()) is not None:
            test.status_details = StatusDetails(
                message=failure.message, trace=failure.stack
            )
        test.stop = now()

        record = TestRecord.model_validate(test)
        self.writer.write_result(record)
        self.state.delete_test_result(test.uuid)
        self._test_uuid = None
        log.debug("Stopped test %r: %s/%s", test.name, test.status, test.stage)

        if self._groups and self._groups[-1].uuid == self._test_wrapper_uuid:
            self._pop_group()
        self._test_wrapper_uuid = None
        return record

    def add_test_label(self, name: str, value: str) -> None:
        """Add a label directly to the running test."""
        self.current_test.labels.append(Label(name=name, value=value))

    # Current execution unit

    def current_unit(self) -> CurrentUnit:
        """Resolve where steps and attachments go right now.

        The innermost open step, else the active fixture, else the active test.
        """
        if self._steps:
            return CurrentUnit(kind=ContextKind.STEP, uuid=self._steps[-1].uuid)
        if self._fixture_uuid is not None:
            return CurrentUnit(kind=ContextKind.FIXTURE, uuid=self._fixture_uuid)
        if self._test_uuid is not None:
            return CurrentUnit(kind=ContextKind.TEST, uuid=self._test_uuid)
        return CurrentUnit(kind=ContextKind.NONE)

    def current_item(self) -> TestResult | FixtureResult | StepResult:
        """Live entity of the current execution unit."""
        unit = self.current_unit()
        if unit.uuid is None:
            raise NoActiveUnitError()
        if (item := self.state.get_execution_item(unit.uuid)) is None:
            raise UnknownEntityError(unit.kind, unit.uuid)
        return item

    def add_parameter(
        self,
        name: str,
        value: object,
        *,
        mode: Literal["default", "masked", "hidden"] | None = None,
        excluded: bool = False,
        step: StepHandle | None = None,
    ) -> None:
        """Add a parameter to the given step or else the current unit."""
        item = self._live_step(step) if step is not None else self.current_item()
        item.parameters.append(
            Parameter(name=name, value=str(value), mode=mode, excluded=excluded)
        )

    def add_attachment(
        self,
        name: str,
        source: str,
        options: str | AttachmentOptions,
        *,
        to_test: bool = False,
    ) -> None:
        """Reference a written attachment from the current unit or the test."""
        item = self.current_test if to_test else self.current_item()
        content_type = AttachmentOptions.coerce(options).content_type
        item.attachments.append(
            Attachment(name=name, type=content_type, source=source)
        )

    def write_attachment(
        self,
        content: AttachmentContent,
        options: str | AttachmentOptions,
    ) -> str:
        """Persist an attachment blob and return its file reference."""
        return self.writer.write_attachment(content, options)

    # Steps

    def start_step(self, name: str) -> StepHandle:
        """Open a step as a child of the current execution unit.

        Raises:
            NoActiveUnitError: If no step, fixture or test is running

        """
        parent = self.current_item()
        owner = self._steps[-1].owner if self._steps else parent.uuid

        step = StepResult(uuid=new_uuid(), name=name, stage="running", start=now())
        parent.steps.append(step)
        self.state.set_step_result(step)
        self._steps.append(_OpenStep(uuid=step.uuid, owner=owner))

        log.debug("Started step %r (%s)", name, step.uuid)
        return StepHandle(uuid=step.uuid, name=name)

    def end_step(
        self,
        handle: StepHandle,
        status: Status | None = None,
        error: BaseException | None = None,
    ) -> None:
        """Close the innermost open step.

        An error marks the step failed. Otherwise the status is the one given,
        else whatever was set while the step ran, else passed.

        Raises:
            StepOrderError: If the handle is not the innermost open step

        """
        innermost = self._steps[-1].uuid if self._steps else None
        if innermost != handle.uuid:
            raise StepOrderError(handle.uuid, innermost)

        step = self._live_step(handle)
        self._steps.pop()

        if error is not None:
            step.status = "failed"
            step.status_details = status_details_from(error)
        elif status is not None:
            step.status = status
        elif step.status is None:
            step.status = "passed"
        step.stage = "finished"
        step.stop = now()
        self.state.delete_step_result(step.uuid)

        log.debug("Stopped step %r: %s", step.name, step.status)

    def interrupt_steps_above(self, handle: StepHandle) -> None:
        """Interrupt steps opened inside handle's step that are still open.

        Does nothing when handle is not an open step.
        """
        if all(open_step.uuid != handle.uuid for open_step in self._steps):
            return
        interrupted: list[_OpenStep] = []
        while self._steps[-1].uuid != handle.uuid:
            interrupted.append(self._steps.pop())
        self._mark_interrupted(interrupted, unit=f"step {handle.name!r}")

    def update_step(
        self,
        handle: StepHandle,
        *,
        name: str | None = None,
        status: Status | None = None,
    ) -> None:
        """Change the name or status of an open step."""
        step = self._live_step(handle)
        if name is not None:
            step.name = name
        if status is not None:
            step.status = status

    # Fixtures

    @property
    def active_fixture(self) -> str | None:
        """Id of the fixture currently running, if any."""
        return self._fixture_uuid

    def add_before(self, name: str | None = None) -> str:
        """Start a setup fixture in the innermost group and make it active."""
        return self._start_fixture("before", name)

    def add_after(self, name: str | None = None) -> str:
        """Start a teardown fixture in the innermost group and make it active."""
        return self._start_fixture("after", name)

    def stop_fixture(
        self, fixture_uuid: str, error: BaseException | None = None
    ) -> FixtureRecord:
        """Finalize a fixture, write it and clear the active fixture.

        Steps the fixture left open are interrupted first.
        """
        fixture = self.state.get_fixture(fixture_uuid)
        if fixture is None:
            raise UnknownEntityError("fixture", fixture_uuid)

        self._interrupt_steps(owner=fixture_uuid, unit=f"fixture {fixture.name!r}")

        if error is None:
            fixture.status = "passed"
            fixture.stage = "finished"
        else:
            fixture.status = status_from(error)
            fixture.stage = "interrupted"
            fixture.status_details = status_details_from(error)
        fixture.stop = now()

        record = FixtureRecord.model_validate(fixture)
        self.writer.write_result(record)
        self.state.delete_fixture_result(fixture_uuid)
        if self._fixture_uuid == fixture_uuid:
            self._fixture_uuid = None

        log.debug("Stopped fixture %r: %s", fixture.name, fixture.status)
        return record

    def _start_fixture(self, kind: FixtureKind, name: str | None) -> str:
        group = self._innermost_group()
        if self._fixture_uuid is not None:
            log.warning(
                "Fixture %s started while fixture %s is still active",
                kind,
                self._fixture_uuid,
            )

        fixture = FixtureResult(
            uuid=new_uuid(),
            name=name or kind,
            scope=group.uuid,
            kind=kind,
            stage="running",
            start=now(),
        )
        self.state.set_fixture_result(fixture)
        self._scope(group.uuid).fixtures.append(fixture.uuid)
        self._fixture_uuid = fixture.uuid

        log.debug("Started %s fixture %r (%s)", kind, fixture.name, fixture.uuid)
        return fixture.uuid

    # Internals

    def _interrupt_steps(self, owner: str | None, unit: str) -> None:
        """Force-close open steps rooted in owner (all of them when None)."""
        interrupted: list[_OpenStep] = []
        while self._steps and (owner is None or self._steps[-1].owner == owner):
            interrupted.append(self._steps.pop())
        self._mark_interrupted(interrupted, unit)

    def _mark_interrupted(self, interrupted: list[_OpenStep], unit: str) -> None:
        """Finalize popped steps as broken, in the order given (innermost first)."""
        if not interrupted:
            return

        log.warning(
            "Step stack is not empty when %s ended; interrupting %d step(s)",
            unit,
            len(interrupted),
        )
        for open_step in interrupted:
            step = self.state.get_step(open_step.uuid)
            if step is None:
                continue
            step.status = "broken"
            step.stage = "interrupted"
            step.status_details = StatusDetails(message=INTERRUPTED_STEP_MESSAGE)
            step.stop = now()
            self.state.delete_step_result(open_step.uuid)
            log.debug("Interrupted step %r (%s)", step.name, step.uuid)

    def _innermost_group(self) -> _OpenGroup:
        if not self._groups:
            raise NoActiveGroupError()
        return self._groups[-1]

    def _push_group(self, name: str, *, wrapper: bool = False) -> str:
        scope = self.state.set_scope(TestScope(uuid=new_uuid(), name=name, start=now()))
        if self._groups:
            self._scope(self._groups[-1].uuid).sub_scopes.append(scope.uuid)
        self._groups.append(_OpenGroup(uuid=scope.uuid, name=name, wrapper=wrapper))
        return scope.uuid

    def _pop_group(self) -> None:
        group = self._groups.pop()
        scope = self._scope(group.uuid)
        scope.stop = now()
        self.writer.write_group(ScopeRecord.model_validate(scope))
        log.debug("Ended group %r (%s)", group.name, group.uuid)

    def _scope(self, scope_uuid: str) -> TestScope:
        if (scope := self.state.get_scope(scope_uuid)) is None:
            raise UnknownEntityError("scope", scope_uuid)
        return scope

    def _live_test(self, test_uuid: str) -> TestResult:
        if (test := self.state.get_test(test_uuid)) is None:
            raise UnknownEntityError("test", test_uuid)
        return test

    def _live_step(self, handle: StepHandle) -> StepResult:
        if (step := self.state.get_step(handle.uuid)) is None:
            raise UnknownEntityError("step", handle.uuid)
        return step
