"""Reporter translating Jasmine-style framework events into lifecycle calls."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from pydantic import Field

from run_lifecycle.config import ReporterConfig, build_writer
from run_lifecycle.hooks import HostHooks, WrappedHooks, wrap_hooks
from run_lifecycle.interface import LifecycleInterface
from run_lifecycle.models.base import Model
from run_lifecycle.models.outcome import FailedExpectation, OutcomeStatus, TestOutcome
from run_lifecycle.models.record import TestRecord
from run_lifecycle.runtime import LifecycleRuntime

log = logging.getLogger(__name__)


class SuiteEvent(Model):
    """A suite (describe block) reported by the host framework."""

    description: str


class SpecEvent(Model):
    """A spec (test case) reported by the host framework."""

    description: str
    full_name: str
    status: OutcomeStatus | None = Field(
        default=None, description="Set once the spec is done"
    )
    pending_reason: str | None = None
    failed_expectations: Sequence[FailedExpectation] = ()

    def outcome(self) -> TestOutcome:
        """Outcome of a finished spec; a spec without status counts as broken."""
        return TestOutcome(
            status=self.status or "broken",
            pending_reason=self.pending_reason,
            failed_expectations=self.failed_expectations,
        )


@dataclass(kw_only=True)
class JasmineStyleReporter:
    """Drives a lifecycle runtime from suite/spec events.

    The host hands over its hook registration functions at construction; the
    wrapped versions in ``hooks`` are what user code should register hooks
    with so that they are recorded as fixtures.
    """

    runtime: LifecycleRuntime
    host_hooks: HostHooks
    hooks: WrappedHooks = field(init=False)

    def __post_init__(self) -> None:
        self.hooks = wrap_hooks(self.runtime, self.host_hooks)

    @classmethod
    def from_config(
        cls, config: ReporterConfig, host_hooks: HostHooks
    ) -> "JasmineStyleReporter":
        """Create a reporter with a fresh runtime and the configured writer."""
        return cls(
            runtime=LifecycleRuntime(writer=build_writer(config)),
            host_hooks=host_hooks,
        )

    def get_interface(self) -> LifecycleInterface:
        """Return the fluent interface for user test code."""
        return LifecycleInterface(runtime=self.runtime)

    def run_started(self) -> None:
        """Handle the start of the whole run."""
        log.debug("Run started")

    def suite_started(self, suite: SuiteEvent) -> None:
        """Open a group for the suite."""
        self.runtime.start_group(suite.description)

    def spec_started(self, spec: SpecEvent) -> None:
        """Start a test for the spec."""
        self.runtime.start_test(spec.description, spec.full_name)

    def spec_done(self, spec: SpecEvent) -> TestRecord:
        """Stop the running test with the spec outcome."""
        return self.runtime.stop_test(spec.outcome())

    def suite_done(self) -> None:
        """Close the group of the finished suite."""
        self.runtime.end_group()

    def run_done(self) -> None:
        """Handle the end of the whole run."""
        if self.runtime.open_group_count:
            log.warning(
                "Run ended with %d group(s) still open", self.runtime.open_group_count
            )
        log.debug("Run finished")
