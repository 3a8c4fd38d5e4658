"""Models describing how a test ended, as reported by the host framework."""

from collections.abc import Sequence
from typing import Literal

from pydantic import Field

from run_lifecycle.models.base import Model

type OutcomeStatus = Literal[
    "passed", "failed", "broken", "pending", "disabled", "excluded"
]

SKIPPED_OUTCOMES: frozenset[OutcomeStatus] = frozenset(
    {"pending", "disabled", "excluded"}
)


class FailedExpectation(Model):
    """A single failure recorded by the host framework for a test."""

    message: str
    stack: str | None = None
    matcher_name: str = Field(
        default="",
        description="Matcher that produced the failure; empty for raised errors",
    )

    @property
    def is_thrown_error(self) -> bool:
        """Whether this failure comes from an exception rather than a matcher."""
        return self.matcher_name == ""


class TestOutcome(Model):
    """Outcome passed to stop_test."""

    __test__ = False

    status: OutcomeStatus
    pending_reason: str | None = None
    failed_expectations: Sequence[FailedExpectation] = ()

    def failure_detail(self) -> FailedExpectation | None:
        """Pick the failure that describes the test.

        The first failure raised as an error wins; otherwise the first failure
        recorded; None when nothing failed.
        """
        for expectation in self.failed_expectations:
            if expectation.is_thrown_error:
                return expectation
        if self.failed_expectations:
            return self.failed_expectations[0]
        return None
