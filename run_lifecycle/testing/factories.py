"""Test factories for generating test data."""

from polyfactory import Use
from polyfactory.factories.pydantic_factory import ModelFactory

from run_lifecycle.models.outcome import FailedExpectation, TestOutcome
from run_lifecycle.reporter import SpecEvent, SuiteEvent


class FailedExpectationFactory(ModelFactory[FailedExpectation]):
    """Factory for FailedExpectation."""

    stack = None


class TestOutcomeFactory(ModelFactory[TestOutcome]):
    """Factory for TestOutcome."""

    __test__ = False

    status = "passed"
    pending_reason = None
    failed_expectations = Use(list[FailedExpectation])


class SuiteEventFactory(ModelFactory[SuiteEvent]):
    """Factory for SuiteEvent."""


class SpecEventFactory(ModelFactory[SpecEvent]):
    """Factory for SpecEvent."""

    status = None
    pending_reason = None
    failed_expectations = Use(list[FailedExpectation])
