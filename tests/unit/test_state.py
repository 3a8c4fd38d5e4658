"""Tests for the lifecycle state store."""

from run_lifecycle.models.result import (
    FixtureResult,
    StepResult,
    TestResult,
    TestScope,
)
from run_lifecycle.state import LifecycleState


def test_get_returns_none_for_absent_ids() -> None:
    """Absent ids resolve to None rather than raising."""
    state = LifecycleState()

    assert state.get_scope("missing") is None
    assert state.get_test("missing") is None
    assert state.get_step("missing") is None
    assert state.get_fixture("missing") is None
    assert state.get_execution_item("missing") is None


def test_put_get_delete_per_kind() -> None:
    """Each entity kind is stored and evicted independently."""
    state = LifecycleState()
    scope = state.set_scope(TestScope(uuid="scope", name="suite"))
    state.set_test_result(TestResult(uuid="test", name="test"))
    state.set_step_result(StepResult(uuid="step", name="step"))
    state.set_fixture_result(
        FixtureResult(uuid="fixture", name="setup", scope="scope", kind="before")
    )

    assert state.get_scope("scope") is scope
    assert state.get_test("test") is not None
    assert state.get_step("step") is not None
    assert state.get_fixture("fixture") is not None

    state.delete_test_result("test")
    state.delete_step_result("step")
    state.delete_fixture_result("fixture")
    state.delete_scope("scope")

    assert state.get_test("test") is None
    assert state.get_step("step") is None
    assert state.get_fixture("fixture") is None
    assert state.get_scope("scope") is None


def test_delete_absent_id_is_noop() -> None:
    """Deleting an unknown id does not raise."""
    state = LifecycleState()

    state.delete_test_result("missing")
    state.delete_scope("missing")


def test_execution_item_resolves_each_kind() -> None:
    """Fixtures, tests and steps are all reachable as execution items."""
    state = LifecycleState()
    test = TestResult(uuid="test", name="test")
    step = StepResult(uuid="step", name="step")
    fixture = FixtureResult(uuid="fixture", name="setup", scope="s", kind="after")
    state.set_test_result(test)
    state.set_step_result(step)
    state.set_fixture_result(fixture)

    assert state.get_execution_item("test") is test
    assert state.get_execution_item("step") is step
    assert state.get_execution_item("fixture") is fixture


def test_execution_item_prefers_fixture_then_test() -> None:
    """Resolution order is fixture, then test, then step."""
    state = LifecycleState()
    test = TestResult(uuid="same", name="test")
    step = StepResult(uuid="same", name="step")
    fixture = FixtureResult(uuid="same", name="setup", scope="s", kind="before")
    state.set_step_result(step)
    state.set_test_result(test)

    assert state.get_execution_item("same") is test

    state.set_fixture_result(fixture)

    assert state.get_execution_item("same") is fixture
