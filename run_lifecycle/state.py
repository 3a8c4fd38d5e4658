"""Identity and state store for live execution units."""

from dataclasses import dataclass, field

from run_lifecycle.models.result import (
    FixtureResult,
    StepResult,
    TestResult,
    TestScope,
)


@dataclass(kw_only=True)
class LifecycleState:
    """Keyed store of scopes, tests, steps and fixtures.

    Lookups of absent ids return None; callers decide whether that is fatal.
    The store has no ordering semantics and no concurrency control.
    """

    scopes: dict[str, TestScope] = field(default_factory=dict)
    test_results: dict[str, TestResult] = field(default_factory=dict)
    step_results: dict[str, StepResult] = field(default_factory=dict)
    fixture_results: dict[str, FixtureResult] = field(default_factory=dict)

    def get_scope(self, uuid: str) -> TestScope | None:
        """Return the scope with the given id, if any."""
        return self.scopes.get(uuid)

    def get_test(self, uuid: str) -> TestResult | None:
        """Return the live test with the given id, if any."""
        return self.test_results.get(uuid)

    def get_step(self, uuid: str) -> StepResult | None:
        """Return the open step with the given id, if any."""
        return self.step_results.get(uuid)

    def get_fixture(self, uuid: str) -> FixtureResult | None:
        """Return the running fixture with the given id, if any."""
        return self.fixture_results.get(uuid)

    def get_execution_item(
        self, uuid: str
    ) -> FixtureResult | TestResult | StepResult | None:
        """Resolve an id across fixtures, then tests, then steps."""
        if (fixture := self.get_fixture(uuid)) is not None:
            return fixture
        if (test := self.get_test(uuid)) is not None:
            return test
        return self.get_step(uuid)

    def set_scope(self, scope: TestScope) -> TestScope:
        self.scopes[scope.uuid] = scope
        return scope

    def set_test_result(self, result: TestResult) -> None:
        self.test_results[result.uuid] = result

    def set_step_result(self, result: StepResult) -> None:
        self.step_results[result.uuid] = result

    def set_fixture_result(self, result: FixtureResult) -> None:
        self.fixture_results[result.uuid] = result

    def delete_scope(self, uuid: str) -> None:
        self.scopes.pop(uuid, None)

    def delete_test_result(self, uuid: str) -> None:
        self.test_results.pop(uuid, None)

    def delete_step_result(self, uuid: str) -> None:
        self.step_results.pop(uuid, None)

    def delete_fixture_result(self, uuid: str) -> None:
        self.fixture_results.pop(uuid, None)
