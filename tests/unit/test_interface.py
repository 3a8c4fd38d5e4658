"""Tests for the fluent interface used by test code."""

import asyncio

import pytest

from run_lifecycle.interface import LifecycleInterface, StepContext
from run_lifecycle.models.outcome import TestOutcome
from run_lifecycle.models.result import Label, Parameter
from run_lifecycle.runtime import LifecycleRuntime
from run_lifecycle.writers.memory import InMemoryWriter

PASSED = TestOutcome(status="passed")


@pytest.fixture
def interface(runtime: LifecycleRuntime) -> LifecycleInterface:
    """Interface bound to a runtime with an open suite."""
    runtime.start_group("suite")
    return LifecycleInterface(runtime=runtime)


class TestLabels:
    """Tests for label routing."""

    def test_label_goes_to_running_test(self, interface: LifecycleInterface) -> None:
        """Labels added during a test are attached to it directly."""
        interface.runtime.start_test("test")

        interface.owner("alice")
        interface.severity("critical")

        labels = interface.runtime.current_test.labels
        assert Label(name="owner", value="alice") in labels
        assert Label(name="severity", value="critical") in labels

    def test_label_outside_test_is_buffered(
        self, interface: LifecycleInterface, writer: InMemoryWriter
    ) -> None:
        """Labels added in suite code reach the tests started afterwards."""
        interface.epic("checkout")
        interface.feature("payments")

        interface.runtime.start_test("test")
        record = interface.runtime.stop_test(PASSED)

        assert Label(name="epic", value="checkout") in record.labels
        assert Label(name="feature", value="payments") in record.labels

    def test_shortcuts_use_well_known_names(
        self, interface: LifecycleInterface
    ) -> None:
        """Every shortcut maps to its label name."""
        interface.runtime.start_test("test")

        interface.tag("smoke")
        interface.story("refund")
        interface.label("layer", "api")

        assert interface.runtime.current_test.labels[-3:] == [
            Label(name="tag", value="smoke"),
            Label(name="story", value="refund"),
            Label(name="layer", value="api"),
        ]


class TestSteps:
    """Tests for step, log_step and the step context."""

    def test_sync_step_returns_body_value(
        self, interface: LifecycleInterface
    ) -> None:
        """A synchronous body runs inside a passed step."""
        interface.runtime.start_test("test")

        result = interface.step("compute", lambda _: 42)

        assert result == 42
        step = interface.runtime.current_test.steps[0]
        assert step.name == "compute"
        assert step.status == "passed"
        assert step.stage == "finished"

    def test_failing_step_is_reraised(self, interface: LifecycleInterface) -> None:
        """A raising body fails the step and the error propagates."""
        interface.runtime.start_test("test")

        def body(_: StepContext) -> None:
            raise KeyError("missing")

        with pytest.raises(KeyError):
            interface.step("lookup", body)

        step = interface.runtime.current_test.steps[0]
        assert step.status == "failed"
        assert interface.runtime.current_unit().uuid == (
            interface.runtime.current_test.uuid
        )

    def test_failure_survives_steps_left_open(
        self, interface: LifecycleInterface
    ) -> None:
        """The body's error propagates even when it left inner steps open."""
        runtime = interface.runtime
        runtime.start_test("test")

        def body(_: StepContext) -> None:
            runtime.start_step("never closed")
            raise ValueError("broken body")

        with pytest.raises(ValueError, match="broken body"):
            interface.step("outer", body)

        outer = runtime.current_test.steps[0]
        assert outer.status == "failed"
        assert outer.status_details.message == "broken body"
        assert outer.steps[0].stage == "interrupted"
        assert runtime.current_unit().uuid == runtime.current_test.uuid

    async def test_async_failure_survives_steps_left_open(
        self, interface: LifecycleInterface
    ) -> None:
        """Awaited failures also close inner steps before the outer one."""
        runtime = interface.runtime
        runtime.start_test("test")

        async def body(_: StepContext) -> None:
            runtime.start_step("never closed")
            await asyncio.sleep(0)
            raise ValueError("broken body")

        with pytest.raises(ValueError, match="broken body"):
            await interface.step("outer", body)

        outer = runtime.current_test.steps[0]
        assert outer.status == "failed"
        assert outer.steps[0].status == "broken"

    def test_context_describes_step(self, interface: LifecycleInterface) -> None:
        """The context sets parameters, status and name of its own step."""
        interface.runtime.start_test("test")

        def body(ctx: StepContext) -> None:
            ctx.parameter("user", "bob")
            ctx.parameter("password", "secret", mode="masked")
            ctx.set_status("skipped")
            ctx.rename("login as bob")

        interface.step("login", body)

        step = interface.runtime.current_test.steps[0]
        assert step.name == "login as bob"
        assert step.status == "skipped"
        assert step.parameters == [
            Parameter(name="user", value="bob"),
            Parameter(name="password", value="secret", mode="masked"),
        ]

    def test_nested_steps(self, interface: LifecycleInterface) -> None:
        """Steps started from a context are nested in it."""
        interface.runtime.start_test("test")

        def outer(ctx: StepContext) -> str:
            return ctx.step("inner", lambda _: "done")

        assert interface.step("outer", outer) == "done"

        step = interface.runtime.current_test.steps[0]
        assert [child.name for child in step.steps] == ["inner"]

    async def test_async_step_stays_open_until_settled(
        self, interface: LifecycleInterface
    ) -> None:
        """An awaitable body keeps the step open until it completes."""
        interface.runtime.start_test("test")

        async def body(_: StepContext) -> int:
            await asyncio.sleep(0)
            return 7

        pending = interface.step("wait", body)
        step = interface.runtime.current_test.steps[0]
        assert step.stage == "running"

        assert await pending == 7
        assert step.status == "passed"
        assert step.stage == "finished"

    async def test_async_step_failure_is_reraised(
        self, interface: LifecycleInterface
    ) -> None:
        """A failing awaitable fails the step and raises on await."""
        interface.runtime.start_test("test")

        async def body(_: StepContext) -> None:
            await asyncio.sleep(0)
            raise TimeoutError("slow")

        with pytest.raises(TimeoutError):
            await interface.step("wait", body)

        step = interface.runtime.current_test.steps[0]
        assert step.status == "failed"
        assert step.status_details.message == "slow"

    def test_log_step(self, interface: LifecycleInterface) -> None:
        """log_step records a finished step in one call."""
        interface.runtime.start_test("test")

        interface.log_step("cache warmed")
        interface.log_step("retry skipped", status="skipped")

        steps = interface.runtime.current_test.steps
        assert [(step.name, step.status) for step in steps] == [
            ("cache warmed", "passed"),
            ("retry skipped", "skipped"),
        ]


class TestAttachments:
    """Tests for attachment and test_attachment."""

    def test_attachment_goes_to_current_step(
        self, interface: LifecycleInterface, writer: InMemoryWriter
    ) -> None:
        """attachment targets the innermost step, test_attachment the test."""
        interface.runtime.start_test("test")

        def body(_: StepContext) -> None:
            interface.attachment("response", b'{"ok": true}', "application/json")
            interface.test_attachment("log", "all good", "text/plain")

        interface.step("call api", body)

        test = interface.runtime.current_test
        step_attachment = test.steps[0].attachments[0]
        test_attachment = test.attachments[0]
        assert step_attachment.name == "response"
        assert step_attachment.type == "application/json"
        assert step_attachment.source.endswith("-attachment.json")
        assert test_attachment.name == "log"
        assert test_attachment.source.endswith("-attachment.txt")
        assert writer.attachments[step_attachment.source] == b'{"ok": true}'
        assert writer.attachments[test_attachment.source] == b"all good"
