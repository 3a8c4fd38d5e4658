"""Fluent interface exposed to user test code while tests run."""

import inspect
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Literal, cast

from run_lifecycle.models.result import AttachmentOptions, LabelName, Status
from run_lifecycle.runtime import LifecycleRuntime, StepHandle
from run_lifecycle.writers.base import AttachmentContent


@dataclass(frozen=True, kw_only=True)
class StepContext:
    """Handle given to a step body to describe the running step."""

    interface: "LifecycleInterface"
    handle: StepHandle

    def parameter(
        self,
        name: str,
        value: object,
        mode: Literal["default", "masked", "hidden"] | None = None,
        excluded: bool = False,
    ) -> None:
        """Add a parameter to this step."""
        self.interface.runtime.add_parameter(
            name, value, mode=mode, excluded=excluded, step=self.handle
        )

    def set_status(self, status: Status) -> None:
        """Set the status the step ends with unless it fails."""
        self.interface.runtime.update_step(self.handle, status=status)

    def rename(self, name: str) -> None:
        """Change the step name."""
        self.interface.runtime.update_step(self.handle, name=name)

    def step[T](self, name: str, body: Callable[["StepContext"], T]) -> T:
        """Run a nested step."""
        return self.interface.step(name, body)


@dataclass(frozen=True, kw_only=True)
class LifecycleInterface:
    """Labels, steps and attachments for the currently running test."""

    runtime: LifecycleRuntime

    def label(self, name: str, value: str) -> None:
        """Label the running test, or buffer the label for the current suite."""
        if self.runtime.has_active_test:
            self.runtime.add_test_label(name, value)
        else:
            self.runtime.add_label(name, value)

    def owner(self, value: str) -> None:
        """Set the owner label."""
        self.label(LabelName.OWNER, value)

    def severity(self, value: str) -> None:
        """Set the severity label."""
        self.label(LabelName.SEVERITY, value)

    def tag(self, value: str) -> None:
        """Add a tag label."""
        self.label(LabelName.TAG, value)

    def epic(self, value: str) -> None:
        """Set the epic label."""
        self.label(LabelName.EPIC, value)

    def feature(self, value: str) -> None:
        """Set the feature label."""
        self.label(LabelName.FEATURE, value)

    def story(self, value: str) -> None:
        """Set the story label."""
        self.label(LabelName.STORY, value)

    def parameter(
        self,
        name: str,
        value: object,
        mode: Literal["default", "masked", "hidden"] | None = None,
        excluded: bool = False,
    ) -> None:
        """Add a parameter to the current execution unit."""
        self.runtime.add_parameter(name, value, mode=mode, excluded=excluded)

    def step[T](self, name: str, body: Callable[[StepContext], T]) -> T:
        """Run body inside a new step.

        A synchronous error fails the step and is re-raised. When body returns
        an awaitable, an awaitable is returned that keeps the step open until
        it settles; a failure fails the step and is re-raised on await.
        """
        handle = self.runtime.start_step(name)
        try:
            result = body(StepContext(interface=self, handle=handle))
        except Exception as error:
            self.runtime.interrupt_steps_above(handle)
            self.runtime.end_step(handle, error=error)
            raise

        if inspect.isawaitable(result):
            return cast(T, self._settle_step(handle, result))

        self.runtime.end_step(handle)
        return result

    def log_step(self, name: str, status: Status | None = None) -> None:
        """Record an already finished step."""
        handle = self.runtime.start_step(name)
        self.runtime.end_step(handle, status=status)

    def attachment(
        self,
        name: str,
        content: AttachmentContent,
        options: str | AttachmentOptions,
    ) -> None:
        """Attach content to the current execution unit."""
        source = self.runtime.write_attachment(content, options)
        self.runtime.add_attachment(name, source, options)

    def test_attachment(
        self,
        name: str,
        content: AttachmentContent,
        options: str | AttachmentOptions,
    ) -> None:
        """Attach content to the running test, whatever step is open."""
        source = self.runtime.write_attachment(content, options)
        self.runtime.add_attachment(name, source, options, to_test=True)

    async def _settle_step(self, handle: StepHandle, pending: Awaitable[Any]) -> Any:
        try:
            value = await pending
        except Exception as error:
            self.runtime.interrupt_steps_above(handle)
            self.runtime.end_step(handle, error=error)
            raise
        self.runtime.end_step(handle)
        return value
