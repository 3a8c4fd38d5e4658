"""Hook wrapping that records setup and teardown hooks as fixtures.

The host framework hands the adapter a ``HostHooks`` capability: one
registration function per hook kind. ``wrap_hooks`` decorates those functions
so that every registered action runs as the runtime's active fixture, whether
it completes synchronously, through a ``done`` callback, or by returning an
awaitable.
"""

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Protocol

from run_lifecycle.models.result import FixtureKind
from run_lifecycle.runtime import LifecycleRuntime

log = logging.getLogger(__name__)

_POSITIONAL = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
)


class Done(Protocol):
    """Completion callback the host passes to a hook."""

    def __call__(self) -> None:
        """Signal that the hook completed."""

    def fail(self, error: BaseException) -> None:
        """Signal that the hook failed."""


type HostHook = Callable[[Done], Awaitable[None] | None]
type HookRegistrar = Callable[[HostHook, float | None], None]
type HookAction = Callable[..., Any]


@dataclass(frozen=True, kw_only=True)
class HostHooks:
    """Hook registration functions provided by the host framework.

    A host hook receives a ``Done`` callback. When it returns an awaitable the
    host must await it; completion is always signalled through ``Done``.
    """

    before_all: HookRegistrar
    after_all: HookRegistrar
    before_each: HookRegistrar
    after_each: HookRegistrar


@dataclass(frozen=True, kw_only=True)
class HookWrapper:
    """Registers user actions with the host, running each as a fixture."""

    runtime: LifecycleRuntime
    register: HookRegistrar
    kind: FixtureKind

    def __call__(self, action: HookAction, timeout: float | None = None) -> None:
        def hook(done: Done) -> Awaitable[None] | None:
            return run_hook(self.runtime, self.kind, action, done)

        self.register(hook, timeout)


@dataclass(frozen=True, kw_only=True)
class WrappedHooks:
    """Hook registration functions to expose to user test code."""

    before_all: HookWrapper
    after_all: HookWrapper
    before_each: HookWrapper
    after_each: HookWrapper


def wrap_hooks(runtime: LifecycleRuntime, host: HostHooks) -> WrappedHooks:
    """Decorate the host's hook registration functions."""
    return WrappedHooks(
        before_all=HookWrapper(
            runtime=runtime, register=host.before_all, kind="before"
        ),
        after_all=HookWrapper(runtime=runtime, register=host.after_all, kind="after"),
        before_each=HookWrapper(
            runtime=runtime, register=host.before_each, kind="before"
        ),
        after_each=HookWrapper(
            runtime=runtime, register=host.after_each, kind="after"
        ),
    )


def run_hook(
    runtime: LifecycleRuntime,
    kind: FixtureKind,
    action: HookAction,
    done: Done,
) -> Awaitable[None] | None:
    """Run a hook action as the active fixture of the innermost group.

    Synchronous errors, interrupts included, stop the fixture and are
    re-raised to the host. When the action is deferred, an awaitable is
    returned instead; the fixture stays active until it settles, then
    ``done`` or ``done.fail`` is called.
    """
    name = hook_name(action)
    if kind == "before":
        fixture_uuid = runtime.add_before(name)
    else:
        fixture_uuid = runtime.add_after(name)

    try:
        result = _invoke(action)
    except BaseException as error:
        runtime.stop_fixture(fixture_uuid, error=error)
        raise

    if inspect.isawaitable(result):
        return _settle(runtime, fixture_uuid, result, done)

    runtime.stop_fixture(fixture_uuid)
    done()
    return None


def hook_name(action: HookAction) -> str | None:
    """Name of the hook function, if it has a meaningful one."""
    name = getattr(action, "__name__", None)
    if not isinstance(name, str) or name == "<lambda>":
        return None
    return name


def takes_done(action: HookAction) -> bool:
    """Whether the action expects a done callback as first argument."""
    try:
        signature = inspect.signature(action)
    except (TypeError, ValueError):
        return False
    return any(
        parameter.kind in _POSITIONAL and parameter.default is inspect.Parameter.empty
        for parameter in signature.parameters.values()
    )


@dataclass(frozen=True)
class _FutureDone:
    future: asyncio.Future[None]

    def __call__(self) -> None:
        if not self.future.done():
            self.future.set_result(None)

    def fail(self, error: BaseException) -> None:
        if not self.future.done():
            self.future.set_exception(error)


def _invoke(action: HookAction) -> object:
    if takes_done(action):
        return _wait_for_done(action)
    return action()


async def _wait_for_done(action: HookAction) -> None:
    future: asyncio.Future[None] = asyncio.get_running_loop().create_future()
    result = action(_FutureDone(future))
    if inspect.isawaitable(result):
        await result
    await future


async def _settle(
    runtime: LifecycleRuntime,
    fixture_uuid: str,
    pending: Awaitable[Any],
    done: Done,
) -> None:
    try:
        await pending
    except asyncio.CancelledError as error:
        runtime.stop_fixture(fixture_uuid, error=error)
        raise
    except Exception as error:
        log.debug("Hook fixture %s failed: %s", fixture_uuid, error)
        runtime.stop_fixture(fixture_uuid, error=error)
        done.fail(error)
        return
    runtime.stop_fixture(fixture_uuid)
    done()
