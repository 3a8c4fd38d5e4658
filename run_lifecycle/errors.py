"""Exceptions raised by the lifecycle runtime."""


class LifecycleError(Exception):
    """Base class for all lifecycle errors."""


class ProtocolViolationError(LifecycleError):
    """Raised when an adapter calls the runtime out of protocol."""


class NoActiveGroupError(ProtocolViolationError):
    """Raised when an operation needs an open group and none is open."""

    def __init__(self) -> None:
        super().__init__("No active group")


class NoActiveTestError(ProtocolViolationError):
    """Raised when an operation needs a running test and none is running."""

    def __init__(self) -> None:
        super().__init__("No active test")


class NoActiveUnitError(ProtocolViolationError):
    """Raised when no step, fixture or test is available to attach to."""

    def __init__(self) -> None:
        super().__init__("No active unit")


class TestAlreadyRunningError(ProtocolViolationError):
    """Raised when a test is started while another one is still running."""

    __test__ = False

    def __init__(self, running: str) -> None:
        super().__init__(f"Test already running: {running}")
        self.running = running


class StepOrderError(ProtocolViolationError):
    """Raised when a step other than the innermost open one is closed."""

    def __init__(self, step_uuid: str, innermost: str | None) -> None:
        super().__init__(
            f"Step {step_uuid} is not the innermost open step (innermost: {innermost})"
        )
        self.step_uuid = step_uuid
        self.innermost = innermost


class UnknownEntityError(ProtocolViolationError):
    """Raised when an id does not resolve to a live entity."""

    def __init__(self, kind: str, uuid: str) -> None:
        super().__init__(f"Unknown {kind}: {uuid}")
        self.kind = kind
        self.uuid = uuid


class WriterNotFoundError(LifecycleError):
    """Raised when a writer is not found."""
