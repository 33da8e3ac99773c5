class QuizError(Exception):
    """Base exception for the quiz runner."""


class LoadFailure(QuizError):
    """Raised by a question source when questions cannot be fetched or parsed."""


class UnknownEvent(QuizError):
    """
    Raised when the state machine is handed something that is not a quiz event.
    Indicates a defect in the caller; never caught by the controller.
    """

    def __init__(self, event: object) -> None:
        super().__init__(f"Unknown event: {event!r}")
        self.event = event


class InvalidTransition(QuizError):
    """Raised in strict mode when an event has no effect in the current status."""

    def __init__(self, status: object, event: object) -> None:
        super().__init__(f"Event {type(event).__name__} is not valid in status {status}")
        self.status = status
        self.event = event


class StateInvariantError(QuizError):
    """Raised when a QuizState violates one of its invariants."""


class TimerAlreadyRunningError(QuizError):
    """Raised when a second countdown would be started for the same session."""


class ControllerClosedError(QuizError):
    """Raised when events are dispatched to a controller that was closed."""
