import logging
import sys
import time
import uuid
from collections.abc import Callable
from contextvars import ContextVar
from functools import wraps
from typing import Any, ParamSpec, TypeVar, cast

# --- Prometheus Imports ---
from prometheus_client import REGISTRY, Counter, Histogram

# --- Context for Correlation IDs ---
session_id_ctx: ContextVar[str] = ContextVar("session_id", default="system")

# --- Prometheus Metric Definitions ---
DURATION_METRIC_NAME = "quiz_method_duration_seconds"
EVENTS_METRIC_NAME = "quiz_events"

METHOD_DURATION: Histogram
EVENTS_TOTAL: Counter


def _registered(name: str) -> Any:
    # Module reloads (pytest, REPL) would otherwise fail on duplicate names.
    return REGISTRY._names_to_collectors[name]


try:
    METHOD_DURATION = Histogram(
        DURATION_METRIC_NAME, "Time spent in method", ["component", "method"]
    )
except ValueError:
    METHOD_DURATION = cast(Histogram, _registered(DURATION_METRIC_NAME))

try:
    EVENTS_TOTAL = Counter(
        EVENTS_METRIC_NAME, "Events dispatched to the quiz", ["event", "outcome"]
    )
except ValueError:
    EVENTS_TOTAL = cast(Counter, _registered(EVENTS_METRIC_NAME + "_total"))

# --- Type Definitions for Decorator ---
P = ParamSpec("P")
R = TypeVar("R")


def measure_time(metric_name: str) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """
    Decorator for timing methods + logging.
    Uses ParamSpec to preserve the signature of the decorated function.
    """

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        @wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            start = time.perf_counter()

            # Used on instance methods: args[0] is 'self'.
            self_obj: Any = args[0] if args else None

            component = self_obj.__class__.__name__ if self_obj else "Unknown"
            method = func.__name__

            try:
                result = func(*args, **kwargs)
            except Exception as e:
                duration = time.perf_counter() - start
                METHOD_DURATION.labels(component=component, method=method).observe(
                    duration
                )

                telemetry = getattr(self_obj, "telemetry", None)
                if telemetry:
                    telemetry.log_error(
                        f"💥 Failed: {metric_name}",
                        e,
                        duration_ms=round(duration * 1000, 2),
                    )
                raise

            duration = time.perf_counter() - start
            METHOD_DURATION.labels(component=component, method=method).observe(
                duration
            )

            telemetry = getattr(self_obj, "telemetry", None)
            if telemetry:
                telemetry.log_debug(
                    f"⏱️ {metric_name}", duration_ms=round(duration * 1000, 2)
                )

            return result

        return wrapper

    return decorator


def count_event(event: str, outcome: str) -> None:
    EVENTS_TOTAL.labels(event=event, outcome=outcome).inc()


class Telemetry:
    """
    Facade for Logs, Metrics, and Tracing.
    """

    def __init__(self, component_name: str) -> None:
        self.component = component_name
        self.logger: logging.Logger
        self._setup_logger()

    def _setup_logger(self) -> None:
        """Initializes the logger. Safe to call multiple times."""
        self.logger = logging.getLogger(self.component)

        # A configured root logger owns output and level; records propagate to it
        if logging.getLogger().handlers:
            return

        # Unconfigured: log to stderr, stdout belongs to the screens
        if not self.logger.handlers:
            handler = logging.StreamHandler(sys.stderr)
            formatter = logging.Formatter(
                "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
            )
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)
            self.logger.setLevel(logging.INFO)

    @staticmethod
    def start_session_trace() -> str:
        s_id = str(uuid.uuid4())[:8]
        session_id_ctx.set(s_id)
        return s_id

    @staticmethod
    def get_trace_id() -> str:
        return session_id_ctx.get()

    def _format(self, event: str, kwargs: dict[str, Any]) -> str:
        return f"[{self.get_trace_id()}] {event} | {kwargs}"

    def log_debug(self, event: str, **kwargs: Any) -> None:
        self.logger.debug(self._format(event, kwargs))

    def log_info(self, event: str, **kwargs: Any) -> None:
        self.logger.info(self._format(event, kwargs))

    def log_warning(self, event: str, **kwargs: Any) -> None:
        self.logger.warning(self._format(event, kwargs))

    def log_error(self, event: str, error: Exception, **kwargs: Any) -> None:
        trace_id = self.get_trace_id()
        msg = f"[{trace_id}] ❌ {event} | Error: {str(error)} | {kwargs}"
        self.logger.error(msg, exc_info=error)
