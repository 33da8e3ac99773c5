import asyncio
import contextlib
from collections import deque
from collections.abc import Callable
from typing import Any

from quiz_runner.config import RuntimeSettings
from quiz_runner.fsm import (
    EVENT_TYPES,
    AnswerSelected,
    LoadFailed,
    Next,
    QuestionsLoaded,
    QuizEvent,
    Restart,
    Start,
    Tick,
    transition,
)
from quiz_runner.quiz.application.timer import CountdownTimer
from quiz_runner.quiz.domain.exceptions import (
    ControllerClosedError,
    InvalidTransition,
    LoadFailure,
    QuizError,
    UnknownEvent,
)
from quiz_runner.quiz.domain.models import QuizState, QuizStatus
from quiz_runner.quiz.domain.ports import IQuestionSource
from quiz_runner.shared.telemetry import Telemetry, count_event, measure_time

Observer = Callable[[QuizState], None]


class QuizController:
    """
    Owns the one live QuizState of a session.

    Responsible for:
    1. Feeding events through the state machine one at a time (serial queue).
    2. Loading the questions exactly once.
    3. Keeping the countdown timer running only while the quiz is active.
    4. Publishing every new state to the subscribed observers.

    Must be used from inside a running asyncio event loop.
    """

    def __init__(
        self,
        source: IQuestionSource,
        settings: RuntimeSettings | None = None,
        strict: bool = False,
    ) -> None:
        self.source = source
        self.settings = settings or RuntimeSettings()
        self.strict = strict
        self.telemetry = Telemetry("QuizController")
        self.session_id = Telemetry.start_session_trace()

        self._state = QuizState.initial()
        self._observers: list[Observer] = []
        self._queue: deque[QuizEvent] = deque()
        self._dispatching = False
        self._timer = CountdownTimer(self._on_tick, self.settings.tick_interval)
        self._load_task: asyncio.Task[None] | None = None
        self._closed = False

    # --- Properties ---
    @property
    def state(self) -> QuizState:
        return self._state

    @property
    def timer_running(self) -> bool:
        return self._timer.is_running

    @property
    def is_closed(self) -> bool:
        return self._closed

    # --- Lifecycle ---
    async def __aenter__(self) -> "QuizController":
        self.open()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    def open(self) -> None:
        """Schedules the one-shot question load."""
        if self._closed:
            raise ControllerClosedError("Controller is closed")
        if self._load_task is not None:
            raise QuizError("Questions are loaded once per controller")

        self.telemetry.log_info("🎬 Session opened", source=type(self.source).__name__)
        self._load_task = asyncio.get_running_loop().create_task(self._load_questions())

    async def wait_until_loaded(self) -> QuizState:
        if self._load_task is None:
            raise QuizError("Controller was not opened")
        await self._load_task
        return self._state

    def close(self) -> None:
        """Tears the session down. No event is applied afterwards."""
        if self._closed:
            return
        self._closed = True
        self._timer.cancel()
        if self._load_task is not None and not self._load_task.done():
            self._load_task.cancel()
        self._queue.clear()
        self.telemetry.log_info("🏁 Session closed", status=self._state.status.value)

    async def aclose(self) -> None:
        self.close()
        if self._load_task is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await self._load_task

    # --- Observers ---
    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """Registers `observer` for every published state. Returns an unsubscribe function."""
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    # --- Events ---
    def dispatch(self, event: QuizEvent) -> None:
        """
        Applies `event`. A dispatch issued while another one is being applied
        (from an observer, for instance) is queued and runs right after it.
        """
        if self._closed:
            raise ControllerClosedError(f"Cannot dispatch {event!r}: controller is closed")
        if not isinstance(event, EVENT_TYPES):
            raise UnknownEvent(event)

        self._queue.append(event)
        if self._dispatching:
            return

        self._dispatching = True
        try:
            while self._queue and not self._closed:
                self._apply(self._queue.popleft())
        finally:
            self._dispatching = False

    # --- User intents ---
    def start(self) -> None:
        self.dispatch(Start())

    def answer(self, option_index: int) -> None:
        self.dispatch(AnswerSelected(option_index))

    def next(self) -> None:
        self.dispatch(Next())

    def restart(self) -> None:
        self.dispatch(Restart())

    # --- Internals ---
    @measure_time("apply_event")
    def _apply(self, event: QuizEvent) -> None:
        previous = self._state
        event_name = type(event).__name__
        new_state = transition(previous, event, self.settings.seconds_per_question)

        if new_state is previous:
            count_event(event_name, "rejected")
            if self.strict:
                raise InvalidTransition(previous.status, event)
            self.telemetry.log_warning(
                f"⛔ INVALID TRANSITION: {previous.status.value} + {event_name}"
            )
            return

        if self.strict:
            new_state.check_invariants()

        self._state = new_state
        count_event(event_name, "applied")
        if previous.status != new_state.status:
            self.telemetry.log_info(
                f"🔄 FSM: {previous.status.value} --[{event_name}]--> {new_state.status.value}",
                score=new_state.score,
                high_score=new_state.high_score,
            )

        self._sync_timer()
        self._publish(new_state)

    def _sync_timer(self) -> None:
        active = self._state.status == QuizStatus.ACTIVE
        if active and not self._timer.is_running:
            self._timer.start()
        elif not active and self._timer.is_running:
            self._timer.cancel()

    def _publish(self, state: QuizState) -> None:
        for observer in list(self._observers):
            try:
                observer(state)
            except Exception as e:
                self.telemetry.log_error(
                    "Observer failed", e, observer=getattr(observer, "__name__", repr(observer))
                )

    def _on_tick(self) -> None:
        self.dispatch(Tick())

    async def _load_questions(self) -> None:
        try:
            questions = await self.source.fetch()
            if not questions:
                raise LoadFailure("Question source returned no questions")
        except Exception as e:
            self.telemetry.log_error("Question load failed", e)
            if not self._closed:
                self.dispatch(LoadFailed(reason=str(e)))
            return

        self.telemetry.log_info("📥 Questions loaded", count=len(questions))
        if not self._closed:
            self.dispatch(QuestionsLoaded(tuple(questions)))
