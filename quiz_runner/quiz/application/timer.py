import asyncio
from collections.abc import Callable

from quiz_runner.config import QuizConfig
from quiz_runner.quiz.domain.exceptions import TimerAlreadyRunningError
from quiz_runner.shared.telemetry import Telemetry


class CountdownTimer:
    """
    Calls `on_tick` every `interval` seconds from an asyncio task until cancelled.

    The timer knows nothing about the quiz: the controller starts it when the
    session becomes active and cancels it on every exit from that status.
    """

    def __init__(
        self,
        on_tick: Callable[[], None],
        interval: float = QuizConfig.TICK_INTERVAL_SECONDS,
    ) -> None:
        if interval <= 0:
            raise ValueError("Timer interval must be positive")
        self._on_tick = on_tick
        self.interval = interval
        self._task: asyncio.Task[None] | None = None
        self.ticks = 0
        self.telemetry = Telemetry("CountdownTimer")

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Schedules the recurring tick. Requires a running event loop."""
        if self.is_running:
            raise TimerAlreadyRunningError("Countdown timer is already running")

        self.ticks = 0
        self._task = asyncio.get_running_loop().create_task(self._run())
        self._task.add_done_callback(self._report_failure)
        self.telemetry.log_info("⏲️ Timer started", interval=self.interval)

    def cancel(self) -> None:
        """Stops the recurring tick. Idempotent, and safe from inside `on_tick`."""
        task, self._task = self._task, None
        if task is None or task.done():
            return
        task.cancel()
        self.telemetry.log_info("🛑 Timer cancelled", ticks=self.ticks)

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            self.ticks += 1
            self._on_tick()

    def _report_failure(self, task: "asyncio.Task[None]") -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            self.telemetry.log_error("Timer stopped by tick failure", error, ticks=self.ticks)
