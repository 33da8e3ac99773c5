import asyncio
import logging
import sys
from pathlib import Path
from threading import Thread
from typing import TextIO

# --- Prometheus Import ---
from prometheus_client import start_http_server

# --- Application Imports ---
from quiz_runner.config import RuntimeSettings
from quiz_runner.fsm import Next
from quiz_runner.quiz.adapters.http_source import HttpQuestionSource
from quiz_runner.quiz.adapters.local_sources import JsonFileQuestionSource
from quiz_runner.quiz.application.controller import QuizController
from quiz_runner.quiz.domain.models import QuizState
from quiz_runner.quiz.domain.ports import IQuestionSource
from quiz_runner.quiz.presentation.console import (
    ConsoleRenderer,
    QuitRequested,
    parse_command,
)
from quiz_runner.quiz.presentation.viewmodel import build_ui_model


# --- 1. Configure Observability ---
def configure_observability(settings: RuntimeSettings) -> None:
    """
    Warnings and errors to stderr, plus a Prometheus /metrics endpoint when a port is set.
    Must run before any component is built: their loggers defer to the root configuration.
    """
    logging.basicConfig(
        level=logging.WARNING,
        stream=sys.stderr,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    if settings.metrics_port is None:
        return
    try:
        start_http_server(settings.metrics_port)
        print(f"✅ Prometheus Metrics server started on port {settings.metrics_port}", file=sys.stderr)
    except OSError:
        print(f"⚠️ Prometheus port {settings.metrics_port} already in use. Skipping.", file=sys.stderr)


# --- 2. Composition Root ---
def build_source(settings: RuntimeSettings) -> IQuestionSource:
    location = settings.source_url
    if location.startswith(("http://", "https://")):
        return HttpQuestionSource(location, timeout=settings.request_timeout)
    return JsonFileQuestionSource(Path(location.removeprefix("file://")))


# --- 3. Console Input ---
def start_line_reader(lines: "asyncio.Queue[str | None]", stream: TextIO) -> Thread:
    """
    Reads `stream` on a daemon thread and feeds each line into `lines`, then None at EOF.
    The blocked read never holds up interpreter shutdown on Ctrl-C.
    """
    loop = asyncio.get_running_loop()

    def deliver(line: str | None) -> bool:
        try:
            loop.call_soon_threadsafe(lines.put_nowait, line)
        except RuntimeError:
            # Loop closed: the session is over
            return False
        return True

    def read_lines() -> None:
        for line in stream:
            if not deliver(line):
                return
        deliver(None)

    thread = Thread(target=read_lines, name="ConsoleInput", daemon=True)
    thread.start()
    return thread


def next_available(state: QuizState) -> bool:
    """Next is offered only once the current question has an answer."""
    ui_model = build_ui_model(state)
    return ui_model.type == "QUESTION" and ui_model.payload.show_next


def handle_line(controller: QuizController, line: str) -> None:
    """Dispatches one line of input. Raises QuitRequested on quit."""
    event = parse_command(line)
    if event is None:
        return
    if isinstance(event, Next) and not next_available(controller.state):
        return
    controller.dispatch(event)


async def run(settings: RuntimeSettings, stream: TextIO | None = None) -> QuizState:
    renderer = ConsoleRenderer()
    lines: asyncio.Queue[str | None] = asyncio.Queue()

    async with QuizController(build_source(settings), settings) as controller:
        controller.subscribe(renderer)
        renderer(controller.state)
        await controller.wait_until_loaded()

        start_line_reader(lines, stream or sys.stdin)
        while True:
            line = await lines.get()
            if line is None:
                break
            try:
                handle_line(controller, line)
            except QuitRequested:
                break

        return controller.state


def main() -> None:
    settings = RuntimeSettings.from_env()
    configure_observability(settings)
    try:
        asyncio.run(run(settings))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
