import sys
from typing import TextIO

from quiz_runner.fsm import AnswerSelected, Next, QuizEvent, Restart, Start
from quiz_runner.quiz.domain.models import QuizState
from quiz_runner.quiz.presentation.viewmodel import (
    QuestionPayload,
    StartPayload,
    SummaryPayload,
    UIModel,
    build_ui_model,
)
from quiz_runner.shared.telemetry import Telemetry


class ConsoleRenderer:
    """
    Observer that prints each published state as text.
    Timer-only updates print a single status line instead of the whole screen.
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        self.stream = stream or sys.stdout
        self.telemetry = Telemetry("ConsoleRenderer")
        self._last_screen: tuple | None = None

    def __call__(self, state: QuizState) -> None:
        self.render(build_ui_model(state))

    def render(self, ui_model: UIModel) -> None:
        screen_key = self._screen_key(ui_model)
        if screen_key == self._last_screen and ui_model.type == "QUESTION":
            self._write(f"⏱  {ui_model.payload.timer_text}")
            return
        self._last_screen = screen_key

        if ui_model.type == "LOADING":
            self._write("Loading questions...")
        elif ui_model.type == "ERROR":
            self._write(f"💥 {ui_model.payload}")
        elif ui_model.type == "START":
            self._render_start(ui_model.payload)
        elif ui_model.type == "QUESTION":
            self._render_question(ui_model.payload)
        elif ui_model.type == "SUMMARY":
            self._render_summary(ui_model.payload)
        else:
            self.telemetry.log_error(
                f"Unknown screen type: {ui_model.type}", Exception("Renderer Error")
            )

    @staticmethod
    def _screen_key(ui_model: UIModel) -> tuple:
        payload = ui_model.payload
        if isinstance(payload, QuestionPayload):
            return (ui_model.type, payload.number, payload.selected)
        return (ui_model.type, repr(payload))

    def _render_start(self, payload: StartPayload) -> None:
        self._write("Welcome to the quiz!")
        self._write(f"{payload.num_questions} questions to test your knowledge.")
        if payload.high_score:
            self._write(f"(Highscore: {payload.high_score} points)")
        self._write("Type 's' to start.")

    def _render_question(self, payload: QuestionPayload) -> None:
        self._write("")
        self._write(
            f"Question {payload.number} / {payload.num_questions}"
            f"    {payload.points} / {payload.max_possible_points} points"
            f"    ⏱  {payload.timer_text}"
        )
        self._write(payload.text)
        for i, option in enumerate(payload.options):
            marker = " "
            if payload.correct_option is not None:
                marker = "✔" if i == payload.correct_option else "✘"
            if i == payload.selected:
                marker = f"{marker}>"
            self._write(f" {marker} {i + 1}) {option}")
        if payload.show_next:
            self._write(f"Type 'n' for {payload.next_label}.")
        else:
            self._write("Pick an option number.")

    def _render_summary(self, payload: SummaryPayload) -> None:
        self._write("")
        if payload.timed_out:
            self._write("⌛ Time is up!")
        self._write(
            f"{payload.medal} You scored {payload.points} out of "
            f"{payload.max_possible_points} ({payload.percentage}%)"
        )
        self._write(f"(Highscore: {payload.high_score} points)")
        self._write("Type 'r' to restart or 'q' to quit.")

    def _write(self, line: str) -> None:
        self.stream.write(line + "\n")
        self.stream.flush()


class QuitRequested(Exception):
    """Raised by parse_command when the user asks to leave."""


def parse_command(line: str) -> QuizEvent | None:
    """
    Maps console input to a quiz event.
    's' start, '1'..'n' pick an option, 'n' next, 'r' restart, 'q' quit.
    Returns None for input that means nothing.
    """
    command = line.strip().lower()
    if command in ("q", "quit", "exit"):
        raise QuitRequested()
    if command == "s":
        return Start()
    if command == "n":
        return Next()
    if command == "r":
        return Restart()
    if command.isdigit() and int(command) >= 1:
        return AnswerSelected(int(command) - 1)
    return None
