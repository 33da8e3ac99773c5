import math
from dataclasses import dataclass
from typing import Any

from quiz_runner.config import QuizConfig
from quiz_runner.quiz.domain.models import QuizState, QuizStatus


@dataclass
class UIModel:
    """
    Data Transfer Object describing WHAT to render.
    The renderer decides HOW (console, web, tests).
    """

    type: str  # 'LOADING', 'ERROR', 'START', 'QUESTION', 'SUMMARY'
    payload: Any


@dataclass
class StartPayload:
    num_questions: int
    max_possible_points: int
    high_score: int


@dataclass
class QuestionPayload:
    number: int  # 1-based
    num_questions: int
    text: str
    options: list[str]
    selected: int | None
    correct_option: int | None  # revealed once an answer is chosen
    points: int
    max_possible_points: int
    progress: float
    timer_text: str
    show_next: bool
    next_label: str


@dataclass
class SummaryPayload:
    points: int
    max_possible_points: int
    percentage: int
    medal: str
    high_score: int
    timed_out: bool


def format_timer(seconds: int | None) -> str:
    """Formats a countdown as M:SS."""
    if seconds is None:
        return ""
    minutes, secs = divmod(max(seconds, 0), 60)
    return f"{minutes}:{secs:02d}"


def score_percentage(points: int, total: int) -> int:
    if total <= 0:
        return 0
    return math.ceil(points / total * 100)


def build_ui_model(state: QuizState) -> UIModel:
    match state.status:
        case QuizStatus.LOADING:
            return UIModel(type="LOADING", payload=None)
        case QuizStatus.ERROR:
            return UIModel(type="ERROR", payload="There was an error fetching questions.")
        case QuizStatus.READY:
            return UIModel(
                type="START",
                payload=StartPayload(
                    num_questions=state.num_questions,
                    max_possible_points=state.max_possible_points,
                    high_score=state.high_score,
                ),
            )
        case QuizStatus.ACTIVE:
            return UIModel(type="QUESTION", payload=_question_payload(state))
        case QuizStatus.FINISHED:
            percentage = score_percentage(state.score, state.max_possible_points)
            return UIModel(
                type="SUMMARY",
                payload=SummaryPayload(
                    points=state.score,
                    max_possible_points=state.max_possible_points,
                    percentage=percentage,
                    medal=QuizConfig.medal_for(percentage),
                    high_score=state.high_score,
                    timed_out=state.timed_out,
                ),
            )
    raise ValueError(f"No screen for status {state.status}")


def _question_payload(state: QuizState) -> QuestionPayload:
    question = state.current_question
    if question is None:
        raise ValueError("Active quiz without a current question")

    answered = state.current_answer is not None
    # Progress counts the current question once it has been answered
    progress = (state.current_index + int(answered)) / state.num_questions

    return QuestionPayload(
        number=state.current_index + 1,
        num_questions=state.num_questions,
        text=question.text,
        options=list(question.options),
        selected=state.current_answer,
        correct_option=question.correct_option_index if answered else None,
        points=state.score,
        max_possible_points=state.max_possible_points,
        progress=progress,
        timer_text=format_timer(state.seconds_remaining),
        show_next=answered,
        next_label="Finish" if state.is_last_question else "Next",
    )
