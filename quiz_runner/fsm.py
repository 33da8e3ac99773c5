from collections.abc import Sequence
from dataclasses import dataclass
from typing import Union

from quiz_runner.config import QuizConfig
from quiz_runner.quiz.domain.exceptions import UnknownEvent
from quiz_runner.quiz.domain.models import Question, QuizState, QuizStatus


# --- Events ---
@dataclass(frozen=True)
class QuestionsLoaded:
    questions: tuple[Question, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "questions", tuple(self.questions))


@dataclass(frozen=True)
class LoadFailed:
    reason: str = ""


@dataclass(frozen=True)
class Start:
    pass


@dataclass(frozen=True)
class Tick:
    pass


@dataclass(frozen=True)
class AnswerSelected:
    option_index: int


@dataclass(frozen=True)
class Next:
    pass


@dataclass(frozen=True)
class Restart:
    pass


QuizEvent = Union[QuestionsLoaded, LoadFailed, Start, Tick, AnswerSelected, Next, Restart]

EVENT_TYPES: tuple[type, ...] = (
    QuestionsLoaded,
    LoadFailed,
    Start,
    Tick,
    AnswerSelected,
    Next,
    Restart,
)


def transition(
    state: QuizState,
    event: QuizEvent,
    seconds_per_question: int = QuizConfig.SECONDS_PER_QUESTION,
) -> QuizState:
    """
    The Transition Table.
    Pure: returns the next state, or the very same `state` object when the
    event has no defined effect in the current status.
    """
    if not isinstance(event, EVENT_TYPES):
        raise UnknownEvent(event)

    match (state.status, event):
        # LOADING -> READY or ERROR
        case (QuizStatus.LOADING, QuestionsLoaded(questions=questions)) if questions:
            return state.model_copy(
                update={"questions": questions, "status": QuizStatus.READY}
            )
        case (QuizStatus.LOADING, LoadFailed()):
            return state.model_copy(update={"status": QuizStatus.ERROR})

        # READY -> ACTIVE
        case (QuizStatus.READY, Start()):
            return _start(state, seconds_per_question)

        # ACTIVE -> ACTIVE or FINISHED
        case (QuizStatus.ACTIVE, Tick()):
            return _tick(state)
        case (QuizStatus.ACTIVE, AnswerSelected(option_index=option)) if _is_option(
            state, option
        ):
            return _select_answer(state, option)
        case (QuizStatus.ACTIVE, Next()):
            return _next_question(state)

        # FINISHED -> READY
        case (QuizStatus.FINISHED, Restart()):
            return _restart(state)

        # Out-of-context events are rejected
        case _:
            return state


def score_answers(questions: Sequence[Question], answers: Sequence[int | None]) -> int:
    """Points for every locked-in answer that matches its question."""
    return sum(
        q.points for q, answer in zip(questions, answers) if q.is_correct(answer)
    )


# --- Transition helpers ---
def _start(state: QuizState, seconds_per_question: int) -> QuizState:
    return state.model_copy(
        update={
            "status": QuizStatus.ACTIVE,
            "current_index": 0,
            "current_answer": None,
            "answers": (None,) * len(state.questions),
            "score": 0,
            "seconds_remaining": len(state.questions) * seconds_per_question,
            "timed_out": False,
        }
    )


def _tick(state: QuizState) -> QuizState:
    remaining = (state.seconds_remaining or 0) - 1
    if remaining <= 0:
        # Zero is reached and the quiz ends in this same transition
        return _finish(state, timed_out=True)
    return state.model_copy(update={"seconds_remaining": remaining})


def _is_option(state: QuizState, option: object) -> bool:
    question = state.current_question
    return (
        question is not None
        and isinstance(option, int)
        and not isinstance(option, bool)
        and 0 <= option < len(question.options)
    )


def _select_answer(state: QuizState, option: int) -> QuizState:
    answers = list(state.answers)
    answers[state.current_index] = option
    return state.model_copy(
        update={
            "current_answer": option,
            "answers": tuple(answers),
            "score": score_answers(state.questions, answers),
        }
    )


def _next_question(state: QuizState) -> QuizState:
    if state.is_last_question:
        return _finish(state, timed_out=False)
    return state.model_copy(
        update={"current_index": state.current_index + 1, "current_answer": None}
    )


def _finish(state: QuizState, timed_out: bool) -> QuizState:
    return state.model_copy(
        update={
            "status": QuizStatus.FINISHED,
            "high_score": max(state.high_score, state.score),
            "seconds_remaining": None,
            "timed_out": timed_out,
        }
    )


def _restart(state: QuizState) -> QuizState:
    # questions and high_score carry over
    return state.model_copy(
        update={
            "status": QuizStatus.READY,
            "current_index": 0,
            "current_answer": None,
            "answers": (),
            "score": 0,
            "seconds_remaining": None,
            "timed_out": False,
        }
    )
