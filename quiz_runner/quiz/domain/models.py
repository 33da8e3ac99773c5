from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from quiz_runner.quiz.domain.exceptions import StateInvariantError


# --- Enums ---
class QuizStatus(str, Enum):
    LOADING = "loading"  # Waiting for the question source
    ERROR = "error"  # Question source failed, terminal for this controller
    READY = "ready"  # Questions loaded, waiting for the user to start
    ACTIVE = "active"  # Answering questions, countdown running
    FINISHED = "finished"  # Result screen


# --- Entities ---
class Question(BaseModel):
    """
    A multiple-choice question. Accepts both the Python field names and the
    wire names used by the question endpoint (question / correctOption).
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    text: str = Field(alias="question")
    options: tuple[str, ...] = Field(min_length=2)
    correct_option_index: int = Field(alias="correctOption", ge=0)
    points: int = Field(gt=0)

    @model_validator(mode="after")
    def _correct_option_in_range(self) -> "Question":
        if self.correct_option_index >= len(self.options):
            raise ValueError(
                f"correct option {self.correct_option_index} out of range "
                f"for {len(self.options)} options"
            )
        return self

    def is_correct(self, option_index: int | None) -> bool:
        return option_index is not None and option_index == self.correct_option_index

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "Question":
        return cls.model_validate(record)

    @classmethod
    def parse_records(cls, records: list[dict[str, Any]]) -> list["Question"]:
        return [cls.from_record(r) for r in records]


class QuizState(BaseModel):
    """
    Encapsulates the state of the quiz. Never mutated: every event produces
    a new instance through quiz_runner.fsm.transition.
    """

    model_config = ConfigDict(frozen=True)

    questions: tuple[Question, ...] = ()
    status: QuizStatus = QuizStatus.LOADING
    current_index: int = 0
    current_answer: int | None = None
    # Locked-in selection per question index, score is derived from it
    answers: tuple[int | None, ...] = ()
    score: int = 0
    high_score: int = 0
    seconds_remaining: int | None = None
    timed_out: bool = False

    @classmethod
    def initial(cls) -> "QuizState":
        return cls()

    # --- Derived values ---
    @property
    def num_questions(self) -> int:
        return len(self.questions)

    @property
    def max_possible_points(self) -> int:
        return sum(q.points for q in self.questions)

    @property
    def current_question(self) -> Question | None:
        if self.status != QuizStatus.ACTIVE:
            return None
        if 0 <= self.current_index < len(self.questions):
            return self.questions[self.current_index]
        return None

    @property
    def is_last_question(self) -> bool:
        return self.current_index == len(self.questions) - 1

    def check_invariants(self) -> None:
        """Raises StateInvariantError on the first violated invariant."""
        if not 0 <= self.score <= self.max_possible_points:
            raise StateInvariantError(
                f"score {self.score} outside [0, {self.max_possible_points}]"
            )
        if self.high_score < 0:
            raise StateInvariantError(f"negative high score {self.high_score}")
        if self.status == QuizStatus.FINISHED and self.high_score < self.score:
            raise StateInvariantError(
                f"high score {self.high_score} below final score {self.score}"
            )

        is_active = self.status == QuizStatus.ACTIVE
        if is_active != (self.seconds_remaining is not None):
            raise StateInvariantError(
                f"seconds_remaining={self.seconds_remaining} in status {self.status.value}"
            )
        if self.seconds_remaining is not None and self.seconds_remaining < 0:
            raise StateInvariantError("negative seconds_remaining")

        loading_or_error = self.status in (QuizStatus.LOADING, QuizStatus.ERROR)
        if loading_or_error != (not self.questions):
            raise StateInvariantError(
                f"{len(self.questions)} questions in status {self.status.value}"
            )

        if is_active:
            if not 0 <= self.current_index < len(self.questions):
                raise StateInvariantError(f"current_index {self.current_index} out of range")
            if len(self.answers) != len(self.questions):
                raise StateInvariantError("answers do not line up with questions")
