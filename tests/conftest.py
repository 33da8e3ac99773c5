import pytest

from quiz_runner.fsm import QuestionsLoaded, Start, transition
from quiz_runner.quiz.domain.models import QuizState
from tests.drivers.factories import make_question


@pytest.fixture
def two_questions():
    """[{pts:10, correct:1}, {pts:20, correct:0}]"""
    return [
        make_question(correct=1, points=10, text="First?"),
        make_question(correct=0, points=20, text="Second?"),
    ]


@pytest.fixture
def sample_records():
    """Question records as served by the question endpoint."""
    return [
        {
            "question": "Which company invented React?",
            "options": ["Google", "Apple", "Netflix", "Facebook"],
            "correctOption": 3,
            "points": 10,
        },
        {
            "question": "What's the fundamental building block of React apps?",
            "options": ["Components", "Blocks", "Elements", "Effects"],
            "correctOption": 0,
            "points": 20,
        },
    ]


@pytest.fixture
def ready_state(two_questions):
    return transition(QuizState.initial(), QuestionsLoaded(two_questions))


@pytest.fixture
def active_state(ready_state):
    return transition(ready_state, Start())
