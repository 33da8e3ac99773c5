import pytest

from quiz_runner.fsm import AnswerSelected, LoadFailed, Next, Tick, transition
from quiz_runner.quiz.domain.models import QuizState
from quiz_runner.quiz.presentation.viewmodel import (
    QuestionPayload,
    StartPayload,
    SummaryPayload,
    build_ui_model,
    format_timer,
    score_percentage,
)


class TestScreens:
    def test_loading_and_error_screens(self):
        assert build_ui_model(QuizState.initial()).type == "LOADING"

        error = build_ui_model(transition(QuizState.initial(), LoadFailed()))
        assert error.type == "ERROR"
        assert "error" in error.payload

    def test_start_screen(self, ready_state):
        ui = build_ui_model(ready_state)

        assert ui.type == "START"
        assert ui.payload == StartPayload(num_questions=2, max_possible_points=30, high_score=0)

    def test_question_screen_before_answer(self, active_state):
        ui = build_ui_model(active_state)

        assert ui.type == "QUESTION"
        payload: QuestionPayload = ui.payload
        assert payload.number == 1
        assert payload.text == "First?"
        assert payload.timer_text == "1:00"
        assert payload.show_next is False
        assert payload.correct_option is None
        assert payload.progress == 0
        assert payload.next_label == "Next"

    def test_question_screen_after_answer(self, active_state):
        payload = build_ui_model(transition(active_state, AnswerSelected(2))).payload

        assert payload.selected == 2
        assert payload.correct_option == 1
        assert payload.show_next is True
        assert payload.progress == 0.5

    def test_last_question_offers_finish(self, active_state):
        state = transition(transition(active_state, Next()), Tick())

        payload = build_ui_model(state).payload

        assert payload.next_label == "Finish"
        assert payload.timer_text == "0:59"

    def test_summary_screen(self, active_state):
        state = active_state
        for event in (AnswerSelected(1), Next(), AnswerSelected(0), Next()):
            state = transition(state, event)

        ui = build_ui_model(state)

        assert ui.type == "SUMMARY"
        assert ui.payload == SummaryPayload(
            points=30,
            max_possible_points=30,
            percentage=100,
            medal="🥇",
            high_score=30,
            timed_out=False,
        )


class TestFormatting:
    @pytest.mark.parametrize(
        "seconds, expected",
        [(0, "0:00"), (9, "0:09"), (60, "1:00"), (125, "2:05"), (None, "")],
    )
    def test_format_timer(self, seconds, expected):
        assert format_timer(seconds) == expected

    @pytest.mark.parametrize(
        "points, total, expected",
        [(10, 30, 34), (0, 30, 0), (30, 30, 100), (0, 0, 0)],
    )
    def test_score_percentage_rounds_up(self, points, total, expected):
        assert score_percentage(points, total) == expected
