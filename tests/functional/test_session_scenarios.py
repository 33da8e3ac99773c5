# ==============================================================================
# FUNCTIONAL TEST (USER FLOWS)
# ------------------------------------------------------------------------------
# GOAL: Verify end-to-end quiz sessions through QuizController.
# CONSTRAINTS:
#   1. I/O: question sources are in-memory or mocked 'requests'.
#   2. TIME: short tick intervals, real asyncio event loop.
# ==============================================================================
import asyncio
from unittest.mock import Mock, patch

import pytest
import requests

from quiz_runner.config import RuntimeSettings
from quiz_runner.fsm import Next, QuestionsLoaded, Start, Tick
from quiz_runner.quiz.adapters.http_source import HttpQuestionSource
from quiz_runner.quiz.adapters.local_sources import StaticQuestionSource
from quiz_runner.quiz.application.controller import QuizController
from quiz_runner.quiz.domain.models import QuizStatus
from tests.drivers.quiz_driver import QuizDriver

SLOW = RuntimeSettings(tick_interval=60)


def play(questions, script, settings=SLOW):
    """Runs `script(driver)` (a coroutine function) against a loaded session."""

    async def scenario():
        async with QuizController(StaticQuestionSource(questions), settings, strict=True) as controller:
            await controller.wait_until_loaded()
            driver = QuizDriver(controller)
            await script(driver)
            return driver

    return asyncio.run(scenario())


def test_two_question_walkthrough(two_questions):
    """
    Scenario: answer the first question right and the second one wrong.
    Verifies: timer budget, scoring, index advance, high score on finish.
    """

    async def script(driver):
        driver.assert_on_screen("START").start()
        assert driver.state.seconds_remaining == 60

        driver.answer(1).assert_score(10).next()
        assert driver.state.current_index == 1
        assert driver.state.current_answer is None

        driver.answer(2).assert_score(10).next()
        driver.assert_on_screen("SUMMARY").assert_status(QuizStatus.FINISHED).assert_high_score(10)

    play(two_questions, script)


def test_high_score_survives_restarts(two_questions):
    """
    Scenario: perfect run, then a poor run, then a middling run.
    Verifies: high score is the best score of the process lifetime.
    """

    async def script(driver):
        driver.start().answer_all([1, 0]).assert_high_score(30)
        driver.restart().assert_on_screen("START").assert_score(0).assert_high_score(30)
        driver.start().answer_all([0, 1]).assert_score(0).assert_high_score(30)
        driver.restart().start().answer_all([1, 1]).assert_score(10).assert_high_score(30)

        finished = [s for s in driver.published if s.status == QuizStatus.FINISHED]
        assert [s.high_score for s in finished] == [30, 30, 30]

    play(two_questions, script)


def test_running_out_of_time(two_questions):
    """
    Scenario: the user answers one question, then idles until the clock runs out.
    Verifies: automatic finish, high score update, no ticks after the finish.
    """
    fast = RuntimeSettings(tick_interval=0.01, seconds_per_question=2)

    async def script(driver):
        driver.start().answer(1)
        for _ in range(200):
            if driver.state.status == QuizStatus.FINISHED:
                break
            await asyncio.sleep(0.01)

        driver.assert_status(QuizStatus.FINISHED).assert_high_score(10)
        assert driver.state.timed_out
        published_at_finish = len(driver.published)
        await asyncio.sleep(0.05)
        assert len(driver.published) == published_at_finish
        assert not driver.controller.timer_running

    driver = play(two_questions, script, settings=fast)

    ticks = [s.seconds_remaining for s in driver.published if s.status == QuizStatus.ACTIVE]
    assert ticks[-1] == 1
    assert all(s is not None and s >= 1 for s in ticks)


@pytest.mark.parametrize("tick_first", [True, False])
def test_next_racing_the_last_tick_resolves_by_arrival(two_questions, tick_first):
    """
    Scenario: the last Tick and a final Next arrive back to back.
    Verifies: whichever the queue delivers first wins, the other is a no-op.
    """

    async def script(driver):
        controller = driver.controller
        # The losing event is rejected rather than raised
        controller.strict = False
        driver.start().next()
        for _ in range(59):
            controller.dispatch(Tick())
        assert driver.state.seconds_remaining == 1

        racing = [Tick(), Next()] if tick_first else [Next(), Tick()]
        for event in racing:
            controller.dispatch(event)

        driver.assert_status(QuizStatus.FINISHED)
        assert driver.state.timed_out is tick_first

    play(two_questions, script)


@patch("quiz_runner.quiz.adapters.http_source.requests.get")
def test_http_outage_shows_error_screen(mock_get):
    """
    Scenario: the question endpoint is down.
    Verifies: ERROR screen, no retry, no way out of ERROR.
    """
    mock_get.side_effect = requests.ConnectionError("Connection refused")

    async def scenario():
        source = HttpQuestionSource("http://localhost:9000/questions")
        async with QuizController(source, SLOW) as controller:
            state = await controller.wait_until_loaded()
            driver = QuizDriver(controller)
            driver.assert_on_screen("ERROR")
            controller.dispatch(QuestionsLoaded(()))
            controller.dispatch(Start())
            return state, controller.state

    loaded, final = asyncio.run(scenario())

    assert loaded.status == QuizStatus.ERROR
    assert final.status == QuizStatus.ERROR
    assert final.questions == ()
    assert mock_get.call_count == 1


@patch("quiz_runner.quiz.adapters.http_source.requests.get")
def test_http_load_to_first_question(mock_get, sample_records):
    """
    Scenario: questions arrive over HTTP and the user starts.
    Verifies: wire records become playable questions.
    """
    response = Mock()
    response.json.return_value = sample_records
    mock_get.return_value = response

    async def scenario():
        source = HttpQuestionSource("http://localhost:9000/questions")
        async with QuizController(source, SLOW) as controller:
            await controller.wait_until_loaded()
            driver = QuizDriver(controller).start().answer(3)
            return driver.current_payload

    payload = asyncio.run(scenario())

    assert payload.text == "Which company invented React?"
    assert payload.points == 10
    assert payload.timer_text == "1:00"
