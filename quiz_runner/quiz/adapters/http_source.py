import asyncio
from typing import Any

import requests
from pydantic import ValidationError

from quiz_runner.config import QuizConfig
from quiz_runner.quiz.domain.exceptions import LoadFailure
from quiz_runner.quiz.domain.models import Question
from quiz_runner.quiz.domain.ports import IQuestionSource
from quiz_runner.shared.telemetry import Telemetry


def parse_payload(data: Any) -> list[Question]:
    """
    Turns the decoded JSON payload into questions.
    Accepts a bare array or an object with a "questions" array.
    """
    if isinstance(data, dict) and "questions" in data:
        data = data["questions"]
    if not isinstance(data, list):
        raise LoadFailure(f"Expected a JSON array of questions, got {type(data).__name__}")
    if not data:
        raise LoadFailure("Question payload is empty")
    if not all(isinstance(record, dict) for record in data):
        raise LoadFailure("Every question record must be a JSON object")

    try:
        return Question.parse_records(data)
    except ValidationError as e:
        raise LoadFailure(f"Malformed question record: {e}") from e


class HttpQuestionSource(IQuestionSource):
    """Fetches the question list with a single GET. No retry."""

    def __init__(
        self,
        url: str = QuizConfig.DEFAULT_SOURCE_URL,
        timeout: float = QuizConfig.REQUEST_TIMEOUT_SECONDS,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self.telemetry = Telemetry("HttpQuestionSource")

    async def fetch(self) -> list[Question]:
        # requests is blocking, keep it off the event loop
        return await asyncio.to_thread(self._fetch_sync)

    def _fetch_sync(self) -> list[Question]:
        self.telemetry.log_info("🌐 Fetching questions", url=self.url)
        try:
            response = requests.get(self.url, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            raise LoadFailure(f"Could not fetch questions from {self.url}: {e}") from e
        except ValueError as e:
            raise LoadFailure(f"Invalid JSON from {self.url}: {e}") from e

        questions = parse_payload(data)
        self.telemetry.log_info("Fetched questions", url=self.url, count=len(questions))
        return questions
