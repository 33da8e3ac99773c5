import asyncio
import json
from collections.abc import Iterable
from pathlib import Path

from quiz_runner.quiz.adapters.http_source import parse_payload
from quiz_runner.quiz.domain.exceptions import LoadFailure
from quiz_runner.quiz.domain.models import Question
from quiz_runner.quiz.domain.ports import IQuestionSource
from quiz_runner.shared.telemetry import Telemetry


class JsonFileQuestionSource(IQuestionSource):
    """Reads the same payload the question endpoint serves from a local file."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self.telemetry = Telemetry("JsonFileQuestionSource")

    async def fetch(self) -> list[Question]:
        return await asyncio.to_thread(self._read)

    def _read(self) -> list[Question]:
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except OSError as e:
            raise LoadFailure(f"Could not read {self.path}: {e}") from e
        except json.JSONDecodeError as e:
            raise LoadFailure(f"Invalid JSON in {self.path}: {e}") from e

        questions = parse_payload(data)
        self.telemetry.log_info("Read questions", path=str(self.path), count=len(questions))
        return questions


class StaticQuestionSource(IQuestionSource):
    """
    In-memory source. Pass `error` to simulate a failed load and `delay` to
    simulate a slow network.
    """

    def __init__(
        self,
        questions: Iterable[Question] = (),
        error: Exception | None = None,
        delay: float = 0.0,
    ) -> None:
        self.questions = list(questions)
        self.error = error
        self.delay = delay
        self.fetch_count = 0

    async def fetch(self) -> list[Question]:
        self.fetch_count += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return list(self.questions)
