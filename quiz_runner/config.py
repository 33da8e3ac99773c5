import os
from typing import Final

from pydantic import BaseModel, Field


class QuizConfig:
    # --- Game Rules ---
    SECONDS_PER_QUESTION: Final[int] = 30
    TICK_INTERVAL_SECONDS: Final[float] = 1.0

    # --- Question Source ---
    # The original quiz was served by a local json-server.
    DEFAULT_SOURCE_URL: Final[str] = "http://localhost:9000/questions"
    REQUEST_TIMEOUT_SECONDS: Final[float] = 10.0

    # --- Result Screen ---
    # (minimum percentage, medal), checked top to bottom
    MEDALS: Final[list[tuple[float, str]]] = [
        (100.0, "🥇"),
        (80.0, "🥈"),
        (60.0, "🥉"),
        (0.0, "😟"),
    ]

    @staticmethod
    def medal_for(percentage: float) -> str:
        """Returns the medal shown on the result screen for a percentage."""
        for threshold, medal in QuizConfig.MEDALS:
            if percentage >= threshold:
                return medal
        return QuizConfig.MEDALS[-1][1]


class RuntimeSettings(BaseModel):
    """
    Per-process overrides, read from the environment.
    Falls back to the QuizConfig constants.
    """

    source_url: str = QuizConfig.DEFAULT_SOURCE_URL
    seconds_per_question: int = Field(default=QuizConfig.SECONDS_PER_QUESTION, gt=0)
    tick_interval: float = Field(default=QuizConfig.TICK_INTERVAL_SECONDS, gt=0)
    request_timeout: float = Field(default=QuizConfig.REQUEST_TIMEOUT_SECONDS, gt=0)
    metrics_port: int | None = None

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "RuntimeSettings":
        env = os.environ if environ is None else environ
        mapping = {
            "source_url": "QUIZ_SOURCE_URL",
            "seconds_per_question": "QUIZ_SECONDS_PER_QUESTION",
            "tick_interval": "QUIZ_TICK_INTERVAL",
            "request_timeout": "QUIZ_REQUEST_TIMEOUT",
            "metrics_port": "QUIZ_METRICS_PORT",
        }
        values = {field: env[var] for field, var in mapping.items() if env.get(var)}
        return cls.model_validate(values)
