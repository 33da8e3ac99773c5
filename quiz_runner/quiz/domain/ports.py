from abc import ABC, abstractmethod

from quiz_runner.quiz.domain.models import Question


class IQuestionSource(ABC):
    @abstractmethod
    async def fetch(self) -> list[Question]:
        """
        Fetches the full question list in one attempt.
        Raises LoadFailure on any network or payload problem.
        """
        pass
