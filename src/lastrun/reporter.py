"""Base interface for run observers."""

from abc import ABC, abstractmethod
from typing import Literal, Optional

from lastrun.config import RunConfig
from lastrun.models import RunResult, Suite, TestAttempt, TestCase


class Reporter(ABC):
    """Abstract base class for objects observing a test run.

    The host calls the hooks in order: on_configure, on_begin, the per-test
    hooks, then on_end exactly once. Only on_end must be implemented.
    """

    def version(self) -> Literal["v2"]:
        return "v2"

    def prints_to_stdio(self) -> bool:
        """Whether the reporter writes to the console."""
        return True

    def on_configure(self, config: RunConfig) -> None:
        pass

    def on_begin(self, suite: Suite) -> None:
        pass

    def on_test_begin(self, test: TestCase, result: TestAttempt) -> None:
        pass

    def on_test_end(self, test: TestCase, result: TestAttempt) -> None:
        pass

    def on_error(self, error: Exception, test: Optional[TestCase] = None) -> None:
        pass

    @abstractmethod
    async def on_end(self, result: RunResult) -> None:
        """Called once after every test has finished.

        Args:
            result: The overall result of the run
        """
        pass
