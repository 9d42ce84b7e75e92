"""Data models for the test tree, run results and persisted last-run state."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator, Optional


class RunStatus(str, Enum):
    """Overall status of a test run."""

    PASSED = "passed"
    FAILED = "failed"
    TIMEDOUT = "timedout"
    INTERRUPTED = "interrupted"


class AttemptStatus(str, Enum):
    """Status of a single attempt at running a test."""

    PASSED = "passed"
    FAILED = "failed"
    TIMED_OUT = "timedOut"
    SKIPPED = "skipped"
    INTERRUPTED = "interrupted"


class Outcome(str, Enum):
    """Outcome of a test across all of its attempts."""

    SKIPPED = "skipped"
    EXPECTED = "expected"
    UNEXPECTED = "unexpected"
    FLAKY = "flaky"


@dataclass
class TestAttempt:
    """One execution of a test. Retries produce further attempts."""

    __test__ = False

    status: AttemptStatus = AttemptStatus.PASSED
    duration: int = 0
    retry: int = 0


@dataclass
class TestCase:
    """A single test together with every attempt recorded for it."""

    __test__ = False

    id: str
    title: str = ""
    expected_status: AttemptStatus = AttemptStatus.PASSED
    results: list[TestAttempt] = field(default_factory=list)

    def outcome(self) -> Outcome:
        """Classify the test from its attempts.

        Interrupted attempts are ignored. A test with only skipped attempts
        (or none) is skipped; a test failing on some but not all attempts is
        flaky.
        """
        results = [r for r in self.results if r.status != AttemptStatus.INTERRUPTED]
        if all(r.status == AttemptStatus.SKIPPED for r in results):
            return Outcome.SKIPPED

        failures = [
            r
            for r in results
            if r.status != AttemptStatus.SKIPPED and r.status != self.expected_status
        ]
        if not failures:
            return Outcome.EXPECTED
        if len(failures) == len(results):
            return Outcome.UNEXPECTED
        return Outcome.FLAKY

    def ok(self) -> bool:
        """Check whether the test should be considered passing."""
        return self.outcome() in (Outcome.EXPECTED, Outcome.FLAKY, Outcome.SKIPPED)

    @property
    def total_duration(self) -> int:
        """Sum of the durations of all attempts, in milliseconds."""
        return sum(r.duration for r in self.results)


@dataclass
class Suite:
    """A group of tests and nested suites."""

    title: str = ""
    tests: list[TestCase] = field(default_factory=list)
    suites: list["Suite"] = field(default_factory=list)

    def all_tests(self) -> Iterator[TestCase]:
        """Yield every test in the tree, own tests before child suites."""
        yield from self.tests
        for suite in self.suites:
            yield from suite.all_tests()


@dataclass
class RunResult:
    """Result of a whole test run."""

    status: RunStatus


@dataclass
class LastRunInfo:
    """State persisted at the end of a run."""

    status: RunStatus
    failed_tests: list[str] = field(default_factory=list)
    test_durations: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Convert to the on-disk JSON shape."""
        return {
            "status": self.status.value,
            "failedTests": list(self.failed_tests),
            "testDurations": dict(self.test_durations),
        }

    @classmethod
    def from_suite(cls, suite: Optional[Suite], result: RunResult) -> "LastRunInfo":
        """Build the state for a completed run."""
        tests = list(suite.all_tests()) if suite is not None else []
        return cls(
            status=result.status,
            failed_tests=[t.id for t in tests if not t.ok()],
            test_durations={t.id: t.total_duration for t in tests},
        )

    @classmethod
    def from_dict(cls, data: Any) -> "LastRunInfo":
        """Create from parsed JSON.

        Raises:
            ValueError: If the document does not have the expected shape
        """
        if not isinstance(data, dict):
            raise ValueError("Last run info must be a JSON object")

        try:
            status = RunStatus(data["status"])
        except KeyError:
            raise ValueError("Last run info has no status")

        failed_tests = data.get("failedTests", [])
        if not isinstance(failed_tests, list) or not all(isinstance(t, str) for t in failed_tests):
            raise ValueError("failedTests must be a list of test ids")

        durations = data.get("testDurations") or {}
        if not isinstance(durations, dict):
            raise ValueError("testDurations must be an object")
        try:
            test_durations = {str(k): int(v) for k, v in durations.items()}
        except (TypeError, ValueError, OverflowError):
            raise ValueError("testDurations values must be integers")

        return cls(status=status, failed_tests=failed_tests, test_durations=test_durations)
