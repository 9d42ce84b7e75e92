"""Tracking of the previous run's failures and durations.

The tracker is constructed once per run. Before test selection the host may
call :meth:`LastRunReporter.filter_last_failed` to restrict the run to the
tests that failed last time; at the end of the run :meth:`on_end` replaces the
state file with the outcome of this run.

Tracking is best effort: a missing or unreadable state file behaves as if no
previous run was recorded, and failures while writing are logged, never raised.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Optional

from lastrun import LAST_RUN_FILENAME
from lastrun.config import RunConfig
from lastrun.models import LastRunInfo, RunResult, Suite
from lastrun.projects import filter_projects
from lastrun.reporter import Reporter

logger = logging.getLogger(__name__)


class LastRunReporter(Reporter):
    """Records the last run's outcome and installs the last-failed filter."""

    def __init__(self, config: RunConfig):
        """Initialize the tracker and resolve the state file path.

        Args:
            config: Configuration of the current run
        """
        self._config = config
        self._suite: Optional[Suite] = None
        self._last_run_file: Optional[Path] = None

        if config.last_run_file:
            self._last_run_file = Path(config.last_run_file)
        else:
            projects = filter_projects(config.projects, config.cli_project_filter)
            if projects:
                self._last_run_file = Path(projects[0].output_dir) / LAST_RUN_FILENAME

        if self._last_run_file is None:
            logger.debug("No last run file could be resolved, tracking disabled")

    @property
    def last_run_file(self) -> Optional[Path]:
        return self._last_run_file

    async def last_run_info(self) -> Optional[Any]:
        """Read the state recorded by the previous run.

        Returns:
            The parsed JSON document, or None if there is no usable state
        """
        if self._last_run_file is None:
            return None

        try:
            content = await asyncio.to_thread(self._last_run_file.read_text, encoding="utf-8")
            return json.loads(content)
        except (OSError, ValueError, RecursionError) as e:
            logger.debug(f"Ignoring last run file {self._last_run_file}: {e}")
            return None

    async def load(self) -> Optional[LastRunInfo]:
        """Read the previous run's state as a LastRunInfo, if it is well formed."""
        data = await self.last_run_info()
        if data is None:
            return None

        try:
            return LastRunInfo.from_dict(data)
        except ValueError as e:
            logger.debug(f"Ignoring malformed last run file {self._last_run_file}: {e}")
            return None

    async def filter_last_failed(self) -> None:
        """Restrict test selection to the tests that failed in the previous run.

        Must be awaited before tests are selected. Does nothing if there is no
        recorded state.
        """
        data = await self.last_run_info()
        if data is None:
            return

        failed = data.get("failedTests") if isinstance(data, dict) else None
        if not isinstance(failed, list):
            logger.debug(f"No failed tests list in {self._last_run_file}, not filtering")
            return
        failed_ids = frozenset(t for t in failed if isinstance(t, str))

        self._config.test_id_matcher = lambda test_id: test_id in failed_ids
        logger.info(f"Selecting {len(failed_ids)} tests that failed in the last run")

    def prints_to_stdio(self) -> bool:
        return False

    def on_begin(self, suite: Suite) -> None:
        self._suite = suite

    async def on_end(self, result: RunResult) -> None:
        """Replace the state file with the outcome of this run."""
        if self._last_run_file is None or self._config.cli_list_only:
            return

        info = LastRunInfo.from_suite(self._suite, result)
        report = json.dumps(info.to_dict(), indent=2)

        try:
            await asyncio.to_thread(self._last_run_file.parent.mkdir, parents=True, exist_ok=True)
            await asyncio.to_thread(self._last_run_file.write_text, report, encoding="utf-8")
        except OSError as e:
            logger.warning(f"Failed to write last run file {self._last_run_file}: {e}")
            return

        logger.debug(
            f"Recorded {len(info.failed_tests)} failed of {len(info.test_durations)} tests "
            f"to {self._last_run_file}"
        )
