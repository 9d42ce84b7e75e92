"""Project selection by command-line filter."""

import logging
import re
from typing import Optional

from lastrun.config import ProjectConfig

logger = logging.getLogger(__name__)


def _compile_pattern(name: str) -> re.Pattern:
    # '*' is the only wildcard, everything else matches literally
    parts = [re.escape(part) for part in name.split("*")]
    return re.compile(".*".join(parts), re.IGNORECASE)


def filter_projects(
    projects: list[ProjectConfig],
    project_filter: Optional[list[str]] = None,
) -> list[ProjectConfig]:
    """Select the projects named by the filter, keeping configured order.

    Names are matched case-insensitively and may contain ``*`` wildcards.
    An empty or missing filter selects every project. Filter entries that
    match no project are logged and ignored.
    """
    if not project_filter:
        return list(projects)

    patterns = {name: _compile_pattern(name) for name in project_filter}
    unmatched = set(patterns)
    selected = []

    for project in projects:
        matched = [name for name, pattern in patterns.items() if pattern.fullmatch(project.name)]
        if matched:
            selected.append(project)
            unmatched.difference_update(matched)

    for name in sorted(unmatched):
        logger.warning(f"Project filter '{name}' does not match any configured project")

    return selected
