"""Configuration management for lastrun."""

import json
from pathlib import Path
from typing import Callable, Optional

from pydantic import BaseModel, Field, field_validator


class ProjectConfig(BaseModel):
    """A named group of tests sharing an output directory."""

    name: str = Field(description="Project name, matched by --project")
    output_dir: str = Field(default="test-results", description="Directory for run artifacts")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Project name cannot be empty")
        return v


class RunConfig(BaseModel):
    """Resolved configuration for a single test run."""

    last_run_file: Optional[str] = Field(
        default=None, description="Explicit path of the last-run state file"
    )
    projects: list[ProjectConfig] = Field(default_factory=list, description="Configured projects")
    cli_project_filter: Optional[list[str]] = Field(
        default=None, description="Project names selected on the command line"
    )
    cli_list_only: bool = Field(default=False, description="Only list tests, do not run them")
    test_id_matcher: Optional[Callable[[str], bool]] = Field(
        default=None,
        exclude=True,
        description="Predicate restricting test selection by test id",
    )

    def is_test_selected(self, test_id: str) -> bool:
        """Check whether a test is eligible under the installed matcher."""
        if self.test_id_matcher is None:
            return True
        return self.test_id_matcher(test_id)

    def resolve_paths(self, base_dir: Path | str) -> "RunConfig":
        """Return a copy with relative paths anchored at base_dir."""
        base_dir = Path(base_dir)

        projects = [
            project.model_copy(
                update={"output_dir": str((base_dir / project.output_dir).resolve())}
            )
            for project in self.projects
        ]
        update: dict = {"projects": projects}
        if self.last_run_file:
            update["last_run_file"] = str((base_dir / self.last_run_file).resolve())

        return self.model_copy(update=update)

    @classmethod
    def from_file(cls, path: Path | str) -> "RunConfig":
        """Load configuration from a JSON file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(path, "r") as f:
            data = json.load(f)

        return cls.model_validate(data)

    @classmethod
    def find_and_load(cls, start_dir: Path | str | None = None) -> tuple["RunConfig", Path]:
        """Find a configuration file up the directory tree and load it.

        Returns:
            The loaded configuration and the directory it was found in
        """
        if start_dir is None:
            start_dir = Path.cwd()
        else:
            start_dir = Path(start_dir)

        config_names = ["lastrun.json", ".lastrun.json"]

        current = start_dir.resolve()
        while True:
            for name in config_names:
                config_path = current / name
                if config_path.exists():
                    return cls.from_file(config_path), current
            if current == current.parent:
                break
            current = current.parent

        raise FileNotFoundError(
            "No configuration file found. Create lastrun.json or pass --last-run-file"
        )

