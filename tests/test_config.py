"""Tests for the configuration module."""

import json
import tempfile
from pathlib import Path

import pytest

from lastrun.config import ProjectConfig, RunConfig


class TestProjectConfig:
    """Tests for ProjectConfig."""

    def test_default_values(self):
        """Test default values are set correctly."""
        config = ProjectConfig(name="chromium")
        assert config.name == "chromium"
        assert config.output_dir == "test-results"

    def test_name_validation(self):
        """Test that the project name cannot be blank."""
        with pytest.raises(ValueError):
            ProjectConfig(name="  ")


class TestRunConfig:
    """Tests for RunConfig."""

    def test_default_values(self):
        """Test default values are set correctly."""
        config = RunConfig()
        assert config.last_run_file is None
        assert config.projects == []
        assert config.cli_project_filter is None
        assert config.cli_list_only is False
        assert config.test_id_matcher is None

    def test_is_test_selected_without_matcher(self):
        """Test that every test is eligible when no matcher is installed."""
        config = RunConfig()
        assert config.is_test_selected("anything")

    def test_is_test_selected_with_matcher(self):
        """Test that the installed matcher decides eligibility."""
        config = RunConfig()
        config.test_id_matcher = lambda test_id: test_id.startswith("a")

        assert config.is_test_selected("abc")
        assert not config.is_test_selected("xyz")

    def test_from_file(self):
        """Test loading configuration from a file."""
        config_data = {
            "projects": [{"name": "chromium", "output_dir": "out/chromium"}],
            "cli_list_only": True,
        }

        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "lastrun.json"
            path.write_text(json.dumps(config_data))

            config = RunConfig.from_file(path)
            assert config.projects[0].name == "chromium"
            assert config.projects[0].output_dir == "out/chromium"
            assert config.cli_list_only is True

    def test_from_file_not_found(self):
        """Test loading from non-existent file raises error."""
        with pytest.raises(FileNotFoundError):
            RunConfig.from_file("/nonexistent/path.json")

    def test_find_and_load_searches_parents(self):
        """Test that the config file is found in a parent directory."""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir).resolve()
            (root / "lastrun.json").write_text(json.dumps({"projects": [{"name": "root"}]}))
            nested = root / "a" / "b"
            nested.mkdir(parents=True)

            config, base_dir = RunConfig.find_and_load(nested)
            assert config.projects[0].name == "root"
            assert base_dir == root

    def test_resolve_paths(self):
        """Test that relative paths are anchored at the base directory."""
        config = RunConfig(
            last_run_file="state/last.json",
            projects=[ProjectConfig(name="p", output_dir="out")],
        )

        with tempfile.TemporaryDirectory() as tmpdir:
            base_dir = Path(tmpdir).resolve()
            resolved = config.resolve_paths(base_dir)

            assert Path(resolved.projects[0].output_dir) == base_dir / "out"
            assert Path(resolved.last_run_file) == base_dir / "state" / "last.json"
            # original is untouched
            assert config.projects[0].output_dir == "out"
