"""Tests for project record persistence.

Covers:
- load() of a missing project raises
- save() creates directories and writes atomically
- save/load round-trip preserves all keys
- save() rejects records without a slug
"""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from drupal_config_sync.sync.state import PROJECT_FILENAME, ProjectStore

# ---------------------------------------------------------------------------
# Load / Save
# ---------------------------------------------------------------------------


class TestProjectStoreLoad:
    """Tests for ProjectStore.load()."""

    def test_missing_project_raises(self, tmp_path: Path):
        store = ProjectStore(tmp_path)
        with pytest.raises(FileNotFoundError, match='Project "nope" not found'):
            store.load("nope")

    def test_exists(self, tmp_path: Path):
        store = ProjectStore(tmp_path)
        assert not store.exists("site")
        store.save({"slug": "site"})
        assert store.exists("site")


class TestProjectStoreSave:
    """Tests for ProjectStore.save()."""

    def test_creates_nested_directories(self, tmp_path: Path):
        store = ProjectStore(tmp_path / "a" / "b")
        store.save({"slug": "site", "config_directory": "/srv/config"})
        path = tmp_path / "a" / "b" / "site" / PROJECT_FILENAME
        assert path.is_file()
        assert json.loads(path.read_text())["config_directory"] == "/srv/config"

    def test_round_trip(self, tmp_path: Path):
        store = ProjectStore(tmp_path)
        project = {
            "slug": "site",
            "config_directory": "/srv/config",
            "entities": {"node": {"page": {"id": "page", "fields": {}}}},
            "last_sync": "2026-01-01T00:00:00+00:00",
            "custom": [1, 2, 3],
        }
        store.save(project)
        assert store.load("site") == project

    def test_overwrite(self, tmp_path: Path):
        store = ProjectStore(tmp_path)
        store.save({"slug": "site", "n": 1})
        store.save({"slug": "site", "n": 2})
        assert store.load("site")["n"] == 2

    def test_no_temp_files_left(self, tmp_path: Path):
        store = ProjectStore(tmp_path)
        store.save({"slug": "site"})
        assert [p.name for p in (tmp_path / "site").iterdir()] == [
            PROJECT_FILENAME
        ]

    def test_failed_write_keeps_previous_record(self, tmp_path: Path):
        store = ProjectStore(tmp_path)
        store.save({"slug": "site", "n": 1})

        with patch(
            "drupal_config_sync.sync.state.os.replace",
            side_effect=OSError("disk full"),
        ):
            with pytest.raises(OSError):
                store.save({"slug": "site", "n": 2})

        assert store.load("site") == {"slug": "site", "n": 1}
        assert [p.name for p in (tmp_path / "site").iterdir()] == [
            PROJECT_FILENAME
        ]

    @pytest.mark.parametrize("project", [{}, {"slug": ""}, {"name": "x"}])
    def test_missing_slug_rejected(self, tmp_path: Path, project):
        with pytest.raises(ValueError):
            ProjectStore(tmp_path).save(project)

    def test_project_path(self, tmp_path: Path):
        assert ProjectStore(tmp_path).project_path("site") == (
            tmp_path / "site" / "project.json"
        )
