"""Project record persistence layer.

A project record is a small JSON document (``<projects_dir>/<slug>/project.json``)
describing one config export: its ``config_directory``, the ``entities``
index produced by the last sync pass, and the ``last_sync`` timestamp.

Key design choices:

* **Atomic writes** -- ``save()`` writes to a temp file then calls
  ``os.replace()`` so readers never see partial data.
* **Dict-based records** -- records are plain ``dict`` objects so callers
  can add their own keys; the store only requires ``slug``.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path

PROJECT_FILENAME = "project.json"


class ProjectStore:
    """Load and save project records under *projects_dir*.

    Args:
        projects_dir: Directory holding one sub-directory per project.
    """

    def __init__(self, projects_dir: Path) -> None:
        self._projects_dir = Path(projects_dir)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def exists(self, slug: str) -> bool:
        """Return ``True`` if a record for *slug* is stored."""
        return self.project_path(slug).is_file()

    def load(self, slug: str) -> dict:
        """Load the record for *slug*.

        Raises:
            FileNotFoundError: If no record exists for *slug*.
        """
        path = self.project_path(slug)
        if not path.is_file():
            raise FileNotFoundError(f'Project "{slug}" not found')
        with open(path, encoding="utf-8") as fh:
            return json.load(fh)

    def save(self, project: dict) -> None:
        """Persist *project* atomically.

        Creates the project directory if needed.

        Raises:
            ValueError: If the record has no ``slug``.
        """
        slug = project.get("slug") if project else None
        if not slug:
            raise ValueError("Invalid project record: missing slug")

        target = self.project_path(slug)
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(
            dir=str(target.parent), suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(project, fh, indent=2)
            os.replace(tmp_path, target)
        except BaseException:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def project_path(self, slug: str) -> Path:
        """Return the path of the record file for *slug*."""
        return self._projects_dir / slug / PROJECT_FILENAME
