"""Shared pytest fixtures for drupal-config-sync tests."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict

import pytest
from dotenv import load_dotenv

from drupal_config_sync.errors import ConfigDirectoryError

load_dotenv()


def pytest_addoption(parser):
    """Add custom CLI options for test filtering."""
    parser.addoption(
        "--run-live",
        action="store_true",
        default=False,
        help="Run tests against the export named by DRUPAL_CONFIG_DIR",
    )


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "live: mark test as requiring a real configuration export"
    )


def pytest_collection_modifyitems(config, items):
    """Skip live tests unless --run-live is passed."""
    if config.getoption("--run-live"):
        return
    skip_live = pytest.mark.skip(reason="need --run-live option to run")
    for item in items:
        if "live" in item.keywords:
            item.add_marker(skip_live)


class MemoryConfigSource:
    """In-memory ``ConfigSource`` keyed by directory then filename.

    A directory that was never registered behaves like a missing one.
    Reads of names in ``unreadable`` raise ``OSError``.
    """

    def __init__(self, directories: Dict[str, Dict[str, str]] | None = None):
        self.directories: Dict[str, Dict[str, str]] = directories or {}
        self.unreadable: set[str] = set()
        self.reads: list[str] = []
        self.writes: list[tuple[str, str]] = []
        self.list_calls = 0

    def _files(self, directory: str) -> Dict[str, str]:
        if directory not in self.directories:
            raise ConfigDirectoryError(directory, "does not exist")
        return self.directories[directory]

    async def list_files(self, directory: str) -> list[str]:
        self.list_calls += 1
        return sorted(
            name for name in self._files(directory) if name.endswith(".yml")
        )

    async def read_text(self, directory: str, filename: str) -> str:
        files = self._files(directory)
        self.reads.append(filename)
        if filename in self.unreadable:
            raise OSError(f"permission denied: {filename}")
        return files[filename]

    async def write_text(
        self, directory: str, filename: str, content: str
    ) -> None:
        self.directories.setdefault(directory, {})[filename] = content
        self.writes.append((directory, filename))


@pytest.fixture
def memory_source() -> MemoryConfigSource:
    """An empty in-memory config source."""
    return MemoryConfigSource()


@pytest.fixture
def config_dir(tmp_path: Path) -> Callable[[Dict[str, str]], Path]:
    """Factory fixture writing ``{filename: yaml_text}`` to a fresh directory."""

    def _build(files: Dict[str, str]) -> Path:
        directory = tmp_path / "config" / "sync"
        directory.mkdir(parents=True, exist_ok=True)
        for name, text in files.items():
            (directory / name).write_text(text, encoding="utf-8")
        return directory

    return _build


ARTICLE_EXPORT: Dict[str, str] = {
    "node.type.article.yml": (
        "type: article\nname: Article\ndescription: Time-sensitive content\n"
    ),
    "node.type.page.yml": "type: page\nname: 'Basic page'\n",
    "field.storage.node.body.yml": (
        "field_name: body\ntype: text_with_summary\ncardinality: 1\n"
        "settings: {}\n"
    ),
    "field.storage.node.field_tags.yml": (
        "field_name: field_tags\ntype: entity_reference\ncardinality: -1\n"
        "settings:\n  target_type: taxonomy_term\n"
    ),
    "field.field.node.article.body.yml": (
        "field_name: body\nlabel: Body\nfield_type: text_with_summary\n"
        "required: false\nsettings:\n  display_summary: true\n"
    ),
    "field.field.node.article.field_tags.yml": (
        "field_name: field_tags\nlabel: Tags\nfield_type: entity_reference\n"
        "settings:\n  handler: 'default:taxonomy_term'\n"
    ),
    "field.field.node.page.body.yml": (
        "field_name: body\nlabel: Body\nfield_type: text_with_summary\n"
    ),
    "taxonomy.vocabulary.tags.yml": "vid: tags\nname: Tags\n",
    "core.extension.yml": "module:\n  node: 0\n  user: 0\ntheme: {}\nprofile: standard\n",
}


@pytest.fixture
def article_export() -> Dict[str, str]:
    """A small export with two node types and a vocabulary."""
    return dict(ARTICLE_EXPORT)
