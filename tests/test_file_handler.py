"""Tests for file_handler module: directory validation, encoding-aware read/write, config sources."""

import os
import sys
from pathlib import Path

import pytest

from drupal_config_sync.errors import ConfigDirectoryError
from drupal_config_sync.file_handler import (
    LocalConfigSource,
    list_config_files,
    read_file_with_encoding,
    read_text_file,
    validate_config_directory,
    write_file,
)

# =============================================================================
# validate_config_directory
# =============================================================================


class TestValidateConfigDirectory:
    """Tests for validate_config_directory(path)."""

    def test_valid_directory(self, tmp_path):
        assert validate_config_directory(str(tmp_path)) == tmp_path.resolve()

    def test_missing_directory(self, tmp_path):
        missing = tmp_path / "missing"
        with pytest.raises(ConfigDirectoryError) as exc_info:
            validate_config_directory(missing)
        assert exc_info.value.reason == "does not exist"
        assert exc_info.value.directory == str(missing)
        assert str(missing) in str(exc_info.value)

    def test_file_instead_of_directory(self, tmp_path):
        f = tmp_path / "core.extension.yml"
        f.write_text("module: {}\n")
        with pytest.raises(ConfigDirectoryError, match="is not a directory"):
            validate_config_directory(f)

    @pytest.mark.skipif(
        sys.platform == "win32" or os.geteuid() == 0,
        reason="permission bits are not enforced",
    )
    def test_unreadable_directory(self, tmp_path):
        locked = tmp_path / "locked"
        locked.mkdir()
        locked.chmod(0)
        try:
            with pytest.raises(ConfigDirectoryError, match="is not readable"):
                validate_config_directory(locked)
        finally:
            locked.chmod(0o755)


# =============================================================================
# list_config_files
# =============================================================================


class TestListConfigFiles:
    def test_only_yml_files_sorted(self, tmp_path):
        for name in ("b.yml", "a.yml", "notes.txt", "c.yaml"):
            (tmp_path / name).write_text("x: 1\n")
        (tmp_path / "sub.yml").mkdir()

        assert list_config_files(tmp_path) == ["a.yml", "b.yml"]

    def test_missing_directory(self, tmp_path):
        with pytest.raises(ConfigDirectoryError):
            list_config_files(tmp_path / "missing")


# =============================================================================
# Read / write
# =============================================================================


class TestReadWrite:
    def test_utf8(self, tmp_path):
        f = tmp_path / "node.type.page.yml"
        f.write_text("name: 'Página básica'\n", encoding="utf-8")
        content, encoding = read_file_with_encoding(f)
        assert content == "name: 'Página básica'\n"
        assert encoding == "utf-8"

    def test_empty_file(self, tmp_path):
        f = tmp_path / "empty.yml"
        f.write_bytes(b"")
        assert read_file_with_encoding(f) == ("", "utf-8")

    def test_ascii_reported_as_utf8(self, tmp_path):
        f = tmp_path / "plain.yml"
        f.write_bytes(b"type: page\nname: Page\n")
        content, encoding = read_file_with_encoding(f)
        assert content == "type: page\nname: Page\n"
        assert encoding == "utf-8"

    def test_read_text_file(self, tmp_path):
        f = tmp_path / "x.yml"
        f.write_text("id: x\n")
        assert read_text_file(f) == "id: x\n"

    def test_write_creates_parents(self, tmp_path):
        target = tmp_path / "a" / "b" / "core.extension.yml"
        written = write_file(target, "module: {}\n")
        assert target.read_text() == "module: {}\n"
        assert written == len("module: {}\n")


# =============================================================================
# LocalConfigSource
# =============================================================================


class TestLocalConfigSource:
    async def test_list_read_write(self, tmp_path: Path):
        source = LocalConfigSource()
        await source.write_text(str(tmp_path), "node.type.page.yml", "type: page\n")

        assert await source.list_files(str(tmp_path)) == ["node.type.page.yml"]
        assert (
            await source.read_text(str(tmp_path), "node.type.page.yml")
            == "type: page\n"
        )

    async def test_list_missing_directory(self, tmp_path: Path):
        with pytest.raises(ConfigDirectoryError):
            await LocalConfigSource().list_files(str(tmp_path / "missing"))
