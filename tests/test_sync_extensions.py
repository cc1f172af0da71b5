"""Tests for core.extension.yml reconciliation."""

from __future__ import annotations

import copy

import yaml

from drupal_config_sync.sync.extensions import (
    EXTENSION_FILENAME,
    RECOMMENDED_MODULES,
    check_recommended_modules,
    dump_extension_config,
    enable_modules,
    get_missing_recommended_modules,
    parse_enabled_modules,
    read_extension_config,
    reconcile_modules,
)

DIR = "/export"


# ---------------------------------------------------------------------------
# reconcile_modules
# ---------------------------------------------------------------------------


class TestReconcileModules:
    def test_adds_with_weight_zero_and_sorts(self):
        current = {"module": {"node": 0, "user": 0}, "theme": {}, "profile": "standard"}

        updated = reconcile_modules(current, {"paragraphs", "media"})

        assert updated["module"] == {
            "media": 0,
            "node": 0,
            "paragraphs": 0,
            "user": 0,
        }
        assert list(updated["module"]) == ["media", "node", "paragraphs", "user"]
        assert updated["profile"] == "standard"

    def test_existing_weights_preserved(self):
        current = {"module": {"views": 10, "node": 0}}
        updated = reconcile_modules(current, ["views", "node", "media"])
        assert updated["module"]["views"] == 10

    def test_absent_document(self):
        updated = reconcile_modules(None, ["node"])
        assert updated == {"module": {"node": 0}, "theme": {}, "profile": ""}

    def test_idempotent(self):
        once = reconcile_modules({"module": {"user": 0}}, ["node", "media"])
        twice = reconcile_modules(once, ["node", "media"])
        assert once == twice

    def test_input_not_modified(self):
        current = {"module": {"user": 0}, "theme": {"olivero": 0}}
        snapshot = copy.deepcopy(current)
        reconcile_modules(current, ["node"])
        assert current == snapshot

    def test_other_keys_untouched(self):
        current = {"module": {}, "theme": {"claro": 0}, "_core": {"hash": "x"}}
        updated = reconcile_modules(current, ["node"])
        assert updated["theme"] == {"claro": 0}
        assert updated["_core"] == {"hash": "x"}

    def test_never_removes(self):
        updated = reconcile_modules({"module": {"forum": 0}}, [])
        assert updated["module"] == {"forum": 0}

    def test_non_mapping_module_section_replaced(self, caplog):
        updated = reconcile_modules({"module": ["node"]}, ["media"])
        assert updated["module"] == {"media": 0}
        assert "non-mapping" in caplog.text


class TestHelpers:
    def test_parse_enabled_modules(self):
        assert parse_enabled_modules({"module": {"node": 0, "user": 0}}) == [
            "node",
            "user",
        ]
        assert parse_enabled_modules(None) == []
        assert parse_enabled_modules({"module": "broken"}) == []

    def test_missing_recommended_in_order(self):
        missing = get_missing_recommended_modules(["node", "taxonomy"])
        assert missing == [
            m for m in RECOMMENDED_MODULES if m not in ("node", "taxonomy")
        ]

    def test_dump_keeps_sorted_module_order(self):
        text = dump_extension_config(
            reconcile_modules({"module": {"user": 0}}, ["block", "node"])
        )
        assert text.index("block") < text.index("node") < text.index("user")
        assert yaml.safe_load(text)["module"] == {"block": 0, "node": 0, "user": 0}


# ---------------------------------------------------------------------------
# Directory operations
# ---------------------------------------------------------------------------


class TestDirectoryOperations:
    async def test_read_absent_file(self, memory_source):
        memory_source.directories[DIR] = {}
        assert await read_extension_config(DIR, memory_source) is None

    async def test_read_invalid_file(self, memory_source):
        memory_source.directories[DIR] = {EXTENSION_FILENAME: "- a\n- b\n"}
        assert await read_extension_config(DIR, memory_source) is None

    async def test_check_recommended(self, memory_source, article_export):
        memory_source.directories[DIR] = article_export
        status = await check_recommended_modules(DIR, memory_source)
        assert status["enabled_modules"] == ["node", "user"]
        assert "node" not in status["missing_modules"]
        assert "media" in status["missing_modules"]

    async def test_enable_writes_file(self, memory_source, article_export):
        memory_source.directories[DIR] = article_export

        updated = await enable_modules(DIR, ["media", "node"], memory_source)

        assert memory_source.writes == [(DIR, EXTENSION_FILENAME)]
        written = yaml.safe_load(memory_source.directories[DIR][EXTENSION_FILENAME])
        assert written == updated
        assert written["module"] == {"media": 0, "node": 0, "user": 0}
        assert written["profile"] == "standard"

    async def test_enable_creates_missing_file(self, config_dir):
        directory = config_dir({})
        await enable_modules(str(directory), ["node"])
        written = yaml.safe_load((directory / EXTENSION_FILENAME).read_text())
        assert written == {"module": {"node": 0}, "theme": {}, "profile": ""}
