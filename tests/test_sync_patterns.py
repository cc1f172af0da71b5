"""Tests for the entity type pattern registry and filename builders."""

from __future__ import annotations

import pytest

from drupal_config_sync.errors import UnknownEntityTypeError
from drupal_config_sync.sync.patterns import (
    ENTITY_TYPE_PATTERNS,
    EntityType,
    base_field_override_filename,
    bundle_config_name,
    bundle_filename,
    field_instance_filename,
    field_storage_filename,
    get_patterns,
    require_patterns,
    to_entity_type,
)


class TestRegistry:
    def test_every_entity_type_has_patterns(self):
        assert set(ENTITY_TYPE_PATTERNS) == set(EntityType)

    def test_registry_is_read_only(self):
        with pytest.raises(TypeError):
            ENTITY_TYPE_PATTERNS[EntityType.NODE] = None  # type: ignore[index]

    @pytest.mark.parametrize(
        "entity_type, prefix, id_key, label_key",
        [
            ("node", "node.type.", "type", "name"),
            ("media", "media.type.", "id", "label"),
            ("paragraph", "paragraphs.paragraphs_type.", "id", "label"),
            ("taxonomy_term", "taxonomy.vocabulary.", "vid", "name"),
            ("block_content", "block_content.type.", "id", "label"),
        ],
    )
    def test_bundle_conventions(self, entity_type, prefix, id_key, label_key):
        patterns = get_patterns(entity_type)
        assert patterns.bundle_prefix == prefix
        assert patterns.bundle_suffix == ".yml"
        assert patterns.bundle_id_key == id_key
        assert patterns.bundle_label_key == label_key

    def test_field_prefixes_use_entity_type(self):
        patterns = get_patterns(EntityType.TAXONOMY_TERM)
        assert patterns.field_storage_prefix == "field.storage.taxonomy_term."
        assert patterns.field_instance_prefix == "field.field.taxonomy_term."
        assert (
            patterns.base_field_override_prefix
            == "core.base_field_override.taxonomy_term."
        )


class TestLookup:
    def test_to_entity_type_accepts_strings(self):
        assert to_entity_type("media") is EntityType.MEDIA
        assert to_entity_type(EntityType.NODE) is EntityType.NODE

    def test_to_entity_type_unknown(self):
        assert to_entity_type("comment") is None

    def test_get_patterns_unknown_returns_none(self):
        assert get_patterns("user") is None

    def test_require_patterns_unknown_raises(self):
        with pytest.raises(UnknownEntityTypeError) as exc_info:
            require_patterns("user")
        assert "user" in str(exc_info.value)

    def test_unknown_entity_type_error_is_value_error(self):
        with pytest.raises(ValueError):
            require_patterns("")


class TestFilenameBuilders:
    def test_bundle_filename(self):
        assert bundle_filename("node", "article") == "node.type.article.yml"
        assert (
            bundle_filename(EntityType.PARAGRAPH, "hero")
            == "paragraphs.paragraphs_type.hero.yml"
        )

    def test_bundle_config_name(self):
        assert bundle_config_name("taxonomy_term", "tags") == (
            "taxonomy.vocabulary.tags"
        )

    def test_field_storage_filename(self):
        assert field_storage_filename("media", "field_media_image") == (
            "field.storage.media.field_media_image.yml"
        )

    def test_field_instance_filename(self):
        assert field_instance_filename("node", "article", "body") == (
            "field.field.node.article.body.yml"
        )

    def test_base_field_override_filename(self):
        assert base_field_override_filename("node", "page", "title") == (
            "core.base_field_override.node.page.title.yml"
        )

    @pytest.mark.parametrize(
        "builder, args",
        [
            (bundle_filename, ("comment", "x")),
            (bundle_config_name, ("comment", "x")),
            (field_storage_filename, ("comment", "x")),
            (field_instance_filename, ("comment", "x", "y")),
            (base_field_override_filename, ("comment", "x", "y")),
        ],
    )
    def test_builders_reject_unknown_entity_type(self, builder, args):
        with pytest.raises(UnknownEntityTypeError):
            builder(*args)
