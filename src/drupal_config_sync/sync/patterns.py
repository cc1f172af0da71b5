"""Filename conventions for each supported entity type.

The registry is immutable data: one ``EntityPatterns`` record per
``EntityType``, exposed through a read-only mapping.  Two lookups are
provided:

- ``get_patterns`` -- tolerant; returns ``None`` for unknown entity
  types.  Used by the classifier, which must never raise.
- ``require_patterns`` -- strict; raises ``UnknownEntityTypeError``.
  Used by the filename builders, where an unknown entity type is a
  caller bug rather than a data problem.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from drupal_config_sync.errors import UnknownEntityTypeError

YAML_SUFFIX = ".yml"
BASE_FIELD_OVERRIDE_PREFIX = "core.base_field_override."


class EntityType(str, Enum):
    """Content entity types known to the sync engine."""

    NODE = "node"
    MEDIA = "media"
    PARAGRAPH = "paragraph"
    TAXONOMY_TERM = "taxonomy_term"
    BLOCK_CONTENT = "block_content"


@dataclass(frozen=True)
class EntityPatterns:
    """Filename prefixes and source keys for one entity type.

    Attributes:
        bundle_prefix: Prefix of bundle definition files
            (e.g. ``"node.type."``).
        bundle_suffix: Suffix of bundle definition files.
        field_storage_prefix: Prefix of field storage files.
        field_instance_prefix: Prefix of per-bundle field instance files.
        base_field_override_prefix: Prefix of per-bundle base field
            override files.
        bundle_id_key: Key holding the bundle machine name in the bundle
            document.
        bundle_label_key: Key holding the bundle label.
        module: Module providing the entity type.
    """

    bundle_prefix: str
    bundle_suffix: str
    field_storage_prefix: str
    field_instance_prefix: str
    base_field_override_prefix: str
    bundle_id_key: str
    bundle_label_key: str
    module: str

    @property
    def config_prefix(self) -> str:
        """Config name prefix of bundle documents (``node.type``)."""
        return self.bundle_prefix.rstrip(".")


def _patterns(
    bundle_prefix: str,
    entity_type: str,
    bundle_id_key: str,
    bundle_label_key: str,
    module: str,
) -> EntityPatterns:
    return EntityPatterns(
        bundle_prefix=bundle_prefix,
        bundle_suffix=YAML_SUFFIX,
        field_storage_prefix=f"field.storage.{entity_type}.",
        field_instance_prefix=f"field.field.{entity_type}.",
        base_field_override_prefix=(
            f"{BASE_FIELD_OVERRIDE_PREFIX}{entity_type}."
        ),
        bundle_id_key=bundle_id_key,
        bundle_label_key=bundle_label_key,
        module=module,
    )


ENTITY_TYPE_PATTERNS: Mapping[EntityType, EntityPatterns] = MappingProxyType(
    {
        EntityType.NODE: _patterns(
            "node.type.", "node", "type", "name", "node"
        ),
        EntityType.MEDIA: _patterns(
            "media.type.", "media", "id", "label", "media"
        ),
        EntityType.PARAGRAPH: _patterns(
            "paragraphs.paragraphs_type.",
            "paragraph",
            "id",
            "label",
            "paragraphs",
        ),
        EntityType.TAXONOMY_TERM: _patterns(
            "taxonomy.vocabulary.",
            "taxonomy_term",
            "vid",
            "name",
            "taxonomy",
        ),
        EntityType.BLOCK_CONTENT: _patterns(
            "block_content.type.",
            "block_content",
            "id",
            "label",
            "block_content",
        ),
    }
)


def to_entity_type(entity_type: EntityType | str) -> EntityType | None:
    """Coerce a string to ``EntityType``; ``None`` if it is not one."""
    if isinstance(entity_type, EntityType):
        return entity_type
    try:
        return EntityType(entity_type)
    except ValueError:
        return None


def get_patterns(entity_type: EntityType | str) -> EntityPatterns | None:
    """Return the patterns for *entity_type*, or ``None`` if unknown."""
    et = to_entity_type(entity_type)
    if et is None:
        return None
    return ENTITY_TYPE_PATTERNS[et]


def require_patterns(entity_type: EntityType | str) -> EntityPatterns:
    """Return the patterns for *entity_type*.

    Raises:
        UnknownEntityTypeError: If *entity_type* is not a known type.
    """
    patterns = get_patterns(entity_type)
    if patterns is None:
        raise UnknownEntityTypeError(entity_type)
    return patterns


# ---------------------------------------------------------------------------
# Filename builders
# ---------------------------------------------------------------------------


def bundle_filename(entity_type: EntityType | str, bundle: str) -> str:
    """Return the bundle definition filename (``node.type.page.yml``)."""
    p = require_patterns(entity_type)
    return f"{p.bundle_prefix}{bundle}{p.bundle_suffix}"


def bundle_config_name(entity_type: EntityType | str, bundle: str) -> str:
    """Return the config name of a bundle (``node.type.page``)."""
    return f"{require_patterns(entity_type).config_prefix}.{bundle}"


def field_storage_filename(
    entity_type: EntityType | str, field_name: str
) -> str:
    """Return the field storage filename for *field_name*."""
    p = require_patterns(entity_type)
    return f"{p.field_storage_prefix}{field_name}{YAML_SUFFIX}"


def field_instance_filename(
    entity_type: EntityType | str, bundle: str, field_name: str
) -> str:
    """Return the field instance filename for *field_name* on *bundle*."""
    p = require_patterns(entity_type)
    return f"{p.field_instance_prefix}{bundle}.{field_name}{YAML_SUFFIX}"


def base_field_override_filename(
    entity_type: EntityType | str, bundle: str, field_name: str
) -> str:
    """Return the base field override filename for *field_name* on *bundle*."""
    p = require_patterns(entity_type)
    return (
        f"{p.base_field_override_prefix}{bundle}.{field_name}{YAML_SUFFIX}"
    )
