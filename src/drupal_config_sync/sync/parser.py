"""Tolerant YAML parsing and per-file-kind projections.

``parse_yaml`` never raises: malformed or empty documents come back as
``None`` and the caller skips the file.  The projection functions read
the keys the export uses for each file kind and fill anything missing
with a typed default:

=====================  ==========================================
File kind              Source keys
=====================  ==========================================
node bundle            ``type``, ``name``, ``description``
taxonomy vocabulary    ``vid``, ``name``, ``description``
other bundles          ``id``, ``label``, ``description``
media bundle           + ``source``
field storage          ``field_name``, ``type``, ``cardinality``,
                       ``settings``
field instance         ``field_name``, ``label``, ``field_type``,
base field override    ``required``, ``description``, ``settings``
=====================  ==========================================
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

import yaml

from drupal_config_sync.sync.models import (
    BaseFieldOverrideFragment,
    Bundle,
    FieldInstanceFragment,
    FieldStorageFragment,
)
from drupal_config_sync.sync.patterns import (
    EntityType,
    require_patterns,
    to_entity_type,
)

logger = logging.getLogger(__name__)


def parse_yaml(text: str) -> Any | None:
    """Parse a YAML string safely.

    Args:
        text: YAML document text.

    Returns:
        The decoded value, or ``None`` when the text is empty, decodes to
        a null/empty document, or is not valid YAML.
    """
    try:
        result = yaml.safe_load(text)
    # the timestamp constructor raises ValueError for impossible dates
    except (yaml.YAMLError, ValueError, TypeError) as exc:
        logger.debug("YAML decode failed: %s", exc)
        return None
    return result or None


# ---------------------------------------------------------------------------
# Value coercion
# ---------------------------------------------------------------------------


def _text(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    return str(value)


def _mapping(data: Mapping[str, Any], key: str) -> dict[str, Any]:
    value = data.get(key)
    return dict(value) if isinstance(value, Mapping) else {}


def _flag(data: Mapping[str, Any], key: str) -> bool:
    return bool(data.get(key) or False)


def _cardinality(data: Mapping[str, Any]) -> int:
    value = data.get("cardinality")
    # bool is an int subclass; a YAML "true" is not a cardinality
    if isinstance(value, bool) or not isinstance(value, int) or value == 0:
        return 1
    return value


# ---------------------------------------------------------------------------
# Bundle projections
# ---------------------------------------------------------------------------


def parse_bundle_config(
    data: Mapping[str, Any], entity_type: EntityType | str
) -> Bundle:
    """Project a bundle document for *entity_type* into a ``Bundle``.

    Raises:
        UnknownEntityTypeError: If *entity_type* is not a known type.
    """
    patterns = require_patterns(entity_type)
    bundle_id = _text(data, patterns.bundle_id_key)
    label = _text(data, patterns.bundle_label_key)
    description = _text(data, "description")

    match to_entity_type(entity_type):
        case EntityType.MEDIA:
            return Bundle(
                id=bundle_id,
                label=label,
                description=description,
                source=_text(data, "source"),
            )
        case _:
            return Bundle(id=bundle_id, label=label, description=description)


# ---------------------------------------------------------------------------
# Field projections
# ---------------------------------------------------------------------------


def parse_field_storage(data: Mapping[str, Any]) -> FieldStorageFragment:
    """Project a ``field.storage.*`` document."""
    return FieldStorageFragment(
        name=_text(data, "field_name"),
        type=_text(data, "type"),
        cardinality=_cardinality(data),
        settings=_mapping(data, "settings"),
    )


def parse_field_instance(data: Mapping[str, Any]) -> FieldInstanceFragment:
    """Project a ``field.field.*`` document."""
    return FieldInstanceFragment(
        name=_text(data, "field_name"),
        label=_text(data, "label"),
        type=_text(data, "field_type"),
        required=_flag(data, "required"),
        description=_text(data, "description"),
        settings=_mapping(data, "settings"),
    )


def parse_base_field_override(
    data: Mapping[str, Any],
) -> BaseFieldOverrideFragment:
    """Project a ``core.base_field_override.*`` document."""
    return BaseFieldOverrideFragment(
        name=_text(data, "field_name"),
        label=_text(data, "label"),
        type=_text(data, "field_type"),
        required=_flag(data, "required"),
        description=_text(data, "description"),
        settings=_mapping(data, "settings"),
    )
