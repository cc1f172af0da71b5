"""Pure filename classification for config export directories.

Given a directory listing (plain filenames, no I/O) these functions pick
out the files that belong to an entity type and extract the embedded
identifier.  An identifier is only accepted when the filename is exactly
``<prefix><identifier><suffix>`` and the identifier is non-empty and
contains no dots.  For per-bundle files the bundle segment is part of
the prefix, so bundle ``page`` never matches files of bundle ``page_2``.

Unknown entity types yield empty results; nothing here raises.
"""

from __future__ import annotations

from typing import Iterable

from drupal_config_sync.sync.patterns import (
    YAML_SUFFIX,
    EntityType,
    get_patterns,
)


def _extract(filename: str, prefix: str, suffix: str) -> str | None:
    """Return the text between *prefix* and *suffix*, if well-formed."""
    if not (filename.startswith(prefix) and filename.endswith(suffix)):
        return None
    identifier = filename[len(prefix) : len(filename) - len(suffix)]
    if not identifier or "." in identifier:
        return None
    return identifier


# ------------------------------------------------------------------
# Identifier extraction
# ------------------------------------------------------------------


def extract_bundle_id(
    filename: str, entity_type: EntityType | str
) -> str | None:
    """Extract the bundle id from a bundle definition filename.

    Returns:
        The bundle id, or ``None`` if *filename* is not a bundle file for
        *entity_type*.
    """
    patterns = get_patterns(entity_type)
    if patterns is None:
        return None
    return _extract(
        filename, patterns.bundle_prefix, patterns.bundle_suffix
    )


def extract_storage_field_name(
    filename: str, entity_type: EntityType | str
) -> str | None:
    """Extract the field name from a field storage filename."""
    patterns = get_patterns(entity_type)
    if patterns is None:
        return None
    return _extract(filename, patterns.field_storage_prefix, YAML_SUFFIX)


def extract_instance_field_name(
    filename: str, entity_type: EntityType | str, bundle: str
) -> str | None:
    """Extract the field name from a field instance filename of *bundle*."""
    patterns = get_patterns(entity_type)
    if patterns is None or not bundle:
        return None
    prefix = f"{patterns.field_instance_prefix}{bundle}."
    return _extract(filename, prefix, YAML_SUFFIX)


def extract_override_field_name(
    filename: str, entity_type: EntityType | str, bundle: str
) -> str | None:
    """Extract the field name from a base field override filename."""
    patterns = get_patterns(entity_type)
    if patterns is None or not bundle:
        return None
    prefix = f"{patterns.base_field_override_prefix}{bundle}."
    return _extract(filename, prefix, YAML_SUFFIX)


def is_field_instance_file(
    filename: str, entity_type: EntityType | str, bundle: str
) -> bool:
    """Return ``True`` if *filename* is a field instance of *bundle*."""
    return (
        extract_instance_field_name(filename, entity_type, bundle)
        is not None
    )


# ------------------------------------------------------------------
# Listing filters
# ------------------------------------------------------------------


def filter_bundle_files(
    filenames: Iterable[str], entity_type: EntityType | str
) -> list[str]:
    """Return the bundle definition files for *entity_type*."""
    return [
        f
        for f in filenames
        if extract_bundle_id(f, entity_type) is not None
    ]


def filter_field_storage_files(
    filenames: Iterable[str], entity_type: EntityType | str
) -> list[str]:
    """Return the field storage files for *entity_type*."""
    return [
        f
        for f in filenames
        if extract_storage_field_name(f, entity_type) is not None
    ]


def filter_field_instance_files(
    filenames: Iterable[str], entity_type: EntityType | str, bundle: str
) -> list[str]:
    """Return the field instance files bound to *bundle*."""
    return [
        f
        for f in filenames
        if extract_instance_field_name(f, entity_type, bundle) is not None
    ]


def filter_base_field_override_files(
    filenames: Iterable[str], entity_type: EntityType | str, bundle: str
) -> list[str]:
    """Return the base field override files for *bundle*."""
    return [
        f
        for f in filenames
        if extract_override_field_name(f, entity_type, bundle) is not None
    ]
