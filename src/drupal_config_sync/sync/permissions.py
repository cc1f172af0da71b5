"""Bidirectional codec between permission descriptors and permission keys.

Each entity type owns an ordered tuple of ``PermissionTemplate`` records.
A template pairs a short name (``create``, ``edit_own``, ...) with a key
pattern holding one ``{bundle}`` placeholder.

* ``encode_permission`` substitutes the bundle into the template for a
  short name.
* ``decode_permission`` tries every template of every entity type in a
  fixed order and returns the first match.  The placeholder only matches
  machine-name characters (``[a-z0-9_]+``), which keeps the template set
  unambiguous: no literal key matches two templates.

Keys that match no template (``access content``, ``administer nodes``)
decode to ``None`` and are left out of every grouping.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Mapping

from pydantic import BaseModel

from drupal_config_sync.sync.patterns import EntityType, to_entity_type

BUNDLE_PLACEHOLDER = "{bundle}"
ALL_PERMISSIONS = "all"
NO_PERMISSIONS = "none"

_BUNDLE_PATTERN = r"([a-z0-9_]+)"


@dataclass(frozen=True)
class PermissionTemplate:
    """One permission of an entity type.

    Attributes:
        short_name: Short name used on the command line.
        key: Permission key with a ``{bundle}`` placeholder.
        label: Human-readable label.
    """

    short_name: str
    key: str
    label: str

    def render(self, bundle: str) -> str:
        """Return the permission key for *bundle*."""
        return self.key.replace(BUNDLE_PLACEHOLDER, bundle)


class PermissionDescriptor(BaseModel):
    """Structured form of a bundle permission key."""

    entity_type: EntityType
    bundle: str
    short_name: str

    model_config = {"frozen": True}

    @property
    def label(self) -> str | None:
        """Label of the matching template."""
        template = _find_template(self.entity_type, self.short_name)
        return template.label if template else None

    @property
    def key(self) -> str | None:
        """The encoded permission key."""
        return encode_permission(
            self.entity_type, self.bundle, self.short_name
        )


def _templates(*rows: tuple[str, str, str]) -> tuple[PermissionTemplate, ...]:
    return tuple(PermissionTemplate(*row) for row in rows)


PERMISSIONS_BY_ENTITY_TYPE: Mapping[
    EntityType, tuple[PermissionTemplate, ...]
] = MappingProxyType(
    {
        EntityType.NODE: _templates(
            ("create", "create {bundle} content", "Create new content"),
            ("edit_own", "edit own {bundle} content", "Edit own content"),
            ("edit_any", "edit any {bundle} content", "Edit any content"),
            ("delete_own", "delete own {bundle} content", "Delete own content"),
            ("delete_any", "delete any {bundle} content", "Delete any content"),
            ("view_revisions", "view {bundle} revisions", "View revisions"),
            ("revert_revisions", "revert {bundle} revisions", "Revert revisions"),
            ("delete_revisions", "delete {bundle} revisions", "Delete revisions"),
        ),
        EntityType.MEDIA: _templates(
            ("create", "create {bundle} media", "Create new media"),
            ("edit_own", "edit own {bundle} media", "Edit own media"),
            ("edit_any", "edit any {bundle} media", "Edit any media"),
            ("delete_own", "delete own {bundle} media", "Delete own media"),
            ("delete_any", "delete any {bundle} media", "Delete any media"),
            (
                "view_revisions",
                "view any {bundle} media revisions",
                "View media revisions",
            ),
            (
                "revert_revisions",
                "revert any {bundle} media revisions",
                "Revert media revisions",
            ),
            (
                "delete_revisions",
                "delete any {bundle} media revisions",
                "Delete media revisions",
            ),
        ),
        EntityType.TAXONOMY_TERM: _templates(
            ("create", "create terms in {bundle}", "Create terms"),
            ("edit", "edit terms in {bundle}", "Edit terms"),
            ("delete", "delete terms in {bundle}", "Delete terms"),
            (
                "view_revisions",
                "view term revisions in {bundle}",
                "View term revisions",
            ),
            (
                "revert_revisions",
                "revert term revisions in {bundle}",
                "Revert term revisions",
            ),
            (
                "delete_revisions",
                "delete term revisions in {bundle}",
                "Delete term revisions",
            ),
        ),
        EntityType.BLOCK_CONTENT: _templates(
            ("create", "create {bundle} block content", "Create content block"),
            ("edit", "edit any {bundle} block content", "Edit content block"),
            ("delete", "delete any {bundle} block content", "Delete content block"),
            (
                "view_history",
                "view any {bundle} block content history",
                "View history",
            ),
            (
                "revert_revisions",
                "revert any {bundle} block content revisions",
                "Revert revisions",
            ),
            (
                "delete_revisions",
                "delete any {bundle} block content revisions",
                "Delete revisions",
            ),
        ),
        # Paragraph access is not granted per bundle.
        EntityType.PARAGRAPH: (),
    }
)


def _compile(template: PermissionTemplate) -> re.Pattern[str]:
    prefix, _, suffix = template.key.partition(BUNDLE_PLACEHOLDER)
    return re.compile(re.escape(prefix) + _BUNDLE_PATTERN + re.escape(suffix))


# Decode order: entity types as declared above, templates in list order.
_DECODE_TABLE: tuple[
    tuple[EntityType, PermissionTemplate, re.Pattern[str]], ...
] = tuple(
    (entity_type, template, _compile(template))
    for entity_type, templates in PERMISSIONS_BY_ENTITY_TYPE.items()
    for template in templates
)


# ---------------------------------------------------------------------------
# Template lookup
# ---------------------------------------------------------------------------


def get_permission_templates(
    entity_type: EntityType | str,
) -> tuple[PermissionTemplate, ...]:
    """Return the templates of *entity_type* (empty if unknown)."""
    et = to_entity_type(entity_type)
    if et is None:
        return ()
    return PERMISSIONS_BY_ENTITY_TYPE[et]


def _find_template(
    entity_type: EntityType | str, short_name: str
) -> PermissionTemplate | None:
    for template in get_permission_templates(entity_type):
        if template.short_name == short_name:
            return template
    return None


def get_short_permission_names(entity_type: EntityType | str) -> list[str]:
    """Return the short names available for *entity_type*."""
    return [t.short_name for t in get_permission_templates(entity_type)]


def get_permissions_for_bundle(
    entity_type: EntityType | str, bundle: str
) -> list[str]:
    """Return every permission key of *bundle*, in template order."""
    return [t.render(bundle) for t in get_permission_templates(entity_type)]


def get_permission_label(key: str) -> str | None:
    """Return the label of a bundle permission key, or ``None``."""
    descriptor = decode_permission(key)
    return descriptor.label if descriptor else None


# ---------------------------------------------------------------------------
# Codec
# ---------------------------------------------------------------------------


def encode_permission(
    entity_type: EntityType | str, bundle: str, short_name: str
) -> str | None:
    """Build the permission key for a bundle permission.

    The bundle is substituted verbatim.

    Returns:
        The key, or ``None`` if *short_name* is not a permission of
        *entity_type*.
    """
    template = _find_template(entity_type, short_name)
    if template is None:
        return None
    return template.render(bundle)


def decode_permission(key: str) -> PermissionDescriptor | None:
    """Parse a permission key into a descriptor.

    Returns:
        The descriptor of the first matching template, or ``None`` for
        keys that match no template.  Never raises.
    """
    if not isinstance(key, str):
        return None
    for entity_type, template, pattern in _DECODE_TABLE:
        match = pattern.fullmatch(key)
        if match:
            return PermissionDescriptor(
                entity_type=entity_type,
                bundle=match.group(1),
                short_name=template.short_name,
            )
    return None


# ---------------------------------------------------------------------------
# Helpers over key lists
# ---------------------------------------------------------------------------


def expand_short_permissions(
    entity_type: EntityType | str,
    bundle: str,
    short_names: Iterable[str],
) -> list[str]:
    """Translate short names into permission keys for *bundle*.

    ``all`` expands to every permission of the entity type and ``none``
    to no permissions.  Unknown short names are dropped.
    """
    names = list(short_names)
    if NO_PERMISSIONS in names:
        return []
    if ALL_PERMISSIONS in names:
        return get_permissions_for_bundle(entity_type, bundle)

    keys: list[str] = []
    for name in names:
        key = encode_permission(entity_type, bundle, name)
        if key is not None and key not in keys:
            keys.append(key)
    return keys


def filter_bundle_permissions(
    keys: Iterable[str], entity_type: EntityType | str, bundle: str
) -> list[str]:
    """Return the keys in *keys* that belong to *bundle*."""
    bundle_keys = set(get_permissions_for_bundle(entity_type, bundle))
    return [k for k in keys if k in bundle_keys]


def group_permissions_by_bundle(
    keys: Iterable[str],
) -> dict[str, dict[str, list[str]]]:
    """Group bundle permission keys by entity type and bundle.

    Keys that do not decode are left out entirely.

    Returns:
        ``{entity_type: {bundle: [key, ...]}}`` with keys in input order.
    """
    grouped: dict[str, dict[str, list[str]]] = {}
    for key in keys:
        descriptor = decode_permission(key)
        if descriptor is None:
            continue
        bundles = grouped.setdefault(descriptor.entity_type.value, {})
        bundles.setdefault(descriptor.bundle, []).append(key)
    return grouped
