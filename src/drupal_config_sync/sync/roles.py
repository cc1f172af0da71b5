"""Role documents (``user.role.{id}.yml``) and their bundle permissions.

Pure helpers operate on ``Role`` records; ``load_role`` / ``save_role``
read and write through a ``ConfigSource``.  Permission lists are kept
sorted and de-duplicated whenever a role is changed, matching how the
exported configuration stores them.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Iterable, Mapping

import yaml
from pydantic import BaseModel, Field

from drupal_config_sync.file_handler import ConfigSource, LocalConfigSource
from drupal_config_sync.sync.parser import parse_yaml
from drupal_config_sync.sync.patterns import (
    EntityType,
    bundle_config_name,
    require_patterns,
)
from drupal_config_sync.sync.permissions import (
    ALL_PERMISSIONS,
    NO_PERMISSIONS,
    decode_permission,
    expand_short_permissions,
    filter_bundle_permissions,
    get_short_permission_names,
    group_permissions_by_bundle,
)

logger = logging.getLogger(__name__)

_ROLE_FILENAME = re.compile(r"^user\.role\.([a-z0-9_]+)\.yml$")


class Role(BaseModel):
    """A user role.

    Attributes:
        id: Role machine name.
        label: Human-readable name.
        weight: Ordering weight.
        is_admin: Whether the role bypasses permission checks.
        permissions: Granted permission keys.
        dependencies: Config/module dependencies as exported.
    """

    id: str
    label: str = ""
    weight: int = 0
    is_admin: bool = False
    permissions: list[str] = Field(default_factory=list)
    dependencies: dict[str, Any] = Field(default_factory=dict)

    model_config = {"frozen": True}


# ---------------------------------------------------------------------------
# Filenames
# ---------------------------------------------------------------------------


def role_filename(role_id: str) -> str:
    """Return the config filename of *role_id*."""
    return f"user.role.{role_id}.yml"


def extract_role_id_from_filename(filename: str) -> str | None:
    """Return the role id of a role filename, or ``None``."""
    match = _ROLE_FILENAME.match(filename)
    return match.group(1) if match else None


# ---------------------------------------------------------------------------
# Parse / dump
# ---------------------------------------------------------------------------


def parse_role(data: Mapping[str, Any] | None) -> Role | None:
    """Project a role document into a ``Role``.

    Returns:
        The role, or ``None`` when *data* has no ``id``.
    """
    if not isinstance(data, Mapping) or not data.get("id"):
        return None

    permissions = data.get("permissions")
    if not isinstance(permissions, list):
        permissions = []
    dependencies = data.get("dependencies")
    if not isinstance(dependencies, Mapping):
        dependencies = {}

    role_id = str(data["id"])
    weight = data.get("weight")
    return Role(
        id=role_id,
        label=str(data.get("label") or role_id),
        weight=weight if isinstance(weight, int) else 0,
        is_admin=bool(data.get("is_admin") or False),
        permissions=[str(p) for p in permissions],
        dependencies=dict(dependencies),
    )


def calculate_role_dependencies(permissions: Iterable[str]) -> dict[str, list[str]]:
    """Derive config and module dependencies from bundle permissions.

    Only permissions that decode to a bundle contribute.

    Returns:
        ``{"config": [...], "module": [...]}`` with empty lists omitted.
    """
    config_deps: set[str] = set()
    module_deps: set[str] = set()
    for key in permissions:
        descriptor = decode_permission(key)
        if descriptor is None:
            continue
        config_deps.add(
            bundle_config_name(descriptor.entity_type, descriptor.bundle)
        )
        module_deps.add(require_patterns(descriptor.entity_type).module)

    deps: dict[str, list[str]] = {}
    if config_deps:
        deps["config"] = sorted(config_deps)
    if module_deps:
        deps["module"] = sorted(module_deps)
    return deps


def dump_role(role: Role) -> str:
    """Serialize *role* as a ``user.role`` YAML document.

    Exported dependencies are kept as-is; a role without any gets them
    calculated from its permissions.
    """
    config: dict[str, Any] = {"langcode": "en", "status": True}

    deps = role.dependencies or calculate_role_dependencies(role.permissions)
    if deps:
        config["dependencies"] = deps

    config["id"] = role.id
    config["label"] = role.label or role.id
    config["weight"] = role.weight
    config["is_admin"] = role.is_admin
    config["permissions"] = sorted(set(role.permissions))

    return yaml.safe_dump(
        config,
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
        width=float("inf"),
    )


# ---------------------------------------------------------------------------
# Permission editing
# ---------------------------------------------------------------------------


def add_permissions(role: Role, keys: Iterable[str]) -> Role:
    """Return *role* with *keys* granted."""
    merged = set(role.permissions) | set(keys)
    return role.model_copy(update={"permissions": sorted(merged)})


def remove_permissions(role: Role, keys: Iterable[str]) -> Role:
    """Return *role* without *keys*."""
    to_remove = set(keys)
    return role.model_copy(
        update={
            "permissions": [
                p for p in role.permissions if p not in to_remove
            ]
        }
    )


def set_bundle_permissions(
    role: Role,
    entity_type: EntityType | str,
    bundle: str,
    keys: Iterable[str],
) -> Role:
    """Replace the permissions *role* holds for one bundle with *keys*."""
    current = filter_bundle_permissions(role.permissions, entity_type, bundle)
    return add_permissions(remove_permissions(role, current), keys)


def apply_short_permissions(
    role: Role,
    entity_type: EntityType | str,
    bundle: str,
    short_names: Iterable[str],
) -> Role:
    """Set a bundle's permissions on *role* from short names.

    ``all`` grants every permission of the entity type; ``none`` clears
    every permission for the bundle.  Unknown short names are logged
    and ignored.
    """
    names = list(short_names)
    known = set(get_short_permission_names(entity_type))
    known.update((ALL_PERMISSIONS, NO_PERMISSIONS))
    for name in names:
        if name not in known:
            logger.warning(
                "Unknown %s permission %r ignored", entity_type, name
            )
    keys = expand_short_permissions(entity_type, bundle, names)
    return set_bundle_permissions(role, entity_type, bundle, keys)


def get_content_permissions(role: Role) -> dict[str, dict[str, list[str]]]:
    """Return the role's bundle permissions grouped by entity type and bundle."""
    return group_permissions_by_bundle(role.permissions)


def get_other_permissions(role: Role) -> list[str]:
    """Return the role's permissions that belong to no bundle."""
    return [p for p in role.permissions if decode_permission(p) is None]


def get_role_summary(role: Role) -> dict[str, Any]:
    """Summarise *role* for display."""
    grouped = get_content_permissions(role)
    other = get_other_permissions(role)
    return {
        "id": role.id,
        "label": role.label,
        "is_admin": role.is_admin,
        "total_permissions": len(role.permissions),
        "content_permissions": len(role.permissions) - len(other),
        "other_permissions": len(other),
        "bundles_with_permissions": sum(
            len(bundles) for bundles in grouped.values()
        ),
    }


# ---------------------------------------------------------------------------
# Directory operations
# ---------------------------------------------------------------------------


async def list_role_ids(
    directory: str, source: ConfigSource | None = None
) -> list[str]:
    """Return the ids of every role defined in *directory*."""
    source = source or LocalConfigSource()
    filenames = await source.list_files(directory)
    ids = (extract_role_id_from_filename(f) for f in filenames)
    return sorted(i for i in ids if i)


async def load_role(
    directory: str, role_id: str, source: ConfigSource | None = None
) -> Role | None:
    """Read ``user.role.{role_id}.yml`` from *directory*.

    Returns:
        The role, or ``None`` if it does not exist or cannot be parsed.
    """
    source = source or LocalConfigSource()
    filename = role_filename(role_id)
    if filename not in await source.list_files(directory):
        return None
    role = parse_role(parse_yaml(await source.read_text(directory, filename)))
    if role is None:
        logger.warning("Skipping %s: not a valid role document", filename)
    return role


async def save_role(
    directory: str, role: Role, source: ConfigSource | None = None
) -> None:
    """Write *role* to ``user.role.{id}.yml`` in *directory*."""
    source = source or LocalConfigSource()
    await source.write_text(directory, role_filename(role.id), dump_role(role))
