"""Module enablement (``core.extension.yml``) reconciliation.

``reconcile_modules`` is additive: it adds the requested modules with
weight 0 and leaves every existing entry (and every other top-level key)
untouched.  The ``module`` map is re-emitted in alphabetical key order so
diffs against the exported config stay small.  Nothing here removes a
module; disabling modules is left to a human.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Iterable, Mapping

import yaml

from drupal_config_sync.file_handler import ConfigSource, LocalConfigSource
from drupal_config_sync.sync.parser import parse_yaml

logger = logging.getLogger(__name__)

EXTENSION_FILENAME = "core.extension.yml"

# Modules needed for content modelling.
RECOMMENDED_MODULES: tuple[str, ...] = (
    "node",
    "media",
    "taxonomy",
    "block_content",
    "paragraphs",
    "content_moderation",
    "field_group",
)


def empty_extension_config() -> dict[str, Any]:
    """Return the document used when no ``core.extension.yml`` exists."""
    return {"module": {}, "theme": {}, "profile": ""}


def reconcile_modules(
    current: Mapping[str, Any] | None,
    modules_to_enable: Iterable[str],
) -> dict[str, Any]:
    """Return *current* with *modules_to_enable* added.

    Args:
        current: Parsed ``core.extension.yml``, or ``None`` if absent.
        modules_to_enable: Module names that must be enabled.

    Returns:
        A new document.  Existing modules keep their weight, new ones get
        weight 0, and the ``module`` keys are sorted.  *current* is not
        modified.
    """
    if current is None:
        updated = empty_extension_config()
    else:
        updated = copy.deepcopy(dict(current))

    modules = updated.get("module")
    if not isinstance(modules, Mapping):
        if modules is not None:
            logger.warning(
                "Ignoring non-mapping 'module' section (%s)",
                type(modules).__name__,
            )
        modules = {}
    modules = dict(modules)

    for name in modules_to_enable:
        if name not in modules:
            modules[name] = 0

    updated["module"] = {key: modules[key] for key in sorted(modules)}
    return updated


def parse_enabled_modules(config: Mapping[str, Any] | None) -> list[str]:
    """Return the names of enabled modules in a ``core.extension`` document."""
    if not config or not isinstance(config.get("module"), Mapping):
        return []
    return list(config["module"].keys())


def get_missing_recommended_modules(enabled: Iterable[str]) -> list[str]:
    """Return the recommended modules not in *enabled*, in recommended order."""
    enabled_set = set(enabled)
    return [m for m in RECOMMENDED_MODULES if m not in enabled_set]


def dump_extension_config(config: Mapping[str, Any]) -> str:
    """Serialize a ``core.extension`` document, preserving key order."""
    return yaml.safe_dump(
        dict(config),
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
        width=float("inf"),
    )


# ---------------------------------------------------------------------------
# Directory operations
# ---------------------------------------------------------------------------


async def read_extension_config(
    directory: str, source: ConfigSource | None = None
) -> dict[str, Any] | None:
    """Read ``core.extension.yml`` from *directory*.

    Returns:
        The parsed document, or ``None`` if the file is absent or invalid.

    Raises:
        ConfigDirectoryError: If *directory* is missing or unreadable.
    """
    source = source or LocalConfigSource()
    filenames = await source.list_files(directory)
    if EXTENSION_FILENAME not in filenames:
        return None
    data = parse_yaml(await source.read_text(directory, EXTENSION_FILENAME))
    if not isinstance(data, dict):
        logger.warning("%s is empty or invalid", EXTENSION_FILENAME)
        return None
    return data


async def check_recommended_modules(
    directory: str, source: ConfigSource | None = None
) -> dict[str, list[str]]:
    """Report which recommended modules are enabled in *directory*.

    Returns:
        ``{"enabled_modules": [...], "missing_modules": [...]}``
    """
    config = await read_extension_config(directory, source)
    enabled = parse_enabled_modules(config)
    return {
        "enabled_modules": enabled,
        "missing_modules": get_missing_recommended_modules(enabled),
    }


async def enable_modules(
    directory: str,
    modules_to_enable: Iterable[str],
    source: ConfigSource | None = None,
) -> dict[str, Any]:
    """Add *modules_to_enable* to ``core.extension.yml`` in *directory*.

    Returns:
        The document that was written.
    """
    source = source or LocalConfigSource()
    current = await read_extension_config(directory, source)
    updated = reconcile_modules(current, modules_to_enable)
    await source.write_text(
        directory, EXTENSION_FILENAME, dump_extension_config(updated)
    )
    logger.info(
        "Updated %s (%d modules)",
        EXTENSION_FILENAME,
        len(updated["module"]),
    )
    return updated
