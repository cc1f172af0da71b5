"""Exception hierarchy for drupal_config_sync.

Per-file problems during a sync pass are never raised; they are logged
and recorded as skipped files.  The exceptions here cover the fatal
cases: a config directory that cannot be read, and caller bugs such as
passing an unknown entity type to a filename builder.
"""

from __future__ import annotations


class ConfigSyncError(Exception):
    """Base class for all drupal_config_sync errors."""


class ConfigDirectoryError(ConfigSyncError):
    """The configuration directory is missing or unreadable.

    Attributes:
        directory: The path that was requested.
        reason: Short description (``"does not exist"``, ...).
    """

    def __init__(self, directory: str, reason: str = "does not exist") -> None:
        self.directory = directory
        self.reason = reason
        super().__init__(f"Configuration directory {reason}: {directory}")


class UnknownEntityTypeError(ConfigSyncError, ValueError):
    """An entity type outside the known set was passed by the caller."""

    def __init__(self, entity_type: object) -> None:
        self.entity_type = entity_type
        super().__init__(f"Unknown entity type: {entity_type!r}")
