"""Configuration export synchronization engine.

Builds an in-memory index of content entity bundles and their fields from
a directory of exported YAML config files, and edits the module and role
documents in that directory.

Architecture
------------
Every file kind is recognised by its filename alone (``node.type.page.yml``,
``field.field.node.page.body.yml``, ...).  A pass lists the directory once,
classifies the names, reads only what each entity type needs, and merges
each field instance with the storage definition shared across bundles.
Broken files are skipped and reported; only a missing directory aborts.

Modules:

- ``patterns``    -- ``EntityType`` and the filename convention registry.
- ``classifier``  -- Pure filename filters and identifier extraction.
- ``parser``      -- Tolerant YAML decoding and per-file-kind projections.
- ``models``      -- ``Bundle``, fragments, ``FieldDescriptor``,
  ``BundleRecord``, ``SyncReport``: core data contracts.
- ``merger``      -- Storage + instance (+ base field override) merge.
- ``engine``      -- ``ConfigSynchronizer``: one full pass over a directory.
- ``extensions``  -- ``core.extension.yml`` module reconciliation.
- ``permissions`` -- Permission key encode/decode and grouping.
- ``roles``       -- ``user.role.*.yml`` permission editing.
- ``state``       -- ``ProjectStore``: atomic JSON project records.
- ``reporter``    -- Human-readable and JSON report formatting.

Usage example
-------------
::

    import asyncio
    from drupal_config_sync.sync import ConfigSynchronizer, format_sync_report

    report = asyncio.run(ConfigSynchronizer().run("config/sync"))
    print(format_sync_report(report))
    print(report.index["node"]["article"].fields["body"].type)
"""

from .engine import ConfigSynchronizer, sync_project, synchronize
from .extensions import enable_modules, reconcile_modules
from .models import (
    Bundle,
    BundleRecord,
    EntityIndex,
    FieldDescriptor,
    SkippedFile,
    SyncReport,
    SyncSummary,
)
from .patterns import EntityType
from .permissions import (
    PermissionDescriptor,
    decode_permission,
    encode_permission,
    group_permissions_by_bundle,
)
from .reporter import format_sync_report, report_to_json
from .roles import Role, load_role, save_role
from .state import ProjectStore

__all__ = [
    "Bundle",
    "BundleRecord",
    "ConfigSynchronizer",
    "EntityIndex",
    "EntityType",
    "FieldDescriptor",
    "PermissionDescriptor",
    "ProjectStore",
    "Role",
    "SkippedFile",
    "SyncReport",
    "SyncSummary",
    "decode_permission",
    "enable_modules",
    "encode_permission",
    "format_sync_report",
    "group_permissions_by_bundle",
    "load_role",
    "reconcile_modules",
    "report_to_json",
    "save_role",
    "sync_project",
    "synchronize",
]
