"""Core sync engine that builds an entity index from a config directory.

The ``ConfigSynchronizer`` ties together the pattern registry,
classifier, parser and merger into one pass over an export directory.
It:

1. Lists the directory once (fails fast with ``ConfigDirectoryError``
   if it is missing or unreadable).
2. For each entity type, reads and projects every bundle file.
3. Reads every field storage file of the entity type once, building a
   name -> storage lookup shared by all its bundles.
4. For each bundle, reads its field instance (and base field override)
   files and merges them with the storage lookup.
5. Publishes each bundle's record only once its field map is complete.
6. Returns a ``SyncReport`` holding the index and the skipped files.

Error handling is per-file: a file that cannot be read or parsed, or
whose identifier is empty, is logged and skipped; the pass continues.
Reads are issued concurrently, bounded by ``max_parallel_reads``.
The engine never writes; persisting the index is the caller's job
(see ``sync_project``).
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Mapping, TypeVar

from pydantic import BaseModel

from drupal_config_sync.core.async_utils import gather_limited
from drupal_config_sync.file_handler import ConfigSource, LocalConfigSource
from drupal_config_sync.sync.classifier import (
    filter_base_field_override_files,
    filter_bundle_files,
    filter_field_instance_files,
    filter_field_storage_files,
)
from drupal_config_sync.sync.merger import merge_bundle_fields
from drupal_config_sync.sync.models import (
    BaseFieldOverrideFragment,
    Bundle,
    BundleRecord,
    EntityIndex,
    FieldInstanceFragment,
    FieldStorageFragment,
    SkippedFile,
    SyncReport,
    SyncSummary,
)
from drupal_config_sync.sync.parser import (
    parse_base_field_override,
    parse_bundle_config,
    parse_field_instance,
    parse_field_storage,
    parse_yaml,
)
from drupal_config_sync.sync.patterns import EntityType
from drupal_config_sync.sync.reporter import index_to_dict, summarize_index
from drupal_config_sync.sync.state import ProjectStore

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=BaseModel)

DEFAULT_MAX_PARALLEL_READS = 8


class ConfigSynchronizer:
    """Build an ``EntityIndex`` from a configuration export directory.

    Args:
        source: File access primitive; defaults to the local filesystem.
        entity_types: Entity types to index, in order.  Defaults to all.
        include_base_field_overrides: Also read
            ``core.base_field_override.*`` files into bundle field maps.
        max_parallel_reads: Upper bound on concurrent file reads.
    """

    def __init__(
        self,
        source: ConfigSource | None = None,
        entity_types: Iterable[EntityType] | None = None,
        include_base_field_overrides: bool = True,
        max_parallel_reads: int = DEFAULT_MAX_PARALLEL_READS,
    ) -> None:
        self.source: ConfigSource = source or LocalConfigSource()
        self.entity_types = tuple(entity_types or EntityType)
        self.include_base_field_overrides = include_base_field_overrides
        self.max_parallel_reads = max_parallel_reads

    # ------------------------------------------------------------------
    # Main entry points
    # ------------------------------------------------------------------

    async def run(self, directory: str) -> SyncReport:
        """Execute a full synchronization pass over *directory*.

        Returns:
            A ``SyncReport`` with the index and the skipped files.

        Raises:
            ConfigDirectoryError: If *directory* is missing or unreadable.
        """
        started_at = datetime.now(timezone.utc).isoformat()
        directory = str(directory)

        filenames = await self.source.list_files(directory)
        logger.debug(
            "Found %d config files in %s", len(filenames), directory
        )

        skipped: list[SkippedFile] = []
        index: EntityIndex = {}
        for entity_type in self.entity_types:
            index[entity_type.value] = await self._index_entity_type(
                directory, filenames, entity_type, skipped
            )

        report = SyncReport(
            directory=directory,
            index=index,
            skipped=skipped,
            started_at=started_at,
            completed_at=datetime.now(timezone.utc).isoformat(),
        )
        logger.info(
            "Indexed %d bundles and %d fields from %s (%d files skipped)",
            report.bundle_count,
            report.field_count,
            directory,
            len(skipped),
        )
        return report

    async def synchronize(self, directory: str) -> EntityIndex:
        """Return the entity index for *directory*.

        Raises:
            ConfigDirectoryError: If *directory* is missing or unreadable.
        """
        report = await self.run(directory)
        return report.index

    # ------------------------------------------------------------------
    # Per entity type
    # ------------------------------------------------------------------

    async def _index_entity_type(
        self,
        directory: str,
        filenames: list[str],
        entity_type: EntityType,
        skipped: list[SkippedFile],
    ) -> dict[str, BundleRecord]:
        bundles = await self._read_bundles(
            directory, filenames, entity_type, skipped
        )
        if not bundles:
            return {}

        storage_list = await self._read_fragments(
            directory,
            filter_field_storage_files(filenames, entity_type),
            parse_field_storage,
            skipped,
        )
        storages: dict[str, FieldStorageFragment] = {
            s.name: s for s in storage_list
        }

        records: dict[str, BundleRecord] = {}
        for bundle in bundles:
            records[bundle.id] = await self._build_bundle_record(
                directory, filenames, entity_type, bundle, storages, skipped
            )
        return records

    async def _read_bundles(
        self,
        directory: str,
        filenames: list[str],
        entity_type: EntityType,
        skipped: list[SkippedFile],
    ) -> list[Bundle]:
        def _project(data: Mapping[str, Any]) -> Bundle:
            return parse_bundle_config(data, entity_type)

        bundles = await self._read_fragments(
            directory,
            filter_bundle_files(filenames, entity_type),
            _project,
            skipped,
            identifier=lambda b: b.id,
        )

        unique: dict[str, Bundle] = {}
        for bundle in bundles:
            if bundle.id in unique:
                logger.warning(
                    "Duplicate %s bundle id %r; keeping the first",
                    entity_type.value,
                    bundle.id,
                )
                continue
            unique[bundle.id] = bundle
        return list(unique.values())

    async def _build_bundle_record(
        self,
        directory: str,
        filenames: list[str],
        entity_type: EntityType,
        bundle: Bundle,
        storages: dict[str, FieldStorageFragment],
        skipped: list[SkippedFile],
    ) -> BundleRecord:
        instances: list[FieldInstanceFragment] = await self._read_fragments(
            directory,
            filter_field_instance_files(filenames, entity_type, bundle.id),
            parse_field_instance,
            skipped,
        )

        overrides: list[BaseFieldOverrideFragment] = []
        if self.include_base_field_overrides:
            overrides = await self._read_fragments(
                directory,
                filter_base_field_override_files(
                    filenames, entity_type, bundle.id
                ),
                parse_base_field_override,
                skipped,
            )

        # Field map is complete before the record is created.
        fields = merge_bundle_fields(storages, instances, overrides)
        return BundleRecord(
            id=bundle.id,
            label=bundle.label,
            description=bundle.description,
            fields=fields,
        )

    # ------------------------------------------------------------------
    # File reading
    # ------------------------------------------------------------------

    async def _read_fragments(
        self,
        directory: str,
        filenames: list[str],
        project: Callable[[Mapping[str, Any]], F],
        skipped: list[SkippedFile],
        identifier: Callable[[F], str] | None = None,
    ) -> list[F]:
        """Read, parse and project *filenames*, skipping failures.

        Results keep the order of *filenames*.
        """
        get_id = identifier or (lambda fragment: fragment.name)

        async def _one(filename: str) -> F | None:
            try:
                text = await self.source.read_text(directory, filename)
            except (OSError, UnicodeError) as exc:
                self._skip(skipped, filename, f"could not be read: {exc}")
                return None

            data = parse_yaml(text)
            if data is None:
                self._skip(skipped, filename, "empty or invalid YAML")
                return None
            if not isinstance(data, Mapping):
                self._skip(
                    skipped,
                    filename,
                    f"document is a {type(data).__name__}, not a mapping",
                )
                return None

            fragment = project(data)
            if not get_id(fragment):
                self._skip(skipped, filename, "missing identifier")
                return None
            return fragment

        results = await gather_limited(
            [_one(f) for f in filenames], self.max_parallel_reads
        )
        return [r for r in results if r is not None]

    @staticmethod
    def _skip(
        skipped: list[SkippedFile], filename: str, reason: str
    ) -> None:
        logger.warning("Skipping %s: %s", filename, reason)
        skipped.append(SkippedFile(filename=filename, reason=reason))


async def synchronize(
    directory: str, source: ConfigSource | None = None
) -> EntityIndex:
    """Build the entity index for *directory* with default settings.

    Raises:
        ConfigDirectoryError: If *directory* is missing or unreadable.
    """
    return await ConfigSynchronizer(source=source).synchronize(directory)


async def sync_project(
    project: dict,
    store: ProjectStore,
    synchronizer: ConfigSynchronizer | None = None,
) -> SyncSummary:
    """Re-index a project's config directory and save the project record.

    The record is only written after a successful pass; a directory
    error propagates and leaves the stored record untouched.

    Args:
        project: Project record with ``slug`` and ``config_directory``.
            Updated in place with ``entities`` and ``last_sync``.
        store: Store used to persist the record.
        synchronizer: Synchronizer to use; a default one if omitted.

    Returns:
        Bundle and field counts of the new index.

    Raises:
        ValueError: If the project has no ``config_directory``.
        ConfigDirectoryError: If the directory is missing or unreadable.
    """
    if not project or not project.get("config_directory"):
        raise ValueError("Invalid project: missing config_directory")

    synchronizer = synchronizer or ConfigSynchronizer()
    report = await synchronizer.run(project["config_directory"])

    project["entities"] = index_to_dict(report.index)
    project["last_sync"] = report.completed_at
    store.save(project)

    return summarize_index(report.index)

