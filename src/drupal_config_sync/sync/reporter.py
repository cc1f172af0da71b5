"""Sync report formatting functions.

Provides human-readable and machine-readable output for sync passes:

- ``summarize_index`` -- bundle and field counts.
- ``format_sync_report`` -- post-sync summary with skipped files.
- ``report_to_json`` -- structured dict for ``--json`` output.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .models import SyncSummary

if TYPE_CHECKING:
    from .models import EntityIndex, SyncReport


def summarize_index(index: EntityIndex) -> SyncSummary:
    """Count bundles per entity type and fields overall."""
    by_type: dict[str, int] = {}
    total_fields = 0
    for entity_type, bundles in index.items():
        by_type[entity_type] = len(bundles)
        for bundle in bundles.values():
            total_fields += len(bundle.fields)
    return SyncSummary(
        bundles_by_entity_type=by_type,
        total_bundles=sum(by_type.values()),
        total_fields=total_fields,
    )


def format_sync_report(report: SyncReport, verbose: bool = False) -> str:
    """Format a sync report as human-readable text.

    Skipped files are summarised by count unless *verbose* is set.

    Args:
        report: The completed sync report.
        verbose: List every skipped file with its reason.

    Returns:
        Multi-line formatted string.
    """
    summary = summarize_index(report.index)
    lines = [
        f"Synced {report.directory}",
        f"Found {summary.total_bundles} bundles "
        f"and {summary.total_fields} fields",
        "",
    ]
    for entity_type, count in summary.bundles_by_entity_type.items():
        lines.append(f"  {entity_type + ':':<16}{count}")

    if report.skipped:
        lines.append("")
        lines.append(f"Skipped {len(report.skipped)} files")
        if verbose:
            for item in report.skipped:
                lines.append(f"  {item.filename}: {item.reason}")

    return "\n".join(lines)


def report_to_json(report: SyncReport) -> dict:
    """Convert a sync report into a JSON-serialisable dict."""
    summary = summarize_index(report.index)
    return {
        "directory": report.directory,
        "started_at": report.started_at,
        "completed_at": report.completed_at,
        "summary": summary.model_dump(mode="json"),
        "skipped": [s.model_dump(mode="json") for s in report.skipped],
        "entities": index_to_dict(report.index),
    }


def index_to_dict(index: EntityIndex) -> dict[str, dict[str, dict]]:
    """Convert an index into plain JSON-compatible dicts."""
    return {
        entity_type: {
            bundle_id: record.model_dump(mode="json")
            for bundle_id, record in bundles.items()
        }
        for entity_type, bundles in index.items()
    }
