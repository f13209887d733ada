"""Sync report formatting functions.

Provides human-readable and machine-readable output for sync runs:

- ``format_sync_report`` -- full post-sync summary.
- ``report_to_json`` -- dict for the MCP tool result.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .models import SyncReport

from .models import SyncDirection

# ------------------------------------------------------------------
# Human-readable report
# ------------------------------------------------------------------


def format_sync_report(report: SyncReport) -> str:
    """Format a sync report as human-readable text.

    Error and info sections are only included when non-empty.

    Args:
        report: The completed sync report.

    Returns:
        Multi-line formatted string.
    """
    lines: list[str] = []

    lines.append(
        f"Sync {report.direction.value} report ({report.format.value})"
    )
    lines.append(f"Started: {report.started_at}")
    if report.completed_at:
        lines.append(f"Completed: {report.completed_at}")
    lines.append("")

    summary = (
        f"{report.synced} synced, {report.skipped} skipped, "
        f"{len(report.errors)} errors"
    )
    if report.direction == SyncDirection.PUSH:
        summary += f", {len(report.info)} notes"
    lines.append(summary)
    lines.append("")

    if report.errors:
        lines.append("Errors:")
        for e in report.errors:
            label = e.title or e.id or "(unknown post)"
            if e.title and e.id:
                label = f"{e.title} [{e.id}]"
            lines.append(f"  {label}: {e.error}")
        lines.append("")

    if report.info:
        lines.append("Info:")
        for note in report.info:
            lines.append(f"  {note.slug}: {note.message}")
        lines.append("")

    return "\n".join(lines).rstrip()


# ------------------------------------------------------------------
# JSON output
# ------------------------------------------------------------------


def report_to_json(report: SyncReport) -> dict[str, Any]:
    """Convert a sync report to a dict for JSON serialisation.

    ``synced`` and ``skipped`` are always present; ``errors`` and ``info``
    only when they hold at least one entry. Entry keys whose value is
    ``None`` are omitted.

    Args:
        report: The sync report.

    Returns:
        Dict suitable for MCP ``structuredContent`` output.
    """
    result: dict[str, Any] = {
        "synced": report.synced,
        "skipped": report.skipped,
    }
    if report.errors:
        result["errors"] = [
            e.model_dump(exclude_none=True) for e in report.errors
        ]
    if report.info:
        result["info"] = [
            n.model_dump(exclude_none=True) for n in report.info
        ]
    return result
