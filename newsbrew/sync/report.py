"""Plain-text rendering of sync results."""

from newsbrew.sync.models import SyncReport


def format_sync_report(report: SyncReport) -> str:
    """Render one line per source followed by a summary line.

    Args:
        report: Completed sync report.

    Returns:
        Multi-line text suitable for terminal output.
    """
    lines: list[str] = []
    for result in report.results:
        if result.error is not None:
            lines.append(f"  ✗ {result.name}: {result.error}")
            continue
        line = (
            f"  ✓ {result.name}: {result.items_inserted} new, "
            f"{result.items_updated} updated, {result.items_unchanged} unchanged"
        )
        if result.items_failed:
            line += f" ({result.items_failed} failed)"
        lines.append(line)

    summary = (
        f"Synced {report.total_inserted} new items from "
        f"{report.sources_succeeded} sources"
    )
    if report.sources_failed:
        summary += f" ({report.sources_failed} errors)"
    lines.append("")
    lines.append(summary)
    return "\n".join(lines)
