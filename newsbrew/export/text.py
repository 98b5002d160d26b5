"""Plain-text printers used by the CLI."""

from datetime import UTC, datetime

from newsbrew.curation.models import Digest
from newsbrew.data_model import CanonicalItem, ItemState
from newsbrew.export.sanitize import sanitize_text


SUMMARY_WIDTH = 120
HOT_SCORE = 7.0
WARM_SCORE = 4.0


def _shorten(text: str, width: int) -> str:
    if len(text) <= width:
        return text
    return text[: width - 3] + "..."


def _score_marker(score: float) -> str:
    if score >= HOT_SCORE:
        return "🔥"
    if score >= WARM_SCORE:
        return "⭐"
    return "  "


def format_age(published_at: datetime, now: datetime | None = None) -> str:
    """Compact age such as ``5m``, ``3h`` or ``2d``."""
    now = now or datetime.now(UTC)
    seconds = max(0, int((now - published_at).total_seconds()))
    if seconds < 3600:
        return f"{seconds // 60}m"
    if seconds < 86400:
        return f"{seconds // 3600}h"
    return f"{seconds // 86400}d"


def format_digest_text(digest: Digest) -> str:
    """Render a digest as plain text, one block per item."""
    lines = [
        f"☕ {sanitize_text(digest.title)}",
        (
            f"   {digest.generated_at:%b %d, %H:%M} UTC | {digest.item_count} items"
            f" | {digest.meta.sources_synced} sources | window {digest.window}"
        ),
        "",
    ]
    for index, item in enumerate(digest.items, start=1):
        lines.append(
            f"  {_score_marker(item.computed_score)} {index:2d}. "
            f"{sanitize_text(item.title)}"
        )
        if item.summary:
            lines.append(f"       {_shorten(sanitize_text(item.summary), SUMMARY_WIDTH)}")
        source = f"       {item.source.icon} {sanitize_text(item.source.name)}".rstrip()
        if item.url:
            source += f" · {sanitize_text(item.url)}"
        lines.append(source)
        lines.append("")

    meta = digest.meta
    lines.append(
        f"{meta.items_considered} considered, {meta.items_deduped} deduped, "
        f"{meta.rules_applied} rules applied"
    )
    return "\n".join(lines)


def format_item_line(item: CanonicalItem, now: datetime | None = None) -> str:
    """One-line listing entry: state, short id, title, source and age."""
    marker = {ItemState.READ: "✓", ItemState.SAVED: "★"}.get(item.state, " ")
    return (
        f"{marker} {item.id[:8]}  {sanitize_text(item.title)}  "
        f"[{sanitize_text(item.source.name)} · {format_age(item.published_at, now)}]"
    )
