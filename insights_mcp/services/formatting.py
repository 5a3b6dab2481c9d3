"""Pure formatting helpers shared by every report renderer (no I/O)."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Iterable

from insights_mcp.errors import describe_failure
from insights_mcp.services.aggregator import EndpointResult

DIFFICULTY_SCI_THRESHOLD = 1e15
_MAGNITUDES = ((1e18, "E"), (1e15, "P"))

_HTML_TAG = re.compile(r"<[^>]*>")
_WHITESPACE = re.compile(r"\s+")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: str) -> datetime | None:
    """Parse ISO-8601 or RFC 2822 timestamps. Naive values are taken as UTC."""
    if not value:
        return None
    try:
        moment = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        try:
            moment = parsedate_to_datetime(value)
        except (TypeError, ValueError, IndexError):
            return None
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


def format_timestamp(value: str, fmt: str = "%B %d, %Y %H:%M UTC") -> str:
    """Render a timestamp in UTC, or return it untouched when unparsable."""
    moment = parse_timestamp(value)
    if moment is None:
        return value
    return moment.astimezone(timezone.utc).strftime(fmt)


# ---------------------------------------------------------------------------
# Numbers
# ---------------------------------------------------------------------------


def format_currency(value: float) -> str:
    return f"${value:,.2f}"


def format_number(value: float, decimals: int = 2) -> str:
    return f"{value:,.{decimals}f}"


def format_signed_percent(value: float) -> str:
    """``+1.23%`` / ``-4.56%``. Input is already in percent units."""
    sign = "+" if value >= 0 else ""
    return f"{sign}{value:.2f}%"


def format_optional_percent(value: float | None) -> str:
    return "N/A" if value is None else format_signed_percent(value)


def trend_indicator(value: float) -> str:
    if value > 0:
        return "📈"
    if value < 0:
        return "📉"
    return "➡️"


def format_difficulty(value: float) -> str:
    """Scientific form plus a scaled suffix from 1e15 up, comma-grouped below."""
    if abs(value) >= DIFFICULTY_SCI_THRESHOLD:
        scale, suffix = next((s, sfx) for s, sfx in _MAGNITUDES if abs(value) >= s)
        return f"{value:.2e} ({value / scale:,.2f}{suffix})"
    return f"{round(value):,}"


def format_small(
    value: float, decimals: int = 6, threshold: float = 1e-4, sci_digits: int = 2
) -> str:
    """Fixed point, switching to scientific when the value would print as zeros."""
    if value != 0 and abs(value) < threshold:
        return f"{value:.{sci_digits}e}"
    return f"{value:.{decimals}f}"


def percent_of(part: float, total: float) -> float:
    """Share of ``total`` in percent; 0.0 when the total is zero."""
    if total == 0:
        return 0.0
    return part / total * 100


def percent_change(current: float, previous: float) -> float | None:
    """Percent change from ``previous``; None when there is no baseline."""
    if previous == 0:
        return None
    return (current - previous) / previous * 100


def mean(values: Iterable[float]) -> float:
    items = list(values)
    return sum(items) / len(items) if items else 0.0


# ---------------------------------------------------------------------------
# Time and text
# ---------------------------------------------------------------------------


def format_relative_time(timestamp: str, now: datetime | None = None) -> str:
    moment = parse_timestamp(timestamp)
    if moment is None:
        return timestamp
    minutes = int(((now or utcnow()) - moment).total_seconds() // 60)
    if minutes < 1:
        return "Just now"
    if minutes < 60:
        return f"{minutes}m ago"
    if minutes < 1440:
        return f"{minutes // 60}h ago"
    return f"{minutes // 1440}d ago"


def strip_html(text: str) -> str:
    """Remove tags repeatedly until nothing changes, then collapse whitespace."""
    previous = None
    while previous != text:
        previous, text = text, _HTML_TAG.sub("", text)
    return _WHITESPACE.sub(" ", text).strip()


def truncate_text(text: str, limit: int = 200) -> str:
    if len(text) <= limit:
        return text
    cut = text[:limit]
    if " " in cut:
        cut = cut.rsplit(" ", 1)[0]
    return cut + "..."


def truncation_note(shown: int, total: int, noun: str) -> str | None:
    if total <= shown:
        return None
    return f"*Showing {shown} of {total} {noun}*"


def ordinal(n: int) -> str:
    if 10 <= n % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


# ---------------------------------------------------------------------------
# Composite report helpers
# ---------------------------------------------------------------------------


def unavailable(label: str) -> str:
    """Placeholder rendered where a missing source's section would be."""
    return f"⚠️ *{label} data unavailable*"


def availability_notice(results: Iterable[EndpointResult]) -> list[str]:
    """One line per rejected source; empty when every source succeeded."""
    failed = [r for r in results if not r.ok]
    if not failed:
        return []
    lines = [
        "## ⚠️ Data Availability Notice",
        "",
        "This report is partial. The following sources failed:",
        "",
    ]
    for result in failed:
        lines.append(
            f"- {result.label} data could not be retrieved ({describe_failure(result.error)})"
        )
    return lines
