from datetime import datetime, timezone

from claudescope.models import UsageData


def format_utilization(value: "float | None") -> "str":
    """
    formats a 0.0 - 1.0 fraction as a whole percentage. Missing
    values render as "n/a" so they never read as 0%.
    """
    if value is None:
        return "n/a"
    return f"{value * 100:.0f}%"


def format_reset(resets_at: "datetime | None", now: "datetime | None" = None) -> "str":
    """
    renders the time left until a reset as "2d 3h", "3h 12m" or "12m".
    """
    if resets_at is None:
        return "unknown"

    now = now or datetime.now(timezone.utc)
    remaining = int((resets_at - now).total_seconds())
    if remaining <= 0:
        return "now"

    days, remaining = divmod(remaining, 86400)
    hours, remaining = divmod(remaining, 3600)
    minutes = remaining // 60

    if days:
        return f"{days}d {hours}h"
    if hours:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def usage_to_dict(data: "UsageData") -> "dict[str, float | str | None]":
    return {
        "five_hour_utilization": data.five_hour_utilization,
        "weekly_utilization": data.weekly_utilization,
        "five_hour_resets_at": (
            data.five_hour_resets_at.isoformat() if data.five_hour_resets_at else None
        ),
        "weekly_resets_at": (
            data.weekly_resets_at.isoformat() if data.weekly_resets_at else None
        ),
    }


def render_text(data: "UsageData", now: "datetime | None" = None) -> "str":
    lines = [
        f"5-hour: {format_utilization(data.five_hour_utilization)}"
        f" (resets: {format_reset(data.five_hour_resets_at, now)})",
        f"weekly: {format_utilization(data.weekly_utilization)}"
        f" (resets: {format_reset(data.weekly_resets_at, now)})",
    ]
    return "\n".join(lines)
