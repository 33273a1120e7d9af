import re
from datetime import datetime

# tried in order: with fractional seconds first, then without.
# Both require a full date, a full time and an explicit offset.
TIMESTAMP_PATTERNS: "tuple[re.Pattern[str], ...]" = (
    re.compile(
        r"(?P<base>\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})"
        r"\.(?P<fraction>\d+)"
        r"(?P<offset>Z|[+-]\d{2}:\d{2})",
        re.ASCII,
    ),
    re.compile(
        r"(?P<base>\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})"
        r"(?P<offset>Z|[+-]\d{2}:\d{2})",
        re.ASCII,
    ),
)


def _to_datetime(match: "re.Match[str]") -> "datetime | None":
    offset = match["offset"]
    if offset == "Z":
        offset = "+00:00"

    fraction = match.groupdict().get("fraction")
    # datetime only holds microseconds, longer fractions are truncated
    micros = f".{fraction[:6].ljust(6, '0')}" if fraction else ""

    try:
        return datetime.fromisoformat(f"{match['base']}{micros}{offset}")
    except ValueError:
        # well-formed but out of range, e.g. month 13
        return None


def parse_timestamp(value: "str | None") -> "datetime | None":
    """
    parses an ISO 8601 internet timestamp into an aware datetime.
    Returns None for missing or unparseable values instead of raising,
    so a bad reset time only degrades to "unknown".
    """
    if not isinstance(value, str):
        return None

    for pattern in TIMESTAMP_PATTERNS:
        match = pattern.fullmatch(value)
        if match is not None:
            return _to_datetime(match)

    return None
