from dataclasses import dataclass
from datetime import datetime

from claudescope.errors import DecodeError


def _optional_str(data: "dict", key: "str", where: "str") -> "str | None":
    value = data.get(key)
    if value is None or isinstance(value, str):
        return value
    raise DecodeError(f"{where}.{key}: expected string, got {type(value).__name__}")


def _optional_number(data: "dict", key: "str", where: "str") -> "float | None":
    value = data.get(key)
    if value is None:
        return None
    # bool is an int subclass but never a valid number here
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise DecodeError(f"{where}.{key}: expected number, got {type(value).__name__}")
    return float(value)


def _optional_object(data: "dict", key: "str", where: "str") -> "dict | None":
    value = data.get(key)
    if value is None or isinstance(value, dict):
        return value
    raise DecodeError(f"{where}.{key}: expected object, got {type(value).__name__}")


@dataclass(frozen=True, slots=True)
class CredentialsEntry:
    """
    CredentialsEntry represents the OAuth record the claude CLI
    stores under "claudeAiOauth" in its credentials file.
    """

    access_token: "str | None" = None
    # read but unused, refresh is handled by the claude CLI
    refresh_token: "str | None" = None
    # unix milliseconds
    expires_at: "float | None" = None

    @classmethod
    def from_json(cls, payload: "object") -> "CredentialsEntry | None":
        """
        builds an entry from the decoded credentials file. Returns None
        when the file holds no OAuth entry and raises DecodeError
        when the structure does not match.
        """
        if not isinstance(payload, dict):
            raise DecodeError("credentials: expected object")

        entry = _optional_object(payload, "claudeAiOauth", "credentials")
        if entry is None:
            return None

        where = "credentials.claudeAiOauth"
        return cls(
            access_token=_optional_str(entry, "accessToken", where),
            refresh_token=_optional_str(entry, "refreshToken", where),
            expires_at=_optional_number(entry, "expiresAt", where),
        )


@dataclass(frozen=True, slots=True)
class UsageWindow:
    """
    UsageWindow is one quota window exactly as the API returns it.
    """

    # 0.0 - 1.0, None when the window does not apply to the plan
    utilization: "float | None" = None
    # ISO 8601, parsed later so a bad value never fails the decode
    resets_at: "str | None" = None

    @classmethod
    def from_json(cls, data: "dict", where: "str") -> "UsageWindow":
        return cls(
            utilization=_optional_number(data, "utilization", where),
            resets_at=_optional_str(data, "resets_at", where),
        )


@dataclass(frozen=True, slots=True)
class UsageResponse:
    """
    UsageResponse is the decoded body of the usage endpoint. Any
    window may be missing from the payload or explicitly null.
    """

    five_hour: "UsageWindow | None" = None
    seven_day: "UsageWindow | None" = None
    # decoded but not projected into UsageData
    seven_day_opus: "UsageWindow | None" = None

    @classmethod
    def from_json(cls, payload: "object") -> "UsageResponse":
        if not isinstance(payload, dict):
            raise DecodeError(
                f"usage: expected object, got {type(payload).__name__}"
            )

        windows: "dict[str, UsageWindow | None]" = {}
        for key in ("five_hour", "seven_day", "seven_day_opus"):
            raw = _optional_object(payload, key, "usage")
            windows[key] = None if raw is None else UsageWindow.from_json(raw, key)

        return cls(**windows)


@dataclass(frozen=True, slots=True)
class UsageData:
    """
    UsageData is the normalized result handed to consumers. Every
    field is independently optional, and None ("no data") is never
    folded into 0.0 ("nothing used").
    """

    five_hour_utilization: "float | None" = None
    weekly_utilization: "float | None" = None
    five_hour_resets_at: "datetime | None" = None
    weekly_resets_at: "datetime | None" = None
