import json

import httpx
import structlog

from claudescope.credentials import resolve_access_token
from claudescope.dates import parse_timestamp
from claudescope.errors import (
    DecodeError,
    HTTPStatusError,
    InvalidResponseError,
    NoCredentialsError,
)
from claudescope.models import UsageData, UsageResponse

logger = structlog.get_logger()

USAGE_URL = "https://api.anthropic.com/api/oauth/usage"
# beta header value selecting the OAuth API version family
OAUTH_BETA = "oauth-2025-04-20"
REQUEST_TIMEOUT_SECONDS = 10.0


def build_headers(access_token: "str") -> "dict[str, str]":
    return {
        "Authorization": f"Bearer {access_token}",
        "anthropic-beta": OAUTH_BETA,
    }


def decode_body_text(content: "bytes") -> "str":
    """
    best-effort UTF-8 decode of an error body, empty when undecodable.
    """
    try:
        return content.decode("utf-8")
    except UnicodeDecodeError:
        return ""


def normalize(response: "UsageResponse") -> "UsageData":
    """
    projects the raw response onto UsageData. Only the five-hour and
    seven-day windows are carried over, utilization is copied as-is.
    """
    five_hour = response.five_hour
    seven_day = response.seven_day
    return UsageData(
        five_hour_utilization=five_hour.utilization if five_hour else None,
        weekly_utilization=seven_day.utilization if seven_day else None,
        five_hour_resets_at=parse_timestamp(five_hour.resets_at if five_hour else None),
        weekly_resets_at=parse_timestamp(seven_day.resets_at if seven_day else None),
    )


def parse_usage(content: "bytes") -> "UsageData":
    """
    decodes a 200 body. Malformed JSON or a type mismatch raises
    DecodeError, missing fields just stay None.
    """
    try:
        payload = json.loads(content)
    except ValueError as exc:
        raise DecodeError(f"usage: malformed JSON: {exc}") from exc

    return normalize(UsageResponse.from_json(payload))


async def fetch_usage(access_token: "str | None" = None) -> "UsageData":
    """
    fetches the current usage windows with exactly one GET request.

    Without an explicit token the credential resolver is consulted.
    Failures are raised as OAuthError subclasses (or DecodeError for
    a malformed 200 body) and are never retried here.
    """
    token = resolve_access_token() if access_token is None else access_token
    if not token:
        raise NoCredentialsError()

    # a fresh client per call, nothing is pooled across fetches
    async with httpx.AsyncClient(timeout=REQUEST_TIMEOUT_SECONDS) as client:
        logger.debug("usage_fetch", url=USAGE_URL)
        # RequestError also covers DecodingError and TooManyRedirects,
        # neither yields a usable HTTP response
        try:
            resp = await client.get(USAGE_URL, headers=build_headers(token))
        except httpx.RequestError as exc:
            logger.warning("usage_fetch_request_error", error=str(exc))
            raise InvalidResponseError() from exc

    if resp.status_code != 200:
        body = decode_body_text(resp.content)
        logger.warning(
            "usage_fetch_http_error",
            status_code=resp.status_code,
            body=body,
        )
        raise HTTPStatusError(resp.status_code, body)

    usage = parse_usage(resp.content)
    logger.debug(
        "usage_fetch_done",
        five_hour_utilization=usage.five_hour_utilization,
        weekly_utilization=usage.weekly_utilization,
    )
    return usage
