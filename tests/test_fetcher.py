import json
from datetime import datetime, timezone

import httpx
import pytest
import respx

from claudescope.credentials import ACCESS_TOKEN_ENV
from claudescope.errors import (
    DecodeError,
    HTTPStatusError,
    InvalidResponseError,
    NoCredentialsError,
    OAuthError,
)
from claudescope.fetcher import OAUTH_BETA, USAGE_URL, fetch_usage, parse_usage
from claudescope.models import UsageData


class TestFetchUsage:
    @pytest.mark.asyncio
    @respx.mock
    async def test_end_to_end_with_explicit_token(self) -> "None":
        route = respx.get(USAGE_URL).mock(
            return_value=httpx.Response(
                200,
                json={
                    "five_hour": {
                        "utilization": 0.42,
                        "resets_at": "2025-06-01T10:00:00Z",
                    }
                },
            )
        )

        usage = await fetch_usage("abc")

        assert usage == UsageData(
            five_hour_utilization=0.42,
            five_hour_resets_at=datetime(2025, 6, 1, 10, 0, tzinfo=timezone.utc),
            weekly_utilization=None,
            weekly_resets_at=None,
        )
        assert route.call_count == 1

    @pytest.mark.asyncio
    @respx.mock
    async def test_sends_bearer_and_beta_headers(self) -> "None":
        route = respx.get(USAGE_URL).mock(return_value=httpx.Response(200, json={}))

        await fetch_usage("abc")

        request = route.calls.last.request
        assert request.method == "GET"
        assert request.headers["Authorization"] == "Bearer abc"
        assert request.headers["anthropic-beta"] == OAUTH_BETA
        assert request.content == b""
        assert request.extensions["timeout"]["read"] == 10.0

    @pytest.mark.asyncio
    @respx.mock
    async def test_resolves_token_when_not_given(
        self, monkeypatch: "pytest.MonkeyPatch"
    ) -> "None":
        monkeypatch.setenv(ACCESS_TOKEN_ENV, "env-token")
        route = respx.get(USAGE_URL).mock(return_value=httpx.Response(200, json={}))

        await fetch_usage()

        assert route.calls.last.request.headers["Authorization"] == "Bearer env-token"

    @pytest.mark.asyncio
    @respx.mock
    async def test_resolves_token_from_credentials_file(self, write_credentials) -> "None":
        write_credentials({"claudeAiOauth": {"accessToken": "file-token"}})
        route = respx.get(USAGE_URL).mock(return_value=httpx.Response(200, json={}))

        await fetch_usage()

        assert route.calls.last.request.headers["Authorization"] == "Bearer file-token"

    @pytest.mark.asyncio
    @respx.mock
    async def test_no_credentials_makes_no_request(self) -> "None":
        with pytest.raises(NoCredentialsError) as excinfo:
            await fetch_usage()

        assert "claude" in excinfo.value.message
        assert respx.calls.call_count == 0

    @pytest.mark.asyncio
    @respx.mock
    async def test_non_200_carries_status_and_body(self) -> "None":
        respx.get(USAGE_URL).mock(
            return_value=httpx.Response(401, content=b"invalid_token")
        )

        with pytest.raises(HTTPStatusError) as excinfo:
            await fetch_usage("abc")

        assert excinfo.value.status_code == 401
        assert excinfo.value.body == "invalid_token"
        assert excinfo.value.message == "HTTP 401: invalid_token"
        assert isinstance(excinfo.value, OAuthError)

    @pytest.mark.asyncio
    @respx.mock
    async def test_non_200_with_undecodable_body(self) -> "None":
        respx.get(USAGE_URL).mock(
            return_value=httpx.Response(500, content=b"\xff\xfe\xfa")
        )

        with pytest.raises(HTTPStatusError) as excinfo:
            await fetch_usage("abc")

        assert excinfo.value.status_code == 500
        assert excinfo.value.body == ""

    @pytest.mark.asyncio
    @respx.mock
    async def test_other_2xx_is_an_error(self) -> "None":
        respx.get(USAGE_URL).mock(return_value=httpx.Response(204))

        with pytest.raises(HTTPStatusError) as excinfo:
            await fetch_usage("abc")

        assert excinfo.value.status_code == 204

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [httpx.ConnectError, httpx.ReadTimeout])
    async def test_transport_error_is_invalid_response(
        self, error: "type[httpx.TransportError]"
    ) -> "None":
        with respx.mock:
            route = respx.get(USAGE_URL).mock(side_effect=error)

            with pytest.raises(InvalidResponseError) as excinfo:
                await fetch_usage("abc")

        assert isinstance(excinfo.value.__cause__, error)
        # no retry
        assert route.call_count == 1

    @pytest.mark.asyncio
    @respx.mock
    async def test_corrupt_content_encoding_is_invalid_response(self) -> "None":
        respx.get(USAGE_URL).mock(
            return_value=httpx.Response(
                200,
                headers={"Content-Encoding": "gzip"},
                stream=httpx.ByteStream(b"notgzip"),
            )
        )

        with pytest.raises(InvalidResponseError) as excinfo:
            await fetch_usage("abc")

        assert isinstance(excinfo.value.__cause__, httpx.DecodingError)

    @pytest.mark.asyncio
    @respx.mock
    async def test_malformed_json_raises_decode_error(self) -> "None":
        respx.get(USAGE_URL).mock(return_value=httpx.Response(200, content=b"<html>"))

        with pytest.raises(DecodeError):
            await fetch_usage("abc")

    @pytest.mark.asyncio
    @respx.mock
    async def test_type_mismatch_raises_decode_error(self) -> "None":
        respx.get(USAGE_URL).mock(
            return_value=httpx.Response(
                200, json={"five_hour": {"utilization": "high"}}
            )
        )

        with pytest.raises(DecodeError):
            await fetch_usage("abc")


class TestParseUsage:
    def test_missing_seven_day_is_absent(self) -> "None":
        usage = parse_usage(
            json.dumps(
                {"five_hour": {"utilization": 0.3, "resets_at": "2025-01-01T05:00:00Z"}}
            ).encode()
        )
        assert usage.weekly_utilization is None
        assert usage.weekly_resets_at is None

    def test_zero_utilization_is_kept(self) -> "None":
        usage = parse_usage(
            json.dumps(
                {
                    "five_hour": {"utilization": 0.0},
                    "seven_day": {"utilization": 0},
                }
            ).encode()
        )
        assert usage.five_hour_utilization == 0.0
        assert usage.five_hour_utilization is not None
        assert usage.weekly_utilization == 0.0

    def test_bad_reset_time_degrades_to_none(self) -> "None":
        usage = parse_usage(
            json.dumps(
                {"seven_day": {"utilization": 0.8, "resets_at": "tomorrow"}}
            ).encode()
        )
        assert usage.weekly_utilization == 0.8
        assert usage.weekly_resets_at is None

    def test_fractional_reset_time(self) -> "None":
        usage = parse_usage(
            json.dumps(
                {
                    "seven_day": {
                        "utilization": 0.25,
                        "resets_at": "2025-01-08T00:00:00.123Z",
                    }
                }
            ).encode()
        )
        assert usage.weekly_resets_at == datetime(
            2025, 1, 8, 0, 0, 0, 123000, tzinfo=timezone.utc
        )

    def test_opus_window_is_not_projected(self) -> "None":
        usage = parse_usage(
            json.dumps(
                {"seven_day_opus": {"utilization": 0.9, "resets_at": "2025-01-08T00:00:00Z"}}
            ).encode()
        )
        assert usage == UsageData()

    def test_null_window_fields(self) -> "None":
        usage = parse_usage(
            json.dumps(
                {
                    "five_hour": {"utilization": None, "resets_at": None},
                    "seven_day": None,
                }
            ).encode()
        )
        assert usage == UsageData()


class TestFetchUsageLogging:
    @pytest.mark.asyncio
    @respx.mock
    async def test_http_error_is_logged(self, log_output: "list[dict]") -> "None":
        respx.get(USAGE_URL).mock(return_value=httpx.Response(403, content=b"forbidden"))

        with pytest.raises(HTTPStatusError):
            await fetch_usage("abc")

        errors = [e for e in log_output if e["event"] == "usage_fetch_http_error"]
        assert errors == [
            {
                "event": "usage_fetch_http_error",
                "log_level": "warning",
                "status_code": 403,
                "body": "forbidden",
            }
        ]
