class OAuthError(Exception):
    """
    OAuthError is the base for every failure of a usage fetch. The
    message is meant to be shown to the user as-is.
    """

    message: "str" = "Claude usage request failed"

    def __init__(self, message: "str | None" = None) -> "None":
        if message is not None:
            self.message = message
        super().__init__(self.message)


class NoCredentialsError(OAuthError):
    message = (
        "No Claude OAuth credentials found in ~/.claude/.credentials.json, "
        "run `claude` to log in"
    )


class TokenExpiredError(OAuthError):
    # reserved, nothing raises it while token refresh is left to the claude CLI
    message = "OAuth token expired, run `claude` to refresh it"


class InvalidResponseError(OAuthError):
    message = "Invalid response from Claude API"


class HTTPStatusError(OAuthError):
    """
    raised for any non-200 status. body carries the server's own
    diagnostic text so it can be surfaced unchanged.
    """

    def __init__(self, status_code: "int", body: "str") -> "None":
        self.status_code = status_code
        self.body = body
        super().__init__(f"HTTP {status_code}: {body}")


class DecodeError(ValueError):
    """
    raised when a JSON document does not have the expected structure.
    """
