import json
import os
from pathlib import Path

import structlog

from claudescope.models import CredentialsEntry

logger = structlog.get_logger()

ACCESS_TOKEN_ENV = "ANTHROPIC_ACCESS_TOKEN"

# relative to the user's home directory, maintained by the claude CLI
CREDENTIALS_RELATIVE_PATH = Path(".claude") / ".credentials.json"


def default_credentials_path() -> "Path":
    """
    resolved on every call so a changed HOME is picked up.
    """
    return Path.home() / CREDENTIALS_RELATIVE_PATH


def read_credentials(path: "Path") -> "CredentialsEntry | None":
    """
    reads and decodes the credentials file. Returns None for every
    failure (missing, unreadable, malformed) without raising.
    """
    try:
        raw = path.read_bytes()
    except FileNotFoundError:
        logger.debug("credentials_file_missing", path=str(path))
        return None
    except OSError as exc:
        logger.debug("credentials_file_unreadable", path=str(path), error=str(exc))
        return None

    try:
        # DecodeError and JSONDecodeError (incl. bad UTF-8) are both ValueError
        return CredentialsEntry.from_json(json.loads(raw))
    except ValueError as exc:
        logger.debug("credentials_file_invalid", path=str(path), error=str(exc))
        return None


def resolve_access_token(credentials_path: "Path | None" = None) -> "str | None":
    """
    returns the access token to use, or None when there is none.

    The environment override wins over the credentials file. Absence
    of a token is an expected state for users that never logged in,
    so this never raises.
    """
    token = os.environ.get(ACCESS_TOKEN_ENV, "")
    if token:
        logger.debug("access_token_from_env", env=ACCESS_TOKEN_ENV)
        return token

    if credentials_path is None:
        try:
            credentials_path = default_credentials_path()
        except RuntimeError as exc:
            # no HOME and no passwd entry for the current uid
            logger.debug("home_directory_unknown", error=str(exc))
            return None
    path = credentials_path
    entry = read_credentials(path)
    if entry is None or not entry.access_token:
        logger.debug("access_token_not_found", path=str(path))
        return None

    logger.debug("access_token_from_file", path=str(path))
    return entry.access_token
