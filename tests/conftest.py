import json
from pathlib import Path
from typing import Iterator

import pytest
from prometheus_client import CollectorRegistry
from structlog.testing import capture_logs

from claudescope.credentials import ACCESS_TOKEN_ENV


@pytest.fixture()
def registry() -> "CollectorRegistry":
    """
    fresh Prometheus registry to avoid cross-test state.
    """
    return CollectorRegistry()


@pytest.fixture(autouse=True)
def log_output() -> "Iterator[list[dict]]":
    """
    captures structlog events so nothing is printed on stdout and
    tests can assert on emitted events.
    """
    with capture_logs() as captured:
        yield captured


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: "Path", monkeypatch: "pytest.MonkeyPatch") -> "Path":
    """
    points HOME at an empty directory and clears the token override
    so no test ever reads the real credentials of the machine.
    """
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv(ACCESS_TOKEN_ENV, raising=False)
    return home


@pytest.fixture()
def write_credentials(isolated_home: "Path"):
    """
    writes ~/.claude/.credentials.json; accepts a dict (dumped as JSON)
    or raw text.
    """

    def _write(content: "dict | str") -> "Path":
        path = isolated_home / ".claude" / ".credentials.json"
        path.parent.mkdir(exist_ok=True)
        text = content if isinstance(content, str) else json.dumps(content)
        path.write_text(text)
        return path

    return _write
