import json
from pathlib import Path

import pytest
from aiohttp.test_utils import TestClient


@pytest.fixture
def mock_trace_log(tmp_path: Path) -> str:
    """Enable trace log for this module."""
    return str(tmp_path / "trace.log")


async def test_trace_logging(
    client: TestClient,
    mock_trace_log: str,
    auth_headers: dict[str, str],
) -> None:
    """Verify that requests are logged without credentials."""
    resp = await client.post(
        "/settings/account",
        data={"old_password": "hunter2"},
        headers=auth_headers,
        allow_redirects=False,
    )
    assert resp.status == 302

    content = Path(mock_trace_log).read_text().strip()
    entry = json.loads(content)
    assert entry["method"] == "POST"
    assert "/settings/account" in entry["url"]
    assert entry["headers"]["x-access-token"] == "<redacted>"
    assert entry["body_size"] > 0
    assert "hunter2" not in content
