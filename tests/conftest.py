"""
Root Pytest Fixtures.

Shared fixtures available to all test types.

No test touches the network: the API client is built on an
httpx.MockTransport whose handler (FakeService) records every request
and answers from a queue of canned responses.
"""

import json
import logging
from collections import deque
from collections.abc import Generator
from pathlib import Path
from typing import Any

import httpx
import pytest

from cloudbackup.api.client import BackupClient
from cloudbackup.core.config import get_settings

TEST_HOST = "backups.example.com"
TEST_BASE_URL = "https://backups.example.com/api"
TEST_ACCESS_KEY = "AKIATESTKEY"
TEST_SECRET_KEY = "wJalrXUtnFEMIsecret"

BL_ENV_VARS = ("BL_HOST", "BL_ACCESS_KEY", "BL_SECRET_KEY", "BL_TIMEOUT")


class FakeService:
    """
    httpx.MockTransport handler standing in for the backup service.

    Usage:
        service.reply(200, {"status": "ok", "id": 42})
        client.servers.create(server)
        assert service.requests[0].method == "POST"
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._replies: deque[httpx.Response | Exception] = deque()

    def reply(
        self,
        status_code: int = 200,
        payload: Any = None,
        content: bytes | str | None = None,
    ) -> None:
        """Queue a response: JSON payload, or raw content."""
        if payload is not None:
            content = json.dumps(payload)
        self._replies.append(httpx.Response(status_code, content=content or b""))

    def fail_with(self, error: Exception) -> None:
        """Queue an exception to raise instead of answering."""
        self._replies.append(error)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self._replies:
            raise AssertionError(f"Unexpected request {request.method} {request.url}")

        reply = self._replies.popleft()
        if isinstance(reply, Exception):
            raise reply
        return reply


# =============================================================================
# Environment isolation
# =============================================================================


@pytest.fixture(autouse=True)
def _clear_settings_cache() -> Generator[None, None, None]:
    """Clear lru_cache between tests so each test reads a fresh environment."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point HOME at an empty directory and drop BL_* variables."""
    home_dir = tmp_path / "home"
    home_dir.mkdir()
    monkeypatch.setenv("HOME", str(home_dir))
    for var in BL_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    return home_dir


@pytest.fixture(autouse=True)
def _restore_root_logger() -> Generator[None, None, None]:
    """Remove handlers added by setup_logging (CLI callback included)."""
    root_logger = logging.getLogger()
    saved_handlers = root_logger.handlers[:]
    saved_level = root_logger.level
    yield
    for handler in root_logger.handlers[:]:
        if handler not in saved_handlers:
            root_logger.removeHandler(handler)
            handler.close()
    root_logger.setLevel(saved_level)


# =============================================================================
# API fixtures
# =============================================================================


@pytest.fixture
def service() -> FakeService:
    return FakeService()


@pytest.fixture
def mock_transport(service: FakeService) -> httpx.MockTransport:
    return httpx.MockTransport(service)


@pytest.fixture
def client(mock_transport: httpx.MockTransport) -> Generator[BackupClient, None, None]:
    """BackupClient wired to the fake service."""
    with BackupClient(TEST_HOST, TEST_ACCESS_KEY, TEST_SECRET_KEY, transport=mock_transport) as api:
        yield api
