"""
Integration Test Fixtures.

An in-memory backup service behind httpx.MockTransport. Unlike the unit
test fake it keeps state, checks every request signature the way the
real service does, and answers with the service's envelopes.
"""

import base64
import hashlib
import hmac
import json
import re
from collections.abc import Generator
from typing import Any

import httpx
import pytest

from cloudbackup.api.client import BackupClient

ACCESS_KEY = "AKIAINTEGRATION"
SECRET_KEY = "integration-secret-key"

ITEM_PATH = re.compile(r"^/api/(servers|schedules|retentions|storages)(?:/(\d+))?(/install)?$")


class SigningError(AssertionError):
    """The fake service rejected a request signature."""


class BackupService:
    """
    Stateful stand-in for the backup service.

    Usage:
        service = BackupService()
        client = BackupClient(host, ACCESS_KEY, SECRET_KEY,
                              transport=httpx.MockTransport(service))
    """

    def __init__(self, secrets: dict[str, str] | None = None) -> None:
        self.secrets = secrets or {ACCESS_KEY: SECRET_KEY}
        self.store: dict[str, dict[int, dict[str, Any]]] = {
            "servers": {},
            "schedules": {},
            "retentions": {},
            "storages": {},
        }
        self.requests: list[httpx.Request] = []
        self._next_id = 100

    def verify(self, request: httpx.Request) -> None:
        """Rebuild the canonical message from the request and check the HMAC."""
        access_key = request.headers.get("bl-access-key", "")
        secret = self.secrets.get(access_key)
        if secret is None:
            raise SigningError(f"unknown access key {access_key!r}")

        lines = [request.method, str(request.url), request.headers["date"], access_key]
        if request.content:
            lines.append(hashlib.md5(request.content).hexdigest())
        message = "".join(f"{line}\n" for line in lines)

        expected = base64.b64encode(
            hmac.new(secret.encode(), message.encode(), hashlib.sha256).digest()
        ).decode()
        if request.headers["Authorization"] != f"BL {expected}":
            raise SigningError("signature mismatch")
        if request.headers["bl-msg"] != message.replace("\n", "\\n"):
            raise SigningError("bl-msg does not match the signed message")

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        try:
            self.verify(request)
        except SigningError as e:
            return self._error(401, str(e))

        if request.url.path == "/api/backups/keys" and request.method == "GET":
            return httpx.Response(200, content=b'[{"backupId": 1, "key": "k1"}]')

        match = ITEM_PATH.match(request.url.path)
        if match is None:
            return httpx.Response(404, content=b"404 page not found")

        kind, raw_id, install = match.groups()
        records = self.store[kind]
        identifier = int(raw_id) if raw_id else None

        if identifier is None:
            if request.method != "POST":
                return httpx.Response(405, content=b"method not allowed")
            data = json.loads(request.content)
            self._next_id += 1
            records[self._next_id] = {**data, "id": self._next_id}
            return self._ok(id=self._next_id)

        if identifier not in records:
            return self._error(404, f"{kind[:-1]} {identifier} not found")

        if install:
            return httpx.Response(200, content=f"#!/bin/bash\necho install {identifier}\n".encode())
        if request.method == "GET":
            return httpx.Response(200, json=records[identifier])
        if request.method == "POST":
            records[identifier] = {**json.loads(request.content), "id": identifier}
            return self._ok()
        if request.method == "DELETE":
            del records[identifier]
            return self._ok()
        return httpx.Response(405, content=b"method not allowed")

    @staticmethod
    def _ok(**extra: Any) -> httpx.Response:
        return httpx.Response(200, json={"status": "ok", **extra})

    @staticmethod
    def _error(status_code: int, message: str) -> httpx.Response:
        return httpx.Response(status_code, json={"status": "error", "message": message})


@pytest.fixture
def backup_service() -> BackupService:
    return BackupService()


@pytest.fixture
def backup_transport(backup_service: BackupService) -> httpx.MockTransport:
    return httpx.MockTransport(backup_service)


@pytest.fixture
def api(backup_transport: httpx.MockTransport) -> Generator[BackupClient, None, None]:
    """BackupClient talking to the stateful service."""
    with BackupClient("backups.example.com", ACCESS_KEY, SECRET_KEY, transport=backup_transport) as client:
        yield client


@pytest.fixture
def keys() -> tuple[str, str]:
    """Access key and secret the service accepts."""
    return ACCESS_KEY, SECRET_KEY
