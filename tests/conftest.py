from __future__ import annotations

import json
from typing import Any
from urllib.parse import parse_qsl, urlparse

import pytest

from vercel_cli.http_client import VercelClient
from vercel_cli.logging_config import configure_logging


class FakeTransport:
    """Records every request and replays queued (status, payload) responses."""

    def __init__(self) -> None:
        self.calls: list[dict[str, Any]] = []
        self.responses: list[tuple[int, Any]] = []

    def queue(self, status: int, payload: Any) -> "FakeTransport":
        self.responses.append((status, payload))
        return self

    def __call__(
        self,
        *,
        method: str,
        url: str,
        headers: dict[str, str],
        body: bytes | None = None,
        timeout_seconds: int = 30,
    ) -> tuple[int, dict[str, str], bytes]:
        del timeout_seconds
        parsed = urlparse(url)
        self.calls.append(
            {
                "method": method,
                "url": url,
                "path": parsed.path,
                "query": dict(parse_qsl(parsed.query)),
                "headers": dict(headers),
                "body": json.loads(body.decode("utf-8")) if body else None,
            }
        )
        if not self.responses:
            return 200, {}, b"{}"
        status, payload = self.responses.pop(0)
        raw = payload if isinstance(payload, bytes) else json.dumps(payload).encode("utf-8")
        return status, {}, raw

    def methods(self) -> list[str]:
        return [c["method"] for c in self.calls]


@pytest.fixture(autouse=True)
def _quiet_logging() -> None:
    configure_logging(verbose=False)


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def fake_transport(monkeypatch, transport: FakeTransport) -> FakeTransport:
    fake = transport
    monkeypatch.setattr(
        "vercel_cli.commands.build_client",
        lambda g: VercelClient(g, transport=fake),
    )
    return fake


@pytest.fixture
def vercel_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("VERCEL_TOKEN", "tok-test")
    monkeypatch.delenv("VERCEL_TEAM_ID", raising=False)
    monkeypatch.delenv("VERCEL_API_URL", raising=False)
    monkeypatch.delenv("VERCEL_ENV_FILE", raising=False)
    return tmp_path
