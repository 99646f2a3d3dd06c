"""Pytest configuration - loads .env for integration tests and provides a fake HTTP transport."""

import email.message
import io
import json
import urllib.error
import urllib.request
from pathlib import Path
from typing import Any

import pytest
from dotenv import load_dotenv

from bos_cli.core.client import APIClient, RetryPolicy

# Load .env from project root
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(env_path)

BOS_SETTINGS = ("BOS_ADDR", "BOS_ENVIRONMENT", "BOS_INSECURE", "BOS_RETRIES", "BOS_TIMEOUT")


def _headers(values: dict[str, str] | None) -> email.message.Message:
    message = email.message.Message()
    for key, value in (values or {}).items():
        message[key] = value
    return message


class FakeResponse:
    """Stands in for the object returned by urllib.request.urlopen."""

    def __init__(self, body: bytes, status: int = 200, headers: dict[str, str] | None = None):
        self._body = body
        self.status = status
        self.headers = _headers(headers)

    def read(self) -> bytes:
        return self._body

    def __enter__(self) -> "FakeResponse":
        return self

    def __exit__(self, *exc: Any) -> None:
        return None


class FakeTransport:
    """Records requests and answers them from a queue of canned responses."""

    def __init__(self) -> None:
        self.requests: list[urllib.request.Request] = []
        self.timeouts: list[float] = []
        self.responses: list[Any] = []

    def reply(self, data: Any = None, status: int = 200, headers: dict[str, str] | None = None, raw: bytes | None = None):
        body = raw if raw is not None else (b"" if data is None else json.dumps(data).encode("utf-8"))
        self.responses.append(FakeResponse(body, status, headers))
        return self

    def fail(self, status: int, data: Any = None, reason: str = "", headers: dict[str, str] | None = None, raw: bytes | None = None):
        body = raw if raw is not None else (b"" if data is None else json.dumps(data).encode("utf-8"))
        self.responses.append(
            urllib.error.HTTPError("https://example.invalid", status, reason, _headers(headers), io.BytesIO(body))
        )
        return self

    def raise_(self, error: BaseException):
        self.responses.append(error)
        return self

    def __call__(self, req: urllib.request.Request, timeout: float | None = None, context: Any = None) -> FakeResponse:
        self.requests.append(req)
        self.timeouts.append(timeout or 0)
        if not self.responses:
            raise AssertionError(f"unexpected request {req.get_method()} {req.full_url}")
        item = self.responses.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    @property
    def last(self) -> urllib.request.Request:
        return self.requests[-1]

    def body(self, index: int = -1) -> Any:
        data = self.requests[index].data
        return json.loads(data) if data else None


@pytest.fixture
def isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove BOS_* settings so unit tests see the defaults."""
    for name in BOS_SETTINGS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def transport(monkeypatch: pytest.MonkeyPatch) -> FakeTransport:
    fake = FakeTransport()
    monkeypatch.setattr(urllib.request, "urlopen", fake)
    return fake


@pytest.fixture
def no_sleep(monkeypatch: pytest.MonkeyPatch) -> list[float]:
    """Record sleeps instead of waiting."""
    delays: list[float] = []
    monkeypatch.setattr("time.sleep", delays.append)
    return delays


@pytest.fixture
def api(isolated_env: None, transport: FakeTransport) -> APIClient:
    return APIClient(addr="api.sandbox.bankrs.com", retry_policy=RetryPolicy(max_retries=0))
