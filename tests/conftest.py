"""Pytest fixtures for the client runtime tests"""

import threading
from collections.abc import Generator
from dataclasses import dataclass
from typing import Any

import pytest

from skygear.config import Configuration
from skygear.container import Container
from skygear.context import AppContext
from skygear.models import set_default_access_control
from skygear.request import ResponseHandler

# 测试端点
TEST_ENDPOINT = "http://localhost:3000/"
TEST_API_KEY = "test-api-key"


@dataclass
class SentCall:
    action: str
    payload: dict[str, Any]
    access_token: str | None
    timeout_ms: int


class FakeTransport:
    """Records every call; answers from ``responses`` keyed by action.

    A response may be a value, an exception instance (raised), a callable
    taking the payload, or a ``threading.Event`` the call blocks on.
    """

    def __init__(self) -> None:
        self.calls: list[SentCall] = []
        self.responses: dict[str, Any] = {}
        self.configured: list[Configuration] = []
        self.fail_configure_for: str | None = None
        self.closed = False
        self._lock = threading.Lock()

    def respond(self, action: str, response: Any) -> None:
        self.responses[action] = response

    def send(self, action, payload, access_token, timeout_ms):
        with self._lock:
            self.calls.append(SentCall(action, dict(payload), access_token, timeout_ms))
        response = self.responses.get(action, {})
        if isinstance(response, threading.Event):
            response.wait()
            return {}
        if isinstance(response, BaseException):
            raise response
        if callable(response):
            return response(payload)
        return response

    def configure(self, config: Configuration) -> None:
        if self.fail_configure_for is not None and config.endpoint == self.fail_configure_for:
            raise RuntimeError("transport rejected configuration")
        self.configured.append(config)

    def close(self) -> None:
        self.closed = True

    def calls_for(self, action: str) -> list[SentCall]:
        with self._lock:
            return [call for call in self.calls if call.action == action]


class RecordingHandler(ResponseHandler):
    """Collects outcomes and signals when the first one arrives"""

    def __init__(self) -> None:
        super().__init__()
        self.results: list[Any] = []
        self.errors: list[Any] = []
        self.threads: list[threading.Thread] = []
        self.done = threading.Event()

    def on_success(self, result: Any) -> None:
        self.threads.append(threading.current_thread())
        self.results.append(result)
        self.done.set()

    def on_fail(self, error) -> None:
        self.threads.append(threading.current_thread())
        self.errors.append(error)
        self.done.set()


@pytest.fixture(autouse=True)
def reset_process_state() -> Generator[None, None, None]:
    """Process-wide defaults must not leak between tests"""
    set_default_access_control(None)
    yield
    set_default_access_control(None)
    Container._reset_shared()


@pytest.fixture
def context(tmp_path) -> AppContext:
    return AppContext(name="test", data_dir=tmp_path / "data")


@pytest.fixture
def config() -> Configuration:
    return Configuration(endpoint=TEST_ENDPOINT, api_key=TEST_API_KEY, request_timeout=5000)


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def handler_factory():
    return RecordingHandler


@pytest.fixture
def container(context, config, transport) -> Generator[Container, None, None]:
    c = Container(context, config, transport=transport)
    yield c
    c.close()
