"""
请求与响应处理器
Request is a named action plus a payload; ResponseHandler is the single-fire
completion callback attached to it.
"""
from __future__ import annotations

import threading
from typing import Any, Callable, Dict, Optional

import structlog

from skygear.errors import RequestFailed

logger = structlog.get_logger()

_fire_lock = threading.Lock()


class ResponseHandler:
    """Two-outcome completion callback.

    Subclasses override ``on_success`` / ``on_fail``. The transport side only
    calls ``handle_response`` / ``handle_error``, which make sure exactly one
    outcome is delivered, once.
    """

    def on_success(self, result: Any) -> None:
        pass

    def on_fail(self, error: RequestFailed) -> None:
        pass

    @property
    def fired(self) -> bool:
        return getattr(self, "_fired", False)

    def _claim(self) -> bool:
        with _fire_lock:
            if getattr(self, "_fired", False):
                return False
            self._fired = True
            return True

    def handle_response(self, result: Any) -> None:
        if not self._claim():
            logger.warning("Response handler already fired, dropping result", handler=type(self).__name__)
            return
        self.on_success(result)

    def handle_error(self, error: RequestFailed) -> None:
        if not self._claim():
            logger.warning("Response handler already fired, dropping error", handler=type(self).__name__)
            return
        self.on_fail(error)


class FunctionResponseHandler(ResponseHandler):
    """ResponseHandler built from two plain callables."""

    def __init__(
        self,
        on_success: Optional[Callable[[Any], None]] = None,
        on_fail: Optional[Callable[[RequestFailed], None]] = None,
    ) -> None:
        super().__init__()
        self._success_cb = on_success
        self._fail_cb = on_fail

    def on_success(self, result: Any) -> None:
        if self._success_cb is not None:
            self._success_cb(result)

    def on_fail(self, error: RequestFailed) -> None:
        if self._fail_cb is not None:
            self._fail_cb(error)


class Request:
    """Outbound operation envelope.

    ``action`` is fixed at construction; ``data`` may be filled in by the
    subclass constructor. Once handed to ``RequestManager.send_request`` the
    request is considered dispatched and must not be reused.
    """

    def __init__(self, action: str, data: Optional[Dict[str, Any]] = None) -> None:
        if not action:
            raise ValueError("action is required")
        self._action = action
        self.data: Dict[str, Any] = dict(data) if data else {}
        self.response_handler: Optional[ResponseHandler] = None
        self.dispatched = False

    @property
    def action(self) -> str:
        return self._action

    def validate(self) -> None:
        """Raise ``InvalidRequest`` if the payload cannot be sent."""
        return

    def __repr__(self) -> str:
        return f"{type(self).__name__}(action={self._action!r}, keys={sorted(self.data)})"
