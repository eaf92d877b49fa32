"""
请求管理器
Single dispatch point for outbound requests. Owns the access token and the
request timeout; every request is completed through its handler exactly once.
"""
from __future__ import annotations

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Optional

import structlog

from skygear.config import Configuration
from skygear.errors import InvalidConfiguration, InvalidRequest, RequestFailed
from skygear.request.base import Request
from skygear.state import TokenCell
from skygear.transport import HttpTransport, Transport

logger = structlog.get_logger()

DEFAULT_MAX_WORKERS = 4


class RequestManager:
    """Dispatches requests to the transport on a worker pool.

    Token and timeout are read at hand-off time, on the worker thread, so a
    request in flight when either changes may use the old or the new value.
    """

    def __init__(
        self,
        config: Configuration,
        transport: Optional[Transport] = None,
        token_cell: Optional[TokenCell] = None,
        max_workers: int = DEFAULT_MAX_WORKERS,
    ) -> None:
        self.token_cell = token_cell or TokenCell()
        self.transport = transport if transport is not None else HttpTransport(config)

        self._lock = threading.RLock()
        self._request_timeout = config.request_timeout
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="skygear-request")

    # ------------------------------------------------------------------
    # Shared state
    # ------------------------------------------------------------------
    @property
    def access_token(self) -> Optional[str]:
        return self.token_cell.get()

    @access_token.setter
    def access_token(self, token: Optional[str]) -> None:
        self.token_cell.set(token)

    @property
    def request_timeout(self) -> int:
        with self._lock:
            return self._request_timeout

    @request_timeout.setter
    def request_timeout(self, timeout: int) -> None:
        if timeout <= 0:
            raise InvalidConfiguration("Request timeout must be positive", details={"timeout": timeout})
        with self._lock:
            self._request_timeout = timeout

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------
    def stage_configuration(self, config: Configuration) -> Callable[[], None]:
        """Validate ``config`` and return a commit callable.

        Nothing changes until the callable runs; the access token is never
        touched.
        """
        if config is None:
            raise InvalidConfiguration("Null configuration is not allowed")

        timeout = config.request_timeout
        transport_configure = getattr(self.transport, "configure", None)

        def commit() -> None:
            with self._lock:
                self._request_timeout = timeout
                if transport_configure is not None:
                    transport_configure(config)

        return commit

    def configure(self, config: Configuration) -> None:
        self.stage_configuration(config)()

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------
    def send_request(self, request: Request) -> Future:
        """Hand ``request`` to the transport.

        The returned future resolves with the same outcome the handler gets.
        Transport failures never raise here.
        """
        if request.dispatched:
            raise InvalidRequest("Request has already been sent", details={"action": request.action})
        request.dispatched = True

        future: Future = Future()
        try:
            self._executor.submit(self._dispatch, request, future)
        except RuntimeError as exc:
            # executor already shut down
            logger.error("Request dispatch rejected", action=request.action, error=str(exc))
            error = RequestFailed("Request manager is closed", details={"action": request.action})
            # handlers never run on the caller's thread
            threading.Thread(
                target=self._complete,
                args=(request, future),
                kwargs={"error": error},
                name="skygear-request-closed",
                daemon=True,
            ).start()
        return future

    def _dispatch(self, request: Request, future: Future) -> None:
        try:
            request.validate()
        except InvalidRequest as exc:
            logger.warning("Request validation failed", action=request.action, error=exc.message)
            self._complete(request, future, error=RequestFailed(exc.message, error_code=exc.code, details=exc.details))
            return

        token = self.access_token
        timeout = self.request_timeout
        logger.debug("Dispatching request", action=request.action, authenticated=token is not None, timeout=timeout)

        try:
            result = self.transport.send(request.action, request.data, token, timeout)
        except RequestFailed as exc:
            logger.info("Request failed", action=request.action, error=exc.message, error_code=exc.error_code)
            self._complete(request, future, error=exc)
        except Exception as exc:
            logger.exception("Transport raised unexpected error", action=request.action)
            self._complete(request, future, error=RequestFailed(str(exc), details={"action": request.action}))
        else:
            self._complete(request, future, result=result)

    def _complete(
        self,
        request: Request,
        future: Future,
        result: Any = None,
        error: Optional[RequestFailed] = None,
    ) -> None:
        handler = request.response_handler
        if handler is not None:
            try:
                if error is not None:
                    handler.handle_error(error)
                else:
                    handler.handle_response(result)
            except RequestFailed as exc:
                # the success handler rejected the result
                logger.info("Response handler rejected result", action=request.action, error=exc.message)
                error = exc
            except Exception:
                logger.exception("Response handler raised", action=request.action)

        if error is not None:
            future.set_exception(error)
        else:
            future.set_result(result)

    def close(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)
        close = getattr(self.transport, "close", None)
        if close is not None:
            close()
