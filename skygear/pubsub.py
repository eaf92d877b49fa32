"""
发布/订阅子容器
Keeps channel handlers and the websocket endpoint derived from the
Configuration. The socket comes from ``attach_connection`` or from a
connector; with ``pubsub_connect_automatically`` set, ``subscribe`` and
``publish`` open it on demand. Messages sent while disconnected are queued.
"""
from __future__ import annotations

import threading
from collections import defaultdict, deque
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Deque, Dict, List, Optional, Protocol
from urllib.parse import urlencode, urlsplit, urlunsplit

import structlog

from skygear.config import Configuration
from skygear.errors import InvalidConfiguration

logger = structlog.get_logger()

PUBSUB_PATH = "_/pubsub"

PubsubHandler = Callable[[Any], None]


class PubsubConnection(Protocol):
    def send(self, message: Dict[str, Any]) -> None:
        ...


PubsubConnector = Callable[[str], PubsubConnection]


def pubsub_endpoint_for(config: Configuration) -> str:
    """``https://host/`` -> ``wss://host/_/pubsub?api_key=...``"""
    parts = urlsplit(config.endpoint)
    if parts.scheme not in ("http", "https"):
        raise InvalidConfiguration("Cannot derive pubsub endpoint", details={"endpoint": config.endpoint})
    scheme = "wss" if parts.scheme == "https" else "ws"
    path = parts.path.rstrip("/") + "/" + PUBSUB_PATH
    return urlunsplit((scheme, parts.netloc, path, urlencode({"api_key": config.api_key}), ""))


class PubsubContainer:
    def __init__(self, config: Configuration, connector: Optional[PubsubConnector] = None) -> None:
        self._lock = threading.RLock()
        self._handlers: Dict[str, List[PubsubHandler]] = defaultdict(list)
        self._pending: Deque[Dict[str, Any]] = deque()
        self._connection: Optional[PubsubConnection] = None
        self._background: Optional[ThreadPoolExecutor] = None
        self.endpoint: Optional[str] = None
        self._connector = connector

        self.configure(config)

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------
    def stage_configuration(self, config: Configuration) -> Callable[[], None]:
        if config is None:
            raise InvalidConfiguration("Null configuration is not allowed")

        endpoint = pubsub_endpoint_for(config)
        background = config.pubsub_handler_execution_in_background
        connect_automatically = config.pubsub_connect_automatically

        def commit() -> None:
            with self._lock:
                if endpoint != self.endpoint and self._connection is not None:
                    logger.info("Pubsub endpoint changed, dropping connection")
                    self._connection = None
                self.endpoint = endpoint
                self.handler_execution_in_background = background
                self.connect_automatically = connect_automatically

        return commit

    def configure(self, config: Configuration) -> None:
        self.stage_configuration(config)()

    # ------------------------------------------------------------------
    # Connection
    # ------------------------------------------------------------------
    @property
    def connected(self) -> bool:
        with self._lock:
            return self._connection is not None

    def set_connector(self, connector: Optional[PubsubConnector]) -> None:
        """``connector(endpoint)`` opens a connection to the pubsub endpoint."""
        with self._lock:
            self._connector = connector

    def connect(self) -> None:
        """Open a connection through the connector and attach it."""
        with self._lock:
            if self._connector is None:
                raise InvalidConfiguration("No pubsub connector set")
            if self._connection is not None:
                return
            self.attach_connection(self._connector(self.endpoint))
            logger.info("Pubsub connected")

    def _connect_if_automatic(self) -> None:
        if self._connection is None and self.connect_automatically and self._connector is not None:
            self.connect()

    def attach_connection(self, connection: PubsubConnection) -> None:
        """Use ``connection`` for outbound messages; re-subscribes and flushes the queue."""
        with self._lock:
            self._connection = connection
            for channel in self._handlers:
                connection.send({"action": "sub", "channel": channel})
            while self._pending:
                connection.send(self._pending.popleft())

    def detach_connection(self) -> None:
        with self._lock:
            self._connection = None

    def _send(self, message: Dict[str, Any]) -> None:
        with self._lock:
            self._connect_if_automatic()
            if self._connection is None:
                self._pending.append(message)
                return
            self._connection.send(message)

    # ------------------------------------------------------------------
    # Channels
    # ------------------------------------------------------------------
    def subscribe(self, channel: str, handler: PubsubHandler) -> None:
        with self._lock:
            self._connect_if_automatic()
            first = channel not in self._handlers
            if handler not in self._handlers[channel]:
                self._handlers[channel].append(handler)
            if first and self._connection is not None:
                self._connection.send({"action": "sub", "channel": channel})

    def unsubscribe(self, channel: str, handler: Optional[PubsubHandler] = None) -> None:
        """Remove ``handler`` from ``channel``, or every handler when omitted."""
        with self._lock:
            if channel not in self._handlers:
                return
            if handler is not None and handler in self._handlers[channel]:
                self._handlers[channel].remove(handler)
            if handler is None or not self._handlers[channel]:
                del self._handlers[channel]
                if self._connection is not None:
                    self._connection.send({"action": "unsub", "channel": channel})

    def unsubscribe_all(self) -> None:
        with self._lock:
            for channel in list(self._handlers):
                self.unsubscribe(channel)

    def subscribed_channels(self) -> List[str]:
        with self._lock:
            return sorted(self._handlers)

    def publish(self, channel: str, data: Any) -> None:
        self._send({"action": "pub", "channel": channel, "data": data})

    def dispatch(self, channel: str, data: Any) -> None:
        """Deliver an inbound message to the channel's handlers."""
        with self._lock:
            handlers = list(self._handlers.get(channel, ()))
            background = self.handler_execution_in_background
            if background and self._background is None:
                self._background = ThreadPoolExecutor(max_workers=1, thread_name_prefix="skygear-pubsub")
            executor = self._background

        for handler in handlers:
            if background:
                executor.submit(self._run_handler, channel, handler, data)
            else:
                self._run_handler(channel, handler, data)

    @staticmethod
    def _run_handler(channel: str, handler: PubsubHandler, data: Any) -> None:
        try:
            handler(data)
        except Exception:
            logger.exception("Pubsub handler raised", channel=channel)

    def close(self) -> None:
        with self._lock:
            self._connection = None
            executor, self._background = self._background, None
        if executor is not None:
            executor.shutdown(wait=True)
