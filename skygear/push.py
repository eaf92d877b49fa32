"""Push notification sub-container."""
from __future__ import annotations

from typing import Any, Optional

import structlog

from skygear.errors import RequestFailed
from skygear.persistent_store import PersistentStore
from skygear.request import FunctionResponseHandler, RegisterDeviceRequest, ResponseHandler, UnregisterDeviceRequest
from skygear.request_manager import RequestManager

logger = structlog.get_logger()


class PushContainer:
    """Registers this device for push; the device id is kept in the persistent store."""

    def __init__(self, request_manager: RequestManager, persistent_store: PersistentStore) -> None:
        self._request_manager = request_manager
        self._store = persistent_store

    @property
    def device_id(self) -> Optional[str]:
        return self._store.device_id

    def _forward_error(self, handler: Optional[ResponseHandler]):
        def on_fail(error: RequestFailed) -> None:
            if handler is not None:
                handler.handle_error(error)

        return on_fail

    def _persist_device_id(self, device_id: Optional[str], handler: Optional[ResponseHandler]) -> None:
        """Store ``device_id``; on write failure restore the old id and fail the handler."""
        previous = self._store.device_id
        self._store.device_id = device_id
        try:
            self._store.save()
        except OSError as exc:
            self._store.device_id = previous
            failure = RequestFailed("Could not persist device id", details={"error": str(exc)})
            if handler is not None:
                handler.handle_error(failure)
            raise failure from exc

    def register_device_token(self, device_token: str, topic: Optional[str] = None, handler: Optional[ResponseHandler] = None):
        request = RegisterDeviceRequest(device_token, topic=topic, device_id=self.device_id)

        def on_success(result: Any) -> None:
            device_id = result.get("id") if isinstance(result, dict) else None
            if device_id:
                self._persist_device_id(device_id, handler)
                logger.info("Device registered", device_id=device_id)
            if handler is not None:
                handler.handle_response(device_id)

        request.response_handler = FunctionResponseHandler(on_success, self._forward_error(handler))
        return self._request_manager.send_request(request)

    def unregister_device_token(self, handler: Optional[ResponseHandler] = None):
        request = UnregisterDeviceRequest(self.device_id)

        def on_success(result: Any) -> None:
            self._persist_device_id(None, handler)
            if handler is not None:
                handler.handle_response(result)

        request.response_handler = FunctionResponseHandler(on_success, self._forward_error(handler))
        return self._request_manager.send_request(request)
