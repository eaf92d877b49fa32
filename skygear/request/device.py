"""Device registration requests."""
from typing import Optional

from skygear.errors import InvalidRequest
from skygear.request.base import Request

DEVICE_TYPE = "android"


class RegisterDeviceRequest(Request):
    def __init__(self, device_token: str, topic: Optional[str] = None, device_id: Optional[str] = None):
        super().__init__("device:register")
        self.data["type"] = DEVICE_TYPE
        self.data["device_token"] = device_token
        if topic is not None:
            self.data["topic"] = topic
        if device_id is not None:
            self.data["id"] = device_id

    def validate(self) -> None:
        if not self.data.get("device_token"):
            raise InvalidRequest("device_token is required")


class UnregisterDeviceRequest(Request):
    """Without a device id the server unregisters whatever is currently registered."""

    def __init__(self, device_id: Optional[str] = None):
        super().__init__("device:unregister")
        if device_id is not None:
            self.data["id"] = device_id
