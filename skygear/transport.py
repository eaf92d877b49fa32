"""
传输层
HttpTransport posts a request's payload to the Skygear endpoint with httpx.
Any other object with a matching ``send`` can be plugged into the
RequestManager instead.
"""
from typing import Any, Protocol
from urllib.parse import urljoin

import httpx
import structlog

from skygear.config import Configuration
from skygear.errors import RequestFailed

logger = structlog.get_logger()


class Transport(Protocol):
    def send(self, action: str, payload: dict[str, Any], access_token: str | None, timeout_ms: int) -> Any:
        """Perform the call and return its result, or raise ``RequestFailed``."""
        ...


class HttpTransport:
    """JSON over HTTP transport"""

    def __init__(self, config: Configuration, client: httpx.Client | None = None):
        # endpoint and api key are swapped as one tuple on reconfiguration
        self._settings = (config.endpoint, config.api_key)
        self._client = client or httpx.Client()

    @property
    def endpoint(self) -> str:
        return self._settings[0]

    @property
    def api_key(self) -> str:
        return self._settings[1]

    def configure(self, config: Configuration) -> None:
        self._settings = (config.endpoint, config.api_key)

    def url_for(self, action: str, endpoint: str | None = None) -> str:
        """``auth:login`` -> ``<endpoint>auth/login``"""
        return urljoin(endpoint or self.endpoint, action.replace(":", "/"))

    def send(self, action: str, payload: dict[str, Any], access_token: str | None, timeout_ms: int) -> Any:
        endpoint, api_key = self._settings

        body: dict[str, Any] = {"action": action, "api_key": api_key}
        if access_token:
            body["access_token"] = access_token
        body.update(payload)

        headers = {
            "Content-Type": "application/json",
            "X-Skygear-API-Key": api_key,
        }
        if access_token:
            headers["X-Skygear-Access-Token"] = access_token

        try:
            response = self._client.post(
                self.url_for(action, endpoint),
                json=body,
                headers=headers,
                timeout=timeout_ms / 1000,
            )
        except httpx.TimeoutException as exc:
            raise RequestFailed(f"Request timed out after {timeout_ms}ms", details={"action": action}) from exc
        except httpx.HTTPError as exc:
            raise RequestFailed(f"Error contacting Skygear server: {exc}", details={"action": action}) from exc

        try:
            data = response.json()
        except ValueError as exc:
            raise RequestFailed(
                f"Invalid JSON from Skygear server: {exc}",
                status_code=response.status_code,
                details={"action": action},
            ) from exc

        if isinstance(data, dict) and "error" in data:
            raise RequestFailed.from_payload(data, status_code=response.status_code)

        if response.status_code >= 400:
            raise RequestFailed(
                f"Skygear server returned {response.status_code}",
                status_code=response.status_code,
                details={"action": action},
            )

        if isinstance(data, dict) and "result" in data:
            return data["result"]
        return data

    def close(self) -> None:
        self._client.close()
