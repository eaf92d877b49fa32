"""Skygear container: composition root for the client runtime."""

from __future__ import annotations

import threading
from typing import Any, Dict, List, Optional, Union

import structlog

from skygear.auth import AuthContainer
from skygear.config import Configuration
from skygear.context import AppContext
from skygear.database import Database, PublicDatabase
from skygear.errors import AuthenticationRequired, InvalidConfiguration
from skygear.models import set_default_access_control
from skygear.persistent_store import PersistentStore
from skygear.pubsub import PubsubConnector, PubsubContainer
from skygear.push import PushContainer
from skygear.request import LambdaRequest, Request, ResponseHandler
from skygear.request_manager import RequestManager
from skygear.state import ConfigCell
from skygear.transport import Transport

logger = structlog.get_logger()


class Container:
    """Holds configuration, auth state and every sub-client.

    Prefer constructing one explicitly at application start and passing it
    around. ``Container.shared`` exists for code that cannot do that; it
    assumes a single writer at startup (the first caller's context wins).
    """

    _shared_instance: Optional["Container"] = None
    _shared_lock = threading.Lock()

    def __init__(
        self,
        context: AppContext,
        config: Configuration,
        transport: Optional[Transport] = None,
        pubsub_connector: Optional[PubsubConnector] = None,
    ) -> None:
        if config is None:
            raise InvalidConfiguration("Null configuration is not allowed")

        self.context = context.application_context()
        self._config = ConfigCell(config)
        self._configure_lock = threading.RLock()

        # Construction order matters: requests need the manager, and the
        # store must be read before the token and default ACL are seeded.
        self.request_manager = RequestManager(config, transport=transport)
        self.pubsub_container = PubsubContainer(config, connector=pubsub_connector)
        self.persistent_store = PersistentStore(self.context)
        self.push_container = PushContainer(self.request_manager, self.persistent_store)
        self.public_database_handle: PublicDatabase = Database.public_database(
            self.request_manager, self.persistent_store
        )
        self.private_database_handle: Database = Database.private_database(self.request_manager)
        self.auth_container = AuthContainer(self.request_manager, self.persistent_store)

        current_user = self.persistent_store.current_user
        if current_user is not None:
            self.request_manager.access_token = current_user.access_token

        if self.persistent_store.default_access_control is not None:
            set_default_access_control(self.persistent_store.default_access_control)

        logger.info(
            "Container initialised",
            endpoint=config.endpoint,
            logged_in=current_user is not None,
        )
        if config.is_using_default_api_key:
            logger.warning("使用默认 API Key，请通过 configure() 设置正确的配置")

    # ------------------------------------------------------------------
    # Shared instance
    # ------------------------------------------------------------------
    @classmethod
    def shared(cls, context: AppContext) -> "Container":
        """Process-wide container built with ``Configuration.default()``."""
        if cls._shared_instance is None:
            with cls._shared_lock:
                if cls._shared_instance is None:
                    cls._shared_instance = cls(context, Configuration.default())
        return cls._shared_instance

    default_container = shared

    @classmethod
    def _reset_shared(cls) -> None:
        with cls._shared_lock:
            instance, cls._shared_instance = cls._shared_instance, None
        if instance is not None:
            instance.close()

    # ------------------------------------------------------------------
    # Sub-clients
    # ------------------------------------------------------------------
    def auth(self) -> AuthContainer:
        return self.auth_container

    def pubsub(self) -> PubsubContainer:
        return self.pubsub_container

    def push(self) -> PushContainer:
        return self.push_container

    def public_database(self) -> PublicDatabase:
        return self.public_database_handle

    def private_database(self) -> Database:
        """Only available while a user is logged in."""
        if self.auth_container.get_current_user() is None:
            raise AuthenticationRequired("Private database is only available for logged-in user")
        return self.private_database_handle

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------
    def get_context(self) -> AppContext:
        return self.context

    def get_config(self) -> Configuration:
        return self._config.get()

    def configure(self, config: Configuration) -> None:
        """Replace the configuration on the container and its dependents.

        Either every dependent takes the new configuration or none does.
        """
        if config is None:
            raise InvalidConfiguration("Null configuration is not allowed")

        with self._configure_lock:
            previous = self._config.get()
            commits = [
                self.request_manager.stage_configuration(config),
                self.pubsub_container.stage_configuration(config),
            ]
            try:
                for commit in commits:
                    commit()
            except Exception as exc:
                logger.error("Reconfiguration failed, restoring previous configuration", error=str(exc))
                for restore in (
                    self.request_manager.stage_configuration(previous),
                    self.pubsub_container.stage_configuration(previous),
                ):
                    restore()
                raise InvalidConfiguration("Failed to apply configuration", details={"error": str(exc)}) from exc

            self._config.set(config)

        logger.info("Container reconfigured", endpoint=config.endpoint)

    def get_request_timeout(self) -> int:
        """Request timeout in milliseconds."""
        return self.request_manager.request_timeout

    def set_request_timeout(self, timeout: int) -> None:
        self.request_manager.request_timeout = timeout

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------
    def send_request(self, request: Request):
        return self.request_manager.send_request(request)

    def call_lambda_function(
        self,
        name: str,
        args: Optional[Union[List[Any], Dict[str, Any]]] = None,
        handler: Optional[ResponseHandler] = None,
    ):
        request = LambdaRequest(name, args)
        request.response_handler = handler
        return self.request_manager.send_request(request)

    call_remote_function = call_lambda_function

    def close(self) -> None:
        self.pubsub_container.close()
        self.request_manager.close()
