"""
认证子容器
AuthContainer owns login state changes: it is the only writer of the access
token after the container has started.
"""
from __future__ import annotations

from typing import Any, Callable, Dict, Optional

import structlog
from pydantic import ValidationError

from skygear.errors import RequestFailed
from skygear.models import User
from skygear.persistent_store import PersistentStore
from skygear.request import (
    FunctionResponseHandler,
    GetCurrentUserRequest,
    LoginRequest,
    LogoutRequest,
    Request,
    ResponseHandler,
    SignupRequest,
)
from skygear.request_manager import RequestManager

logger = structlog.get_logger()


class AuthContainer:
    def __init__(self, request_manager: RequestManager, persistent_store: PersistentStore) -> None:
        self._request_manager = request_manager
        self._store = persistent_store

    def get_current_user(self) -> Optional[User]:
        return self._store.current_user

    @property
    def current_user(self) -> Optional[User]:
        return self.get_current_user()

    def update_current_user(self, user: Optional[User]) -> None:
        """Persist ``user`` and point the request manager at its token.

        If the store cannot be written, the previous user stays current and
        the token is left alone.
        """
        previous = self._store.current_user
        self._store.current_user = user
        try:
            self._store.save()
        except OSError:
            self._store.current_user = previous
            logger.error("Failed to persist current user, keeping previous state")
            raise
        self._request_manager.access_token = user.access_token if user else None
        logger.info("Current user updated", user_id=user.user_id if user else None)

    # ------------------------------------------------------------------
    # Auth actions
    # ------------------------------------------------------------------
    def _send(
        self,
        request: Request,
        apply: Callable[[Any], Any],
        handler: Optional[ResponseHandler],
    ):
        """Send ``request``; ``apply`` turns the server result into auth state.

        A result that cannot be applied fails the caller's handler and the
        returned future with ``RequestFailed``.
        """

        def on_success(result: Any) -> None:
            try:
                value = apply(result)
            except (ValidationError, OSError) as exc:
                logger.warning("Could not apply auth response", action=request.action, error=str(exc))
                failure = RequestFailed(
                    "Invalid auth response",
                    details={"action": request.action, "error": str(exc)},
                )
                if handler is not None:
                    handler.handle_error(failure)
                raise failure from exc
            if handler is not None:
                handler.handle_response(value)

        def on_fail(error: RequestFailed) -> None:
            if handler is not None:
                handler.handle_error(error)

        request.response_handler = FunctionResponseHandler(on_success, on_fail)
        return self._request_manager.send_request(request)

    def _login_with_result(self, result: Dict[str, Any]) -> User:
        user = User.from_auth_result(result)
        self.update_current_user(user)
        return user

    def signup_with_username(self, username: str, password: str, profile=None, handler=None):
        request = SignupRequest(username=username, password=password, profile=profile)
        return self._send(request, self._login_with_result, handler)

    def signup_with_email(self, email: str, password: str, profile=None, handler=None):
        request = SignupRequest(email=email, password=password, profile=profile)
        return self._send(request, self._login_with_result, handler)

    def login_with_username(self, username: str, password: str, handler=None):
        return self._send(LoginRequest(username=username, password=password), self._login_with_result, handler)

    def login_with_email(self, email: str, password: str, handler=None):
        return self._send(LoginRequest(email=email, password=password), self._login_with_result, handler)

    def logout(self, handler: Optional[ResponseHandler] = None):
        """Clears the current user once the server confirms."""

        def apply(result: Any) -> Any:
            self.update_current_user(None)
            return result

        return self._send(LogoutRequest(), apply, handler)

    def who_am_i(self, handler: Optional[ResponseHandler] = None):
        """Refresh the current user's profile from the server."""

        def apply(result: Dict[str, Any]) -> User:
            current = self.get_current_user()
            user = current.with_profile(result) if current else User.from_auth_result(result)
            self.update_current_user(user)
            return user

        return self._send(GetCurrentUserRequest(), apply, handler)
