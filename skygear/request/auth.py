"""Authentication requests."""
from typing import Any, Dict, Optional

from skygear.errors import InvalidRequest
from skygear.request.base import Request


class _CredentialRequest(Request):
    def __init__(
        self,
        action: str,
        username: Optional[str] = None,
        email: Optional[str] = None,
        password: Optional[str] = None,
        profile: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(action)
        auth_data: Dict[str, Any] = {}
        if username is not None:
            auth_data["username"] = username
        if email is not None:
            auth_data["email"] = email
        self.data["auth_data"] = auth_data
        self.data["password"] = password
        if profile:
            self.data["profile"] = dict(profile)

    def validate(self) -> None:
        if not self.data["auth_data"]:
            raise InvalidRequest("username or email is required", details={"action": self.action})
        if not self.data.get("password"):
            raise InvalidRequest("password is required", details={"action": self.action})


class LoginRequest(_CredentialRequest):
    def __init__(self, username=None, email=None, password=None):
        super().__init__("auth:login", username=username, email=email, password=password)


class SignupRequest(_CredentialRequest):
    def __init__(self, username=None, email=None, password=None, profile=None):
        super().__init__("auth:signup", username=username, email=email, password=password, profile=profile)


class LogoutRequest(Request):
    def __init__(self):
        super().__init__("auth:logout")


class GetCurrentUserRequest(Request):
    def __init__(self):
        super().__init__("auth:me")
