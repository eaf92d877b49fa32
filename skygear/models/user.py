"""用户模型"""
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class User(BaseModel):
    """The authenticated user together with its access token."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="_id", description="用户 ID")
    access_token: str | None = Field(default=None, description="访问令牌")
    username: str | None = None
    email: str | None = None
    roles: list[str] = Field(default_factory=list)

    @classmethod
    def from_auth_result(cls, result: dict[str, Any]) -> "User":
        """Parse an ``auth:*`` response: ``{"user_id", "access_token", "profile"}``."""
        if not isinstance(result, dict):
            result = {}
        profile = result.get("profile") or {}
        return cls(
            user_id=result.get("user_id") or profile.get("_id"),
            access_token=result.get("access_token"),
            username=profile.get("username"),
            email=profile.get("email"),
            roles=result.get("roles") or [],
        )

    def with_profile(self, result: dict[str, Any]) -> "User":
        """Refresh profile fields, keeping the current token."""
        refreshed = self.from_auth_result(result)
        return refreshed.model_copy(update={"access_token": refreshed.access_token or self.access_token})
