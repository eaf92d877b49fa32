"""
访问控制模型
AccessControl plus the process-wide default that new records inherit.
"""
import threading
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class AccessLevel(str, Enum):
    READ = "read"
    WRITE = "write"


class AccessControlEntry(BaseModel):
    """One grant: exactly one of public / role / user_id."""

    model_config = ConfigDict(frozen=True)

    level: AccessLevel
    public: bool = False
    role: str | None = None
    user_id: str | None = None

    @model_validator(mode="after")
    def check_target(self) -> "AccessControlEntry":
        targets = [self.public, self.role is not None, self.user_id is not None]
        if sum(bool(t) for t in targets) != 1:
            raise ValueError("entry must target exactly one of public, role or user_id")
        return self

    def to_wire(self) -> dict[str, Any]:
        data: dict[str, Any] = {"level": self.level.value}
        if self.public:
            data["public"] = True
        elif self.role is not None:
            data["role"] = self.role
        else:
            data["user_id"] = self.user_id
        return data


class AccessControl(BaseModel):
    model_config = ConfigDict(frozen=True)

    entries: tuple[AccessControlEntry, ...] = Field(default_factory=tuple)

    @classmethod
    def public_read_write(cls) -> "AccessControl":
        return cls(entries=(AccessControlEntry(level=AccessLevel.WRITE, public=True),))

    @classmethod
    def public_read_only(cls) -> "AccessControl":
        return cls(entries=(AccessControlEntry(level=AccessLevel.READ, public=True),))

    @property
    def public_access(self) -> AccessLevel | None:
        levels = [e.level for e in self.entries if e.public]
        if AccessLevel.WRITE in levels:
            return AccessLevel.WRITE
        return levels[0] if levels else None

    def to_wire(self) -> list[dict[str, Any]]:
        return [entry.to_wire() for entry in self.entries]

    @classmethod
    def from_wire(cls, data: list[dict[str, Any]] | None) -> "AccessControl":
        return cls(entries=tuple(AccessControlEntry(**item) for item in data or []))


# Process-wide default; None means "let the server decide"
_default_access_control: AccessControl | None = None
_default_lock = threading.Lock()


def get_default_access_control() -> AccessControl | None:
    with _default_lock:
        return _default_access_control


def set_default_access_control(acl: AccessControl | None) -> None:
    global _default_access_control
    with _default_lock:
        _default_access_control = acl
