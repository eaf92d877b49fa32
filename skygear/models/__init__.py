"""Data models"""
from skygear.models.access_control import (
    AccessControl,
    AccessControlEntry,
    AccessLevel,
    get_default_access_control,
    set_default_access_control,
)
from skygear.models.user import User

__all__ = [
    "AccessControl",
    "AccessControlEntry",
    "AccessLevel",
    "User",
    "get_default_access_control",
    "set_default_access_control",
]
