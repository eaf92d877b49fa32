"""Skygear client runtime"""
from skygear.auth import AuthContainer
from skygear.config import Configuration, SkygearSettings, get_settings
from skygear.container import Container
from skygear.context import AppContext
from skygear.database import Database, PublicDatabase, new_record
from skygear.errors import (
    AuthenticationRequired,
    InvalidConfiguration,
    InvalidRequest,
    RequestFailed,
    SkygearError,
)
from skygear.log_config import configure_logging
from skygear.models import AccessControl, AccessControlEntry, AccessLevel, User
from skygear.pubsub import PubsubContainer
from skygear.push import PushContainer
from skygear.request import FunctionResponseHandler, LambdaResponseHandler, Request, ResponseHandler
from skygear.request_manager import RequestManager
from skygear.transport import HttpTransport, Transport

__version__ = "0.1.0"

__all__ = [
    "AccessControl",
    "AccessControlEntry",
    "AccessLevel",
    "AppContext",
    "AuthContainer",
    "AuthenticationRequired",
    "Configuration",
    "Container",
    "Database",
    "FunctionResponseHandler",
    "HttpTransport",
    "InvalidConfiguration",
    "InvalidRequest",
    "LambdaResponseHandler",
    "PublicDatabase",
    "PubsubContainer",
    "PushContainer",
    "Request",
    "RequestFailed",
    "RequestManager",
    "ResponseHandler",
    "SkygearError",
    "SkygearSettings",
    "Transport",
    "User",
    "configure_logging",
    "get_settings",
    "new_record",
]
