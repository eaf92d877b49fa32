"""Request envelopes"""
from skygear.request.auth import GetCurrentUserRequest, LoginRequest, LogoutRequest, SignupRequest
from skygear.request.base import FunctionResponseHandler, Request, ResponseHandler
from skygear.request.device import RegisterDeviceRequest, UnregisterDeviceRequest
from skygear.request.lambda_function import LambdaRequest, LambdaResponseHandler
from skygear.request.record import (
    RecordDeleteRequest,
    RecordQueryRequest,
    RecordSaveRequest,
    SetDefaultAccessRequest,
)

__all__ = [
    "FunctionResponseHandler",
    "GetCurrentUserRequest",
    "LambdaRequest",
    "LambdaResponseHandler",
    "LoginRequest",
    "LogoutRequest",
    "RecordDeleteRequest",
    "RecordQueryRequest",
    "RecordSaveRequest",
    "RegisterDeviceRequest",
    "Request",
    "ResponseHandler",
    "SetDefaultAccessRequest",
    "SignupRequest",
    "UnregisterDeviceRequest",
]
