from __future__ import annotations

from enum import Enum


class ParameterKind(str, Enum):
    STRING = "string"
    NUMBER = "number"


class ResultCode(str, Enum):
    UNKNOWN_TOOL = "UNKNOWN_TOOL"
    INVALID_ARGUMENTS = "INVALID_ARGUMENTS"
    AUTHENTICATION_REQUIRED = "AUTHENTICATION_REQUIRED"
    SERVICE_ERROR = "SERVICE_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class AuthStage(str, Enum):
    REQUESTED = "requested"
    CALLBACK_RECEIVED = "callback_received"
    EXCHANGED = "exchanged"
    NOTIFIED = "notified"
    FAILED = "failed"
