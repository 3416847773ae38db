# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Infrastructure error code enumeration.

Error codes classify every RuntimeHostError raised by omnibase_consul so that
callers can branch on a stable value instead of the exception class name.
"""

from enum import Enum


class EnumInfraErrorCode(str, Enum):
    """Stable error classification codes.

    Attributes:
        OPERATION_FAILED: Generic failure (default for RuntimeHostError)
        INVALID_CONFIGURATION: Configuration, tag or field declaration is invalid
        RESOURCE_NOT_FOUND: KV key or service does not exist
        MALFORMED_VALUE: Stored or default text cannot be parsed
        UNSUPPORTED_TYPE: Field type has no coercion rule
        CONNECTION_ERROR: Transport or store failure
        TIMEOUT_ERROR: Operation exceeded its deadline
        AUTHENTICATION_ERROR: ACL token rejected
        STREAM_CLOSED: Watch stream was closed
    """

    OPERATION_FAILED = "OPERATION_FAILED"
    INVALID_CONFIGURATION = "INVALID_CONFIGURATION"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    MALFORMED_VALUE = "MALFORMED_VALUE"
    UNSUPPORTED_TYPE = "UNSUPPORTED_TYPE"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    TIMEOUT_ERROR = "TIMEOUT_ERROR"
    AUTHENTICATION_ERROR = "AUTHENTICATION_ERROR"
    STREAM_CLOSED = "STREAM_CLOSED"


__all__ = ["EnumInfraErrorCode"]
