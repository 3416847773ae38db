# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""omnibase_consul errors module.

Exports:
    ModelInfraErrorContext: Configuration model for bundled error context
    RuntimeHostError: Base error class
    ProtocolConfigurationError: Configuration and declaration errors
    InfraConnectionError: Store connection errors
    InfraConsulError: Consul transport/store errors
    InfraTimeoutError: Store timeout errors
    InfraAuthenticationError: ACL token rejections
    KVNotFoundError: Missing KV key
    KVBindingError: Base class for binding value errors
    MalformedValueError: Unparseable scalar text
    UnsupportedTypeError: Field type without coercion rule
    InvalidTagSyntaxError: Malformed field metadata string
    FieldPathCollisionError: Sibling fields sharing a path segment
    InvalidServiceAddressError: Malformed ``host:port`` address
    InvalidPortError: Malformed port in a service address
    ServiceNotFoundError: No passing service instances
    WatchClosedError: Watch stream closed

Correlation ID Assignment:
    Every public HandlerConsul operation generates a correlation_id (uuid4)
    and attaches it to the ModelInfraErrorContext of any error it raises.

Error Sanitization Guidelines:
    NEVER include the ACL token or full connection strings with credentials
    in messages or context. Service names, keys, hosts, ports and error type
    names are safe.
"""

from omnibase_consul.errors.error_consul import InfraConsulError
from omnibase_consul.errors.error_kv import (
    FieldPathCollisionError,
    InvalidTagSyntaxError,
    KVBindingError,
    KVNotFoundError,
    MalformedValueError,
    UnsupportedTypeError,
)
from omnibase_consul.errors.error_service import (
    InvalidPortError,
    InvalidServiceAddressError,
    ServiceNotFoundError,
)
from omnibase_consul.errors.error_watch import WatchClosedError
from omnibase_consul.errors.infra_errors import (
    InfraAuthenticationError,
    InfraConnectionError,
    InfraTimeoutError,
    ProtocolConfigurationError,
    RuntimeHostError,
)
from omnibase_consul.errors.model_infra_error_context import ModelInfraErrorContext

__all__: list[str] = [
    "FieldPathCollisionError",
    "InfraAuthenticationError",
    "InfraConnectionError",
    "InfraConsulError",
    "InfraTimeoutError",
    "InvalidPortError",
    "InvalidServiceAddressError",
    "InvalidTagSyntaxError",
    "KVBindingError",
    "KVNotFoundError",
    "MalformedValueError",
    "ModelInfraErrorContext",
    "ProtocolConfigurationError",
    "RuntimeHostError",
    "ServiceNotFoundError",
    "UnsupportedTypeError",
    "WatchClosedError",
]
