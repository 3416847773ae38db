# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Base error family for the Consul client.

Every failure surfaced by HandlerConsul, ChangeWatcher and ConfigBinder is a
RuntimeHostError. Transport failures from python-consul are mapped once, at
the executor boundary, and chained with ``raise ... from e``.

Error Hierarchy:
    RuntimeHostError
    ├── ProtocolConfigurationError   bad client config or record declaration
    ├── InfraConnectionError         no agent, no leader, transport failure
    ├── InfraTimeoutError            single-shot call exceeded timeout_seconds
    └── InfraAuthenticationError     ACL token rejected

Subclasses only pick an error code; message, context and correlation handling
live in RuntimeHostError.
"""

from typing import ClassVar, Optional
from uuid import UUID

from omnibase_consul.enums import EnumInfraErrorCode
from omnibase_consul.errors.model_infra_error_context import ModelInfraErrorContext


class RuntimeHostError(Exception):
    """Base error class for omnibase_consul errors.

    ``context`` is a flat dict built from the bundled ModelInfraErrorContext
    (transport_type, operation, target_name) plus any keyword context such as
    ``consul_key`` or ``field_name``. Callers that add context after the fact
    use ``context.setdefault`` so the innermost value wins.

    Example:
        >>> ctx = ModelInfraErrorContext(
        ...     transport_type=EnumInfraTransportType.CONSUL,
        ...     operation="consul.kv_watch",
        ...     target_name="consul_handler",
        ... )
        >>> raise RuntimeHostError("watch loop failed", context=ctx, consul_key="app/flag")
    """

    default_error_code: ClassVar[EnumInfraErrorCode] = EnumInfraErrorCode.OPERATION_FAILED

    def __init__(
        self,
        message: str,
        error_code: Optional[EnumInfraErrorCode] = None,
        context: Optional[ModelInfraErrorContext] = None,
        **extra_context: object,
    ) -> None:
        structured_context: dict[str, object] = dict(extra_context)

        correlation_id: Optional[UUID] = None
        if context is not None:
            for name in ("transport_type", "operation", "target_name"):
                value = getattr(context, name)
                if value is not None:
                    structured_context[name] = value
            correlation_id = context.correlation_id

        super().__init__(message)
        self.message: str = message
        self.error_code: EnumInfraErrorCode = error_code or self.default_error_code
        self.correlation_id: Optional[UUID] = correlation_id
        self.context: dict[str, object] = structured_context

    def __str__(self) -> str:
        return self.message


class ProtocolConfigurationError(RuntimeHostError):
    """Raised when configuration or a record declaration is invalid.

    Covers client config validation in ``initialize``, tag and type problems
    found while ``load_into`` builds its descriptor table, and service
    addresses rejected by ``register_service``.

    Example:
        >>> raise ProtocolConfigurationError(
        ...     "Invalid Consul configuration - validation failed for fields: ['port']",
        ...     context=ctx,
        ... )
    """

    default_error_code = EnumInfraErrorCode.INVALID_CONFIGURATION


class InfraConnectionError(RuntimeHostError):
    """Raised when the agent is unreachable or reports no cluster leader."""

    default_error_code = EnumInfraErrorCode.CONNECTION_ERROR


class InfraTimeoutError(RuntimeHostError):
    """Raised when a single-shot call such as ``consul.kv_get`` times out.

    Long-poll watch fetches are never bounded by the client timeout, so this
    is not raised from a watch loop.
    """

    default_error_code = EnumInfraErrorCode.TIMEOUT_ERROR


class InfraAuthenticationError(RuntimeHostError):
    default_error_code = EnumInfraErrorCode.AUTHENTICATION_ERROR


__all__ = [
    "RuntimeHostError",
    "ProtocolConfigurationError",
    "InfraConnectionError",
    "InfraTimeoutError",
    "InfraAuthenticationError",
]
