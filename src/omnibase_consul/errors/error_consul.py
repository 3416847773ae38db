# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Consul-Specific Infrastructure Error Class.

This module defines the InfraConsulError class for Consul transport and store
failures. It extends InfraConnectionError.
"""

from typing import Optional

from omnibase_consul.errors.infra_errors import InfraConnectionError
from omnibase_consul.errors.model_infra_error_context import ModelInfraErrorContext


class InfraConsulError(InfraConnectionError):
    """Error communicating with Consul.

    Raised for any python-consul failure that is not an ACL rejection or a
    timeout: KV reads and writes, long-poll watch fetches, service
    registration and health queries. The original python-consul exception is
    always chained as ``__cause__``.

    Example:
        >>> context = ModelInfraErrorContext(
        ...     transport_type=EnumInfraTransportType.CONSUL,
        ...     operation="kv_get",
        ...     target_name="consul_handler",
        ... )
        >>> raise InfraConsulError(
        ...     "Consul error: ConsulException",
        ...     context=context,
        ...     consul_key="config/database/host",
        ... )
    """

    def __init__(
        self,
        message: str,
        context: Optional[ModelInfraErrorContext] = None,
        consul_key: Optional[str] = None,
        service_name: Optional[str] = None,
        **extra_context: object,
    ) -> None:
        """Initialize InfraConsulError with Consul-specific context.

        Args:
            message: Human-readable error message
            context: Bundled infrastructure context (should use CONSUL transport_type)
            consul_key: Optional KV key that caused the error
            service_name: Optional service name for service registration errors
            **extra_context: Additional context information
        """
        if consul_key is not None:
            extra_context["consul_key"] = consul_key

        if service_name is not None:
            extra_context["service_name"] = service_name

        super().__init__(
            message=message,
            context=context,
            **extra_context,
        )


__all__: list[str] = [
    "InfraConsulError",
]
