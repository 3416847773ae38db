# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Service registration and discovery errors.

Address errors are raised before any call reaches the Consul agent.
"""

from typing import Optional

from omnibase_consul.enums import EnumInfraErrorCode
from omnibase_consul.errors.infra_errors import (
    ProtocolConfigurationError,
    RuntimeHostError,
)
from omnibase_consul.errors.model_infra_error_context import ModelInfraErrorContext


class InvalidServiceAddressError(ProtocolConfigurationError):
    """Raised when a service address is not of the form ``host:port``."""

    def __init__(
        self,
        address: str,
        context: Optional[ModelInfraErrorContext] = None,
        **extra_context: object,
    ) -> None:
        super().__init__(
            message="invalid service address",
            context=context,
            address=address,
            **extra_context,
        )
        self.address = address


class InvalidPortError(ProtocolConfigurationError):
    """Raised when a service address carries a non-numeric or out-of-range port."""

    def __init__(
        self,
        port: str,
        context: Optional[ModelInfraErrorContext] = None,
        **extra_context: object,
    ) -> None:
        super().__init__(
            message="invalid port",
            context=context,
            port=port,
            **extra_context,
        )
        self.port = port


class ServiceNotFoundError(RuntimeHostError):
    """Raised when a health query returns no passing instances."""

    def __init__(
        self,
        service_name: str,
        context: Optional[ModelInfraErrorContext] = None,
        **extra_context: object,
    ) -> None:
        super().__init__(
            message=f'service "{service_name}" not found',
            error_code=EnumInfraErrorCode.RESOURCE_NOT_FOUND,
            context=context,
            service_name=service_name,
            **extra_context,
        )
        self.service_name = service_name


__all__: list[str] = [
    "InvalidPortError",
    "InvalidServiceAddressError",
    "ServiceNotFoundError",
]
