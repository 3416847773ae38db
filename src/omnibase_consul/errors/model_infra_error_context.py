# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Infrastructure Error Context Configuration Model.

This module defines the configuration model for infrastructure error context,
bundling the structured fields shared by every omnibase_consul error.
"""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from omnibase_consul.enums import EnumInfraTransportType


class ModelInfraErrorContext(BaseModel):
    """Configuration model for infrastructure error context.

    Attributes:
        transport_type: Type of infrastructure transport (CONSUL, RUNTIME)
        operation: Operation being performed (kv_get, load_into, watch, ...)
        target_name: Target resource or endpoint name
        correlation_id: Request correlation ID for distributed tracing

    Example:
        >>> context = ModelInfraErrorContext(
        ...     transport_type=EnumInfraTransportType.CONSUL,
        ...     operation="kv_get",
        ...     target_name="consul_handler",
        ...     correlation_id=uuid4(),
        ... )
        >>> raise InfraConsulError("KV read failed", context=context)
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )

    transport_type: Optional[EnumInfraTransportType] = Field(
        default=None,
        description="Type of infrastructure transport (CONSUL, RUNTIME)",
    )
    operation: Optional[str] = Field(
        default=None,
        description="Operation being performed (kv_get, load_into, watch, etc.)",
    )
    target_name: Optional[str] = Field(
        default=None,
        description="Target resource or endpoint name",
    )
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="Request correlation ID for distributed tracing",
    )


__all__ = ["ModelInfraErrorContext"]
