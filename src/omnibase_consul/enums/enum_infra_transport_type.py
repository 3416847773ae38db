# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Infrastructure Transport Type Enumeration.

Defines the transport types used for error context and transport
identification in omnibase_consul.
"""

from enum import Enum


class EnumInfraTransportType(str, Enum):
    """Infrastructure transport types for omnibase_consul components.

    Attributes:
        CONSUL: Consul KV and service discovery transport
        RUNTIME: In-process runtime (binding, coercion, watch bookkeeping)
    """

    CONSUL = "consul"
    RUNTIME = "runtime"


__all__ = ["EnumInfraTransportType"]
