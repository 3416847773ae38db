# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""omnibase_consul enumerations.

Exports:
    EnumFieldKind: Config binder field classification (SCALAR, NESTED, OPAQUE)
    EnumInfraErrorCode: Stable error classification codes
    EnumInfraTransportType: Transport type for error context
    EnumScalarKind: Scalar coercion targets (STRING, FLOAT32, FLOAT64, INT)
    EnumWatchState: ChangeWatcher lifecycle states
"""

from omnibase_consul.enums.enum_field_kind import EnumFieldKind
from omnibase_consul.enums.enum_infra_error_code import EnumInfraErrorCode
from omnibase_consul.enums.enum_infra_transport_type import EnumInfraTransportType
from omnibase_consul.enums.enum_scalar_kind import EnumScalarKind
from omnibase_consul.enums.enum_watch_state import EnumWatchState

__all__: list[str] = [
    "EnumFieldKind",
    "EnumInfraErrorCode",
    "EnumInfraTransportType",
    "EnumScalarKind",
    "EnumWatchState",
]
