# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Field kind enumeration for structured config binding."""

from enum import Enum


class EnumFieldKind(str, Enum):
    """How the config binder treats a record field.

    Attributes:
        SCALAR: Leaf field, fetched from the store and coerced
        NESTED: Nested record, recursed into with an extended path
        OPAQUE: Timestamp-like field, never fetched or assigned
    """

    SCALAR = "scalar"
    NESTED = "nested"
    OPAQUE = "opaque"


__all__ = ["EnumFieldKind"]
