# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Scalar kind enumeration for KV value coercion."""

from enum import Enum


class EnumScalarKind(str, Enum):
    """Scalar kinds a raw KV payload can be coerced into.

    FLOAT32 has no native Python type; mark a field with
    ``Annotated[float, EnumScalarKind.FLOAT32]`` to request single precision.

    Attributes:
        STRING: UTF-8 text, passed through unchanged
        FLOAT32: Single-precision float (rounded from the parsed double)
        FLOAT64: Double-precision float
        INT: Signed 64-bit integer
    """

    STRING = "string"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    INT = "int"


__all__ = ["EnumScalarKind"]
