# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Scalar coercion of raw KV payloads.

Converts the raw bytes stored under a KV key into one of a fixed set of
scalar kinds. Text is passed through untouched; numeric kinds are parsed
after trimming surrounding whitespace.

Parsing rules:
    - INT: optional sign followed by ASCII digits, signed 64-bit range
    - FLOAT64 / FLOAT32: decimal notation with optional exponent, or
      ``inf`` / ``infinity`` / ``nan`` (case-insensitive, optional sign)
    - Digit-group underscores are rejected
    - A finite literal that overflows the target precision is malformed
    - Empty input is malformed for every numeric kind

Example:
    >>> coerce_scalar(EnumScalarKind.INT, b" 42 ")
    42
    >>> coerce_scalar(int, b"100")
    100
    >>> coerce_scalar(EnumScalarKind.STRING, b"hello")
    'hello'
"""

from __future__ import annotations

import math
import re
import struct
from typing import Final

from omnibase_consul.enums import EnumScalarKind
from omnibase_consul.errors import MalformedValueError, UnsupportedTypeError

INT64_MIN: Final[int] = -(2**63)
INT64_MAX: Final[int] = 2**63 - 1

_INT_PATTERN: Final[re.Pattern[str]] = re.compile(r"[+-]?[0-9]+")
_FLOAT_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?"
)
_FLOAT_SPECIAL_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"[+-]?(?:inf|infinity|nan)", re.IGNORECASE
)

# Python types with a direct scalar mapping; bool is deliberately absent
SCALAR_TYPE_KINDS: Final[dict[type, EnumScalarKind]] = {
    str: EnumScalarKind.STRING,
    float: EnumScalarKind.FLOAT64,
    int: EnumScalarKind.INT,
}

ScalarValue = str | float | int


def resolve_scalar_kind(kind: EnumScalarKind | str | type) -> EnumScalarKind:
    """Resolve a kind designator to a supported EnumScalarKind.

    Args:
        kind: An EnumScalarKind, its string value, or a Python type

    Returns:
        The matching scalar kind.

    Raises:
        UnsupportedTypeError: If the designator has no coercion rule.
    """
    if isinstance(kind, EnumScalarKind):
        return kind
    if isinstance(kind, type):
        resolved = SCALAR_TYPE_KINDS.get(kind)
        if resolved is None:
            raise UnsupportedTypeError(kind.__name__)
        return resolved
    try:
        return EnumScalarKind(kind)
    except ValueError:
        raise UnsupportedTypeError(str(kind)) from None


def coerce_scalar(kind: EnumScalarKind | str | type, raw: bytes) -> ScalarValue:
    """Coerce a raw payload into the given scalar kind.

    Args:
        kind: Target kind (EnumScalarKind, its value, or ``str``/``float``/``int``)
        raw: Raw payload bytes

    Returns:
        The parsed value.

    Raises:
        UnsupportedTypeError: If ``kind`` has no coercion rule.
        MalformedValueError: If ``raw`` cannot be parsed into ``kind``.
    """
    scalar_kind = resolve_scalar_kind(kind)

    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise MalformedValueError(
            scalar_kind.value, raw.decode("utf-8", errors="replace")
        ) from e

    if scalar_kind is EnumScalarKind.STRING:
        return text
    if scalar_kind is EnumScalarKind.INT:
        return _parse_int(text)
    if scalar_kind is EnumScalarKind.FLOAT64:
        return _parse_float(text, scalar_kind)
    return _round_float32(_parse_float(text, scalar_kind), text)


def _parse_int(text: str) -> int:
    stripped = text.strip()
    if not _INT_PATTERN.fullmatch(stripped):
        raise MalformedValueError(EnumScalarKind.INT.value, text)
    value = int(stripped)
    if value < INT64_MIN or value > INT64_MAX:
        raise MalformedValueError(EnumScalarKind.INT.value, text)
    return value


def _parse_float(text: str, kind: EnumScalarKind) -> float:
    stripped = text.strip()
    if _FLOAT_SPECIAL_PATTERN.fullmatch(stripped):
        return float(stripped)
    if not _FLOAT_PATTERN.fullmatch(stripped):
        raise MalformedValueError(kind.value, text)
    value = float(stripped)
    if math.isinf(value):
        raise MalformedValueError(kind.value, text)
    return value


def _round_float32(value: float, text: str) -> float:
    try:
        rounded: float = struct.unpack("f", struct.pack("f", value))[0]
    except OverflowError as e:
        raise MalformedValueError(EnumScalarKind.FLOAT32.value, text) from e
    # struct.pack("f") saturates to inf on some interpreters instead of raising
    if math.isinf(rounded) and not math.isinf(value):
        raise MalformedValueError(EnumScalarKind.FLOAT32.value, text)
    return rounded


__all__: list[str] = [
    "INT64_MAX",
    "INT64_MIN",
    "SCALAR_TYPE_KINDS",
    "ScalarValue",
    "coerce_scalar",
    "resolve_scalar_kind",
]
