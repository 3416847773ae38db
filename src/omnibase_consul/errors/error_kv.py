# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""KV lookup and config binding errors.

Error Hierarchy:
    RuntimeHostError
    ├── KVNotFoundError
    ├── KVBindingError
    │   └── MalformedValueError
    └── ProtocolConfigurationError
        ├── InvalidTagSyntaxError
        ├── UnsupportedTypeError
        └── FieldPathCollisionError

KVNotFoundError is the only error the config binder recovers from: a missing
key falls back to the field's default literal (or an empty payload).
"""

from typing import Optional

from omnibase_consul.enums import EnumInfraErrorCode
from omnibase_consul.errors.infra_errors import (
    ProtocolConfigurationError,
    RuntimeHostError,
)
from omnibase_consul.errors.model_infra_error_context import ModelInfraErrorContext


class KVNotFoundError(RuntimeHostError):
    """Raised when a key does not exist in the store."""

    def __init__(
        self,
        key: str,
        context: Optional[ModelInfraErrorContext] = None,
        **extra_context: object,
    ) -> None:
        super().__init__(
            message=f'kv "{key}" not found',
            error_code=EnumInfraErrorCode.RESOURCE_NOT_FOUND,
            context=context,
            consul_key=key,
            **extra_context,
        )
        self.key = key


class KVBindingError(RuntimeHostError):
    """Base class for value errors raised while binding KV data."""

    def __init__(
        self,
        message: str,
        error_code: Optional[EnumInfraErrorCode] = None,
        context: Optional[ModelInfraErrorContext] = None,
        **extra_context: object,
    ) -> None:
        super().__init__(
            message=message,
            error_code=error_code,
            context=context,
            **extra_context,
        )


class MalformedValueError(KVBindingError):
    """Raised when stored or default text cannot be parsed into a scalar kind.

    Attributes:
        kind: The target scalar kind name
        raw_text: The offending text (decoded with replacement when not UTF-8)
    """

    def __init__(
        self,
        kind: str,
        raw_text: str,
        context: Optional[ModelInfraErrorContext] = None,
        **extra_context: object,
    ) -> None:
        super().__init__(
            message=f'malformed {kind} value "{raw_text}"',
            error_code=EnumInfraErrorCode.MALFORMED_VALUE,
            context=context,
            kind=kind,
            raw_text=raw_text,
            **extra_context,
        )
        self.kind = kind
        self.raw_text = raw_text


class InvalidTagSyntaxError(ProtocolConfigurationError):
    """Raised when a field's ``consul`` metadata has an odd token count."""

    def __init__(
        self,
        tag: str,
        context: Optional[ModelInfraErrorContext] = None,
        **extra_context: object,
    ) -> None:
        super().__init__(
            message=f'invalid tag options "{tag}"',
            context=context,
            tag=tag,
            **extra_context,
        )
        self.tag = tag


class UnsupportedTypeError(ProtocolConfigurationError):
    """Raised when a field type has no coercion rule."""

    default_error_code = EnumInfraErrorCode.UNSUPPORTED_TYPE

    def __init__(
        self,
        kind: str,
        context: Optional[ModelInfraErrorContext] = None,
        **extra_context: object,
    ) -> None:
        super().__init__(
            message=f'unsupported type "{kind}"',
            context=context,
            kind=kind,
            **extra_context,
        )
        self.kind = kind


class FieldPathCollisionError(ProtocolConfigurationError):
    """Raised when two sibling fields resolve to the same path segment."""

    def __init__(
        self,
        record_type: str,
        path_segment: str,
        field_names: tuple[str, str],
        context: Optional[ModelInfraErrorContext] = None,
        **extra_context: object,
    ) -> None:
        super().__init__(
            message=(
                f'fields {field_names[0]!r} and {field_names[1]!r} of '
                f'{record_type} both resolve to path segment "{path_segment}"'
            ),
            context=context,
            record_type=record_type,
            path_segment=path_segment,
            **extra_context,
        )
        self.path_segment = path_segment
        self.field_names = field_names


__all__: list[str] = [
    "FieldPathCollisionError",
    "InvalidTagSyntaxError",
    "KVBindingError",
    "KVNotFoundError",
    "MalformedValueError",
    "UnsupportedTypeError",
]
