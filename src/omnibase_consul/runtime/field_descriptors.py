# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Field descriptor tables for structured config records.

A record type's shape is inspected once and turned into an explicit,
ordered table of ModelFieldSpec entries. The config binder walks this table
instead of re-inspecting the record on every bind.

Supported record types:
    - ``dataclasses.dataclass`` classes; the tag lives in
      ``field(metadata={"consul": "name:...:default:..."})``
    - pydantic ``BaseModel`` subclasses; the tag lives in
      ``Field(json_schema_extra={"consul": "..."})``

Field classification:
    - ``datetime`` / ``date`` / ``time`` annotations are OPAQUE (skipped)
    - dataclass or BaseModel annotations are NESTED
    - everything else is SCALAR; ``str``, ``float`` and ``int`` map to a
      scalar kind, ``Annotated[float, EnumScalarKind.FLOAT32]`` selects
      single precision, and any other type is left without a kind so that
      coercion reports it as unsupported

Example:
    >>> @dataclass
    ... class Limits:
    ...     max_conns: int = field(default=0, metadata={"consul": "default:100"})
    >>> [spec.path_segment for spec in build_field_specs(Limits)]
    ['max_conns']
"""

from __future__ import annotations

import dataclasses
import functools
import typing
from collections.abc import Iterator
from datetime import date, datetime, time
from typing import Annotated, Final

from pydantic import BaseModel

from omnibase_consul.enums import EnumFieldKind, EnumScalarKind
from omnibase_consul.errors import FieldPathCollisionError, ProtocolConfigurationError
from omnibase_consul.models import ModelFieldSpec
from omnibase_consul.utils.util_tag_parser import TAG_KEY, parse_tag_options
from omnibase_consul.utils.util_type_coercion import SCALAR_TYPE_KINDS

OPAQUE_TYPES: Final[tuple[type, ...]] = (datetime, date, time)


def is_record_type(candidate: object) -> bool:
    """Return True if ``candidate`` is a dataclass or pydantic model class."""
    if not isinstance(candidate, type):
        return False
    return dataclasses.is_dataclass(candidate) or issubclass(candidate, BaseModel)


@functools.lru_cache(maxsize=None)
def build_field_specs(record_type: type) -> tuple[ModelFieldSpec, ...]:
    """Build the ordered descriptor table for ``record_type``.

    Args:
        record_type: A dataclass or pydantic BaseModel class.

    Returns:
        One ModelFieldSpec per field, in declaration order.

    Raises:
        ProtocolConfigurationError: If ``record_type`` is not a record type.
        InvalidTagSyntaxError: If a field tag is malformed.
        FieldPathCollisionError: If two non-opaque sibling fields resolve to
            the same path segment.
    """
    if not is_record_type(record_type):
        raise ProtocolConfigurationError(
            f"{getattr(record_type, '__name__', record_type)!r} is not a "
            "dataclass or pydantic model",
        )

    specs: list[ModelFieldSpec] = []
    owners: dict[str, str] = {}
    for field_name, annotation, metadata, tag in _iter_fields(record_type):
        spec = _build_spec(field_name, annotation, metadata, tag)
        if spec.kind is not EnumFieldKind.OPAQUE:
            owner = owners.get(spec.path_segment)
            if owner is not None:
                raise FieldPathCollisionError(
                    record_type.__name__,
                    spec.path_segment,
                    (owner, field_name),
                )
            owners[spec.path_segment] = field_name
        specs.append(spec)

    return tuple(specs)


def _iter_fields(
    record_type: type,
) -> Iterator[tuple[str, object, tuple[object, ...], str]]:
    """Yield ``(name, annotation, annotated_metadata, tag)`` per field."""
    if issubclass(record_type, BaseModel):
        for name, info in record_type.model_fields.items():
            extra = info.json_schema_extra
            tag = extra.get(TAG_KEY, "") if isinstance(extra, dict) else ""
            yield name, info.annotation, tuple(info.metadata), str(tag or "")
        return

    hints = typing.get_type_hints(record_type, include_extras=True)
    for dc_field in dataclasses.fields(record_type):
        annotation: object = hints.get(dc_field.name, dc_field.type)
        metadata: tuple[object, ...] = ()
        if typing.get_origin(annotation) is Annotated:
            annotation, *extras = typing.get_args(annotation)
            metadata = tuple(extras)
        tag = dc_field.metadata.get(TAG_KEY, "")
        yield dc_field.name, annotation, metadata, str(tag or "")


def _build_spec(
    field_name: str,
    annotation: object,
    metadata: tuple[object, ...],
    tag: str,
) -> ModelFieldSpec:
    options = parse_tag_options(tag)
    path_segment = options.name if options.name is not None else field_name.lower()
    type_name = getattr(annotation, "__name__", None) or repr(annotation)

    if isinstance(annotation, type) and issubclass(annotation, OPAQUE_TYPES):
        kind = EnumFieldKind.OPAQUE
    elif is_record_type(annotation):
        kind = EnumFieldKind.NESTED
    else:
        kind = EnumFieldKind.SCALAR

    scalar_kind: EnumScalarKind | None = None
    if kind is EnumFieldKind.SCALAR:
        overrides = [item for item in metadata if isinstance(item, EnumScalarKind)]
        if overrides:
            scalar_kind = overrides[-1]
        elif isinstance(annotation, type):
            scalar_kind = SCALAR_TYPE_KINDS.get(annotation)

    return ModelFieldSpec(
        field_name=field_name,
        path_segment=path_segment,
        override_name=options.name,
        default_value=options.default,
        kind=kind,
        scalar_kind=scalar_kind,
        type_name=type_name,
        nested_type=annotation if kind is EnumFieldKind.NESTED else None,
    )


__all__: list[str] = [
    "OPAQUE_TYPES",
    "build_field_specs",
    "is_record_type",
]
