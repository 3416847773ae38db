# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Structured config binder.

ConfigBinder populates a (possibly nested) record from a namespace of flat
KV entries. For a record bound under ``service``::

    @dataclass
    class Database:
        host: str = ""
        port: int = field(default=0, metadata={"consul": "default:5432"})

    @dataclass
    class ServiceConfig:
        name: str = ""
        timeout: float = 0.0
        database: Database = field(default_factory=Database)
        loaded_at: datetime = field(default_factory=datetime.now)  # opaque, skipped

the binder reads ``service/name``, ``service/timeout``,
``service/database/host`` and ``service/database/port`` in that order.

Resolution Rules:
    1. Fields are resolved depth-first in declaration order.
    2. The path segment is the tag's ``name`` option, else the lower-cased
       field name; ``path = parent + "/" + segment``.
    3. Opaque (timestamp-like) fields are never fetched or assigned.
    4. A missing key uses the tag's ``default`` literal, else an empty
       payload; any other lookup error aborts the bind.
    5. The payload is coerced to the field's scalar kind and assigned.

Atomicity:
    Binding is not atomic. The first error aborts the bind and is raised to
    the caller; fields assigned before the failing field keep their new
    values and there is no rollback.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Awaitable, Callable
from uuid import UUID, uuid4

from pydantic import BaseModel

from omnibase_consul.enums import EnumFieldKind, EnumInfraTransportType
from omnibase_consul.errors import (
    KVNotFoundError,
    ModelInfraErrorContext,
    ProtocolConfigurationError,
    RuntimeHostError,
)
from omnibase_consul.models import ModelFieldSpec, ModelKVEntry
from omnibase_consul.runtime.field_descriptors import build_field_specs
from omnibase_consul.utils.util_type_coercion import coerce_scalar

logger = logging.getLogger(__name__)

KVFetcher = Callable[[str], Awaitable[ModelKVEntry]]

PATH_SEPARATOR: str = "/"


def join_path(parent: str, segment: str) -> str:
    """Join a parent prefix and a path segment.

    Trailing separators on ``parent`` are ignored and an empty parent yields
    the bare segment, so the result never starts with ``/``.
    """
    prefix = parent.rstrip(PATH_SEPARATOR)
    if not prefix:
        return segment
    return f"{prefix}{PATH_SEPARATOR}{segment}"


class ConfigBinder:
    """Bind KV namespaces onto dataclass or pydantic records.

    The binder performs single-shot lookups through the injected ``fetch``
    coroutine, which must return a ModelKVEntry or raise KVNotFoundError for
    a missing key. HandlerConsul injects its own ``get`` so lookups also
    refresh the IndexTracker.

    Example:
        >>> binder = ConfigBinder(handler.get)
        >>> config = ServiceConfig()
        >>> await binder.load_into("service", config)
    """

    def __init__(self, fetch: KVFetcher) -> None:
        self._fetch = fetch

    async def load_into(
        self,
        parent: str,
        target: object,
        correlation_id: UUID | None = None,
    ) -> None:
        """Populate ``target`` from the namespace rooted at ``parent``.

        Args:
            parent: KV prefix of the record (e.g. ``"service"``)
            target: Mutable dataclass or pydantic model instance
            correlation_id: Optional correlation ID for tracing

        Raises:
            ProtocolConfigurationError: Invalid record declaration, including
                InvalidTagSyntaxError, FieldPathCollisionError and
                UnsupportedTypeError.
            MalformedValueError: A stored or default value cannot be parsed.
            RuntimeHostError: Any non-NotFound lookup failure.
        """
        correlation_id = correlation_id or uuid4()
        logger.debug(
            "Binding config record",
            extra={
                "parent": parent,
                "record_type": type(target).__name__,
                "correlation_id": str(correlation_id),
            },
        )
        await self._load_record(parent, target, correlation_id)

    async def _load_record(
        self,
        parent: str,
        target: object,
        correlation_id: UUID,
    ) -> None:
        for spec in build_field_specs(type(target)):
            path = join_path(parent, spec.path_segment)

            if spec.kind is EnumFieldKind.OPAQUE:
                continue

            if spec.kind is EnumFieldKind.NESTED:
                nested = getattr(target, spec.field_name, None)
                if nested is None:
                    nested = self._new_record(spec, path, correlation_id)
                    setattr(target, spec.field_name, nested)
                await self._load_record(path, nested, correlation_id)
                continue

            payload = await self._fetch_payload(path, spec)
            try:
                value = coerce_scalar(spec.scalar_kind or spec.type_name, payload)
            except RuntimeHostError as e:
                e.context.setdefault("consul_key", path)
                e.context.setdefault("field_name", spec.field_name)
                raise
            setattr(target, spec.field_name, value)

    async def _fetch_payload(self, path: str, spec: ModelFieldSpec) -> bytes:
        try:
            entry = await self._fetch(path)
        except KVNotFoundError:
            if spec.default_value is not None:
                logger.debug(
                    "Key not found, using default",
                    extra={"consul_key": path, "field_name": spec.field_name},
                )
                return spec.default_value.encode("utf-8")
            return b""
        return entry.value or b""

    def _new_record(
        self,
        spec: ModelFieldSpec,
        path: str,
        correlation_id: UUID,
    ) -> object:
        """Create an empty nested record for a field currently set to None."""
        nested_type = spec.nested_type
        if nested_type is not None and issubclass(nested_type, BaseModel):
            return nested_type.model_construct()
        try:
            if nested_type is None or not dataclasses.is_dataclass(nested_type):
                raise TypeError(f"{spec.type_name} is not a record type")
            return nested_type()
        except TypeError as e:
            ctx = ModelInfraErrorContext(
                transport_type=EnumInfraTransportType.RUNTIME,
                operation="load_into",
                target_name=path,
                correlation_id=correlation_id,
            )
            raise ProtocolConfigurationError(
                f"Cannot create nested record {spec.type_name} for field "
                f"'{spec.field_name}' - give it a default instance",
                context=ctx,
            ) from e


__all__: list[str] = [
    "ConfigBinder",
    "KVFetcher",
    "join_path",
]
