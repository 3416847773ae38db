# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""ONEX Consul client - KV watches, structured config binding and service discovery.

This package provides an asyncio client for HashiCorp Consul including:

- Single-shot KV lookups and writes with typed scalar accessors
- Long-poll change watches delivered as async streams
- Binding of KV namespaces onto dataclass and pydantic records
- Service registration and passing-instance discovery
- Transport-aware error handling with ModelInfraErrorContext

Key Components:
    - HandlerConsul: Public façade over python-consul
    - ChangeWatcher / WatchStream: Per-key long-poll loop and its consumer side
    - ConfigBinder: Reflective record binder
    - IndexTracker: Per-key last observed store index
"""

from omnibase_consul.errors import (
    KVNotFoundError,
    MalformedValueError,
    RuntimeHostError,
    ServiceNotFoundError,
    WatchClosedError,
)
from omnibase_consul.handlers import HandlerConsul
from omnibase_consul.models import (
    ModelConsulClientConfig,
    ModelKVEntry,
    ModelServiceInstance,
)
from omnibase_consul.runtime import ChangeWatcher, ConfigBinder, IndexTracker, WatchStream

__all__: list[str] = [
    "ChangeWatcher",
    "ConfigBinder",
    "HandlerConsul",
    "IndexTracker",
    "KVNotFoundError",
    "MalformedValueError",
    "ModelConsulClientConfig",
    "ModelKVEntry",
    "ModelServiceInstance",
    "RuntimeHostError",
    "ServiceNotFoundError",
    "WatchClosedError",
    "WatchStream",
]
