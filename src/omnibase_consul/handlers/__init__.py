# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Handlers module for omnibase_consul.

Available Handlers:
- HandlerConsul: HashiCorp Consul client façade (KV lookups and writes,
  long-poll watches, structured config binding, service registration and
  discovery)
"""

from omnibase_consul.handlers.handler_consul import (
    HANDLER_TYPE_CONSUL,
    SERVICE_CHECK_TTL,
    SERVICE_DEREGISTER_CRITICAL_AFTER,
    HandlerConsul,
)

__all__: list[str] = [
    "HANDLER_TYPE_CONSUL",
    "SERVICE_CHECK_TTL",
    "SERVICE_DEREGISTER_CRITICAL_AFTER",
    "HandlerConsul",
]
