# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""omnibase_consul runtime components.

Exports:
    IndexTracker: Per-key last observed store index
    ChangeWatcher: Long-poll loop for one key
    WatchStream: Consumer side of a ChangeWatcher
    ConfigBinder: Binds KV namespaces onto records
    build_field_specs: Cached per-type field descriptor table
"""

from omnibase_consul.runtime.change_watcher import (
    SENTINEL_WAIT_INDEX,
    ChangeWatcher,
    WatchStream,
)
from omnibase_consul.runtime.config_binder import ConfigBinder, join_path
from omnibase_consul.runtime.field_descriptors import build_field_specs
from omnibase_consul.runtime.index_tracker import IndexTracker

__all__: list[str] = [
    "SENTINEL_WAIT_INDEX",
    "ChangeWatcher",
    "ConfigBinder",
    "IndexTracker",
    "WatchStream",
    "build_field_specs",
    "join_path",
]
