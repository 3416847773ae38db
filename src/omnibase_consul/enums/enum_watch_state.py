# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Change watcher state enumeration."""

from enum import Enum


class EnumWatchState(str, Enum):
    """Lifecycle states of a ChangeWatcher loop.

    Transitions::

        STARTING -> POLLING -> DELIVERING -> POLLING -> ... -> CLOSED

    CLOSED is terminal and is entered exactly once, either because the
    store reported an error or because ``stop()`` was called.
    """

    STARTING = "starting"
    POLLING = "polling"
    DELIVERING = "delivering"
    CLOSED = "closed"


__all__ = ["EnumWatchState"]
