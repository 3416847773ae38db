# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Pytest configuration and shared fixtures for omnibase_consul tests."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest


@pytest.fixture
def consul_config() -> dict[str, object]:
    """Provide test Consul configuration."""
    return {
        "host": "consul.example.com",
        "port": 8500,
        "scheme": "http",
        "token": "acl-token-abc123",
        "timeout_seconds": 30.0,
        "datacenter": "dc1",
        "watch_wait": "30s",
    }


@pytest.fixture
def mock_consul_client() -> MagicMock:
    """Provide mocked consul.Consul client."""
    client = MagicMock()

    # KV store operations
    client.kv = MagicMock()
    client.kv.get = MagicMock(
        return_value=(
            "42",
            {"Value": b"test-value", "Key": "test/key", "ModifyIndex": 40},
        )
    )
    client.kv.put = MagicMock(return_value=True)

    # Agent operations (service registration)
    client.agent = MagicMock()
    client.agent.service = MagicMock()
    client.agent.service.register = MagicMock(return_value=True)
    client.agent.service.deregister = MagicMock(return_value=True)

    # Health operations
    client.health = MagicMock()
    client.health.service = MagicMock(
        return_value=(
            "17",
            [
                {
                    "Node": {"Node": "node-1", "Address": "10.0.0.1"},
                    "Service": {
                        "ID": "api",
                        "Service": "api",
                        "Address": "192.168.1.100",
                        "Port": 8080,
                        "Tags": ["v1"],
                    },
                    "Checks": [{"Status": "passing", "Name": "Service check"}],
                }
            ],
        )
    )

    # Status operations (connectivity check)
    client.status = MagicMock()
    client.status.leader = MagicMock(return_value="192.168.1.1:8300")

    return client
