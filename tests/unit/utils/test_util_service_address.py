# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Unit tests for ``host:port`` service address parsing."""

from __future__ import annotations

import pytest

from omnibase_consul.errors import InvalidPortError, InvalidServiceAddressError
from omnibase_consul.utils.util_service_address import split_host_port


class TestSplitHostPort:
    """Address splitting and validation."""

    @pytest.mark.parametrize(
        ("address", "expected"),
        [
            ("10.0.0.5:8080", ("10.0.0.5", 8080)),
            ("api.internal:443", ("api.internal", 443)),
            ("[::1]:53", ("::1", 53)),
            (":9000", ("", 9000)),
            ("host:0", ("host", 0)),
            ("host:65535", ("host", 65535)),
        ],
    )
    def test_valid_addresses(self, address: str, expected: tuple[str, int]) -> None:
        assert split_host_port(address) == expected

    @pytest.mark.parametrize(
        "address",
        ["nohost", "::1:80", "[::1]", "[::1:80", "[::1]x80", "a]b:80"],
    )
    def test_malformed_addresses(self, address: str) -> None:
        with pytest.raises(InvalidServiceAddressError):
            split_host_port(address)

    @pytest.mark.parametrize("address", ["host:abc", "host:", "host:-1", "host:65536", "host:８０"])
    def test_invalid_ports(self, address: str) -> None:
        with pytest.raises(InvalidPortError):
            split_host_port(address)
