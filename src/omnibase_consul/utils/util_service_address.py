# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Service address parsing.

Splits a ``host:port`` service address before registration. IPv6 hosts must
be bracketed (``[::1]:8080``). The port must be a decimal number in
0..65535; anything else is rejected before the Consul agent is contacted.
"""

from __future__ import annotations

from typing import Final

from omnibase_consul.errors import InvalidPortError, InvalidServiceAddressError

MAX_PORT: Final[int] = 65535


def split_host_port(address: str) -> tuple[str, int]:
    """Split ``address`` into host and numeric port.

    Args:
        address: ``host:port`` or ``[ipv6-host]:port``

    Returns:
        Tuple of (host, port). The host may be empty (``":8080"``).

    Raises:
        InvalidServiceAddressError: Missing port, unbalanced brackets or an
            unbracketed host containing colons.
        InvalidPortError: Non-numeric or out-of-range port.

    Example:
        >>> split_host_port("10.0.0.5:8080")
        ('10.0.0.5', 8080)
        >>> split_host_port("[::1]:53")
        ('::1', 53)
    """
    if address.startswith("["):
        end = address.find("]")
        if end < 0 or address[end + 1 : end + 2] != ":":
            raise InvalidServiceAddressError(address)
        host = address[1:end]
        port_text = address[end + 2 :]
        if "[" in host or "]" in port_text or "[" in port_text:
            raise InvalidServiceAddressError(address)
    else:
        host, sep, port_text = address.rpartition(":")
        if not sep or ":" in host or "[" in host or "]" in host:
            raise InvalidServiceAddressError(address)

    if not port_text.isascii() or not port_text.isdigit():
        raise InvalidPortError(port_text)
    port = int(port_text)
    if port > MAX_PORT:
        raise InvalidPortError(port_text)
    return host, port


__all__: list[str] = ["MAX_PORT", "split_host_port"]
