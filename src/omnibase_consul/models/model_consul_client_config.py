# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Consul Client Configuration Model.

This module provides the Pydantic configuration model for HandlerConsul
initialization.

Security Note:
    The token field uses SecretStr to prevent accidental logging of
    sensitive credentials. Tokens should come from environment variables
    (``CONSUL_HTTP_TOKEN``), never from configuration files.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, SecretStr

# Consul duration syntax accepted by the ``wait`` query parameter
CONSUL_DURATION_PATTERN: str = r"^[0-9]+(ms|s|m|h)$"

ENV_HTTP_ADDR: str = "CONSUL_HTTP_ADDR"
ENV_HTTP_TOKEN: str = "CONSUL_HTTP_TOKEN"
ENV_HTTP_SSL: str = "CONSUL_HTTP_SSL"
ENV_HTTP_SSL_VERIFY: str = "CONSUL_HTTP_SSL_VERIFY"
ENV_DATACENTER: str = "CONSUL_DATACENTER"

_TRUE_VALUES: frozenset[str] = frozenset({"1", "true", "yes", "on"})


class ModelConsulClientConfig(BaseModel):
    """Configuration for the Consul KV/service-discovery client.

    Attributes:
        host: Consul agent hostname (default "localhost")
        port: Consul HTTP port (1-65535, default 8500)
        scheme: "http" or "https" (default "http")
        token: ACL token (SecretStr, optional)
        datacenter: Datacenter to query (optional, agent default otherwise)
        verify_ssl: Verify TLS certificates when scheme is https
        timeout_seconds: Deadline for single-shot operations (1.0-300.0)
        max_concurrent_operations: Thread pool size for single-shot calls
        max_concurrent_watches: Thread pool size for long-poll watch fetches
        watch_wait: Long-poll wait duration passed to Consul (e.g. "5m")
        empty_poll_backoff_seconds: Delay before re-polling a key that does
            not exist yet while waiting on the sentinel index (0 re-polls
            immediately)

    Example:
        >>> config = ModelConsulClientConfig(
        ...     host="consul.example.com",
        ...     token=SecretStr("acl-token"),
        ...     watch_wait="30s",
        ... )
        >>> print(config.token)
        **********
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )

    host: str = Field(
        default="localhost",
        min_length=1,
        description="Consul agent hostname",
    )
    port: int = Field(
        default=8500,
        ge=1,
        le=65535,
        description="Consul HTTP API port",
    )
    scheme: Literal["http", "https"] = Field(
        default="http",
        description="HTTP scheme",
    )
    token: SecretStr | None = Field(
        default=None,
        description="Consul ACL token (use SecretStr for security)",
    )
    datacenter: str | None = Field(
        default=None,
        description="Datacenter for multi-DC deployments",
    )
    verify_ssl: bool = Field(
        default=True,
        description="Whether to verify SSL certificates",
    )
    timeout_seconds: float = Field(
        default=30.0,
        ge=1.0,
        le=300.0,
        description="Timeout for single-shot operations in seconds",
    )
    max_concurrent_operations: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Maximum concurrent single-shot Consul operations",
    )
    max_concurrent_watches: int = Field(
        default=16,
        ge=1,
        le=256,
        description="Maximum concurrently blocked long-poll fetches",
    )
    watch_wait: str = Field(
        default="5m",
        pattern=CONSUL_DURATION_PATTERN,
        description="Long-poll wait duration (Consul duration syntax)",
    )
    empty_poll_backoff_seconds: float = Field(
        default=0.0,
        ge=0.0,
        le=60.0,
        description="Delay before re-polling a key that does not exist yet",
    )

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        **overrides: object,
    ) -> ModelConsulClientConfig:
        """Build a configuration from the standard ``CONSUL_HTTP_*`` variables.

        Recognized variables:
            CONSUL_HTTP_ADDR: ``host:port`` or ``scheme://host:port``
            CONSUL_HTTP_TOKEN: ACL token
            CONSUL_HTTP_SSL: "true" switches the scheme to https
            CONSUL_HTTP_SSL_VERIFY: "false" disables certificate verification
            CONSUL_DATACENTER: datacenter name

        Args:
            environ: Mapping to read from (defaults to ``os.environ``)
            **overrides: Explicit field values, applied last

        Returns:
            Validated configuration.

        Raises:
            pydantic.ValidationError: If a resulting value is invalid.
        """
        env = os.environ if environ is None else environ
        values: dict[str, object] = {}

        addr = env.get(ENV_HTTP_ADDR, "").strip()
        if addr:
            if "://" in addr:
                scheme, addr = addr.split("://", 1)
                values["scheme"] = scheme.lower()
            host, sep, port = addr.rpartition(":")
            if sep and host:
                values["host"] = host.strip("[]")
                values["port"] = port
            else:
                values["host"] = addr

        if env.get(ENV_HTTP_SSL, "").strip().lower() in _TRUE_VALUES:
            values["scheme"] = "https"

        ssl_verify = env.get(ENV_HTTP_SSL_VERIFY)
        if ssl_verify is not None and ssl_verify.strip():
            values["verify_ssl"] = ssl_verify.strip().lower() in _TRUE_VALUES

        token = env.get(ENV_HTTP_TOKEN)
        if token:
            values["token"] = SecretStr(token)

        datacenter = env.get(ENV_DATACENTER)
        if datacenter:
            values["datacenter"] = datacenter

        values.update(overrides)
        return cls.model_validate(values)


__all__: list[str] = [
    "CONSUL_DURATION_PATTERN",
    "ModelConsulClientConfig",
]
