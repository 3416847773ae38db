# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Unit tests for HandlerConsul.

These tests use a mocked consul client to validate HandlerConsul behavior
without requiring actual Consul server infrastructure.
"""

from __future__ import annotations

import asyncio
import threading
from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from unittest.mock import MagicMock, patch
from uuid import uuid4

import consul
import pytest
import pytest_asyncio
from pydantic import SecretStr

from omnibase_consul.errors import (
    InfraAuthenticationError,
    InfraConnectionError,
    InfraConsulError,
    InfraTimeoutError,
    InvalidPortError,
    InvalidServiceAddressError,
    KVNotFoundError,
    MalformedValueError,
    ProtocolConfigurationError,
    RuntimeHostError,
    ServiceNotFoundError,
    WatchClosedError,
)
from omnibase_consul.handlers.handler_consul import (
    SERVICE_CHECK_TTL,
    SERVICE_DEREGISTER_CRITICAL_AFTER,
    HandlerConsul,
)
from omnibase_consul.models import ModelConsulClientConfig

CONSUL_PATCH_TARGET = "omnibase_consul.handlers.handler_consul.consul.Consul"


@dataclass
class Database:
    host: str = ""
    port: int = field(default=0, metadata={"consul": "default:5432"})


@dataclass
class ServiceConfig:
    name: str = ""
    database: Database = field(default_factory=Database)


@pytest_asyncio.fixture
async def handler(
    consul_config: dict[str, object],
    mock_consul_client: MagicMock,
) -> AsyncIterator[HandlerConsul]:
    """Provide an initialized handler backed by the mocked client."""
    consul_handler = HandlerConsul()
    with patch(CONSUL_PATCH_TARGET) as MockClient:
        MockClient.return_value = mock_consul_client
        await consul_handler.initialize(consul_config)
    yield consul_handler
    await consul_handler.shutdown()


class TestHandlerConsulInitialization:
    """Test HandlerConsul initialization and configuration."""

    @pytest.mark.asyncio
    async def test_initialize_success(
        self,
        consul_config: dict[str, object],
        mock_consul_client: MagicMock,
    ) -> None:
        """Test successful initialization with valid config."""
        handler = HandlerConsul()

        with patch(CONSUL_PATCH_TARGET) as MockClient:
            MockClient.return_value = mock_consul_client

            await handler.initialize(consul_config)

            assert handler.is_initialized is True
            assert handler.config is not None
            assert handler.config.host == "consul.example.com"
            assert handler.config.datacenter == "dc1"
            MockClient.assert_called_once_with(
                host="consul.example.com",
                port=8500,
                token="acl-token-abc123",
                scheme="http",
                dc="dc1",
                verify=True,
            )
            mock_consul_client.status.leader.assert_called_once()

        await handler.shutdown()

    @pytest.mark.asyncio
    async def test_initialize_default_config(
        self,
        mock_consul_client: MagicMock,
    ) -> None:
        """Test initialization with default config values."""
        handler = HandlerConsul()

        with patch(CONSUL_PATCH_TARGET) as MockClient:
            MockClient.return_value = mock_consul_client

            await handler.initialize({})

            assert handler.config is not None
            assert handler.config.host == "localhost"
            assert handler.config.port == 8500

        await handler.shutdown()

    @pytest.mark.asyncio
    async def test_initialize_token_is_secret(
        self,
        consul_config: dict[str, object],
        mock_consul_client: MagicMock,
    ) -> None:
        """Test a plain string token is stored as SecretStr."""
        handler = HandlerConsul()

        with patch(CONSUL_PATCH_TARGET) as MockClient:
            MockClient.return_value = mock_consul_client
            await handler.initialize(consul_config)

        assert handler.config is not None
        assert isinstance(handler.config.token, SecretStr)
        assert "acl-token-abc123" not in repr(handler.config)
        await handler.shutdown()

    @pytest.mark.asyncio
    async def test_initialize_with_model(
        self,
        mock_consul_client: MagicMock,
    ) -> None:
        """Test a ready configuration model is used as-is."""
        handler = HandlerConsul()
        config = ModelConsulClientConfig(host="consul.local", watch_wait="10s")

        with patch(CONSUL_PATCH_TARGET) as MockClient:
            MockClient.return_value = mock_consul_client
            await handler.initialize(config)

        assert handler.config is config
        await handler.shutdown()

    @pytest.mark.asyncio
    async def test_initialize_from_environment(
        self,
        mock_consul_client: MagicMock,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Test that omitting config reads CONSUL_HTTP_* variables."""
        monkeypatch.setenv("CONSUL_HTTP_ADDR", "https://consul.env:8501")
        handler = HandlerConsul()

        with patch(CONSUL_PATCH_TARGET) as MockClient:
            MockClient.return_value = mock_consul_client
            await handler.initialize()

        assert handler.config is not None
        assert handler.config.host == "consul.env"
        assert handler.config.port == 8501
        assert handler.config.scheme == "https"
        await handler.shutdown()

    @pytest.mark.asyncio
    async def test_initialize_invalid_port(self) -> None:
        """Test initialization fails with invalid port."""
        handler = HandlerConsul()

        with pytest.raises(ProtocolConfigurationError) as exc_info:
            await handler.initialize({"port": 0})

        assert "port" in str(exc_info.value)
        assert handler.is_initialized is False

    @pytest.mark.asyncio
    async def test_invalid_config_never_echoes_token(self) -> None:
        """Test validation errors list field names only."""
        handler = HandlerConsul()

        with pytest.raises(ProtocolConfigurationError) as exc_info:
            await handler.initialize({"token": "super-secret-token", "scheme": "ftp"})

        assert "super-secret-token" not in str(exc_info.value)
        assert "scheme" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_initialize_connection_failure(
        self,
        consul_config: dict[str, object],
    ) -> None:
        """Test initialization fails with connection error."""
        handler = HandlerConsul()

        with patch(CONSUL_PATCH_TARGET) as MockClient:
            MockClient.side_effect = consul.ConsulException("Connection refused")

            with pytest.raises(InfraConnectionError) as exc_info:
                await handler.initialize(consul_config)

        assert "connectivity verification failed" in str(exc_info.value).lower()
        assert isinstance(exc_info.value.__cause__, consul.ConsulException)

    @pytest.mark.asyncio
    async def test_initialize_acl_denied(
        self,
        consul_config: dict[str, object],
        mock_consul_client: MagicMock,
    ) -> None:
        """Test initialization maps ACL rejections to authentication errors."""
        handler = HandlerConsul()
        mock_consul_client.status.leader.side_effect = consul.ACLPermissionDenied("denied")

        with patch(CONSUL_PATCH_TARGET) as MockClient:
            MockClient.return_value = mock_consul_client

            with pytest.raises(InfraAuthenticationError):
                await handler.initialize(consul_config)

    @pytest.mark.asyncio
    async def test_initialize_no_leader(
        self,
        consul_config: dict[str, object],
        mock_consul_client: MagicMock,
    ) -> None:
        """Test initialization fails when cluster has no leader."""
        handler = HandlerConsul()
        mock_consul_client.status.leader.return_value = ""

        with patch(CONSUL_PATCH_TARGET) as MockClient:
            MockClient.return_value = mock_consul_client

            with pytest.raises(InfraConnectionError) as exc_info:
                await handler.initialize(consul_config)

        assert "no leader" in str(exc_info.value).lower()
        assert handler.is_initialized is False

    @pytest.mark.asyncio
    async def test_operation_before_initialize(self) -> None:
        """Test operations fail before initialize()."""
        handler = HandlerConsul()

        with pytest.raises(RuntimeHostError, match="not initialized"):
            await handler.get("app/port")

        with pytest.raises(RuntimeHostError, match="not initialized"):
            handler.watch("app/port")


class TestHandlerConsulType:
    """Test HandlerConsul metadata."""

    def test_handler_type_property(self) -> None:
        assert HandlerConsul().handler_type == "consul"

    @pytest.mark.asyncio
    async def test_describe(self, handler: HandlerConsul) -> None:
        description = handler.describe()

        assert description["handler_type"] == "consul"
        assert description["initialized"] is True
        assert description["watch_wait"] == "30s"
        assert "consul.kv_watch" in description["supported_operations"]
        assert "acl-token-abc123" not in str(description)


class TestHandlerConsulKVOperations:
    """Test HandlerConsul KV store operations."""

    @pytest.mark.asyncio
    async def test_get_success(
        self,
        handler: HandlerConsul,
        mock_consul_client: MagicMock,
    ) -> None:
        entry = await handler.get("test/key")

        assert entry.found is True
        assert entry.value == b"test-value"
        assert entry.index == 42
        assert entry.modify_index == 40
        mock_consul_client.kv.get.assert_called_once_with("test/key")

    @pytest.mark.asyncio
    async def test_get_records_index(self, handler: HandlerConsul) -> None:
        await handler.get("test/key")
        assert handler.index_tracker.get("test/key") == 42

    @pytest.mark.asyncio
    async def test_get_not_found(
        self,
        handler: HandlerConsul,
        mock_consul_client: MagicMock,
    ) -> None:
        mock_consul_client.kv.get.return_value = ("7", None)
        correlation_id = uuid4()

        with pytest.raises(KVNotFoundError) as exc_info:
            await handler.get("missing/key", correlation_id)

        assert exc_info.value.key == "missing/key"
        assert exc_info.value.correlation_id == correlation_id
        assert str(exc_info.value) == 'kv "missing/key" not found'
        assert handler.index_tracker.get("missing/key") is None

    @pytest.mark.asyncio
    async def test_get_str(
        self,
        handler: HandlerConsul,
        mock_consul_client: MagicMock,
    ) -> None:
        mock_consul_client.kv.get.return_value = ("3", {"Key": "app/name", "Value": b"billing"})
        assert await handler.get_str("app/name") == "billing"

    @pytest.mark.asyncio
    async def test_get_int(
        self,
        handler: HandlerConsul,
        mock_consul_client: MagicMock,
    ) -> None:
        mock_consul_client.kv.get.return_value = ("3", {"Key": "app/port", "Value": b" 8080 "})
        assert await handler.get_int("app/port") == 8080

    @pytest.mark.asyncio
    async def test_get_int_malformed(
        self,
        handler: HandlerConsul,
        mock_consul_client: MagicMock,
    ) -> None:
        mock_consul_client.kv.get.return_value = ("3", {"Key": "app/port", "Value": b"eighty"})

        with pytest.raises(MalformedValueError) as exc_info:
            await handler.get_int("app/port")

        assert exc_info.value.context["consul_key"] == "app/port"

    @pytest.mark.asyncio
    async def test_put(
        self,
        handler: HandlerConsul,
        mock_consul_client: MagicMock,
    ) -> None:
        assert await handler.put("app/port", "8080") is True
        mock_consul_client.kv.put.assert_called_once_with("app/port", "8080")

    @pytest.mark.asyncio
    async def test_put_not_applied(
        self,
        handler: HandlerConsul,
        mock_consul_client: MagicMock,
    ) -> None:
        mock_consul_client.kv.put.return_value = False
        assert await handler.put("app/port", b"8080") is False


class TestHandlerConsulErrorMapping:
    """Test python-consul failures are mapped to typed errors."""

    @pytest.mark.asyncio
    async def test_acl_denied(
        self,
        handler: HandlerConsul,
        mock_consul_client: MagicMock,
    ) -> None:
        mock_consul_client.kv.get.side_effect = consul.ACLPermissionDenied("denied")

        with pytest.raises(InfraAuthenticationError) as exc_info:
            await handler.get("app/port")

        assert isinstance(exc_info.value.__cause__, consul.ACLPermissionDenied)

    @pytest.mark.asyncio
    async def test_consul_timeout(
        self,
        handler: HandlerConsul,
        mock_consul_client: MagicMock,
    ) -> None:
        mock_consul_client.kv.get.side_effect = consul.Timeout("slow")

        with pytest.raises(InfraTimeoutError):
            await handler.get("app/port")

    @pytest.mark.asyncio
    async def test_builtin_timeout(
        self,
        handler: HandlerConsul,
        mock_consul_client: MagicMock,
    ) -> None:
        mock_consul_client.kv.put.side_effect = TimeoutError()

        with pytest.raises(InfraTimeoutError) as exc_info:
            await handler.put("app/port", "1")

        assert exc_info.value.context["timeout_seconds"] == 30.0

    @pytest.mark.asyncio
    async def test_consul_exception(
        self,
        handler: HandlerConsul,
        mock_consul_client: MagicMock,
    ) -> None:
        mock_consul_client.kv.get.side_effect = consul.ConsulException("500 error")

        with pytest.raises(InfraConsulError) as exc_info:
            await handler.get("app/port")

        assert exc_info.value.context["consul_key"] == "app/port"
        assert isinstance(exc_info.value.__cause__, consul.ConsulException)

    @pytest.mark.asyncio
    async def test_unexpected_exception(
        self,
        handler: HandlerConsul,
        mock_consul_client: MagicMock,
    ) -> None:
        mock_consul_client.kv.get.side_effect = ConnectionError("refused")

        with pytest.raises(InfraConsulError, match="ConnectionError"):
            await handler.get("app/port")


class TestHandlerConsulWatch:
    """Test long-poll watches through the handler."""

    @pytest.mark.asyncio
    async def test_watch_delivers_then_closes_on_error(
        self,
        handler: HandlerConsul,
        mock_consul_client: MagicMock,
    ) -> None:
        mock_consul_client.kv.get.side_effect = [
            ("5", {"Key": "app/flag", "Value": b"on"}),
            consul.ConsulException("agent gone"),
        ]

        stream = handler.watch("app/flag")
        entry = await asyncio.wait_for(stream.receive(), timeout=2.0)

        with pytest.raises(WatchClosedError) as exc_info:
            await asyncio.wait_for(stream.receive(), timeout=2.0)

        assert entry.index == 5
        assert entry.value == b"on"
        assert isinstance(exc_info.value.cause, InfraConsulError)
        assert handler.index_tracker.get("app/flag") == 5

        calls = mock_consul_client.kv.get.call_args_list
        assert calls[0].kwargs == {"index": 1, "wait": "30s"}
        assert calls[1].kwargs == {"index": 5, "wait": "30s"}

    @pytest.mark.asyncio
    async def test_watch_seeded_by_get(
        self,
        handler: HandlerConsul,
        mock_consul_client: MagicMock,
    ) -> None:
        mock_consul_client.kv.get.side_effect = [
            ("42", {"Key": "app/flag", "Value": b"on"}),
            ("43", {"Key": "app/flag", "Value": b"off"}),
            consul.ConsulException("agent gone"),
        ]

        await handler.get("app/flag")
        stream = handler.watch("app/flag")
        entry = await asyncio.wait_for(stream.receive(), timeout=2.0)

        assert entry.index == 43
        assert mock_consul_client.kv.get.call_args_list[1].kwargs["index"] == 42

    @pytest.mark.asyncio
    async def test_watch_after_missing_get_waits_for_creation(
        self,
        handler: HandlerConsul,
        mock_consul_client: MagicMock,
    ) -> None:
        mock_consul_client.kv.get.side_effect = [
            ("7", None),
            ("7", None),
            ("9", {"Key": "never/created", "Value": b"now"}),
            consul.ConsulException("agent gone"),
        ]

        with pytest.raises(KVNotFoundError):
            await handler.get("never/created")
        stream = handler.watch("never/created")
        entry = await asyncio.wait_for(stream.receive(), timeout=2.0)

        assert entry.found is True
        assert entry.index == 9
        assert entry.value == b"now"
        calls = mock_consul_client.kv.get.call_args_list
        assert calls[1].kwargs == {"index": 1, "wait": "30s"}
        assert calls[2].kwargs == {"index": 1, "wait": "30s"}

    @pytest.mark.asyncio
    async def test_shutdown_stops_watches(
        self,
        consul_config: dict[str, object],
        mock_consul_client: MagicMock,
    ) -> None:
        release = threading.Event()

        def blocking_get(key: str, index: int | None = None, wait: str | None = None):
            release.wait(timeout=5.0)
            return ("1", None)

        mock_consul_client.kv.get.side_effect = blocking_get
        handler = HandlerConsul()
        with patch(CONSUL_PATCH_TARGET) as MockClient:
            MockClient.return_value = mock_consul_client
            await handler.initialize(consul_config)

        stream = handler.watch("app/flag")
        await asyncio.sleep(0.05)
        assert handler.active_watch_count == 1

        try:
            await handler.shutdown()
        finally:
            release.set()

        with pytest.raises(WatchClosedError) as exc_info:
            await asyncio.wait_for(stream.receive(), timeout=2.0)
        assert exc_info.value.cause is None
        assert handler.active_watch_count == 0
        assert handler.is_initialized is False


class TestHandlerConsulLoadInto:
    """Test config binding through the handler."""

    @pytest.mark.asyncio
    async def test_load_into(
        self,
        handler: HandlerConsul,
        mock_consul_client: MagicMock,
    ) -> None:
        store = {
            "service/name": ("11", {"Key": "service/name", "Value": b"billing"}),
            "service/database/host": ("12", {"Key": "service/database/host", "Value": b"db"}),
        }
        mock_consul_client.kv.get.side_effect = lambda key: store.get(key, ("13", None))
        config = ServiceConfig()

        await handler.load_into("service", config)

        assert config.name == "billing"
        assert config.database.host == "db"
        assert config.database.port == 5432
        assert handler.index_tracker.get("service/name") == 11
        assert handler.index_tracker.get("service/database/port") == 13


class TestHandlerConsulServices:
    """Test service registration and discovery."""

    @pytest.mark.asyncio
    async def test_register_service(
        self,
        handler: HandlerConsul,
        mock_consul_client: MagicMock,
    ) -> None:
        await handler.register_service("api", "10.0.0.5:8080", "v1", "blue")

        mock_consul_client.agent.service.register.assert_called_once_with(
            "api",
            service_id="api",
            address="10.0.0.5",
            port=8080,
            tags=["v1", "blue"],
            check={
                "TTL": SERVICE_CHECK_TTL,
                "DeregisterCriticalServiceAfter": SERVICE_DEREGISTER_CRITICAL_AFTER,
            },
        )
        assert SERVICE_CHECK_TTL == "3s"
        assert SERVICE_DEREGISTER_CRITICAL_AFTER == "10s"

    @pytest.mark.asyncio
    async def test_register_without_tags(
        self,
        handler: HandlerConsul,
        mock_consul_client: MagicMock,
    ) -> None:
        await handler.register_service("api", "[::1]:9000")

        kwargs = mock_consul_client.agent.service.register.call_args.kwargs
        assert kwargs["address"] == "::1"
        assert kwargs["port"] == 9000
        assert kwargs["tags"] is None

    @pytest.mark.asyncio
    async def test_register_invalid_address(
        self,
        handler: HandlerConsul,
        mock_consul_client: MagicMock,
    ) -> None:
        with pytest.raises(InvalidServiceAddressError):
            await handler.register_service("api", "nohost")
        mock_consul_client.agent.service.register.assert_not_called()

    @pytest.mark.asyncio
    async def test_register_invalid_port(
        self,
        handler: HandlerConsul,
        mock_consul_client: MagicMock,
    ) -> None:
        with pytest.raises(InvalidPortError):
            await handler.register_service("api", "host:abc")
        mock_consul_client.agent.service.register.assert_not_called()

    @pytest.mark.asyncio
    async def test_deregister_service(
        self,
        handler: HandlerConsul,
        mock_consul_client: MagicMock,
    ) -> None:
        await handler.deregister_service("api")
        mock_consul_client.agent.service.deregister.assert_called_once_with("api")

    @pytest.mark.asyncio
    async def test_get_services(
        self,
        handler: HandlerConsul,
        mock_consul_client: MagicMock,
    ) -> None:
        instances, index = await handler.get_services("api", "v1")

        assert index == 17
        assert len(instances) == 1
        assert instances[0].address == "192.168.1.100"
        assert instances[0].port == 8080
        assert instances[0].tags == ("v1",)
        mock_consul_client.health.service.assert_called_once_with(
            "api", tag="v1", passing=True
        )

    @pytest.mark.asyncio
    async def test_get_services_empty_tag_means_any(
        self,
        handler: HandlerConsul,
        mock_consul_client: MagicMock,
    ) -> None:
        await handler.get_services("api", "")
        assert mock_consul_client.health.service.call_args.kwargs["tag"] is None

    @pytest.mark.asyncio
    async def test_get_services_none_passing(
        self,
        handler: HandlerConsul,
        mock_consul_client: MagicMock,
    ) -> None:
        mock_consul_client.health.service.return_value = ("18", [])

        with pytest.raises(ServiceNotFoundError) as exc_info:
            await handler.get_services("api")

        assert str(exc_info.value) == 'service "api" not found'

    @pytest.mark.asyncio
    async def test_get_first_service(self, handler: HandlerConsul) -> None:
        instance, index = await handler.get_first_service("api")

        assert instance.service_id == "api"
        assert index == 17
