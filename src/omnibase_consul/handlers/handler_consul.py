# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""HashiCorp Consul KV and service-discovery client using python-consul.

HandlerConsul is the asyncio façade over a Consul agent. It wraps the
synchronous python-consul client, runs every call in a bounded thread pool
and exposes typed results and typed errors.

Security Features:
    - SecretStr protection for ACL tokens (prevents accidental logging)
    - Sanitized error messages (never expose tokens in logs)

Supported Operations:
    - get / get_str / get_int: Single-shot KV lookups
    - put: Store a value in the KV store
    - watch: Long-poll change stream for one key
    - load_into: Bind a KV namespace onto a dataclass or pydantic record
    - register_service / deregister_service: Agent service registration
    - get_services / get_first_service: Passing service instances
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping
from concurrent.futures import ThreadPoolExecutor
from typing import Final, TypeVar
from uuid import UUID, uuid4

import consul
from pydantic import SecretStr, ValidationError

from omnibase_consul.enums import EnumInfraTransportType, EnumScalarKind
from omnibase_consul.errors import (
    InfraAuthenticationError,
    InfraConnectionError,
    InfraConsulError,
    InfraTimeoutError,
    KVNotFoundError,
    ModelInfraErrorContext,
    ProtocolConfigurationError,
    RuntimeHostError,
    ServiceNotFoundError,
)
from omnibase_consul.models import (
    ModelConsulClientConfig,
    ModelKVEntry,
    ModelServiceInstance,
)
from omnibase_consul.runtime import (
    ChangeWatcher,
    ConfigBinder,
    IndexTracker,
    WatchStream,
)
from omnibase_consul.utils import coerce_scalar, sanitize_error_message, split_host_port

T = TypeVar("T")

logger = logging.getLogger(__name__)

HANDLER_TYPE_CONSUL: Final[str] = "consul"

# Fixed TTL health check attached to every registered service
SERVICE_CHECK_TTL: Final[str] = "3s"
SERVICE_DEREGISTER_CRITICAL_AFTER: Final[str] = "10s"

SUPPORTED_OPERATIONS: frozenset[str] = frozenset(
    {
        "consul.kv_get",
        "consul.kv_put",
        "consul.kv_watch",
        "consul.load_into",
        "consul.register",
        "consul.deregister",
        "consul.health_service",
    }
)


class HandlerConsul:
    """HashiCorp Consul client façade (KV, watches, config binding, services).

    Security Policy - Token Handling:
        The Consul ACL token is treated as a secret throughout this handler:

        1. Token is stored as SecretStr in config (never logged or exposed)
        2. All error messages use generic descriptions without exposing token
        3. The describe() method returns capabilities without credentials

    Thread Pool Management:
        - python-consul is synchronous; every call runs in a ThreadPoolExecutor
          via loop.run_in_executor() so the event loop is never blocked
        - Single-shot calls use a pool of max_concurrent_operations workers
          and are bounded by timeout_seconds
        - Long-poll watch fetches use a separate pool of
          max_concurrent_watches workers so blocked watches never starve
          single-shot calls; they are bounded by the store's wait duration
        - Both pools are shut down on shutdown()

    Error Mapping:
        python-consul failures are mapped once, at the executor boundary:

        - consul.ACLPermissionDenied -> InfraAuthenticationError
        - consul.Timeout / TimeoutError -> InfraTimeoutError
        - anything else -> InfraConsulError

        The original exception is kept as ``__cause__``. Nothing is retried.

    Example:
        >>> handler = HandlerConsul()
        >>> await handler.initialize({"host": "consul.local"})
        >>> entry = await handler.get("service/port")
        >>> port = await handler.get_int("service/port")
        >>> async for entry in handler.watch("service/feature_flag"):
        ...     print(entry.index, entry.value)
        >>> await handler.shutdown()
    """

    def __init__(self) -> None:
        """Initialize HandlerConsul in uninitialized state."""
        self._client: consul.Consul | None = None
        self._config: ModelConsulClientConfig | None = None
        self._initialized: bool = False
        self._executor: ThreadPoolExecutor | None = None
        self._watch_executor: ThreadPoolExecutor | None = None
        self._index_tracker: IndexTracker = IndexTracker()
        self._watchers: set[ChangeWatcher] = set()

    @property
    def handler_type(self) -> str:
        """Return handler type identifier for Consul."""
        return HANDLER_TYPE_CONSUL

    @property
    def is_initialized(self) -> bool:
        """Return whether initialize() completed successfully."""
        return self._initialized

    @property
    def index_tracker(self) -> IndexTracker:
        """Return the per-key index tracker shared by lookups and watches."""
        return self._index_tracker

    @property
    def config(self) -> ModelConsulClientConfig | None:
        """Return the active configuration, or None before initialize()."""
        return self._config

    @property
    def active_watch_count(self) -> int:
        """Return the number of watch loops still running."""
        return sum(1 for w in self._watchers if w.is_running)

    # Initialization helper methods

    def _validate_consul_config(
        self,
        config: Mapping[str, object] | ModelConsulClientConfig | None,
        correlation_id: UUID,
    ) -> ModelConsulClientConfig:
        """Validate and parse Consul configuration.

        Args:
            config: Raw configuration mapping, a ready model, or None to read
                the ``CONSUL_HTTP_*`` environment variables.
            correlation_id: Correlation ID for error context.

        Returns:
            Validated ModelConsulClientConfig.

        Raises:
            ProtocolConfigurationError: If validation fails.
        """
        if isinstance(config, ModelConsulClientConfig):
            return config
        try:
            if config is None:
                return ModelConsulClientConfig.from_env()

            token_raw = config.get("token")
            if isinstance(token_raw, str):
                config = dict(config)
                config["token"] = SecretStr(token_raw)

            return ModelConsulClientConfig.model_validate(config)
        except ValidationError as e:
            ctx = ModelInfraErrorContext(
                transport_type=EnumInfraTransportType.CONSUL,
                operation="initialize",
                target_name="consul_handler",
                correlation_id=correlation_id,
            )
            sanitized_fields = [err.get("loc", ("unknown",))[-1] for err in e.errors()]
            raise ProtocolConfigurationError(
                f"Invalid Consul configuration - validation failed for fields: {sanitized_fields}",
                context=ctx,
            ) from e

    def _setup_consul_client(
        self, consul_config: ModelConsulClientConfig
    ) -> consul.Consul:
        """Create and configure the Consul client."""
        token_value: str | None = None
        if consul_config.token is not None:
            token_value = consul_config.token.get_secret_value()

        return consul.Consul(
            host=consul_config.host,
            port=consul_config.port,
            token=token_value,
            scheme=consul_config.scheme,
            dc=consul_config.datacenter,
            verify=consul_config.verify_ssl,
        )

    def _verify_consul_connection(
        self, client: consul.Consul, correlation_id: UUID
    ) -> None:
        """Verify connectivity to Consul by checking leader status.

        Raises:
            InfraConnectionError: If the cluster reports no leader.
        """
        leader = client.status.leader()
        if not leader:
            raise InfraConnectionError(
                "Consul cluster has no leader - cluster may be unavailable",
                context=self._error_context("initialize", correlation_id),
            )

    def _setup_thread_pools(self, consul_config: ModelConsulClientConfig) -> None:
        self._executor = ThreadPoolExecutor(
            max_workers=consul_config.max_concurrent_operations,
            thread_name_prefix="consul_handler_",
        )
        self._watch_executor = ThreadPoolExecutor(
            max_workers=consul_config.max_concurrent_watches,
            thread_name_prefix="consul_watch_",
        )

    async def initialize(
        self,
        config: Mapping[str, object] | ModelConsulClientConfig | None = None,
    ) -> None:
        """Initialize the Consul client with configuration.

        Args:
            config: Configuration dict or model containing:
                - host: Consul agent hostname (default: "localhost")
                - port: Consul agent port (default: 8500)
                - scheme: "http" or "https" (default: "http")
                - token: Optional Consul ACL token
                - timeout_seconds: Optional timeout (default 30.0)
                - datacenter: Optional datacenter for multi-DC deployments
                - watch_wait: Long-poll wait duration (default "5m")
                When omitted, ModelConsulClientConfig.from_env() is used.

        Raises:
            ProtocolConfigurationError: If configuration validation fails.
            InfraAuthenticationError: If token authentication fails.
            InfraConnectionError: If connection to Consul fails.
            RuntimeHostError: If client initialization fails for other reasons.

        Security:
            Token should come from the environment, not be hardcoded in config.
        """
        init_correlation_id = uuid4()

        logger.info(
            "Initializing %s",
            self.__class__.__name__,
            extra={
                "handler": self.__class__.__name__,
                "correlation_id": str(init_correlation_id),
            },
        )

        consul_config = self._validate_consul_config(config, init_correlation_id)

        try:
            client = self._setup_consul_client(consul_config)
            self._verify_consul_connection(client, init_correlation_id)
        except InfraConnectionError:
            raise
        except consul.ACLPermissionDenied as e:
            raise InfraAuthenticationError(
                "Consul ACL permission denied - check token validity and permissions",
                context=self._error_context("initialize", init_correlation_id),
            ) from e
        except consul.ConsulException as e:
            raise InfraConnectionError(
                "Consul connectivity verification failed",
                context=self._error_context("initialize", init_correlation_id),
                host=consul_config.host,
                port=consul_config.port,
            ) from e
        except Exception as e:
            raise RuntimeHostError(
                f"Consul client initialization failed: {type(e).__name__}",
                context=self._error_context("initialize", init_correlation_id),
            ) from e

        self._config = consul_config
        self._client = client
        self._setup_thread_pools(consul_config)
        self._initialized = True

        logger.info(
            "%s initialized successfully",
            self.__class__.__name__,
            extra={
                "handler": self.__class__.__name__,
                "host": consul_config.host,
                "port": consul_config.port,
                "scheme": consul_config.scheme,
                "datacenter": consul_config.datacenter,
                "timeout_seconds": consul_config.timeout_seconds,
                "thread_pool_max_workers": consul_config.max_concurrent_operations,
                "watch_pool_max_workers": consul_config.max_concurrent_watches,
                "correlation_id": str(init_correlation_id),
            },
        )

    async def shutdown(self) -> None:
        """Stop all watches, close the Consul client and release resources.

        Cleanup includes:
            - Stopping every live watch (their streams close with no error)
            - Shutting down both thread pools without waiting for blocked
              long-poll fetches
            - Clearing the Consul client reference
        """
        shutdown_correlation_id = uuid4()

        watchers = list(self._watchers)
        for watcher in watchers:
            await watcher.stop()
        self._watchers.clear()

        if self._watch_executor is not None:
            # blocked long-polls only return when the store's wait elapses
            self._watch_executor.shutdown(wait=False, cancel_futures=True)
            self._watch_executor = None

        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

        # python-consul has no close method, just clear the reference
        self._client = None
        self._initialized = False
        self._config = None

        logger.info(
            "HandlerConsul shutdown complete",
            extra={
                "stopped_watches": len(watchers),
                "correlation_id": str(shutdown_correlation_id),
            },
        )

    def _error_context(
        self,
        operation: str,
        correlation_id: UUID,
        target_name: str = "consul_handler",
    ) -> ModelInfraErrorContext:
        return ModelInfraErrorContext(
            transport_type=EnumInfraTransportType.CONSUL,
            operation=operation,
            target_name=target_name,
            correlation_id=correlation_id,
        )

    def _require_client(self, operation: str, correlation_id: UUID) -> consul.Consul:
        if not self._initialized or self._client is None or self._config is None:
            raise RuntimeHostError(
                "HandlerConsul not initialized. Call initialize() first.",
                context=self._error_context(operation, correlation_id),
            )
        return self._client

    async def _execute(
        self,
        operation: str,
        func: Callable[[], T],
        correlation_id: UUID,
        *,
        consul_key: str | None = None,
        service_name: str | None = None,
        blocking: bool = False,
    ) -> T:
        """Run a synchronous python-consul call in the thread pool.

        Args:
            operation: Operation name for logging and error context
            func: Callable performing the consul call
            correlation_id: Correlation ID for tracing
            consul_key: KV key involved, for error context
            service_name: Service involved, for error context
            blocking: Long-poll call; runs on the watch pool with no timeout

        Returns:
            Result from func()

        Raises:
            InfraAuthenticationError: If the ACL token is rejected.
            InfraTimeoutError: If the call exceeds timeout_seconds.
            InfraConsulError: For any other failure.
        """
        if self._config is None:
            raise RuntimeHostError(
                "HandlerConsul not initialized. Call initialize() first.",
                context=self._error_context(operation, correlation_id),
            )

        loop = asyncio.get_running_loop()
        try:
            if blocking:
                return await loop.run_in_executor(self._watch_executor, func)
            return await asyncio.wait_for(
                loop.run_in_executor(self._executor, func),
                timeout=self._config.timeout_seconds,
            )
        except Exception as e:
            raise self._map_error(
                e, operation, correlation_id, consul_key, service_name
            ) from e

    def _map_error(
        self,
        error: Exception,
        operation: str,
        correlation_id: UUID,
        consul_key: str | None,
        service_name: str | None,
    ) -> RuntimeHostError:
        """Translate a python-consul or executor failure into a typed error."""
        ctx = self._error_context(operation, correlation_id)
        extra: dict[str, object] = {}
        if consul_key is not None:
            extra["consul_key"] = consul_key
        if service_name is not None:
            extra["service_name"] = service_name

        logger.debug(
            "Consul operation failed",
            extra={
                "operation": operation,
                "error": sanitize_error_message(error),
                "correlation_id": str(correlation_id),
                **extra,
            },
        )

        if isinstance(error, consul.ACLPermissionDenied):
            return InfraAuthenticationError(
                "Consul ACL permission denied - check token permissions",
                context=ctx,
                **extra,
            )
        if isinstance(error, (consul.Timeout, TimeoutError)):
            timeout = self._config.timeout_seconds if self._config else None
            return InfraTimeoutError(
                f"Consul timeout: {type(error).__name__}",
                context=ctx,
                timeout_seconds=timeout,
                **extra,
            )
        return InfraConsulError(
            f"Consul error: {type(error).__name__}",
            context=ctx,
            consul_key=consul_key,
            service_name=service_name,
        )

    # KV operations

    async def get(
        self, key: str, correlation_id: UUID | None = None
    ) -> ModelKVEntry:
        """Fetch the current entry for ``key``.

        The response index is recorded in the IndexTracker only when the
        key exists, so a first watch on a missing key still starts from the
        sentinel index.

        Raises:
            KVNotFoundError: If the key does not exist.
            InfraConsulError: On store failure.
        """
        correlation_id = correlation_id or uuid4()
        client = self._require_client("consul.kv_get", correlation_id)

        def get_func() -> tuple[object, object]:
            return client.kv.get(key)

        index, data = await self._execute(
            "consul.kv_get", get_func, correlation_id, consul_key=key
        )
        entry = ModelKVEntry.from_consul(key, index, data)
        if not entry.found:
            raise KVNotFoundError(
                key, context=self._error_context("consul.kv_get", correlation_id)
            )
        self._index_tracker.set(key, entry.index)

        logger.debug(
            "KV get",
            extra={
                "consul_key": key,
                "index": entry.index,
                "correlation_id": str(correlation_id),
            },
        )
        return entry

    async def get_str(self, key: str, correlation_id: UUID | None = None) -> str:
        """Fetch ``key`` and return its payload as text."""
        entry = await self.get(key, correlation_id)
        return str(coerce_scalar(EnumScalarKind.STRING, entry.value or b""))

    async def get_int(self, key: str, correlation_id: UUID | None = None) -> int:
        """Fetch ``key`` and parse its payload as a 64-bit integer.

        Raises:
            KVNotFoundError: If the key does not exist.
            MalformedValueError: If the payload is not an integer.
        """
        entry = await self.get(key, correlation_id)
        try:
            return int(coerce_scalar(EnumScalarKind.INT, entry.value or b""))
        except RuntimeHostError as e:
            e.context.setdefault("consul_key", key)
            raise

    async def put(
        self,
        key: str,
        value: str | bytes,
        correlation_id: UUID | None = None,
    ) -> bool:
        """Store ``value`` under ``key``.

        Returns:
            The store's acknowledgement (True when the write was applied).
        """
        correlation_id = correlation_id or uuid4()
        client = self._require_client("consul.kv_put", correlation_id)

        def put_func() -> bool:
            return bool(client.kv.put(key, value))

        result = await self._execute(
            "consul.kv_put", put_func, correlation_id, consul_key=key
        )
        logger.debug(
            "KV put",
            extra={
                "consul_key": key,
                "applied": result,
                "correlation_id": str(correlation_id),
            },
        )
        return result

    def watch(self, key: str, correlation_id: UUID | None = None) -> WatchStream:
        """Start a long-poll watch on ``key`` and return its stream.

        Must be called from a running event loop. Each call spawns an
        independent background task; the stream ends when the store reports
        an error, when ``stream.stop()`` is awaited, or on shutdown().

        Raises:
            RuntimeHostError: If the handler is not initialized.
        """
        correlation_id = correlation_id or uuid4()
        self._require_client("consul.kv_watch", correlation_id)
        config = self._config
        if config is None:
            raise RuntimeError("Config not initialized")

        watcher = ChangeWatcher(
            key,
            self._watch_fetch,
            self._index_tracker,
            empty_poll_backoff_seconds=config.empty_poll_backoff_seconds,
            correlation_id=correlation_id,
        )
        stream = watcher.start()
        self._watchers.add(watcher)
        task = watcher.task
        if task is not None:
            task.add_done_callback(lambda _t: self._watchers.discard(watcher))
        return stream

    async def _watch_fetch(self, key: str, wait_index: int) -> ModelKVEntry:
        """One blocking query for the watch loop."""
        correlation_id = uuid4()
        client = self._require_client("consul.kv_watch", correlation_id)
        config = self._config
        if config is None:
            raise RuntimeError("Config not initialized")

        def watch_func() -> tuple[object, object]:
            return client.kv.get(key, index=wait_index, wait=config.watch_wait)

        index, data = await self._execute(
            "consul.kv_watch", watch_func, correlation_id, consul_key=key, blocking=True
        )
        return ModelKVEntry.from_consul(key, index, data)

    async def load_into(
        self,
        parent: str,
        target: object,
        correlation_id: UUID | None = None,
    ) -> None:
        """Populate ``target`` from the KV namespace rooted at ``parent``.

        See ConfigBinder for resolution rules. Binding is not atomic.
        """
        correlation_id = correlation_id or uuid4()
        self._require_client("consul.load_into", correlation_id)

        async def fetch(path: str) -> ModelKVEntry:
            return await self.get(path, correlation_id)

        await ConfigBinder(fetch).load_into(parent, target, correlation_id)

    # Service operations

    async def register_service(
        self,
        name: str,
        address: str,
        *tags: str,
        correlation_id: UUID | None = None,
    ) -> None:
        """Register ``name`` at ``address`` ("host:port") with the local agent.

        The service ID equals the name and a fixed TTL check is attached.

        Raises:
            InvalidServiceAddressError: Malformed address (no network call).
            InvalidPortError: Non-numeric or out-of-range port (no network call).
            InfraConsulError: On agent failure.
        """
        correlation_id = correlation_id or uuid4()
        host, port = split_host_port(address)
        client = self._require_client("consul.register", correlation_id)

        check = {
            "TTL": SERVICE_CHECK_TTL,
            "DeregisterCriticalServiceAfter": SERVICE_DEREGISTER_CRITICAL_AFTER,
        }
        tag_list = list(tags) if tags else None

        def register_func() -> bool:
            return bool(
                client.agent.service.register(
                    name,
                    service_id=name,
                    address=host,
                    port=port,
                    tags=tag_list,
                    check=check,
                )
            )

        await self._execute(
            "consul.register", register_func, correlation_id, service_name=name
        )
        logger.info(
            "Service registered",
            extra={
                "service_name": name,
                "host": host,
                "port": port,
                "correlation_id": str(correlation_id),
            },
        )

    async def deregister_service(
        self, service_id: str, correlation_id: UUID | None = None
    ) -> None:
        """Remove ``service_id`` from the local agent."""
        correlation_id = correlation_id or uuid4()
        client = self._require_client("consul.deregister", correlation_id)

        def deregister_func() -> bool:
            return bool(client.agent.service.deregister(service_id))

        await self._execute(
            "consul.deregister", deregister_func, correlation_id, service_name=service_id
        )
        logger.info(
            "Service deregistered",
            extra={"service_id": service_id, "correlation_id": str(correlation_id)},
        )

    async def get_services(
        self,
        service: str,
        tag: str | None = None,
        correlation_id: UUID | None = None,
    ) -> tuple[list[ModelServiceInstance], int]:
        """Return the passing instances of ``service`` and the response index.

        Raises:
            ServiceNotFoundError: If no instance passes its health checks.
        """
        correlation_id = correlation_id or uuid4()
        client = self._require_client("consul.health_service", correlation_id)

        def health_func() -> tuple[object, object]:
            return client.health.service(service, tag=tag or None, passing=True)

        index, nodes = await self._execute(
            "consul.health_service", health_func, correlation_id, service_name=service
        )
        instances = [
            ModelServiceInstance.from_consul(node)
            for node in (nodes if isinstance(nodes, list) else [])
            if isinstance(node, Mapping)
        ]
        if not instances:
            raise ServiceNotFoundError(
                service,
                context=self._error_context("consul.health_service", correlation_id),
            )
        return instances, int(index) if index is not None else 0

    async def get_first_service(
        self,
        service: str,
        tag: str | None = None,
        correlation_id: UUID | None = None,
    ) -> tuple[ModelServiceInstance, int]:
        """Return the first passing instance of ``service`` and the response index."""
        instances, index = await self.get_services(service, tag, correlation_id)
        return instances[0], index

    def describe(self) -> dict[str, object]:
        """Return handler metadata and capabilities.

        Returns:
            Handler description with supported operations and configuration
        """
        return {
            "handler_type": self.handler_type,
            "supported_operations": sorted(SUPPORTED_OPERATIONS),
            "timeout_seconds": self._config.timeout_seconds if self._config else 30.0,
            "watch_wait": self._config.watch_wait if self._config else "5m",
            "active_watches": self.active_watch_count,
            "initialized": self._initialized,
            "version": "0.1.0",
        }


__all__: list[str] = [
    "HANDLER_TYPE_CONSUL",
    "SERVICE_CHECK_TTL",
    "SERVICE_DEREGISTER_CRITICAL_AFTER",
    "HandlerConsul",
]
