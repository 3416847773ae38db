# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Unit tests for the base error family."""

from __future__ import annotations

from uuid import uuid4

import pytest

from omnibase_consul.enums import EnumInfraErrorCode, EnumInfraTransportType
from omnibase_consul.errors import (
    InfraAuthenticationError,
    InfraConnectionError,
    InfraConsulError,
    InfraTimeoutError,
    ModelInfraErrorContext,
    ProtocolConfigurationError,
    RuntimeHostError,
    UnsupportedTypeError,
)


class TestRuntimeHostError:
    """Context flattening and correlation."""

    def test_flattens_bundled_context(self) -> None:
        correlation_id = uuid4()
        ctx = ModelInfraErrorContext(
            transport_type=EnumInfraTransportType.CONSUL,
            operation="consul.kv_watch",
            target_name="consul_handler",
            correlation_id=correlation_id,
        )

        error = RuntimeHostError("watch loop failed", context=ctx, consul_key="app/flag")

        assert str(error) == "watch loop failed"
        assert error.error_code is EnumInfraErrorCode.OPERATION_FAILED
        assert error.correlation_id == correlation_id
        assert error.context == {
            "consul_key": "app/flag",
            "transport_type": EnumInfraTransportType.CONSUL,
            "operation": "consul.kv_watch",
            "target_name": "consul_handler",
        }

    def test_without_context(self) -> None:
        error = RuntimeHostError("load_into failed")

        assert error.correlation_id is None
        assert error.context == {}

    def test_explicit_code_overrides_default(self) -> None:
        error = ProtocolConfigurationError(
            "bad record", error_code=EnumInfraErrorCode.UNSUPPORTED_TYPE
        )
        assert error.error_code is EnumInfraErrorCode.UNSUPPORTED_TYPE


class TestErrorCodes:
    """Each subclass carries its own code."""

    @pytest.mark.parametrize(
        ("error_type", "code"),
        [
            (ProtocolConfigurationError, EnumInfraErrorCode.INVALID_CONFIGURATION),
            (InfraConnectionError, EnumInfraErrorCode.CONNECTION_ERROR),
            (InfraConsulError, EnumInfraErrorCode.CONNECTION_ERROR),
            (InfraTimeoutError, EnumInfraErrorCode.TIMEOUT_ERROR),
            (InfraAuthenticationError, EnumInfraErrorCode.AUTHENTICATION_ERROR),
        ],
    )
    def test_default_codes(
        self, error_type: type[RuntimeHostError], code: EnumInfraErrorCode
    ) -> None:
        error = error_type("failed")
        assert error.error_code is code
        assert isinstance(error, RuntimeHostError)

    def test_unsupported_type_is_configuration_error(self) -> None:
        error = UnsupportedTypeError("bool")

        assert error.error_code is EnumInfraErrorCode.UNSUPPORTED_TYPE
        assert isinstance(error, ProtocolConfigurationError)
        assert error.context["kind"] == "bool"
