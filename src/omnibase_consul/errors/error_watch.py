# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Watch stream closure error."""

from typing import Optional

from omnibase_consul.enums import EnumInfraErrorCode
from omnibase_consul.errors.infra_errors import RuntimeHostError
from omnibase_consul.errors.model_infra_error_context import ModelInfraErrorContext


class WatchClosedError(RuntimeHostError):
    """Raised by ``WatchStream.receive()`` once the stream has closed.

    ``cause`` holds the store error that terminated the watch loop, or
    ``None`` when the watch was stopped explicitly. A closed stream never
    means "key deleted"; deletions are delivered as entries with
    ``found=False``.
    """

    def __init__(
        self,
        key: str,
        cause: Optional[BaseException] = None,
        context: Optional[ModelInfraErrorContext] = None,
        **extra_context: object,
    ) -> None:
        reason = "stopped" if cause is None else f"failed: {type(cause).__name__}"
        super().__init__(
            message=f'watch on "{key}" closed ({reason})',
            error_code=EnumInfraErrorCode.STREAM_CLOSED,
            context=context,
            consul_key=key,
            **extra_context,
        )
        self.key = key
        self.cause = cause


__all__: list[str] = ["WatchClosedError"]
