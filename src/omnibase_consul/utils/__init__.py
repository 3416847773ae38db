# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""omnibase_consul utilities.

Exports:
    coerce_scalar: Raw payload to scalar coercion
    resolve_scalar_kind: Kind designator resolution
    parse_tag_options: ``consul`` field tag parser
    sanitize_error_message: Exception sanitization for logs
    sanitize_error_string: String sanitization for logs
    split_host_port: ``host:port`` service address parsing
"""

from omnibase_consul.utils.util_error_sanitization import (
    sanitize_error_message,
    sanitize_error_string,
)
from omnibase_consul.utils.util_tag_parser import (
    ALLOWED_TAG_OPTIONS,
    TAG_KEY,
    parse_tag_options,
)
from omnibase_consul.utils.util_service_address import split_host_port
from omnibase_consul.utils.util_type_coercion import (
    coerce_scalar,
    resolve_scalar_kind,
)

__all__: list[str] = [
    "ALLOWED_TAG_OPTIONS",
    "TAG_KEY",
    "coerce_scalar",
    "parse_tag_options",
    "resolve_scalar_kind",
    "sanitize_error_message",
    "sanitize_error_string",
    "split_host_port",
]
