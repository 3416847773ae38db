# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Parser for ``consul`` field tags.

A tag is a flat list of ``key:value`` pairs joined by ``:``, for example
``name:max_conns:default:100``. Only ``name`` and ``default`` are
recognized; other keys are accepted and dropped.
"""

from __future__ import annotations

from typing import Final

from omnibase_consul.errors import InvalidTagSyntaxError
from omnibase_consul.models import ModelTagOptions

TAG_KEY: Final[str] = "consul"
TAG_SEPARATOR: Final[str] = ":"
ALLOWED_TAG_OPTIONS: Final[frozenset[str]] = frozenset({"name", "default"})


def parse_tag_options(tag: str) -> ModelTagOptions:
    """Parse a tag string into recognized options.

    Args:
        tag: Raw tag string; empty means no options.

    Returns:
        Parsed options.

    Raises:
        InvalidTagSyntaxError: If the tag has an odd number of tokens.

    Example:
        >>> parse_tag_options("name:foo:default:bar").as_dict()
        {'name': 'foo', 'default': 'bar'}
        >>> parse_tag_options("unknown:x").as_dict()
        {}
    """
    if not tag:
        return ModelTagOptions()

    parts = tag.split(TAG_SEPARATOR)
    if len(parts) % 2 != 0:
        raise InvalidTagSyntaxError(tag)

    options: dict[str, str] = {}
    for name, value in zip(parts[0::2], parts[1::2]):
        if name not in ALLOWED_TAG_OPTIONS:
            continue
        options[name] = value

    return ModelTagOptions(**options)


__all__: list[str] = [
    "ALLOWED_TAG_OPTIONS",
    "TAG_KEY",
    "TAG_SEPARATOR",
    "parse_tag_options",
]
