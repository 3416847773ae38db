# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""KV entry model.

ModelKVEntry is the client-side copy of one revisioned key-value pair. The
store owns the data; entries are fetched fresh on every call and never
cached.
"""

from __future__ import annotations

from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field


class ModelKVEntry(BaseModel):
    """One revisioned key-value pair observed in the store.

    Attributes:
        key: Full KV path
        value: Raw payload, ``None`` when the key does not exist
        index: Store response index (``X-Consul-Index``) the entry was read at
        found: Whether the key existed at ``index``
        flags: Opaque client flags stored alongside the value
        modify_index: Index of the last write to this key, if it exists
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )

    key: str = Field(description="Full KV path")
    value: bytes | None = Field(
        default=None,
        description="Raw payload, None when the key does not exist",
    )
    index: int = Field(ge=0, description="Store response index")
    found: bool = Field(default=True, description="Whether the key exists")
    flags: int = Field(default=0, description="Opaque client flags")
    modify_index: int | None = Field(
        default=None,
        description="Index of the last write to this key",
    )

    @classmethod
    def from_consul(
        cls,
        key: str,
        index: int | str | None,
        data: Mapping[str, object] | None,
    ) -> ModelKVEntry:
        """Build an entry from a python-consul ``kv.get`` response.

        python-consul returns the ``X-Consul-Index`` header verbatim, so
        ``index`` may arrive as a string.

        Args:
            key: Requested key, used when the key does not exist
            index: Response index as returned by python-consul
            data: Response body, ``None`` when the key does not exist

        Returns:
            The entry, with ``found=False`` and ``value=None`` for a missing key.
        """
        response_index = int(index) if index is not None else 0
        if data is None:
            return cls(key=key, value=None, index=response_index, found=False)

        raw_value = data.get("Value")
        if isinstance(raw_value, str):
            raw_value = raw_value.encode("utf-8")
        data_key = data.get("Key")
        flags = data.get("Flags")
        modify_index = data.get("ModifyIndex")
        return cls(
            key=data_key if isinstance(data_key, str) else key,
            value=raw_value if isinstance(raw_value, bytes) else b"",
            index=response_index,
            found=True,
            flags=flags if isinstance(flags, int) else 0,
            modify_index=modify_index if isinstance(modify_index, int) else None,
        )

    def text(self) -> str:
        """Return the payload decoded as UTF-8 (empty for a missing key)."""
        return (self.value or b"").decode("utf-8")


__all__: list[str] = ["ModelKVEntry"]
