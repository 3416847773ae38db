# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Parsed field metadata options."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ModelTagOptions(BaseModel):
    """Recognized options of a ``consul`` field tag.

    Only ``name`` and ``default`` are recognized. An empty tag produces
    options with both fields unset.

    Attributes:
        name: Path segment override for the field
        default: Literal used when the key does not exist in the store
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )

    name: str | None = Field(default=None, description="Path segment override")
    default: str | None = Field(
        default=None,
        description="Fallback literal used when the key is absent",
    )

    def as_dict(self) -> dict[str, str]:
        """Return only the options that were set."""
        return self.model_dump(exclude_none=True)


__all__: list[str] = ["ModelTagOptions"]
