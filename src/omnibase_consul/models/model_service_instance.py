# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Healthy service instance model."""

from __future__ import annotations

from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field


class ModelServiceInstance(BaseModel):
    """One passing service instance returned by a health query.

    Attributes:
        service_id: Agent-local service ID
        service_name: Logical service name
        address: Service address (falls back to the node address when empty)
        port: Service port
        tags: Service tags
        node: Name of the node hosting the instance
        node_address: Address of the node hosting the instance
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )

    service_id: str
    service_name: str
    address: str = ""
    port: int = 0
    tags: tuple[str, ...] = Field(default_factory=tuple)
    node: str = ""
    node_address: str = ""

    @classmethod
    def from_consul(cls, entry: Mapping[str, object]) -> ModelServiceInstance:
        """Build an instance from one ``health.service`` result item."""
        service = entry.get("Service")
        node = entry.get("Node")
        service_map: Mapping[str, object] = (
            service if isinstance(service, Mapping) else {}
        )
        node_map: Mapping[str, object] = node if isinstance(node, Mapping) else {}

        node_address = node_map.get("Address")
        node_address_str = node_address if isinstance(node_address, str) else ""
        address = service_map.get("Address")
        port = service_map.get("Port")
        tags = service_map.get("Tags")
        service_id = service_map.get("ID")
        service_name = service_map.get("Service")
        node_name = node_map.get("Node")

        return cls(
            service_id=service_id if isinstance(service_id, str) else "",
            service_name=service_name if isinstance(service_name, str) else "",
            address=address if isinstance(address, str) and address else node_address_str,
            port=port if isinstance(port, int) else 0,
            tags=tuple(str(t) for t in tags) if isinstance(tags, list) else (),
            node=node_name if isinstance(node_name, str) else "",
            node_address=node_address_str,
        )


__all__: list[str] = ["ModelServiceInstance"]
