# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""omnibase_consul models.

Exports:
    ModelConsulClientConfig: Client connection and watch configuration
    ModelFieldSpec: Per-field descriptor used by the config binder
    ModelKVEntry: One revisioned key-value pair
    ModelServiceInstance: One passing service instance
    ModelTagOptions: Parsed ``consul`` field tag options
"""

from omnibase_consul.models.model_consul_client_config import ModelConsulClientConfig
from omnibase_consul.models.model_field_spec import ModelFieldSpec
from omnibase_consul.models.model_kv_entry import ModelKVEntry
from omnibase_consul.models.model_service_instance import ModelServiceInstance
from omnibase_consul.models.model_tag_options import ModelTagOptions

__all__: list[str] = [
    "ModelConsulClientConfig",
    "ModelFieldSpec",
    "ModelKVEntry",
    "ModelServiceInstance",
    "ModelTagOptions",
]
