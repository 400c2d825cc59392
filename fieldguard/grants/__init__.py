"""Read-only sources of stored permissions."""

from __future__ import annotations

import os
from typing import Optional

from ..config import FieldguardConfig, load_config
from .factory import AbilityFactory
from .inmemory import InMemoryGrantSource
from .models import ActorId, GroupRecord, PermissionRecord
from .policy_file import YamlGrantSource
from .source import GrantSource


def get_grant_source(
    backend: Optional[str] = None,
    config: Optional[FieldguardConfig] = None,
    policy_path: Optional[str] = None,
) -> GrantSource:
    """Factory function to obtain the configured grant source.

    An explicit ``policy_path`` or the ``FIELDGUARD_POLICY`` environment
    variable selects the YAML backend. Otherwise the backend comes from
    configuration, defaulting to an empty in-memory source.
    """

    config = config or load_config()
    policy_path = (
        policy_path or os.getenv("FIELDGUARD_POLICY") or config.grants.policy_path
    )
    backend = (backend or ("yaml" if policy_path else config.grants.backend)).lower()

    if backend == "inmemory":
        return InMemoryGrantSource()
    elif backend == "yaml":
        if not policy_path:
            raise ValueError("The yaml grant backend requires a policy path")
        return YamlGrantSource(policy_path)
    else:
        raise ValueError(f"Unsupported grant backend: {backend}")


__all__ = [
    "AbilityFactory",
    "ActorId",
    "GrantSource",
    "GroupRecord",
    "InMemoryGrantSource",
    "PermissionRecord",
    "YamlGrantSource",
    "get_grant_source",
]
