from __future__ import annotations

import os
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, Field

from .constants import (
    DEFAULT_FILTER_INPUT_NAME,
    DEFAULT_GUEST_GROUP,
    DEFAULT_INPUT_NAME,
    DEFAULT_ORDER_INPUT_NAME,
    DEFAULT_PAGINATION_INPUT_NAME,
)


class RulesConfig(BaseModel):
    """Defaults applied to rule options left unset by a descriptor."""

    strict: Optional[bool] = None
    order_input_name: str = DEFAULT_ORDER_INPUT_NAME
    filter_input_name: str = DEFAULT_FILTER_INPUT_NAME
    pagination_input_name: str = DEFAULT_PAGINATION_INPUT_NAME
    input_name: str = DEFAULT_INPUT_NAME


class GrantsConfig(BaseModel):
    """Where stored permissions are read from."""

    backend: Literal["inmemory", "yaml"] = "inmemory"
    policy_path: Optional[str] = None
    guest_group: str = DEFAULT_GUEST_GROUP


class FieldguardConfig(BaseModel):
    """Top-level configuration model."""

    rules: RulesConfig = Field(default_factory=RulesConfig)
    grants: GrantsConfig = Field(default_factory=GrantsConfig)


def load_config(path: Optional[str] = None) -> FieldguardConfig:
    """Load configuration from YAML file.

    Args:
        path: Optional path to config file. Falls back to FIELDGUARD_CONFIG env
            variable or 'fieldguard.yaml' in the current directory.
    """

    config_path = path or os.getenv("FIELDGUARD_CONFIG", "fieldguard.yaml")
    if os.path.exists(config_path):
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
        config = FieldguardConfig(**data)
    else:
        config = FieldguardConfig()

    env_policy = os.getenv("FIELDGUARD_POLICY")
    if env_policy:
        config.grants.policy_path = env_policy
        config.grants.backend = "yaml"
    return config
