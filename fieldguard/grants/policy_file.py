"""Grant source backed by a read-only YAML policy file.

Example file::

    users:
      "7":
        - {action: update, subject: User, conditions: {id: $id}}
    groups:
      Guest:
        permissions:
          - {action: read, subject: Production}
      Editors:
        members: [7]
        permissions:
          - {action: manage, subject: BlogPost}
          - {action: delete, subject: BlogPost, inverted: true, reason: Archive instead}
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

import yaml

from .inmemory import InMemoryGrantSource
from .models import GroupRecord, PermissionRecord

logger = logging.getLogger(__name__)


class YamlGrantSource(InMemoryGrantSource):
    """Load users and groups from a YAML policy file once at construction."""

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)
        with open(self.path) as f:
            data = yaml.safe_load(f) or {}

        users = {
            str(actor_id): [PermissionRecord(**p) for p in permissions or []]
            for actor_id, permissions in (data.get("users") or {}).items()
        }
        groups = [
            GroupRecord(
                name=name,
                members=[str(m) for m in (body or {}).get("members") or []],
                permissions=[
                    PermissionRecord(**p) for p in (body or {}).get("permissions") or []
                ],
            )
            for name, body in (data.get("groups") or {}).items()
        ]
        super().__init__(users=users, groups=groups)
        logger.debug(
            f"Loaded policy file {self.path}: {len(users)} users, {len(groups)} groups"
        )
