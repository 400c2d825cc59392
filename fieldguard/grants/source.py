"""Read-only source of stored permissions."""

from __future__ import annotations

from typing import List, Protocol

from .models import ActorId, PermissionRecord


class GrantSource(Protocol):
    """Protocol for backends that hold user and group permissions."""

    async def get_actor_permissions(self, actor_id: ActorId) -> List[PermissionRecord]:
        """Return permissions assigned directly to the actor."""

    async def get_member_group_permissions(self, actor_id: ActorId) -> List[PermissionRecord]:
        """Return permissions of every group the actor belongs to."""

    async def get_group_permissions(self, group: str) -> List[PermissionRecord]:
        """Return permissions of a single named group."""
