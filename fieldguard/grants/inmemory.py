"""In-memory grant source."""

from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Optional

from .models import ActorId, GroupRecord, PermissionRecord


class InMemoryGrantSource:
    """Hold permissions in local memory.

    Useful for tests or when permissions are assembled by the caller.
    Groups are consulted in insertion order.
    """

    def __init__(
        self,
        users: Optional[Mapping[ActorId, Iterable[PermissionRecord]]] = None,
        groups: Optional[Iterable[GroupRecord]] = None,
    ) -> None:
        self._users: Dict[str, List[PermissionRecord]] = {
            str(actor_id): list(records) for actor_id, records in (users or {}).items()
        }
        self._groups: Dict[str, GroupRecord] = {g.name: g for g in groups or ()}

    # ------------------------------------------------------------------
    def add_user_permissions(
        self, actor_id: ActorId, records: Iterable[PermissionRecord]
    ) -> None:
        self._users.setdefault(str(actor_id), []).extend(records)

    def add_group(self, group: GroupRecord) -> None:
        self._groups[group.name] = group

    async def get_actor_permissions(self, actor_id: ActorId) -> List[PermissionRecord]:
        return list(self._users.get(str(actor_id), []))

    async def get_member_group_permissions(self, actor_id: ActorId) -> List[PermissionRecord]:
        records: List[PermissionRecord] = []
        for group in self._groups.values():
            if group.has_member(actor_id):
                records.extend(group.permissions)
        return records

    async def get_group_permissions(self, group: str) -> List[PermissionRecord]:
        record = self._groups.get(group)
        return list(record.permissions) if record else []
