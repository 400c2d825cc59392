"""Build request-scoped ability sets from stored permissions."""

from __future__ import annotations

import logging
from typing import List, Optional

from ..ability.engine import AbilitySet
from ..ability.grant import Grant
from ..constants import DEFAULT_GUEST_GROUP
from .models import ActorId, PermissionRecord
from .source import GrantSource

logger = logging.getLogger(__name__)


class AbilityFactory:
    """Compiles an actor's stored permissions into an :class:`AbilitySet`.

    Logged-in actors receive their own permissions followed by those of
    every group they belong to, with condition variables substituted.
    Anonymous callers receive the guest group's permissions.
    """

    def __init__(self, source: GrantSource, guest_group: str = DEFAULT_GUEST_GROUP) -> None:
        self._source = source
        self._guest_group = guest_group

    async def get_permissions(self, actor_id: Optional[ActorId] = None) -> List[PermissionRecord]:
        """Return the raw permission records effective for ``actor_id``."""
        if actor_id is None:
            return await self._source.get_group_permissions(self._guest_group)
        own = await self._source.get_actor_permissions(actor_id)
        inherited = await self._source.get_member_group_permissions(actor_id)
        return [*own, *inherited]

    async def create_for(self, actor_id: Optional[ActorId] = None) -> AbilitySet:
        """Return the compiled ability set for ``actor_id`` (guest when ``None``)."""
        records = await self.get_permissions(actor_id)
        grants: List[Grant] = [record.to_grant(actor_id) for record in records]
        logger.debug(f"Compiled {len(grants)} grants for actor {actor_id!r}")
        return AbilitySet(grants)
