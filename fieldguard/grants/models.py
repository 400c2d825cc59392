"""Data models for stored permissions."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field

from ..ability.conditions import substitute_variables
from ..ability.grant import Action, Grant
from ..constants import ALL_SUBJECTS

ActorId = Union[int, str]


class PermissionRecord(BaseModel):
    """A permission as stored for a user or a group.

    ``conditions`` is kept in its raw mapping form so condition variables
    can be substituted for each actor before compiling.
    """

    action: Action
    subject: str = ALL_SUBJECTS
    fields: Optional[List[str]] = None
    conditions: Optional[Dict[str, Any]] = None
    inverted: bool = False
    reason: Optional[str] = None

    def to_grant(self, actor_id: Optional[ActorId] = None) -> Grant:
        """Compile into a :class:`Grant` for the given actor."""
        conditions = None
        if self.conditions:
            conditions = substitute_variables(self.conditions, actor_id)
        return Grant(
            action=self.action,
            subject=self.subject,
            fields=self.fields,
            conditions=conditions,
            inverted=self.inverted,
            reason=self.reason,
        )


class GroupRecord(BaseModel):
    """A named group, its members and its permissions."""

    name: str
    members: List[str] = Field(default_factory=list)
    permissions: List[PermissionRecord] = Field(default_factory=list)

    def has_member(self, actor_id: ActorId) -> bool:
        return str(actor_id) in self.members
