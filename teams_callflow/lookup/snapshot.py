"""Lookup adapter over a JSON tenant snapshot.

The snapshot is a single JSON object::

    {
      "AutoAttendants": [... Get-CsAutoAttendant | ConvertTo-Json -Depth 10 ...],
      "CallQueues":     [... Get-CsCallQueue ...],
      "Users":  [{"Id": "...", "DisplayName": "...", "PhoneNumber": "+1..."}],
      "Groups": [{"Id": "...", "DisplayName": "..."}],
      "Channels": [{"TeamId": "...", "Id": "...", "DisplayName": "..."}]
    }

Users, groups and channels can instead come from a live directory (see
:mod:`teams_callflow.lookup.graph_directory`).
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional, Protocol, Tuple

from pydantic import ValidationError

from teams_callflow.errors import NotFoundError, SnapshotError
from teams_callflow.lookup.base import EntityLookup
from teams_callflow.models.tenant import (
    AutoAttendant,
    CallQueue,
    DirectoryGroup,
    DirectoryUser,
    TeamChannel,
    TenantSnapshot,
)

logger = logging.getLogger(__name__)


class Directory(Protocol):
    def get_user(self, user_id: str) -> DirectoryUser: ...

    def get_group(self, group_id: str) -> DirectoryGroup: ...

    def get_channel(self, team_id: str, channel_id: str) -> TeamChannel: ...


def load_snapshot(path: str) -> TenantSnapshot:
    try:
        with open(path, "r", encoding="utf-8-sig") as f:
            payload = json.load(f)
    except OSError as exc:
        raise SnapshotError(path, f"Could not read snapshot: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise SnapshotError(path, f"Snapshot is not valid JSON: {exc}") from exc
    return parse_snapshot(payload, source=path)


def parse_snapshot(payload: Any, source: str = "<memory>") -> TenantSnapshot:
    try:
        return TenantSnapshot.model_validate(payload)
    except ValidationError as exc:
        raise SnapshotError(source, f"Snapshot does not match the expected shape:\n{exc}") from exc


class SnapshotLookup(EntityLookup):
    def __init__(self, snapshot: TenantSnapshot, directory: Optional[Directory] = None) -> None:
        self.snapshot = snapshot
        self.directory = directory
        self._auto_attendants: Dict[str, AutoAttendant] = {aa.identity: aa for aa in snapshot.auto_attendants}
        self._call_queues: Dict[str, CallQueue] = {cq.identity: cq for cq in snapshot.call_queues}
        self._users: Dict[str, DirectoryUser] = {u.id: u for u in snapshot.users}
        self._groups: Dict[str, DirectoryGroup] = {g.id: g for g in snapshot.groups}
        self._channels: Dict[Tuple[str, str], TeamChannel] = {(c.team_id, c.id): c for c in snapshot.channels}
        logger.debug(
            "Snapshot loaded: %d auto attendants, %d call queues, %d users, %d groups",
            len(self._auto_attendants), len(self._call_queues), len(self._users), len(self._groups),
        )

    @classmethod
    def from_file(cls, path: str, directory: Optional[Directory] = None) -> "SnapshotLookup":
        return cls(load_snapshot(path), directory)

    @classmethod
    def from_dict(cls, payload: Dict[str, Any], directory: Optional[Directory] = None) -> "SnapshotLookup":
        return cls(parse_snapshot(payload), directory)

    def get_auto_attendant(self, reference: str) -> AutoAttendant:
        if reference in self._auto_attendants:
            return self._auto_attendants[reference]
        for aa in self._auto_attendants.values():
            if aa.name == reference:
                return aa
        raise NotFoundError("Auto attendant", reference)

    def get_call_queue(self, reference: str) -> CallQueue:
        if reference in self._call_queues:
            return self._call_queues[reference]
        for cq in self._call_queues.values():
            if cq.name == reference:
                return cq
        raise NotFoundError("Call queue", reference)

    def get_user(self, user_id: str) -> DirectoryUser:
        if user_id in self._users:
            return self._users[user_id]
        if self.directory is not None:
            user = self.directory.get_user(user_id)
            self._users[user_id] = user
            return user
        raise NotFoundError("User", user_id)

    def get_group(self, group_id: str) -> DirectoryGroup:
        if group_id in self._groups:
            return self._groups[group_id]
        if self.directory is not None:
            group = self.directory.get_group(group_id)
            self._groups[group_id] = group
            return group
        raise NotFoundError("Group", group_id)

    def get_channel(self, team_id: str, channel_id: str) -> TeamChannel:
        key = (team_id, channel_id)
        if key in self._channels:
            return self._channels[key]
        if self.directory is not None:
            channel = self.directory.get_channel(team_id, channel_id)
            self._channels[key] = channel
            return channel
        raise NotFoundError("Channel", channel_id)

    def list_auto_attendants(self) -> List[AutoAttendant]:
        return list(self._auto_attendants.values())

    def list_call_queues(self) -> List[CallQueue]:
        return list(self._call_queues.values())


__all__ = ["SnapshotLookup", "Directory", "load_snapshot", "parse_snapshot"]
