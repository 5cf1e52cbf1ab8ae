"""Read-only lookup interface over the tenant's voice apps and directory objects."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Union

from teams_callflow.errors import NotFoundError
from teams_callflow.models.tenant import AutoAttendant, CallQueue, DirectoryGroup, DirectoryUser, TeamChannel

VoiceAppRecord = Union[AutoAttendant, CallQueue]


class EntityLookup(ABC):
    """Voice app and directory queries used by the call-flow builders.

    Every ``get_*`` method raises :class:`~teams_callflow.errors.NotFoundError` when the
    object does not exist. ``get_auto_attendant`` and ``get_call_queue`` accept either
    an identity or a display name.
    """

    @abstractmethod
    def get_auto_attendant(self, reference: str) -> AutoAttendant: ...

    @abstractmethod
    def get_call_queue(self, reference: str) -> CallQueue: ...

    @abstractmethod
    def get_user(self, user_id: str) -> DirectoryUser: ...

    @abstractmethod
    def get_group(self, group_id: str) -> DirectoryGroup: ...

    @abstractmethod
    def get_channel(self, team_id: str, channel_id: str) -> TeamChannel: ...

    @abstractmethod
    def list_auto_attendants(self) -> List[AutoAttendant]: ...

    @abstractmethod
    def list_call_queues(self) -> List[CallQueue]: ...

    def get_voice_app(self, reference: str) -> VoiceAppRecord:
        """Return the auto attendant or call queue known by ``reference``."""
        try:
            return self.get_auto_attendant(reference)
        except NotFoundError:
            pass
        try:
            return self.get_call_queue(reference)
        except NotFoundError:
            raise NotFoundError("Voice app", reference) from None

    def find_owner_of_application_instance(self, instance_id: str) -> VoiceAppRecord:
        """Find the auto attendant or call queue that owns a resource account."""
        for aa in self.list_auto_attendants():
            if instance_id in aa.application_instances:
                return aa
        for cq in self.list_call_queues():
            if instance_id in cq.application_instances:
                return cq
        raise NotFoundError("Application instance", instance_id)


__all__ = ["EntityLookup", "VoiceAppRecord"]
