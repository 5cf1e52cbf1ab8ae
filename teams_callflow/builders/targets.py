"""Call target resolution.

Turns raw ``CallTarget`` references from tenant configuration into typed targets and
synthesises the diagram node for a target at a given position in a flow.
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol

from teams_callflow.errors import NotFoundError, ResolutionError
from teams_callflow.graph.ids import entry_node_id, node_id
from teams_callflow.lookup.base import EntityLookup, VoiceAppRecord
from teams_callflow.models.callflow import (
    CallTarget,
    DisconnectTarget,
    ExternalPstnTarget,
    Greeting,
    NestedVoiceAppTarget,
    NoGreeting,
    OperatorTarget,
    SharedVoicemailTarget,
    UnresolvedTarget,
    UserTarget,
    UserVoicemailTarget,
    VoiceApp,
)
from teams_callflow.models.graph import Node, NodeShape
from teams_callflow.models.tenant import AutoAttendant, RawCallTarget

logger = logging.getLogger(__name__)

PSTN_PREFIX = "tel:"


class Worklist(Protocol):
    def enqueue(self, identity: str) -> object: ...


def normalize_pstn(number: str) -> str:
    """Strip a ``tel:`` prefix and make sure the number starts with ``+``."""
    value = (number or "").strip()
    if value.lower().startswith(PSTN_PREFIX):
        value = value[len(PSTN_PREFIX):]
    value = value.replace(" ", "")
    if value and not value.startswith("+"):
        value = "+" + value
    return value


def entry_node(app: VoiceApp) -> Node:
    """The node every reference to ``app`` points at; its own flow starts here."""
    return Node(entry_node_id(app), f"{app.kind.display_name}\n{app.name}", NodeShape.SUBROUTINE, shared=True)


def target_label(target: CallTarget) -> str:
    if isinstance(target, UserTarget):
        return f"User\n{target.name}"
    if isinstance(target, UserVoicemailTarget):
        return f"Voicemail\n{target.name}"
    if isinstance(target, ExternalPstnTarget):
        return f"External Number\n{target.number}"
    if isinstance(target, SharedVoicemailTarget):
        return f"Shared Voicemail\n{target.name}"
    if isinstance(target, NestedVoiceAppTarget):
        return f"{target.app.kind.display_name}\n{target.app.name}"
    if isinstance(target, OperatorTarget):
        return f"Operator\n{target_label(target.inner)}"
    if isinstance(target, DisconnectTarget):
        return "Disconnect Call"
    if isinstance(target, UnresolvedTarget):
        return f"Unresolved Target\n{target.reference}"
    raise TypeError(f"Unknown call target: {type(target).__name__}")


class TargetResolver:
    def __init__(self, lookup: EntityLookup, worklist: Worklist) -> None:
        self.lookup = lookup
        self.worklist = worklist

    # ---- resolution ---------------------------------------------------------

    def resolve(self, raw: RawCallTarget) -> CallTarget:
        kind = raw.type
        if kind == "User":
            user = self.lookup.get_user(raw.id)
            return UserTarget(user.id, user.display_name)
        if kind == "ExternalPstn":
            return ExternalPstnTarget(normalize_pstn(raw.id))
        if kind == "SharedVoicemail":
            group = self.lookup.get_group(raw.id)
            return SharedVoicemailTarget(
                group.id,
                group.display_name,
                NoGreeting(),
                raw.enable_shared_voicemail_system_prompt_suppression,
            )
        if kind == "ApplicationEndpoint":
            return self._nested(self._application_endpoint_owner(raw.id))
        if kind == "ConfigurationEndpoint":
            try:
                record = self.lookup.get_voice_app(raw.id)
            except NotFoundError as exc:
                raise ResolutionError(raw.id, kind, "No auto attendant or call queue has this identity") from exc
            return self._nested(record)
        raise ResolutionError(raw.id, kind, "Unsupported call target type")

    def resolve_operator(self, aa: AutoAttendant) -> OperatorTarget:
        if aa.operator is None:
            raise ResolutionError(aa.identity, "Operator", f"Auto attendant '{aa.name}' has no operator configured")
        return OperatorTarget(self.resolve(aa.operator))

    def resolve_queue_action(
        self,
        action: str,
        raw: Optional[RawCallTarget],
        greeting: Greeting,
        suppress_system_greeting: bool,
    ) -> CallTarget:
        """Resolve a call-queue overflow or timeout action."""
        if action in ("Disconnect", "DisconnectWithBusy"):
            return DisconnectTarget()
        if raw is None:
            raise ResolutionError("", action, f"Call queue action '{action}' has no target")
        if action == "Forward":
            return self.resolve(raw)
        if action == "Voicemail":
            user = self.lookup.get_user(raw.id)
            return UserVoicemailTarget(user.id, user.display_name)
        if action == "SharedVoicemail":
            group = self.lookup.get_group(raw.id)
            return SharedVoicemailTarget(group.id, group.display_name, greeting, suppress_system_greeting)
        raise ResolutionError(raw.id, action, "Unsupported call queue action")

    def _application_endpoint_owner(self, instance_id: str) -> VoiceAppRecord:
        try:
            return self.lookup.find_owner_of_application_instance(instance_id)
        except NotFoundError as exc:
            raise ResolutionError(
                instance_id, "ApplicationEndpoint", "No auto attendant or call queue owns this resource account"
            ) from exc

    def _nested(self, record: VoiceAppRecord) -> NestedVoiceAppTarget:
        app = record.as_voice_app()
        self.worklist.enqueue(app.identity)
        logger.debug("Nested %s '%s' reached", app.kind.display_name, app.name)
        return NestedVoiceAppTarget(app)

    # ---- nodes --------------------------------------------------------------

    def node_for(self, target: CallTarget, stage: str, identity: str, counter: Optional[int] = None) -> Node:
        """Node for ``target`` at (stage, identity, counter). Nested apps share their entry node."""
        if isinstance(target, NestedVoiceAppTarget):
            return entry_node(target.app)
        if isinstance(target, OperatorTarget):
            if isinstance(target.inner, NestedVoiceAppTarget):
                return entry_node(target.inner.app)
            inner = self.node_for(target.inner, stage + "Operator", identity, counter)
            return Node(inner.id, target_label(target), inner.shape)
        if isinstance(target, DisconnectTarget):
            return Node(node_id(stage + "Disconnect", identity, counter), target_label(target), NodeShape.TERMINAL)
        if isinstance(target, UnresolvedTarget):
            return Node(node_id(stage + "Unresolved", identity, counter), target_label(target), NodeShape.INFO)
        if isinstance(target, (UserTarget, UserVoicemailTarget, ExternalPstnTarget, SharedVoicemailTarget)):
            return Node(node_id(stage + "Target", identity, counter), target_label(target), NodeShape.TERMINAL)
        raise TypeError(f"Unknown call target: {type(target).__name__}")


__all__ = ["TargetResolver", "normalize_pstn", "entry_node", "target_label", "PSTN_PREFIX"]
