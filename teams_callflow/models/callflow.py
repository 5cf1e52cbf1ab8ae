"""Typed call-flow entities shared by the resolver, formatter and flow builders."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, Union


class VoiceAppKind(str, Enum):
    AUTO_ATTENDANT = "AutoAttendant"
    CALL_QUEUE = "CallQueue"

    @property
    def display_name(self) -> str:
        return "Auto Attendant" if self is VoiceAppKind.AUTO_ATTENDANT else "Call Queue"


@dataclass(frozen=True)
class VoiceApp:
    identity: str
    name: str
    kind: VoiceAppKind
    phone_numbers: Tuple[str, ...] = ()


# ---------- Greetings ---------------------------------------------------------


@dataclass(frozen=True)
class NoGreeting:
    pass


@dataclass(frozen=True)
class AudioFileGreeting:
    filename: str
    download_uri: Optional[str] = None


@dataclass(frozen=True)
class TextToSpeechGreeting:
    text: str


Greeting = Union[NoGreeting, AudioFileGreeting, TextToSpeechGreeting]


@dataclass(frozen=True)
class AssetExport:
    """Deferred write of a greeting asset, keyed by (app identity, stage, counter)."""

    app_identity: str
    stage: str
    counter: Optional[int]
    kind: str
    content: str
    filename: Optional[str] = None

    @property
    def key(self) -> str:
        parts = [self.app_identity, self.stage]
        if self.counter is not None:
            parts.append(str(self.counter))
        return "_".join(parts)


# ---------- Call targets ------------------------------------------------------


@dataclass(frozen=True)
class UserTarget:
    id: str
    name: str


@dataclass(frozen=True)
class UserVoicemailTarget:
    id: str
    name: str


@dataclass(frozen=True)
class ExternalPstnTarget:
    number: str


@dataclass(frozen=True)
class SharedVoicemailTarget:
    id: str
    name: str
    greeting: Greeting = field(default_factory=NoGreeting)
    suppress_system_greeting: bool = False


@dataclass(frozen=True)
class NestedVoiceAppTarget:
    app: VoiceApp


@dataclass(frozen=True)
class DisconnectTarget:
    pass


@dataclass(frozen=True)
class UnresolvedTarget:
    reference: str
    reason: str = ""


@dataclass(frozen=True)
class OperatorTarget:
    inner: "CallTarget"
    is_operator: bool = True


CallTarget = Union[
    UserTarget,
    UserVoicemailTarget,
    ExternalPstnTarget,
    SharedVoicemailTarget,
    NestedVoiceAppTarget,
    OperatorTarget,
    DisconnectTarget,
    UnresolvedTarget,
]


__all__ = [
    "VoiceAppKind",
    "VoiceApp",
    "NoGreeting",
    "AudioFileGreeting",
    "TextToSpeechGreeting",
    "Greeting",
    "AssetExport",
    "UserTarget",
    "UserVoicemailTarget",
    "ExternalPstnTarget",
    "SharedVoicemailTarget",
    "NestedVoiceAppTarget",
    "DisconnectTarget",
    "UnresolvedTarget",
    "OperatorTarget",
    "CallTarget",
]
