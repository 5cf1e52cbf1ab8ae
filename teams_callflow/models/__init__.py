"""Typed models for tenant records, call-flow entities and the diagram IR."""

from .callflow import (
    AssetExport,
    AudioFileGreeting,
    CallTarget,
    DisconnectTarget,
    ExternalPstnTarget,
    Greeting,
    NestedVoiceAppTarget,
    NoGreeting,
    OperatorTarget,
    SharedVoicemailTarget,
    TextToSpeechGreeting,
    UnresolvedTarget,
    UserTarget,
    UserVoicemailTarget,
    VoiceApp,
    VoiceAppKind,
)
from .graph import Edge, EdgeStyle, GraphFragment, Node, NodeShape

__all__ = [
    "AssetExport",
    "AudioFileGreeting",
    "CallTarget",
    "DisconnectTarget",
    "ExternalPstnTarget",
    "Greeting",
    "NestedVoiceAppTarget",
    "NoGreeting",
    "OperatorTarget",
    "SharedVoicemailTarget",
    "TextToSpeechGreeting",
    "UnresolvedTarget",
    "UserTarget",
    "UserVoicemailTarget",
    "VoiceApp",
    "VoiceAppKind",
    "Edge",
    "EdgeStyle",
    "GraphFragment",
    "Node",
    "NodeShape",
]
