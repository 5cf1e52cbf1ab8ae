"""Deterministic node and subgraph identifiers."""

from __future__ import annotations

import re
from typing import Optional

from teams_callflow.models.callflow import VoiceApp

_UNSAFE = re.compile(r"[^A-Za-z0-9_]")

# Stage keywords used as id prefixes.
ENTRY = "voiceApp"
INCOMING = "incomingCall"


def safe_id(value: str) -> str:
    """Replace every character that is not ``[A-Za-z0-9_]`` with ``_``."""
    return _UNSAFE.sub("_", value)


def node_id(stage: str, identity: str, counter: Optional[int] = None) -> str:
    """Build ``<stage>_<identity>[_<counter>]``; the same inputs always give the same id."""
    base = f"{safe_id(stage)}_{safe_id(identity)}"
    if counter is None:
        return base
    return f"{base}_{counter}"


def entry_node_id(app: VoiceApp) -> str:
    return node_id(ENTRY, app.identity)


def incoming_node_id(app: VoiceApp) -> str:
    return node_id(INCOMING, app.identity)


__all__ = ["safe_id", "node_id", "entry_node_id", "incoming_node_id", "ENTRY", "INCOMING"]
