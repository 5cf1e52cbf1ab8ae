"""Entity lookup adapters."""

from .base import EntityLookup, VoiceAppRecord
from .graph_directory import GraphDirectory
from .snapshot import SnapshotLookup, load_snapshot, parse_snapshot

__all__ = ["EntityLookup", "VoiceAppRecord", "GraphDirectory", "SnapshotLookup", "load_snapshot", "parse_snapshot"]
