"""Shared graph state for one traversal.

The accumulator is owned by :class:`teams_callflow.traversal.TraversalDriver`. Flow
builders never write to it directly: they receive a :class:`GraphTransaction`, which is
committed only when the whole voice app was expanded.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Dict, Iterable, Iterator, List, Optional, Set

from teams_callflow.models.callflow import AssetExport, VoiceApp
from teams_callflow.models.graph import GraphFragment, Node

logger = logging.getLogger(__name__)


def _dedupe(values: List[str]) -> List[str]:
    seen: Set[str] = set()
    out: List[str] = []
    for value in values:
        if value not in seen:
            seen.add(value)
            out.append(value)
    return out


class GraphAccumulator:
    def __init__(self) -> None:
        self.fragments: List[GraphFragment] = []
        self.nodes: List[str] = []
        self.subgraphs: List[str] = []
        self.pending: List[str] = []
        self.visited: Set[str] = set()
        self.exports: List[AssetExport] = []
        self.skipped: Dict[str, str] = {}
        self.entry_points: List[VoiceApp] = []
        self._cursor = 0

    # ---- worklist -----------------------------------------------------------

    def enqueue(self, identity: str) -> bool:
        """Append ``identity`` to the worklist unless it is already there."""
        if identity in self.pending:
            return False
        self.pending.append(identity)
        logger.debug("Queued voice app %s", identity)
        return True

    def claim(self, identity: str) -> bool:
        """Mark ``identity`` visited; False when another expansion already claimed it."""
        if identity in self.visited:
            return False
        self.visited.add(identity)
        return True

    def next_unvisited(self) -> Optional[str]:
        while self._cursor < len(self.pending):
            identity = self.pending[self._cursor]
            self._cursor += 1
            if identity not in self.visited:
                return identity
        return None

    # ---- graph content ------------------------------------------------------

    def add_fragment(self, fragment: GraphFragment) -> None:
        self.fragments.append(fragment)
        if fragment.is_subgraph:
            self.subgraphs.append(fragment.subgraph_id)
        for item in fragment.walk():
            if isinstance(item, Node):
                self.nodes.append(item.id)
            elif isinstance(item, GraphFragment) and item.is_subgraph:
                self.subgraphs.append(item.subgraph_id)

    def add_export(self, export: AssetExport) -> None:
        self.exports.append(export)

    def add_entry_point(self, app: VoiceApp) -> None:
        if app not in self.entry_points:
            self.entry_points.append(app)
        self.enqueue(app.identity)

    def unique_nodes(self) -> List[str]:
        return _dedupe(self.nodes)

    def unique_subgraphs(self) -> List[str]:
        return _dedupe(self.subgraphs)

    def iter_nodes(self) -> Iterator[Node]:
        for fragment in self.fragments:
            yield from fragment.iter_nodes()

    def node_index(self) -> Dict[str, Node]:
        """First declaration of every node id, in emission order."""
        index: Dict[str, Node] = {}
        for node in self.iter_nodes():
            index.setdefault(node.id, node)
        return index

    def links(self) -> Dict[str, str]:
        """Asset links keyed by node id."""
        return {node_id: node.link for node_id, node in self.node_index().items() if node.link}

    def keep_links(self, written: Iterable[str]) -> int:
        """Drop asset links whose file was not written, so no diagram points at a missing file."""
        keep = set(written)
        cleared = sum(fragment.drop_links(keep) for fragment in self.fragments)
        if cleared:
            logger.info("Removed %d link(s) to assets that were not exported", cleared)
        return cleared

    # ---- transactions -------------------------------------------------------

    @contextmanager
    def transaction(self) -> Iterator["GraphTransaction"]:
        """Stage writes and apply them only if the block exits without an exception."""
        txn = GraphTransaction(self)
        yield txn
        txn.commit()


class GraphTransaction:
    """Write-side view of a :class:`GraphAccumulator` scoped to one flow builder call."""

    def __init__(self, accumulator: GraphAccumulator) -> None:
        self.accumulator = accumulator
        self.fragments: List[GraphFragment] = []
        self.pending: List[str] = []
        self.exports: List[AssetExport] = []
        self.committed = False

    def add_fragment(self, fragment: GraphFragment) -> None:
        self.fragments.append(fragment)

    def enqueue(self, identity: str) -> None:
        if identity not in self.pending:
            self.pending.append(identity)

    def add_export(self, export: AssetExport) -> None:
        self.exports.append(export)

    def commit(self) -> None:
        if self.committed:
            return
        for fragment in self.fragments:
            self.accumulator.add_fragment(fragment)
        for identity in self.pending:
            self.accumulator.enqueue(identity)
        for export in self.exports:
            self.accumulator.add_export(export)
        self.committed = True


__all__ = ["GraphAccumulator", "GraphTransaction"]
