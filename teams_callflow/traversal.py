"""Worklist traversal over voice apps.

Entry points are queued first; every flow builder call may queue further voice apps it
reaches through transfers. The loop runs until the worklist has no unvisited identity
left, so each voice app is expanded exactly once no matter how many places refer to it.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from teams_callflow.builders.auto_attendant import AutoAttendantFlowBuilder
from teams_callflow.builders.call_queue import CallQueueFlowBuilder
from teams_callflow.core.config_loader import RenderOptions
from teams_callflow.errors import DirectoryError, NotFoundError
from teams_callflow.graph.accumulator import GraphAccumulator, GraphTransaction
from teams_callflow.graph.ids import entry_node_id, incoming_node_id
from teams_callflow.lookup.base import EntityLookup, VoiceAppRecord
from teams_callflow.models.callflow import VoiceApp
from teams_callflow.models.graph import GraphFragment, NodeShape
from teams_callflow.models.tenant import AutoAttendant, CallQueue

logger = logging.getLogger(__name__)


def incoming_label(app: VoiceApp) -> str:
    return "Incoming Call At\n" + ", ".join(app.phone_numbers)


class TraversalDriver:
    def __init__(self, lookup: EntityLookup, options: Optional[RenderOptions] = None) -> None:
        self.lookup = lookup
        self.options = options or RenderOptions()
        self.auto_attendants = AutoAttendantFlowBuilder(lookup, self.options)
        self.call_queues = CallQueueFlowBuilder(lookup, self.options)

    def run(self, references: Iterable[str]) -> GraphAccumulator:
        """Expand ``references`` and everything reachable from them."""
        acc = GraphAccumulator()
        for reference in references:
            try:
                record = self.lookup.get_voice_app(reference)
            except (NotFoundError, DirectoryError) as exc:
                logger.warning("Skipping entry point %s: %s", reference, exc)
                acc.skipped[reference] = str(exc)
                continue
            acc.add_entry_point(record.as_voice_app())

        while True:
            identity = acc.next_unvisited()
            if identity is None:
                break
            self.expand(acc, identity)

        logger.info(
            "Traversal finished: %d voice app(s) expanded, %d skipped",
            len(acc.visited) - len(acc.skipped.keys() & acc.visited),
            len(acc.skipped),
        )
        return acc

    def expand(self, acc: GraphAccumulator, identity: str) -> bool:
        """Build one voice app into ``acc``; False when it was already claimed or failed."""
        if not acc.claim(identity):
            return False
        try:
            record = self.lookup.get_voice_app(identity)
            with acc.transaction() as txn:
                self._add_incoming(txn, record)
                self.build(record, txn)
        except (NotFoundError, DirectoryError) as exc:
            logger.warning("Skipping voice app %s: %s", identity, exc)
            acc.skipped[identity] = str(exc)
            return False
        return True

    def build(self, record: VoiceAppRecord, txn: GraphTransaction) -> None:
        if isinstance(record, AutoAttendant):
            self.auto_attendants.build(record, txn)
        elif isinstance(record, CallQueue):
            self.call_queues.build(record, txn)
        else:
            raise TypeError(f"Unknown voice app record: {type(record).__name__}")

    def _add_incoming(self, txn: GraphTransaction, record: VoiceAppRecord) -> None:
        app = record.as_voice_app()
        if app not in txn.accumulator.entry_points or not app.phone_numbers:
            return
        fragment = GraphFragment("incoming")
        start = fragment.node(incoming_node_id(app), incoming_label(app), NodeShape.START)
        fragment.edge(start.id, entry_node_id(app))
        txn.add_fragment(fragment)


def build_call_flow(
    lookup: EntityLookup,
    references: Iterable[str],
    options: Optional[RenderOptions] = None,
) -> GraphAccumulator:
    """Convenience wrapper: run a :class:`TraversalDriver` over ``references``."""
    return TraversalDriver(lookup, options).run(references)


def all_voice_app_identities(lookup: EntityLookup) -> List[str]:
    identities = [aa.identity for aa in lookup.list_auto_attendants()]
    identities.extend(cq.identity for cq in lookup.list_call_queues())
    return identities


__all__ = ["TraversalDriver", "build_call_flow", "all_voice_app_identities", "incoming_label"]
