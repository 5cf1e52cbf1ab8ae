"""Pieces shared by the auto attendant and call queue flow builders."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Callable, Optional, Protocol

from teams_callflow.builders.greetings import GreetingFormatter, GreetingOptions, is_configured
from teams_callflow.builders.targets import TargetResolver
from teams_callflow.core.config_loader import RenderOptions
from teams_callflow.errors import ResolutionError
from teams_callflow.graph.ids import node_id
from teams_callflow.lookup.base import EntityLookup
from teams_callflow.models.callflow import AssetExport, CallTarget, Greeting, SharedVoicemailTarget, UnresolvedTarget
from teams_callflow.models.graph import GraphFragment, Node, NodeShape

logger = logging.getLogger(__name__)

SYSTEM_MESSAGE_LABEL = "Greeting\nMS System Message"


class GraphWriter(Protocol):
    def add_fragment(self, fragment: GraphFragment) -> None: ...

    def enqueue(self, identity: str) -> object: ...

    def add_export(self, export: AssetExport) -> None: ...


@dataclass
class FlowContext:
    """Everything one flow builder call needs, passed explicitly."""

    lookup: EntityLookup
    options: RenderOptions
    graph: GraphWriter
    resolver: TargetResolver
    formatter: GreetingFormatter

    @classmethod
    def create(cls, lookup: EntityLookup, options: RenderOptions, graph: GraphWriter) -> "FlowContext":
        return cls(
            lookup=lookup,
            options=options,
            graph=graph,
            resolver=TargetResolver(lookup, graph),
            formatter=GreetingFormatter(GreetingOptions.from_render_options(options), options.assets_dir),
        )


def add_greeting_node(
    ctx: FlowContext,
    fragment: GraphFragment,
    greeting_id: str,
    title: str,
    greeting: Greeting,
    app_identity: str,
    stage: str,
    counter: Optional[int] = None,
) -> Optional[Node]:
    """Emit a greeting node, or nothing when no prompt is configured."""
    if not is_configured(greeting):
        return None
    label, export = ctx.formatter.format(greeting, app_identity, stage, counter)
    link = None
    if export is not None:
        ctx.graph.add_export(export)
        link = ctx.formatter.link_for(export)
    return fragment.node(greeting_id, f"{title}\n{label}", NodeShape.GREETING, link=link)


def resolve_or_placeholder(resolve: Callable[[], CallTarget], reference: str) -> CallTarget:
    """Run ``resolve``; a ``ResolutionError`` becomes an :class:`UnresolvedTarget`."""
    try:
        return resolve()
    except ResolutionError as exc:
        logger.warning("Unresolved call target %s: %s", reference, exc)
        return UnresolvedTarget(reference or "unknown", str(exc).splitlines()[0])


def add_target(
    ctx: FlowContext,
    fragment: GraphFragment,
    source_id: str,
    target: CallTarget,
    stage: str,
    app_identity: str,
    counter: Optional[int] = None,
    edge_label: Optional[str] = None,
) -> Node:
    """Connect ``source_id`` to the node(s) for ``target`` and return the final node.

    Shared voicemail targets get their own greeting and, unless suppressed, the system
    disclaimer in front of the voicemail node.
    """
    previous, label = source_id, edge_label
    if isinstance(target, SharedVoicemailTarget):
        greeting_node = add_greeting_node(
            ctx,
            fragment,
            node_id(stage + "VoicemailGreeting", app_identity, counter),
            "Greeting",
            target.greeting,
            app_identity,
            stage + "VoicemailGreeting",
            counter,
        )
        if greeting_node is not None:
            fragment.edge(previous, greeting_node.id, label)
            previous, label = greeting_node.id, None
        if not target.suppress_system_greeting:
            system = fragment.node(
                node_id(stage + "SystemMessage", app_identity, counter), SYSTEM_MESSAGE_LABEL, NodeShape.GREETING
            )
            fragment.edge(previous, system.id, label)
            previous, label = system.id, None

    node = ctx.resolver.node_for(target, stage, app_identity, counter)
    fragment.add(node)
    fragment.edge(previous, node.id, label)
    return node


__all__ = [
    "FlowContext",
    "GraphWriter",
    "add_greeting_node",
    "add_target",
    "resolve_or_placeholder",
    "SYSTEM_MESSAGE_LABEL",
]
