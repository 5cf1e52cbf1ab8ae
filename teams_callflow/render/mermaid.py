"""Mermaid flowchart output for an accumulated call-flow graph."""

from __future__ import annotations

import logging
from typing import List, Optional, Set

from teams_callflow.core.config_loader import RenderOptions
from teams_callflow.graph.accumulator import GraphAccumulator
from teams_callflow.models.graph import Edge, EdgeStyle, GraphFragment, Node, NodeShape

logger = logging.getLogger(__name__)

DIRECTIONS = ("TD", "TB", "BT", "LR", "RL")

SHAPES = {
    NodeShape.START: ('(("', '"))'),
    NodeShape.PROCESS: ('["', '"]'),
    NodeShape.DECISION: ('{"', '"}'),
    NodeShape.SUBROUTINE: ('[["', '"]]'),
    NodeShape.TERMINAL: ('(["', '"])'),
    NodeShape.GREETING: ('>"', '"]'),
    NodeShape.INFO: ('[/"', '"/]'),
}

ARROWS = {
    EdgeStyle.SOLID: "-->",
    EdgeStyle.DOTTED: "-.->",
    EdgeStyle.INVISIBLE: "~~~",
}


def escape(text: str) -> str:
    """Mermaid-safe label text: ``;`` ends a statement and ``"`` ends the label."""
    return text.replace(";", ",").replace('"', "#quot;").replace("\n", "<br>")


def node_statement(node: Node) -> str:
    opening, closing = SHAPES[node.shape]
    return f"{node.id}{opening}{escape(node.label)}{closing}"


def edge_statement(edge: Edge) -> str:
    arrow = ARROWS[edge.style]
    if edge.label and edge.style is not EdgeStyle.INVISIBLE:
        return f'{edge.source} {arrow}|"{escape(edge.label)}"| {edge.target}'
    return f"{edge.source} {arrow} {edge.target}"


class MermaidRenderer:
    def __init__(self, options: Optional[RenderOptions] = None) -> None:
        self.options = options or RenderOptions()

    def render(self, acc: GraphAccumulator) -> str:
        lines: List[str] = []
        if self.options.title:
            lines.extend(["---", f"title: {escape(self.options.title)}", "---"])
        direction = self.options.direction.upper()
        if direction not in DIRECTIONS:
            logger.warning("Unknown flowchart direction %r, using TD", self.options.direction)
            direction = "TD"
        lines.append(f"flowchart {direction}")

        declared: Set[str] = set()
        for node in acc.iter_nodes():
            if node.shared and node.id not in declared:
                lines.append("    " + node_statement(node))
                declared.add(node.id)
        deferred: List[Edge] = []
        for fragment in acc.fragments:
            self._fragment(lines, fragment, declared, deferred, 1)
        # Mermaid places every node an edge mentions inside the subgraph holding the edge.
        lines.extend("    " + edge_statement(edge) for edge in deferred)

        for node_id, link in acc.links().items():
            lines.append(f'    click {node_id} "{link}" _blank')
        logger.debug("Rendered Mermaid flowchart with %d node(s)", len(declared))
        return "\n".join(lines) + "\n"

    def _fragment(
        self,
        lines: List[str],
        fragment: GraphFragment,
        declared: Set[str],
        deferred: List[Edge],
        depth: int,
        members: Optional[Set[str]] = None,
    ) -> None:
        indent = "    " * depth
        if fragment.is_subgraph:
            lines.append(f'{indent}subgraph {fragment.subgraph_id} ["{escape(fragment.title or fragment.subgraph_id)}"]')
            depth += 1
            indent = "    " * depth
            members = fragment.member_ids()
        for item in fragment.items:
            if isinstance(item, Node):
                if item.id not in declared:
                    lines.append(indent + node_statement(item))
                    declared.add(item.id)
            elif isinstance(item, Edge):
                if members is not None and not (item.source in members and item.target in members):
                    deferred.append(item)
                else:
                    lines.append(indent + edge_statement(item))
            else:
                self._fragment(lines, item, declared, deferred, depth, members)
        if fragment.is_subgraph:
            lines.append("    " * (depth - 1) + "end")


def render_mermaid(acc: GraphAccumulator, options: Optional[RenderOptions] = None) -> str:
    return MermaidRenderer(options).render(acc)


__all__ = ["MermaidRenderer", "render_mermaid", "escape", "node_statement", "edge_statement", "DIRECTIONS"]
