"""Graphviz DOT output for an accumulated call-flow graph.

Subgraphs become ``cluster_*`` blocks. Graphviz cannot point an edge at a cluster, so an
edge to a subgraph id is drawn to the first node inside it and clipped with ``lhead``
(``ltail`` for edges leaving a subgraph); ``compound=true`` enables the clipping.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Set

from teams_callflow.core.config_loader import RenderOptions
from teams_callflow.graph.accumulator import GraphAccumulator
from teams_callflow.models.graph import Edge, EdgeStyle, GraphFragment, Node, NodeShape

logger = logging.getLogger(__name__)

RANKDIR = {"TD": "TB", "TB": "TB", "BT": "BT", "LR": "LR", "RL": "RL"}

NODE_ATTRS = {
    NodeShape.START: 'shape=circle, fillcolor="#d4edda"',
    NodeShape.PROCESS: "shape=box",
    NodeShape.DECISION: 'shape=diamond, fillcolor="#fff3cd"',
    NodeShape.SUBROUTINE: 'shape=box, peripheries=2, fillcolor="#d1ecf1"',
    NodeShape.TERMINAL: 'shape=box, style="rounded,filled,bold", fillcolor="#f8d7da"',
    NodeShape.GREETING: 'shape=note, fillcolor="#e2e3e5"',
    NodeShape.INFO: 'shape=parallelogram, fillcolor="#ffffff"',
}

EDGE_ATTRS = {
    EdgeStyle.SOLID: None,
    EdgeStyle.DOTTED: "style=dotted",
    EdgeStyle.INVISIBLE: "style=invis",
}


def escape(text: str) -> str:
    """Quote-safe DOT label text; ``\\n`` becomes a centred line break."""
    return text.replace("\\", "\\\\").replace('"', r"\"").replace("\n", r"\n")


def cluster_id(subgraph_id: str) -> str:
    return "cluster_" + subgraph_id


class Graph:
    """Lightweight wrapper around a Graphviz 'dot' graph."""

    def __init__(self, direction: str = "TD", title: Optional[str] = None):
        self.lines = [
            "digraph G {",
            f"  rankdir={RANKDIR.get(direction.upper(), 'TB')};",
            "  compound=true;",
            '  node [shape=box, style="rounded,filled", fillcolor="#f7f7f7", fontname="Helvetica"];',
            '  edge [fontname="Helvetica"];',
        ]
        if title:
            self.lines.append(f'  label="{escape(title)}";')
            self.lines.append("  labelloc=t;")
        self.declared: Set[str] = set()
        self.indent = "  "

    def add_node(self, node: Node) -> bool:
        """Declare ``node`` once; later declarations of the same id are ignored."""
        if node.id in self.declared:
            return False
        attrs = [f'label="{escape(node.label)}"', NODE_ATTRS[node.shape]]
        if node.link:
            attrs.append(f'URL="{escape(node.link)}"')
        self.lines.append(f"{self.indent}{node.id} [{', '.join(attrs)}];")
        self.declared.add(node.id)
        return True

    def add_edge(self, source: str, target: str, label: Optional[str] = None, extra: Optional[List[str]] = None):
        attrs = list(extra or [])
        if label:
            attrs.insert(0, f'label="{escape(label)}"')
        if attrs:
            self.lines.append(f"{self.indent}{source} -> {target} [{', '.join(attrs)}];")
        else:
            self.lines.append(f"{self.indent}{source} -> {target};")

    def open_cluster(self, subgraph_id: str, title: Optional[str]) -> None:
        self.lines.append(f"{self.indent}subgraph {cluster_id(subgraph_id)} {{")
        self.indent += "  "
        self.lines.append(f'{self.indent}label="{escape(title or subgraph_id)}";')
        self.lines.append(f'{self.indent}style="rounded,dashed";')

    def close_cluster(self) -> None:
        self.indent = self.indent[:-2]
        self.lines.append(f"{self.indent}}}")

    def render(self) -> str:
        """Finalize and return the entire DOT graph as a single string."""
        self.lines.append("}")
        return "\n".join(self.lines) + "\n"


class DotRenderer:
    def __init__(self, options: Optional[RenderOptions] = None) -> None:
        self.options = options or RenderOptions()

    def render(self, acc: GraphAccumulator) -> str:
        graph = Graph(self.options.direction, self.options.title)
        anchors = self._anchors(acc)

        for node in acc.iter_nodes():
            if node.shared:
                graph.add_node(node)
        # Edges leaving a cluster are written at top level; inside it they would pull
        # their endpoints into the cluster.
        deferred: List[Edge] = []
        for fragment in acc.fragments:
            self._fragment(graph, fragment, anchors, deferred)
        for edge in deferred:
            self._edge(graph, edge, anchors)
        logger.debug("Rendered DOT graph with %d node(s)", len(graph.declared))
        return graph.render()

    def _anchors(self, acc: GraphAccumulator) -> Dict[str, str]:
        """First non-shared node of every subgraph, used as the edge endpoint for clusters."""
        anchors: Dict[str, str] = {}
        for fragment in acc.fragments:
            subgraphs = list(fragment.iter_subgraphs())
            if fragment.is_subgraph:
                subgraphs.insert(0, fragment)
            for subgraph in subgraphs:
                for node in subgraph.iter_nodes():
                    if not node.shared:
                        anchors.setdefault(subgraph.subgraph_id, node.id)
                        break
        return anchors

    def _fragment(
        self,
        graph: Graph,
        fragment: GraphFragment,
        anchors: Dict[str, str],
        deferred: List[Edge],
        members: Optional[Set[str]] = None,
    ) -> None:
        if fragment.is_subgraph:
            graph.open_cluster(fragment.subgraph_id, fragment.title)
            members = fragment.member_ids()
        for item in fragment.items:
            if isinstance(item, Node):
                graph.add_node(item)
            elif isinstance(item, Edge):
                if members is not None and not (item.source in members and item.target in members):
                    deferred.append(item)
                else:
                    self._edge(graph, item, anchors)
            else:
                self._fragment(graph, item, anchors, deferred, members)
        if fragment.is_subgraph:
            graph.close_cluster()

    def _edge(self, graph: Graph, edge: Edge, anchors: Dict[str, str]) -> None:
        extra = []
        style = EDGE_ATTRS[edge.style]
        if style:
            extra.append(style)
        source, target = edge.source, edge.target
        if source in anchors:
            extra.append(f"ltail={cluster_id(source)}")
            source = anchors[source]
        if target in anchors:
            extra.append(f"lhead={cluster_id(target)}")
            target = anchors[target]
        graph.add_edge(source, target, edge.label, extra)


def render_dot(acc: GraphAccumulator, options: Optional[RenderOptions] = None) -> str:
    return DotRenderer(options).render(acc)


__all__ = ["Graph", "DotRenderer", "render_dot", "escape", "cluster_id", "RANKDIR"]
