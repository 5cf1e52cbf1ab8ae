"""Structured intermediate representation of a call-flow diagram.

Labels are plain text with ``\\n`` line breaks; escaping for a particular diagram
syntax happens in :mod:`teams_callflow.render`.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Iterator, List, Optional, Set, Union


class NodeShape(str, Enum):
    START = "start"
    PROCESS = "process"
    DECISION = "decision"
    SUBROUTINE = "subroutine"
    TERMINAL = "terminal"
    GREETING = "greeting"
    INFO = "info"


class EdgeStyle(str, Enum):
    SOLID = "solid"
    DOTTED = "dotted"
    INVISIBLE = "invisible"


@dataclass(frozen=True)
class Node:
    id: str
    label: str
    shape: NodeShape = NodeShape.PROCESS
    link: Optional[str] = None
    shared: bool = False


@dataclass(frozen=True)
class Edge:
    source: str
    target: str
    label: Optional[str] = None
    style: EdgeStyle = EdgeStyle.SOLID


@dataclass
class GraphFragment:
    """One call-handling stage. A fragment with a ``subgraph_id`` renders as a subgraph."""

    stage: str
    items: List[Union[Node, Edge, "GraphFragment"]] = field(default_factory=list)
    subgraph_id: Optional[str] = None
    title: Optional[str] = None

    def add(self, item: Union[Node, Edge, "GraphFragment"]) -> Union[Node, Edge, "GraphFragment"]:
        self.items.append(item)
        return item

    def node(self, node_id: str, label: str, shape: NodeShape = NodeShape.PROCESS, **kwargs) -> Node:
        node = Node(node_id, label, shape, **kwargs)
        self.items.append(node)
        return node

    def edge(self, source: str, target: str, label: Optional[str] = None,
             style: EdgeStyle = EdgeStyle.SOLID) -> Edge:
        edge = Edge(source, target, label, style)
        self.items.append(edge)
        return edge

    @property
    def is_subgraph(self) -> bool:
        return self.subgraph_id is not None

    def walk(self) -> Iterator[Union[Node, Edge, "GraphFragment"]]:
        """Depth-first iteration over every item, nested fragments included."""
        for item in self.items:
            yield item
            if isinstance(item, GraphFragment):
                yield from item.walk()

    def iter_nodes(self) -> Iterator[Node]:
        for item in self.walk():
            if isinstance(item, Node):
                yield item

    def iter_edges(self) -> Iterator[Edge]:
        for item in self.walk():
            if isinstance(item, Edge):
                yield item

    def iter_subgraphs(self) -> Iterator["GraphFragment"]:
        for item in self.walk():
            if isinstance(item, GraphFragment) and item.is_subgraph:
                yield item

    def member_ids(self) -> Set[str]:
        """Ids drawn inside this fragment: its own non-shared nodes and nested subgraphs."""
        members: Set[str] = set()
        for item in self.walk():
            if isinstance(item, Node) and not item.shared:
                members.add(item.id)
            elif isinstance(item, GraphFragment) and item.is_subgraph:
                members.add(item.subgraph_id)
        return members

    def drop_links(self, keep: Set[str]) -> int:
        """Clear every node link not in ``keep``; return how many were cleared."""
        cleared = 0
        for index, item in enumerate(self.items):
            if isinstance(item, GraphFragment):
                cleared += item.drop_links(keep)
            elif isinstance(item, Node) and item.link and item.link not in keep:
                self.items[index] = replace(item, link=None)
                cleared += 1
        return cleared


__all__ = ["NodeShape", "EdgeStyle", "Node", "Edge", "GraphFragment"]
