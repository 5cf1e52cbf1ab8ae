"""Graph accumulation and identifier helpers."""

from .accumulator import GraphAccumulator, GraphTransaction
from .ids import entry_node_id, node_id, safe_id

__all__ = ["GraphAccumulator", "GraphTransaction", "entry_node_id", "node_id", "safe_id"]
