"""Flow builders: one per voice app kind, plus the resolver and formatter they share."""

from .auto_attendant import AutoAttendantFlowBuilder
from .call_queue import CallQueueFlowBuilder
from .common import FlowContext, GraphWriter
from .greetings import GreetingFormatter, GreetingOptions, format_greeting
from .targets import TargetResolver, entry_node

__all__ = [
    "AutoAttendantFlowBuilder",
    "CallQueueFlowBuilder",
    "FlowContext",
    "GraphWriter",
    "GreetingFormatter",
    "GreetingOptions",
    "format_greeting",
    "TargetResolver",
    "entry_node",
]
