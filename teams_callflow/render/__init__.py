"""Diagram serializers for an accumulated call-flow graph."""

from __future__ import annotations

from typing import Optional

from teams_callflow.core.config_loader import RenderOptions
from teams_callflow.errors import ConfigurationAmbiguityError
from teams_callflow.graph.accumulator import GraphAccumulator

from .dot import render_dot
from .mermaid import render_mermaid

FORMATS = {"mermaid": render_mermaid, "dot": render_dot}


def render(acc: GraphAccumulator, options: Optional[RenderOptions] = None) -> str:
    """Serialize ``acc`` in ``options.output_format``."""
    options = options or RenderOptions()
    try:
        renderer = FORMATS[options.output_format]
    except KeyError:
        raise ConfigurationAmbiguityError(f"Unknown output format {options.output_format!r}") from None
    return renderer(acc, options)


__all__ = ["render", "render_dot", "render_mermaid", "FORMATS"]
