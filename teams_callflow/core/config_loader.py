"""Configuration and environment resolution for diagram generation.

Precedence, lowest to highest: dataclass defaults, JSON options file, ``TEAMS_CALLFLOW_*``
environment variables, command line flags (applied by the CLI with ``dataclasses.replace``).
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
import json
import os
from typing import Any, Mapping, Optional

from teams_callflow.errors import ConfigurationAmbiguityError

ENV_PREFIX = "TEAMS_CALLFLOW_"
GRAPH_TOKEN_ENV = ENV_PREFIX + "GRAPH_TOKEN"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class RenderOptions:
    show_tts_text: bool = False
    show_audio_file_names: bool = False
    truncate_greetings: int = 20
    export_assets: bool = False
    assets_dir: str = "assets"
    show_agent_numbers: bool = False
    show_agent_opt_in: bool = False
    show_queue_settings: bool = True
    output_format: str = "mermaid"
    direction: str = "TD"
    title: Optional[str] = None


def _coerce(name: str, raw: Any, default: Any) -> Any:
    if isinstance(default, bool):
        if isinstance(raw, bool):
            return raw
        text = str(raw).strip().lower()
        if text in _TRUE:
            return True
        if text in _FALSE:
            return False
        raise ConfigurationAmbiguityError(f"Option {name!r} expects a boolean, got {raw!r}")
    if isinstance(default, int):
        try:
            return int(raw)
        except (TypeError, ValueError) as exc:
            raise ConfigurationAmbiguityError(f"Option {name!r} expects an integer, got {raw!r}") from exc
    return None if raw is None else str(raw)


def options_from_mapping(values: Mapping[str, Any], base: Optional[RenderOptions] = None) -> RenderOptions:
    base = base or RenderOptions()
    changes = {}
    for f in fields(RenderOptions):
        if f.name in values:
            changes[f.name] = _coerce(f.name, values[f.name], getattr(base, f.name))
    return replace(base, **changes)


def options_from_env(env: Mapping[str, str], base: Optional[RenderOptions] = None) -> RenderOptions:
    values = {}
    for f in fields(RenderOptions):
        key = ENV_PREFIX + f.name.upper()
        if key in env:
            values[f.name] = env[key]
    return options_from_mapping(values, base)


def load_options(path: Optional[str] = None, env: Optional[Mapping[str, str]] = None) -> RenderOptions:
    """Load ``RenderOptions`` from an optional JSON file, then apply environment overrides."""
    options = RenderOptions()
    if path:
        with open(path, "r", encoding="utf-8") as f:
            payload = json.load(f)
        if not isinstance(payload, dict):
            raise ConfigurationAmbiguityError(f"Options file {path} must contain a JSON object")
        options = options_from_mapping(payload, options)
    return options_from_env(os.environ if env is None else env, options)


def graph_token(env: Optional[Mapping[str, str]] = None) -> Optional[str]:
    env = os.environ if env is None else env
    return env.get(GRAPH_TOKEN_ENV) or None


__all__ = [
    "RenderOptions",
    "load_options",
    "options_from_mapping",
    "options_from_env",
    "graph_token",
    "ENV_PREFIX",
    "GRAPH_TOKEN_ENV",
]
