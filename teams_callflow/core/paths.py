"""Path/output helpers for diagrams and exported greeting assets."""

from __future__ import annotations

import os
import re

_UNSAFE_FILENAME = re.compile(r'[<>:"/\\|?*\s]')


def ensure_output_dir(path: str) -> str:
    resolved = os.path.abspath(path)
    os.makedirs(resolved, exist_ok=True)
    return resolved


def sanitize_filename(name: str) -> str:
    """Sanitize a file name for safe filesystem storage."""
    name = _UNSAFE_FILENAME.sub("_", name)
    name = name.strip(". ")
    return name[:200]


def asset_path(assets_dir: str, key: str, filename: str | None = None, suffix: str = ".txt") -> str:
    """Return ``<assets_dir>/<key>[_<filename>]``; text assets get ``suffix``."""
    base = sanitize_filename(key)
    if filename:
        name = f"{base}_{sanitize_filename(filename)}"
    else:
        name = base + suffix
    return os.path.join(assets_dir, name)


def write_text(path: str, content: str) -> None:
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(content)


def write_bytes(path: str, content: bytes) -> None:
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    with open(path, "wb") as f:
        f.write(content)


def default_diagram_path(output_dir: str, title: str, output_format: str) -> str:
    extension = ".dot" if output_format == "dot" else ".mmd"
    return os.path.join(ensure_output_dir(output_dir), sanitize_filename(title) + extension)


__all__ = [
    "ensure_output_dir",
    "sanitize_filename",
    "asset_path",
    "write_text",
    "write_bytes",
    "default_diagram_path",
]
