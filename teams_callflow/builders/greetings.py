"""Greeting and prompt labels.

The formatter only describes asset exports; writing them is left to
:class:`teams_callflow.export.AssetExportSink`.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Optional, Tuple

from teams_callflow.core.config_loader import RenderOptions
from teams_callflow.core.paths import asset_path
from teams_callflow.models.callflow import (
    AssetExport,
    AudioFileGreeting,
    Greeting,
    NoGreeting,
    TextToSpeechGreeting,
)
from teams_callflow.models.tenant import Prompt

logger = logging.getLogger(__name__)

ELLIPSIS = "…"
EXTENSION_LENGTH = 4
NONE_LABEL = "None"


@dataclass(frozen=True)
class GreetingOptions:
    show_text: bool = False
    show_filename: bool = False
    truncate_at: int = 20
    export_assets: bool = False

    @classmethod
    def from_render_options(cls, options: RenderOptions) -> "GreetingOptions":
        return cls(
            show_text=options.show_tts_text,
            show_filename=options.show_audio_file_names,
            truncate_at=options.truncate_greetings,
            export_assets=options.export_assets,
        )


def greeting_from_prompt(prompt: Optional[Prompt]) -> Greeting:
    if prompt is None:
        return NoGreeting()
    active = (prompt.active_type or "None").strip()
    if active == "TextToSpeech" and prompt.text_to_speech_prompt:
        return TextToSpeechGreeting(prompt.text_to_speech_prompt)
    if active == "AudioFile" and prompt.audio_file_prompt is not None:
        audio = prompt.audio_file_prompt
        return AudioFileGreeting(audio.file_name or audio.id or "Audio File", audio.download_uri)
    return NoGreeting()


def greeting_from_parts(
    text: Optional[str] = None,
    filename: Optional[str] = None,
    download_uri: Optional[str] = None,
) -> Greeting:
    """Build a greeting from call-queue style fields; an audio file wins over text."""
    if filename:
        return AudioFileGreeting(filename, download_uri)
    if text:
        return TextToSpeechGreeting(text)
    return NoGreeting()


def is_configured(greeting: Greeting) -> bool:
    return not isinstance(greeting, NoGreeting)


def truncate_text(text: str, limit: int) -> str:
    """Cut ``text`` to ``limit`` characters in total, the last one being the ellipsis."""
    if limit <= 0 or len(text) <= limit:
        return text
    return text[: limit - 1] + ELLIPSIS


def truncate_filename(filename: str, limit: int) -> str:
    """Like :func:`truncate_text` but keeps the last four characters as the extension.

    The result is at most ``limit`` characters plus the extension. A stem already shorter
    than ``limit`` is left whole.
    """
    if limit <= 0 or len(filename) <= limit or len(filename) <= EXTENSION_LENGTH:
        return filename
    stem, extension = filename[:-EXTENSION_LENGTH], filename[-EXTENSION_LENGTH:]
    if len(stem) < limit:
        return filename
    return stem[: limit - 1] + ELLIPSIS + extension


def format_greeting(
    greeting: Optional[Greeting],
    options: GreetingOptions,
    app_identity: str = "",
    stage: str = "",
    counter: Optional[int] = None,
) -> Tuple[str, Optional[AssetExport]]:
    """Return the display label for ``greeting`` and, if requested, its export descriptor."""
    if greeting is None or isinstance(greeting, NoGreeting):
        return NONE_LABEL, None

    if isinstance(greeting, TextToSpeechGreeting):
        label = truncate_text(greeting.text, options.truncate_at) if options.show_text else "Text To Speech"
        export = None
        if options.export_assets:
            export = AssetExport(app_identity, stage, counter, "text", greeting.text)
        return label, export

    if isinstance(greeting, AudioFileGreeting):
        label = truncate_filename(greeting.filename, options.truncate_at) if options.show_filename else "Audio File"
        export = None
        if options.export_assets:
            if greeting.download_uri:
                export = AssetExport(app_identity, stage, counter, "audio", greeting.download_uri, greeting.filename)
            else:
                logger.debug("No download URI for %s, skipping export", greeting.filename)
        return label, export

    raise TypeError(f"Unknown greeting type: {type(greeting).__name__}")


class GreetingFormatter:
    def __init__(self, options: GreetingOptions, assets_dir: str = "assets") -> None:
        self.options = options
        self.assets_dir = assets_dir

    def format(
        self,
        greeting: Optional[Greeting],
        app_identity: str = "",
        stage: str = "",
        counter: Optional[int] = None,
    ) -> Tuple[str, Optional[AssetExport]]:
        return format_greeting(greeting, self.options, app_identity, stage, counter)

    def link_for(self, export: AssetExport) -> str:
        return asset_path(self.assets_dir, export.key, export.filename)


__all__ = [
    "ELLIPSIS",
    "GreetingOptions",
    "GreetingFormatter",
    "greeting_from_prompt",
    "greeting_from_parts",
    "is_configured",
    "truncate_text",
    "truncate_filename",
    "format_greeting",
]
