"""Write greeting assets collected during a traversal.

Text-to-speech prompts are written as ``<dir>/<key>.txt``; audio files are downloaded to
``<dir>/<key>_<filename>``. A failed export is logged and skipped, the diagram is still
produced.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

import requests

from teams_callflow.core.paths import asset_path, write_bytes, write_text
from teams_callflow.errors import ExportError
from teams_callflow.models.callflow import AssetExport

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 60


class AssetExportSink:
    def __init__(self, assets_dir: str, session: Optional[requests.Session] = None, timeout: int = DEFAULT_TIMEOUT):
        self.assets_dir = assets_dir
        self.session = session or requests.Session()
        self.timeout = timeout

    def path_for(self, export: AssetExport) -> str:
        return asset_path(self.assets_dir, export.key, export.filename)

    def write_text(self, export: AssetExport) -> str:
        path = self.path_for(export)
        try:
            write_text(path, export.content)
        except OSError as exc:
            raise ExportError(export.key, f"Could not write {path}: {exc}") from exc
        return path

    def download_audio(self, export: AssetExport) -> str:
        path = self.path_for(export)
        try:
            resp = self.session.get(export.content, timeout=self.timeout)
        except requests.RequestException as exc:
            raise ExportError(export.key, f"Download failed: {exc}") from exc
        if resp.status_code >= 400:
            raise ExportError(export.key, f"Download failed with HTTP {resp.status_code}")
        try:
            write_bytes(path, resp.content)
        except OSError as exc:
            raise ExportError(export.key, f"Could not write {path}: {exc}") from exc
        return path

    def export(self, export: AssetExport) -> str:
        if export.kind == "text":
            return self.write_text(export)
        if export.kind == "audio":
            return self.download_audio(export)
        raise ExportError(export.key, f"Unknown asset kind {export.kind!r}")

    def export_all(self, exports: Iterable[AssetExport]) -> List[str]:
        """Export every asset; return the paths written. Failures are logged, never raised."""
        written = []
        for export in exports:
            try:
                path = self.export(export)
            except ExportError as exc:
                logger.warning("Asset export failed: %s", exc)
                continue
            logger.debug("Exported %s to %s", export.key, path)
            written.append(path)
        return written


__all__ = ["AssetExportSink", "DEFAULT_TIMEOUT"]
