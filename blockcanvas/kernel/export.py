"""
blockcanvas Kernel — Code Export

Packages a CompiledDocument as the three static files
(index.html, styles.css, script.js) and hands them to a sink.
"""

from __future__ import annotations

import io
import logging
import zipfile
from dataclasses import dataclass
from pathlib import Path

from blockcanvas.kernel.compiler import CompiledDocument

logger = logging.getLogger(__name__)

INDEX_FILE = "index.html"
STYLES_FILE = "styles.css"
SCRIPT_FILE = "script.js"

# Fixed member timestamp so identical bundles zip to identical bytes
_ZIP_EPOCH = (1980, 1, 1, 0, 0, 0)


@dataclass(frozen=True)
class ExportBundle:
    html: str
    css: str
    js: str

    @classmethod
    def from_document(cls, document: CompiledDocument) -> ExportBundle:
        return cls(html=document.markup, css=document.stylesheet, js=document.script)

    def files(self) -> dict[str, str]:
        return {
            INDEX_FILE: self.html,
            STYLES_FILE: self.css,
            SCRIPT_FILE: self.js,
        }

    def to_zip(self) -> bytes:
        """All three files in one archive. Deterministic for equal bundles."""
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            for name, content in self.files().items():
                info = zipfile.ZipInfo(name, date_time=_ZIP_EPOCH)
                info.compress_type = zipfile.ZIP_DEFLATED
                info.external_attr = 0o644 << 16
                archive.writestr(info, content.encode("utf-8"))
        return buffer.getvalue()


# ---------------------------------------------------------------------------
# Sinks
# ---------------------------------------------------------------------------


class ExportSink:
    """Consumes an export bundle. Implement per destination."""

    def write(self, bundle: ExportBundle) -> None:
        raise NotImplementedError


class MemoryExportSink(ExportSink):
    """Keeps every bundle it is handed, for tests."""

    def __init__(self) -> None:
        self.bundles: list[ExportBundle] = []

    def write(self, bundle: ExportBundle) -> None:
        self.bundles.append(bundle)

    @property
    def last(self) -> ExportBundle | None:
        return self.bundles[-1] if self.bundles else None


class DirectoryExportSink(ExportSink):
    """Writes index.html, styles.css and script.js into a directory."""

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)

    def write(self, bundle: ExportBundle) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        for name, content in bundle.files().items():
            (self.directory / name).write_text(content, encoding="utf-8")
        logger.info("export: wrote %d files to %s", len(bundle.files()), self.directory)


def export_document(document: CompiledDocument, sink: ExportSink) -> ExportBundle:
    bundle = ExportBundle.from_document(document)
    sink.write(bundle)
    return bundle
