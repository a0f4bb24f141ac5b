from __future__ import annotations

import io
import logging
import zipfile

from docx import Document
from docx.opc.exceptions import PackageNotFoundError
from pypdf import PdfReader
from pypdf.errors import PyPdfError

from qrmenu.core.errors import InsufficientContentError, UnsupportedFormatError

logger = logging.getLogger(__name__)

PDF_MIME = "application/pdf"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
TXT_MIME = "text/plain"


def detect_format(filename: str | None, content_type: str | None) -> str:
    """Return "pdf", "docx" or "txt" from the MIME type, falling back to the extension."""
    mime = (content_type or "").split(";", 1)[0].strip().lower()
    name = (filename or "").strip().lower()
    if mime == PDF_MIME or name.endswith(".pdf"):
        return "pdf"
    if mime == DOCX_MIME or name.endswith(".docx"):
        return "docx"
    if mime == TXT_MIME or name.endswith(".txt"):
        return "txt"
    raise UnsupportedFormatError()


def _pdf_text(data: bytes) -> str:
    reader = PdfReader(io.BytesIO(data))
    return "\n".join(page.extract_text() or "" for page in reader.pages)


def _docx_text(data: bytes) -> str:
    document = Document(io.BytesIO(data))
    lines = [paragraph.text for paragraph in document.paragraphs]
    # Menus laid out as tables keep their text in cells.
    for table in document.tables:
        for row in table.rows:
            cells = [cell.text.strip() for cell in row.cells if cell.text.strip()]
            if cells:
                lines.append(" ".join(cells))
    return "\n".join(lines)


def extract_text(filename: str | None, content_type: str | None, data: bytes) -> str:
    kind = detect_format(filename, content_type)
    try:
        if kind == "pdf":
            return _pdf_text(data)
        if kind == "docx":
            return _docx_text(data)
        return data.decode("utf-8", errors="replace")
    except (PyPdfError, PackageNotFoundError, zipfile.BadZipFile, KeyError, ValueError, OSError) as exc:
        logger.warning("[INGESTION] could not read %s file %r: %s", kind, filename, exc)
        raise InsufficientContentError() from exc
