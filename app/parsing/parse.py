from __future__ import annotations

import logging
import re
from io import BytesIO
from pathlib import Path
from zipfile import BadZipFile, ZipFile

from app.core.errors import ParsingError
from app.normalize.resume_sections import split_sections

from .models import ParsedResume

logger = logging.getLogger(__name__)

PDF_MAGIC = b"%PDF-"
ZIP_MAGICS = (b"PK\x03\x04", b"PK\x05\x06", b"PK\x07\x08")
OLE_MAGIC = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"

_UTF16_RUN_RE = re.compile(rb"(?:[\x20-\x7e\r\n\t]\x00){6,}")
_ANSI_RUN_RE = re.compile(rb"[\x20-\x7e\r\n\t]{12,}")
_DOC_NOISE_MARKERS = (
    "microsoft",
    "times new roman",
    "normal.dot",
    "worddocument",
    "summaryinformation",
    "documentsummaryinformation",
    "root entry",
    "compobj",
    "arial",
    "calibri",
)


def sniff_source_type(head: bytes, content: bytes | None = None) -> str | None:
    """Detect the document format from its leading bytes."""
    if head.startswith(PDF_MAGIC):
        return "pdf"
    if head.startswith(OLE_MAGIC):
        return "doc"
    if any(head.startswith(prefix) for prefix in ZIP_MAGICS):
        if content is None or _zip_has_paths(content, ("word/",)):
            return "docx"
    return None


def _zip_has_paths(content: bytes, prefixes: tuple[str, ...]) -> bool:
    try:
        with ZipFile(BytesIO(content)) as archive:
            names = archive.namelist()
    except BadZipFile:
        return False
    return any(any(name.startswith(prefix) for prefix in prefixes) for name in names)


def _parse_pdf(file_path: Path) -> str:
    from pypdf import PdfReader

    try:
        reader = PdfReader(str(file_path))
        if reader.is_encrypted and not reader.decrypt(""):
            raise ParsingError("The PDF is encrypted and cannot be read.")
        text_parts = [(page.extract_text() or "").strip() for page in reader.pages]
    except ParsingError:
        raise
    except Exception as exc:
        raise ParsingError(f"PDF parsing failed: {exc}") from exc
    return "\n".join(part for part in text_parts if part)


def _parse_docx(file_path: Path) -> str:
    from docx import Document

    try:
        document = Document(str(file_path))
    except Exception as exc:
        raise ParsingError(f"DOCX parsing failed: {exc}") from exc

    lines = [p.text.strip() for p in document.paragraphs if p.text and p.text.strip()]
    for table in document.tables:
        for row in table.rows:
            cells = [cell.text.strip() for cell in row.cells if cell.text and cell.text.strip()]
            if cells:
                lines.append(" | ".join(cells))
    return "\n".join(lines)


def _is_doc_noise(run: str) -> bool:
    lowered = run.lower()
    return any(marker in lowered for marker in _DOC_NOISE_MARKERS)


def _parse_doc(file_path: Path) -> str:
    """Recover readable text runs from a legacy Word binary."""
    content = file_path.read_bytes()
    utf16_runs = [match.decode("utf-16-le", errors="ignore") for match in _UTF16_RUN_RE.findall(content)]
    ansi_runs = [match.decode("cp1252", errors="ignore") for match in _ANSI_RUN_RE.findall(content)]
    runs = max(utf16_runs, ansi_runs, key=lambda items: sum(len(item) for item in items))
    kept = [run for run in runs if not _is_doc_noise(run)]
    text = "\n".join(kept).replace("\r", "\n")
    return text


_PARSERS = {
    "pdf": _parse_pdf,
    "docx": _parse_docx,
    "doc": _parse_doc,
}


class ResumeExtractor:
    """Turns a document on disk into a ``ParsedResume`` section map."""

    def extract(self, file_path: str | Path) -> ParsedResume:
        path = Path(file_path)
        try:
            content = path.read_bytes()
        except OSError as exc:
            raise ParsingError(f"Unable to read uploaded document: {exc}") from exc

        source_type = sniff_source_type(content[:8], content)
        if source_type is None:
            raise ParsingError("Document content is not a readable PDF, DOC or DOCX file.")

        text = _PARSERS[source_type](path)
        if not text.strip():
            raise ParsingError(f"No extractable text found in {source_type.upper()} document.")

        parts = split_sections(text)
        logger.info(
            "resume_extracted source_type=%s chars=%s sections=%s",
            source_type,
            len(text),
            ",".join(name for name, value in parts.items() if value),
        )
        return ParsedResume(source_type=source_type, text=text, parts=parts)
