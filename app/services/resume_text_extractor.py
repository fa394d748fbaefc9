"""
Resume text extraction
Pulls plain text out of uploaded PDF / DOCX / TXT bytes. Extraction is
best effort: any failure yields an empty string and a warning.
"""
import io
import logging
from pathlib import PurePath

from docx import Document
from PyPDF2 import PdfReader

logger = logging.getLogger(__name__)


def get_file_extension(filename: str) -> str:
    """Get lowercase file extension (with the dot)."""
    return PurePath(filename or "").suffix.lower()


def extract_from_pdf(content: bytes) -> str:
    """Extract text from PDF bytes."""
    reader = PdfReader(io.BytesIO(content))
    text_parts = []
    for page in reader.pages:
        page_text = page.extract_text()
        if page_text:
            text_parts.append(page_text)
    return "\n".join(text_parts)


def extract_from_docx(content: bytes) -> str:
    """Extract text from DOCX bytes (paragraphs, then table rows)."""
    doc = Document(io.BytesIO(content))
    text_parts = [para.text for para in doc.paragraphs if para.text.strip()]

    for table in doc.tables:
        for row in table.rows:
            row_text = [cell.text.strip() for cell in row.cells if cell.text.strip()]
            if row_text:
                text_parts.append(" | ".join(row_text))

    return "\n".join(text_parts)


def extract_from_txt(content: bytes) -> str:
    """Decode TXT bytes as UTF-8."""
    return content.decode("utf-8")


_EXTRACTORS = {
    ".pdf": extract_from_pdf,
    ".docx": extract_from_docx,
    ".txt": extract_from_txt,
}


def extract_text(content: bytes, filename: str, mime_type: str = "") -> str:
    """
    Extract text from an uploaded file.

    Args:
        content: Raw file bytes
        filename: Declared filename; its extension selects the extractor
        mime_type: Declared MIME type (logged only)

    Returns:
        Extracted text, or "" for unsupported extensions and failed extraction
    """
    extension = get_file_extension(filename)
    extractor = _EXTRACTORS.get(extension)
    if extractor is None:
        logger.debug(f"No text extractor for {filename!r} ({mime_type or 'unknown type'})")
        return ""

    try:
        return extractor(content) or ""
    except Exception as e:
        logger.warning(f"Error extracting text from {filename!r}: {type(e).__name__}: {e}")
        return ""
