"""Document text extraction for the supported document kinds.

pdf via pypdf (page text joined by blank lines; image-only pages skipped),
txt/md read as UTF-8. docx and rtf are accepted by the library but have no
extractor yet and fail with UnsupportedDocumentError.
"""

from __future__ import annotations

from pathlib import Path

import pypdf
from pypdf.errors import PdfReadError

from docrag.db.models import Document

_TEXT_KINDS = frozenset({"txt", "md"})


class DocumentParseError(ValueError):
    """Raised when a document's text cannot be extracted."""


class UnsupportedDocumentError(DocumentParseError):
    """Raised for document kinds this parser cannot read."""


class DocumentParser:
    """Extract plain text from a registered Document's locator."""

    def parse_text(self, document: Document) -> str:
        path = Path(document.locator)
        if not path.is_file():
            raise DocumentParseError(f"Document file not found: '{document.locator}'")

        if document.kind == "pdf":
            return self._extract_pdf(path)
        if document.kind in _TEXT_KINDS:
            return self._read_text(path)
        raise UnsupportedDocumentError(
            f"No text extractor for '{document.kind}' documents ('{document.name}')"
        )

    @staticmethod
    def _read_text(path: Path) -> str:
        try:
            return path.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise DocumentParseError(f"'{path.name}' is not valid UTF-8 text") from exc

    @staticmethod
    def _extract_pdf(path: Path) -> str:
        try:
            reader = pypdf.PdfReader(path)
            parts: list[str] = []
            for page in reader.pages:
                stripped = (page.extract_text() or "").strip()
                if stripped:
                    parts.append(stripped)
        except PdfReadError as exc:
            raise DocumentParseError(f"Could not read PDF '{path.name}': {exc}") from exc
        return "\n\n".join(parts)
