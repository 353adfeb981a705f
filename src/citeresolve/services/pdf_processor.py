"""
Document text extraction.

Text comes from pdfplumber, with PyPDF2 as fallback; pages are joined with form
feeds so the reference parser can work page by page. Plain-text files are read
as-is. pdfplumber's character boxes can also be turned into StructuredChar
lists with line and paragraph breaks.
"""

import logging
import os
from typing import Any, Dict, List, Optional

import pdfplumber
from PyPDF2 import PdfReader

from ..exceptions import DocumentTextError
from ..models import StructuredChar

logger = logging.getLogger(__name__)

PAGE_SEPARATOR = "\f"
# vertical gap, as a multiple of character height, treated as a paragraph break
PARAGRAPH_GAP_FACTOR = 1.5
SPACE_GAP_FACTOR = 0.25


class PDFProcessor:
    """Service for extracting text from documents"""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config or {}
        self.cache: Dict[str, str] = {}

    def extract_text(self, path: str) -> str:
        """
        Extract text from a PDF or plain-text file.

        Args:
            path: Path to the document

        Returns:
            Text with pages separated by form feeds

        Raises:
            FileNotFoundError: If the file does not exist
            DocumentTextError: If no text could be extracted
        """
        if not os.path.exists(path):
            raise FileNotFoundError(f"Document not found: {path}")

        if path in self.cache:
            logger.debug(f"Using cached text for {path}")
            return self.cache[path]

        if path.lower().endswith(".pdf"):
            text = self.extract_text_from_pdf(path)
        else:
            with open(path, "r", encoding="utf-8", errors="replace") as f:
                text = f.read()

        if not text or not text.strip():
            raise DocumentTextError(f"No text could be extracted from {path}")

        self.cache[path] = text
        logger.debug(f"Extracted {len(text)} characters from {path}")
        return text

    def extract_text_from_pdf(self, pdf_path: str) -> str:
        try:
            with pdfplumber.open(pdf_path) as pdf:
                pages = [page.extract_text() or "" for page in pdf.pages]
            text = PAGE_SEPARATOR.join(pages)
            if text.strip():
                return text
            logger.debug(f"pdfplumber returned no text for {pdf_path}, trying PyPDF2")
        except Exception as e:
            logger.warning(f"Error extracting text with pdfplumber: {e}")

        try:
            with open(pdf_path, "rb") as f:
                reader = PdfReader(f)
                pages = [page.extract_text() or "" for page in reader.pages]
            return PAGE_SEPARATOR.join(pages)
        except Exception as e:
            raise DocumentTextError(f"Error extracting text from PDF {pdf_path}: {e}") from e

    def extract_structured_chars(self, pdf_path: str) -> List[StructuredChar]:
        """
        Character stream with layout flags, built from pdfplumber character boxes.

        A new line starts when a character's top moves down; a paragraph break is
        a line gap larger than PARAGRAPH_GAP_FACTOR times the character height.
        """
        if not os.path.exists(pdf_path):
            raise FileNotFoundError(f"Document not found: {pdf_path}")

        chars: List[StructuredChar] = []
        try:
            with pdfplumber.open(pdf_path) as pdf:
                for page in pdf.pages:
                    chars.extend(self._page_chars(page.chars))
        except Exception as e:
            raise DocumentTextError(f"Error reading characters from {pdf_path}: {e}") from e

        logger.debug(f"Extracted {len(chars)} structured characters from {pdf_path}")
        return chars

    @staticmethod
    def _page_chars(raw_chars: List[Dict[str, Any]]) -> List[StructuredChar]:
        result: List[StructuredChar] = []
        for i, char in enumerate(raw_chars):
            text = char.get("text", "")
            if not text:
                continue
            ignorable = not text.strip()
            line_break = False
            paragraph_break = False
            space_after = False

            if i + 1 < len(raw_chars):
                nxt = raw_chars[i + 1]
                height = char.get("height") or (char["bottom"] - char["top"]) or 1
                dy = nxt["top"] - char["top"]
                if dy > height * 0.5:
                    line_break = True
                    paragraph_break = dy - height > height * (PARAGRAPH_GAP_FACTOR - 1)
                elif nxt["x0"] - char["x1"] > (char.get("width") or height) * SPACE_GAP_FACTOR:
                    space_after = True
            else:
                paragraph_break = True

            result.append(StructuredChar(
                unicode=text,
                is_ignorable=ignorable,
                is_line_break=line_break,
                is_paragraph_break=paragraph_break,
                has_space_after=space_after,
            ))
        return result

    def clear_cache(self):
        """Clear the text extraction cache"""
        self.cache.clear()
        logger.debug("Document text cache cleared")
