"""
Unit tests for document text extraction.
"""

import pytest
import sys
import os

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..', 'src'))

from citeresolve.exceptions import DocumentTextError
from citeresolve.services.pdf_processor import PDFProcessor


def char(text, x0, top, height=10):
    return {"text": text, "x0": x0, "x1": x0 + 5, "top": top, "bottom": top + height, "height": height}


class TestExtractText:
    """Test text extraction from files."""

    def test_plain_text(self, tmp_path):
        path = tmp_path / "paper.txt"
        path.write_text("References\n[1] A. Author, Phys. Rev. D 1, 1 (1970).\n", encoding="utf-8")
        processor = PDFProcessor()
        text = processor.extract_text(str(path))
        assert text.startswith("References")
        assert str(path) in processor.cache

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            PDFProcessor().extract_text(str(tmp_path / "missing.pdf"))

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.txt"
        path.write_text("  \n", encoding="utf-8")
        with pytest.raises(DocumentTextError):
            PDFProcessor().extract_text(str(path))

    def test_clear_cache(self, tmp_path):
        path = tmp_path / "paper.txt"
        path.write_text("text", encoding="utf-8")
        processor = PDFProcessor()
        processor.extract_text(str(path))
        processor.clear_cache()
        assert processor.cache == {}


class TestPageChars:
    """Test layout flags derived from character boxes."""

    def test_layout_flags(self):
        raw = [
            char("A", 0, 0),
            char("B", 5, 0),
            char("C", 20, 0),
            char("D", 0, 12),
            char("E", 0, 40),
        ]
        chars = PDFProcessor._page_chars(raw)
        assert [c.unicode for c in chars] == ["A", "B", "C", "D", "E"]
        assert not chars[0].has_space_after
        assert chars[1].has_space_after
        assert chars[2].is_line_break
        assert not chars[2].is_paragraph_break
        assert chars[3].is_paragraph_break
        assert chars[4].is_paragraph_break

    def test_whitespace_is_ignorable(self):
        chars = PDFProcessor._page_chars([char("A", 0, 0), char(" ", 5, 0), char("B", 10, 0)])
        assert chars[1].is_ignorable
        assert not chars[0].is_ignorable
