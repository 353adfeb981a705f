"""
Reference-list parsing from per-character layout data.

When the document text comes with line and paragraph flags for every
character, entries can be split on paragraph breaks instead of guessing
from label patterns in flat text.
"""

import logging
import re
from dataclasses import replace
from typing import List, Optional, Tuple

from ..models import DocumentReferenceMapping, PaperInfo, StructuredChar
from .references_parser import extract_paper_info, find_references_section_start

logger = logging.getLogger(__name__)

ENTRY_LABEL_RE = re.compile(r"^[\[(]?(\d{1,3})[\].)]\s*")
ENTRY_START_LABEL_RE = re.compile(r"^[\[(]?\d{1,3}[\].)]\s*")
ENTRY_START_AUTHOR_RE = re.compile(r"^[A-Z][a-z.]+[,\s]")
SNIPPET_LENGTH = 15
MIN_ENTRY_CHARS = 10


def chars_to_text(chars: List[StructuredChar]) -> str:
    """Flatten characters to text: paragraph break -> blank line, line break -> newline"""
    parts = []
    for char in chars:
        if char.is_ignorable:
            continue
        parts.append(char.unicode)
        if char.is_paragraph_break:
            parts.append("\n\n")
        elif char.is_line_break:
            parts.append("\n")
        elif char.has_space_after:
            parts.append(" ")
    return "".join(parts)


def text_index_to_char_index(chars: List[StructuredChar], text_index: int) -> int:
    """Map an offset in chars_to_text() output back to an index into chars"""
    text_pos = 0
    for i, char in enumerate(chars):
        if char.is_ignorable:
            continue
        if text_pos >= text_index:
            return i
        text_pos += 1
        if char.is_paragraph_break:
            text_pos += 2
        elif char.is_line_break or char.has_space_after:
            text_pos += 1
    return len(chars)


def _snippet(chars: List[StructuredChar], start: int) -> str:
    out = []
    for char in chars[start:]:
        if char.is_ignorable:
            continue
        out.append(char.unicode)
        if len(out) >= SNIPPET_LENGTH:
            break
    return "".join(out)


def _at_line_start(chars: List[StructuredChar], i: int) -> bool:
    for j in range(i - 1, -1, -1):
        if not chars[j].is_ignorable:
            return chars[j].is_line_break or chars[j].is_paragraph_break
    return True


def _is_entry_start(chars: List[StructuredChar], i: int) -> bool:
    snippet = _snippet(chars, i)
    # a label counts only at the start of a line: "(1970)." is not entry 970
    if ENTRY_START_LABEL_RE.match(snippet) and _at_line_start(chars, i):
        return True
    return bool(ENTRY_START_AUTHOR_RE.match(snippet) and i > 0 and chars[i - 1].is_paragraph_break)


def extract_entries_from_chars(chars: List[StructuredChar], start: int) -> List[str]:
    """Split the characters from ``start`` into entry texts"""
    entries: List[str] = []
    current: Optional[List[StructuredChar]] = None

    for i in range(start, len(chars)):
        char = chars[i]
        if char.is_ignorable:
            continue
        if current is None:
            if _is_entry_start(chars, i):
                current = []
            else:
                continue
        elif _is_entry_start(chars, i):
            entries.append(chars_to_text(current))
            current = []

        current.append(char)
        if char.is_paragraph_break:
            entries.append(chars_to_text(current))
            current = None

    if current and len(current) > MIN_ENTRY_CHARS:
        entries.append(chars_to_text(current))
    return entries


def parse_structured_entry(text: str) -> Optional[Tuple[Optional[str], PaperInfo]]:
    text = text.strip()
    if len(text) < MIN_ENTRY_CHARS:
        return None
    label = None
    match = ENTRY_LABEL_RE.match(text)
    if match:
        label = match.group(1)
        text = text[match.end():]
    return label, replace(extract_paper_info(text), label=label)


def parse_references_from_structured_data(chars: List[StructuredChar]) -> Optional[DocumentReferenceMapping]:
    """
    Parse a numbered bibliography from layout-annotated characters.

    Returns:
        DocumentReferenceMapping, or None without a reference section or with fewer than two entries
    """
    text = chars_to_text(chars)
    section_start = find_references_section_start(text)
    if section_start < 0:
        logger.debug("No reference section in structured text")
        return None

    char_start = text_index_to_char_index(chars, section_start)
    label_counts = {}
    label_info = {}
    total = 0
    for entry_text in extract_entries_from_chars(chars, char_start):
        parsed = parse_structured_entry(entry_text)
        if not parsed:
            continue
        label, info = parsed
        total += 1
        if label is None:
            continue
        label_counts[label] = label_counts.get(label, 0) + 1
        label_info.setdefault(label, []).append(info)

    if total < 2:
        return None

    confidence = "high" if total >= 10 else "medium"
    logger.debug(f"Structured reference list: {total} entries, {len(label_counts)} labels")
    return DocumentReferenceMapping(
        label_counts=label_counts,
        label_info=label_info,
        total_labels=total,
        confidence=confidence,
    )
