"""
Parser for alphabetical (author-year) bibliographies.

Entries look like "Weinstein, J., and N. Isgur, 1982, Phys. Rev. D 25, 2236."
and are keyed by "<first author> <year>" (lowercased) so that an in-text
citation such as "Weinstein and Isgur (1982)" can be looked up directly.
"""

import logging
import re
import unicodedata
from dataclasses import replace
from typing import List, Optional, Tuple

from ..constants import PARSE_CONFIG
from ..models import AuthorYearReferenceMapping, PaperInfo
from ..utils.text_utils import strip_diacritics
from .author_year_parser import AUTHOR_LETTER_LOWER, AUTHOR_LETTER_UPPER, repair_combining_marks
from .references_parser import extract_paper_info, find_references_section_start

logger = logging.getLogger(__name__)

_U = AUTHOR_LETTER_UPPER
_L = AUTHOR_LETTER_LOWER

ENTRY_YEAR_RE = re.compile(
    rf",\s*((?:19|20)\d{{2}}[a-z]?)\s*,\s*(.+?)\.(?=\s*\n|\s*$|\s+[{_U}][{_L}]+,|\s*\n[^\n]*\n\s*[{_U}]|\s+\")"
)
NUMBERED_ENTRY_RE = re.compile(rf"\d+\.\s+([{_U}][{_L}]+),\s*[{_U}][.\-]")
FIRST_AUTHOR_WITH_INITIAL_RE = re.compile(rf"^\s*([{_U}][{_L}]+),\s*[{_U}]\.")
FIRST_AUTHOR_RE = re.compile(rf"^\s*([{_U}][{_L}]+),")

_HYPHENATED = rf"[{_U}][{_L}]+(?:-[{_U}][{_L}]+)?"
_INITIAL_RUN = rf"[{_U}][.\-](?:\s*-?[{_U}][.\-])*"
SURNAME_FIRST_RE = re.compile(rf"({_HYPHENATED}),\s*[{_U}][.\-]")
AND_INITIALS_RE = re.compile(rf"and\s+{_INITIAL_RUN}\s*({_HYPHENATED})", re.IGNORECASE)
COMMA_INITIALS_RE = re.compile(rf",\s+{_INITIAL_RUN}\s*({_HYPHENATED})(?=,|\s+and\b)", re.IGNORECASE)

JOURNAL_PART_RES = [
    re.compile(r"^(.+?)\s+(\d+)\s*,\s*(\d+)"),
    re.compile(r"^(.+?)\s+(\d+)\s+(\d+)"),
]

PAGE_HEADER_RES = [
    re.compile(r"^$"),
    re.compile(r"^[A-Z][a-z]+\s+et\s+al\.:", re.IGNORECASE),
    re.compile(r"^Rev\.\s*Mod\.\s*Phys\.", re.IGNORECASE),
    re.compile(r"^Phys\.\s*Rev\.", re.IGNORECASE),
    re.compile(r"^\d{6}-\d+\s*$"),
    re.compile(r"^Vol\.\s*\d+", re.IGNORECASE),
    re.compile(r"^No\.\s*\d+", re.IGNORECASE),
    re.compile(r"^[A-Z][A-Z\s]+$"),
    re.compile(
        r"^(?:January|February|March|April|May|June|July|August|September|October|November|December)",
        re.IGNORECASE,
    ),
]


def _is_page_header(line: str) -> bool:
    line = line.strip()
    return any(pattern.search(line) for pattern in PAGE_HEADER_RES)


def _entry_boundary(before: str) -> int:
    """Offset in ``before`` where the current entry starts"""
    numbered = list(NUMBERED_ENTRY_RE.finditer(before))
    if numbered:
        return numbered[-1].start(1)
    last_newline = before.rfind("\n")
    if last_newline >= 0 and not _is_page_header(before[last_newline + 1:]):
        return last_newline + 1
    return 0


def _extract_authors(entry: str) -> List[str]:
    """Surnames in order of appearance: "Surname, I." then "and I. Surname" then ", I. Surname" """
    found: List[Tuple[int, str]] = []
    names = set()

    for match in SURNAME_FIRST_RE.finditer(entry):
        name = match.group(1)
        if name not in names:
            names.add(name)
            found.append((match.start(), name))

    for match in AND_INITIALS_RE.finditer(entry):
        name = match.group(1)
        if name not in names:
            names.add(name)
            found.append((match.start(), name))

    for match in COMMA_INITIALS_RE.finditer(entry):
        name = match.group(1)
        if name in names or any(name in existing.split("-") for existing in names if "-" in existing):
            continue
        names.add(name)
        found.append((match.start(), name))

    found.sort(key=lambda item: item[0])
    return [name for _, name in found]


def build_author_year_reference_section(text: str) -> str:
    start = find_references_section_start(text)
    if start < 0:
        return ""
    return text[start:]


def parse_author_year_references(text: str) -> List[PaperInfo]:
    """
    Extract every "Surname, I., ..., YEAR, Journal VOL, PAGE." entry.

    Entries without a journal+volume, arXiv id or DOI are skipped.
    """
    text = unicodedata.normalize("NFC", repair_combining_marks(text))
    references: List[PaperInfo] = []

    for match in ENTRY_YEAR_RE.finditer(text):
        before = text[max(0, match.start() - 300):match.start()]
        entry = before[_entry_boundary(before):]

        first = FIRST_AUTHOR_WITH_INITIAL_RE.search(entry) or FIRST_AUTHOR_RE.search(entry)
        if not first:
            continue
        first_author = first.group(1)

        year = match.group(1)
        journal_part = match.group(2).strip()
        authors = _extract_authors(entry)

        fields = {
            'first_author_last_name': first_author,
            'year': year,
            'all_authors_last_names': authors or [first_author],
        }
        for pattern in JOURNAL_PART_RES:
            journal_match = pattern.search(journal_part)
            if journal_match:
                fields['journal_abbrev'] = journal_match.group(1).strip()
                fields['volume'] = journal_match.group(2)
                fields['page_start'] = journal_match.group(3)
                break
        info = replace(extract_paper_info(entry + match.group(0)[1:]), **fields)

        if not ((info.journal_abbrev and info.volume) or info.arxiv_id or info.doi):
            continue
        references.append(info)

    return references


def get_author_year_key(info: PaperInfo) -> Optional[str]:
    """Lookup key "<first author> <year>" in lowercase, or None without both parts"""
    if not info.first_author_last_name or not info.year:
        return None
    return f"{info.first_author_last_name} {info.year}".lower()


def parse_author_year_references_section(text: str) -> Optional[AuthorYearReferenceMapping]:
    """
    Parse an alphabetical bibliography into an author-year lookup table.

    Args:
        text: Full document text

    Returns:
        AuthorYearReferenceMapping, or None when fewer than five usable entries are found
    """
    ref_text = build_author_year_reference_section(text)
    if not ref_text.strip() or len(ref_text) < PARSE_CONFIG["MIN_AUTHOR_YEAR_TEXT"]:
        logger.debug("No author-year reference section found")
        return None

    references = parse_author_year_references(ref_text)
    if len(references) < PARSE_CONFIG["MIN_AUTHOR_YEAR_REFS"]:
        logger.debug(f"Too few author-year references ({len(references)})")
        return None

    author_year_map = {}
    with_journal = 0
    for info in references:
        key = get_author_year_key(info)
        if not key or not (info.journal_abbrev or info.doi or info.arxiv_id):
            continue
        with_journal += 1
        author_year_map.setdefault(key, []).append(info)
        plain_key = strip_diacritics(key)
        if plain_key != key:
            author_year_map.setdefault(plain_key, []).append(info)

    if len(author_year_map) < PARSE_CONFIG["MIN_AUTHOR_YEAR_REFS"]:
        return None

    ratio = with_journal / len(author_year_map)
    if ratio > 0.7:
        confidence = "high"
    elif ratio > 0.4:
        confidence = "medium"
    else:
        confidence = "low"

    logger.debug(f"Author-year references: {len(references)} entries, {len(author_year_map)} keys, confidence={confidence}")
    return AuthorYearReferenceMapping(
        author_year_map=author_year_map,
        total_references=len(references),
        confidence=confidence,
    )
