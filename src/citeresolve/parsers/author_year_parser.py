"""
Author-year citation grammar.

Recognizes the author-year forms common in journals such as Rev. Mod. Phys.:

- "(Author, 2017)", "(Author and Author, 2017)", "(Author et al., 2017)"
- "Author et al. (2017)", "Author (2017)", "A, B, and C (2015)"
- several years for one author group: "(Cho et al., 2011a, 2011b)"
- semicolon separated groups: "(A et al., 2011; B et al., 2015)"
- the same without the opening parenthesis

Each match keeps an initials-aware author list so that "M.-T. Li" and
"G. Li" stay distinct.

Usage:
    from citeresolve.parsers.author_year_parser import parse_author_year_citation

    citation = parse_author_year_citation("Weinstein and Isgur (1982)")
    citation.labels  # ['Weinstein and Isgur 1982', 'Weinstein', 'Isgur', '1982', 'Weinstein, Isgur']
"""

import logging
import re
import unicodedata
from dataclasses import dataclass, field
from typing import List, Optional

from ..models import AUTHOR_YEAR, ParsedCitation, SubCitation

logger = logging.getLogger(__name__)

AUTHOR_LETTER_LOWER = "a-zßäöüàáâãèéêëìíîïòóôõùúûñçłęąśćźżńřčšžěůığş'\\-"
AUTHOR_LETTER_UPPER = "A-ZÄÖÜÀÁÂÃÈÉÊËÌÍÎÏÒÓÔÕÙÚÛÑÇŁĘĄŚĆŹŻŃŘČŠŽŮĞŞ"
AUTHOR_LETTER = AUTHOR_LETTER_UPPER + AUTHOR_LETTER_LOWER

_U = AUTHOR_LETTER_UPPER
_L = AUTHOR_LETTER
_INITIALS = rf"(?:[{_U}]\.(?:\s*-?[{_U}]\.)*\s*)"
_NAME = rf"[{_U}][{_L}]+"
# compound surnames such as "Hiller Blin" or "Van Hove"
_SURNAME = rf"{_NAME}(?:\s+{_NAME})*"
_AUTHOR_SEP = r"(?:\s*,\s*|\s+and\s+|\s*,\s+and\s+)"
_YEAR = r"\d{4}[a-z]?"
_YEARS = rf"{_YEAR}(?:\s*,\s*{_YEAR})*"

SEMICOLON_SEPARATED_YEARS_RE = re.compile(r";\s*[^()]*\d{4}")
SEMICOLON_BEFORE_YEAR_RE = re.compile(r"\d{4}[a-z]?\s*;")
PARENTHESIZED_YEARS_RE = re.compile(r"\([^)]*\d{4}[a-z]?[^)]*\)")
COMPLEX_PAREN_RE = re.compile(r"\(([^()]+(?:\d{4}[a-z]?)[^()]*)\)")
ET_AL_RE = re.compile(r"et\s+al\.?", re.IGNORECASE)
YEAR_RE = re.compile(_YEAR)

# "Author et al. (2009, 2010)", optionally with initials and co-authors
ET_AL_OUTSIDE_RE = re.compile(
    rf"\b({_INITIALS}?{_SURNAME}(?:{_AUTHOR_SEP}{_INITIALS}?{_SURNAME})*)\s+et\s+al\.?\s*\(({_YEARS})\)"
)
# "Author et al., 2009)" with the opening parenthesis lost
ET_AL_INCOMPLETE_RE = re.compile(
    rf"\b({_INITIALS}?{_SURNAME}(?:{_AUTHOR_SEP}{_INITIALS}?{_SURNAME})*)\s+et\s+al\.?\s*,?\s*({_YEAR})\)?"
)
# "A and B, 2015" without parentheses
TWO_AUTHORS_INCOMPLETE_RE = re.compile(
    rf"\b({_INITIALS}?{_SURNAME})\s+and\s+({_INITIALS}?{_SURNAME})\s*,\s*({_YEAR})(?:[;,)]|$)"
)
# "Larionov, Strikman, and Bleicher (2015)"
MULTI_AUTHOR_OUTSIDE_RE = re.compile(
    rf"\b({_SURNAME}(?:\s*,\s*{_SURNAME})*(?:\s*,?\s+and\s+{_SURNAME}))\s*\(({_YEARS})\)"
)
TWO_AUTHORS_RE = re.compile(rf"\b({_SURNAME})\s+and\s+({_SURNAME})\s*\(({_YEAR})\)")
SINGLE_AUTHOR_RE = re.compile(
    r"(?<![Ss]ection\s)(?<![Ff]igure\s)(?<![Tt]able\s)(?<![Ee]quation\s)(?<![Rr]ef\s)(?<![Rr]ef\.\s)"
    rf"\b((?:{_NAME}\s+)*[{_U}][{_L}]{{2,}})\s*\(({_YEAR})\)"
)
INITIAL_NAME_RE = re.compile(
    rf"^({_INITIALS}?)((?:(?:van|von|de|der|del|la|le)\s+)?[{_U}][{_L}]*(?:\s+[{_U}][{_L}]*)*)$"
)

SINGLE_AUTHOR_SKIP_WORDS = {
    "Section", "Figure", "Table", "Equation", "Chapter",
    "Appendix", "Part", "Volume", "Issue",
}

# Capitalized sentence words that can sit in front of a name: "In Hiller Blin (2016)"
LEADING_NON_NAME_WORDS = {
    "After", "Also", "And", "As", "At", "Before", "Both", "But", "By", "Cf", "Compare",
    "Following", "For", "From", "Here", "However", "If", "In", "Like", "Moreover", "Of",
    "On", "Recently", "See", "Similarly", "Since", "The", "Then", "These", "This", "Thus",
    "To", "Using", "When", "Where", "While", "With",
}


@dataclass
class AuthorYearMatch:
    """One author group with one year, as found in the text"""
    full: str
    authors: List[str]
    year: str
    is_et_al: bool
    initials: List[Optional[str]] = field(default_factory=list)

    @property
    def first_initial(self) -> Optional[str]:
        return self.initials[0] if self.initials else None

    def primary_label(self) -> str:
        if self.is_et_al or len(self.authors) > 2:
            return f"{self.authors[0]} et al. {self.year}"
        if len(self.authors) == 2:
            return f"{self.authors[0]} and {self.authors[1]} {self.year}"
        return f"{self.authors[0]} {self.year}"

    def display_text(self) -> str:
        if self.is_et_al or len(self.authors) > 2:
            return f"{self.authors[0]} et al. ({self.year})"
        if len(self.authors) == 2:
            return f"{self.authors[0]} and {self.authors[1]} ({self.year})"
        return f"{self.authors[0]} ({self.year})"


def repair_combining_marks(text: str) -> str:
    """Re-attach combining diacritics that OCR separated from their letter, then NFC"""
    text = re.sub(r"([A-Za-z])\s+([\u0300-\u036f])\s*([A-Za-z])", r"\1\3\2", text)
    text = re.sub(r"([A-Za-z])\s+([\u0300-\u036f])", r"\1\2", text)
    return unicodedata.normalize("NFC", text)


def strip_leading_words(name: str) -> str:
    """Drop sentence words captured in front of a multi-word surname"""
    words = name.split()
    while len(words) > 1 and words[0] in LEADING_NON_NAME_WORDS:
        words = words[1:]
    return " ".join(words)


def extract_author_names_with_initials(authors_str: str) -> List[tuple]:
    """
    Split an author string into (last_name, initials) pairs.

    Handles "Smith", "Hiller Blin", "van der Waals", "G. Li", "M.-T. Li",
    "A and B" and "A, B, and C". Initials are returned without spaces, or None.
    """
    cleaned = re.sub(r"\s+et\s+al\.?$", "", authors_str, flags=re.IGNORECASE).strip()
    parts = re.split(r"\s*,\s+and\s+|\s+and\s+|\s*,\s*", cleaned)

    authors = []
    for part in parts:
        match = INITIAL_NAME_RE.match(part.strip())
        if match:
            initials = re.sub(r"\s+", "", match.group(1).strip()) or None
            authors.append((strip_leading_words(match.group(2)), initials))
    return authors


def parse_author_year_group(group: str) -> List[AuthorYearMatch]:
    """
    Parse one author-year group such as "Cho et al., 2011a, 2011b".

    Returns one match per year, all sharing the same authors.
    """
    group = repair_combining_marks(group)

    years = YEAR_RE.findall(group)
    if not years:
        return []

    is_et_al = bool(ET_AL_RE.search(group))
    first_year = YEAR_RE.search(group)

    authors_part = group[:first_year.start()].strip()
    authors_part = re.sub(r",?\s*et\s+al\.?\s*,?\s*$", "", authors_part, flags=re.IGNORECASE).strip()
    authors_part = re.sub(r",\s*$", "", authors_part).strip()

    author_infos = extract_author_names_with_initials(authors_part)
    if not author_infos:
        return []

    authors = [name for name, _ in author_infos]
    initials = [init for _, init in author_infos]
    return [
        AuthorYearMatch(full=group, authors=list(authors), year=year, is_et_al=is_et_al, initials=list(initials))
        for year in years
    ]


def _overlaps_existing(matches: List[AuthorYearMatch], full: str) -> bool:
    return any(full in m.full or m.full in full for m in matches)


def _is_duplicate(matches: List[AuthorYearMatch], candidate: AuthorYearMatch) -> bool:
    """
    Same first author and year. Different initials ("M.-T. Li" vs "G. Li") are
    distinct works, and so are initials on one side only; without initials
    "Guo (2015)" and "Guo et al. (2015)" stay apart.
    """
    for m in matches:
        if m.authors[0] != candidate.authors[0] or m.year != candidate.year:
            continue
        m_initial = m.first_initial
        c_initial = candidate.first_initial
        if m_initial and c_initial:
            if m_initial == c_initial:
                return True
            continue
        if m_initial or c_initial:
            continue
        if m.is_et_al != candidate.is_et_al:
            continue
        return True
    return False


def _collect_semicolon_groups(text: str) -> List[AuthorYearMatch]:
    matches: List[AuthorYearMatch] = []
    for part in re.split(r"\s*;\s*", text):
        trimmed = re.sub(r"^[(]+|[)]+$", "", part.strip()).strip()
        if not trimmed or not re.search(r"\d{4}", trimmed):
            continue
        for candidate in parse_author_year_group(trimmed):
            if not _is_duplicate(matches, candidate):
                candidate.full = trimmed
                matches.append(candidate)
    return matches


def _add_unique(matches: List[AuthorYearMatch], candidate: AuthorYearMatch):
    if candidate.authors and not _is_duplicate(matches, candidate):
        matches.append(candidate)


def _collect_complex_parens(text: str, matches: List[AuthorYearMatch]):
    for match in COMPLEX_PAREN_RE.finditer(text):
        content = match.group(0)
        inner = match.group(1)
        if not YEAR_RE.search(inner):
            continue
        # Equation numbers and math are not citations
        if re.match(r"^\s*\d+\s*$", inner) or re.search(r"[=+*/^]", inner):
            continue
        for group in re.split(r"\s*;\s*", inner):
            for candidate in parse_author_year_group(group.strip()):
                candidate.full = content
                _add_unique(matches, candidate)


def _author_infos(authors_str: str):
    infos = extract_author_names_with_initials(authors_str.strip())
    return [name for name, _ in infos], [init for _, init in infos]


def _collect_et_al(text: str, matches: List[AuthorYearMatch]):
    for match in ET_AL_OUTSIDE_RE.finditer(text):
        authors, initials = _author_infos(match.group(1))
        years = [y.strip() for y in re.split(r"\s*,\s*", match.group(2)) if re.match(r"^\d{4}[a-z]?$", y.strip())]
        for year in years:
            _add_unique(matches, AuthorYearMatch(match.group(0), authors, year, True, initials))

    for match in ET_AL_INCOMPLETE_RE.finditer(text):
        authors, initials = _author_infos(match.group(1))
        _add_unique(matches, AuthorYearMatch(match.group(0), authors, match.group(2), True, initials))


def _collect_two_authors_incomplete(text: str, matches: List[AuthorYearMatch]):
    for match in TWO_AUTHORS_INCOMPLETE_RE.finditer(text):
        authors1, initials1 = _author_infos(match.group(1))
        authors2, initials2 = _author_infos(match.group(2))
        authors = authors1 + authors2
        if len(authors) < 2:
            continue
        _add_unique(matches, AuthorYearMatch(match.group(0), authors, match.group(3), False, initials1 + initials2))


def _collect_multi_author(text: str, matches: List[AuthorYearMatch]):
    for match in MULTI_AUTHOR_OUTSIDE_RE.finditer(text):
        full = match.group(0)
        if any(m.full == full for m in matches):
            continue
        authors, initials = _author_infos(match.group(1))
        years = [y.strip() for y in re.split(r"\s*,\s*", match.group(2)) if re.match(r"^\d{4}[a-z]?$", y.strip())]
        if len(authors) < 2:
            continue
        for year in years:
            _add_unique(matches, AuthorYearMatch(full, authors, year, False, initials))


def _collect_two_and_single(text: str, matches: List[AuthorYearMatch]):
    for match in TWO_AUTHORS_RE.finditer(text):
        full = match.group(0)
        if _overlaps_existing(matches, full):
            continue
        authors = [strip_leading_words(match.group(1)), strip_leading_words(match.group(2))]
        _add_unique(matches, AuthorYearMatch(full, authors, match.group(3), False))

    for match in SINGLE_AUTHOR_RE.finditer(text):
        full = match.group(0)
        if _overlaps_existing(matches, full):
            continue
        author = strip_leading_words(match.group(1))
        if author in SINGLE_AUTHOR_SKIP_WORDS:
            continue
        _add_unique(matches, AuthorYearMatch(full, [author], match.group(2), False))


def _drop_compound_suffixes(matches: List[AuthorYearMatch]) -> List[AuthorYearMatch]:
    """Drop "Blin (2016)" when "Hiller Blin (2016)" was also found"""
    kept = []
    for idx, m in enumerate(matches):
        first_author = m.authors[0].lower() if m.authors else ""
        is_suffix = False
        for other_idx, other in enumerate(matches):
            if other_idx == idx:
                continue
            other_first = other.authors[0].lower() if other.authors else ""
            if (m.year == other.year and len(other_first) > len(first_author)
                    and other_first.endswith(" " + first_author)):
                is_suffix = True
                break
        if not is_suffix:
            kept.append(m)
    return kept


def _labels_for_match(m: AuthorYearMatch) -> List[str]:
    labels = [m.primary_label()]
    for author in m.authors:
        if author not in labels:
            labels.append(author)
    for author, initials in zip(m.authors, m.initials):
        if initials:
            initial_name = f"{initials} {author}"
            if initial_name not in labels:
                labels.append(initial_name)
    if m.year not in labels:
        labels.append(m.year)
    all_authors = ", ".join(m.authors)
    if len(m.authors) > 1 and all_authors not in labels:
        labels.append(all_authors)
    return labels


def build_author_year_result(matches: List[AuthorYearMatch]) -> ParsedCitation:
    """Merge matches into one ParsedCitation, with sub-citations for distinct works"""
    filtered = _drop_compound_suffixes(matches)

    labels: List[str] = []
    sub_citations: List[SubCitation] = []
    display_parts: List[str] = []

    for m in filtered:
        match_labels = _labels_for_match(m)
        for label in match_labels:
            if label not in labels:
                labels.append(label)
        display = m.display_text()
        sub_citations.append(SubCitation(display_text=display, labels=match_labels))
        if display not in display_parts:
            display_parts.append(display)

    logger.debug(f"Author-year citation: {'; '.join(display_parts)} -> {labels}")
    return ParsedCitation(
        raw="; ".join(display_parts),
        type=AUTHOR_YEAR,
        labels=labels,
        sub_citations=sub_citations if len(sub_citations) > 1 else None,
    )


def parse_author_year_citation(text: str) -> Optional[ParsedCitation]:
    """
    Parse author-year citations from a piece of selected text.

    Args:
        text: Selected text, possibly with unbalanced parentheses

    Returns:
        ParsedCitation of type "author-year", or None when nothing was found
    """
    text = repair_combining_marks(text)

    processed = text
    open_parens = text.count("(")
    close_parens = text.count(")")
    if open_parens > close_parens:
        processed = text + ")" * (open_parens - close_parens)

    has_semicolon_years = bool(SEMICOLON_SEPARATED_YEARS_RE.search(text) or SEMICOLON_BEFORE_YEAR_RE.search(text))
    has_parenthesized_years = bool(PARENTHESIZED_YEARS_RE.search(text))

    # "A et al., 2011; B et al., 2015" without enclosing parentheses
    if has_semicolon_years and not has_parenthesized_years:
        matches = _collect_semicolon_groups(text)
        if matches:
            return build_author_year_result(matches)

    matches: List[AuthorYearMatch] = []
    _collect_complex_parens(processed, matches)
    _collect_et_al(text, matches)
    _collect_two_authors_incomplete(text, matches)
    _collect_multi_author(text, matches)
    _collect_two_and_single(text, matches)

    if not matches:
        return None
    return build_author_year_result(matches)
