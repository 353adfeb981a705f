"""
Author name normalization shared by the citation recognizer and the match scorer.

Handles Western names ("J. Smith", "Smith, J."), CJK/Japanese/Korean names and
collaboration names ("ATLAS Collaboration").

Usage:
    from citeresolve.utils.author_utils import extract_last_name, authors_match

    extract_last_name("Smith, J.")      # 'smith'
    authors_match("Müller", "Muller")   # True
"""

import re
from typing import Dict, List, Optional

from .text_utils import strip_diacritics

AUTHOR_UPPER = "A-ZÀ-ÖØ-ÞĐŁŐŰİĞŞ"
AUTHOR_LOWER = "a-zà-öø-ÿßđłőűığş"
AUTHOR_ALL = AUTHOR_UPPER + AUTHOR_LOWER + "'’‘-"

_U = AUTHOR_UPPER
_A = AUTHOR_ALL
_NAME = rf"[{_U}][{_A}]+(?:\s+[{_U}][{_A}]+)*"

RE_INITIAL_AUTHOR = re.compile(
    rf"^([{_U}]\.(?:\s*-?[{_U}]\.)*)\s+({_NAME})$", re.IGNORECASE
)
RE_AUTHOR_YEAR_COMBINED = re.compile(
    rf"^({_NAME})(?:\s+et\s+al\.)?\s+(\d{{4}}[a-z]?)$", re.IGNORECASE
)
RE_TWO_AUTHORS_YEAR = re.compile(
    rf"^({_NAME})\s+and\s+({_NAME})\s+(\d{{4}}[a-z]?)$", re.IGNORECASE
)
RE_YEAR_STANDALONE = re.compile(r"^\d{4}[a-z]?$")
RE_AUTHOR_STANDALONE = re.compile(rf"^{_NAME}$", re.IGNORECASE)
RE_COMMA_AUTHORS = re.compile(
    rf"^[{_U}][{_A}]+(?:,\s*[{_U}][{_A}]+)+$", re.IGNORECASE
)
RE_YEAR_WITH_SUFFIX = re.compile(r"\d{4}[a-z]$", re.IGNORECASE)
RE_ET_AL = re.compile(r"et\s+al\.?", re.IGNORECASE)

COLLABORATION_RE = re.compile(
    r"\b(collaboration|collab\.?|group|team|consortium|experiment)\b", re.IGNORECASE
)
CJK_NAME_RE = re.compile(r"^([\u4e00-\u9fff\u3400-\u4dbf])([\u4e00-\u9fff\u3400-\u4dbf]{1,3})$")
JAPANESE_NAME_RE = re.compile(r"^([\u4e00-\u9fff]{1,3})([\u3040-\u309f\u30a0-\u30ff\u4e00-\u9fff]+)$")
KOREAN_NAME_RE = re.compile(r"^([\uac00-\ud7af]{1,2})([\uac00-\ud7af]{1,3})$")

GERMAN_DIGRAPHS = (("ss", "ß"), ("ae", "ä"), ("oe", "ö"), ("ue", "ü"))


def build_different_initials_pattern(author: str) -> re.Pattern:
    """Match the author name preceded or followed by any initials"""
    return re.compile(
        rf"(?:[A-Z]\.(?:\s*-?[A-Z]\.)*\s*{author}|{author},\s*[A-Z]\.(?:\s*-?[A-Z]\.)*)",
        re.IGNORECASE,
    )


def build_initials_pattern(author: str, initials: str) -> re.Pattern:
    """Match the author name with exactly these initials, in either order"""
    escaped = re.escape(initials)
    return re.compile(rf"(?:{escaped}\s*{author}|{author},\s*{escaped})", re.IGNORECASE)


def normalize_author_name(name: str) -> str:
    """Lowercase and strip diacritics"""
    return strip_diacritics(name.lower())


def normalize_author_compact(name: Optional[str]) -> Optional[str]:
    """Lowercase and drop dots, whitespace and hyphens; None for empty input"""
    if not name:
        return None
    return re.sub(r"[.\s-]", "", name.lower()).strip()


def _germanize(name: str) -> str:
    for digraph, umlaut in GERMAN_DIGRAPHS:
        name = name.replace(digraph, umlaut)
    return name


def authors_match(name1: str, name2: str) -> bool:
    """
    Compare two author names loosely.

    Exact equality, equality after diacritic removal, or equality after
    replacing German digraphs (ss, ae, oe, ue) with ß/umlauts on either side.
    Argument order does not matter. Diacritics are stripped before the
    digraph step, so "Mueller" does not match "Müller".
    """
    if name1 == name2:
        return True

    norm1 = normalize_author_name(name1)
    norm2 = normalize_author_name(name2)
    if norm1 == norm2:
        return True

    return _germanize(norm1) == norm2 or norm1 == _germanize(norm2)


def is_collaboration(author: str) -> bool:
    return bool(COLLABORATION_RE.search(author.lower()))


def extract_collaboration_name(author: str) -> str:
    """'ATLAS Collaboration' -> 'atlas'"""
    match = re.match(r"^([A-Za-z0-9\s-]+?)\s+(?:collaboration|collab\.?|group)", author, re.IGNORECASE)
    if match:
        return match.group(1).lower().strip()
    return re.sub(
        r"\s+(collaboration|collab\.?|group|team|consortium|experiment).*$",
        "",
        author.lower(),
        flags=re.IGNORECASE,
    ).strip()


def extract_last_name(author_str: str) -> str:
    """
    Extract a lowercased last name from an author string.

    Args:
        author_str: Author name in any common format

    Returns:
        Lowercased surname, collaboration token or leading ideographs
    """
    author = (author_str or "").strip()
    if not author:
        return ""

    if is_collaboration(author):
        return extract_collaboration_name(author)

    for pattern in (CJK_NAME_RE, JAPANESE_NAME_RE, KOREAN_NAME_RE):
        match = pattern.match(author)
        if match:
            return match.group(1).lower()

    # "Last, First"
    if "," in author:
        return author.split(",")[0].strip().lower().replace(".", "")

    parts = author.split()
    if len(parts) > 1:
        for part in reversed(parts):
            part = re.sub(r"[,;]$", "", part.replace(".", ""))
            if len(part) > 1 and not re.match(r"^[A-Z]$", part, re.IGNORECASE):
                return part.lower()

    return re.sub(r"[,;]$", "", author.lower().replace(".", ""))


def _add_author(authors: List[str], author: str):
    if author and author not in authors:
        authors.append(author)


def parse_author_labels(labels: List[str]) -> Dict:
    """
    Turn author-year recognizer labels into match targets.

    Args:
        labels: Labels such as ["Guo et al. 2015", "Guo", "M.-T. Li", "2015"]

    Returns:
        Dict with 'authors' (lowercased, unique, in order), 'author_initials'
        (author -> initials without spaces), 'year' and 'is_et_al'
    """
    authors: List[str] = []
    author_initials: Dict[str, str] = {}
    year = None
    is_et_al = False

    for label in labels:
        match = RE_INITIAL_AUTHOR.match(label)
        if match:
            author = match.group(2).lower()
            _add_author(authors, author)
            author_initials[author] = re.sub(r"\s+", "", match.group(1))
            continue

        # "A and B 1982" before "A 1982": the combined pattern would swallow "and"
        match = RE_TWO_AUTHORS_YEAR.match(label)
        if match:
            _add_author(authors, match.group(1).lower())
            _add_author(authors, match.group(2).lower())
            year = match.group(3)
            continue

        match = RE_AUTHOR_YEAR_COMBINED.match(label)
        if match:
            _add_author(authors, match.group(1).lower())
            year = match.group(2)
            is_et_al = bool(RE_ET_AL.search(label))
            continue

        if RE_YEAR_STANDALONE.match(label):
            year = label
            continue

        if RE_AUTHOR_STANDALONE.match(label):
            _add_author(authors, label.lower())
            continue

        if RE_COMMA_AUTHORS.match(label):
            for part in re.split(r",\s*", label):
                _add_author(authors, part.strip().lower())

    return {
        'authors': authors,
        'author_initials': author_initials,
        'year': year,
        'is_et_al': is_et_al,
    }
