"""
Small text helpers shared by the recognizer, the reference parsers and the matcher
"""

import re
import unicodedata
from typing import Optional

YEAR_SUFFIX_RE = re.compile(r"^(\d{4})[a-z]$", re.IGNORECASE)
DIACRITIC_RE = re.compile(r"[\u0300-\u036f]")


def strip_diacritics(text: str) -> str:
    """Remove combining diacritical marks (NFD decomposition)"""
    if not text:
        return ""
    return DIACRITIC_RE.sub("", unicodedata.normalize("NFD", text))


def normalize_year(year: Optional[str]) -> Optional[str]:
    """Drop a trailing letter suffix from a year ("2011a" -> "2011")"""
    if not year:
        return None
    year = str(year).strip()
    match = YEAR_SUFFIX_RE.match(year)
    return match.group(1) if match else year


def parse_year(year) -> Optional[int]:
    """Return the leading four-digit year as an int, or None"""
    if year is None:
        return None
    match = re.match(r"\s*(\d{4})", str(year))
    return int(match.group(1)) if match else None


def year_delta(year1, year2) -> Optional[int]:
    """Absolute difference between two years, None when either is unknown"""
    y1 = parse_year(year1)
    y2 = parse_year(year2)
    if y1 is None or y2 is None:
        return None
    return abs(y1 - y2)


def collapse_whitespace(text: str) -> str:
    return re.sub(r"\s+", " ", text or "").strip()
