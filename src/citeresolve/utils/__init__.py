"""
Utility functions for author names, journal names and text handling
"""

from .author_utils import (
    authors_match, extract_last_name, normalize_author_name,
    normalize_author_compact, parse_author_labels
)
from .journal_abbreviations import get_abbreviations, get_full_names, normalize_journal_name
from .text_utils import normalize_year, strip_diacritics

__all__ = [
    "authors_match", "extract_last_name", "normalize_author_name",
    "normalize_author_compact", "parse_author_labels",
    "get_abbreviations", "get_full_names", "normalize_journal_name",
    "normalize_year", "strip_diacritics",
]
