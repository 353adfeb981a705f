"""
Top-level entry points: recognize citation markers and resolve their labels.

Usage:
    from citeresolve.resolver import recognize, resolve

    citation = recognize("as shown in [3-5]")
    matches = resolve(citation.labels, entries, document_mapping=mapping)
"""

import logging
from typing import List, Optional, Sequence

from .matching.label_matcher import LabelMatcher, ResolutionCache
from .models import (
    AUTHOR_YEAR, AuthorYearReferenceMapping, CanonicalEntry, DocumentReferenceMapping,
    MatchResult, ParsedCitation
)
from .parsers.citation_parser import get_citation_parser
from .utils.author_utils import parse_author_labels

logger = logging.getLogger(__name__)


def recognize(
    text: str,
    enable_fuzzy: bool = False,
    max_known_label: Optional[int] = None,
    prefer_author_year: bool = False,
) -> Optional[ParsedCitation]:
    """
    Recognize the citation marker in a piece of selected text.

    Only the bracketed, parenthesized, bare-number and author-year forms are
    recognized here. Superscripts ("¹²³") and bracketed identifiers
    ("[arXiv:2301.12345]", "[hep-ph/0101234]") give None, although
    CitationParser.parse_text() finds them in running text.

    Args:
        text: Selected text
        enable_fuzzy: Enable heuristics for broken text layers
        max_known_label: Largest known label, used to repair concatenated ranges
        prefer_author_year: Try the author-year grammar first

    Returns:
        ParsedCitation, or None when nothing was recognized
    """
    if not text or not text.strip():
        return None
    return get_citation_parser().parse_selection(
        text,
        enable_fuzzy=enable_fuzzy,
        max_known_label=max_known_label,
        prefer_author_year=prefer_author_year,
    )


def _is_author_year(labels: Sequence[str]) -> bool:
    """Labels are author-year when any of them names an author"""
    return bool(parse_author_labels([label.strip() for label in labels])["authors"])


def resolve(
    labels: Sequence[str],
    entries: Sequence[CanonicalEntry],
    document_mapping: Optional[DocumentReferenceMapping] = None,
    author_year_mapping: Optional[AuthorYearReferenceMapping] = None,
    cache: Optional[ResolutionCache] = None,
    document_id: Optional[str] = None,
    citation_type: Optional[str] = None,
) -> List[MatchResult]:
    """
    Resolve recognized labels to canonical entries.

    Author-year labels are resolved together as one citation; numeric labels
    are resolved one by one and de-duplicated.

    Args:
        labels: Labels from a ParsedCitation
        entries: Canonical reference list
        document_mapping: Mapping parsed from the document's numbered bibliography
        author_year_mapping: Mapping parsed from an alphabetical bibliography
        cache: Optional cache that keeps matchers per document id
        document_id: Cache key; required for the cache to be used
        citation_type: Type tag from the ParsedCitation; detected from the labels when omitted

    Returns:
        List of MatchResult, empty when nothing matched
    """
    if not labels or not entries:
        return []

    if cache is not None and document_id:
        matcher = cache.get_matcher(document_id, entries)
    else:
        matcher = LabelMatcher(entries)

    author_year = citation_type == AUTHOR_YEAR if citation_type else _is_author_year(labels)

    # a shared matcher must not switch mappings between applying one and matching against it
    with matcher.lock:
        if document_mapping is not None and matcher.document_mapping is not document_mapping:
            matcher.set_document_mapping(document_mapping)
        if author_year_mapping is not None and matcher.author_year_mapping is not author_year_mapping:
            matcher.set_author_year_mapping(author_year_mapping)

        if author_year:
            logger.debug(f"Resolving author-year labels {list(labels)}")
            return matcher.match_author_year(labels)

        logger.debug(f"Resolving numeric labels {list(labels)}")
        return matcher.match_all(labels)
