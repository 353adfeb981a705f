"""
Citation marker recognition and document reference-list parsing
"""

from .citation_parser import CitationParser, post_process_labels
from .author_year_parser import parse_author_year_citation
from .author_year_references import parse_author_year_references_section
from .references_parser import ReferencesParser
from .structured_references import parse_references_from_structured_data

__all__ = [
    "CitationParser", "post_process_labels", "parse_author_year_citation",
    "parse_author_year_references_section", "ReferencesParser",
    "parse_references_from_structured_data",
]
