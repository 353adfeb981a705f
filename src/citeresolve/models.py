"""
Data model for citation recognition and resolution.

Records produced by the recognizer, the document parser and the matcher are
frozen; derived values are built with dataclasses.replace(). CanonicalEntry
values are supplied by the bibliographic data service and are only read here.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

# Citation format tags
NUMERIC = "numeric"
AUTHOR_YEAR = "author-year"
ARXIV = "arxiv"
MIXED = "mixed"
UNKNOWN = "unknown"
CITATION_TYPES = (NUMERIC, AUTHOR_YEAR, ARXIV, MIXED, UNKNOWN)

# Match confidence levels
HIGH = "high"
MEDIUM = "medium"
LOW = "low"

# Match methods ("overlay" is reserved for host annotation layers and never produced here)
EXACT = "exact"
INFERRED = "inferred"
FUZZY = "fuzzy"
STRICT_FALLBACK = "strict-fallback"
MATCH_METHODS = (EXACT, INFERRED, FUZZY, STRICT_FALLBACK, "label", "index", "overlay")

# Alignment recommendations
USE_CANONICAL_LABEL = "USE_CANONICAL_LABEL"
USE_INDEX_WITH_FALLBACK = "USE_INDEX_WITH_FALLBACK"
USE_INDEX_ONLY = "USE_INDEX_ONLY"


@dataclass(frozen=True)
class CitationLabel:
    """A single reference number or author-year key with its format tag"""
    value: str
    type: str = NUMERIC


@dataclass(frozen=True)
class SubCitation:
    """One distinct work inside a multi-work selection"""
    display_text: str
    labels: List[str]

    def to_dict(self) -> Dict[str, Any]:
        return {'display_text': self.display_text, 'labels': list(self.labels)}


@dataclass(frozen=True)
class ParsedCitation:
    """Represents a citation marker recognized in a piece of text"""
    raw: str
    type: str
    labels: List[str]
    sub_citations: Optional[List[SubCitation]] = None

    def citation_labels(self) -> List[CitationLabel]:
        """Return the labels as tagged CitationLabel values"""
        return [CitationLabel(label, self.type) for label in self.labels]

    def to_dict(self) -> Dict[str, Any]:
        """Convert citation to dictionary format"""
        result = {
            'raw': self.raw,
            'type': self.type,
            'labels': list(self.labels),
        }
        if self.sub_citations:
            result['sub_citations'] = [sub.to_dict() for sub in self.sub_citations]
        return result


@dataclass(frozen=True)
class PaperInfo:
    """One work extracted from the document's own bibliography"""
    raw_text: str
    label: Optional[str] = None
    is_erratum: bool = False
    first_author_last_name: Optional[str] = None
    all_authors_last_names: Optional[List[str]] = None
    author_initials: Optional[Dict[str, str]] = None
    year: Optional[str] = None
    page_start: Optional[str] = None
    arxiv_id: Optional[str] = None
    doi: Optional[str] = None
    journal_abbrev: Optional[str] = None
    volume: Optional[str] = None
    issue: Optional[str] = None

    def has_identifier(self) -> bool:
        return bool(self.arxiv_id or self.doi)

    def to_dict(self) -> Dict[str, Any]:
        """Convert paper info to dictionary format"""
        return {
            'label': self.label,
            'raw_text': self.raw_text,
            'is_erratum': self.is_erratum,
            'first_author_last_name': self.first_author_last_name,
            'all_authors_last_names': self.all_authors_last_names,
            'year': self.year,
            'page_start': self.page_start,
            'arxiv_id': self.arxiv_id,
            'doi': self.doi,
            'journal_abbrev': self.journal_abbrev,
            'volume': self.volume,
            'issue': self.issue,
        }


@dataclass
class DocumentReferenceMapping:
    """Label to paper-count (and paper info) mapping parsed from a numbered bibliography"""
    label_counts: Dict[str, int]
    total_labels: int
    confidence: str
    label_info: Optional[Dict[str, List[PaperInfo]]] = None
    parsed_at: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'label_counts': dict(self.label_counts),
            'total_labels': self.total_labels,
            'confidence': self.confidence,
            'label_info': {
                label: [info.to_dict() for info in infos]
                for label, infos in (self.label_info or {}).items()
            },
            'parsed_at': self.parsed_at,
        }


@dataclass
class AuthorYearReferenceMapping:
    """"author year" key to paper infos, parsed from an alphabetical bibliography"""
    author_year_map: Dict[str, List[PaperInfo]]
    total_references: int
    confidence: str
    parsed_at: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'author_year_map': {
                key: [info.to_dict() for info in infos]
                for key, infos in self.author_year_map.items()
            },
            'total_references': self.total_references,
            'confidence': self.confidence,
            'parsed_at': self.parsed_at,
        }


@dataclass
class PublicationInfo:
    journal_title: Optional[str] = None
    journal_volume: Optional[str] = None
    volume: Optional[str] = None
    page_start: Optional[str] = None
    artid: Optional[str] = None
    year: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'journal_title': self.journal_title,
            'journal_volume': self.journal_volume,
            'volume': self.volume,
            'page_start': self.page_start,
            'artid': self.artid,
            'year': self.year,
        }


@dataclass
class CanonicalEntry:
    """A resolved bibliographic record supplied by the bibliographic data service"""
    id: str
    label: Optional[str] = None
    authors: List[str] = field(default_factory=list)
    author_text: Optional[str] = None
    title: Optional[str] = None
    year: Optional[str] = None
    arxiv_details: Optional[Union[str, Dict[str, Any]]] = None
    doi: Optional[str] = None
    publication_info: Optional[PublicationInfo] = None
    recid: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert entry to dictionary format"""
        return {
            'id': self.id,
            'label': self.label,
            'authors': list(self.authors),
            'author_text': self.author_text,
            'title': self.title,
            'year': self.year,
            'arxiv_details': self.arxiv_details,
            'doi': self.doi,
            'publication_info': self.publication_info.to_dict() if self.publication_info else None,
            'recid': self.recid,
        }


@dataclass
class AlignmentIssue:
    index: int
    type: str  # "missing" or "misaligned"
    expected: str
    actual: Optional[str]


@dataclass
class AlignmentReport:
    """How well canonical labels agree with their 1-based positions"""
    total_entries: int
    aligned_count: int
    label_available_count: int
    issues: List[AlignmentIssue]
    recommendation: str

    @property
    def align_rate(self) -> float:
        return self.aligned_count / self.total_entries if self.total_entries else 0.0

    @property
    def label_rate(self) -> float:
        return self.label_available_count / self.total_entries if self.total_entries else 0.0


@dataclass
class MatchedIdentifier:
    type: str  # "arxiv", "doi" or "journal"
    value: str


@dataclass
class AmbiguousCandidate:
    """A canonical entry that ties with others for the same author-year citation"""
    entry_index: int
    display_text: str
    entry_id: Optional[str] = None
    title: Optional[str] = None
    journal: Optional[str] = None
    volume: Optional[str] = None
    page: Optional[str] = None
    author_count: Optional[int] = None
    second_author: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'entry_index': self.entry_index,
            'entry_id': self.entry_id,
            'display_text': self.display_text,
            'title': self.title,
            'journal': self.journal,
            'volume': self.volume,
            'page': self.page,
            'author_count': self.author_count,
            'second_author': self.second_author,
        }


@dataclass(frozen=True)
class MatchResult:
    """A citation label resolved to one canonical entry"""
    pdf_label: str
    entry_index: int
    confidence: str
    match_method: str
    entry_id: Optional[str] = None
    matched_identifier: Optional[MatchedIdentifier] = None
    year_delta: Optional[int] = None
    version_mismatch_warning: Optional[str] = None
    score: Optional[float] = None
    is_ambiguous: bool = False
    ambiguous_candidates: Optional[List[AmbiguousCandidate]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert match result to dictionary format"""
        result = {
            'pdf_label': self.pdf_label,
            'entry_index': self.entry_index,
            'entry_id': self.entry_id,
            'confidence': self.confidence,
            'match_method': self.match_method,
        }
        if self.matched_identifier:
            result['matched_identifier'] = {
                'type': self.matched_identifier.type,
                'value': self.matched_identifier.value,
            }
        if self.year_delta is not None:
            result['year_delta'] = self.year_delta
        if self.version_mismatch_warning:
            result['version_mismatch_warning'] = self.version_mismatch_warning
        if self.score is not None:
            result['score'] = self.score
        if self.is_ambiguous:
            result['is_ambiguous'] = True
            result['ambiguous_candidates'] = [c.to_dict() for c in self.ambiguous_candidates or []]
        return result


@dataclass
class StructuredChar:
    """One character of the document text with layout flags"""
    unicode: str
    is_ignorable: bool = False
    is_line_break: bool = False
    is_paragraph_break: bool = False
    has_space_after: bool = False
