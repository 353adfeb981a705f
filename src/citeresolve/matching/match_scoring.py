"""
Scoring between document bibliography entries and canonical entries.

Identifier normalization (arXiv, DOI, journal names), the composite score
used by the numeric matcher, strong-identifier detection and the scoring used
for author-year citations.
"""

import re
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Set, Tuple, Union

from ..constants import AUTHOR_SCORE, SCORE, YEAR_DELTA
from ..models import CanonicalEntry, PaperInfo
from ..utils.author_utils import (
    authors_match, build_different_initials_pattern, build_initials_pattern,
    extract_last_name, normalize_author_compact, normalize_author_name
)
from ..utils.journal_abbreviations import get_abbreviations, get_full_names, normalize_journal_name
from ..utils.text_utils import normalize_year, year_delta


def normalize_arxiv_id(arxiv_id: Union[str, Dict, None]) -> Optional[str]:
    """
    Normalize an arXiv identifier for comparison.

    "arXiv:2301.12345v2", "https://arxiv.org/abs/2301.12345" and
    "2301.12345" all become "2301.12345"; "hep-ph/0101234v1" becomes
    "hep-ph/0101234".

    Args:
        arxiv_id: Identifier string, or a dict with an 'id' key

    Returns:
        Normalized id, or None when the value does not look like an arXiv id
    """
    if not arxiv_id:
        return None
    raw = arxiv_id.get('id') if isinstance(arxiv_id, dict) else arxiv_id
    if not raw or not isinstance(raw, str):
        return None

    normalized = raw.lower().strip()
    normalized = re.sub(r"^https?://(?:www\.)?arxiv\.org/(?:abs|pdf)/", "", normalized)
    normalized = re.sub(r"^arxiv\s*:\s*", "", normalized)
    normalized = re.sub(r"\.pdf$", "", normalized)
    normalized = re.sub(r"v\d{1,2}$", "", normalized)

    if re.match(r"^\d{4}\.\d{4,5}$", normalized) or re.match(r"^[a-z-]+/\d{7}$", normalized):
        return normalized
    if re.match(r"^\d{4}\.\d+", normalized) or re.match(r"^[a-z-]+/\d+", normalized):
        return normalized
    return None


def normalize_doi(doi: Optional[str]) -> Optional[str]:
    if not doi:
        return None
    return re.sub(r"[),.;]+$", "", doi.lower()).strip()


def strip_parenthetical(text: str) -> str:
    return re.sub(r"\s*\([^)]*\)", " ", text).strip()


def normalize_journal(name: Optional[str]) -> Optional[str]:
    """Normalized journal name with all whitespace removed"""
    if not name:
        return None
    normalized = normalize_journal_name(strip_parenthetical(name))
    if not normalized:
        return None
    return re.sub(r"\s+", "", normalized)


def build_journal_variants(name: str) -> Set[str]:
    """Normalized forms of a journal name, its abbreviations and their full names"""
    variants: Set[str] = set()

    def add(value: Optional[str]):
        if not value:
            return
        normalized = normalize_journal_name(strip_parenthetical(value))
        if normalized:
            variants.add(normalized)
            variants.add(re.sub(r"\s+", "", normalized))

    add(name)
    for abbreviation in get_abbreviations(name):
        add(abbreviation)
        for full_name in get_full_names(abbreviation):
            add(full_name)
    for full_name in get_full_names(name):
        add(full_name)
    return variants


def longest_common_prefix_length(a: str, b: str) -> int:
    limit = min(len(a), len(b))
    i = 0
    while i < limit and a[i] == b[i]:
        i += 1
    return i


def journals_similar(a: Optional[str], b: Optional[str]) -> bool:
    """
    Compare two journal strings.

    True when their variant sets intersect (so "Phys. Rev. D" and "Physical
    Review D" agree), or when the compact forms are at least six characters
    long and share all but two characters of prefix.
    """
    if not a or not b:
        return False
    if build_journal_variants(a) & build_journal_variants(b):
        return True

    compact_a = normalize_journal(a)
    compact_b = normalize_journal(b)
    if compact_a and compact_b:
        min_len = min(len(compact_a), len(compact_b))
        if min_len >= 6 and longest_common_prefix_length(compact_a, compact_b) >= min_len - 2:
            return True
    return False


def _entry_volume(entry: CanonicalEntry) -> Optional[str]:
    pub = entry.publication_info
    if not pub:
        return None
    return pub.journal_volume or pub.volume


def _entry_page(entry: CanonicalEntry) -> Optional[str]:
    pub = entry.publication_info
    if not pub:
        return None
    return pub.page_start or pub.artid


def is_journal_match(paper: PaperInfo, entry: CanonicalEntry) -> bool:
    """Journal + volume agreement (and page when both sides have one), or volume + page alone"""
    if not paper.journal_abbrev or not paper.volume or not entry.publication_info:
        return False
    journal_close = journals_similar(paper.journal_abbrev, entry.publication_info.journal_title)
    entry_volume = _entry_volume(entry)
    volume_ok = bool(entry_volume) and str(entry_volume) == str(paper.volume)
    entry_page = _entry_page(entry)
    page_ok = bool(paper.page_start and entry_page) and str(entry_page) == paper.page_start

    if journal_close and volume_ok:
        if paper.page_start and entry_page:
            return page_ok
        return True
    return volume_ok and page_ok


def compute_publication_priority(paper: Optional[PaperInfo], entry: CanonicalEntry) -> int:
    """Volume/page agreement score used to order otherwise equal candidates"""
    if not paper or not entry.publication_info:
        return 0
    pub = entry.publication_info
    score = 0
    if paper.journal_abbrev and journals_similar(paper.journal_abbrev, pub.journal_title):
        score += 1
    volume_match = bool(paper.volume and pub.journal_volume) and str(paper.volume) == str(pub.journal_volume)
    page_match = bool(paper.page_start and pub.page_start) and str(paper.page_start) == str(pub.page_start)
    if volume_match:
        score += 2
    if page_match:
        score += 2
    if volume_match and page_match:
        score += 1
    return score


@dataclass
class CompositeScore:
    total: float = 0
    arxiv_match: bool = False
    doi_match: bool = False
    journal_match: bool = False
    author_match: bool = False
    year_delta: Optional[int] = None
    breakdown: Dict[str, float] = field(default_factory=lambda: {
        'arxiv': 0, 'doi': 0, 'author': 0, 'year': 0, 'page': 0, 'journal': 0,
    })


def _first_author_key(entry: CanonicalEntry) -> Optional[str]:
    if not entry.authors:
        return None
    return normalize_author_compact(extract_last_name(entry.authors[0].lower()))


def calculate_composite_score(paper: PaperInfo, entry: CanonicalEntry) -> CompositeScore:
    """
    Score how well a document bibliography paper agrees with a canonical entry.

    An arXiv or DOI match returns immediately with its fixed score. Otherwise
    the total adds author, year, page and journal components.
    """
    result = CompositeScore()

    paper_arxiv = normalize_arxiv_id(paper.arxiv_id)
    if paper_arxiv and paper_arxiv == normalize_arxiv_id(entry.arxiv_details):
        result.arxiv_match = True
        result.breakdown['arxiv'] = result.total = SCORE["ARXIV_EXACT"]
        return result

    paper_doi = normalize_doi(paper.doi)
    if paper_doi and paper_doi == normalize_doi(entry.doi):
        result.doi_match = True
        result.breakdown['doi'] = result.total = SCORE["DOI_EXACT"]
        return result

    breakdown = result.breakdown
    paper_author = normalize_author_compact(paper.first_author_last_name)
    raw_lower = (paper.raw_text or "").lower()

    if paper_author and entry.authors:
        entry_author = _first_author_key(entry)
        if entry_author and paper_author == entry_author:
            breakdown['author'] = SCORE["AUTHOR_EXACT"]
        elif entry_author and (paper_author in entry_author or entry_author in paper_author):
            breakdown['author'] = SCORE["AUTHOR_PARTIAL"]

    author_text = (entry.author_text or "").lower()
    if paper_author and breakdown['author'] < SCORE["AUTHOR_PARTIAL"] and paper_author in author_text:
        breakdown['author'] = SCORE["AUTHOR_IN_TEXT"]
    if breakdown['author'] < SCORE["AUTHOR_PARTIAL"] and "data group" in raw_lower and "data group" in author_text:
        breakdown['author'] = SCORE["AUTHOR_IN_TEXT"]
    result.author_match = breakdown['author'] > 0

    delta = year_delta(paper.year, entry.year)
    result.year_delta = delta
    if delta is not None:
        if delta == 0:
            breakdown['year'] = SCORE["YEAR_EXACT"]
        elif delta <= YEAR_DELTA["CLOSE"]:
            breakdown['year'] = SCORE["YEAR_CLOSE"]
        elif delta <= YEAR_DELTA["REASONABLE"]:
            breakdown['year'] = SCORE["YEAR_REASONABLE"]
        elif delta <= YEAR_DELTA["MAX_ACCEPTABLE"]:
            breakdown['year'] = SCORE["YEAR_ACCEPTABLE"]

    entry_page = _entry_page(entry)
    if paper.page_start and entry_page and str(entry_page) == paper.page_start:
        breakdown['page'] = SCORE["PAGE_MATCH"]

    result.journal_match = is_journal_match(paper, entry)
    if result.journal_match:
        breakdown['journal'] = SCORE["JOURNAL_MATCH"]

    result.total = sum(breakdown.values())
    return result


def get_strong_match_kind(paper: PaperInfo, entry: CanonicalEntry) -> Optional[Tuple[str, float]]:
    """
    Detect an identifier-grade match.

    Returns:
        ("arxiv", 10), ("doi", 9), ("journal", 6..11) or None
    """
    paper_arxiv = normalize_arxiv_id(paper.arxiv_id)
    if paper_arxiv and paper_arxiv == normalize_arxiv_id(entry.arxiv_details):
        return "arxiv", SCORE["ARXIV_EXACT"]

    paper_doi = normalize_doi(paper.doi)
    if paper_doi and paper_doi == normalize_doi(entry.doi):
        return "doi", SCORE["DOI_EXACT"]

    if not (paper.journal_abbrev and paper.volume and entry.publication_info):
        return None

    journal_close = journals_similar(paper.journal_abbrev, entry.publication_info.journal_title)
    entry_volume = _entry_volume(entry)
    volume_ok = bool(entry_volume) and str(entry_volume) == str(paper.volume)
    entry_page = _entry_page(entry)
    page_ok = bool(paper.page_start and entry_page) and str(entry_page) == paper.page_start
    delta = year_delta(paper.year, entry.year)
    year_ok = delta is not None and delta <= YEAR_DELTA["MAX_ACCEPTABLE"]

    author_ok = False
    if paper.first_author_last_name:
        paper_author = normalize_author_compact(paper.first_author_last_name)
        entry_author = _first_author_key(entry)
        if paper_author and entry_author and (
            paper_author == entry_author or paper_author in entry_author or entry_author in paper_author
        ):
            author_ok = True
        if not author_ok and entry.author_text:
            author_ok = paper.first_author_last_name.lower() in entry.author_text.lower()

    if volume_ok and (page_ok or year_ok) and author_ok:
        score = 6
        if journal_close:
            score += 2
        if page_ok:
            score += 2
        if year_ok:
            score += 1
        return "journal", score
    return None


def _second_author(paper: PaperInfo) -> str:
    names = paper.all_authors_last_names or []
    return names[1].lower() if len(names) > 1 else ""


def _count_matches(targets: List[str], candidates: List[str]) -> int:
    return sum(1 for t in targets if any(authors_match(t, c) for c in candidates))


def score_pdf_paper_infos(
    candidates: List[PaperInfo],
    target_authors: List[str],
    is_et_al: bool = False,
    target_author_initials: Optional[Dict[str, str]] = None,
) -> List[Tuple[PaperInfo, float]]:
    """
    Rank document papers that share a first author and year.

    Candidates are filtered by author count (exact count for one or two named
    authors, more than three for "et al.") and by initials when given, then
    scored by matched authors, unmatched authors and author-order agreement.

    Returns:
        (paper, score) pairs, best first
    """
    if not candidates:
        return []
    if len(candidates) == 1:
        return [(candidates[0], 0)]

    filtered = candidates
    if not is_et_al and len(target_authors) <= 2:
        by_count = [
            c for c in candidates
            if len(c.all_authors_last_names or []) in (0, len(target_authors))
        ]
        filtered = by_count or filtered
    elif is_et_al and len(target_authors) == 1:
        by_count = [
            c for c in candidates
            if len(c.all_authors_last_names or []) == 0 or len(c.all_authors_last_names) > 3
        ]
        filtered = by_count or filtered

    if target_author_initials:
        patterns = [build_initials_pattern(a, i) for a, i in target_author_initials.items()]
        with_initials = [c for c in filtered if any(p.search(c.raw_text) for p in patterns)]
        filtered = with_initials or filtered

    if len(target_authors) == 1:
        # alphabetical by second author, as in RMP-style lists
        filtered = sorted(filtered, key=_second_author)

    targets = [normalize_author_name(a) for a in target_authors]
    scored = []
    for candidate in filtered:
        score = 0
        if candidate.all_authors_last_names:
            names = [normalize_author_name(a) for a in candidate.all_authors_last_names]
            matched_targets = _count_matches(targets, names)
            matched_names = sum(1 for n in names if any(authors_match(t, n) for t in targets))

            order_bonus = 0
            if len(targets) >= 2 and all(authors_match(t, n) for t, n in zip(targets, names)):
                order_bonus = 10

            extra_penalty = 0 if len(targets) == 1 else len(names) - matched_names
            score = matched_targets - extra_penalty - (len(targets) - matched_targets) + order_bonus
        else:
            raw_lower = candidate.raw_text.lower()
            score = sum(1 for t in targets if t in raw_lower)
        scored.append((candidate, score))

    # sorted() is stable, so the second-author ordering survives ties
    return sorted(scored, key=lambda item: item[1], reverse=True)


def select_best_pdf_paper_info(
    candidates: List[PaperInfo],
    target_authors: List[str],
    is_et_al: bool = False,
    target_author_initials: Optional[Dict[str, str]] = None,
) -> Optional[PaperInfo]:
    if not candidates:
        return None
    if len(candidates) == 1:
        return candidates[0]
    scored = score_pdf_paper_infos(candidates, target_authors, is_et_al, target_author_initials)
    return scored[0][0] if scored else candidates[0]


@dataclass
class AuthorYearScore:
    index: int
    score: float
    year_matched: bool
    entry: CanonicalEntry


def score_entry_for_author_year(
    entry: CanonicalEntry,
    index: int,
    target_authors: List[str],
    target_year: Optional[str],
    is_et_al: bool,
    target_author_initials: Optional[Dict[str, str]] = None,
    paper_info: Optional[PaperInfo] = None,
) -> AuthorYearScore:
    """
    Score a canonical entry against an author-year citation.

    Args:
        entry: Canonical entry
        index: Position of the entry in the canonical list
        target_authors: Lowercased surnames from the citation
        target_year: Citation year without letter suffix
        is_et_al: Whether the citation used "et al."
        target_author_initials: Surname -> initials, when the citation gave them
        paper_info: Document bibliography entry used for volume/page checks

    Returns:
        AuthorYearScore
    """
    score = 0.0
    year_matched = False

    entry_year = normalize_year(entry.year)
    if target_year and entry_year:
        if entry_year == target_year:
            score += AUTHOR_SCORE["YEAR_EXACT"]
            year_matched = True
        elif year_delta(entry_year, target_year) == 1:
            score += AUTHOR_SCORE["YEAR_CLOSE"]

    if target_authors and entry.authors:
        entry_authors = [extract_last_name(a).lower() for a in entry.authors]
        match_count = 0.0
        for target in target_authors:
            if target in entry_authors:
                match_count += 1
            elif any(target in a or a in target for a in entry_authors):
                match_count += 0.5

        if match_count > 0:
            first = entry_authors[0]
            if first == target_authors[0] or target_authors[0] in first or first in target_authors[0]:
                score += AUTHOR_SCORE["FIRST_AUTHOR_MATCH"]
            score += min(match_count * AUTHOR_SCORE["ADDITIONAL_MULTIPLIER"], AUTHOR_SCORE["MAX_ADDITIONAL"])

    if target_authors and entry.author_text:
        author_text = entry.author_text.lower()
        hits = [i for i, target in enumerate(target_authors) if target in author_text]
        if hits and score < AUTHOR_SCORE["TEXT_FALLBACK_THRESHOLD"]:
            if hits[0] == 0:
                score += AUTHOR_SCORE["FIRST_AUTHOR_IN_TEXT"]
            score += min(len(hits) * AUTHOR_SCORE["ADDITIONAL_MULTIPLIER"], AUTHOR_SCORE["MAX_TEXT_MATCH"])

    if entry.authors:
        if not is_et_al and len(target_authors) <= 2:
            if len(entry.authors) == len(target_authors):
                score += AUTHOR_SCORE["COUNT_MATCH_BONUS"]
            else:
                score += AUTHOR_SCORE["COUNT_MISMATCH_PENALTY"]
        elif is_et_al:
            if len(entry.authors) > 2:
                score += AUTHOR_SCORE["ET_AL_MATCH_BONUS"]
            else:
                score += AUTHOR_SCORE["ET_AL_MISMATCH_PENALTY"]

    if target_author_initials and entry.author_text:
        for author, initials in target_author_initials.items():
            if build_initials_pattern(author, initials).search(entry.author_text):
                score += AUTHOR_SCORE["INITIALS_MATCH_BONUS"]
            elif author in entry.author_text.lower() and build_different_initials_pattern(author).search(entry.author_text):
                score += AUTHOR_SCORE["DIFFERENT_INITIALS_PENALTY"]

    if paper_info and year_matched and entry.publication_info:
        pub = entry.publication_info
        if paper_info.volume and pub.journal_volume:
            if str(pub.journal_volume) == str(paper_info.volume):
                score += AUTHOR_SCORE["VOLUME_MATCH_BONUS"]
            else:
                score += AUTHOR_SCORE["VOLUME_MISMATCH_PENALTY"]
        if paper_info.page_start and pub.page_start and str(pub.page_start) == str(paper_info.page_start):
            score += AUTHOR_SCORE["PAGE_MATCH_BONUS"]

    return AuthorYearScore(index=index, score=score, year_matched=year_matched, entry=entry)


def find_best_match(
    entries: List[CanonicalEntry],
    score_fn: Callable[[CanonicalEntry, int], Optional[float]],
    min_score: float = 0,
    exclude: Optional[Set[int]] = None,
) -> Optional[Tuple[int, float]]:
    """
    Highest-scoring entry index under score_fn (first one wins ties).

    score_fn returns None to skip an entry.
    """
    best = None
    for i, entry in enumerate(entries):
        if exclude and i in exclude:
            continue
        score = score_fn(entry, i)
        if score is None or score < min_score:
            continue
        if best is None or score > best[1]:
            best = (i, score)
    return best
