"""
Resolution strategies for numeric citation labels.

Each strategy looks at an immutable MatchContext and either returns matches or
an empty list. The StrategyCoordinator tries them in priority order and stops
at the first non-empty result:

    StrongIdentifier (100)    arXiv / DOI / journal+volume agreement
    VersionMismatch (95)      label beyond the canonical range, identifiers only
    PDFSequenceMapping (80)   position-derived mapping from the document bibliography
    GlobalBestMatch (70)      best composite score over all entries
    CanonicalLabel (60)       exact match on the canonical label field
    IndexFallback (40)        label as 1-based position
    Fuzzy (20)                case-insensitive label match

In strict mode the last three are skipped and a final global sweep runs instead.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from ..constants import SCORE, YEAR_DELTA
from ..models import (
    EXACT, FUZZY, HIGH, INFERRED, LOW, MEDIUM, STRICT_FALLBACK,
    AlignmentReport, CanonicalEntry, MatchedIdentifier, MatchResult, PaperInfo
)
from ..utils.text_utils import year_delta
from .alignment import parse_label_number
from .match_scoring import calculate_composite_score, get_strong_match_kind, normalize_arxiv_id, normalize_doi

logger = logging.getLogger(__name__)

STRONG_KIND_PRIORITY = {"arxiv": 3, "doi": 2, "journal": 1}


@dataclass(frozen=True)
class MatchContext:
    """Everything a strategy needs to resolve one label, computed once per call"""
    pdf_label: str
    normalized_label: str
    entries: Tuple[CanonicalEntry, ...]
    label_map: Dict[str, List[int]]
    index_map: Dict[int, int]
    alignment_report: AlignmentReport
    index_confidence: str
    max_canonical_label: int
    paper_infos: Tuple[PaperInfo, ...] = ()
    pdf_label_map: Optional[Dict[str, List[int]]] = None
    pdf_mapping_confidence: Optional[str] = None
    pdf_mapping_strict: bool = False
    pdf_over_parsed: bool = False
    pdf_over_parsed_ratio: float = 1.0
    pdf_mapping_usable: bool = False
    has_duplicate_labels: bool = False
    prefer_pdf_mapping: bool = False
    prefer_seq_mapping: bool = False
    over_parsed_active: bool = False
    strict_active: bool = False

    @property
    def label_number(self) -> Optional[int]:
        return parse_label_number(self.normalized_label)

    @property
    def exceeds_canonical_range(self) -> bool:
        number = self.label_number
        return number is not None and self.max_canonical_label > 0 and number > self.max_canonical_label

    @property
    def bundles_unlabeled_papers(self) -> bool:
        """Several document papers under one label, and no labels on the canonical side"""
        return self.max_canonical_label == 0 and len(self.paper_infos) > 1

    def result(self, entry_index: int, confidence: str, method: str, **kwargs) -> MatchResult:
        return MatchResult(
            pdf_label=self.pdf_label,
            entry_index=entry_index,
            entry_id=self.entries[entry_index].id,
            confidence=confidence,
            match_method=method,
            **kwargs,
        )


class MatchStrategy:
    """Base class: subclasses set name/priority and implement can_handle/execute"""
    name = "Base"
    priority = 0
    # Position-based guesses are unsafe once the document and canonical lists diverge
    skipped_in_strict_mode = False

    def can_handle(self, ctx: MatchContext) -> bool:
        raise NotImplementedError

    def execute(self, ctx: MatchContext) -> List[MatchResult]:
        raise NotImplementedError


class StrongIdentifierStrategy(MatchStrategy):
    name = "StrongIdentifier"
    priority = 100

    def can_handle(self, ctx: MatchContext) -> bool:
        # bundled papers against an unlabeled list are matched one by one in GlobalBestMatch
        return bool(ctx.paper_infos) and not ctx.exceeds_canonical_range and not ctx.bundles_unlabeled_papers

    def execute(self, ctx: MatchContext) -> List[MatchResult]:
        non_errata = [p for p in ctx.paper_infos if not p.is_erratum]
        papers = non_errata or list(ctx.paper_infos)
        all_indices = list(range(len(ctx.entries)))

        mapped = (ctx.pdf_label_map or {}).get(ctx.normalized_label)
        if mapped:
            low = max(0, min(mapped) - 1)
            high = min(len(ctx.entries) - 1, max(mapped) + 1)
            buckets = [mapped, list(range(low, high + 1))]
        else:
            buckets = [all_indices, all_indices]

        best = None
        for paper in papers:
            for bucket in buckets:
                for i in bucket:
                    strong = get_strong_match_kind(paper, ctx.entries[i])
                    if not strong:
                        continue
                    kind, score = strong
                    if best is None:
                        best = (i, kind, score)
                        continue
                    priority = STRONG_KIND_PRIORITY[kind]
                    best_priority = STRONG_KIND_PRIORITY[best[1]]
                    if priority > best_priority or (priority == best_priority and score > best[2]):
                        best = (i, kind, score)

        if best is None:
            return []

        idx, kind, score = best
        entry = ctx.entries[idx]
        identifier = None
        if kind == "arxiv":
            value = normalize_arxiv_id(entry.arxiv_details)
            identifier = MatchedIdentifier("arxiv", value) if value else None
        elif kind == "doi":
            value = normalize_doi(entry.doi)
            identifier = MatchedIdentifier("doi", value) if value else None
        elif entry.publication_info:
            pub = entry.publication_info
            value = f"{pub.journal_title or ''} {pub.journal_volume or ''}".strip()
            identifier = MatchedIdentifier("journal", value)

        logger.debug(f"Strong {kind} match: [{ctx.pdf_label}] -> idx {idx} (score={score})")
        return [ctx.result(idx, HIGH, EXACT, matched_identifier=identifier, score=score)]


class VersionMismatchStrategy(MatchStrategy):
    name = "VersionMismatch"
    priority = 95

    def can_handle(self, ctx: MatchContext) -> bool:
        return ctx.exceeds_canonical_range and bool(ctx.paper_infos)

    def execute(self, ctx: MatchContext) -> List[MatchResult]:
        for paper in ctx.paper_infos:
            paper_arxiv = normalize_arxiv_id(paper.arxiv_id)
            paper_doi = normalize_doi(paper.doi)
            if not paper_arxiv and not paper_doi:
                continue

            for i, entry in enumerate(ctx.entries):
                if paper_arxiv and paper_arxiv == normalize_arxiv_id(entry.arxiv_details):
                    identifier, via = MatchedIdentifier("arxiv", paper_arxiv), "arXiv ID"
                elif paper_doi and paper_doi == normalize_doi(entry.doi):
                    identifier, via = MatchedIdentifier("doi", paper_doi), "DOI"
                else:
                    continue
                warning = (
                    f"PDF label [{ctx.pdf_label}] exceeds canonical max label "
                    f"{ctx.max_canonical_label}. Matched via {via}."
                )
                logger.warning(warning)
                return [ctx.result(i, HIGH, EXACT, matched_identifier=identifier, version_mismatch_warning=warning)]
        return []


class PDFSequenceMappingStrategy(MatchStrategy):
    name = "PDFSequenceMapping"
    priority = 80

    def can_handle(self, ctx: MatchContext) -> bool:
        return ctx.pdf_label_map is not None and ctx.prefer_seq_mapping and not ctx.over_parsed_active

    def execute(self, ctx: MatchContext) -> List[MatchResult]:
        indices = (ctx.pdf_label_map or {}).get(ctx.normalized_label) or []
        if ctx.pdf_mapping_confidence == HIGH:
            confidence = HIGH
        else:
            confidence = LOW if ctx.pdf_over_parsed else MEDIUM
        method = INFERRED if ctx.pdf_over_parsed else EXACT
        return [ctx.result(idx, confidence, method) for idx in indices]


def best_global_candidate(ctx: MatchContext) -> Optional[Tuple[int, float, bool, bool]]:
    """
    Pick the globally best entry for the label's document papers.

    An arXiv match wins, then the best year-consistent entry when its score is
    within 1 of the overall best, then the overall best.

    Returns:
        (index, score, year_ok, arxiv_ok) or None without candidates
    """
    best_any = None
    best_year_ok = None
    best_arxiv = None

    for paper in ctx.paper_infos:
        paper_arxiv = normalize_arxiv_id(paper.arxiv_id)
        for i, entry in enumerate(ctx.entries):
            score = calculate_composite_score(paper, entry).total
            delta = year_delta(paper.year, entry.year)
            year_ok = delta is not None and delta <= YEAR_DELTA["MAX_ACCEPTABLE"]
            arxiv_ok = bool(paper_arxiv) and paper_arxiv == normalize_arxiv_id(entry.arxiv_details)

            if best_any is None or score > best_any[1]:
                best_any = (i, score, year_ok, arxiv_ok)
            if year_ok and (best_year_ok is None or score > best_year_ok[1]):
                best_year_ok = (i, score, year_ok, arxiv_ok)
            if arxiv_ok and (best_arxiv is None or score > best_arxiv[1]):
                best_arxiv = (i, score, year_ok, True)

    if best_arxiv:
        return best_arxiv
    if best_year_ok and (best_any is None or best_year_ok[1] >= best_any[1] - 1):
        return best_year_ok
    return best_any


def accept_global_candidate(ctx: MatchContext, candidate: Tuple[int, float, bool, bool]) -> bool:
    _, score, year_ok, arxiv_ok = candidate
    first_has_year = bool(ctx.paper_infos and ctx.paper_infos[0].year)
    return (
        arxiv_ok
        or (year_ok and score >= SCORE["YEAR_MATCH_ACCEPT"])
        or (not first_has_year and score >= SCORE["NO_YEAR_ACCEPT"])
    )


def _best_in_range(paper: PaperInfo, ctx: MatchContext, indices, used: set) -> Tuple[int, float]:
    best_idx, best_score = -1, 0
    for i in indices:
        if i in used:
            continue
        score = calculate_composite_score(paper, ctx.entries[i]).total
        if score > best_score:
            best_idx, best_score = i, score
    return best_idx, best_score


def match_papers_individually(ctx: MatchContext) -> List[MatchResult]:
    """
    One match per bundled document paper when the canonical list has no labels.

    Each paper is searched near the position its label suggests, [n-2, 2n+8];
    a distant entry replaces a weak local one only with a non-marginal score.
    """
    number = ctx.label_number
    last = len(ctx.entries) - 1
    local_min = 0 if number is None else max(0, number - 2)
    local_max = last if number is None else min(last, number * 2 + 8)
    local = range(local_min, local_max + 1)

    used = set()
    results = []
    for paper in ctx.paper_infos:
        idx, score = _best_in_range(paper, ctx, local, used)
        if score < SCORE["VALIDATION_ACCEPT"] or score <= SCORE["MARGINAL_THRESHOLD"]:
            distant = [i for i in range(len(ctx.entries)) if not local_min <= i <= local_max]
            global_idx, global_score = _best_in_range(paper, ctx, distant, used)
            if global_score > score and global_score > SCORE["MARGINAL_THRESHOLD"]:
                idx, score = global_idx, global_score
        if idx < 0 or score < SCORE["VALIDATION_ACCEPT"]:
            logger.debug(f"[{ctx.pdf_label}] no entry for {paper.first_author_last_name or '?'} (score={score})")
            continue
        used.add(idx)
        if score >= SCORE["NO_YEAR_ACCEPT"]:
            confidence = HIGH
        elif score >= SCORE["YEAR_MATCH_ACCEPT"]:
            confidence = MEDIUM
        else:
            confidence = LOW
        method = EXACT if score >= SCORE["JOURNAL_EXACT"] else STRICT_FALLBACK
        results.append(ctx.result(idx, confidence, method, score=score))
    return results


class GlobalBestMatchStrategy(MatchStrategy):
    name = "GlobalBestMatch"
    priority = 70

    def can_handle(self, ctx: MatchContext) -> bool:
        no_labels = ctx.max_canonical_label == 0
        return (ctx.prefer_pdf_mapping or no_labels) and bool(ctx.paper_infos)

    def execute(self, ctx: MatchContext) -> List[MatchResult]:
        if ctx.bundles_unlabeled_papers:
            return match_papers_individually(ctx)
        candidate = best_global_candidate(ctx)
        if not candidate or not accept_global_candidate(ctx, candidate):
            return []
        idx, score, year_ok, arxiv_ok = candidate
        confidence = HIGH if arxiv_ok or year_ok else MEDIUM
        logger.debug(f"Global best: [{ctx.pdf_label}] -> idx {idx} (score={score}, year_ok={year_ok})")
        return [ctx.result(idx, confidence, STRICT_FALLBACK, score=score)]


class CanonicalLabelStrategy(MatchStrategy):
    name = "CanonicalLabel"
    priority = 60
    skipped_in_strict_mode = True

    def can_handle(self, ctx: MatchContext) -> bool:
        return not (ctx.prefer_pdf_mapping and ctx.has_duplicate_labels)

    def execute(self, ctx: MatchContext) -> List[MatchResult]:
        return [ctx.result(idx, HIGH, EXACT) for idx in ctx.label_map.get(ctx.normalized_label, [])]


class IndexFallbackStrategy(MatchStrategy):
    name = "IndexFallback"
    priority = 40
    skipped_in_strict_mode = True

    def can_handle(self, ctx: MatchContext) -> bool:
        number = ctx.label_number
        # positions are meaningless when the canonical list carries no labels
        return number is not None and 1 <= number <= ctx.max_canonical_label and number in ctx.index_map

    def execute(self, ctx: MatchContext) -> List[MatchResult]:
        number = ctx.label_number
        idx = ctx.index_map[number]
        if parse_label_number(ctx.entries[idx].label) == number:
            return [ctx.result(idx, HIGH, EXACT)]
        return [ctx.result(idx, ctx.index_confidence, INFERRED)]


class FuzzyMatchStrategy(MatchStrategy):
    name = "Fuzzy"
    priority = 20
    skipped_in_strict_mode = True

    def can_handle(self, ctx: MatchContext) -> bool:
        return True

    def execute(self, ctx: MatchContext) -> List[MatchResult]:
        wanted = ctx.normalized_label.lower()
        for label, indices in ctx.label_map.items():
            if label.lower() == wanted:
                return [ctx.result(idx, MEDIUM, FUZZY) for idx in indices]
        return []


def strict_global_sweep(ctx: MatchContext) -> List[MatchResult]:
    """
    Last-chance global score search used in strict mode.

    Over-parsed documents accept the best candidate even below the usual
    score thresholds.
    """
    if not ctx.paper_infos:
        return []
    candidate = best_global_candidate(ctx)
    if not candidate:
        return []
    force = ctx.over_parsed_active
    if not (accept_global_candidate(ctx, candidate) or force):
        logger.debug(f"Strict sweep rejected candidate for [{ctx.pdf_label}] (score={candidate[1]})")
        return []
    idx, score, _, arxiv_ok = candidate
    return [ctx.result(idx, HIGH if arxiv_ok else MEDIUM, EXACT if arxiv_ok else STRICT_FALLBACK, score=score)]


def default_strategies() -> List[MatchStrategy]:
    return [
        StrongIdentifierStrategy(),
        VersionMismatchStrategy(),
        PDFSequenceMappingStrategy(),
        GlobalBestMatchStrategy(),
        CanonicalLabelStrategy(),
        IndexFallbackStrategy(),
        FuzzyMatchStrategy(),
    ]


class StrategyCoordinator:
    """Runs strategies in descending priority until one returns matches"""

    def __init__(self, strategies: Optional[List[MatchStrategy]] = None):
        self.strategies = sorted(strategies or default_strategies(), key=lambda s: s.priority, reverse=True)

    def match(self, ctx: MatchContext) -> List[MatchResult]:
        for strategy in self.strategies:
            if ctx.strict_active and strategy.skipped_in_strict_mode:
                continue
            if not strategy.can_handle(ctx):
                continue
            results = strategy.execute(ctx)
            if results:
                logger.debug(f"[{ctx.pdf_label}] resolved by {strategy.name}: {len(results)} match(es)")
                return results

        if ctx.strict_active:
            return strict_global_sweep(ctx)
        return []
