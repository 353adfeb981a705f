"""
Label matcher: resolves citation labels found in a document to entries of the
canonical reference list.

Usage:
    matcher = LabelMatcher(entries)
    matcher.set_document_mapping(mapping)   # optional, from ReferencesParser
    results = matcher.match_all(["3", "7"])

    matcher.set_author_year_mapping(ay_mapping)   # optional
    results = matcher.match_author_year(["Guo et al. 2015", "Guo", "2015"])
"""

import logging
import re
import threading
from collections.abc import Mapping
from dataclasses import replace
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..config.settings import get_config
from ..constants import MATCH_CONFIG, SCORE
from ..models import (
    EXACT, FUZZY, HIGH, LOW, MEDIUM, USE_CANONICAL_LABEL,
    AlignmentReport, AmbiguousCandidate, AuthorYearReferenceMapping, CanonicalEntry,
    DocumentReferenceMapping, MatchResult, PaperInfo
)
from ..utils.author_utils import (
    RE_YEAR_WITH_SUFFIX, build_different_initials_pattern, build_initials_pattern,
    extract_last_name, parse_author_labels
)
from ..utils.text_utils import normalize_year, strip_diacritics
from .alignment import diagnose_alignment, index_match_confidence, parse_label_number
from .match_scoring import (
    calculate_composite_score, compute_publication_priority, find_best_match, journals_similar,
    normalize_arxiv_id, normalize_doi, score_entry_for_author_year, score_pdf_paper_infos,
    select_best_pdf_paper_info
)
from .strategies import MatchContext, StrategyCoordinator

logger = logging.getLogger(__name__)

PAREN_YEAR_RE = re.compile(r"\((\d{4}[a-z]?)\)")
INITIALS_MATCH_SCORE = 20
DIFFERENT_INITIALS_SCORE = -15


class LabelMatcher:
    """
    Matches citation labels against one canonical reference list.

    Holds only maps derived from the entries and from the optional document
    mappings; everything is rebuilt when a mapping is supplied again.
    ``lock`` guards a mapping swap together with the matches that depend on it.
    """

    def __init__(self, entries: Sequence[CanonicalEntry], config: Optional[Dict[str, Any]] = None):
        self.entries = list(entries)
        self.config = config or get_config()
        self.matching_config = self.config.get("matching", {})
        self.coordinator = StrategyCoordinator()
        self.lock = threading.RLock()

        self.label_map: Dict[str, List[int]] = {}
        self.index_map: Dict[int, int] = {}
        self.has_duplicate_labels = False
        self._alignment_report: Optional[AlignmentReport] = None

        self.document_mapping: Optional[DocumentReferenceMapping] = None
        self.pdf_label_map: Optional[Dict[str, List[int]]] = None
        self.pdf_mapping_strict = False
        self.pdf_over_parsed = False
        self.pdf_over_parsed_ratio = 1.0
        self.pdf_mapping_usable = False
        self.pdf_missing_by_label: Dict[str, List[PaperInfo]] = {}

        self.author_year_mapping: Optional[AuthorYearReferenceMapping] = None

        self._build_maps()

    def _build_maps(self):
        self.label_map = {}
        self.index_map = {}
        self.has_duplicate_labels = False

        for idx, entry in enumerate(self.entries):
            label = (entry.label or "").strip()
            if label:
                indices = self.label_map.setdefault(label, [])
                indices.append(idx)
                if len(indices) > 1:
                    self.has_duplicate_labels = True
            self.index_map[idx + 1] = idx

        self.max_label = max(
            (n for n in (parse_label_number(e.label) for e in self.entries) if n is not None),
            default=0,
        )

    def diagnose_alignment(self) -> AlignmentReport:
        if self._alignment_report is None:
            self._alignment_report = diagnose_alignment(self.entries)
        return self._alignment_report

    def __len__(self) -> int:
        return len(self.entries)

    def get_entry(self, index: int) -> Optional[CanonicalEntry]:
        if 0 <= index < len(self.entries):
            return self.entries[index]
        return None

    def set_document_mapping(self, mapping: DocumentReferenceMapping):
        """
        Apply a mapping parsed from the document's numbered bibliography.

        Raises:
            ValueError: If the mapping's label_counts is not a mapping
        """
        if not isinstance(mapping.label_counts, Mapping):
            raise ValueError(
                f"label_counts must be a mapping of label to paper count, got {type(mapping.label_counts).__name__}"
            )

        with self.lock:
            self.document_mapping = mapping
            self._alignment_report = None
            self._rebuild_sequence_map()

            report = self.diagnose_alignment()
            self.pdf_mapping_usable = (
                self.pdf_mapping_strict
                or report.recommendation != USE_CANONICAL_LABEL
                or self.has_duplicate_labels
            )
            logger.debug(
                f"Applied document mapping with {mapping.total_labels} labels; "
                f"recommendation={report.recommendation}, strict={self.pdf_mapping_strict}, "
                f"usable={self.pdf_mapping_usable}, duplicates={self.has_duplicate_labels}"
            )

    def set_author_year_mapping(self, mapping: AuthorYearReferenceMapping):
        with self.lock:
            self.author_year_mapping = mapping
        logger.debug(
            f"Applied author-year mapping with {len(mapping.author_year_map)} keys, confidence={mapping.confidence}"
        )

    def has_document_mapping(self) -> bool:
        return bool(self.pdf_label_map)

    def has_author_year_mapping(self) -> bool:
        return bool(self.author_year_mapping and self.author_year_mapping.author_year_map)

    def get_mismatch_for_label(self, label: str) -> Optional[Dict[str, List[PaperInfo]]]:
        """Document papers under ``label`` that matched no canonical entry, or None"""
        missing = self.pdf_missing_by_label.get(label)
        if not missing:
            return None
        return {"missing": list(missing)}

    def _validate_window(
        self,
        papers: List[PaperInfo],
        start: int,
        count: int,
        buffer: int,
        used: set,
        matched_papers: set,
    ) -> int:
        """Match papers against entries[start:start+count+buffer]; return how many matched"""
        end = min(start + count + buffer, len(self.entries))
        window = self.entries[start:end]
        matched = 0
        for paper_idx, paper in enumerate(papers):
            if paper_idx in matched_papers:
                continue
            best = find_best_match(
                window,
                lambda entry, _: calculate_composite_score(paper, entry).total,
                min_score=SCORE["VALIDATION_ACCEPT"],
                exclude=used,
            )
            if best is not None:
                best_idx, best_score = best
                used.add(best_idx)
                matched_papers.add(paper_idx)
                matched += 1
                logger.debug(
                    f"Validated {paper.first_author_last_name or '?'} ({paper.year or '?'}) "
                    f"-> idx {start + best_idx} (score={best_score})"
                )
        return matched

    def _rebuild_sequence_map(self):
        """
        Walk document labels in numeric order, assigning consecutive canonical
        positions to each label according to its (validated) paper count.
        """
        mapping = self.document_mapping
        self.pdf_label_map = {}
        self.pdf_mapping_strict = False
        self.pdf_over_parsed = False
        self.pdf_over_parsed_ratio = 1.0
        self.pdf_missing_by_label = {}

        numbers = sorted({n for n in (parse_label_number(l) for l in mapping.label_counts) if n is not None})
        labels = [str(n) for n in numbers]
        counts = [mapping.label_counts.get(label) or 1 for label in labels]
        adjusted = list(counts)
        total_canonical = len(self.entries)
        total_expected = sum(counts)
        label_info = mapping.label_info or {}
        validated = False

        if label_info:
            validated = True
            buffer = self.matching_config.get("window_buffer", 3)
            retry_buffer = self.matching_config.get("window_retry_buffer", 8)
            current = 0

            for i, label in enumerate(labels):
                infos = label_info.get(label) or []
                non_errata = [p for p in infos if not p.is_erratum]
                count = len(non_errata) if non_errata else counts[i]

                if not infos:
                    current += count
                    continue

                used = set()
                matched_papers = set()
                matched = self._validate_window(non_errata, current, count, buffer, used, matched_papers)
                if matched == 0:
                    matched = self._validate_window(non_errata or infos, current, count, retry_buffer, used, matched_papers)

                effective = count
                if matched == 0 and count > 0:
                    effective = min(count, max(1, total_canonical - current))
                    logger.debug(f"Label [{label}]: nothing validated, reserving {effective} slot(s)")
                adjusted[i] = effective

                unmatched = [p for k, p in enumerate(non_errata) if k not in matched_papers]
                if unmatched:
                    self.pdf_missing_by_label[label] = unmatched

                if current >= total_canonical:
                    logger.debug(f"Canonical list exhausted at label [{label}]")
                    break
                current += effective

        elif total_expected > total_canonical:
            excess = total_expected - total_canonical
            absorbed = 0
            for i, count in enumerate(counts):
                if absorbed >= excess:
                    break
                if count > 1:
                    adjusted[i] = count - 1
                    absorbed += 1

        position = 0
        for label, count in zip(labels, adjusted):
            indices = []
            while len(indices) < count and position < total_canonical:
                indices.append(position)
                position += 1
            if indices:
                self.pdf_label_map[label] = indices

        logger.debug(
            f"Sequence map: {len(self.pdf_label_map)} labels covering {position}/{total_canonical} entries"
        )

        if not validated:
            return

        final_total = sum(adjusted)
        mismatch = abs(final_total - total_canonical)
        ratio = final_total / total_canonical if total_canonical else 1.0
        mismatch_detected = (
            mismatch >= self.matching_config.get("strict_mismatch_count", 5)
            or ratio < self.matching_config.get("strict_ratio", 0.85)
        )

        well_aligned = False
        if total_canonical:
            report = diagnose_alignment(self.entries)
            well_rate = self.matching_config.get("well_aligned_rate", 0.95)
            well_aligned = report.align_rate >= well_rate and report.label_rate >= well_rate

        coverage = position / total_canonical if total_canonical else 0.0
        self.pdf_over_parsed = final_total > total_canonical
        self.pdf_over_parsed_ratio = ratio
        self.pdf_mapping_strict = (
            self.matching_config.get("strict_mode_enabled", True)
            and mismatch_detected
            and not well_aligned
            and coverage >= self.matching_config.get("min_strict_coverage", 0.5)
            and not self.pdf_over_parsed
        )
        if self.pdf_over_parsed:
            logger.warning(
                f"Document bibliography over-parsed: {final_total} papers for {total_canonical} canonical entries"
            )
        logger.debug(
            f"Mapping diff: validated={final_total}, canonical={total_canonical}, mismatch={mismatch}, "
            f"ratio={ratio:.3f}, coverage={coverage:.3f}, strict={self.pdf_mapping_strict}"
        )

    def build_context(self, pdf_label: str) -> MatchContext:
        normalized = pdf_label.strip()
        report = self.diagnose_alignment()

        infos: List[PaperInfo] = []
        if self.document_mapping and self.document_mapping.label_info:
            raw = self.document_mapping.label_info.get(normalized) or []
            infos = [p for p in raw if not p.is_erratum] or list(raw)

        over_ratio = self.matching_config.get("over_parsed_ratio", 1.05)
        over_parsed_active = self.pdf_over_parsed and self.pdf_over_parsed_ratio > over_ratio
        has_map = self.pdf_label_map is not None
        no_labels = self.max_label == 0
        prefer_pdf = has_map and not no_labels and (
            self.pdf_mapping_strict
            or self.pdf_mapping_usable
            or self.has_duplicate_labels
            or report.recommendation != USE_CANONICAL_LABEL
        )

        return MatchContext(
            pdf_label=normalized,
            normalized_label=normalized,
            entries=tuple(self.entries),
            label_map=self.label_map,
            index_map=self.index_map,
            alignment_report=report,
            index_confidence=index_match_confidence(report),
            max_canonical_label=self.max_label,
            paper_infos=tuple(infos),
            pdf_label_map=self.pdf_label_map,
            pdf_mapping_confidence=self.document_mapping.confidence if self.document_mapping else None,
            pdf_mapping_strict=self.pdf_mapping_strict,
            pdf_over_parsed=self.pdf_over_parsed,
            pdf_over_parsed_ratio=self.pdf_over_parsed_ratio,
            pdf_mapping_usable=self.pdf_mapping_usable,
            has_duplicate_labels=self.has_duplicate_labels,
            prefer_pdf_mapping=prefer_pdf,
            prefer_seq_mapping=prefer_pdf and not over_parsed_active,
            over_parsed_active=over_parsed_active,
            strict_active=self.pdf_mapping_strict and has_map and not no_labels,
        )

    def match(self, pdf_label: str) -> List[MatchResult]:
        """Resolve one numeric label; empty list when nothing matches"""
        with self.lock:
            ctx = self.build_context(pdf_label)
        return self.coordinator.match(ctx)

    def match_all(self, pdf_labels: Sequence[str]) -> List[MatchResult]:
        """Resolve several labels, de-duplicated by entry index and sorted by index"""
        seen = set()
        results = []
        with self.lock:
            for label in pdf_labels:
                for result in self.match(label):
                    if result.entry_index not in seen:
                        seen.add(result.entry_index)
                        results.append(result)
        return sorted(results, key=lambda r: r.entry_index)

    def find_precise_match(
        self,
        paper: PaperInfo,
        target_authors: List[str],
        target_year: Optional[str],
    ) -> Optional[MatchResult]:
        """
        Find the canonical entry for a document bibliography paper using its
        identifiers or journal/volume/page.

        Args:
            paper: Paper from the author-year bibliography
            target_authors: Lowercased surnames from the citation
            target_year: Citation year without suffix

        Returns:
            MatchResult with method "exact", or None when the best score is below 5
        """
        display = f"{target_authors[0] if target_authors else '?'} {target_year or '?'}"
        paper_arxiv = normalize_arxiv_id(paper.arxiv_id)
        paper_doi = normalize_doi(paper.doi)
        target = target_authors[0] if target_authors else None
        best: Optional[Tuple[int, float, str]] = None

        for idx, entry in enumerate(self.entries):
            if paper_arxiv and paper_arxiv == normalize_arxiv_id(entry.arxiv_details):
                logger.debug(f"Precise arXiv match {paper_arxiv} -> idx {idx}")
                return MatchResult(display, idx, HIGH, EXACT, entry_id=entry.id, score=SCORE["ARXIV_EXACT"])
            if paper_doi and paper_doi == normalize_doi(entry.doi):
                logger.debug(f"Precise DOI match {paper_doi} -> idx {idx}")
                return MatchResult(display, idx, HIGH, EXACT, entry_id=entry.id, score=SCORE["DOI_EXACT"])

            pub = entry.publication_info
            if not pub:
                continue
            entry_volume = pub.journal_volume or pub.volume
            entry_page = pub.page_start or pub.artid
            first_author = extract_last_name(entry.authors[0]).lower() if entry.authors else None

            if paper.journal_abbrev and paper.volume:
                volume_ok = entry_volume and str(entry_volume) == str(paper.volume)
                if journals_similar(paper.journal_abbrev, pub.journal_title) and volume_ok:
                    score = 4
                    method = "journal-vol"
                    if paper.page_start and entry_page and str(entry_page) == paper.page_start:
                        score += 3
                        method = "journal-vol-page"
                    if target:
                        if first_author and (first_author == target or first_author in target or target in first_author):
                            score += 2
                        elif entry.author_text and target in entry.author_text.lower():
                            score += 1
                    if target_year and normalize_year(entry.year) == target_year:
                        score += 1
                    if best is None or score > best[1]:
                        best = (idx, score, method)

            if best is None and paper.volume and paper.page_start and entry_volume and entry_page:
                if str(entry_volume) == str(paper.volume) and str(entry_page) == paper.page_start:
                    if target and first_author and (first_author == target or target in first_author):
                        best = (idx, 5, "vol-page")
                    elif target_year and normalize_year(entry.year) == target_year:
                        best = (idx, 4, "vol-page")

        if best and best[1] >= MATCH_CONFIG["PRECISE_MIN_SCORE"]:
            idx, score, method = best
            logger.debug(f"Precise {method} match score={score} -> idx {idx}")
            return MatchResult(
                display, idx, HIGH if score >= 7 else MEDIUM, EXACT,
                entry_id=self.entries[idx].id, score=score,
            )
        if best:
            logger.debug(f"Precise match below threshold (score={best[1]})")
        return None

    def _ambiguous_candidate(self, result: MatchResult, paper: Optional[PaperInfo] = None) -> AmbiguousCandidate:
        entry = self.entries[result.entry_index]
        author_count = len(entry.authors)
        second_author = extract_last_name(entry.authors[1]) if author_count >= 2 else None
        pub = entry.publication_info

        display = ""
        if pub and pub.journal_title:
            display = pub.journal_title
            if pub.journal_volume:
                display += f" {pub.journal_volume}"
            if pub.page_start:
                display += f", {pub.page_start}"
        elif paper and paper.journal_abbrev:
            display = paper.journal_abbrev
            if paper.volume:
                display += f" {paper.volume}"
            if paper.page_start:
                display += f", {paper.page_start}"
        elif entry.title:
            display = entry.title
        if author_count:
            display += f" ({author_count} author{'s' if author_count > 1 else ''})"
        if second_author:
            display += f" - {second_author}"

        return AmbiguousCandidate(
            entry_index=result.entry_index,
            entry_id=entry.id,
            display_text=display.strip(),
            title=entry.title,
            journal=paper.journal_abbrev if paper else (pub.journal_title if pub else None),
            volume=paper.volume if paper else (pub.journal_volume if pub else None),
            page=paper.page_start if paper else (pub.page_start if pub else None),
            author_count=author_count,
            second_author=second_author,
        )

    def _key_variants(self, author: str, year: str) -> List[str]:
        base = f"{author} {year}".lower()
        variants = [base, base.replace("ß", "ss"), strip_diacritics(base)]
        first_word = author.split()[0] if author.split() else author
        if first_word != author:
            first_key = f"{first_word} {year}".lower()
            variants.extend([first_key, strip_diacritics(first_key)])
        unique = []
        for key in variants:
            if key not in unique:
                unique.append(key)
        return unique

    def _match_from_mapping(
        self,
        target_authors: List[str],
        initials: Dict[str, str],
        target_year: str,
        year_base: Optional[str],
        is_et_al: bool,
    ) -> List[MatchResult]:
        author_year_map = self.author_year_mapping.author_year_map
        infos = None
        used_key = None
        for key in self._key_variants(target_authors[0], target_year):
            if author_year_map.get(key):
                infos = author_year_map[key]
                used_key = key
                break

        if not infos:
            base_key = f"{target_authors[0]} {year_base}".lower()
            base_infos = author_year_map.get(base_key)
            if base_key != f"{target_authors[0]} {target_year}".lower() and base_infos:
                paper = select_best_pdf_paper_info(base_infos, target_authors, is_et_al, initials)
                precise = self.find_precise_match(paper, target_authors, year_base)
                return [precise] if precise else []
            return []

        logger.debug(f"Author-year key '{used_key}' has {len(infos)} document paper(s)")

        if initials and len(infos) > 1:
            best = None
            for paper in infos:
                precise = self.find_precise_match(paper, target_authors, year_base)
                if not precise:
                    continue
                entry = self.entries[precise.entry_index]
                initial_score = 0
                if entry.author_text:
                    for author, author_initials in initials.items():
                        if build_initials_pattern(author, author_initials).search(entry.author_text):
                            initial_score += INITIALS_MATCH_SCORE
                        elif author in entry.author_text.lower() and \
                                build_different_initials_pattern(author).search(entry.author_text):
                            initial_score += DIFFERENT_INITIALS_SCORE
                if best is None or initial_score > best[1]:
                    best = (precise, initial_score)
            if best and best[1] >= 0:
                return [best[0]]

        scored = score_pdf_paper_infos(infos, target_authors, is_et_al, initials)
        top_score = scored[0][1] if scored else None
        tied = [paper for paper, score in scored if score == top_score]

        if len(tied) > 1:
            candidates = []
            first = None
            for paper in tied:
                precise = self.find_precise_match(paper, target_authors, year_base)
                if not precise:
                    continue
                candidates.append(self._ambiguous_candidate(precise, paper))
                if first is None:
                    first = precise
            if first and len(candidates) > 1:
                logger.debug(f"Ambiguous author-year citation: {len(candidates)} tied candidates")
                return [replace(first, confidence=MEDIUM, is_ambiguous=True, ambiguous_candidates=candidates)]
            if first:
                return [first]

        paper = tied[0] if tied else infos[0]
        precise = self.find_precise_match(paper, target_authors, year_base)
        if precise:
            return [precise]
        logger.debug(
            f"No precise match for {paper.journal_abbrev or '?'} {paper.volume or '?'} "
            f"({paper.first_author_last_name or '?'} {paper.year or '?'})"
        )
        return []

    def match_author_year(self, author_labels: Sequence[str]) -> List[MatchResult]:
        """
        Resolve an author-year citation.

        Args:
            author_labels: Labels from the recognizer, e.g.
                ["Guo et al. 2015", "Guo", "2015"]

        Returns:
            Up to three matches, best first. A tie between equally good
            candidates is returned as one medium-confidence result with
            is_ambiguous set and all candidates listed.
        """
        with self.lock:
            return self._match_author_year(author_labels)

    def _match_author_year(self, author_labels: Sequence[str]) -> List[MatchResult]:
        labels = [PAREN_YEAR_RE.sub(r"\1", label) for label in author_labels]
        parsed = parse_author_labels(labels)
        target_authors = parsed['authors']
        initials = parsed['author_initials']
        target_year = parsed['year']
        is_et_al = parsed['is_et_al']

        if not target_authors and not target_year:
            logger.debug(f"No author or year in labels {list(author_labels)}")
            return []

        year_base = normalize_year(target_year)

        if self.has_author_year_mapping() and target_authors and target_year:
            results = self._match_from_mapping(target_authors, initials, target_year, year_base, is_et_al)
            if results:
                return results

        has_suffix = bool(target_year and RE_YEAR_WITH_SUFFIX.search(target_year))
        paper_for_fuzzy = None
        if has_suffix and self.has_author_year_mapping() and target_authors:
            base = f"{target_authors[0]} {target_year}".lower()
            for key in (base, base.replace("ß", "ss")):
                infos = self.author_year_mapping.author_year_map.get(key)
                if infos:
                    paper_for_fuzzy = select_best_pdf_paper_info(infos, target_authors, is_et_al, initials)
                    break

        scored = []
        for idx, entry in enumerate(self.entries):
            result = score_entry_for_author_year(
                entry, idx, target_authors, year_base, is_et_al, initials, paper_for_fuzzy
            )
            if result.score >= MATCH_CONFIG["FUZZY_MIN_SCORE"]:
                scored.append(result)
        # volume/page agreement with the document entry breaks score ties
        scored.sort(key=lambda s: (s.score, compute_publication_priority(paper_for_fuzzy, s.entry)), reverse=True)

        year_matched = [s for s in scored if s.year_matched]
        candidates = year_matched or scored
        if not candidates:
            return []

        display = f"{target_authors[0] if target_authors else '?'} {target_year or '?'}"
        top = candidates[0].score

        if year_matched and not paper_for_fuzzy:
            tied = [s for s in year_matched if s.score == top]
            if len(tied) > 1:
                results = [
                    MatchResult(display, s.index, MEDIUM, FUZZY, entry_id=s.entry.id, score=s.score)
                    for s in tied
                ]
                candidates = [self._ambiguous_candidate(r) for r in results]
                logger.debug(f"Ambiguous author-year citation '{display}': {len(tied)} tied entries")
                return [replace(results[0], is_ambiguous=True, ambiguous_candidates=candidates)]

        results = []
        for candidate in candidates:
            if has_suffix and results and not paper_for_fuzzy:
                break
            if candidate.score < top - 2:
                break
            if candidate.score >= 7:
                confidence = HIGH
            elif candidate.score >= 5:
                confidence = MEDIUM
            else:
                confidence = LOW
            results.append(
                MatchResult(display, candidate.index, confidence, FUZZY, entry_id=candidate.entry.id, score=candidate.score)
            )
            if len(results) >= MATCH_CONFIG["MAX_FUZZY_RESULTS"]:
                break
        return results


class ResolutionCache:
    """
    Caller-owned cache of LabelMatcher instances keyed by document id.

    A cached matcher is reused only while the canonical entry list is unchanged.
    Safe to share between threads.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config
        self._matchers: Dict[str, LabelMatcher] = {}
        self._lock = threading.Lock()

    def get_matcher(self, document_id: str, entries: Sequence[CanonicalEntry]) -> LabelMatcher:
        with self._lock:
            matcher = self._matchers.get(document_id)
            if matcher is None or matcher.entries != list(entries):
                logger.debug(f"Building label matcher for document {document_id} ({len(entries)} entries)")
                matcher = LabelMatcher(entries, self.config)
                self._matchers[document_id] = matcher
            return matcher

    def invalidate(self, document_id: str):
        with self._lock:
            self._matchers.pop(document_id, None)

    def clear(self):
        with self._lock:
            self._matchers.clear()

    def __contains__(self, document_id: str) -> bool:
        return document_id in self._matchers

    def __len__(self) -> int:
        return len(self._matchers)
