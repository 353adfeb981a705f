"""
Unit tests for label matching, resolution strategies and the matcher cache.
"""

import pytest
import sys
import os

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..', 'src'))

from citeresolve.matching.alignment import diagnose_alignment
from citeresolve.matching.label_matcher import LabelMatcher, ResolutionCache
from citeresolve.matching.strategies import MatchContext, StrategyCoordinator
from citeresolve.models import (
    AuthorYearReferenceMapping, CanonicalEntry, DocumentReferenceMapping, PaperInfo, PublicationInfo
)


def make_entries(labels):
    return [
        CanonicalEntry(id=f"e{i}", label=label, authors=[f"Author{i}, A."], year="2000")
        for i, label in enumerate(labels)
    ]


@pytest.fixture
def aligned_entries():
    return make_entries(["1", "2", "3", "4", "5"])


@pytest.fixture
def guo_entries():
    return [
        CanonicalEntry(
            id="e0", label=None, authors=["Guo, F.-K."], author_text="Guo, F.-K.", year="2015",
            title="Consequences of heavy quark symmetries",
            publication_info=PublicationInfo(journal_title="Phys.Rev.D", journal_volume="91", page_start="054017"),
        ),
        CanonicalEntry(
            id="e1", label=None, authors=["Guo, F.-K."], author_text="Guo, F.-K.", year="2015",
            title="Production of charm-strange hadronic molecules",
            publication_info=PublicationInfo(journal_title="Phys.Lett.B", journal_volume="740", page_start="100"),
        ),
        CanonicalEntry(id="e2", label=None, authors=["Hanhart, C."], author_text="Hanhart, C.", year="2015"),
    ]


class TestCanonicalLabels:
    """Test matching without a document mapping."""

    def test_exact_labels(self, aligned_entries):
        results = LabelMatcher(aligned_entries).match_all(["4", "2"])
        assert [r.entry_index for r in results] == [1, 3]
        assert all(r.confidence == "high" and r.match_method == "exact" for r in results)
        assert results[0].entry_id == "e1"

    def test_duplicates_removed(self, aligned_entries):
        results = LabelMatcher(aligned_entries).match_all(["2", "2", "3"])
        assert [r.entry_index for r in results] == [1, 2]

    def test_unknown_label(self, aligned_entries):
        assert LabelMatcher(aligned_entries).match("9") == []

    def test_no_positional_guess_without_labels(self):
        matcher = LabelMatcher(make_entries([None, None, None]))
        assert matcher.match("2") == []
        assert matcher.match_all(["1", "3"]) == []


class TestDocumentMapping:
    """Test matching through the document's own bibliography."""

    def test_version_mismatch(self):
        entries = make_entries(["1", "2", "3"])
        entries[1].arxiv_details = "1501.00001"
        paper = PaperInfo(raw_text="A. Author, arXiv:1501.00001", arxiv_id="arXiv:1501.00001")
        mapping = DocumentReferenceMapping(
            label_counts={"1": 1, "2": 1, "3": 1, "4": 1},
            total_labels=4,
            confidence="high",
            label_info={"4": [paper]},
        )
        matcher = LabelMatcher(entries)
        matcher.set_document_mapping(mapping)

        results = matcher.match("4")
        assert len(results) == 1
        result = results[0]
        assert result.entry_index == 1
        assert result.confidence == "high"
        assert result.match_method == "exact"
        assert result.matched_identifier.type == "arxiv"
        assert result.version_mismatch_warning == (
            "PDF label [4] exceeds canonical max label 3. Matched via arXiv ID."
        )
        assert matcher.get_mismatch_for_label("4") == {"missing": [paper]}
        assert matcher.get_mismatch_for_label("1") is None

    def test_sequence_mapping_with_duplicate_labels(self):
        matcher = LabelMatcher(make_entries(["1", "1", "2", "3", "4"]))
        matcher.set_document_mapping(DocumentReferenceMapping(
            label_counts={"1": 2, "2": 1, "3": 1, "4": 1},
            total_labels=4,
            confidence="high",
        ))
        assert matcher.has_document_mapping()

        first = matcher.match("1")
        assert [r.entry_index for r in first] == [0, 1]
        assert all(r.confidence == "high" and r.match_method == "exact" for r in first)
        assert [r.entry_index for r in matcher.match("2")] == [2]

    def test_over_parsed_counts_are_absorbed(self):
        matcher = LabelMatcher(make_entries(["1", "2", "3"]))
        matcher.set_document_mapping(DocumentReferenceMapping(
            label_counts={"1": 2, "2": 2, "3": 1},
            total_labels=3,
            confidence="medium",
        ))
        assert matcher.pdf_label_map == {"1": [0], "2": [1], "3": [2]}

    def test_bundled_papers_without_canonical_labels(self):
        entries = [
            CanonicalEntry(id="guo", authors=["Guo, F.-K."], year="2015", arxiv_details="1501.00001"),
            CanonicalEntry(id="li", authors=["Li, M.-T."], year="2015", arxiv_details="1501.00002"),
            CanonicalEntry(id="other", authors=["Hanhart, C."], year="2014"),
        ]
        papers = [
            PaperInfo(raw_text="F.-K. Guo, arXiv:1501.00001", first_author_last_name="Guo", arxiv_id="1501.00001"),
            PaperInfo(raw_text="M.-T. Li, arXiv:1501.00002", first_author_last_name="Li", arxiv_id="1501.00002"),
        ]
        matcher = LabelMatcher(entries)
        matcher.set_document_mapping(DocumentReferenceMapping(
            label_counts={"1": 2}, total_labels=1, confidence="high", label_info={"1": papers},
        ))

        results = matcher.match_all(["1"])
        assert [r.entry_index for r in results] == [0, 1]
        assert all(r.confidence == "high" and r.match_method == "exact" for r in results)

    def test_bundled_papers_pointing_at_one_entry(self):
        entries = [
            CanonicalEntry(id="guo", authors=["Guo, F.-K."], year="2015", arxiv_details="1501.00001"),
            CanonicalEntry(id="other", authors=["Hanhart, C."], year="2014"),
        ]
        paper = PaperInfo(raw_text="F.-K. Guo, arXiv:1501.00001", first_author_last_name="Guo", arxiv_id="1501.00001")
        matcher = LabelMatcher(entries)
        matcher.set_document_mapping(DocumentReferenceMapping(
            label_counts={"1": 2}, total_labels=1, confidence="high", label_info={"1": [paper, paper]},
        ))
        assert [r.entry_index for r in matcher.match("1")] == [0]

    def test_label_counts_must_be_mapping(self, aligned_entries):
        matcher = LabelMatcher(aligned_entries)
        with pytest.raises(ValueError):
            matcher.set_document_mapping(DocumentReferenceMapping(
                label_counts=["1", "2"], total_labels=2, confidence="low",
            ))


class TestStrategies:
    """Test the strategy chain on hand-built contexts."""

    @pytest.fixture
    def entries(self):
        return (
            CanonicalEntry(id="smith", label="1", authors=["Smith, A."], year="2010"),
            CanonicalEntry(id="jones", label="2", authors=["Jones, K."], author_text="Jones, K.", year="2012"),
        )

    def make_context(self, entries, **kwargs):
        report = diagnose_alignment(list(entries))
        values = dict(
            pdf_label="2",
            normalized_label="2",
            entries=entries,
            label_map={"2": [0]},
            index_map={1: 0, 2: 1},
            alignment_report=report,
            index_confidence="high",
            max_canonical_label=2,
            paper_infos=(PaperInfo(raw_text="K. Jones (2012)", first_author_last_name="Jones", year="2012"),),
        )
        values.update(kwargs)
        return MatchContext(**values)

    def test_canonical_label_without_strict_mode(self, entries):
        results = StrategyCoordinator().match(self.make_context(entries))
        assert [r.entry_index for r in results] == [0]
        assert results[0].match_method == "exact"

    def test_strict_mode_sweeps_globally(self, entries):
        results = StrategyCoordinator().match(self.make_context(entries, strict_active=True))
        assert len(results) == 1
        assert results[0].entry_index == 1
        assert results[0].confidence == "medium"
        assert results[0].match_method == "strict-fallback"

    def test_global_best_when_document_mapping_preferred(self, entries):
        results = StrategyCoordinator().match(self.make_context(entries, prefer_pdf_mapping=True))
        assert results[0].entry_index == 1
        assert results[0].confidence == "high"
        assert results[0].match_method == "strict-fallback"

    def test_label_number(self, entries):
        ctx = self.make_context(entries, normalized_label="3")
        assert ctx.label_number == 3
        assert ctx.exceeds_canonical_range


class TestAuthorYearMatching:
    """Test author-year resolution."""

    def test_fuzzy_tie_is_ambiguous(self, guo_entries):
        results = LabelMatcher(guo_entries).match_author_year(["Guo", "2015"])
        assert len(results) == 1
        result = results[0]
        assert result.entry_index == 0
        assert result.is_ambiguous
        assert result.confidence == "medium"
        assert result.match_method == "fuzzy"
        assert [c.entry_index for c in result.ambiguous_candidates] == [0, 1]

    def test_precise_match_through_mapping(self, guo_entries):
        paper = PaperInfo(
            raw_text="Guo, F.-K., 2015, Phys. Rev. D 91, 054017.",
            first_author_last_name="Guo", all_authors_last_names=["Guo"], year="2015",
            journal_abbrev="Phys. Rev. D", volume="91", page_start="054017",
        )
        matcher = LabelMatcher(guo_entries)
        matcher.set_author_year_mapping(AuthorYearReferenceMapping(
            author_year_map={"guo 2015": [paper]}, total_references=1, confidence="high",
        ))

        results = matcher.match_author_year(["Guo 2015", "Guo", "2015"])
        assert len(results) == 1
        assert results[0].entry_index == 0
        assert results[0].confidence == "high"
        assert results[0].match_method == "exact"
        assert results[0].score == 10
        assert not results[0].is_ambiguous

    def test_tied_document_papers_are_ambiguous(self, guo_entries):
        papers = [
            PaperInfo(
                raw_text="Guo, F.-K., 2015, Phys. Rev. D 91, 054017.",
                first_author_last_name="Guo", all_authors_last_names=["Guo"], year="2015",
                journal_abbrev="Phys. Rev. D", volume="91", page_start="054017",
            ),
            PaperInfo(
                raw_text="Guo, F.-K., 2015, Phys. Lett. B 740, 100.",
                first_author_last_name="Guo", all_authors_last_names=["Guo"], year="2015",
                journal_abbrev="Phys. Lett. B", volume="740", page_start="100",
            ),
        ]
        matcher = LabelMatcher(guo_entries)
        matcher.set_author_year_mapping(AuthorYearReferenceMapping(
            author_year_map={"guo 2015": papers}, total_references=2, confidence="high",
        ))

        results = matcher.match_author_year(["Guo", "2015"])
        assert len(results) == 1
        assert results[0].entry_index == 0
        assert results[0].is_ambiguous
        assert results[0].confidence == "medium"
        candidates = results[0].ambiguous_candidates
        assert [c.entry_index for c in candidates] == [0, 1]
        assert candidates[0].volume == "91"

    def test_nothing_to_match(self, guo_entries):
        assert LabelMatcher(guo_entries).match_author_year(["et al."]) == []


class TestResolutionCache:
    """Test matcher reuse per document."""

    def test_reuse(self, aligned_entries):
        cache = ResolutionCache()
        first = cache.get_matcher("doc", aligned_entries)
        assert cache.get_matcher("doc", list(aligned_entries)) is first
        assert "doc" in cache
        assert len(cache) == 1

    def test_rebuilt_when_entries_change(self, aligned_entries):
        cache = ResolutionCache()
        first = cache.get_matcher("doc", aligned_entries)
        second = cache.get_matcher("doc", aligned_entries[:3])
        assert second is not first
        assert len(second) == 3

    def test_invalidate_and_clear(self, aligned_entries):
        cache = ResolutionCache()
        cache.get_matcher("a", aligned_entries)
        cache.get_matcher("b", aligned_entries)
        cache.invalidate("a")
        assert "a" not in cache
        assert len(cache) == 1
        cache.clear()
        assert len(cache) == 0
