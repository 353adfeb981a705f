"""
Unit tests for identifier normalization and match scoring.
"""

import pytest
import sys
import os
from dataclasses import replace

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..', 'src'))

from citeresolve.models import CanonicalEntry, PaperInfo, PublicationInfo
from citeresolve.matching.match_scoring import (
    normalize_arxiv_id,
    normalize_doi,
    journals_similar,
    calculate_composite_score,
    get_strong_match_kind,
    score_pdf_paper_infos,
    score_entry_for_author_year,
    find_best_match,
    compute_publication_priority,
)


def make_entry(**kwargs):
    kwargs.setdefault('id', '0-1')
    return CanonicalEntry(**kwargs)


class TestArxivNormalization:
    """Test arXiv identifier normalization."""

    @pytest.mark.parametrize("raw,expected", [
        ("2301.12345", "2301.12345"),
        ("arXiv:2301.12345v2", "2301.12345"),
        ("https://arxiv.org/abs/2301.12345v1", "2301.12345"),
        ("https://arxiv.org/pdf/2301.12345.pdf", "2301.12345"),
        ("hep-ph/0101234v1", "hep-ph/0101234"),
        ("ARXIV: hep-th/9711200", "hep-th/9711200"),
    ])
    def test_variants(self, raw, expected):
        assert normalize_arxiv_id(raw) == expected

    def test_dict_form(self):
        assert normalize_arxiv_id({'id': '1207.7214v2', 'categories': ['hep-ex']}) == "1207.7214"

    def test_rejects_non_ids(self):
        assert normalize_arxiv_id(None) is None
        assert normalize_arxiv_id("") is None
        assert normalize_arxiv_id("Phys. Rev. D 81") is None
        assert normalize_arxiv_id({'categories': ['hep-ex']}) is None


class TestDoiNormalization:
    """Test DOI normalization."""

    def test_trailing_punctuation(self):
        assert normalize_doi("10.1103/PhysRevD.81.014029.") == "10.1103/physrevd.81.014029"
        assert normalize_doi("10.1103/PhysRevD.81.014029),") == "10.1103/physrevd.81.014029"
        assert normalize_doi(None) is None


class TestJournalsSimilar:
    """Test journal-name comparison."""

    def test_abbreviation_and_full_name(self):
        assert journals_similar("Phys. Rev. D", "Physical Review D")
        assert journals_similar("PRD", "Phys. Rev. D")

    def test_parenthetical_is_ignored(self):
        assert journals_similar("Phys. Rev. D (2010)", "Phys.Rev.D")

    def test_different_journals(self):
        assert not journals_similar("Phys. Rev. D", "Nucl. Phys. B")
        assert not journals_similar("Phys. Rev. D", None)


class TestCompositeScore:
    """Test scoring of a document paper against a canonical entry."""

    def setup_method(self):
        self.entry = make_entry(
            authors=["Smith, J.", "Doe, A."],
            author_text="Smith, J., Doe, A.",
            year="2010",
            publication_info=PublicationInfo(journal_title="Phys.Rev.D", journal_volume="81", page_start="123"),
        )

    def test_arxiv_short_circuits(self):
        entry = make_entry(arxiv_details={'id': '1001.0001'})
        paper = PaperInfo(raw_text="...", arxiv_id="arXiv:1001.0001v3")
        score = calculate_composite_score(paper, entry)
        assert score.arxiv_match
        assert score.total == 10

    def test_doi_match(self):
        entry = make_entry(doi="10.1000/XYZ")
        paper = PaperInfo(raw_text="...", doi="10.1000/xyz.")
        score = calculate_composite_score(paper, entry)
        assert score.doi_match
        assert score.total == 9

    def test_full_bibliographic_agreement(self):
        paper = PaperInfo(
            raw_text="J. Smith and A. Doe, Phys. Rev. D 81, 123 (2010)",
            first_author_last_name="Smith",
            year="2010",
            journal_abbrev="Phys. Rev. D",
            volume="81",
            page_start="123",
        )
        score = calculate_composite_score(paper, self.entry)
        assert score.author_match
        assert score.journal_match
        assert score.year_delta == 0
        assert score.breakdown == {'arxiv': 0, 'doi': 0, 'author': 4, 'year': 2, 'page': 2, 'journal': 4}
        assert score.total == 12

    def test_year_drift(self):
        paper = PaperInfo(raw_text="J. Smith (2012)", first_author_last_name="Smith", year="2012")
        score = calculate_composite_score(paper, self.entry)
        assert score.year_delta == 2
        assert score.breakdown['year'] == 1
        assert score.total == 5

    def test_nothing_in_common(self):
        paper = PaperInfo(raw_text="K. Wilson (1974)", first_author_last_name="Wilson", year="1974")
        score = calculate_composite_score(paper, self.entry)
        assert score.total == 0
        assert not score.author_match


class TestStrongMatchKind:
    """Test identifier-grade match detection."""

    def test_arxiv(self):
        entry = make_entry(arxiv_details="hep-ph/0101234")
        paper = PaperInfo(raw_text="", arxiv_id="hep-ph/0101234v2")
        assert get_strong_match_kind(paper, entry) == ("arxiv", 10)

    def test_journal_volume_page(self):
        entry = make_entry(
            authors=["Smith, J."],
            year="2010",
            publication_info=PublicationInfo(journal_title="Phys.Rev.D", journal_volume="81", page_start="123"),
        )
        paper = PaperInfo(
            raw_text="J. Smith, Phys. Rev. D 81, 123 (2010)",
            first_author_last_name="Smith",
            year="2010",
            journal_abbrev="Phys. Rev. D",
            volume="81",
            page_start="123",
        )
        assert get_strong_match_kind(paper, entry) == ("journal", 11)

    def test_volume_mismatch(self):
        entry = make_entry(
            authors=["Smith, J."],
            year="2010",
            publication_info=PublicationInfo(journal_title="Phys.Rev.D", journal_volume="82", page_start="123"),
        )
        paper = PaperInfo(
            raw_text="", first_author_last_name="Smith", year="2010",
            journal_abbrev="Phys. Rev. D", volume="81", page_start="123",
        )
        assert get_strong_match_kind(paper, entry) is None


class TestPdfPaperInfoScoring:
    """Test ranking of document papers sharing an author-year key."""

    def test_author_count_filter(self):
        solo = PaperInfo(raw_text="F.-K. Guo, ... (2015)", all_authors_last_names=["Guo"])
        pair = PaperInfo(raw_text="F.-K. Guo and C. Hanhart (2015)", all_authors_last_names=["Guo", "Hanhart"])
        ranked = score_pdf_paper_infos([solo, pair], ["guo", "hanhart"])
        assert ranked[0][0] is pair

    def test_initials_filter(self):
        li_mt = PaperInfo(raw_text="M.-T. Li, Phys. Rev. D (2019)", all_authors_last_names=["Li"])
        li_g = PaperInfo(raw_text="G. Li, Phys. Rev. D (2019)", all_authors_last_names=["Li"])
        ranked = score_pdf_paper_infos([li_g, li_mt], ["li"], target_author_initials={"li": "M.-T."})
        assert [paper for paper, _ in ranked] == [li_mt]


class TestAuthorYearEntryScore:
    """Test canonical entry scoring for author-year citations."""

    def test_exact_two_author_match(self):
        entry = make_entry(authors=["Weinstein, J.D.", "Isgur, N."], author_text="Weinstein, J.D., Isgur, N.", year="1982")
        result = score_entry_for_author_year(entry, 0, ["weinstein", "isgur"], "1982", False)
        assert result.year_matched
        # year 3 + first author 5 + additional min(3, 4) + count match 3
        assert result.score == 14

    def test_author_count_mismatch_penalized(self):
        entry = make_entry(authors=["Weinstein, J.D."], author_text="Weinstein, J.D.", year="1982")
        result = score_entry_for_author_year(entry, 0, ["weinstein", "isgur"], "1982", False)
        assert result.score == 3 + 5 + 1.5 - 5

    def test_wrong_year(self):
        entry = make_entry(authors=["Guo, F.-K."], year="2011")
        result = score_entry_for_author_year(entry, 3, ["guo"], "2015", False)
        assert not result.year_matched
        assert result.index == 3


class TestFindBestMatch:
    """Test the generic best-candidate search."""

    def test_first_wins_ties_and_exclusions(self):
        entries = [make_entry(id=str(i)) for i in range(4)]
        scores = [1, 5, 5, 2]
        assert find_best_match(entries, lambda e, i: scores[i]) == (1, 5)
        assert find_best_match(entries, lambda e, i: scores[i], exclude={1}) == (2, 5)
        assert find_best_match(entries, lambda e, i: scores[i], min_score=6) is None
        assert find_best_match(entries, lambda e, i: None) is None


class TestPublicationPriority:
    """Test volume/page tie-break scoring."""

    def test_priority(self):
        entry = make_entry(publication_info=PublicationInfo(
            journal_title="Phys.Rev.D", journal_volume="91", page_start="054017",
        ))
        paper = PaperInfo(raw_text="", journal_abbrev="Phys. Rev. D", volume="91", page_start="054017")
        assert compute_publication_priority(paper, entry) == 6
        other_volume = replace(paper, volume="90", page_start=None)
        assert compute_publication_priority(other_volume, entry) == 1
        assert compute_publication_priority(None, entry) == 0
