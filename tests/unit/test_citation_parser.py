"""
Unit tests for the citation marker recognizer.
"""

import copy

import pytest
import sys
import os

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..', 'src'))

from citeresolve.config.settings import DEFAULT_CONFIG
from citeresolve.models import ARXIV, AUTHOR_YEAR, NUMERIC
from citeresolve.parsers import citation_parser
from citeresolve.parsers.citation_parser import (
    CitationParser,
    expand_range,
    fix_ocr_brackets,
    post_process_labels,
    try_parse_concatenated_range,
    detect_superscript_style_citations,
)


@pytest.fixture
def parser():
    return CitationParser()


class TestRangeHelpers:
    """Test range expansion and concatenated-range repair."""

    def test_expand_range(self):
        assert expand_range(3, 6) == ["3", "4", "5", "6"]

    def test_reversed_and_wide_ranges_keep_endpoints(self):
        assert expand_range(9, 4) == ["9", "4"]
        assert expand_range(1, 300) == ["1", "300"]

    def test_concatenated_range_with_known_max(self):
        assert try_parse_concatenated_range("6264", max_known_label=80) == ["62", "63", "64"]
        assert try_parse_concatenated_range("64", max_known_label=80) is None
        assert try_parse_concatenated_range("75", max_known_label=80) is None

    def test_concatenated_range_without_max(self):
        assert try_parse_concatenated_range("1215") == ["12", "13", "14", "15"]
        # three-digit labels are kept as they are without a known maximum
        assert try_parse_concatenated_range("123") is None

    def test_post_process_dedupes(self):
        assert post_process_labels(["3", "3", "6264"], max_known_label=80) == ["3", "62", "63", "64"]


class TestOcrRepair:
    """Test OCR bracket repair."""

    def test_brackets(self):
        assert fix_ocr_brackets("f5g") == "[5]"
        assert fix_ocr_brackets("see f26,30g") == "see [26,30]"
        assert fix_ocr_brackets("fig") == "fig"


class TestParseText:
    """Test the strict rule-based recognizer."""

    def test_single_and_range(self, parser):
        citations = parser.parse_text("as shown in [1] and [2-4]")
        assert [c.raw for c in citations] == ["[1]", "[2-4]"]
        assert citations[1].labels == ["2", "3", "4"]
        assert all(c.type == NUMERIC for c in citations)

    def test_superscripts(self, parser):
        citations = parser.parse_text("quarks¹,² and gluons")
        assert citations[0].labels == ["1", "2"]

    def test_author_year_bracket(self, parser):
        citations = parser.parse_text("see [Weinberg 1967]")
        assert citations[0].type == AUTHOR_YEAR
        assert citations[0].labels == ["Weinberg 1967"]

    def test_arxiv_brackets(self, parser):
        citations = parser.parse_text("[arXiv:2301.12345] and [hep-ph/0101234]")
        assert [(c.type, c.labels) for c in citations] == [
            (ARXIV, ["2301.12345"]), (ARXIV, ["hep-ph/0101234"]),
        ]

    def test_has_citations(self, parser):
        assert parser.has_citations("see [3]")
        assert parser.has_citations("see [3, 5]")
        assert not parser.has_citations("no markers here")


class TestParseSelectionNumeric:
    """Test lenient parsing of selected numeric citations."""

    def test_multi_group_list(self, parser):
        citation = parser.parse_selection("[25,26,29,30,32,33,38–41]")
        assert citation.type == NUMERIC
        assert citation.labels == ["25", "26", "29", "30", "32", "33", "38", "39", "40", "41"]
        assert citation.raw.startswith("[25],[26]")

    def test_union_of_bracket_groups(self, parser):
        citation = parser.parse_selection("as in [3] and later [7, 9]")
        assert citation.labels == ["3", "7", "9"]

    def test_ocr_brackets(self, parser):
        assert parser.parse_selection("f5g").labels == ["5"]

    def test_bare_number_is_not_split(self, parser):
        citation = parser.parse_selection("15")
        assert citation.labels == ["15"]
        assert citation.type == NUMERIC

    def test_bare_range(self, parser):
        assert parser.parse_selection("12–14").labels == ["12", "13", "14"]

    def test_concatenated_range_in_brackets(self, parser):
        citation = parser.parse_selection("[6264]", max_known_label=80)
        assert citation.labels == ["62", "63", "64"]

    def test_trailing_punctuation(self, parser):
        assert parser.parse_selection("[4].").labels == ["4"]

    def test_glued_superscript_style(self, parser):
        assert parser.parse_selection("form factors72").labels == ["72"]
        assert detect_superscript_style_citations("data89–91") == ["89", "90", "91"]

    def test_nothing_recognized(self, parser):
        assert parser.parse_selection("the quick brown fox") is None


class TestParseSelectionAuthorYear:
    """Test author-year recognition through parse_selection."""

    def test_two_authors(self, parser):
        citation = parser.parse_selection("Weinstein and Isgur (1982)")
        assert citation.type == AUTHOR_YEAR
        assert citation.labels[0] == "Weinstein and Isgur 1982"
        assert "Weinstein" in citation.labels
        assert "Isgur" in citation.labels
        assert "1982" in citation.labels

    def test_prefer_author_year(self, parser):
        citation = parser.parse_selection("Guo et al. (2015) [12]", prefer_author_year=True)
        assert citation.type == AUTHOR_YEAR
        assert citation.labels[0] == "Guo et al. 2015"

    def test_numeric_brackets_win_by_default(self, parser):
        citation = parser.parse_selection("Guo et al. (2015) [12]")
        assert citation.type == NUMERIC
        assert citation.labels == ["12"]


class TestFuzzyParsing:
    """Test the opt-in heuristics for broken text layers."""

    def test_document_reference_is_not_a_citation(self, parser):
        assert parser.parse_selection("Fig. 3", enable_fuzzy=True) is None
        assert parser.parse_selection("Fig. 3") is None

    def test_ref_marker(self, parser):
        assert parser.parse_selection("see ref 12", enable_fuzzy=True).labels == ["12"]
        assert parser.parse_selection("see ref 12") is None

    def test_math_is_excluded(self, parser):
        assert parser.parse_selection("x = y + 2", enable_fuzzy=True) is None

    def test_author_number_within_max_label(self, parser):
        assert parser.parse_selection("shown by Smith 42", enable_fuzzy=True).labels == ["42"]

    def test_max_label_bounds_fuzzy_numbers(self):
        assert CitationParser(max_label=30).parse_selection("shown by Smith 42", enable_fuzzy=True) is None

    def test_max_label_from_settings(self, monkeypatch):
        config = copy.deepcopy(DEFAULT_CONFIG)
        config["parsing"]["max_label"] = 30
        monkeypatch.setattr(citation_parser, "get_config", lambda: config)
        assert CitationParser().parse_selection("shown by Smith 42", enable_fuzzy=True) is None
