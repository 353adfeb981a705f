"""
Unit tests for canonical label alignment diagnosis.
"""

import pytest
import sys
import os

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..', 'src'))

from citeresolve.models import (
    CanonicalEntry, HIGH, LOW, MEDIUM,
    USE_CANONICAL_LABEL, USE_INDEX_ONLY, USE_INDEX_WITH_FALLBACK,
)
from citeresolve.matching.alignment import (
    diagnose_alignment,
    get_recommendation,
    index_match_confidence,
    parse_label_number,
)


def entries_with_labels(labels):
    return [CanonicalEntry(id=f"{i}-x", label=label) for i, label in enumerate(labels)]


class TestParseLabelNumber:
    """Test leading-integer extraction from labels."""

    def test_values(self):
        assert parse_label_number("12") == 12
        assert parse_label_number("12a") == 12
        assert parse_label_number(" 7") == 7
        assert parse_label_number("Guo2015") is None
        assert parse_label_number(None) is None


class TestRecommendation:
    """Test the label-usage recommendation thresholds."""

    def test_empty_list(self):
        assert get_recommendation(0, 0, 0) == USE_INDEX_ONLY

    def test_well_aligned(self):
        assert get_recommendation(100, 96, 100) == USE_CANONICAL_LABEL

    def test_partially_aligned(self):
        assert get_recommendation(100, 80, 100) == USE_INDEX_WITH_FALLBACK

    def test_labels_mostly_missing(self):
        assert get_recommendation(100, 20, 20) == USE_INDEX_ONLY


class TestDiagnoseAlignment:
    """Test the alignment report for canonical lists."""

    def test_all_aligned(self):
        report = diagnose_alignment(entries_with_labels(["1", "2", "3"]))
        assert report.aligned_count == 3
        assert report.issues == []
        assert report.recommendation == USE_CANONICAL_LABEL
        assert report.align_rate == 1.0
        assert index_match_confidence(report) == HIGH

    def test_list_without_labels(self):
        report = diagnose_alignment(entries_with_labels([None, None, "", None]))
        assert report.label_available_count == 0
        assert report.recommendation == USE_INDEX_ONLY
        assert all(issue.type == "missing" for issue in report.issues)
        assert index_match_confidence(report) == LOW

    def test_shifted_labels(self):
        labels = [str(i) for i in range(1, 9)] + ["10", "11"]
        report = diagnose_alignment(entries_with_labels(labels))
        assert report.aligned_count == 8
        misaligned = [issue for issue in report.issues if issue.type == "misaligned"]
        assert [(issue.index, issue.expected, issue.actual) for issue in misaligned] == [
            (8, "9", "10"), (9, "10", "11"),
        ]
        assert report.recommendation == USE_INDEX_WITH_FALLBACK
        assert index_match_confidence(report) == MEDIUM

    def test_empty(self):
        report = diagnose_alignment([])
        assert report.total_entries == 0
        assert report.align_rate == 0.0
        assert report.recommendation == USE_INDEX_ONLY
