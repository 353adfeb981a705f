"""
Alignment diagnosis between canonical labels and list positions.

A canonical list whose labels are "1", "2", ... at positions 1, 2, ... can be
trusted directly; a list with missing or shifted labels has to be matched by
position or through the document's own bibliography.
"""

import logging
import re
from typing import List, Optional

from ..constants import MATCH_CONFIG
from ..models import (
    HIGH, LOW, MEDIUM, USE_CANONICAL_LABEL, USE_INDEX_ONLY, USE_INDEX_WITH_FALLBACK,
    AlignmentIssue, AlignmentReport, CanonicalEntry
)

logger = logging.getLogger(__name__)


def parse_label_number(label: Optional[str]) -> Optional[int]:
    """Leading integer of a label ("12" -> 12, "12a" -> 12), None otherwise"""
    if not label:
        return None
    match = re.match(r"\s*(-?\d+)", label)
    return int(match.group(1)) if match else None


def get_recommendation(total: int, aligned_count: int, label_available_count: int) -> str:
    """
    Decide how canonical labels should be used.

    Args:
        total: Number of canonical entries
        aligned_count: Entries whose numeric label equals their 1-based position
        label_available_count: Entries with a non-empty label

    Returns:
        USE_CANONICAL_LABEL, USE_INDEX_WITH_FALLBACK or USE_INDEX_ONLY
    """
    if total == 0:
        return USE_INDEX_ONLY

    align_rate = aligned_count / total
    label_rate = label_available_count / total

    if label_rate < MATCH_CONFIG["LABEL_RATE_LOW"]:
        return USE_INDEX_ONLY
    if align_rate > MATCH_CONFIG["ALIGN_RATE_HIGH"]:
        return USE_CANONICAL_LABEL
    if align_rate > MATCH_CONFIG["ALIGN_RATE_MEDIUM"] or label_rate > MATCH_CONFIG["ALIGN_RATE_MEDIUM"]:
        return USE_INDEX_WITH_FALLBACK
    return USE_INDEX_ONLY


def diagnose_alignment(entries: List[CanonicalEntry]) -> AlignmentReport:
    """Compare each entry's label with its 1-based position"""
    issues: List[AlignmentIssue] = []
    aligned = 0
    available = 0

    for idx, entry in enumerate(entries):
        expected = idx + 1
        if entry.label and entry.label.strip():
            available += 1
        actual = parse_label_number(entry.label)
        if actual is None:
            issues.append(AlignmentIssue(idx, "missing", str(expected), entry.label))
        elif actual == expected:
            aligned += 1
        else:
            issues.append(AlignmentIssue(idx, "misaligned", str(expected), entry.label))

    report = AlignmentReport(
        total_entries=len(entries),
        aligned_count=aligned,
        label_available_count=available,
        issues=issues,
        recommendation=get_recommendation(len(entries), aligned, available),
    )
    logger.debug(
        f"Label diagnosis: {available}/{len(entries)} labels available, "
        f"{aligned} aligned, recommendation={report.recommendation}"
    )
    return report


def index_match_confidence(report: AlignmentReport) -> str:
    """Confidence for a position-based match given overall alignment"""
    align_rate = report.aligned_count / max(report.total_entries, 1)
    if align_rate > MATCH_CONFIG["ALIGN_RATE_HIGH"]:
        return HIGH
    if align_rate > MATCH_CONFIG["ALIGN_RATE_MEDIUM"]:
        return MEDIUM
    return LOW
