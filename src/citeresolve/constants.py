"""
Scoring tables and fixed limits shared by the parsers and the matcher.

Thresholds that are expected to be tuned per deployment live in
config/settings.py instead.
"""

# Composite score weights
SCORE = {
    "ARXIV_EXACT": 10,
    "DOI_EXACT": 9,
    "JOURNAL_EXACT": 8,
    "VALIDATION_ACCEPT": 3,
    "YEAR_MATCH_ACCEPT": 4,
    "NO_YEAR_ACCEPT": 6,
    "AUTHOR_EXACT": 4,
    "AUTHOR_PARTIAL": 3,
    "AUTHOR_IN_TEXT": 2,
    "YEAR_EXACT": 2,
    "YEAR_CLOSE": 1.5,
    "YEAR_REASONABLE": 1,
    "YEAR_ACCEPTABLE": 0.5,
    "PAGE_MATCH": 2,
    "JOURNAL_MATCH": 4,
    "MARGINAL_THRESHOLD": 7,
}

# Author-year fuzzy scoring
AUTHOR_SCORE = {
    "YEAR_EXACT": 3,
    "YEAR_CLOSE": 1,
    "FIRST_AUTHOR_MATCH": 5,
    "FIRST_AUTHOR_IN_TEXT": 4,
    "ADDITIONAL_MULTIPLIER": 1.5,
    "MAX_ADDITIONAL": 4,
    "MAX_TEXT_MATCH": 3,
    "COUNT_MATCH_BONUS": 3,
    "COUNT_MISMATCH_PENALTY": -5,
    "ET_AL_MATCH_BONUS": 1,
    "ET_AL_MISMATCH_PENALTY": -3,
    "TEXT_FALLBACK_THRESHOLD": 5,
    "INITIALS_MATCH_BONUS": 15,
    "DIFFERENT_INITIALS_PENALTY": -12,
    "VOLUME_MATCH_BONUS": 10,
    "VOLUME_MISMATCH_PENALTY": -8,
    "PAGE_MATCH_BONUS": 5,
}

YEAR_DELTA = {
    "CLOSE": 1,
    "REASONABLE": 2,
    "MAX_ACCEPTABLE": 3,
}

PARSE_CONFIG = {
    "MAX_REFS_WARNING": 500,
    "MIN_LABELS_SUCCESS": 5,
    "RELAXED_SCAN_PAGES": 8,
    "MIN_AUTHOR_YEAR_TEXT": 500,
    "MIN_AUTHOR_YEAR_REFS": 5,
}

MATCH_CONFIG = {
    "ALIGN_RATE_HIGH": 0.95,
    "ALIGN_RATE_MEDIUM": 0.7,
    "LABEL_RATE_LOW": 0.3,
    "YEAR_RANGE_MIN": 1900,
    "YEAR_RANGE_MAX": 2099,
    "MAX_RANGE_SPAN": 50,
    "HEURISTIC_PART_MAX": 100,
    "MAX_EXPAND_SPAN": 100,
    "SUPERSCRIPT_MAX": 500,
    "MAX_FUZZY_RESULTS": 3,
    "FUZZY_MIN_SCORE": 4,
    "PRECISE_MIN_SCORE": 5,
}


def is_year_like(num: int) -> bool:
    """Return True when an integer falls in the publication-year range"""
    return MATCH_CONFIG["YEAR_RANGE_MIN"] <= num <= MATCH_CONFIG["YEAR_RANGE_MAX"]
