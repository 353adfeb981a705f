"""
Resolution of citation labels to canonical reference entries
"""

from .alignment import diagnose_alignment, get_recommendation
from .label_matcher import LabelMatcher, ResolutionCache
from .match_scoring import calculate_composite_score, get_strong_match_kind, journals_similar, normalize_arxiv_id
from .strategies import MatchContext, StrategyCoordinator

__all__ = [
    "diagnose_alignment", "get_recommendation",
    "LabelMatcher", "ResolutionCache",
    "calculate_composite_score", "get_strong_match_kind", "journals_similar", "normalize_arxiv_id",
    "MatchContext", "StrategyCoordinator",
]
