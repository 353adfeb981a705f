"""
citeresolve - citation marker recognition and cross-reference resolution

Recognizes citation markers in document text ("[3-5]", "Guo et al. (2015)")
and resolves them to entries of a canonical reference list, using the
document's own bibliography to re-align labels when the two lists disagree.
"""

__version__ = "1.0.0"

from .models import CanonicalEntry, MatchResult, ParsedCitation, PaperInfo
from .resolver import recognize, resolve

__all__ = [
    "__version__",
    "CanonicalEntry", "MatchResult", "ParsedCitation", "PaperInfo",
    "recognize", "resolve",
]
