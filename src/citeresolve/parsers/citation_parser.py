"""
Citation marker recognizer.

Extracts citation labels from text in two modes:

- parse_text: a fixed ordered list of literal rules ([n], [n,m-k], superscripts,
  [Author Year], [ABBR99], [arXiv:yyyy.nnnnn], [hep-th/nnnnnnn])
- parse_selection: lenient parsing of arbitrary user-selected text, including
  OCR bracket repair, concatenated-range repair and opt-in fuzzy heuristics

Usage:
    from citeresolve.parsers.citation_parser import CitationParser

    parser = CitationParser()
    citation = parser.parse_selection("[25,26,29,30,32,33,38–41]")
    citation.labels  # ['25', '26', '29', '30', '32', '33', '38', '39', '40', '41']
"""

import logging
import re
from collections import namedtuple
from typing import List, Optional

from ..config.settings import get_config
from ..constants import MATCH_CONFIG, is_year_like
from ..models import ARXIV, AUTHOR_YEAR, NUMERIC, ParsedCitation
from .author_year_parser import parse_author_year_citation

logger = logging.getLogger(__name__)

SUPERSCRIPT_MAP = {
    "⁰": "0", "¹": "1", "²": "2", "³": "3", "⁴": "4",
    "⁵": "5", "⁶": "6", "⁷": "7", "⁸": "8", "⁹": "9",
}
SUPERSCRIPT_DIGITS = "".join(SUPERSCRIPT_MAP)

_DOC_REF_WORDS = (
    r"figs?|figures?|tabs?|tables?|secs?|sects?|sections?|eqs?|eqns?|equations?|"
    r"apps?|appendix|appendices|chs?|chaps?|chapters?|parts?|theorems?|lemmas?|"
    r"corollar(?:y|ies)|defs?|definitions?|props?|propositions?|examples?|"
    r"exercises?|problems?|notes?|cases?|steps?"
)
DOC_REF_RE = re.compile(rf"^\s*({_DOC_REF_WORDS})\.?\s*[\d,\s–-]+\s*$", re.IGNORECASE)
DOC_REF_INLINE_RE = re.compile(rf"\b({_DOC_REF_WORDS})\.?\s*([\d,\s–-]+)", re.IGNORECASE)
RANGE_RE = re.compile(r"\b(\d{1,4})\s*[–-]\s*(\d{1,4})\b")
LIST_RE = re.compile(r"\b\d{1,4}(?:\s*,\s*\d{1,4})+\b")
AUTHOR_NUMBER_RE = re.compile(r"\b([A-Z][a-z]+)\s+(\d{1,4})\b")
REF_MARKER_RE = re.compile(r"\brefs?\.?\s*([\d,\s–-]+)", re.IGNORECASE)
SUPERSCRIPT_STYLE_RE = re.compile(r"[a-zA-Z](\d{1,3}(?:[–,-]\d{1,3})*(?:,\d{1,3}(?:[–,-]\d{1,3})*)*)")
OCR_BRACKET_RE = re.compile(r"\bf([\d,\s–-]+)g\b")
NUMERIC_CONTENT_RE = re.compile(r"^[\d,\s–-]+$")
DIGITS_RE = re.compile(r"^[0-9]+$")
GREEK_RE = re.compile(r"[αβγδεζηθικλμνξοπρστυφχψωΓΔΘΛΞΠΣΦΨΩ]")

# Words that precede a number without making it a citation ("Figure 3", "Run 2")
EXCLUDED_PREFIXES = frozenset("""
    section sections sec sect secs sects chapter chapters chap chaps ch
    figure figures fig figs table tables tab tabs tbl tbls
    equation equations eq eqs eqn eqns formula formulas formulae
    page pages pg pgs pp line lines ln lns
    appendix appendices app apps part parts pt pts
    theorem theorems thm thms lemma lemmas lem lems corollary corollaries cor cors
    proposition propositions prop props definition definitions def defs
    proof proofs pf pfs remark remarks rem rems
    example examples ex exs exercise exercises problem problems prob probs
    solution solutions sol sols
    note notes case cases item items step steps column columns col cols
    row rows entry entries index indices
    number numbers num nums no nos version versions ver vers
    volume volumes vol vols issue issues iss
    year years yr yrs day days month months
    january february march april may june july august september october november december
    jan feb mar apr jun jul aug sep sept oct nov dec
    run runs beam beams event events sample samples generation generations gen gens
    order orders ord loop loops level levels lev lvl tier tiers phase phases stage stages
    class classes type types category categories cat cats group groups grp grps
    set sets series mode modes channel channels chan bin bins point points
    degree degrees deg dimension dimensions dim dims component components comp
    parameter parameters param params model models scenario scenarios
    configuration configurations config configs option options opt opts
    method methods approach approaches scheme schemes algorithm algorithms algo alg
""".split())


def decode_superscript(text: str) -> str:
    return "".join(SUPERSCRIPT_MAP.get(ch, ch) for ch in text)


def fix_ocr_brackets(text: str) -> str:
    """Repair brackets that OCR read as 'f' and 'g' ("f5g" -> "[5]")"""
    return OCR_BRACKET_RE.sub(r"[\1]", text)


def expand_range(start: int, end: int) -> List[str]:
    """Expand an inclusive range; reversed or very wide ranges keep only the endpoints"""
    if end < start or end - start > MATCH_CONFIG["MAX_EXPAND_SPAN"]:
        return [str(start), str(end)]
    return [str(n) for n in range(start, end + 1)]


def try_parse_concatenated_range(label: str, max_known_label: Optional[int] = None) -> Optional[List[str]]:
    """
    Detect a range whose separator was lost in copying ("6264" for "[62-64]").

    Args:
        label: Candidate label
        max_known_label: Largest label known to exist in the document, if any

    Returns:
        The expanded range, or None when the label should stay as it is
    """
    if not DIGITS_RE.match(label) or len(label) < 3:
        return None

    num = int(label)
    has_threshold = max_known_label is not None and max_known_label > 0
    if has_threshold:
        if num <= max_known_label:
            return None
    elif len(label) < 4 or num < 1000:
        return None

    part_max = MATCH_CONFIG["HEURISTIC_PART_MAX"]
    max_span = MATCH_CONFIG["MAX_RANGE_SPAN"]
    for i in range(1, len(label)):
        start_str, end_str = label[:i], label[i:]
        if len(end_str) > 1 and end_str.startswith("0"):
            continue
        start, end = int(start_str), int(end_str)
        if start < 1 or start >= end:
            continue
        if has_threshold:
            if end > max_known_label or end - start > max_span:
                continue
        elif start >= part_max or end >= part_max or end - start > max_span:
            continue
        return expand_range(start, end)
    return None


def post_process_labels(labels: List[str], max_known_label: Optional[int] = None) -> List[str]:
    """Expand concatenated ranges and de-duplicate, keeping first-seen order"""
    result: List[str] = []
    for label in labels:
        expanded = try_parse_concatenated_range(label, max_known_label)
        for value in expanded or [label]:
            if value not in result:
                result.append(value)
    return result


def parse_mixed_citation(content: str) -> List[str]:
    """Parse "1,3-5,8" style content; non-numeric parts are tried as glued superscripts"""
    labels: List[str] = []
    for part in re.split(r"\s*,\s*", content):
        part = part.strip()
        if not part:
            continue
        range_match = re.match(r"^(\d+)[-–](\d+)$", part)
        if range_match:
            labels.extend(expand_range(int(range_match.group(1)), int(range_match.group(2))))
        elif DIGITS_RE.match(part):
            labels.append(part)
        else:
            labels.extend(detect_superscript_style_citations(part))
    return labels


def detect_superscript_style_citations(text: str) -> List[str]:
    """Find citation numbers glued to a preceding word ("factors72", "data89–91")"""
    labels: List[str] = []
    for match in SUPERSCRIPT_STYLE_RE.finditer(text):
        for label in parse_mixed_citation(match.group(1)):
            num = int(label)
            if 1 <= num <= MATCH_CONFIG["SUPERSCRIPT_MAX"] and not is_year_like(num) and label not in labels:
                labels.append(label)
    return labels


def _superscript_labels(match) -> List[str]:
    text = match.group(1)
    if re.search(r"[·,\s]", text):
        return [decode_superscript(part) for part in re.split(r"[·,\s]+", text) if part]
    return [decode_superscript(text)]


RecognizerRule = namedtuple("RecognizerRule", ["pattern", "type", "extract"])

RULES = (
    RecognizerRule(re.compile(r"\[(\d+)\]"), NUMERIC, lambda m: [m.group(1)]),
    RecognizerRule(re.compile(r"\[([\d,\s–-]+)\]"), NUMERIC, lambda m: parse_mixed_citation(m.group(1))),
    RecognizerRule(re.compile(r"\[(\d+)[-–](\d+)\]"), NUMERIC,
                   lambda m: expand_range(int(m.group(1)), int(m.group(2)))),
    RecognizerRule(re.compile(rf"([{SUPERSCRIPT_DIGITS}]+(?:[·,\s][{SUPERSCRIPT_DIGITS}]+)*)"), NUMERIC,
                   _superscript_labels),
    RecognizerRule(re.compile(r"\[([A-Z][a-z]+(?:\s+et\s+al\.?)?\s+\d{4}[a-z]?)\]", re.IGNORECASE), AUTHOR_YEAR,
                   lambda m: [m.group(1)]),
    RecognizerRule(re.compile(r"\[([A-Z]+\d{2,4})\]"), AUTHOR_YEAR, lambda m: [m.group(1)]),
    RecognizerRule(re.compile(r"\[(?:arXiv:)?(\d{4}\.\d{4,5})\]", re.IGNORECASE), ARXIV, lambda m: [m.group(1)]),
    RecognizerRule(re.compile(r"\[((?:hep-[a-z]+|astro-ph|gr-qc|nucl-[a-z]+|cond-mat|quant-ph)/\d+)\]",
                              re.IGNORECASE), ARXIV, lambda m: [m.group(1)]),
)


class CitationParser:
    """Citation marker recognizer; holds no state between calls"""

    def __init__(self, rules=RULES, max_label: Optional[int] = None):
        self.rules = rules
        # None reads parsing.max_label from the settings on every fuzzy parse
        self.max_label = max_label

    def parse_text(self, text: str) -> List[ParsedCitation]:
        """
        Parse all citation markers from text.

        Args:
            text: Arbitrary text

        Returns:
            Citations found by the strict rules, de-duplicated by raw text
        """
        seen = set()
        citations = []
        for rule in self.rules:
            for match in rule.pattern.finditer(text):
                raw = match.group(0)
                if raw in seen:
                    continue
                seen.add(raw)
                citations.append(ParsedCitation(raw=raw, type=rule.type, labels=rule.extract(match)))
        return citations

    def has_citations(self, text: str) -> bool:
        """Quick check for citation markers without full parsing"""
        return bool(
            re.search(r"\[\d+\]", text)
            or re.search(r"\[\d+[-–]\d+\]", text)
            or re.search(r"\[\d+(?:\s*,\s*\d+)+\]", text)
            or re.search(f"[{SUPERSCRIPT_DIGITS}]", text)
            or re.search(r"\[[A-Z][a-z]+\s+\d{4}\]", text)
            or re.search(r"\[(?:arXiv:)?\d{4}\.\d{4,5}\]", text, re.IGNORECASE)
        )

    def parse_selection(self, selection: str, enable_fuzzy: bool = False,
                        max_known_label: Optional[int] = None,
                        prefer_author_year: bool = False) -> Optional[ParsedCitation]:
        """
        Parse user-selected text that may contain a citation.

        Args:
            selection: The selected text
            enable_fuzzy: Enable aggressive heuristics for broken text layers
            max_known_label: Largest label in the document, used to detect
                concatenated ranges such as "6264" for "[62-64]"
            prefer_author_year: Try author-year extraction first

        Returns:
            ParsedCitation or None when nothing was recognized
        """
        trimmed = fix_ocr_brackets(selection.strip())
        logger.debug(f"parse_selection: {trimmed[:150]!r}")

        if prefer_author_year:
            result = parse_author_year_citation(trimmed)
            if result:
                return result

        # Union of every numeric bracket group, not just the last one
        collected: List[str] = []
        for match in re.finditer(r"\[([^\[\]]+)\]", trimmed):
            if NUMERIC_CONTENT_RE.match(match.group(1)):
                for label in parse_mixed_citation(match.group(1)):
                    if label not in collected:
                        collected.append(label)
        if collected:
            return self._numeric(post_process_labels(collected, max_known_label))

        result = parse_author_year_citation(trimmed)
        if result:
            return result

        # Keep a "]" that closes an unbalanced "["
        if trimmed.count("[") > trimmed.count("]"):
            trimmed = re.sub(r"[.,;:!?)]+$", "", trimmed)
        else:
            trimmed = re.sub(r"[.,;:!?)\]]+$", "", trimmed)
        trimmed = re.sub(r"^[(\[]+", "", trimmed)

        if NUMERIC_CONTENT_RE.match(trimmed):
            labels = parse_mixed_citation(trimmed)
            if labels:
                return ParsedCitation(raw=f"[{trimmed}]", type=NUMERIC, labels=labels)

        result = self._visible_strict_labels(trimmed, max_known_label)
        if result:
            return result

        if re.match(r"^(\d+)$", trimmed):
            return ParsedCitation(raw=trimmed, type=NUMERIC, labels=post_process_labels([trimmed], max_known_label))

        bare_range = re.match(r"^(\d+)[-–](\d+)$", trimmed)
        if bare_range:
            labels = expand_range(int(bare_range.group(1)), int(bare_range.group(2)))
            return ParsedCitation(raw=trimmed, type=NUMERIC, labels=labels)

        mixed = parse_mixed_citation(trimmed)
        if mixed:
            return ParsedCitation(raw=trimmed, type=NUMERIC, labels=post_process_labels(mixed, max_known_label))

        superscript_style = detect_superscript_style_citations(trimmed)
        if superscript_style:
            labels = post_process_labels(superscript_style, max_known_label)
            return ParsedCitation(raw=trimmed, type=NUMERIC, labels=labels)

        if not enable_fuzzy:
            return None
        return self._parse_fuzzy(trimmed, max_known_label)

    def _numeric(self, labels: List[str]) -> ParsedCitation:
        return ParsedCitation(raw=",".join(f"[{label}]" for label in labels), type=NUMERIC, labels=labels)

    def _visible_strict_labels(self, text: str, max_known_label: Optional[int]) -> Optional[ParsedCitation]:
        """Run the strict rules and keep labels that literally appear in the text"""
        parsed = self.parse_text(text)
        visible: List[str] = []
        types = set()
        for citation in parsed:
            for label in citation.labels:
                escaped = re.escape(label)
                if re.search(rf"\[{escaped}\]", text) or re.search(rf"\b{escaped}\b", text):
                    if label not in visible:
                        visible.append(label)
                        types.add(citation.type)
        if not visible:
            return None
        citation_type = types.pop() if len(types) == 1 else NUMERIC
        if citation_type == NUMERIC:
            visible = post_process_labels(visible, max_known_label)
        return ParsedCitation(raw=",".join(f"[{label}]" for label in visible), type=citation_type, labels=visible)

    def _parse_fuzzy(self, text: str, max_known_label: Optional[int]) -> Optional[ParsedCitation]:
        """Aggressive heuristics for text layers that lost their brackets"""
        if DOC_REF_RE.match(text):
            logger.debug(f"Fuzzy parse skipped document reference: {text!r}")
            return None

        max_label = self.max_label or get_config()["parsing"]["max_label"]
        labels: List[str] = []

        def add(label: str, excluded=frozenset()):
            if label not in excluded and label not in labels:
                labels.append(label)

        doc_ref_numbers = set()
        for match in DOC_REF_INLINE_RE.finditer(text):
            doc_ref_numbers.update(re.findall(r"\d+", match.group(2)))

        for match in RANGE_RE.finditer(text):
            start, end = int(match.group(1)), int(match.group(2))
            if 1 <= start <= end <= max_label:
                for label in expand_range(start, end):
                    add(label, doc_ref_numbers)

        for match in LIST_RE.finditer(text):
            for num in (int(n) for n in re.findall(r"\d{1,4}", match.group(0))):
                if 1 <= num <= max_label and not is_year_like(num):
                    add(str(num), doc_ref_numbers)

        ref_marker = REF_MARKER_RE.search(text)
        if ref_marker:
            for label in parse_mixed_citation(ref_marker.group(1)):
                add(label)

        for match in AUTHOR_NUMBER_RE.finditer(text):
            if match.group(1).lower() not in EXCLUDED_PREFIXES and 1 <= int(match.group(2)) <= max_label:
                add(match.group(2))

        has_explicit = bool(labels)
        if not has_explicit and self._standalone_excluded(text):
            return None

        for match in re.finditer(r"\b(\d{1,4})\b", text):
            value = match.group(1)
            num = int(value)
            if not 1 <= num <= max_label or value in doc_ref_numbers:
                continue
            if has_explicit:
                if not is_year_like(num):
                    add(value)
            elif value not in labels:
                labels.append(value)
                break

        if not labels:
            return None
        processed = post_process_labels(labels, max_known_label)
        logger.debug(f"Fuzzy citation labels: {processed}")
        return ParsedCitation(raw=f"[{','.join(processed)}]", type=NUMERIC, labels=processed)

    @staticmethod
    def _standalone_excluded(text: str) -> bool:
        """True when bare numbers in the text are more likely math or data than citations"""
        if re.search(r"[()]", text) or re.search(r"[=+*/^~]", text):
            return True
        if re.search(r"\d\s*-\s*\d|-\s*\d", text):
            return True
        if GREEK_RE.search(text):
            return True
        non_year = [n for n in re.findall(r"\b\d+\b", text) if not is_year_like(int(n))]
        return len(non_year) >= 2


_default_parser: Optional[CitationParser] = None


def get_citation_parser() -> CitationParser:
    """Shared parser instance; the parser is stateless so sharing is safe"""
    global _default_parser
    if _default_parser is None:
        _default_parser = CitationParser()
    return _default_parser
