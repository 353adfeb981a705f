"""
Document reference-list parser for numbered bibliographies.

Locates the bibliography in the full text of a document, segments it into
per-label entries and extracts per-paper metadata (first author, year,
journal/volume/page, arXiv id, DOI). A single label can own several papers
when the document bundles them ("[20] A ...; B ...; C ...").

Usage:
    from citeresolve.parsers.references_parser import ReferencesParser

    parser = ReferencesParser()
    mapping = parser.parse_references_section(full_text)
    if mapping:
        print(mapping.label_counts["20"])   # e.g. 3
"""

import logging
import re
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Tuple

from ..config.settings import get_config
from ..constants import PARSE_CONFIG, is_year_like
from ..models import DocumentReferenceMapping, PaperInfo

logger = logging.getLogger(__name__)

# Labels above this are treated as noise while scanning for entries
MAX_SCAN_LABEL = 500

SECTION_KEYWORDS = [
    "References",
    "REFERENCES",
    "Bibliography",
    "BIBLIOGRAPHY",
    "\u53c2\u8003\u6587\u732e",
    "Références",
    "Literatur",
    "Bibliografía",
]

BRACKET_LABEL_RE = re.compile(r"\[(\d+)\]")
BRACKET_RANGE_RE = re.compile(r"\[(\d+)[-–](\d+)\]")
INLINE_CITATION_AFTER_RE = re.compile(r"^[.,;:\])–—-]")
YEAR_TOKEN_RE = re.compile(r"\b(?:19|20)\d{2}\b")

ARXIV_PATTERNS = [
    re.compile(r"arXiv\s*:?\s*([0-9]{4}\.[0-9]{4,5})(?:v\d+)?", re.IGNORECASE),
    re.compile(r"arxiv\.org/(?:abs|pdf)/([0-9]{4}\.[0-9]{4,5})(?:v\d+)?", re.IGNORECASE),
    re.compile(r"\b(hep-[a-z]+/[0-9]{7})(?:v\d+)?", re.IGNORECASE),
    re.compile(r"\b((?:astro-ph|cond-mat|gr-qc|math-ph|nucl-[a-z]+|quant-ph)/[0-9]{7})(?:v\d+)?", re.IGNORECASE),
    re.compile(r"\b([a-z-]+/[0-9]{7})(?:v\d+)?", re.IGNORECASE),
]
DOI_PATTERNS = [
    re.compile(r"doi\s*:?\s*([^\s;]+/[^\s;]+)", re.IGNORECASE),
    re.compile(r"https?://\s*doi\.org/\s*([^\s;]+)", re.IGNORECASE),
    re.compile(r"(10\.\d{4,9}/[^\s;]+)", re.IGNORECASE),
]
PAGE_PATTERNS = [
    re.compile(r"\b(\d{1,5})\s*\(\d{4}\)"),            # 165 (1963)
    re.compile(r",\s*(\d{1,5})\s*\("),                 # , 165 (
    re.compile(r"[Pp](?:age|\.?)\s*(\d{1,5})"),        # page 165, p. 165
    re.compile(r"\b(\d{1,5})[-–]\d{1,5}\s*\(\d{4}\)"),  # 165-170 (1963)
]
JOURNAL_VOLUME_PAGE_RE = re.compile(r"([A-Z][A-Za-z.\s]+)\s+([A-Z]?)\s?(\d{1,4})[, ]+\s*([A-Za-z]?\d{1,6})")
JOURNAL_VOLUME_PAGE_LOOSE_RE = re.compile(
    r"([A-Z][-A-Za-z.]{1,}(?:\s+[A-Z][-A-Za-z.]{1,})*)\s+(\d{1,4})[, ]+\s*([A-Za-z]?\d{1,6})"
)
FIRST_AUTHOR_STOPWORDS = {"Phys", "Rev", "Lett", "Nucl", "Part", "Theor", "Prog", "Report"}


@dataclass
class PageText:
    index: int
    start: int
    end: int
    text: str


@dataclass
class LabelPosition:
    label: str
    index: int
    text_between: str = ""


def _is_noise_label(num: int) -> bool:
    return num > MAX_SCAN_LABEL or is_year_like(num)


def find_references_section_start(text: str) -> int:
    """
    Find the offset where the bibliography starts.

    Tries, in order: a references/bibliography header line, the first entry
    after an acknowledgments header, a bare "1 Author" entry followed by a
    "2 Author" entry, a separator line before the first entry, and a
    bracketed "[1] Author" entry.

    Returns:
        Offset into text, or -1 when nothing looks like a reference section
    """
    for keyword in SECTION_KEYWORDS:
        patterns = [
            rf"(?:^|\n)\s*(?:\d+\.?|[IVXLC]+\.?)?\s*{re.escape(keyword)}\s*(?:\n|$)",
            rf"(?:^|\n)\s*{re.escape(keyword)}\s*(?:\n|$)",
        ]
        for pattern in patterns:
            match = re.search(pattern, text, re.IGNORECASE | re.MULTILINE)
            if match:
                return match.start()

    ack = re.search(r"(?:^|\n)\s*(?:\d+\.?|[IVXLC]+\.?)?\s*ACKNOWLEDGE?MENTS?\s*(?:\n|$)", text, re.IGNORECASE)
    if ack:
        after_ack = text[ack.start():]
        first_entry_patterns = [
            re.compile(r"(?:^|\n)[-─—_]{3,}[\s\n]*\[1\]\s"),
            re.compile(r"(?:^|\n)\s*\[1\]\s+[A-Z]"),
            re.compile(r"(?:^|\n)\s*1\s+[A-Z][a-z]+\s+(Collaboration|et\s+al)", re.IGNORECASE),
            re.compile(r"(?:^|\n)\s*1\s+[A-Z]\.\s*[A-Z]"),
            re.compile(r"(?:^|\n)\s*1\s+[A-Z][a-z]+,\s*[A-Z]\."),
        ]
        for pattern in first_entry_patterns:
            entry = pattern.search(after_ack)
            if entry:
                return ack.start() + entry.start()

    bare_one = re.search(r"(?:^|\n)\s*1\s+[A-Z][a-z]*(?:\s+Collaboration|,|\s+et\s+al|\.\s*[A-Z])", text, re.IGNORECASE)
    if bare_one:
        after_one = text[bare_one.start():bare_one.start() + 500]
        if re.search(r"\n\s*2\s+[A-Z]", after_one):
            return bare_one.start()

    for pattern in (r"(?:^|\n)[-─—_]{3,}[\s\n]*\[1\]\s+[A-Z]", r"(?:^|\n)[-─—_]{3,}[\s\n]*1\s+[A-Z]"):
        separator = re.search(pattern, text)
        if separator:
            return separator.start()

    first_ref = re.search(r"(?:^|\n)\s*\[1\]\s+[A-Z][a-z]", text)
    if first_ref:
        return first_ref.start()

    return -1


def looks_like_reference(text: str) -> bool:
    """True when a text span has a year plus author or journal evidence"""
    if not text or len(text) < 5:
        return False
    if not YEAR_TOKEN_RE.search(text):
        return False

    has_author = bool(
        re.search(r"[A-Z]\.\s*[A-Z][a-z]+", text)
        or re.search(r"[A-Z][a-z]+,\s*[A-Z]\.", text)
        or re.search(r"[A-Z][a-z]+\s+et\s+al\.?", text, re.IGNORECASE)
        or re.search(r"Collaboration", text, re.IGNORECASE)
    )
    if has_author:
        return True

    has_journal_token = bool(re.search(r"\b(Phys|Nucl|Ann|Physica|Rev\.?|Lett|J\.)", text, re.IGNORECASE))
    has_volume_page = bool(re.search(r"\b[A-Z]?[A-Za-z.]{2,}\s*\d{1,4}[, ]+\d{1,5}\b", text))
    return has_journal_token and has_volume_page


def _extract_first_author(text: str) -> Optional[str]:
    match = re.match(r"^([\u4e00-\u9fff\u3400-\u4dbf])[\u4e00-\u9fff\u3400-\u4dbf]{1,3}", text)
    if match:
        return match.group(1)
    match = re.match(r"^([\u4e00-\u9fff]{1,3})(?:[\u3040-\u309f\u30a0-\u30ff]|[\u4e00-\u9fff])+", text)
    if match:
        return match.group(1)
    match = re.match(r"^([\uac00-\ud7af]{1,2})[\uac00-\ud7af]{1,3}", text)
    if match:
        return match.group(1)

    # "A. B. Smith"
    match = re.match(r"^([A-Z]\.?[\s-]*)+([A-Z][a-z]+)", text)
    if match:
        return match.group(2)
    # "Smith, A."
    match = re.match(r"^([A-Z][a-z]+(?:-[A-Z][a-z]+)?),\s*[A-Z]\.", text)
    if match:
        return match.group(1)
    match = re.search(r"Collaboration,?\s+([A-Z]\.?\s*)+([A-Z][a-z]+)", text, re.IGNORECASE)
    if match:
        return match.group(2)
    match = re.search(r"Data\s+Group,?\s+([A-Z]\.?\s*)+([A-Z][a-z]+)", text, re.IGNORECASE)
    if match:
        return match.group(2)
    match = re.match(r"^([A-Z][A-Za-z]+)\s+Collaboration", text, re.IGNORECASE)
    if match:
        return match.group(1)
    match = re.match(r"^([A-Z][a-z]+)\s+et\s+al", text, re.IGNORECASE)
    if match:
        return match.group(1)

    # Last resort: first long capitalized word that is not a journal token
    match = re.search(r"([A-Z][a-z]{3,})", text)
    if match and match.group(1) not in FIRST_AUTHOR_STOPWORDS:
        return match.group(1)
    return None


def extract_paper_info(text: str) -> PaperInfo:
    """
    Extract bibliographic metadata from the text of one cited paper.

    Args:
        text: Raw text of one paper (label prefix already removed)

    Returns:
        PaperInfo with whatever fields could be detected
    """
    fields: Dict[str, Optional[str]] = {}
    is_erratum = bool(re.search(r"\(E\)", text, re.IGNORECASE) or re.search(r"erratum", text, re.IGNORECASE))
    text_no_paren = re.sub(r"\s*\([^)]*\)", " ", text)

    for pattern in DOI_PATTERNS:
        match = pattern.search(text)
        if match:
            fields['doi'] = re.sub(r"\s+", "", re.sub(r"[),.;\s]+$", "", match.group(1)))
            break

    for pattern in ARXIV_PATTERNS:
        match = pattern.search(text)
        if match:
            fields['arxiv_id'] = match.group(1).lower()
            break

    match = JOURNAL_VOLUME_PAGE_RE.search(text_no_paren)
    if match:
        fields['journal_abbrev'] = re.sub(r"\s+", " ", match.group(1).strip())
        if match.group(2).strip():
            fields['issue'] = match.group(2).strip()
        fields['volume'] = match.group(3).strip()
        fields['page_start'] = match.group(4).strip()

    fields['first_author_last_name'] = _extract_first_author(text)

    years = YEAR_TOKEN_RE.findall(text)
    if years:
        fields['year'] = years[-1]

    for pattern in PAGE_PATTERNS:
        match = pattern.search(text)
        if match:
            fields['page_start'] = match.group(1)
            break

    if not fields.get('arxiv_id'):
        match = re.search(r"arxiv[:\s]?([0-9]{4}\.[0-9]{4,5}|[a-z-]+/\d{7})(?:v\d+)?", text, re.IGNORECASE)
        if match:
            fields['arxiv_id'] = match.group(1).lower()
    if not fields.get('doi'):
        match = re.search(r"10\.\d{4,9}/[^\s\],)]+", text, re.IGNORECASE)
        if match:
            fields['doi'] = re.sub(r"[),.;]+$", "", match.group(0)).lower()

    if not (fields.get('journal_abbrev') and fields.get('volume') and fields.get('page_start')):
        match = JOURNAL_VOLUME_PAGE_LOOSE_RE.search(text_no_paren)
        if match:
            fields['journal_abbrev'] = fields.get('journal_abbrev') or match.group(1).strip()
            fields['volume'] = fields.get('volume') or match.group(2)
            fields['page_start'] = fields.get('page_start') or match.group(3)

    return PaperInfo(raw_text=text, is_erratum=is_erratum, **fields)


def _with_carried_author(info: PaperInfo, last_author: Optional[str]) -> Tuple[PaperInfo, Optional[str]]:
    """Entries like "ibid." or "Phys. Rev. D 5, 1 (1972)" inherit the previous author"""
    if not info.first_author_last_name and last_author:
        info = replace(info, first_author_last_name=last_author)
    return info, info.first_author_last_name or last_author


def parse_papers_in_text(text: str) -> List[PaperInfo]:
    """
    Split the text of one label into individual papers.

    Semicolon-separated parts are tried first; with fewer than two papers the
    text is split after each year token; otherwise the text is one paper.
    """
    content = re.sub(r"^\s*", "", text)
    content = re.sub(r"^\[\d+\]\s*", "", content)
    content = re.sub(r"^\d+\.?\s*", "", content)

    papers: List[PaperInfo] = []
    last_author = None
    for part in re.split(r";\s*", content):
        part = part.strip()
        has_year = bool(YEAR_TOKEN_RE.search(part))
        has_doi = bool(re.search(r"doi", part, re.IGNORECASE) or re.search(r"10\.\d{4,9}/", part))
        has_arxiv = bool(re.search(r"arxiv", part, re.IGNORECASE) or re.search(r"\bhep-[a-z]+/\d{7}\b", part, re.IGNORECASE))
        if looks_like_reference(part) or has_year or has_doi or has_arxiv:
            info, last_author = _with_carried_author(extract_paper_info(part), last_author)
            papers.append(info)
    if len(papers) >= 2:
        return papers

    # Each piece runs from the end of the previous year token to the end of the next one
    year_papers: List[PaperInfo] = []
    last_author = None
    cursor = 0
    for match in YEAR_TOKEN_RE.finditer(content):
        combined = content[cursor:match.end()].strip(" ,.")
        cursor = match.end()
        if looks_like_reference(combined):
            info, last_author = _with_carried_author(extract_paper_info(combined), last_author)
            year_papers.append(info)
    if len(year_papers) >= 2:
        return year_papers

    return [extract_paper_info(content)]


class ReferencesParser:
    """Parser for numbered ([n] or bare n) bibliographies"""

    def __init__(self, config: Optional[Dict] = None, max_entry_length: Optional[int] = None,
                 page_chunk_size: Optional[int] = None):
        parsing = (config or get_config())["parsing"]
        self.max_label = parsing["max_label"]
        self.max_entry_length = max_entry_length or parsing["max_entry_length"]
        self.page_chunk_size = page_chunk_size or parsing["page_chunk_size"]

    def split_into_pages(self, text: str) -> List[PageText]:
        """Split on form feeds when present, otherwise into fixed-size chunks"""
        pages = []
        parts = text.split("\f")
        if len(parts) > 1:
            cursor = 0
            for idx, part in enumerate(parts):
                pages.append(PageText(idx, cursor, cursor + len(part), part))
                cursor += len(part) + 1
            return pages

        cursor = 0
        while cursor < len(text):
            end = min(cursor + self.page_chunk_size, len(text))
            pages.append(PageText(len(pages), cursor, end, text[cursor:end]))
            cursor = end
        return pages

    def _score_page(self, page: PageText, is_tail: bool) -> int:
        score = 0
        if find_references_section_start(page.text) >= 0:
            score += 3
        bracket_hits = len(re.findall(r"\[\d{1,3}\]", page.text))
        if bracket_hits >= 2:
            score += 3
        elif bracket_hits == 1:
            score += 1
        bare_hits = len(re.findall(r"(?:^|\n)\s*\d{1,3}\s+[A-Z]", page.text))
        if bare_hits >= 2:
            score += 2
        elif bare_hits == 1:
            score += 1
        if is_tail:
            score += 1
        return score

    def build_reference_section(self, pages: List[PageText]) -> Tuple[str, int, int]:
        """
        Pick the page where the bibliography starts and trim to its first entry.

        Returns:
            Tuple of (reference text, start offset, start page index)
        """
        best_index = -1
        best_score = None
        for i in range(len(pages) - 1, -1, -1):
            score = self._score_page(pages[i], i >= len(pages) - 3)
            if best_score is None or score > best_score:
                best_score = score
                best_index = i

        if best_index < 0 or not best_score or best_score <= 0:
            best_index = max(0, len(pages) - 3)

        ref_pages = pages[best_index:]
        ref_text = "\n".join(page.text for page in ref_pages)
        ref_start = ref_pages[0].start if ref_pages else 0

        inner_start = find_references_section_start(ref_text)
        if inner_start >= 0:
            ref_text = ref_text[inner_start:]
            ref_start += inner_start

        positions = self.extract_label_positions(ref_text)
        if positions:
            trim_offset = len(ref_text)
            label_one = next((p for p in positions if p.label == "1"), None)
            if label_one:
                trim_offset = label_one.index
            else:
                min_label = min(int(p.label) for p in positions)
                trim_offset = next(p.index for p in positions if int(p.label) == min_label)
            if 0 < trim_offset < len(ref_text):
                logger.debug(f"Trimmed reference text to first label at {trim_offset}")
                ref_text = ref_text[trim_offset:]
                ref_start += trim_offset

        start_page = ref_pages[0].index if ref_pages else best_index
        return ref_text, ref_start, start_page

    def _attach_spans(self, positions: List[LabelPosition], text: str) -> List[LabelPosition]:
        positions.sort(key=lambda p: p.index)
        for i, position in enumerate(positions):
            end = min(position.index + self.max_entry_length, len(text))
            for following in positions[i + 1:]:
                if following.index > position.index:
                    end = min(end, following.index)
                    break
            position.text_between = text[position.index:end]
        return positions

    def extract_label_positions(self, text: str) -> List[LabelPosition]:
        """
        Find the position of each reference label in the reference text.

        Bracketed labels at line starts come first, then bracketed ranges and
        other bracketed labels after the first entry. Sparse results fall back
        to a relaxed bracket scan and then to bare "n Author" labels.
        """
        positions: List[LabelPosition] = []
        seen = set()

        for match in BRACKET_LABEL_RE.finditer(text):
            label = match.group(1)
            before = text[max(0, match.start() - 30):match.start()]
            is_ref_start = bool(re.search(r"(?:^|\n)\s*$", before)) or not positions
            if label not in seen and is_ref_start:
                seen.add(label)
                positions.append(LabelPosition(label, match.start()))

        for match in BRACKET_RANGE_RE.finditer(text):
            start_num, end_num = int(match.group(1)), int(match.group(2))
            if end_num < start_num:
                continue
            for num in range(start_num, end_num + 1):
                label = str(num)
                if _is_noise_label(num) or label in seen:
                    continue
                seen.add(label)
                positions.append(LabelPosition(label, match.start()))

        if positions:
            first_ref_index = positions[0].index
            for match in BRACKET_LABEL_RE.finditer(text):
                label = match.group(1)
                if match.start() < first_ref_index - 10 or _is_noise_label(int(label)) or label in seen:
                    continue
                if INLINE_CITATION_AFTER_RE.match(text[match.end():match.end() + 5]):
                    continue
                seen.add(label)
                positions.append(LabelPosition(label, match.start()))

        if len(positions) < PARSE_CONFIG["MIN_LABELS_SUCCESS"]:
            positions, seen = [], set()
            last_num = 0
            for match in BRACKET_LABEL_RE.finditer(text):
                label = match.group(1)
                num = int(label)
                if _is_noise_label(num) or label in seen:
                    continue
                if positions and num < last_num - 5:
                    continue
                if INLINE_CITATION_AFTER_RE.match(text[match.end():match.end() + 5]):
                    continue
                seen.add(label)
                positions.append(LabelPosition(label, match.start()))
                last_num = num

        if len(positions) < 3:
            positions = self._bare_label_positions(text)

        positions.sort(key=lambda p: p.index)
        first_one = next((p for p in positions if p.label == "1"), None)
        if first_one:
            positions = [p for p in positions if p.index >= first_one.index]

        return self._attach_spans(positions, text)

    def _bare_label_positions(self, text: str) -> List[LabelPosition]:
        """Labels written as "12 A. Author" or ". 12 Author" without brackets"""
        positions: List[LabelPosition] = []
        seen = set()
        for pattern in (re.compile(r"(?:^|\n|\f)\s*(\d+)\s+([A-Z])"), re.compile(r"\.\s+(\d+)\s+([A-Z])")):
            for match in pattern.finditer(text):
                label = match.group(1)
                num = int(label)
                if _is_noise_label(num) or label in seen:
                    continue
                expected = len(positions) + 1
                if positions and (num < expected - 1 or num > expected + 5):
                    continue
                seen.add(label)
                positions.append(LabelPosition(label, match.start()))
            if len(positions) >= PARSE_CONFIG["MIN_LABELS_SUCCESS"]:
                break

        if len(positions) < PARSE_CONFIG["MIN_LABELS_SUCCESS"]:
            for match in re.finditer(r"(?:^|[\s,])(\d{1,3})\.\s+(?=[A-Z])", text):
                label = match.group(1)
                if _is_noise_label(int(label)) or label in seen:
                    continue
                seen.add(label)
                positions.append(LabelPosition(label, match.start()))
        return positions

    def extract_label_positions_relaxed(self, text: str) -> List[LabelPosition]:
        """Permissive label scan used when the reference section could not be isolated"""
        positions: List[LabelPosition] = []
        seen = set()

        for match in BRACKET_RANGE_RE.finditer(text):
            start_num, end_num = int(match.group(1)), int(match.group(2))
            if end_num < start_num:
                continue
            for num in range(start_num, end_num + 1):
                label = str(num)
                if _is_noise_label(num) or label in seen:
                    continue
                seen.add(label)
                positions.append(LabelPosition(label, match.start()))

        for match in BRACKET_LABEL_RE.finditer(text):
            label = match.group(1)
            if _is_noise_label(int(label)) or label in seen:
                continue
            if INLINE_CITATION_AFTER_RE.match(text[match.end():match.end() + 5]):
                continue
            seen.add(label)
            positions.append(LabelPosition(label, match.start()))

        bare_patterns = (
            re.compile(r"(?:^|[\n\r\f])\s*(\d{1,3})[.)]?\s+(?=[A-Z0-9])"),
            re.compile(r"(?:^|[\s,])(\d{1,3})\.\s+(?=[A-Z0-9])"),
        )
        for pattern in bare_patterns:
            for match in pattern.finditer(text):
                label = match.group(1)
                if _is_noise_label(int(label)) or label in seen:
                    continue
                seen.add(label)
                positions.append(LabelPosition(label, match.start()))

        return self._attach_spans(positions, text)

    def _valid_labels(self, positions: List[LabelPosition]) -> List[LabelPosition]:
        return [
            p for p in positions
            if 1 <= int(p.label) <= self.max_label and not is_year_like(int(p.label))
        ]

    def parse_references_section(self, text: str) -> Optional[DocumentReferenceMapping]:
        """
        Parse the numbered bibliography of a document.

        Args:
            text: Full document text, pages separated by form feeds when available

        Returns:
            DocumentReferenceMapping, or None when no usable reference list was found
        """
        logger.debug(f"Parsing reference list ({len(text)} chars)")
        pages = self.split_into_pages(text)
        if not pages:
            return None

        ref_text, ref_start, ref_start_page = self.build_reference_section(pages)
        if not ref_text.strip():
            logger.debug("Reference text is empty after page selection")
            return None

        positions = self.extract_label_positions(ref_text)
        if len(positions) < PARSE_CONFIG["MIN_LABELS_SUCCESS"]:
            tail_pages = pages[max(0, len(pages) - PARSE_CONFIG["RELAXED_SCAN_PAGES"]):]
            relaxed_text = "\n".join(page.text for page in tail_pages)
            positions = self.extract_label_positions_relaxed(relaxed_text)
            if len(positions) < 2:
                logger.debug(f"Relaxed scan found too few labels ({len(positions)})")
                return None
            ref_text = relaxed_text

        positions = self._valid_labels(positions)
        if positions and min(int(p.label) for p in positions) > 5:
            # The list probably started on an earlier page; widen the scan
            extended_text = "\n".join(page.text for page in pages[max(0, ref_start_page - 6):])
            extended = self.extract_label_positions_relaxed(extended_text)
            if len(extended) > len(positions):
                positions, ref_text = extended, extended_text
            full = self.extract_label_positions_relaxed(text)
            if len(full) > len(positions):
                positions, ref_text = full, text

        positions = self._valid_labels(positions)
        if not positions:
            return None

        label_counts: Dict[str, int] = {}
        label_info: Dict[str, List[PaperInfo]] = {}
        for position in positions:
            papers = [replace(paper, label=position.label) for paper in parse_papers_in_text(position.text_between)]
            label_counts[position.label] = len(papers)
            label_info[position.label] = papers

        if len(label_counts) > PARSE_CONFIG["MAX_REFS_WARNING"]:
            logger.warning(f"Unusually large reference list: {len(label_counts)} labels")

        confidence = self.assess_confidence(positions, label_counts)
        multi = sum(1 for count in label_counts.values() if count > 1)
        logger.debug(f"Reference list: {len(label_counts)} labels, {multi} multi-paper, confidence={confidence}")

        return DocumentReferenceMapping(
            label_counts=label_counts,
            label_info=label_info,
            total_labels=len(positions),
            confidence=confidence,
        )

    @staticmethod
    def assess_confidence(positions: List[LabelPosition], counts: Dict[str, int]) -> str:
        """high: sequential labels with few multi-paper labels; medium: at least 10 labels"""
        labels = [int(p.label) for p in positions]
        sequential = all(labels[i] == labels[i - 1] + 1 for i in range(1, len(labels)))
        multi = sum(1 for count in counts.values() if count > 1)
        if sequential and multi <= len(counts) * 0.3:
            return "high"
        if len(labels) >= 10:
            return "medium"
        return "low"
