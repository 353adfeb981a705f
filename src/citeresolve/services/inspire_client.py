"""
INSPIRE-HEP client for canonical reference lists.

Fetches the references of a literature record and converts each one into a
CanonicalEntry.

Usage:
    from citeresolve.services.inspire_client import InspireClient

    client = InspireClient()
    entries = client.fetch_references("1234567")
"""

import logging
import re
from typing import Any, Dict, List, Optional

import requests
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from ..exceptions import InspireError
from ..models import CanonicalEntry, PublicationInfo

logger = logging.getLogger(__name__)

RECORD_REF_RE = re.compile(r"/literature/(\d+)")
USER_AGENT = "citeresolve/1.0"


def extract_recid(record: Optional[Dict[str, Any]]) -> Optional[str]:
    """Record id from a {"$ref": ".../literature/123"} link"""
    if not record:
        return None
    match = RECORD_REF_RE.search(record.get("$ref", "") or "")
    return match.group(1) if match else None


def _author_name(author: Dict[str, Any]) -> Optional[str]:
    if author.get("full_name"):
        return author["full_name"]
    if author.get("name"):
        return author["name"]
    last = author.get("last_name")
    first = author.get("first_name")
    if last and first:
        return f"{last}, {first}"
    return last or first


def _first_value(values) -> Optional[str]:
    """First element of an INSPIRE list field, which may hold strings or {"value": ...} dicts"""
    if not values:
        return None
    first = values[0]
    if isinstance(first, dict):
        return first.get("value")
    return first


def _primary_publication_info(info) -> Dict[str, Any]:
    """Publication info may be a dict or a list with errata; prefer the first non-erratum"""
    if isinstance(info, list):
        for item in info:
            if isinstance(item, dict) and (item.get("material") or "").lower() != "erratum":
                return item
        return info[0] if info and isinstance(info[0], dict) else {}
    return info or {}


def _title(reference: Dict[str, Any]) -> Optional[str]:
    title = reference.get("title")
    if isinstance(title, str):
        return title
    if isinstance(title, dict) and isinstance(title.get("title"), str):
        return title["title"]
    titles = reference.get("titles")
    if isinstance(titles, list) and titles and isinstance(titles[0], dict):
        return titles[0].get("title")
    return None


def format_author_text(authors: List[str], max_authors: int = 3) -> str:
    if not authors:
        return ""
    if len(authors) > max_authors:
        return f"{', '.join(authors[:max_authors])} et al."
    return ", ".join(authors)


def build_canonical_entry(wrapper: Dict[str, Any], index: int) -> CanonicalEntry:
    """
    Convert one element of ``metadata.references`` into a CanonicalEntry.

    Args:
        wrapper: {"reference": {...}, "record": {"$ref": ...}}
        index: Position in the reference list

    Returns:
        CanonicalEntry with id "{index}-{recid or label}"
    """
    reference = wrapper.get("reference") or {}
    recid = extract_recid(wrapper.get("record"))

    authors = [name for name in (_author_name(a) for a in reference.get("authors") or []) if name]
    raw_pub = reference.get("publication_info")
    pub = _primary_publication_info(raw_pub)

    year = None
    if pub.get("year"):
        year = str(pub["year"])
    elif pub.get("date"):
        year = str(pub["date"])[:4]

    publication_info = None
    if pub:
        publication_info = PublicationInfo(
            journal_title=pub.get("journal_title"),
            journal_volume=pub.get("journal_volume"),
            volume=pub.get("volume"),
            page_start=pub.get("page_start"),
            artid=pub.get("artid"),
            year=pub.get("year"),
        )

    arxiv = reference.get("arxiv_eprint")
    if isinstance(arxiv, list):
        arxiv = _first_value(arxiv)

    label = reference.get("label")
    return CanonicalEntry(
        id=f"{index}-{recid or label or index}",
        label=str(label) if label is not None else None,
        authors=authors,
        author_text=format_author_text(authors),
        title=_title(reference),
        year=year,
        arxiv_details=arxiv,
        doi=_first_value(reference.get("dois")),
        publication_info=publication_info,
        recid=recid,
    )


class InspireClient:
    """Client for the INSPIRE-HEP literature API"""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config or {}
        self.base_url = self.config.get("base_url", "https://inspirehep.net/api").rstrip("/")
        self.timeout = self.config.get("timeout", 30)
        self.max_retries = self.config.get("max_retries", 3)
        self.session = requests.Session()
        self.session.headers.update({
            "Accept": "application/json",
            "User-Agent": USER_AGENT,
        })
        self.cache: Dict[str, List[CanonicalEntry]] = {}

    @retry(wait=wait_exponential(multiplier=1, max=30),
           retry=retry_if_exception_type((requests.exceptions.ConnectionError, requests.exceptions.Timeout)),
           stop=stop_after_attempt(3),
           reraise=True)
    def _get_with_retry(self, url: str, **kwargs) -> requests.Response:
        return self.session.get(url, timeout=self.timeout, **kwargs)

    def get_record(self, recid: str, fields: Optional[str] = None) -> Dict[str, Any]:
        """
        Fetch a literature record as JSON.

        Raises:
            InspireError: On connection failure after retries or a non-200 response
        """
        url = f"{self.base_url}/literature/{recid}"
        params = {"fields": fields} if fields else None
        logger.debug(f"Fetching INSPIRE record {recid}")
        try:
            get = InspireClient._get_with_retry.retry_with(stop=stop_after_attempt(self.max_retries))
            response = get(self, url, params=params)
        except requests.exceptions.RequestException as e:
            raise InspireError(f"Failed to fetch INSPIRE record {recid}: {e}") from e

        if response.status_code == 404:
            raise InspireError(f"INSPIRE record {recid} not found", status_code=404)
        if response.status_code != 200:
            raise InspireError(
                f"INSPIRE request for {recid} failed with status {response.status_code}",
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as e:
            raise InspireError(f"Invalid JSON for INSPIRE record {recid}") from e

    def fetch_references(self, recid: str) -> List[CanonicalEntry]:
        """
        Fetch the reference list of a record as CanonicalEntry objects.

        Results are cached per record id for the lifetime of the client.
        """
        recid = str(recid).strip()
        if recid in self.cache:
            logger.debug(f"Using cached references for {recid}")
            return self.cache[recid]

        payload = self.get_record(recid, fields="metadata.references")
        references = (payload.get("metadata") or {}).get("references") or []
        entries = [build_canonical_entry(wrapper, i) for i, wrapper in enumerate(references)]
        logger.debug(f"Fetched {len(entries)} references for INSPIRE record {recid}")

        self.cache[recid] = entries
        return entries

    def clear_cache(self):
        self.cache.clear()

    def close(self):
        self.session.close()
