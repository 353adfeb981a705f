"""
Unit tests for the INSPIRE-HEP client and reference conversion.
"""

import pytest
import sys
import os
from unittest.mock import Mock, patch

import requests

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..', 'src'))

from citeresolve.exceptions import InspireError
from citeresolve.services.inspire_client import (
    InspireClient,
    _primary_publication_info,
    build_canonical_entry,
    extract_recid,
    format_author_text,
)


REFERENCES_PAYLOAD = {
    "metadata": {
        "references": [
            {
                "reference": {
                    "label": "1",
                    "authors": [{"full_name": "Guo, Feng-Kun"}],
                    "title": {"title": "X"},
                    "arxiv_eprint": "1501.00001",
                    "dois": [{"value": "10.1103/X"}],
                    "publication_info": {
                        "journal_title": "Phys.Rev.D",
                        "journal_volume": "91",
                        "page_start": "054017",
                        "year": 2015,
                    },
                },
                "record": {"$ref": "https://inspirehep.net/api/literature/1234"},
            },
            {"reference": {"misc": ["Private communication"]}},
        ]
    }
}


def make_response(status_code=200, payload=None):
    response = Mock()
    response.status_code = status_code
    response.json.return_value = payload if payload is not None else {}
    return response


@pytest.fixture
def client():
    return InspireClient({"max_retries": 1})


class TestConversion:
    """Test conversion of INSPIRE reference records."""

    def test_full_reference(self):
        entry = build_canonical_entry(REFERENCES_PAYLOAD["metadata"]["references"][0], 0)
        assert entry.id == "0-1234"
        assert entry.label == "1"
        assert entry.authors == ["Guo, Feng-Kun"]
        assert entry.author_text == "Guo, Feng-Kun"
        assert entry.title == "X"
        assert entry.year == "2015"
        assert entry.arxiv_details == "1501.00001"
        assert entry.doi == "10.1103/X"
        assert entry.recid == "1234"
        assert entry.publication_info.journal_title == "Phys.Rev.D"
        assert entry.publication_info.journal_volume == "91"

    def test_minimal_reference(self):
        entry = build_canonical_entry(REFERENCES_PAYLOAD["metadata"]["references"][1], 1)
        assert entry.id == "1-1"
        assert entry.label is None
        assert entry.authors == []
        assert entry.publication_info is None

    def test_erratum_skipped(self):
        info = _primary_publication_info([
            {"material": "erratum", "journal_volume": "2"},
            {"journal_volume": "1"},
        ])
        assert info == {"journal_volume": "1"}

    def test_author_text(self):
        assert format_author_text(["A", "B", "C", "D"]) == "A, B, C et al."
        assert format_author_text(["A", "B"]) == "A, B"
        assert format_author_text([]) == ""

    def test_recid(self):
        assert extract_recid({"$ref": "https://inspirehep.net/api/literature/42"}) == "42"
        assert extract_recid(None) is None


class TestInspireClient:
    """Test HTTP behavior with a mocked session."""

    def test_fetch_references(self, client):
        with patch.object(client.session, 'get', return_value=make_response(payload=REFERENCES_PAYLOAD)) as mock_get:
            entries = client.fetch_references("1234567")

        assert [e.id for e in entries] == ["0-1234", "1-1"]
        args, kwargs = mock_get.call_args
        assert args[0] == "https://inspirehep.net/api/literature/1234567"
        assert kwargs['params'] == {"fields": "metadata.references"}

    def test_results_cached(self, client):
        with patch.object(client.session, 'get', return_value=make_response(payload=REFERENCES_PAYLOAD)) as mock_get:
            client.fetch_references("1234567")
            client.fetch_references("1234567")
        assert mock_get.call_count == 1

        client.clear_cache()
        assert client.cache == {}

    @pytest.mark.parametrize("status_code", [404, 500])
    def test_http_errors(self, client, status_code):
        with patch.object(client.session, 'get', return_value=make_response(status_code)):
            with pytest.raises(InspireError) as excinfo:
                client.fetch_references("1")
        assert excinfo.value.status_code == status_code

    def test_invalid_json(self, client):
        response = make_response()
        response.json.side_effect = ValueError("not json")
        with patch.object(client.session, 'get', return_value=response):
            with pytest.raises(InspireError):
                client.get_record("1")

    def test_connection_error(self, client):
        with patch.object(client.session, 'get', side_effect=requests.exceptions.ConnectionError("refused")):
            with pytest.raises(InspireError):
                client.fetch_references("1")
