"""
Collaborators at the I/O boundary: INSPIRE client and document text extraction
"""

from .inspire_client import InspireClient, build_canonical_entry
from .pdf_processor import PDFProcessor

__all__ = ["InspireClient", "build_canonical_entry", "PDFProcessor"]
