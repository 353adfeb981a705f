"""
Exception types raised at the collaborator boundaries of citeresolve.

The recognition and resolution core never raises for a "nothing found" outcome;
these are only used by the service clients and the command-line front end.
"""


class CiteResolveError(Exception):
    """Base class for citeresolve errors"""


class InspireError(CiteResolveError):
    """Raised when canonical references cannot be fetched from INSPIRE"""

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.status_code = status_code


class DocumentTextError(CiteResolveError):
    """Raised when the full text of a document cannot be extracted"""
