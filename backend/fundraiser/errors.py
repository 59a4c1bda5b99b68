"""
Error taxonomy shared by the store, the HTTP handlers and the client.
"""
from typing import Any, Dict, List, Optional


class FundraiserError(Exception):
    """Base class for all application errors"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(FundraiserError):
    """Malformed or missing input; user-correctable (400)"""

    def __init__(self, message: str, errors: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message)
        self.errors = errors or []


class NotFoundError(FundraiserError):
    """A requested singleton resource does not exist (404)"""


class ConflictError(FundraiserError):
    """Uniqueness violation, e.g. a newsletter email subscribed twice"""


class StoreError(FundraiserError):
    """Underlying I/O or database failure (500)"""


def field_errors(pydantic_errors) -> List[Dict[str, Any]]:
    """Flatten pydantic error dicts into [{"field": ..., "message": ...}]."""
    out = []
    for err in pydantic_errors:
        loc = [str(p) for p in err.get('loc', ()) if p not in ('body', 'query')]
        out.append({'field': '.'.join(loc) or None, 'message': err.get('msg', 'Invalid value')})
    return out
