from fastapi import Request

from .storage import RecordStore


def get_store(request: Request) -> RecordStore:
    """The store injected into the app by create_app()."""
    return request.app.state.store
