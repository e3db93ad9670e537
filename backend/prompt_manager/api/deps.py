"""Shared FastAPI dependencies."""

from fastapi import Request

from ..backends.base import ItemBackend


def get_backend(request: Request) -> ItemBackend:
    """The backend this app was composed with (``app.state.backend``)."""
    return request.app.state.backend
