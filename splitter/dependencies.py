"""Process-lifetime services shared by the routers, held on app.state."""
from fastapi import Request

from splitter.services.currency import CurrencyNormalizer
from splitter.services.session_store import SessionStore


def get_normalizer(request: Request) -> CurrencyNormalizer:
    return request.app.state.normalizer


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.session_store
