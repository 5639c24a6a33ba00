"""FastAPI dependencies for the PT-Gen API."""
from fastapi import Depends, Request

from ..resolver import Resolver
from .settings import PtGenSettings
from .state import AppState


def get_app_state(request: Request) -> AppState:
    """Resolve the shared application state from the FastAPI request."""
    return request.app.state.app_state


def get_settings(app_state: AppState = Depends(get_app_state)) -> PtGenSettings:
    """Return the active settings."""
    return app_state.settings


def get_resolver(app_state: AppState = Depends(get_app_state)) -> Resolver:
    """Return the resolver dependency."""
    return app_state.resolver
