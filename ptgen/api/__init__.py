"""FastAPI front door for the PT-Gen resolver."""
from .app import create_app
from .settings import PtGenSettings

__all__ = ["PtGenSettings", "create_app"]
