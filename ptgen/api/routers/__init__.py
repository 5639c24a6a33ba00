"""Router exports for the PT-Gen API."""
from . import gen, health

__all__ = ["gen", "health"]
