# src/position_keeper/api/v1/endpoints/__init__.py
"""API endpoint routers."""

from .boards import router as boards_router
from .cards import router as cards_router

__all__ = [
    "boards_router",
    "cards_router",
]
