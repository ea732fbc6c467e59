"""SQLAlchemy models for the Position Keeper service."""

from .board import DEFAULT_LANE, Board, Card

__all__ = [
    "Board", "Card",
    "DEFAULT_LANE",
]
