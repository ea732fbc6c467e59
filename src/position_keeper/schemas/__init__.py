"""Pydantic schemas for the Position Keeper API."""

from .board import (
    BoardCreate,
    BoardResponse,
    BoardUpdate,
    CardCreate,
    CardResponse,
    CardUpdate,
    CompactResponse,
)

__all__ = [
    "BoardCreate", "BoardResponse", "BoardUpdate",
    "CardCreate", "CardResponse", "CardUpdate",
    "CompactResponse",
]
