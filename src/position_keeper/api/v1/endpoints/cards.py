# src/position_keeper/api/v1/endpoints/cards.py
"""Card endpoints for the Position Keeper API."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from position_keeper.db.session import get_db
from position_keeper.models import Card
from position_keeper.schemas.board import CardResponse, CardUpdate
from position_keeper.sequencing import GroupScope

from .boards import clamp_position

router = APIRouter(prefix="/cards", tags=["cards"])
SessionDep = Annotated[Session, Depends(get_db)]


def get_card_or_404(db: Session, card_id: int) -> Card:
    """Return the card or raise a 404."""
    card = db.get(Card, card_id)
    if card is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Card not found"
        )
    return card


@router.get("/{card_id}", response_model=CardResponse)
async def get_card(card_id: int, db: SessionDep) -> Card:
    """Get a specific card by ID."""
    return get_card_or_404(db, card_id)


@router.patch("/{card_id}", response_model=CardResponse)
async def update_card(card_id: int, card_data: CardUpdate, db: SessionDep) -> Card:
    """Edit a card, move it within its lane, or send it to another lane.

    A card sent to another lane without a position goes to the end of that lane.
    """
    card = get_card_or_404(db, card_id)
    changes = card_data.model_dump(exclude_unset=True)

    if changes.get("title") is not None:
        card.title = changes["title"]

    new_lane = changes.get("lane")
    requested = changes.get("position")
    if new_lane is not None and new_lane != card.lane:
        scope = GroupScope((("board_id", card.board_id), ("lane", new_lane)))
        card.position = clamp_position(db, Card, scope, requested, joining=True)
        card.lane = new_lane
    elif requested is not None:
        scope = GroupScope((("board_id", card.board_id), ("lane", card.lane)))
        card.position = clamp_position(db, Card, scope, requested, joining=False)

    db.commit()
    db.refresh(card)
    return card


@router.delete(
    "/{card_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
)
async def delete_card(card_id: int, db: SessionDep) -> Response:
    """Delete a card and close the gap it leaves in its lane."""
    card = get_card_or_404(db, card_id)
    db.delete(card)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
