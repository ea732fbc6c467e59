# src/position_keeper/api/v1/endpoints/boards.py
"""Board endpoints for the Position Keeper API."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from position_keeper.db.session import get_db
from position_keeper.models import Board, Card
from position_keeper.schemas.board import (
    BoardCreate,
    BoardResponse,
    BoardUpdate,
    CardCreate,
    CardResponse,
    CompactResponse,
)
from position_keeper.sequencing import GLOBAL_SCOPE, GroupScope, session_sequencer

router = APIRouter(prefix="/boards", tags=["boards"])
SessionDep = Annotated[Session, Depends(get_db)]


def clamp_position(
    db: Session,
    model: type,
    scope: GroupScope,
    requested: int | None,
    *,
    joining: bool,
) -> int | None:
    """Limit a requested position to the slots that exist in ``scope``.

    A record joining the group may take one slot past the end; a record
    already in it may only move between existing slots.
    """
    if requested is None:
        return None
    sequencer = session_sequencer(db, model)
    first = sequencer.config.first_position
    last = first + sequencer.store.count(scope) - (0 if joining else 1)
    return max(first, min(requested, last))


def get_board_or_404(db: Session, board_id: int) -> Board:
    """Return the board or raise a 404."""
    board = db.get(Board, board_id)
    if board is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Board not found"
        )
    return board


@router.get("/", response_model=list[BoardResponse])
async def list_boards(db: SessionDep) -> list[Board]:
    """List all boards in rank order."""
    return list(db.query(Board).all())


@router.post("/",
          response_model=BoardResponse,
          status_code=status.HTTP_201_CREATED)
async def create_board(board_data: BoardCreate, db: SessionDep) -> Board:
    """Create a board, appended or inserted at the requested rank."""
    board = Board(
        name=board_data.name,
        rank=clamp_position(db, Board, GLOBAL_SCOPE, board_data.rank, joining=True),
    )
    db.add(board)
    db.commit()
    db.refresh(board)
    return board


@router.get("/{board_id}", response_model=BoardResponse)
async def get_board(board_id: int, db: SessionDep) -> Board:
    """Get a specific board by ID."""
    return get_board_or_404(db, board_id)


@router.patch("/{board_id}", response_model=BoardResponse)
async def update_board(board_id: int, board_data: BoardUpdate, db: SessionDep) -> Board:
    """Rename a board or move it to another rank."""
    board = get_board_or_404(db, board_id)
    changes = board_data.model_dump(exclude_unset=True)
    if changes.get("name") is not None:
        board.name = changes["name"]
    if changes.get("rank") is not None:
        board.rank = clamp_position(db, Board, GLOBAL_SCOPE, changes["rank"], joining=False)
    db.commit()
    db.refresh(board)
    return board


@router.delete(
    "/{board_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
)
async def delete_board(board_id: int, db: SessionDep) -> Response:
    """Delete a board and every card on it."""
    board = get_board_or_404(db, board_id)
    db.delete(board)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{board_id}/cards", response_model=list[CardResponse])
async def list_cards(
    board_id: int,
    db: SessionDep,
    lane: Annotated[str | None, Query(min_length=1)] = None,
) -> list[Card]:
    """List the cards of a board, optionally limited to one lane."""
    get_board_or_404(db, board_id)
    query = db.query(Card).filter(Card.board_id == board_id)
    if lane is not None:
        query = query.filter(Card.lane == lane)
    return list(query.order_by(Card.lane).all())


@router.post("/{board_id}/cards",
          response_model=CardResponse,
          status_code=status.HTTP_201_CREATED)
async def create_card(board_id: int, card_data: CardCreate, db: SessionDep) -> Card:
    """Add a card to a lane, appended or inserted at the requested position."""
    get_board_or_404(db, board_id)
    scope = GroupScope((("board_id", board_id), ("lane", card_data.lane)))
    card = Card(
        board_id=board_id,
        lane=card_data.lane,
        title=card_data.title,
        position=clamp_position(db, Card, scope, card_data.position, joining=True),
    )
    db.add(card)
    db.commit()
    db.refresh(card)
    return card


@router.post("/{board_id}/lanes/{lane}/compact", response_model=CompactResponse)
async def compact_lane(board_id: int, lane: str, db: SessionDep) -> CompactResponse:
    """Renumber one lane so its positions run without gaps."""
    get_board_or_404(db, board_id)
    scope = GroupScope((("board_id", board_id), ("lane", lane)))
    renumbered = session_sequencer(db, Card).compact(scope)
    db.commit()
    return CompactResponse(board_id=board_id, lane=lane, renumbered=renumbered)
