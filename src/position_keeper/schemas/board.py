"""Board and card Pydantic schemas."""

from pydantic import BaseModel, ConfigDict, Field

from position_keeper.models.board import DEFAULT_LANE


class BoardCreate(BaseModel):
    """Schema for creating a board.

    Leaving ``rank`` empty appends the board after the existing ones.
    """

    name: str = Field(..., min_length=1)
    rank: int | None = Field(default=None, ge=0)


class BoardUpdate(BaseModel):
    """Schema for renaming or moving a board."""

    name: str | None = Field(default=None, min_length=1)
    rank: int | None = Field(default=None, ge=0)


class BoardResponse(BaseModel):
    """Schema for board information returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    rank: int


class CardCreate(BaseModel):
    """Schema for creating a card in a board lane.

    Leaving ``position`` empty appends the card to the lane.
    """

    title: str = Field(..., min_length=1)
    lane: str = Field(default=DEFAULT_LANE, min_length=1)
    position: int | None = Field(default=None, ge=0)


class CardUpdate(BaseModel):
    """Schema for editing, moving or re-laning a card.

    Only the fields that are present are applied.
    """

    title: str | None = Field(default=None, min_length=1)
    lane: str | None = Field(default=None, min_length=1)
    position: int | None = Field(default=None, ge=0)


class CardResponse(BaseModel):
    """Schema for card information returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    board_id: int
    lane: str
    title: str
    position: int


class CompactResponse(BaseModel):
    """Result of renumbering one lane."""

    board_id: int
    lane: str
    renumbered: int
