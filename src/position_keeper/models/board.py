"""SQLAlchemy models for boards and the cards ordered within them."""

from sqlalchemy import BigInteger, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from position_keeper.db.session import Base
from position_keeper.sequencing import Sortable

DEFAULT_LANE = "todo"


class Board(Base, Sortable):
    """A named collection of cards.

    Boards share one global ordering kept in ``rank``.
    """

    __tablename__ = "board"
    __sortable_field__ = "rank"

    id: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    rank: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)

    cards: Mapped[list["Card"]] = relationship(
        "Card",
        back_populates="board",
        cascade="all, delete-orphan",
        order_by="[Card.lane, Card.position]",
    )


class Card(Base, Sortable):
    """A unit of work placed in one lane of a board.

    Positions are contiguous within each ``(board_id, lane)`` pair; moving a
    card to another lane re-sequences both lanes.
    """

    __tablename__ = "card"
    __sortable_group_by__ = ("board_id", "lane")
    __table_args__ = (
        Index("ix_card_board_id_lane_position", "board_id", "lane", "position"),
    )

    id: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True)
    board_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("board.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # Group keys must be set before flush; column defaults arrive too late.
    lane: Mapped[str] = mapped_column(Text, nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    # Sequence number within the lane; assigned on insert when left empty.
    position: Mapped[int | None] = mapped_column(Integer, nullable=True)

    board: Mapped[Board] = relationship("Board", back_populates="cards")
