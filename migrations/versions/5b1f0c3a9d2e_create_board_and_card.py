"""create board and card

Revision ID: 5b1f0c3a9d2e
Revises:
Create Date: 2026-10-17 09:12:41.331204

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "5b1f0c3a9d2e"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ID_TYPE = sa.BigInteger().with_variant(sa.Integer(), "sqlite")


def upgrade() -> None:
    """Create the board table and the card table ordered per board lane."""
    op.create_table(
        "board",
        sa.Column("id", ID_TYPE, nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("rank", sa.Integer(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_board_rank", "board", ["rank"])

    op.create_table(
        "card",
        sa.Column("id", ID_TYPE, nullable=False),
        sa.Column("board_id", sa.BigInteger(), nullable=False),
        sa.Column("lane", sa.Text(), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(["board_id"], ["board.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_card_board_id", "card", ["board_id"])
    # Displacement queries filter on the group keys and a position range.
    op.create_index("ix_card_board_id_lane_position", "card", ["board_id", "lane", "position"])


def downgrade() -> None:
    """Drop the card and board tables."""
    op.drop_index("ix_card_board_id_lane_position", table_name="card")
    op.drop_index("ix_card_board_id", table_name="card")
    op.drop_table("card")
    op.drop_index("ix_board_rank", table_name="board")
    op.drop_table("board")
