"""Position Keeper: gapless ordering of records within groups."""

from position_keeper.sequencing import (
    GroupScope,
    MultipleGroupChangeWarning,
    Sequencer,
    Sortable,
    SortableConfig,
)

__all__ = [
    "GroupScope",
    "MultipleGroupChangeWarning",
    "Sequencer",
    "Sortable",
    "SortableConfig",
]
