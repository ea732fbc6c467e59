"""Gapless position maintenance for ordered groups of records."""

from .config import SortableConfig
from .errors import MultipleGroupChangeWarning, SequencerError, SortableConfigError
from .events import Sortable, sequencer_for, session_sequencer
from .scope import GLOBAL_SCOPE, GroupScope
from .sequencer import Sequencer
from .store import PositionStore, ShiftDirection

__all__ = [
    "GLOBAL_SCOPE", "GroupScope",
    "MultipleGroupChangeWarning", "SequencerError", "SortableConfigError",
    "PositionStore", "ShiftDirection",
    "Sequencer",
    "Sortable",
    "SortableConfig",
    "sequencer_for", "session_sequencer",
]
