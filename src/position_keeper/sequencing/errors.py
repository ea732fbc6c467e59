"""Exceptions and warnings raised by the sequencing package."""

from __future__ import annotations


class SequencerError(RuntimeError):
    """Base exception raised for sequencing failures.

    Storage-level failures are not wrapped; SQLAlchemy errors raised while
    shifting siblings propagate unchanged so the caller's transaction rolls back.
    """


class SortableConfigError(SequencerError):
    """Raised when a model's sortable declaration does not match its mapping."""


class MultipleGroupChangeWarning(UserWarning):
    """Emitted when one update changes more than one group-key column.

    Re-sequencing across several group dimensions at once is best-effort:
    the record is inserted into its new group and its old group is closed up,
    but the resulting positions are not guaranteed.
    """
