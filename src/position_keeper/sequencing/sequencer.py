"""Position maintenance for ordered groups of records.

The :class:`Sequencer` keeps the positions of every group contiguous while
records are created, moved, re-grouped and deleted. It computes which
siblings are displaced by a change and shifts each of them by one step
through a :class:`~position_keeper.sequencing.store.PositionStore`; the
record that triggered the change keeps the position it was given.

Records sequenced earlier in the same unit of work but not yet written
("pending" records) are displaced in memory by the same rules as stored rows.
"""

from __future__ import annotations

import logging
import warnings
from collections.abc import Iterable, Mapping
from typing import Any

from .config import SortableConfig
from .errors import MultipleGroupChangeWarning
from .scope import GroupScope
from .store import PositionStore, ShiftDirection

logger = logging.getLogger(__name__)


def _within(
    value: int,
    lower: int | None,
    upper: int | None,
    lower_inclusive: bool,
    upper_inclusive: bool,
) -> bool:
    if lower is not None and (value < lower if lower_inclusive else value <= lower):
        return False
    if upper is not None and (value > upper if upper_inclusive else value >= upper):
        return False
    return True


class Sequencer:
    """Compute and apply sibling shifts for one sortable table.

    Args:
        store: Event-free access to the table's position column.
        config: Which attributes hold the position and the group keys.
    """

    def __init__(self, store: PositionStore, config: SortableConfig) -> None:
        self.store = store
        self.config = config

    def scope_of(self, record: object) -> GroupScope:
        """Return the group the record currently belongs to."""
        return GroupScope.from_record(self.config.group_by, record)

    def _position(self, record: object) -> int | None:
        return getattr(record, self.config.position_field)

    def _key(self, record: object) -> Any:
        return getattr(record, self.config.key_field)

    def _siblings(self, pending: Iterable[object], scope: GroupScope, record: object) -> list[object]:
        return [other for other in pending if other is not record and self.scope_of(other) == scope]

    def _next_position(self, scope: GroupScope, siblings: Iterable[object] = ()) -> int:
        candidates = [self.store.max_position(scope), *(self._position(o) for o in siblings)]
        top = max((value for value in candidates if value is not None), default=None)
        return self.config.first_position if top is None else top + 1

    def _displace(
        self,
        scope: GroupScope,
        direction: ShiftDirection,
        *,
        siblings: Iterable[object] = (),
        lower: int | None = None,
        upper: int | None = None,
        lower_inclusive: bool = True,
        upper_inclusive: bool = True,
        exclude: Any = None,
    ) -> None:
        """Shift stored rows and pending siblings of ``scope`` lying in the range."""
        self.store.shift(
            self.store.displaced(
                scope,
                lower=lower,
                upper=upper,
                lower_inclusive=lower_inclusive,
                upper_inclusive=upper_inclusive,
                exclude=exclude,
            ),
            direction,
        )
        for other in siblings:
            current = self._position(other)
            if current is not None and _within(
                current, lower, upper, lower_inclusive, upper_inclusive
            ):
                setattr(other, self.config.position_field, current + direction.value)

    def assign_on_create(self, record: object, pending: Iterable[object] = ()) -> int:
        """Give a new record its slot before it is inserted.

        Without a position the record is appended after the last member of its
        group. With a position every sibling at or after that slot moves up.

        Args:
            record: The record about to be inserted.
            pending: Records already sequenced in the same unit of work but not
                yet written. They count as members of their groups.

        Returns:
            The record's position.
        """
        scope = self.scope_of(record)
        siblings = self._siblings(pending, scope, record)
        requested = self._position(record)

        if requested is None:
            position = self._next_position(scope, siblings)
            setattr(record, self.config.position_field, position)
            logger.debug("Appended %s at %d in group %s", type(record).__name__, position, scope)
            return position

        self._displace(scope, ShiftDirection.UP, siblings=siblings, lower=requested)
        logger.debug("Inserted %s at %d in group %s", type(record).__name__, requested, scope)
        return requested

    def reposition_on_update(
        self,
        record: object,
        original: Mapping[str, Any],
        pending: Iterable[object] = (),
    ) -> None:
        """Shift siblings so an updated record fits at its new position.

        Args:
            record: The record with its new attribute values.
            original: Persisted position and group-key values, keyed by
                attribute name, as read before the update.
            pending: Records inserted in the same unit of work and not yet
                written; those in an affected group are displaced too.
        """
        pending = list(pending)
        key = self._key(record)
        new_scope = self.scope_of(record)
        old_scope = GroupScope.from_values(self.config.group_by, original)
        old_position = original.get(self.config.position_field)
        siblings = self._siblings(pending, new_scope, record)

        changed = new_scope.changed_fields(old_scope)
        if changed:
            if len(changed) > 1:
                logger.warning(
                    "%s %r changed group keys %s in one update; resulting positions are "
                    "best-effort",
                    type(record).__name__,
                    key,
                    ", ".join(changed),
                )
                warnings.warn(
                    f"{type(record).__name__} {key!r} changed several group keys at once "
                    f"({', '.join(changed)}); re-sequencing is best-effort",
                    MultipleGroupChangeWarning,
                    stacklevel=2,
                )
            self._enter_group(record, new_scope, key, siblings)
            if old_position is not None:
                self._displace(
                    old_scope,
                    ShiftDirection.DOWN,
                    siblings=self._siblings(pending, old_scope, record),
                    lower=old_position,
                    lower_inclusive=False,
                    exclude=key,
                )
            return

        new_position = self._position(record)
        if new_position is None:
            # A cleared position sends the record to the end of its group.
            new_position = self._next_position(new_scope, siblings)
            if old_position is not None:
                new_position -= 1
            setattr(record, self.config.position_field, new_position)

        if old_position is None:
            self._displace(
                new_scope, ShiftDirection.UP,
                siblings=siblings, lower=new_position, exclude=key,
            )
        elif new_position < old_position:
            self._displace(
                new_scope, ShiftDirection.UP,
                siblings=siblings, lower=new_position, upper=old_position, exclude=key,
            )
        elif new_position > old_position:
            self._displace(
                new_scope, ShiftDirection.DOWN,
                siblings=siblings, lower=old_position, upper=new_position, exclude=key,
            )

    def _enter_group(
        self, record: object, scope: GroupScope, key: Any, siblings: list[object]
    ) -> None:
        position = self._position(record)
        if position is None:
            setattr(record, self.config.position_field, self._next_position(scope, siblings))
            return
        self._displace(scope, ShiftDirection.UP, siblings=siblings, lower=position, exclude=key)

    def close_gap_on_delete(
        self, record: object, snapshot: Mapping[str, Any] | None = None
    ) -> None:
        """Close the slot left behind by a deleted record.

        Args:
            record: The deleted record.
            snapshot: Persisted position and group-key values read before the
                delete. Defaults to the record's attribute values.
        """
        if snapshot is None:
            scope = self.scope_of(record)
            position = self._position(record)
        else:
            scope = GroupScope.from_values(self.config.group_by, snapshot)
            position = snapshot.get(self.config.position_field)
        if position is None:
            return
        self._displace(scope, ShiftDirection.DOWN, lower=position, exclude=self._key(record))

    def compact(self, scope: GroupScope) -> int:
        """Renumber ``scope`` from ``first_position`` without gaps or duplicates.

        The current relative order is preserved. Returns the number of rows
        whose position changed.
        """
        changed = 0
        for offset, (key, position) in enumerate(self.store.ordered(scope)):
            target = self.config.first_position + offset
            if position != target:
                self.store.assign(key, target)
                changed += 1
        if changed:
            logger.info("Compacted group %s of %s: %d row(s) renumbered",
                        scope, self.store.columns.table.name, changed)
        return changed

    def groups(self) -> list[GroupScope]:
        """Return every group present in the table."""
        return self.store.scopes()
