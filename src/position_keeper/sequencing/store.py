"""Direct, event-free access to a table's position column.

The store is the only way the sequencer touches the database. It issues Core
statements on a :class:`~sqlalchemy.engine.Connection`, which never dispatch
ORM mapper events, so shifting siblings cannot re-enter the lifecycle hooks.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from enum import Enum
from typing import Any, Protocol

from sqlalchemy import Connection, func, select, update
from sqlalchemy.sql import ColumnElement, Select

from .config import SortableColumns
from .scope import GLOBAL_SCOPE, GroupScope

logger = logging.getLogger(__name__)


class ShiftDirection(Enum):
    """Direction of a one-step position shift."""

    UP = 1
    DOWN = -1


class PositionListener(Protocol):
    """Receives every position write so in-memory copies can follow."""

    def shifted(self, keys: Sequence[Any], delta: int) -> None: ...

    def assigned(self, key: Any, position: int) -> None: ...


class PositionStore:
    """Query and patch the position column of one table.

    Args:
        connection: Connection the statements run on; the caller owns the
            transaction.
        columns: Resolved key, position and group-key columns.
        lock_rows: Add ``FOR UPDATE`` to reads of the group's rows. Dialects
            without row locks ignore it.
        listener: Optional observer notified after each write.
    """

    def __init__(
        self,
        connection: Connection,
        columns: SortableColumns,
        *,
        lock_rows: bool = False,
        listener: PositionListener | None = None,
    ) -> None:
        self.connection = connection
        self.columns = columns
        self.lock_rows = lock_rows
        self.listener = listener

    def _in_scope(self, scope: GroupScope) -> ColumnElement[bool]:
        return scope.clause(self.columns.groups)

    def _locked(self, stmt: Select[Any]) -> Select[Any]:
        return stmt.with_for_update() if self.lock_rows else stmt

    def max_position(self, scope: GroupScope) -> int | None:
        """Return the highest position in ``scope``, or None for an empty group."""
        if self.lock_rows:
            # Aggregates cannot carry FOR UPDATE; lock the group's rows first.
            self.connection.execute(
                self._locked(select(self.columns.key).where(self._in_scope(scope)))
            )
        return self.connection.execute(
            select(func.max(self.columns.position)).where(self._in_scope(scope))
        ).scalar()

    def displaced(
        self,
        scope: GroupScope,
        *,
        lower: int | None = None,
        upper: int | None = None,
        lower_inclusive: bool = True,
        upper_inclusive: bool = True,
        exclude: Any = None,
    ) -> list[Any]:
        """Return the keys of rows in ``scope`` whose position lies in the range.

        Either bound may be omitted. ``exclude`` drops one key from the result,
        normally the record being moved.
        """
        position = self.columns.position
        stmt = select(self.columns.key).where(self._in_scope(scope))
        if lower is not None:
            stmt = stmt.where(position >= lower if lower_inclusive else position > lower)
        if upper is not None:
            stmt = stmt.where(position <= upper if upper_inclusive else position < upper)
        if exclude is not None:
            stmt = stmt.where(self.columns.key != exclude)
        return list(self.connection.execute(self._locked(stmt)).scalars())

    def shift(self, keys: Sequence[Any], direction: ShiftDirection) -> int:
        """Move every row in ``keys`` one step in ``direction``.

        All rows receive the same delta, so the order of ``keys`` is irrelevant.

        Returns:
            Number of rows updated; 0 for an empty ``keys``.
        """
        if not keys:
            return 0
        position = self.columns.position
        result = self.connection.execute(
            update(self.columns.table)
            .where(self.columns.key.in_(keys))
            .values({position: position + direction.value})
        )
        logger.debug(
            "Shifted %d row(s) of %s %s",
            result.rowcount,
            self.columns.table.name,
            direction.name.lower(),
        )
        if self.listener is not None:
            self.listener.shifted(keys, direction.value)
        return result.rowcount

    def assign(self, key: Any, position: int) -> None:
        """Overwrite the position of a single row."""
        self.connection.execute(
            update(self.columns.table)
            .where(self.columns.key == key)
            .values({self.columns.position: position})
        )
        if self.listener is not None:
            self.listener.assigned(key, position)

    def snapshot(self, key: Any) -> dict[str, Any] | None:
        """Return the persisted position and group-key values of one row.

        Keys of the returned mapping are attribute names. None when the row
        does not exist.
        """
        labelled = [
            column.label(field) for field, column in self.columns.by_attribute().items()
        ]
        row = self.connection.execute(
            select(*labelled).where(self.columns.key == key)
        ).mappings().first()
        return dict(row) if row is not None else None

    def ordered(self, scope: GroupScope) -> list[tuple[Any, int | None]]:
        """Return ``(key, position)`` pairs of ``scope`` in sequence order.

        Rows without a position sort last; ties are broken by key.
        """
        position = self.columns.position
        stmt = (
            select(self.columns.key, position)
            .where(self._in_scope(scope))
            .order_by(position.is_(None), position, self.columns.key)
        )
        return [(key, value) for key, value in self.connection.execute(self._locked(stmt))]

    def scopes(self) -> list[GroupScope]:
        """Return every distinct group present in the table."""
        if not self.columns.groups:
            return [GLOBAL_SCOPE]
        fields = list(self.columns.groups)
        rows = self.connection.execute(
            select(*[self.columns.groups[field].label(field) for field in fields])
            .select_from(self.columns.table)
            .distinct()
        ).mappings()
        return [GroupScope.from_values(fields, row) for row in rows]

    def count(self, scope: GroupScope) -> int:
        """Return how many rows belong to ``scope``."""
        return self.connection.execute(
            select(func.count(self.columns.key)).where(self._in_scope(scope))
        ).scalar_one()

