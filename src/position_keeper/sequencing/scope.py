"""Group scopes: the equality filters that partition a table into orderings."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from sqlalchemy.sql import ColumnElement, and_, true


@dataclass(frozen=True)
class GroupScope:
    """Immutable set of ``(column, value)`` pairs identifying one group.

    The empty scope is the single implicit group used by models that declare
    no group-by columns; applying it filters nothing.
    """

    constraints: tuple[tuple[str, Any], ...] = ()

    @classmethod
    def from_values(cls, fields: Iterable[str], values: Mapping[str, Any]) -> GroupScope:
        """Build a scope from the group-key ``fields`` looked up in ``values``."""
        return cls(tuple((field, values.get(field)) for field in fields))

    @classmethod
    def from_record(cls, fields: Iterable[str], record: object) -> GroupScope:
        """Build a scope from the current attribute values of ``record``."""
        return cls(tuple((field, getattr(record, field)) for field in fields))

    @property
    def is_global(self) -> bool:
        return not self.constraints

    def as_dict(self) -> dict[str, Any]:
        return dict(self.constraints)

    def changed_fields(self, other: GroupScope) -> list[str]:
        """Return the group-key fields whose value differs from ``other``."""
        theirs = other.as_dict()
        return [field for field, value in self.constraints if theirs.get(field) != value]

    def clause(self, columns: Mapping[str, ColumnElement[Any]]) -> ColumnElement[bool]:
        """Return the WHERE clause restricting rows to this group.

        ``columns`` maps each group-key attribute name to its table column.

        ``None`` values compare with ``IS NULL`` so rows without a group key
        still form a group of their own.
        """
        if self.is_global:
            return true()
        terms = []
        for field, value in self.constraints:
            column = columns[field]
            terms.append(column.is_(None) if value is None else column == value)
        return and_(*terms)

    def __str__(self) -> str:
        if self.is_global:
            return "<global>"
        return ", ".join(f"{field}={value!r}" for field, value in self.constraints)


GLOBAL_SCOPE = GroupScope()
