"""Per-model sortable configuration and its resolution against a mapping."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

from sqlalchemy import Column, Table
from sqlalchemy.orm import ColumnProperty, Mapper

from .errors import SortableConfigError

DEFAULT_POSITION_FIELD = "position"
DEFAULT_KEY_FIELD = "id"


def _normalize_group_by(group_by: str | Sequence[str] | None) -> tuple[str, ...]:
    if group_by is None:
        return ()
    if isinstance(group_by, str):
        return (group_by,)
    return tuple(group_by)


@dataclass(frozen=True)
class SortableConfig:
    """Which columns carry the position, the group keys and the row key.

    Attributes:
        position_field: Attribute holding the sequence number.
        group_by: Attributes whose values partition the table into groups.
            Empty means one global group.
        key_field: Attribute used to address rows when shifting.
        first_position: Position given to the first record of an empty group.
    """

    position_field: str = DEFAULT_POSITION_FIELD
    group_by: tuple[str, ...] = ()
    key_field: str = DEFAULT_KEY_FIELD
    first_position: int = 1

    @classmethod
    def from_model(cls, model: type) -> SortableConfig:
        """Read the ``__sortable_*__`` class attributes declared on ``model``."""
        return cls(
            position_field=getattr(model, "__sortable_field__", DEFAULT_POSITION_FIELD),
            group_by=_normalize_group_by(getattr(model, "__sortable_group_by__", None)),
            key_field=getattr(model, "__sortable_key__", DEFAULT_KEY_FIELD),
            first_position=getattr(model, "__sortable_first_position__", 1),
        )

    @property
    def fields(self) -> tuple[str, ...]:
        """Attributes whose change can affect the ordering."""
        return (self.position_field, *self.group_by)


@dataclass(frozen=True)
class SortableColumns:
    """Table columns backing a :class:`SortableConfig`."""

    table: Table
    key: Column[Any]
    position_field: str
    position: Column[Any]
    groups: dict[str, Column[Any]]

    def by_attribute(self) -> dict[str, Column[Any]]:
        """Map the position and group-key attribute names to their columns."""
        return {self.position_field: self.position, **self.groups}

    @classmethod
    def from_mapper(cls, mapper: Mapper[Any], config: SortableConfig) -> SortableColumns:
        """Resolve the configured attribute names to columns of ``mapper``.

        Raises:
            SortableConfigError: If an attribute is not a plain mapped column,
                the key is not the single-column primary key, or the columns
                live in different tables.
        """
        position = _column_for(mapper, config.position_field)
        key = _column_for(mapper, config.key_field)
        if len(mapper.primary_key) != 1 or mapper.primary_key[0] is not key:
            raise SortableConfigError(
                f"{mapper.class_.__name__}.{config.key_field} must be the single-column primary key"
            )
        groups = {field: _column_for(mapper, field) for field in config.group_by}

        table = position.table
        for column in (key, *groups.values()):
            if column.table is not table:
                raise SortableConfigError(
                    f"{mapper.class_.__name__}: sortable columns must share the table "
                    f"{table.name!r}, found {column.table.name!r}.{column.name}"
                )
        return cls(
            table=table,
            key=key,
            position_field=config.position_field,
            position=position,
            groups=groups,
        )


def _column_for(mapper: Mapper[Any], attribute: str) -> Column[Any]:
    prop = mapper.attrs.get(attribute)
    if not isinstance(prop, ColumnProperty) or len(prop.columns) != 1:
        raise SortableConfigError(
            f"{mapper.class_.__name__}.{attribute} is not a mapped column"
        )
    return prop.columns[0]


@lru_cache(maxsize=None)
def config_for(model: type) -> SortableConfig:
    return SortableConfig.from_model(model)


@lru_cache(maxsize=None)
def columns_for(mapper: Mapper[Any]) -> SortableColumns:
    return SortableColumns.from_mapper(mapper, config_for(mapper.class_))
