# tests/test_scope.py
"""Tests for group scopes."""

from types import SimpleNamespace

from sqlalchemy import Column, Integer, MetaData, String, Table, select

from position_keeper.sequencing import GLOBAL_SCOPE, GroupScope

metadata = MetaData()
item = Table(
    "item",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("list_id", Integer),
    Column("kind", String),
    Column("position", Integer),
)
GROUP_COLUMNS = {"list_id": item.c.list_id, "kind": item.c.kind}


def test_global_scope_is_empty() -> None:
    assert GLOBAL_SCOPE.is_global
    assert GroupScope.from_values((), {"list_id": 1}) == GLOBAL_SCOPE
    assert str(GLOBAL_SCOPE) == "<global>"


def test_global_scope_filters_nothing() -> None:
    stmt = select(item.c.id).where(GLOBAL_SCOPE.clause({}))
    assert "list_id" not in str(stmt)


def test_scope_from_record_and_values_agree() -> None:
    record = SimpleNamespace(list_id=3, kind="bug", position=1)
    from_record = GroupScope.from_record(("list_id", "kind"), record)
    from_values = GroupScope.from_values(("list_id", "kind"), {"list_id": 3, "kind": "bug"})
    assert from_record == from_values
    assert from_record.as_dict() == {"list_id": 3, "kind": "bug"}
    assert str(from_record) == "list_id=3, kind='bug'"


def test_changed_fields() -> None:
    old = GroupScope((("list_id", 1), ("kind", "bug")))
    assert GroupScope((("list_id", 1), ("kind", "bug"))).changed_fields(old) == []
    assert GroupScope((("list_id", 2), ("kind", "bug"))).changed_fields(old) == ["list_id"]
    assert GroupScope((("list_id", 2), ("kind", "task"))).changed_fields(old) == [
        "list_id",
        "kind",
    ]


def test_clause_uses_equality_and_is_null() -> None:
    scope = GroupScope((("list_id", 7), ("kind", None)))
    compiled = str(select(item.c.id).where(scope.clause(GROUP_COLUMNS)))
    assert "item.list_id = :list_id_1" in compiled
    assert "item.kind IS NULL" in compiled
