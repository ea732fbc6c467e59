"""SQLAlchemy lifecycle bindings for sortable models.

Models opt in by inheriting :class:`Sortable`. Mapper events registered on the
mixin with ``propagate=True`` call the :class:`Sequencer` during each flush:

* ``before_insert`` assigns or opens the new record's slot,
* ``before_update`` shifts siblings around a moved or re-grouped record,
* ``before_delete`` reads the row's persisted position and group keys,
* ``after_delete`` closes the gap left behind.

All sibling writes go through Core statements on the flush's connection, so
they share the flush transaction and never fire these events again.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from sqlalchemy import Connection, event, inspect
from sqlalchemy.orm import Mapper, ORMExecuteState, Session, object_session
from sqlalchemy.orm.attributes import set_committed_value

from position_keeper.core.settings import settings

from .config import SortableConfig, columns_for, config_for
from .sequencer import Sequencer
from .store import PositionStore

logger = logging.getLogger(__name__)

_PENDING_INSERTS = "position_keeper.pending_inserts"
_DELETED_SNAPSHOTS = "position_keeper.deleted_snapshots"


class Sortable:
    """Mixin keeping a model's rows in a gapless order within their group.

    Declare the columns on the model::

        class Card(Base, Sortable):
            __tablename__ = "card"
            __sortable_group_by__ = ("board_id", "lane")

            id: Mapped[int] = mapped_column(primary_key=True)
            board_id: Mapped[int]
            lane: Mapped[str]
            position: Mapped[int | None]

    ``__sortable_field__`` names the position column (default ``position``),
    ``__sortable_group_by__`` one or more group-key columns (default none,
    meaning a single global group), ``__sortable_key__`` the single-column
    primary key used to address rows (default ``id``) and
    ``__sortable_first_position__`` the position of the first record in a
    group (default 1).

    Within one flush any number of records may be inserted or deleted, and
    one record per group may change position or group alongside them.
    """

    __sortable_field__ = "position"
    __sortable_group_by__ = None
    __sortable_key__ = "id"
    __sortable_first_position__ = 1

    @classmethod
    def sortable_config(cls) -> SortableConfig:
        return config_for(cls)


class _IdentityMapListener:
    """Keep loaded sibling instances in step with direct position writes.

    Instances whose position has pending changes are left alone; their own
    UPDATE will overwrite the row anyway.
    """

    def __init__(self, session: Session, mapper: Mapper[Any], field: str) -> None:
        self._session = session
        self._mapper = mapper
        self._field = field

    def _loaded(self, key: Any) -> Any:
        identity = self._mapper.identity_key_from_primary_key([key])
        instance = self._session.identity_map.get(identity)
        if instance is None:
            return None
        state = inspect(instance)
        if self._field not in state.dict or state.attrs[self._field].history.has_changes():
            return None
        return instance

    def shifted(self, keys: Sequence[Any], delta: int) -> None:
        for key in keys:
            instance = self._loaded(key)
            if instance is not None:
                current = getattr(instance, self._field)
                if current is not None:
                    set_committed_value(instance, self._field, current + delta)

    def assigned(self, key: Any, position: int) -> None:
        instance = self._loaded(key)
        if instance is not None:
            set_committed_value(instance, self._field, position)


def sequencer_for(
    connection: Connection,
    mapper: Mapper[Any],
    session: Session | None = None,
) -> Sequencer:
    """Build a :class:`Sequencer` for ``mapper`` on ``connection``.

    When ``session`` is given, instances it has already loaded follow every
    shift.
    """
    config = config_for(mapper.class_)
    listener = None
    if session is not None:
        listener = _IdentityMapListener(session, mapper, config.position_field)
    store = PositionStore(
        connection,
        columns_for(mapper),
        lock_rows=settings.sequencer_lock_rows,
        listener=listener,
    )
    return Sequencer(store, config)


def session_sequencer(session: Session, model: type) -> Sequencer:
    """Build a :class:`Sequencer` for ``model`` bound to ``session``'s transaction."""
    mapper = inspect(model)
    return sequencer_for(session.connection(), mapper, session)


def _session_info(target: object, name: str, factory: type) -> Any:
    session = object_session(target)
    if session is None:
        return factory()
    return session.info.setdefault(name, factory())


@event.listens_for(Sortable, "before_insert", propagate=True)
def _assign_on_create(mapper: Mapper[Any], connection: Connection, target: Any) -> None:
    pending_by_table = _session_info(target, _PENDING_INSERTS, dict)
    pending = pending_by_table.setdefault(mapper.base_mapper, [])
    sequencer_for(connection, mapper, object_session(target)).assign_on_create(target, pending)
    pending.append(target)


@event.listens_for(Sortable, "before_update", propagate=True)
def _reposition_on_update(mapper: Mapper[Any], connection: Connection, target: Any) -> None:
    config = config_for(mapper.class_)
    state = inspect(target)
    if not any(state.attrs[field].history.has_changes() for field in config.fields):
        return
    sequencer = sequencer_for(connection, mapper, object_session(target))
    original = sequencer.store.snapshot(getattr(target, config.key_field))
    if original is None:
        logger.warning(
            "%s %r has no persisted row; skipping re-sequencing",
            mapper.class_.__name__,
            getattr(target, config.key_field),
        )
        return
    pending = _session_info(target, _PENDING_INSERTS, dict).get(mapper.base_mapper, ())
    sequencer.reposition_on_update(target, original, pending)


@event.listens_for(Sortable, "before_delete", propagate=True)
def _capture_deleted(mapper: Mapper[Any], connection: Connection, target: Any) -> None:
    config = config_for(mapper.class_)
    snapshots = _session_info(target, _DELETED_SNAPSHOTS, dict)
    store = PositionStore(connection, columns_for(mapper))
    snapshots[inspect(target)] = store.snapshot(getattr(target, config.key_field))


@event.listens_for(Sortable, "after_delete", propagate=True)
def _close_gap_on_delete(mapper: Mapper[Any], connection: Connection, target: Any) -> None:
    snapshots = _session_info(target, _DELETED_SNAPSHOTS, dict)
    snapshot = snapshots.pop(inspect(target), None)
    sequencer = sequencer_for(connection, mapper, object_session(target))
    sequencer.close_gap_on_delete(target, snapshot)


@event.listens_for(Session, "before_flush")
@event.listens_for(Session, "after_flush_postexec")
def _reset_flush_state(session: Session, *args: Any) -> None:
    session.info.pop(_PENDING_INSERTS, None)
    session.info.pop(_DELETED_SNAPSHOTS, None)


@event.listens_for(Session, "do_orm_execute")
def _order_by_position(orm_execute_state: ORMExecuteState) -> None:
    """Sort ORM selects of sortable entities by position unless ``unsorted`` is set."""
    if not orm_execute_state.is_select or orm_execute_state.is_column_load:
        return
    if orm_execute_state.execution_options.get("unsorted", False):
        return
    statement = orm_execute_state.statement
    descriptions = getattr(statement, "column_descriptions", None)
    if not descriptions:
        return
    entity = descriptions[0].get("entity")
    if not (isinstance(entity, type) and issubclass(entity, Sortable)):
        return
    if descriptions[0].get("expr") is not entity:
        return
    field = config_for(entity).position_field
    orm_execute_state.statement = statement.order_by(getattr(entity, field))
