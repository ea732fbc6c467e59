"""Renumber every group of the sortable tables so positions run without gaps."""
from __future__ import annotations

import argparse
import sys

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from position_keeper.db.session import SessionLocal
from position_keeper.models import Board, Card
from position_keeper.sequencing import session_sequencer

SORTABLE_MODELS: dict[str, type] = {
    "board": Board,
    "card": Card,
}


def resequence_model(db: Session, model: type, *, dry_run: bool = False) -> tuple[int, int]:
    """Compact each group of ``model``.

    Returns:
        ``(groups, renumbered)``: how many groups were visited and how many
        rows received a new position.
    """
    sequencer = session_sequencer(db, model)
    groups = sequencer.groups()
    renumbered = 0
    for scope in groups:
        changed = sequencer.compact(scope)
        if changed:
            print(f"[resequence] {model.__tablename__} {scope}: {changed} row(s)")
        renumbered += changed
    if dry_run:
        db.rollback()
    else:
        db.commit()
    return len(groups), renumbered


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Repair gaps and duplicates in stored positions")
    parser.add_argument(
        "--model",
        choices=sorted(SORTABLE_MODELS),
        action="append",
        help="Limit the repair to one model (repeatable). Defaults to all sortable models.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Report what would change and roll the changes back.",
    )
    args = parser.parse_args(argv)

    names = args.model or sorted(SORTABLE_MODELS)
    db = SessionLocal()
    try:
        for name in names:
            groups, renumbered = resequence_model(db, SORTABLE_MODELS[name], dry_run=args.dry_run)
            print(f"[resequence] {name}: {groups} group(s), {renumbered} row(s) renumbered")
    except SQLAlchemyError as exc:
        db.rollback()
        print(f"[resequence] ERROR: {exc}", file=sys.stderr)
        sys.exit(1)
    finally:
        db.close()


if __name__ == "__main__":
    main()
