"""Create (or recreate) the tables of the configured database without Alembic."""
from __future__ import annotations

import argparse

from position_keeper.db import session


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Create the Position Keeper tables")
    parser.add_argument(
        "--drop",
        action="store_true",
        help="Drop every table first. All data is lost.",
    )
    args = parser.parse_args(argv)

    if args.drop:
        session.drop_tables()
        print("[init-db] dropped existing tables")
    session.create_tables()
    print("Database initialized.")


if __name__ == "__main__":
    main()
