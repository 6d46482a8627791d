#!/usr/bin/env python3
"""Initialize the ledger database and optionally seed a demo card."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from tin.db.database import Database
from tin.services.ledger_service import LedgerService


def main():
    parser = argparse.ArgumentParser(description="Initialize the database")
    parser.add_argument("--db-path", type=str, help="Override database path")
    parser.add_argument("--seed-demo", action="store_true", help="Insert a demo card with todos")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    db = Database(path=Path(args.db_path) if args.db_path else None)
    db.init()
    print(f"Database initialized at: {db.path}")

    if args.seed_demo:
        _seed_demo(LedgerService(db))

    db.close()
    print("Done.")


def _seed_demo(service: LedgerService):
    card = service.create_card("Groceries", "500")
    print(f"  Created card: {card.title} ({card.amount})")
    for title, amount in [("Milk", "12.5"), ("Bread", "4.25")]:
        result = service.add_todo(card.id, title, amount)
        print(f"  Added todo: {title} -> card balance {result.updated_card.amount}")


if __name__ == "__main__":
    main()
