"""Quick check of database state."""
import argparse
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from tin.db.database import Database
from tin.services.ledger_service import LedgerService

parser = argparse.ArgumentParser(description="Print cards and recent changes")
parser.add_argument("--db-path", type=str, help="Override database path")
parser.add_argument("--limit", type=int, default=20, help="Recent changes to show")
args = parser.parse_args()

db = Database(path=Path(args.db_path) if args.db_path else None)
db.init()
ledger = LedgerService(db)

print("=== Active cards ===")
cards = ledger.list_cards()
print(f"Total: {len(cards)}")
for c in cards:
    print(f"  {c.id[:8]} | {(c.title or '')[:40]:<40} | {c.amount:>18}")

print("\n=== Archived cards ===")
archived = ledger.list_archived_cards()
print(f"Total: {len(archived)}")
for c in archived:
    print(f"  {c.id[:8]} | {(c.title or '')[:40]:<40} | archived {c.archived_at}")

print("\n=== Recent changes ===")
for ch in ledger.recent_changes(args.limit):
    print(f"  {ch.created_at} | {ch.card_id[:8]} | {ch.kind:<13} | {ch.payload}")

db.close()
