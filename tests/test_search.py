"""Tests for query parsing and full-text / date-range search."""

from __future__ import annotations

import unittest

from tin.db.database import Database
from tin.db.search_repo import build_prefix_query
from tin.services.ledger_service import LedgerService, SearchQuery


class TestSearchQueryParsing(unittest.TestCase):
    def test_text_and_bounds(self):
        q = SearchQuery.parse("milk after:2024-01-01 eggs before:2024-02-01")
        self.assertEqual(q.terms, ["milk", "eggs"])
        self.assertEqual(q.after, "2024-01-01")
        self.assertEqual(q.before, "2024-02-01")
        self.assertFalse(q.is_empty)

    def test_blank_query_is_empty(self):
        self.assertTrue(SearchQuery.parse("").is_empty)
        self.assertTrue(SearchQuery.parse("   \t ").is_empty)

    def test_last_bound_wins(self):
        q = SearchQuery.parse("after:2024-01-01 after:2024-03-01")
        self.assertEqual(q.after, "2024-03-01")

    def test_prefix_query_quotes_terms(self):
        self.assertEqual(build_prefix_query(["gro", "mil"]), '"gro"* "mil"*')
        self.assertEqual(build_prefix_query(['say"hi']), '"say""hi"*')


class TestSearch(unittest.TestCase):
    def setUp(self):
        self.db = Database.in_memory()
        self.ledger = LedgerService(self.db)

    def tearDown(self):
        self.db.close()

    def test_empty_query_returns_nothing(self):
        self.ledger.create_card("Groceries", "1")
        self.assertEqual(self.ledger.search(""), [])

    def test_prefix_matches_card(self):
        card = self.ledger.create_card("Groceries", "1")
        results = self.ledger.search("Groc")
        self.assertEqual(len(results), 1)
        self.assertEqual(results[0].card_id, card.id)
        self.assertIsNone(results[0].todo_id)
        self.assertEqual(results[0].card_title, "Groceries")
        self.assertIn("<b>", results[0].snippet)

    def test_prefix_matches_todo(self):
        card = self.ledger.create_card("Weekly shop", "50")
        todo = self.ledger.add_todo(card.id, "Milk", "2").todo
        results = self.ledger.search("mil")
        self.assertEqual([(r.card_id, r.todo_id) for r in results], [(card.id, todo.id)])
        self.assertEqual(results[0].todo_title, "Milk")
        self.assertEqual(results[0].snippet, "<b>Milk</b>")

    def test_renamed_title_no_longer_matches(self):
        card = self.ledger.create_card("Groceries", "1")
        self.ledger.update_card(card.id, title="Rent")
        self.assertEqual(self.ledger.search("Groc"), [])
        self.assertEqual(len(self.ledger.search("Ren")), 1)

    def test_renamed_todo_no_longer_matches(self):
        card = self.ledger.create_card("Shop", "1")
        todo = self.ledger.add_todo(card.id, "Bananas").todo
        self.ledger.update_todo(todo.id, title="Apples")
        self.assertEqual(self.ledger.search("Banan"), [])
        self.assertEqual(self.ledger.search("Appl")[0].todo_id, todo.id)

    def test_all_terms_must_match(self):
        self.ledger.create_card("Summer holiday", "1")
        self.ledger.create_card("Winter holiday", "1")
        results = self.ledger.search("sum holi")
        self.assertEqual([r.card_title for r in results], ["Summer holiday"])

    def test_punctuation_does_not_break_query(self):
        self.ledger.create_card("Car: repairs", "1")
        self.assertEqual(len(self.ledger.search("Car:")), 1)

    def test_date_range_appended_with_empty_snippet(self):
        card = self.ledger.create_card("Groceries", "1")
        results = self.ledger.search("Groc after:2000-01-01 before:2999-12-31")
        self.assertEqual(len(results), 2)
        self.assertEqual(results[0].card_id, card.id)
        self.assertIn("<b>", results[0].snippet)
        # range results are concatenated, not deduplicated
        self.assertEqual(results[1].card_id, card.id)
        self.assertEqual(results[1].snippet, "")

    def test_date_range_without_text(self):
        card = self.ledger.create_card(None, "1")
        results = self.ledger.search("after:2000-01-01 before:2999-12-31")
        self.assertEqual([r.card_id for r in results], [card.id])
        self.assertIsNone(results[0].card_title)

    def test_date_range_excludes_outside(self):
        self.ledger.create_card("Now", "1")
        self.assertEqual(self.ledger.search("after:2000-01-01 before:2000-12-31"), [])

    def test_single_bound_alone_returns_nothing(self):
        self.ledger.create_card("Now", "1")
        self.assertEqual(self.ledger.search("after:2000-01-01"), [])

    def test_result_limit(self):
        ledger = LedgerService(self.db, search_limit=3)
        for i in range(5):
            ledger.create_card(f"Budget {i}", "1")
        self.assertEqual(len(ledger.search("Budg")), 3)


if __name__ == "__main__":
    unittest.main()
