"""Database schema DDL: tables, the FTS5 search index and its triggers."""

SCHEMA_DDL = """
-- ==========================================================================
-- Card (budget envelope)
-- ==========================================================================
CREATE TABLE IF NOT EXISTS Card (
    id              TEXT PRIMARY KEY,
    title           TEXT,
    amount          REAL NOT NULL DEFAULT 0,
    lockedAmount    REAL,
    archived        INTEGER NOT NULL DEFAULT 0 CHECK(archived IN (0, 1)),
    createdAt       TEXT NOT NULL,
    updatedAt       TEXT NOT NULL,
    archivedAt      TEXT
);

CREATE INDEX IF NOT EXISTS idx_card_archived_created ON Card(archived, createdAt);
CREATE INDEX IF NOT EXISTS idx_card_archived_at ON Card(archivedAt);

-- ==========================================================================
-- Todo (line item owned by one card)
-- ==========================================================================
CREATE TABLE IF NOT EXISTS Todo (
    id              TEXT PRIMARY KEY,
    cardId          TEXT NOT NULL REFERENCES Card(id) ON DELETE CASCADE,
    title           TEXT NOT NULL,
    amount          REAL,
    done            INTEGER NOT NULL DEFAULT 0 CHECK(done IN (0, 1)),
    scheduledAt     TEXT,
    orderIndex      INTEGER NOT NULL DEFAULT 0,
    createdAt       TEXT NOT NULL,
    updatedAt       TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_todo_card_order ON Todo(cardId, orderIndex, createdAt);

-- ==========================================================================
-- ChangeLog (append-only audit trail)
-- ==========================================================================
CREATE TABLE IF NOT EXISTS ChangeLog (
    id              TEXT PRIMARY KEY,
    cardId          TEXT NOT NULL,
    kind            TEXT NOT NULL
                    CHECK(kind IN ('created','updated','todo_added','todo_updated',
                                   'todo_deleted','archived','unarchived')),
    payload         TEXT NOT NULL DEFAULT '{}',
    createdAt       TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_changelog_created ON ChangeLog(createdAt);
CREATE INDEX IF NOT EXISTS idx_changelog_card ON ChangeLog(cardId);

CREATE TRIGGER IF NOT EXISTS changelog_no_update BEFORE UPDATE ON ChangeLog
BEGIN
    SELECT RAISE(ABORT, 'ChangeLog is append-only');
END;

CREATE TRIGGER IF NOT EXISTS changelog_no_delete BEFORE DELETE ON ChangeLog
BEGIN
    SELECT RAISE(ABORT, 'ChangeLog is append-only');
END;

-- ==========================================================================
-- Full-text search index (one row per card, one row per todo)
-- ==========================================================================
CREATE VIRTUAL TABLE IF NOT EXISTS search_index USING fts5(
    card_id UNINDEXED,
    todo_id UNINDEXED,
    card_title,
    todo_title,
    content
);

CREATE TRIGGER IF NOT EXISTS card_search_ai AFTER INSERT ON Card
BEGIN
    INSERT INTO search_index (card_id, todo_id, card_title, todo_title, content)
    VALUES (new.id, NULL, new.title, NULL, COALESCE(new.title, ''));
END;

CREATE TRIGGER IF NOT EXISTS card_search_au AFTER UPDATE OF title ON Card
BEGIN
    DELETE FROM search_index WHERE card_id = old.id;
    INSERT INTO search_index (card_id, todo_id, card_title, todo_title, content)
    VALUES (new.id, NULL, new.title, NULL, COALESCE(new.title, ''));
    INSERT INTO search_index (card_id, todo_id, card_title, todo_title, content)
    SELECT t.cardId, t.id, new.title, t.title, t.title FROM Todo t WHERE t.cardId = new.id;
END;

CREATE TRIGGER IF NOT EXISTS card_search_ad AFTER DELETE ON Card
BEGIN
    DELETE FROM search_index WHERE card_id = old.id;
END;

CREATE TRIGGER IF NOT EXISTS todo_search_ai AFTER INSERT ON Todo
BEGIN
    INSERT INTO search_index (card_id, todo_id, card_title, todo_title, content)
    SELECT new.cardId, new.id, c.title, new.title, new.title FROM Card c WHERE c.id = new.cardId;
END;

CREATE TRIGGER IF NOT EXISTS todo_search_au AFTER UPDATE OF title ON Todo
BEGIN
    DELETE FROM search_index WHERE todo_id = old.id;
    INSERT INTO search_index (card_id, todo_id, card_title, todo_title, content)
    SELECT new.cardId, new.id, c.title, new.title, new.title FROM Card c WHERE c.id = new.cardId;
END;

CREATE TRIGGER IF NOT EXISTS todo_search_ad AFTER DELETE ON Todo
BEGIN
    DELETE FROM search_index WHERE todo_id = old.id;
END;
"""

# Columns added after the first release: (table, column, declaration).
COLUMN_MIGRATIONS = [
    ("Card", "lockedAmount", "REAL"),
]
