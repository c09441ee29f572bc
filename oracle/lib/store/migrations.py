"""Schema migrations for the bundled SQLite store."""

import logging
import sqlite3
from collections.abc import Callable

from oracle.errors import MigrationError

logger = logging.getLogger(__name__)

Migration = tuple[str, str | Callable[[sqlite3.Connection], None]]


def migrate(conn: sqlite3.Connection, migs: list[Migration]) -> list[str]:
    """Apply pending migrations in order. Returns names of migrations applied."""
    conn.execute("CREATE TABLE IF NOT EXISTS _migrations (name TEXT PRIMARY KEY)")

    applied_now = []
    for name, migration in migs:
        applied = conn.execute("SELECT 1 FROM _migrations WHERE name = ?", (name,)).fetchone()
        if applied:
            continue
        try:
            conn.execute("BEGIN")
            if callable(migration):
                migration(conn)
            else:
                for statement in _statements(migration):
                    conn.execute(statement)
            conn.execute("INSERT OR IGNORE INTO _migrations (name) VALUES (?)", (name,))
            conn.execute("COMMIT")
        except sqlite3.Error as e:
            conn.execute("ROLLBACK")
            logger.error(f"Migration '{name}' failed: {e}")
            raise MigrationError(f"Migration '{name}' failed") from e
        applied_now.append(name)
        logger.debug(f"Applied migration {name}")
    return applied_now


def _statements(script: str) -> list[str]:
    # executescript() would commit the open transaction, so split by hand.
    return [part.strip() for part in script.split(";") if part.strip()]


MIGRATIONS: list[Migration] = [
    (
        "001_profiles",
        """
        CREATE TABLE IF NOT EXISTS profiles (
            id TEXT PRIMARY KEY,
            full_name TEXT NOT NULL,
            role TEXT NOT NULL DEFAULT 'unassigned',
            team_id TEXT,
            skills TEXT,
            bio TEXT,
            created_at TEXT NOT NULL
        );
        CREATE INDEX IF NOT EXISTS idx_profiles_team ON profiles(team_id)
        """,
    ),
    (
        "002_teams",
        """
        CREATE TABLE IF NOT EXISTS teams (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            stage TEXT NOT NULL DEFAULT 'ideation',
            description TEXT,
            created_at TEXT NOT NULL
        )
        """,
    ),
    (
        "003_messages",
        """
        CREATE TABLE IF NOT EXISTS messages (
            id TEXT PRIMARY KEY,
            sender_id TEXT NOT NULL,
            sender_role TEXT NOT NULL,
            receiver_id TEXT,
            receiver_role TEXT NOT NULL,
            team_id TEXT,
            content TEXT NOT NULL,
            read_at TEXT,
            created_at TEXT NOT NULL
        );
        CREATE INDEX IF NOT EXISTS idx_messages_receiver ON messages(receiver_id, read_at);
        CREATE INDEX IF NOT EXISTS idx_messages_team ON messages(team_id, created_at)
        """,
    ),
    (
        "004_updates",
        """
        CREATE TABLE IF NOT EXISTS updates (
            id TEXT PRIMARY KEY,
            team_id TEXT NOT NULL,
            content TEXT NOT NULL,
            type TEXT NOT NULL DEFAULT 'daily',
            created_by TEXT NOT NULL,
            created_at TEXT NOT NULL
        );
        CREATE INDEX IF NOT EXISTS idx_updates_team_time ON updates(team_id, created_at)
        """,
    ),
    (
        "005_team_status",
        """
        CREATE TABLE IF NOT EXISTS team_status (
            team_id TEXT PRIMARY KEY,
            current_status TEXT,
            last_update TEXT,
            health_score INTEGER
        )
        """,
    ),
    (
        # seq is assigned at commit, so it orders messages the way readers see them.
        "006_messages_seq",
        """
        CREATE TABLE messages_seq (
            seq INTEGER PRIMARY KEY AUTOINCREMENT,
            id TEXT NOT NULL UNIQUE,
            sender_id TEXT NOT NULL,
            sender_role TEXT NOT NULL,
            receiver_id TEXT,
            receiver_role TEXT NOT NULL,
            team_id TEXT,
            content TEXT NOT NULL,
            read_at TEXT,
            created_at TEXT NOT NULL
        );
        INSERT INTO messages_seq (
            id, sender_id, sender_role, receiver_id, receiver_role,
            team_id, content, read_at, created_at
        )
        SELECT id, sender_id, sender_role, receiver_id, receiver_role,
            team_id, content, read_at, created_at
        FROM messages ORDER BY created_at, id;
        DROP TABLE messages;
        ALTER TABLE messages_seq RENAME TO messages;
        CREATE INDEX IF NOT EXISTS idx_messages_receiver ON messages(receiver_id, read_at);
        CREATE INDEX IF NOT EXISTS idx_messages_team ON messages(team_id, created_at)
        """,
    ),
]
