"""SQLite mailbox store.

Two tables: ``users`` holds every identity that has made first contact and
``messages`` holds one-shot voice messages. A mailbox is addressed by the
owner column (``messages.data``), which always holds the recipient's
identity; ``from_user`` names the counterpart who recorded it.

A single connection is shared by all callers and every statement runs under
one lock. The connection is in autocommit mode; ``pop_payload`` opens its own
``BEGIN IMMEDIATE`` transaction so fetch and delete act on the same row id.
"""

from __future__ import annotations

import os
import sqlite3
import threading
from dataclasses import dataclass

from rich.console import Console

from voicedrop.core.errors import ConstraintViolation, StoreConnectionError

console = Console()

SCHEMA = """
    CREATE TABLE IF NOT EXISTS users (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        data TEXT NOT NULL UNIQUE
    );
    CREATE TABLE IF NOT EXISTS messages (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        data TEXT NOT NULL,
        from_user TEXT NOT NULL,
        to_user TEXT NOT NULL,
        bytes_data TEXT NOT NULL,
        FOREIGN KEY (data) REFERENCES users(data) ON DELETE CASCADE
    );
"""


@dataclass(frozen=True)
class Message:
    """One stored voice message."""

    id: int
    owner: str
    sender: str
    recipient: str
    payload: str

    def __repr__(self) -> str:
        return (
            f"Message(id={self.id}, owner={self.owner[:8]}, sender={self.sender[:8]}, "
            f"recipient={self.recipient[:8]}, payload={len(self.payload)} chars)"
        )


def _row_to_message(row: tuple) -> Message:
    return Message(id=row[0], owner=row[1], sender=row[2], recipient=row[3], payload=row[4])


class MailboxStore:
    """Durable table of identities and pending messages."""

    def __init__(self, db_path: str, *, wal: bool = True):
        """
        Initialize the store. No connection is made until :meth:`open`.

        Args:
            db_path: SQLite file path, or ``":memory:"``.
            wal: Use write-ahead journaling for file databases.
        """
        self.db_path = db_path
        self.wal = wal
        self._conn: sqlite3.Connection | None = None
        self._lock = threading.RLock()

    def __enter__(self) -> MailboxStore:
        self.open()
        self.create_tables()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    def open(self) -> None:
        """
        Connect to the database if not already connected.

        Raises:
            StoreConnectionError: If the database cannot be opened.
        """
        with self._lock:
            if self._conn is not None:
                return
            try:
                if self.db_path != ":memory:":
                    parent = os.path.dirname(self.db_path)
                    if parent:
                        os.makedirs(parent, exist_ok=True)
                conn = sqlite3.connect(self.db_path, check_same_thread=False, isolation_level=None)
                conn.execute("PRAGMA foreign_keys=ON")
                if self.wal and self.db_path != ":memory:":
                    conn.execute("PRAGMA journal_mode=WAL")
            except (sqlite3.Error, OSError) as e:
                console.print(f"[red]Error connecting to the database: {e}[/red]")
                raise StoreConnectionError(f"Cannot open {self.db_path}: {e}") from e
            self._conn = conn
            console.print(f"[dim]Database connection established: {self.db_path}[/dim]")

    def close(self) -> None:
        """Close the connection. Safe to call more than once."""
        with self._lock:
            if self._conn is None:
                return
            self._conn.close()
            self._conn = None
            console.print("[dim]Database connection closed.[/dim]")

    def _execute(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        if self._conn is None:
            raise StoreConnectionError("Database connection is not open")
        try:
            return self._conn.execute(sql, params)
        except sqlite3.IntegrityError as e:
            raise ConstraintViolation(str(e)) from e
        except (sqlite3.OperationalError, sqlite3.ProgrammingError) as e:
            raise StoreConnectionError(str(e)) from e

    def create_tables(self) -> None:
        """Create ``users`` and ``messages`` if they do not exist."""
        with self._lock:
            if self._conn is None:
                raise StoreConnectionError("Database connection is not open")
            try:
                self._conn.executescript(SCHEMA)
            except sqlite3.Error as e:
                raise StoreConnectionError(f"Error creating tables: {e}") from e

    # -- identities ---------------------------------------------------------

    def register_identity(self, identity: str) -> bool:
        """
        Insert *identity* unless it is already registered.

        Returns:
            True if a new row was created.
        """
        with self._lock:
            cur = self._execute(
                "INSERT INTO users (data) VALUES (?) ON CONFLICT (data) DO NOTHING",
                (identity,),
            )
            return cur.rowcount > 0

    def has_identity(self, identity: str) -> bool:
        with self._lock:
            row = self._execute("SELECT 1 FROM users WHERE data = ?", (identity,)).fetchone()
        return row is not None

    def list_identities(self) -> list[str]:
        """All registered identities in lexicographic order."""
        with self._lock:
            rows = self._execute("SELECT DISTINCT data FROM users ORDER BY data").fetchall()
        return [row[0] for row in rows]

    # -- messages -----------------------------------------------------------

    def enqueue(self, owner: str, sender: str, recipient: str, payload: str) -> int:
        """
        Park a message in *owner*'s mailbox.

        Returns:
            Row id of the new message.

        Raises:
            ConstraintViolation: If *owner* is not a registered identity.
        """
        with self._lock:
            cur = self._execute(
                "INSERT INTO messages (data, from_user, to_user, bytes_data) VALUES (?, ?, ?, ?)",
                (owner, sender, recipient, payload),
            )
            return cur.lastrowid

    def list_counterparts(self, owner: str) -> list[str]:
        """Sender of every pending message in *owner*'s mailbox, oldest first."""
        with self._lock:
            rows = self._execute(
                "SELECT from_user FROM messages WHERE data = ? ORDER BY id",
                (owner,),
            ).fetchall()
        return [row[0] for row in rows]

    def fetch_message(self, owner: str, sender: str) -> Message | None:
        """Oldest message from *sender* in *owner*'s mailbox, or None."""
        with self._lock:
            row = self._execute(
                "SELECT id, data, from_user, to_user, bytes_data FROM messages "
                "WHERE data = ? AND from_user = ? ORDER BY id LIMIT 1",
                (owner, sender),
            ).fetchone()
        return _row_to_message(row) if row else None

    def fetch_payload(self, owner: str, sender: str) -> str | None:
        """Payload of the oldest matching message without consuming it."""
        message = self.fetch_message(owner, sender)
        return message.payload if message else None

    def messages_between(self, owner: str, recipient: str) -> list[Message]:
        """Every message in *owner*'s mailbox addressed to *recipient*."""
        with self._lock:
            rows = self._execute(
                "SELECT id, data, from_user, to_user, bytes_data FROM messages "
                "WHERE data = ? AND to_user = ? ORDER BY id",
                (owner, recipient),
            ).fetchall()
        return [_row_to_message(row) for row in rows]

    def pending_count(self, owner: str) -> int:
        with self._lock:
            row = self._execute("SELECT COUNT(*) FROM messages WHERE data = ?", (owner,)).fetchone()
        return row[0]

    def delete_one(self, owner: str, sender: str | None = None) -> bool:
        """
        Remove the oldest message in *owner*'s mailbox, optionally only from *sender*.

        Returns:
            True if a row was deleted, False if nothing matched.
        """
        if sender is None:
            where, params = "data = ?", (owner,)
        else:
            where, params = "data = ? AND from_user = ?", (owner, sender)
        with self._lock:
            cur = self._execute(
                f"DELETE FROM messages WHERE id = (SELECT id FROM messages WHERE {where} ORDER BY id LIMIT 1)",
                params,
            )
            return cur.rowcount > 0

    def delete_message(self, message_id: int) -> bool:
        with self._lock:
            cur = self._execute("DELETE FROM messages WHERE id = ?", (message_id,))
            deleted = cur.rowcount > 0
        if not deleted:
            console.print(f"[yellow]Message with id={message_id} not found.[/yellow]")
        return deleted

    def pop_payload(self, owner: str, sender: str) -> str | None:
        """
        Fetch and delete the oldest matching message in one transaction.

        The delete targets the fetched row id, so each message is handed out
        at most once even with several processes on the same file.

        Returns:
            The payload, or None if the mailbox holds nothing from *sender*.
        """
        with self._lock:
            self._execute("BEGIN IMMEDIATE")
            try:
                row = self._execute(
                    "SELECT id, bytes_data FROM messages "
                    "WHERE data = ? AND from_user = ? ORDER BY id LIMIT 1",
                    (owner, sender),
                ).fetchone()
                if row is not None:
                    self._execute("DELETE FROM messages WHERE id = ?", (row[0],))
                self._execute("COMMIT")
            except Exception:
                if self._conn is not None and self._conn.in_transaction:
                    self._conn.rollback()
                raise
        return row[1] if row else None
