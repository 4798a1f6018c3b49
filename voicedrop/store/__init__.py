"""Store module - SQLite-backed mailboxes."""

from voicedrop.store.database import MailboxStore, Message

__all__ = ["MailboxStore", "Message"]
