"""Per-caller session state passed into every mailbox operation."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from voicedrop.core.identity import hash_address


@dataclass
class SessionContext:
    """Who is calling and which counterpart they have selected.

    ``recipient`` is the identity a new recording will be delivered to and
    ``sender`` is the identity whose message will be played next.
    """

    identity: str
    recipient: str | None = None
    sender: str | None = None
    blacklist: set[str] = field(default_factory=set)

    @classmethod
    def from_address(cls, address: str) -> SessionContext:
        return cls(identity=hash_address(address))

    def select_recipient(self, identity: str) -> None:
        self.recipient = identity

    def select_sender(self, identity: str) -> None:
        self.sender = identity

    def set_blacklist(self, identities: Iterable[str]) -> None:
        """Replace the blacklist wholesale."""
        self.blacklist = set(identities)

    def is_blocked(self, identity: str) -> bool:
        return identity in self.blacklist
