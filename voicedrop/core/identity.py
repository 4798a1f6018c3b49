"""Caller identity derived from the network address."""

import hashlib


def hash_address(address: str) -> str:
    """
    Hash a caller's network address into a mailbox identity.

    Args:
        address: Remote address string, e.g. ``"203.0.113.7"``.

    Returns:
        64-character lowercase hex SHA-256 digest.
    """
    return hashlib.sha256(address.encode("utf-8")).hexdigest()
