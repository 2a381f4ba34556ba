"""
Token Denylist Abstract Base Class

Defines the interface contract for revoked-token storage. A logged-out
token is kept until the moment it would have expired anyway; after that
signature verification rejects it on its own, so the entry can go.

Design Pattern: Strategy Pattern
    - DatabaseTokenDenylist keeps entries in the relational store
    - RedisTokenDenylist lets Redis evict entries at expiry
"""

from abc import ABC, abstractmethod
from datetime import datetime


class BaseTokenDenylist(ABC):
    """Abstract base class for revoked session token storage."""

    @property
    @abstractmethod
    def backend_name(self) -> str:
        """Return the storage backend name (e.g. "database", "redis")."""

    @abstractmethod
    async def revoke(self, jti: str, expires_at: datetime) -> None:
        """
        Deny a token until its expiry.

        Args:
            jti: Unique token id from the token's claims
            expires_at: Token expiry (timezone-aware, UTC)
        """

    @abstractmethod
    async def is_revoked(self, jti: str) -> bool:
        """Return True while a revoked token's entry is still live."""

    @abstractmethod
    async def prune(self) -> int:
        """
        Drop entries whose tokens have expired.

        Returns:
            int: Number of entries removed
        """

    @abstractmethod
    async def health_check(self) -> bool:
        """Verify the backing store is reachable."""
