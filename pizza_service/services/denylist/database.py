"""
Relational token denylist.

Each revoked token is a ``revoked_tokens`` row with its expiry. Expired rows
are ignored on lookup and deleted whenever another token is revoked, so the
table only ever holds tokens that could still pass signature checks.
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import delete, select, text

from pizza_service import database
from pizza_service.models import RevokedToken
from pizza_service.services.denylist.base import BaseTokenDenylist

logger = logging.getLogger(__name__)


class DatabaseTokenDenylist(BaseTokenDenylist):
    """Denylist stored in the application database."""

    @property
    def backend_name(self) -> str:
        return "database"

    def _session(self):
        if database.async_session_maker is None:
            database.configure_engine()
        return database.async_session_maker()

    async def revoke(self, jti: str, expires_at: datetime) -> None:
        now = datetime.now(timezone.utc)
        if expires_at <= now:
            return

        async with self._session() as session:
            await session.execute(delete(RevokedToken).where(RevokedToken.expires_at <= now))
            await session.merge(RevokedToken(jti=jti, expires_at=expires_at))
            await session.commit()

        logger.debug(f"Token {jti} revoked until {expires_at.isoformat()}")

    async def is_revoked(self, jti: str) -> bool:
        now = datetime.now(timezone.utc)
        async with self._session() as session:
            result = await session.execute(
                select(RevokedToken.jti).where(
                    RevokedToken.jti == jti,
                    RevokedToken.expires_at > now,
                )
            )
            return result.scalar_one_or_none() is not None

    async def prune(self) -> int:
        now = datetime.now(timezone.utc)
        async with self._session() as session:
            result = await session.execute(delete(RevokedToken).where(RevokedToken.expires_at <= now))
            await session.commit()
        removed = result.rowcount or 0
        if removed:
            logger.info(f"Pruned {removed} expired revoked tokens")
        return removed

    async def health_check(self) -> bool:
        try:
            async with self._session() as session:
                await session.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"Denylist database health check failed: {e}")
            return False
