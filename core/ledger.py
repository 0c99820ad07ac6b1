"""Wallet ledger: durable session id -> balance store."""

import logging
from abc import ABC, abstractmethod

import redis.asyncio as redis
from redis.exceptions import RedisError

from core.errors import StorageUnavailable

logger = logging.getLogger(__name__)


class Ledger(ABC):
    """
    Abstract wallet ledger.

    Balances are non-negative integers in minor currency units. Both
    operations are durable once they return. Callers serialise
    read-modify-write sequences per session id themselves.
    """

    @abstractmethod
    async def get(self, session_id: str) -> int | None:
        """Get the balance, or None if the session has no wallet."""
        ...

    @abstractmethod
    async def set(self, session_id: str, balance: int) -> None:
        """Store a balance."""
        ...

    async def exists(self, session_id: str) -> bool:
        """Check if a wallet exists."""
        return await self.get(session_id) is not None

    @staticmethod
    def _check_balance(balance: int) -> None:
        if isinstance(balance, bool) or not isinstance(balance, int):
            raise TypeError(f"Balance must be an int of minor units, got {balance!r}")
        if balance < 0:
            raise ValueError(f"Balance cannot be negative: {balance}")


class InMemoryLedger(Ledger):
    """In-memory ledger for local development and tests."""

    def __init__(self) -> None:
        self._balances: dict[str, int] = {}

    async def get(self, session_id: str) -> int | None:
        return self._balances.get(session_id)

    async def set(self, session_id: str, balance: int) -> None:
        self._check_balance(balance)
        self._balances[session_id] = balance

    def __len__(self) -> int:
        return len(self._balances)


class RedisLedger(Ledger):
    """Redis-backed ledger."""

    def __init__(self, redis_client: "redis.Redis") -> None:
        self._redis = redis_client
        self._prefix = "blackjack:wallet:"

    def _key(self, session_id: str) -> str:
        """Get Redis key for a wallet."""
        return f"{self._prefix}{session_id}"

    async def get(self, session_id: str) -> int | None:
        try:
            data = await self._redis.get(self._key(session_id))
        except RedisError as exc:
            logger.error("Wallet read failed for %s: %s", session_id, exc)
            raise StorageUnavailable(f"Wallet storage read failed: {exc}") from exc
        if data is None:
            return None
        return int(data)

    async def set(self, session_id: str, balance: int) -> None:
        self._check_balance(balance)
        try:
            await self._redis.set(self._key(session_id), str(balance))
        except RedisError as exc:
            logger.error("Wallet write failed for %s: %s", session_id, exc)
            raise StorageUnavailable(f"Wallet storage write failed: {exc}") from exc
