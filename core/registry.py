"""Concurrency-safe map from session id to in-memory session state."""

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator
from uuid import uuid4

from core.errors import UnknownSession
from core.game.events import EventHandler, GameEvent
from core.ledger import Ledger
from core.session import DEFAULT_STARTING_BALANCE, RoundView, Session, ShoeFactory

logger = logging.getLogger(__name__)


class SessionRegistry:
    """
    Entry point for every session operation.

    Each session id gets its own asyncio.Lock, held across the whole
    "read round, mutate, persist" sequence, so two requests on one session
    can never double-debit or double-settle. Different sessions never wait
    on each other.
    """

    def __init__(
        self,
        ledger: Ledger,
        starting_balance: int = DEFAULT_STARTING_BALANCE,
        session_ttl: int = 3600,
        shoe_factory: ShoeFactory | None = None,
    ) -> None:
        """
        Initialize the registry.

        Args:
            ledger: Wallet storage shared by all sessions
            starting_balance: Balance for new and reset wallets, in minor units
            session_ttl: Seconds of inactivity before in-memory state is evicted
            shoe_factory: Builds the shoe for each new round (tests stack it)
        """
        self.ledger = ledger
        self.starting_balance = starting_balance
        self.session_ttl = session_ttl
        self._shoe_factory = shoe_factory
        self._sessions: dict[str, Session] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        # Requests holding or waiting on each lock
        self._users: dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    async def create_session(self) -> tuple[str, int]:
        """Open a new wallet with the starting balance."""
        session_id = uuid4().hex
        async with self._hold(session_id):
            await self.ledger.set(session_id, self.starting_balance)
            self._sessions[session_id] = self._new_session(session_id)
        logger.info("Created session %s with balance %d", session_id, self.starting_balance)
        return session_id, self.starting_balance

    async def resume_session(self, session_id: str) -> int:
        """Balance of an existing session."""
        async with self._locked(session_id) as session:
            return await session.balance()

    async def start_round(self, session_id: str, bet: int) -> RoundView:
        async with self._locked(session_id) as session:
            return await session.start_round(bet)

    async def hit(self, session_id: str) -> RoundView:
        async with self._locked(session_id) as session:
            return await session.hit()

    async def stand(self, session_id: str) -> RoundView:
        async with self._locked(session_id) as session:
            return await session.stand()

    async def reset_wallet(self, session_id: str) -> int:
        async with self._locked(session_id) as session:
            return await session.reset_wallet()

    async def active_round(self, session_id: str) -> RoundView | None:
        """View of the round in play for a session, or None."""
        async with self._locked(session_id) as session:
            return await session.current_view()

    def evict_idle(self, now: float | None = None) -> int:
        """
        Drop in-memory state for sessions idle longer than the TTL.

        Wallets stay in the ledger, so an evicted session can be resumed.
        A round abandoned mid-play is forfeited; its stake was debited when
        it started. Sessions with a request in flight, or with a settled
        round still waiting for its credit, are kept.

        Returns:
            Number of sessions evicted
        """
        now = time.monotonic() if now is None else now
        evicted = 0

        for session_id, session in list(self._sessions.items()):
            if session_id in self._users:
                continue
            if now - session.last_activity <= self.session_ttl:
                continue
            if session.has_unpaid_round:
                continue
            if session.has_active_round:
                logger.warning(
                    "Evicting session %s with an unfinished round; bet %d forfeited",
                    session_id,
                    session.bet,
                )
            del self._sessions[session_id]
            self._locks.pop(session_id, None)
            evicted += 1

        # Locks left behind by lookups of unknown ids
        for session_id in [
            sid for sid in self._locks
            if sid not in self._sessions and sid not in self._users
        ]:
            del self._locks[session_id]

        if evicted:
            logger.info("Evicted %d idle sessions", evicted)
        return evicted

    def _lock(self, session_id: str) -> asyncio.Lock:
        return self._locks.setdefault(session_id, asyncio.Lock())

    @asynccontextmanager
    async def _hold(self, session_id: str) -> AsyncIterator[None]:
        """Hold the session's lock, counted as in use while waiting for it."""
        self._users[session_id] = self._users.get(session_id, 0) + 1
        try:
            async with self._lock(session_id):
                yield
        finally:
            self._users[session_id] -= 1
            if not self._users[session_id]:
                del self._users[session_id]

    @asynccontextmanager
    async def _locked(self, session_id: str) -> AsyncIterator[Session]:
        """Hold the session's lock and yield its state, loading it if needed."""
        async with self._hold(session_id):
            session = self._sessions.get(session_id)
            if session is None:
                if not await self.ledger.exists(session_id):
                    raise UnknownSession(f"Unknown session: {session_id}")
                session = self._new_session(session_id)
                self._sessions[session_id] = session
            session.touch()
            yield session

    def _new_session(self, session_id: str) -> Session:
        return Session(
            session_id,
            self.ledger,
            starting_balance=self.starting_balance,
            shoe_factory=self._shoe_factory,
            event_handler=self._log_event(session_id),
        )

    @staticmethod
    def _log_event(session_id: str) -> EventHandler:
        def handler(event: GameEvent) -> None:
            logger.debug("Session %s: %s", session_id, event)

        return handler
