"""Session tokens, ledger backend selection, and the shared registry."""

import logging

import redis.asyncio as redis
from redis.exceptions import RedisError
from fastapi import Header
from itsdangerous import URLSafeTimedSerializer, BadSignature, SignatureExpired
from typing import Annotated

from config import config
from core.errors import UnknownSession
from core.ledger import InMemoryLedger, Ledger, RedisLedger
from core.registry import SessionRegistry

logger = logging.getLogger(__name__)


class SessionSigner:
    """Sign and verify session IDs using itsdangerous."""

    def __init__(self, secret_key: str | None = None) -> None:
        """Initialize the signer with a secret key."""
        self._secret_key = secret_key or config.security.secret_key
        self._serializer = URLSafeTimedSerializer(self._secret_key)

    def sign(self, session_id: str) -> str:
        """Create a signed token from a session ID."""
        return self._serializer.dumps(session_id)

    def unsign(self, token: str, max_age: int | None = None) -> str | None:
        """
        Verify and extract session_id from a signed token.

        Args:
            token: The signed token to verify
            max_age: Maximum age in seconds (no limit if not given)

        Returns:
            The session ID if valid, None otherwise
        """
        try:
            return self._serializer.loads(token, max_age=max_age)
        except (BadSignature, SignatureExpired):
            return None


# Global signer instance
_session_signer: SessionSigner | None = None


def get_session_signer() -> SessionSigner:
    """Get or create the session signer."""
    global _session_signer
    if _session_signer is None:
        _session_signer = SessionSigner()
    return _session_signer


# Global ledger and registry instances
_ledger: Ledger | None = None
_registry: SessionRegistry | None = None


async def get_ledger() -> Ledger:
    """Get or create the wallet ledger, Redis when enabled and reachable."""
    global _ledger

    if _ledger is not None:
        return _ledger

    if config.redis.enabled:
        try:
            redis_client = redis.from_url(config.redis.url)
            await redis_client.ping()
            _ledger = RedisLedger(redis_client)
            logger.info("Using Redis wallet ledger at %s:%d", config.redis.host, config.redis.port)
            return _ledger
        except RedisError as exc:
            logger.warning("Redis unavailable (%s); falling back to in-memory ledger", exc)

    _ledger = InMemoryLedger()
    return _ledger


async def get_registry() -> SessionRegistry:
    """Get or create the session registry."""
    global _registry

    if _registry is None:
        _registry = SessionRegistry(
            await get_ledger(),
            starting_balance=config.game.starting_balance,
            session_ttl=config.session_ttl,
        )
    return _registry


def reset_state() -> None:
    """Forget the ledger and registry (tests and app shutdown)."""
    global _ledger, _registry
    _ledger = None
    _registry = None


def extract_session_id(token: str) -> str | None:
    """
    Extract the raw session ID from a signed token.

    Args:
        token: The signed session token

    Returns:
        The raw session ID if valid, None otherwise
    """
    signer = get_session_signer()
    return signer.unsign(token)


def session_id_from_header(
    token: Annotated[str, Header(alias="X-Session-ID")],
) -> str:
    """FastAPI dependency: verified session id from the X-Session-ID header."""
    session_id = extract_session_id(token)
    if session_id is None:
        raise UnknownSession("Invalid or tampered session token")
    return session_id
