"""Session storage for API games: Redis when reachable, process memory otherwise."""

import json
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any
from uuid import uuid4

import redis.asyncio as redis
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from redis.exceptions import RedisError

from config import config

logger = logging.getLogger(__name__)

SESSION_SALT = "blind-poker-session"
REDIS_KEY_PREFIX = "blindpoker:session:"


class SessionSigner:
    """Sign and verify session IDs using itsdangerous."""

    def __init__(self, secret_key: str | None = None, salt: str = SESSION_SALT) -> None:
        self._serializer = URLSafeTimedSerializer(
            secret_key or config.security.secret_key,
            salt=salt,
        )

    def sign(self, session_id: str) -> str:
        """Create a signed token from a session ID."""
        return self._serializer.dumps(session_id)

    def unsign(self, token: str, max_age: int | None = None) -> str | None:
        """
        Verify a token and return the session ID it carries.

        Args:
            token: Signed token issued by sign()
            max_age: Maximum age in seconds (defaults to the session TTL)

        Returns:
            The session ID, or None if the token is forged or too old
        """
        try:
            return self._serializer.loads(token, max_age=max_age or config.session_ttl)
        except (BadSignature, SignatureExpired):
            return None


_session_signer: SessionSigner | None = None


def get_session_signer() -> SessionSigner:
    """Get or create the process-wide session signer."""
    global _session_signer
    if _session_signer is None:
        _session_signer = SessionSigner()
    return _session_signer


def new_session_id(signed: bool = True) -> str:
    """Generate a fresh session ID, signed unless asked otherwise."""
    session_id = str(uuid4())
    return get_session_signer().sign(session_id) if signed else session_id


class SessionStore(ABC):
    """Key/value store for per-session game data with expiry."""

    def __init__(self, ttl: int | None = None) -> None:
        self.ttl = ttl or config.session_ttl

    @abstractmethod
    async def get(self, session_id: str) -> dict[str, Any] | None:
        ...

    @abstractmethod
    async def set(self, session_id: str, data: dict[str, Any], ttl: int | None = None) -> None:
        ...

    @abstractmethod
    async def delete(self, session_id: str) -> None:
        ...

    async def exists(self, session_id: str) -> bool:
        """Check if a live session is stored."""
        return await self.get(session_id) is not None


@dataclass
class _Entry:
    data: dict[str, Any]
    expires_at: float

    @property
    def expired(self) -> bool:
        return self.expires_at < time.time()


class InMemorySessionStore(SessionStore):
    """Session store held in process memory, for development and tests."""

    def __init__(self, ttl: int | None = None) -> None:
        super().__init__(ttl)
        self._entries: dict[str, _Entry] = {}

    async def get(self, session_id: str) -> dict[str, Any] | None:
        entry = self._entries.get(session_id)
        if entry is None:
            return None
        if entry.expired:
            del self._entries[session_id]
            return None
        return entry.data

    async def set(self, session_id: str, data: dict[str, Any], ttl: int | None = None) -> None:
        self._entries[session_id] = _Entry(data, time.time() + (ttl or self.ttl))

    async def delete(self, session_id: str) -> None:
        self._entries.pop(session_id, None)

    async def cleanup_expired(self) -> int:
        """Drop expired sessions and return how many were removed."""
        expired = [sid for sid, entry in self._entries.items() if entry.expired]
        for sid in expired:
            del self._entries[sid]
        if expired:
            logger.debug("Removed %d expired sessions", len(expired))
        return len(expired)


class RedisSessionStore(SessionStore):
    """Session store backed by Redis; values are JSON with a key expiry."""

    def __init__(self, redis_client: redis.Redis, ttl: int | None = None) -> None:
        super().__init__(ttl)
        self._redis = redis_client

    @staticmethod
    def _key(session_id: str) -> str:
        return f"{REDIS_KEY_PREFIX}{session_id}"

    async def get(self, session_id: str) -> dict[str, Any] | None:
        raw = await self._redis.get(self._key(session_id))
        return None if raw is None else json.loads(raw)

    async def set(self, session_id: str, data: dict[str, Any], ttl: int | None = None) -> None:
        await self._redis.set(self._key(session_id), json.dumps(data), ex=ttl or self.ttl)

    async def delete(self, session_id: str) -> None:
        await self._redis.delete(self._key(session_id))

    async def exists(self, session_id: str) -> bool:
        return await self._redis.exists(self._key(session_id)) > 0


_session_store: SessionStore | None = None


async def _connect_redis() -> RedisSessionStore | None:
    """Return a Redis-backed store, or None if the server cannot be reached."""
    client = redis.from_url(config.redis.url)
    try:
        await client.ping()
    except (RedisError, OSError) as exc:
        logger.warning(
            "Redis unavailable at %s:%d (%s), keeping sessions in memory",
            config.redis.host,
            config.redis.port,
            exc,
        )
        return None
    logger.info("Using Redis session store at %s:%d", config.redis.host, config.redis.port)
    return RedisSessionStore(client)


async def get_session_store() -> SessionStore:
    """Get the process-wide session store, choosing a backend on first use."""
    global _session_store
    if _session_store is None:
        _session_store = await _connect_redis() or InMemorySessionStore()
    return _session_store


async def create_session(data: dict[str, Any] | None = None) -> str:
    """Store a new session and return its signed ID."""
    store = await get_session_store()
    session_id = new_session_id()
    await store.set(session_id, data or {})
    return session_id


def extract_session_id(token: str) -> str | None:
    """Return the raw session ID inside a signed token, or None if invalid."""
    return get_session_signer().unsign(token)
