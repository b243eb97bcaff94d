# repository/session_repository.py
from typing import Optional
from uuid import uuid4
from redis.asyncio import Redis
from config.cache import get_redis
from config.settings import settings
from repository.namespaces import SESSIONS


class SessionRepository:
    """
    Redis-backed map of browser session id -> LLM bearer token.

    TTL is refreshed on every read so active sessions stay alive.
    """

    def __init__(self, ttl_seconds: int = settings.PERSISTENCE_TTL_SECONDS) -> None:
        self._ttl = int(ttl_seconds)

    @staticmethod
    async def _client() -> Redis:
        return await get_redis()

    @staticmethod
    def _key(session_id: str) -> str:
        return f"{SESSIONS}:{session_id}"

    async def create(self, token: str) -> str:
        session_id = uuid4().hex
        r = await self._client()
        await r.set(self._key(session_id), token, ex=self._ttl)
        return session_id

    async def get_token(self, session_id: str) -> Optional[str]:
        if not session_id:
            return None
        r = await self._client()
        token = await r.get(self._key(session_id))
        if token is None:
            return None
        await r.expire(self._key(session_id), self._ttl)
        return token or None
