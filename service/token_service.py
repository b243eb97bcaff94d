# service/token_service.py
from repository.session_repository import SessionRepository
from util.enums import ErrorMessage
from util.errors import AppError
import logging

logger = logging.getLogger(__name__)

MIN_TOKEN_LEN = 10
TOKEN_PREFIX = "dapi"
LOOSE_TOKEN_LEN = 20


class TokenService:
    """
    Service to accept the user's serving-endpoint token and bind it to a session.
    Only the token's shape is checked; the endpoint itself is the real judge.
    """

    def __init__(self, sessions: SessionRepository) -> None:
        self._sessions = sessions

    @staticmethod
    def check_format(token: str) -> None:
        if not token or len(token) < MIN_TOKEN_LEN:
            logger.warning("token.invalid_format len=%d", len(token or ""))
            raise AppError.of(ErrorMessage.INVALID_TOKEN_FORMAT)
        if not (token.startswith(TOKEN_PREFIX) or len(token) > LOOSE_TOKEN_LEN):
            logger.warning("token.rejected len=%d", len(token))
            raise AppError.of(ErrorMessage.INVALID_TOKEN)

    async def open_session(self, token: str) -> str:
        token = (token or "").strip()
        self.check_format(token)
        session_id = await self._sessions.create(token)
        logger.info("token.validated session=%s", session_id[:8])
        return session_id

    async def token_for(self, session_id: str | None) -> str | None:
        if not session_id:
            return None
        return await self._sessions.get_token(session_id)
