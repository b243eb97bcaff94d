# controller/controller_dependencies.py
from functools import partial
from typing import Optional
from fastapi import Depends, File, Header, Request, UploadFile
from fastapi_limiter.depends import RateLimiter
from config.settings import settings
from core.batch_runner import resolve_max_concurrency
from core.dispatcher import VerificationDispatcher
from core.document_text import load_document_text
from core.entities import DispatchConfig
from repository.checklist_repository import ChecklistRepository
from repository.session_repository import SessionRepository
from repository.upload_repository import UploadRepository
from service.checklist_service import ChecklistService
from service.token_service import TokenService
from service.upload_service import UploadService
from service.verification_service import VerificationService
from util.enums import ErrorMessage
from util.errors import AppError

# One shared limiter instance so tests can override it by identity.
rate_limit = RateLimiter(times=settings.RATE_LIMIT_TIMES, seconds=settings.RATE_LIMIT_SECONDS)


def get_checklist_repository() -> ChecklistRepository:
    return ChecklistRepository()


def get_session_repository() -> SessionRepository:
    return SessionRepository()


def get_upload_repository() -> UploadRepository:
    return UploadRepository()


def get_dispatch_config() -> DispatchConfig:
    return DispatchConfig(
        use_real_api=settings.USE_REAL_API,
        api_url=settings.LLM_API_URL,
        timeout=settings.LLM_VERIFY_TIMEOUT_SECONDS,
        max_tokens=settings.LLM_VERIFY_MAX_TOKENS,
        temperature=settings.LLM_VERIFY_TEMPERATURE,
        max_chars=settings.MAX_DOCUMENT_CHARS,
        prompt_template=settings.VERIFY_PROMPT,
    )


def get_verification_service(
    checklists: ChecklistRepository = Depends(get_checklist_repository),
    uploads: UploadRepository = Depends(get_upload_repository),
    config: DispatchConfig = Depends(get_dispatch_config),
) -> VerificationService:
    return VerificationService(
        checklists,
        VerificationDispatcher(config),
        resolve_max_concurrency(settings.MAX_CONCURRENCY),
        uploads,
        load_text=partial(load_document_text, max_chars=settings.MAX_DOCUMENT_CHARS),
    )


def get_checklist_service(
    checklists: ChecklistRepository = Depends(get_checklist_repository),
) -> ChecklistService:
    return ChecklistService(checklists)


def get_upload_service(
    uploads: UploadRepository = Depends(get_upload_repository),
) -> UploadService:
    return UploadService(uploads)


def get_token_service(
    sessions: SessionRepository = Depends(get_session_repository),
) -> TokenService:
    return TokenService(sessions)


async def get_token(
    request: Request,
    authorization: Optional[str] = Header(default=None),
    tokens: TokenService = Depends(get_token_service),
) -> Optional[str]:
    """
    Bearer header wins; otherwise the token bound to the session cookie.
    None means unauthenticated; callers decide whether that is fatal.
    """
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization[7:].strip()
        if token:
            return token
    session_id = request.cookies.get(settings.SESSION_COOKIE_NAME)
    return await tokens.token_for(session_id)


async def require_token(token: Optional[str] = Depends(get_token)) -> str:
    if not token:
        raise AppError.of(ErrorMessage.UNAUTHORIZED, "Unauthorized")
    return token


async def enforce_max_upload_size(
    request: Request, file: Optional[UploadFile] = File(default=None)
) -> Optional[UploadFile]:
    # Fast pre-check via Content-Length if present
    max_bytes = settings.MAX_FILE_MB * 1024 * 1024
    too_large = AppError.of(
        ErrorMessage.FILE_TOO_LARGE,
        f"File too large. Maximum size is {settings.MAX_FILE_MB}MB.",
        extra={"maxMb": settings.MAX_FILE_MB},
    )
    cl = request.headers.get("content-length")
    if cl and cl.isdigit() and int(cl) > max_bytes:
        raise too_large

    if file is None:
        return None

    # Hard cap while reading initial bytes (works even if no Content-Length)
    blob = await file.read(max_bytes + 1)
    if len(blob) > max_bytes:
        raise too_large

    # Reset so downstream can re-read file stream
    await file.seek(0)
    return file
