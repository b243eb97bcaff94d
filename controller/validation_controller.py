# controller/validation_controller.py
from fastapi import APIRouter, Depends, Response, status
from config.settings import settings
from controller.controller_dependencies import get_token_service, rate_limit
from model.api import ValidateTokenRequest, ValidateTokenResponse
from service.token_service import TokenService
from util.constants import InternalURIs
from util.enums import Environment

validation_router = APIRouter(dependencies=[Depends(rate_limit)])


@validation_router.post(
    InternalURIs.VALIDATE_TOKEN,
    response_model=ValidateTokenResponse,
    status_code=status.HTTP_200_OK,
)
async def validate_token(
    payload: ValidateTokenRequest,
    response: Response,
    service: TokenService = Depends(get_token_service),
) -> ValidateTokenResponse:
    session_id = await service.open_session(payload.token)
    response.set_cookie(
        settings.SESSION_COOKIE_NAME,
        session_id,
        max_age=settings.PERSISTENCE_TTL_SECONDS,
        httponly=True,
        samesite="lax",
        secure=settings.APP_ENV == Environment.PROD,
    )
    return ValidateTokenResponse()
