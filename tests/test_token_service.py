from unittest.mock import AsyncMock

import pytest

from service.token_service import TokenService
from util.errors import AppError


@pytest.fixture
def sessions():
    repo = AsyncMock()
    repo.create.return_value = "a" * 32
    repo.get_token.return_value = "dapi-bound-token"
    return repo


@pytest.mark.parametrize("token", ["", "short", "dapi12345"])
def test_too_short(token):
    with pytest.raises(AppError) as exc:
        TokenService.check_format(token)
    assert exc.value.code == "INVALID_TOKEN_FORMAT"
    assert exc.value.status_code == 400


def test_wrong_prefix_and_short():
    with pytest.raises(AppError) as exc:
        TokenService.check_format("x" * 15)
    assert exc.value.code == "INVALID_TOKEN"
    assert exc.value.status_code == 401


@pytest.mark.parametrize("token", ["dapi123456", "y" * 21])
def test_accepted_shapes(token):
    TokenService.check_format(token)


@pytest.mark.asyncio
async def test_open_session_stores_trimmed_token(sessions):
    service = TokenService(sessions)
    session_id = await service.open_session("  dapi0123456789  ")
    assert session_id == "a" * 32
    sessions.create.assert_awaited_once_with("dapi0123456789")


@pytest.mark.asyncio
async def test_open_session_rejects_before_storing(sessions):
    with pytest.raises(AppError):
        await TokenService(sessions).open_session("nope")
    sessions.create.assert_not_called()


@pytest.mark.asyncio
async def test_token_for(sessions):
    service = TokenService(sessions)
    assert await service.token_for("sid") == "dapi-bound-token"
    assert await service.token_for(None) is None
    sessions.get_token.assert_awaited_once_with("sid")
