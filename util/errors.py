# util/errors.py
from typing import Any, Optional
from fastapi import HTTPException, status
from util.enums import ErrorMessage


class AppError(HTTPException):
    # Flow: raise AppError to short-circuit with a typed status, code & message.
    def __init__(
        self,
        message: str,
        http_status: int = status.HTTP_400_BAD_REQUEST,
        code: Optional[str] = None,
        extra: Any = None,
    ) -> None:
        super().__init__(status_code=http_status, detail=message)
        self.code = code
        self.extra = extra

    @classmethod
    def of(
        cls, error: ErrorMessage, message: Optional[str] = None, extra: Any = None
    ) -> "AppError":
        info = error.value
        return cls(message or info.message, info.http_status, info.code, extra)

    def envelope(self) -> dict:
        body: dict = {"success": False, "error": self.detail}
        if self.code:
            body["code"] = self.code
        if self.extra is not None:
            body["detail"] = self.extra
        return body


class ExtractionError(Exception):
    """Text could not be extracted from a document."""


class ChecklistLoadError(Exception):
    """A stored checklist exists but cannot be read or decoded."""


class LLMError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class LLMTimeout(LLMError):
    pass
