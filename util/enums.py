# util/enums.py
from enum import Enum
from typing import NamedTuple
from fastapi import status


class Color(str, Enum):
    RESET = "\033[0m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    BOLD = "\033[1m"

    def __str__(self):
        return self.value


class Environment(str, Enum):
    DEV = "dev"
    TEST = "test"
    PROD = "prod"


class TextSource(str, Enum):
    TXT_CACHE = "txt-cache"
    EXTRACTED = "extracted-on-the-fly"
    FALLBACK_PLAIN = "fallback-plain"
    NONE = "none"


class MimeType(str, Enum):
    PDF = "application/pdf"
    DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


class ErrorInfo(NamedTuple):
    code: str
    message: str
    http_status: int


class ErrorMessage(Enum):
    # Process request validation, checked in this order.
    MISSING_PARAMETERS = ErrorInfo(
        "MISSING_PARAMETERS",
        "Missing required parameters (filename, documentPath, checklistId)",
        status.HTTP_400_BAD_REQUEST,
    )
    UNAUTHORIZED = ErrorInfo(
        "UNAUTHORIZED", "Unauthorized - missing token", status.HTTP_401_UNAUTHORIZED
    )
    DOCUMENT_NOT_FOUND = ErrorInfo(
        "DOCUMENT_NOT_FOUND", "Document file not found", status.HTTP_404_NOT_FOUND
    )
    CHECKLIST_LOAD_ERROR = ErrorInfo(
        "CHECKLIST_LOAD_ERROR",
        "Failed to load checklist - malformed JSON or file system error",
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
    CHECKLIST_NOT_FOUND = ErrorInfo(
        "CHECKLIST_NOT_FOUND", "Checklist not found", status.HTTP_404_NOT_FOUND
    )
    CHECKLIST_EMPTY = ErrorInfo(
        "CHECKLIST_EMPTY", "Checklist has no items", status.HTTP_400_BAD_REQUEST
    )
    PROCESSING_ERROR = ErrorInfo(
        "PROCESSING_ERROR",
        "Failed to process document",
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )

    # Token / session
    INVALID_TOKEN_FORMAT = ErrorInfo(
        "INVALID_TOKEN_FORMAT", "Invalid token format", status.HTTP_400_BAD_REQUEST
    )
    INVALID_TOKEN = ErrorInfo(
        "INVALID_TOKEN", "Invalid Databricks token", status.HTTP_401_UNAUTHORIZED
    )

    # Uploads & text
    NO_FILE = ErrorInfo("NO_FILE", "No file provided", status.HTTP_400_BAD_REQUEST)
    INVALID_FILE_TYPE = ErrorInfo(
        "INVALID_FILE_TYPE",
        "Invalid file type. Only PDF and DOCX are allowed.",
        status.HTTP_400_BAD_REQUEST,
    )
    FILE_TOO_LARGE = ErrorInfo(
        "FILE_TOO_LARGE", "File too large", status.HTTP_413_CONTENT_TOO_LARGE
    )
    INVALID_FILENAME = ErrorInfo(
        "INVALID_FILENAME", "Invalid filename", status.HTTP_400_BAD_REQUEST
    )
    TEXT_NOT_FOUND = ErrorInfo(
        "TEXT_NOT_FOUND",
        "File not found or cannot extract text",
        status.HTTP_404_NOT_FOUND,
    )
    FILE_NOT_FOUND = ErrorInfo(
        "FILE_NOT_FOUND", "File not found", status.HTTP_404_NOT_FOUND
    )

    # Checklist CRUD & generation
    INVALID_CHECKLIST = ErrorInfo(
        "INVALID_CHECKLIST", "Invalid checklist payload", status.HTTP_400_BAD_REQUEST
    )
    LLM_TIMEOUT = ErrorInfo("LLM_TIMEOUT", "LLM timeout", status.HTTP_504_GATEWAY_TIMEOUT)
    LLM_GENERATION_FAILED = ErrorInfo(
        "LLM_GENERATION_FAILED", "Generation failed", status.HTTP_502_BAD_GATEWAY
    )
    LLM_INVALID_RESPONSE = ErrorInfo(
        "LLM_INVALID_RESPONSE", "Invalid LLM response", status.HTTP_502_BAD_GATEWAY
    )
