# config/settings.py
import os
import sys
from dotenv import load_dotenv
from pydantic import ValidationError, Field
from pydantic_settings import BaseSettings
from util.enums import Environment
import logging


if os.getenv("APP_ENV", Environment.DEV) == Environment.DEV:
    load_dotenv()

_log = logging.getLogger("config.settings")


class Settings(BaseSettings):
    # App
    APP_ENV: str = Field(..., validation_alias="APP_ENV")
    REDIS_URL: str = Field(..., validation_alias="REDIS_URL")
    PERSISTENCE_TTL_SECONDS: int = Field(
        ..., validation_alias="PERSISTENCE_TTL_SECONDS"
    )

    # CORS & Limits
    ALLOWED_ORIGIN: str = Field(..., validation_alias="ALLOWED_ORIGIN")
    RATE_LIMIT_TIMES: int = Field(..., validation_alias="RATE_LIMIT_TIMES")
    RATE_LIMIT_SECONDS: int = Field(..., validation_alias="RATE_LIMIT_SECONDS")
    MAX_FILE_MB: int = Field(..., validation_alias="MAX_FILE_MB")
    TRUST_PROXY: bool = Field(..., validation_alias="TRUST_PROXY")

    # Storage
    UPLOAD_DIR: str = Field(default="uploads", validation_alias="UPLOAD_DIR")
    CHECKLISTS_DIR: str = Field(default="checklists", validation_alias="CHECKLISTS_DIR")
    SESSION_COOKIE_NAME: str = "document_checker_session"

    # LLM serving endpoint
    LLM_API_URL: str = Field(..., validation_alias="LLM_API_URL")
    USE_REAL_API: bool = Field(default=False, validation_alias="USE_REAL_API")
    # Raw on purpose: sanitized by core.batch_runner.resolve_max_concurrency
    MAX_CONCURRENCY: str = Field(default="5", validation_alias="MAX_CONCURRENCY")
    LLM_VERIFY_TIMEOUT_SECONDS: float = Field(
        default=30.0, validation_alias="LLM_VERIFY_TIMEOUT_SECONDS"
    )
    LLM_GENERATE_TIMEOUT_SECONDS: float = Field(
        default=25.0, validation_alias="LLM_GENERATE_TIMEOUT_SECONDS"
    )
    LLM_VERIFY_MAX_TOKENS: int = 5000
    LLM_VERIFY_TEMPERATURE: float = 0.1
    LLM_GENERATE_MAX_TOKENS: int = 1500
    LLM_GENERATE_TEMPERATURE: float = 0.2
    MAX_DOCUMENT_CHARS: int = Field(default=10_000, validation_alias="MAX_DOCUMENT_CHARS")

    # Logging knobs
    LOGGER_NAME: str = "document-checker"
    LOG_LEVEL: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    LOG_TO_FILE: bool = Field(default=False, validation_alias="LOG_TO_FILE")
    LOG_DIR: str = Field(default="logs", validation_alias="LOG_DIR")
    LOG_FILE_NAME: str = Field(default="app.log", validation_alias="LOG_FILE_NAME")
    LOG_MAX_BYTES: int = Field(
        default=50 * 1024 * 1024, validation_alias="LOG_MAX_BYTES"
    )
    LOG_BACKUP_COUNT: int = Field(default=5, validation_alias="LOG_BACKUP_COUNT")

    # Prompts (str.format templates, literal braces doubled)
    VERIFY_PROMPT: str = (
        "You are a document verification assistant. Analyze the following document text "
        "and determine if it contains the required information.\n"
        "\n"
        "Document Content ({length} characters):\n"
        "{document}\n"
        "\n"
        "Verification Criteria:\n"
        "{description}: {criteria}\n"
        "\n"
        "IMPORTANT: For each piece of evidence, return TOKEN-BASED ANCHORS instead of character offsets.\n"
        "Return the first TWO tokens of the evidence text and the last TWO tokens of the evidence text.\n"
        "Also include the FULL evidence text for validation. If you know the page number, include it "
        "as page_number; otherwise use null.\n"
        "\n"
        "Respond in the following JSON format:\n"
        "{{\n"
        '  "status": "verified" | "failed",\n'
        '  "evidence_tokens": [\n'
        '    {{ "start_tokens": ["<first token>", "<second token>"], "end_tokens": ["<second to last>", "<last>"], '
        '"full_text": "<exact evidence text>", "page_number": <number or null> }}\n'
        "  ],\n"
        '  "confidence": <number between 0 and 1>,\n'
        '  "reasoning": "<brief explanation>"\n'
        "}}\n"
        "\n"
        "Rules:\n"
        "1. Tokens are whitespace-separated words appearing EXACTLY in the document order.\n"
        "2. full_text MUST start with start_tokens joined by a space and end with end_tokens joined by a space.\n"
        "3. Include ALL relevant evidence segments.\n"
        "4. Keep full_text concise (<= 300 chars). Do not include JSON outside the object.\n"
    )

    GENERATE_PROMPT: str = (
        "You are a document verification expert. Generate a checklist for verifying a {document_type}.\n"
        "\n"
        "{context}Generate {count} checklist items. Each item should have:\n"
        "- description: A clear, concise description of what to verify\n"
        "- criteria: Specific, measurable criteria for verification\n"
        "\n"
        "Return ONLY a valid JSON array in this exact format:\n"
        "[\n"
        '  {{"description": "...", "criteria": "..."}}\n'
        "]\n"
        "\n"
        "Do not include any other text or explanation."
    )


try:
    settings = Settings()
except ValidationError as e:
    print("❌ Missing/invalid environment variables:", file=sys.stderr)
    for err in e.errors():
        loc = ".".join(str(x) for x in err.get("loc", []))
        msg = err.get("msg", "")
        print(f" - {loc}: {msg}", file=sys.stderr)
    sys.exit(1)
except Exception as e:
    print(f"❌ Settings initialization failed: {e}", file=sys.stderr)
    sys.exit(1)
