"""Shared fixtures for the document checker test suite."""

import os

# Settings are read at import time; pin a test environment before any app import.
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/15")
os.environ.setdefault("PERSISTENCE_TTL_SECONDS", "3600")
os.environ.setdefault("ALLOWED_ORIGIN", "http://localhost:3000")
os.environ.setdefault("RATE_LIMIT_TIMES", "1000")
os.environ.setdefault("RATE_LIMIT_SECONDS", "60")
os.environ.setdefault("MAX_FILE_MB", "1")
os.environ.setdefault("TRUST_PROXY", "false")
os.environ.setdefault("LLM_API_URL", "https://llm.test/serving-endpoints/model/invocations")
os.environ.setdefault("USE_REAL_API", "false")

import pytest

from core.entities import DispatchConfig
from model.checklist import ChecklistDefinition, ChecklistItemDefinition


# Items 1 and 2 share keywords with DOCUMENT_TEXT, item 3 shares none.
DOCUMENT_TEXT = (
    "Jane Doe Contact details: phone 555 0100 and email jane@example.com. "
    "Work Experience at Acme Corp as Senior Engineer from 2019 to 2023 "
    "building payment systems."
)


@pytest.fixture
def document_text():
    return DOCUMENT_TEXT


@pytest.fixture
def three_items():
    return [
        ChecklistItemDefinition(
            id=1,
            description="Contact Information",
            criteria="Full name, phone number, email address",
        ),
        ChecklistItemDefinition(
            id=2,
            description="Work Experience",
            criteria="Job titles and company names",
        ),
        ChecklistItemDefinition(
            id=3,
            description="Security Clearance",
            criteria="Active government clearance level stated",
        ),
    ]


@pytest.fixture
def checklist(three_items):
    return ChecklistDefinition(
        id="resume-basics",
        name="Resume Basics",
        description="Three quick resume checks",
        items=three_items,
        createdAt="2026-01-01T00:00:00+00:00",
        updatedAt="2026-01-01T00:00:00+00:00",
    )


@pytest.fixture
def simulated_config():
    """Simulated backend with the artificial latency switched off."""
    return DispatchConfig(
        use_real_api=False,
        api_url="https://llm.test/invocations",
        simulated_delay=(0.0, 0.0),
    )


@pytest.fixture
def real_config():
    return DispatchConfig(
        use_real_api=True,
        api_url="https://llm.test/invocations",
        timeout=5.0,
        prompt_template="{length}|{document}|{description}|{criteria}",
    )


@pytest.fixture
def document_file(tmp_path, document_text):
    """A non-PDF upload whose sidecar text cache already exists."""
    path = tmp_path / "1700000000000-resume.docx"
    path.write_bytes(b"PK\x03\x04 not really a docx")
    (tmp_path / "1700000000000-resume.docx.txt").write_text(document_text, encoding="utf-8")
    return path


def llm_reply(content):
    """Serving-endpoint response body carrying `content` as the message."""
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}
