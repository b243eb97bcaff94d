# model/verification.py
from pydantic import BaseModel, Field
from util.types import TokenPair, VerificationStatus


class EvidenceAnchor(BaseModel):
    """
    Token-bounded span the model cites as justification.
    `verified` is False when fullText does not start/end with the token pairs
    (kept anyway; the viewer falls back to approximate highlighting).
    """

    startTokens: TokenPair
    endTokens: TokenPair
    fullText: str
    pageNumber: int | None = None
    verified: bool = True


class Evidence(BaseModel):
    text: str
    confidence: float | None = Field(default=None, ge=0.0, le=1.0)
    pageNumber: int | None = None
    tokens: list[EvidenceAnchor] | None = None


class VerificationResult(BaseModel):
    itemId: int
    status: VerificationStatus
    evidence: Evidence
    reason: str | None = None


class VerificationSummary(BaseModel):
    total: int
    passed: int
    failed: int
    successRate: float


class VerificationReport(BaseModel):
    documentName: str
    documentPath: str | None = None
    uploadDate: str
    processingDate: str
    results: list[VerificationResult]
    summary: VerificationSummary
    checklistId: str
    checklistName: str
    checklistDescription: str = ""
    checklistCreatedAt: str = ""
