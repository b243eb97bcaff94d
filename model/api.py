# model/api.py
from typing import Any, Literal, Union
from pydantic import BaseModel, Field, ValidationError
from model.checklist import ChecklistDefinition, GeneratedItem
from model.verification import VerificationReport, VerificationResult


class ValidateTokenRequest(BaseModel):
    token: str = ""


class ValidateTokenResponse(BaseModel):
    success: bool = True
    message: str = "Token validated successfully"


class ProcessRequest(BaseModel):
    filename: str | None = None
    documentPath: str | None = None
    checklistId: str | None = None

    @classmethod
    def from_body(cls, body: Any) -> "ProcessRequest":
        # null, non-object or mistyped bodies carry no usable fields
        if not isinstance(body, dict):
            return cls()
        try:
            return cls.model_validate(body)
        except ValidationError:
            return cls()


class ValidatedProcessRequest(BaseModel):
    filename: str
    documentPath: str
    checklistId: str
    checklist: ChecklistDefinition
    token: str


class ProcessResponse(BaseModel):
    success: bool = True
    data: VerificationReport


class UploadedDocument(BaseModel):
    filename: str
    originalName: str
    size: int
    type: str
    path: str
    extractedText: str = ""


class UploadResponse(BaseModel):
    success: bool = True
    data: UploadedDocument


class GenerateChecklistRequest(BaseModel):
    documentType: str = ""
    customDescription: str = ""
    itemCount: int | None = None


class GenerateChecklistResponse(BaseModel):
    success: bool = True
    items: list[GeneratedItem]


# ---------------- SSE events ----------------


class ProcessingEvent(BaseModel):
    type: Literal["processing"] = "processing"
    itemId: int


class ResultEvent(BaseModel):
    type: Literal["result"] = "result"
    data: VerificationResult


class CompleteEvent(BaseModel):
    type: Literal["complete"] = "complete"
    checklistId: str
    checklistName: str
    checklistDescription: str = ""
    checklistCreatedAt: str = ""


class ErrorEvent(BaseModel):
    type: Literal["error"] = "error"
    error: str
    code: str | None = None
    detail: Any = None


StreamEvent = Union[ProcessingEvent, ResultEvent, CompleteEvent, ErrorEvent]


class StreamEnvelope(BaseModel):
    """Client-side decode of one `data:` frame."""

    event: StreamEvent = Field(discriminator="type")
