# core/streaming.py
from typing import AsyncIterator, Awaitable, Callable, Final, List, Optional
from pydantic import BaseModel
from core.batch_runner import ShouldContinue, iter_batch
from core.document_text import load_document_text
from core.entities import LoadedDocument
from model.api import (
    CompleteEvent,
    ErrorEvent,
    ProcessingEvent,
    ResultEvent,
    StreamEnvelope,
    StreamEvent,
)
from model.checklist import ChecklistDefinition, ChecklistItemDefinition
from model.verification import VerificationResult
from util.enums import ErrorMessage
import logging

FRAME_PREFIX: Final[str] = "data: "
FRAME_SEP: Final[str] = "\n\n"
SSE_HEADERS: Final[dict] = {"Cache-Control": "no-cache", "Connection": "keep-alive"}
logger = logging.getLogger(__name__)

Verify = Callable[[str, str, ChecklistItemDefinition], Awaitable[VerificationResult]]
LoadText = Callable[[str], Awaitable[LoadedDocument]]


def sse_line(event: BaseModel) -> bytes:
    return (FRAME_PREFIX + event.model_dump_json(exclude_none=True) + FRAME_SEP).encode(
        "utf-8"
    )


def parse_sse(body: str) -> List[StreamEvent]:
    """Decode a full `data: <json>` body back into typed events (clients, tests)."""
    out: List[StreamEvent] = []
    for frame in body.split(FRAME_SEP):
        frame = frame.strip()
        if not frame.startswith(FRAME_PREFIX):
            continue
        envelope = StreamEnvelope.model_validate_json(
            '{"event":' + frame[len(FRAME_PREFIX) :] + "}"
        )
        out.append(envelope.event)
    return out


async def verification_events(
    *,
    checklist: ChecklistDefinition,
    document_path: str,
    token: str,
    verify: Verify,
    max_concurrency: int,
    load_text: LoadText = load_document_text,
    should_continue: Optional[ShouldContinue] = None,
    filename: Optional[str] = None,
) -> AsyncIterator[StreamEvent]:
    """
    One processing session as an event sequence:
      processing × N (checklist order)
      result × N (completion order within a slice, slices in order)
      complete  | error   (exactly one terminal event, nothing after it)
    Item failures arrive as `failed` results; only failures outside the
    per-item calls produce the `error` event.
    """
    items = checklist.items
    emitted = 0
    logger.info(
        "stream.start checklist=%s items=%d conc=%d",
        checklist.id,
        len(items),
        max_concurrency,
    )
    try:
        for item in items:
            yield ProcessingEvent(itemId=item.id)

        doc = await load_text(document_path)
        logger.info("stream.text source=%s chars=%d", doc.source.value, len(doc.text))

        async def _dispatch(item: ChecklistItemDefinition) -> VerificationResult:
            return await verify(token, doc.text, item)

        async for result in iter_batch(
            items, max_concurrency, _dispatch, should_continue=should_continue
        ):
            emitted += 1
            yield ResultEvent(data=result)
    except Exception as e:
        logger.error("stream.error checklist=%s err=%s", checklist.id, e, exc_info=True)
        detail = {"checklistId": checklist.id, "error": str(e)}
        if filename:
            detail["filename"] = filename
        yield ErrorEvent(
            error="Processing failed",
            code=ErrorMessage.PROCESSING_ERROR.value.code,
            detail=detail,
        )
        return

    if emitted < len(items):
        # Only reachable when should_continue stopped the run; nobody is listening.
        logger.warning("stream.abandoned emitted=%d of=%d", emitted, len(items))
        return

    logger.info("stream.done checklist=%s results=%d", checklist.id, emitted)
    yield CompleteEvent(
        checklistId=checklist.id,
        checklistName=checklist.name,
        checklistDescription=checklist.description,
        checklistCreatedAt=checklist.createdAt,
    )


async def encode_events(events: AsyncIterator[StreamEvent]) -> AsyncIterator[bytes]:
    async for event in events:
        yield sse_line(event)
