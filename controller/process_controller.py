# controller/process_controller.py
from typing import Any, Optional
from fastapi import APIRouter, Body, Depends, Query
from fastapi.responses import StreamingResponse
from controller.controller_dependencies import (
    get_token,
    get_verification_service,
    rate_limit,
)
from core.streaming import SSE_HEADERS
from model.api import ProcessRequest, ProcessResponse
from service.verification_service import VerificationService
from util.constants import InternalURIs

process_router = APIRouter(dependencies=[Depends(rate_limit)])


@process_router.post(
    InternalURIs.PROCESS,
    response_model=ProcessResponse,
    response_model_exclude_none=True,
)
async def process_document(
    body: Any = Body(default=None),
    token: Optional[str] = Depends(get_token),
    service: VerificationService = Depends(get_verification_service),
) -> ProcessResponse:
    payload = ProcessRequest.from_body(body)
    report = await service.process(
        payload.filename, payload.documentPath, payload.checklistId, token
    )
    return ProcessResponse(data=report)


@process_router.get(InternalURIs.PROCESS)
async def stream_document(
    filename: Optional[str] = Query(default=None),
    documentPath: Optional[str] = Query(default=None),
    checklistId: Optional[str] = Query(default=None),
    token: Optional[str] = Depends(get_token),
    service: VerificationService = Depends(get_verification_service),
):
    # Validation failures are plain JSON errors; only a valid request streams.
    req = await service.validate(filename, documentPath, checklistId, token)
    return StreamingResponse(
        service.stream(req), media_type="text/event-stream", headers=SSE_HEADERS
    )
