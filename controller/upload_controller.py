# controller/upload_controller.py
from typing import Optional
from fastapi import APIRouter, Depends, File, Query, UploadFile
from fastapi.responses import FileResponse, PlainTextResponse
from controller.controller_dependencies import (
    enforce_max_upload_size,
    get_upload_service,
    rate_limit,
    require_token,
)
from model.api import UploadResponse
from service.upload_service import UploadService
from util.constants import InternalURIs
from util.enums import MimeType

upload_router = APIRouter(dependencies=[Depends(rate_limit), Depends(require_token)])


@upload_router.post(
    InternalURIs.UPLOAD,
    response_model=UploadResponse,
    dependencies=[Depends(enforce_max_upload_size)],
)
async def upload_document(
    file: Optional[UploadFile] = File(default=None),
    service: UploadService = Depends(get_upload_service),
) -> UploadResponse:
    return UploadResponse(data=await service.upload(file))


@upload_router.get(InternalURIs.GET_TEXT, response_class=PlainTextResponse)
async def get_document_text(
    filename: str = Query(default=""),
    service: UploadService = Depends(get_upload_service),
) -> PlainTextResponse:
    text = await service.document_text(filename)
    return PlainTextResponse(text, media_type="text/plain; charset=utf-8")


@upload_router.get(InternalURIs.SERVE_PDF, response_class=FileResponse)
async def serve_document(
    filename: str = Query(default=""),
    service: UploadService = Depends(get_upload_service),
) -> FileResponse:
    path = await service.document_file(filename)
    return FileResponse(
        path,
        media_type=MimeType.PDF.value,
        headers={"Content-Disposition": f'inline; filename="{path.name}"'},
    )
