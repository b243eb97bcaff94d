# service/upload_service.py
import asyncio
import logging
from pathlib import Path
from fastapi import UploadFile
from core.document_text import read_text_cache, write_text_cache
from core.text_extraction import extract_document_text, mime_type_for
from model.api import UploadedDocument
from repository.upload_repository import UploadRepository
from util.constants import MAX_DOCUMENT_CHARS
from util.enums import ErrorMessage, MimeType
from util.errors import AppError

logger = logging.getLogger(__name__)

ALLOWED_TYPES = {MimeType.PDF.value, MimeType.DOCX.value}


class UploadService:
    def __init__(self, uploads: UploadRepository) -> None:
        self._uploads = uploads

    async def upload(self, file: UploadFile) -> UploadedDocument:
        """
        Persist the upload, then try to extract and cache its text.
        Extraction failure does not fail the upload; processing re-tries it.
        Logs: sizes and names only (no payloads).
        """
        if file is None or not file.filename:
            raise AppError.of(ErrorMessage.NO_FILE)
        content_type = file.content_type or ""
        if content_type not in ALLOWED_TYPES:
            logger.warning("upload.rejected type=%s", content_type)
            raise AppError.of(ErrorMessage.INVALID_FILE_TYPE)

        data = await file.read()
        path = await self._uploads.put(file.filename, data)
        logger.info("upload.ok file=%s bytes=%d", path.name, len(data))

        extracted = ""
        try:
            extracted = await asyncio.to_thread(
                extract_document_text, str(path), content_type
            )
            await write_text_cache(str(path), extracted)
            logger.info("upload.extract.ok file=%s chars=%d", path.name, len(extracted))
        except Exception as e:
            logger.error("upload.extract.error file=%s err=%s", path.name, e)

        return UploadedDocument(
            filename=path.name,
            originalName=file.filename,
            size=len(data),
            type=content_type,
            path=str(path),
            extractedText=extracted[:MAX_DOCUMENT_CHARS],
        )

    async def document_text(self, filename: str) -> str:
        """Full cached text for an uploaded file, extracting on a cache miss."""
        path = self._uploads.path_for(filename or "")
        if path is None:
            raise AppError.of(ErrorMessage.INVALID_FILENAME)

        cached = await read_text_cache(str(path))
        if cached is not None:
            return cached
        try:
            return await asyncio.to_thread(
                extract_document_text, str(path), mime_type_for(str(path)).value
            )
        except Exception as e:
            logger.warning("text.extract.error file=%s err=%s", filename, e)
            raise AppError.of(ErrorMessage.TEXT_NOT_FOUND)

    async def document_file(self, filename: str) -> Path:
        """Path of an uploaded original for inline viewing."""
        if not filename:
            raise AppError.of(ErrorMessage.INVALID_FILENAME, "Filename is required")
        path = self._uploads.path_for(filename)
        if path is None:
            raise AppError.of(ErrorMessage.INVALID_FILENAME)
        if not await asyncio.to_thread(path.is_file):
            logger.warning("serve.missing file=%s", filename)
            raise AppError.of(ErrorMessage.FILE_NOT_FOUND)
        return path
