# service/verification_service.py
import asyncio
import logging
from typing import AsyncIterator, Optional
from core.batch_runner import ShouldContinue, run_batch
from core.dispatcher import VerificationDispatcher
from core.document_text import load_document_text
from core.report import build_report
from core.streaming import LoadText, encode_events, verification_events
from model.api import ValidatedProcessRequest
from model.checklist import ChecklistItemDefinition
from model.verification import VerificationReport, VerificationResult
from repository.checklist_repository import ChecklistRepository
from repository.upload_repository import UploadRepository
from util.enums import ErrorMessage
from util.errors import AppError, ChecklistLoadError

logger = logging.getLogger(__name__)


def _readable(path: str) -> bool:
    try:
        with open(path, "rb") as fh:
            fh.read(1)
        return True
    except OSError:
        return False


class VerificationService:
    """
    One canonical orchestration behind both process endpoints:
    validate -> load text once -> sliced dispatch -> report | event stream.
    """

    def __init__(
        self,
        checklists: ChecklistRepository,
        dispatcher: VerificationDispatcher,
        max_concurrency: int,
        uploads: UploadRepository,
        load_text: LoadText = load_document_text,
    ) -> None:
        self._checklists = checklists
        self._uploads = uploads
        self._dispatcher = dispatcher
        self._max_concurrency = max_concurrency
        self._load_text = load_text

    async def validate(
        self,
        filename: Optional[str],
        document_path: Optional[str],
        checklist_id: Optional[str],
        token: Optional[str],
    ) -> ValidatedProcessRequest:
        """
        Checks run in a fixed order and the first failure wins:
        params -> token -> document (inside the upload store, readable)
        -> checklist load -> exists -> non-empty.
        """
        if not filename or not document_path or not checklist_id:
            raise AppError.of(ErrorMessage.MISSING_PARAMETERS)

        if not token:
            raise AppError.of(ErrorMessage.UNAUTHORIZED)

        if not self._uploads.contains(document_path):
            logger.warning("process.validate.document_outside_store file=%s", filename)
            raise AppError.of(ErrorMessage.DOCUMENT_NOT_FOUND)

        if not await asyncio.to_thread(_readable, document_path):
            logger.warning("process.validate.document_missing file=%s", filename)
            raise AppError.of(ErrorMessage.DOCUMENT_NOT_FOUND)

        try:
            checklist = await self._checklists.load(checklist_id)
        except ChecklistLoadError:
            raise AppError.of(ErrorMessage.CHECKLIST_LOAD_ERROR)

        if checklist is None:
            raise AppError.of(
                ErrorMessage.CHECKLIST_NOT_FOUND,
                f"Checklist not found: {checklist_id}",
            )

        if not checklist.items:
            raise AppError.of(
                ErrorMessage.CHECKLIST_EMPTY, f"Checklist has no items: {checklist_id}"
            )

        return ValidatedProcessRequest(
            filename=filename,
            documentPath=document_path,
            checklistId=checklist_id,
            checklist=checklist,
            token=token,
        )

    async def _verify(
        self, token: str, text: str, item: ChecklistItemDefinition
    ) -> VerificationResult:
        return await self._dispatcher.verify(token, text, item)

    async def process(
        self,
        filename: Optional[str],
        document_path: Optional[str],
        checklist_id: Optional[str],
        token: Optional[str],
        should_continue: Optional[ShouldContinue] = None,
    ) -> VerificationReport:
        """Collect-all variant: every item settles before the report is built."""
        req = await self.validate(filename, document_path, checklist_id, token)
        try:
            doc = await self._load_text(req.documentPath)
            logger.info(
                "process.text source=%s chars=%d", doc.source.value, len(doc.text)
            )

            async def _dispatch(item: ChecklistItemDefinition) -> VerificationResult:
                return await self._verify(req.token, doc.text, item)

            results = await run_batch(
                req.checklist.items,
                self._max_concurrency,
                _dispatch,
                should_continue=should_continue,
            )
            report = build_report(
                filename=req.filename,
                document_path=req.documentPath,
                checklist=req.checklist,
                results=results,
            )
        except Exception as e:
            logger.error("process.error checklist=%s", checklist_id, exc_info=True)
            raise AppError.of(ErrorMessage.PROCESSING_ERROR, extra=str(e))

        logger.info(
            "process.done checklist=%s passed=%d total=%d",
            req.checklistId,
            report.summary.passed,
            report.summary.total,
        )
        return report

    def stream(
        self,
        req: ValidatedProcessRequest,
        should_continue: Optional[ShouldContinue] = None,
    ) -> AsyncIterator[bytes]:
        """SSE bytes for an already validated request."""
        events = verification_events(
            checklist=req.checklist,
            document_path=req.documentPath,
            token=req.token,
            verify=self._verify,
            max_concurrency=self._max_concurrency,
            load_text=self._load_text,
            should_continue=should_continue,
            filename=req.filename,
        )
        return encode_events(events)
