# core/text_extraction.py
from pathlib import Path
from typing import List
import docx
import fitz
from util.enums import MimeType
from util.errors import ExtractionError
from util.timing import timed
import logging

logger = logging.getLogger(__name__)


def mime_type_for(path: str) -> MimeType:
    """
    Only two formats are accepted at upload, so anything that is not
    `.pdf` is treated as an office document.
    """
    return MimeType.PDF if path.lower().endswith(".pdf") else MimeType.DOCX


def extract_pdf_text(path: str) -> str:
    """
    Return the whole PDF text, pages separated by a blank line.
    """
    try:
        pages: List[str] = []
        with timed(logger, "pdf.parse"):
            with fitz.open(path) as doc:
                for i in range(doc.page_count):
                    page = doc.load_page(i)
                    pages.append((page.get_text("text") or "").strip())
        logger.info("pdf.pages count=%d", len(pages))
        return "\n\n".join(pages)
    except Exception as e:
        # do not log payloads
        logger.error("pdf.parse.error err=%s", type(e).__name__)
        raise ExtractionError("Failed to extract text from PDF") from e


def extract_docx_text(path: str) -> str:
    try:
        with timed(logger, "docx.parse"):
            document = docx.Document(path)
            paras = [p.text for p in document.paragraphs]
        logger.info("docx.paragraphs count=%d", len(paras))
        return "\n".join(paras)
    except Exception as e:
        logger.error("docx.parse.error err=%s", type(e).__name__)
        raise ExtractionError("Failed to extract text from DOCX") from e


def extract_document_text(path: str, mime_type: str) -> str:
    """
    Dispatch on MIME type. Blocking: call through asyncio.to_thread from async code.
    Raises ExtractionError for unsupported types and for parser failures.
    """
    if not Path(path).is_file():
        raise ExtractionError(f"No such document: {Path(path).name}")
    if mime_type == MimeType.PDF:
        return extract_pdf_text(path)
    if mime_type == MimeType.DOCX:
        return extract_docx_text(path)
    raise ExtractionError(f"Unsupported file type: {mime_type}")
