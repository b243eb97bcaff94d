# core/document_text.py
import asyncio
from pathlib import Path
from typing import Callable, Optional, Tuple
from core.entities import LoadedDocument
from core.text_extraction import extract_document_text, mime_type_for
from util.constants import MAX_DOCUMENT_CHARS, TEXT_CACHE_SUFFIX
from util.enums import MimeType, TextSource
from util.functions import bound_text
import logging

logger = logging.getLogger(__name__)

Extractor = Callable[[str, str], str]


def cache_path_for(document_path: str) -> str:
    return f"{document_path}{TEXT_CACHE_SUFFIX}"


def _read_utf8(path: str) -> str:
    return Path(path).read_text(encoding="utf-8", errors="replace")


def _write_utf8(path: str, text: str) -> None:
    Path(path).write_text(text, encoding="utf-8")


async def write_text_cache(document_path: str, text: str) -> None:
    """Raises OSError; callers decide whether a failed write matters."""
    await asyncio.to_thread(_write_utf8, cache_path_for(document_path), text)


async def read_text_cache(document_path: str) -> Optional[str]:
    try:
        return await asyncio.to_thread(_read_utf8, cache_path_for(document_path))
    except OSError as e:
        logger.info("doc.cache.miss err=%s", type(e).__name__)
        return None


async def _from_extractor(document_path: str, extractor: Extractor) -> Optional[str]:
    mime = mime_type_for(document_path)
    try:
        text = await asyncio.to_thread(extractor, document_path, mime.value)
    except Exception as e:
        logger.warning("doc.extract.error mime=%s err=%s", mime.value, e)
        return None

    # Persist for the next session; a lost write only costs a re-extraction.
    try:
        await write_text_cache(document_path, text)
        logger.info("doc.cache.write chars=%d", len(text))
    except OSError as e:
        logger.warning("doc.cache.write.error err=%s", type(e).__name__)
    return text


async def _from_plain(document_path: str) -> Optional[str]:
    if mime_type_for(document_path) == MimeType.PDF:
        # Raw PDF bytes must never reach a prompt.
        logger.warning("doc.plain.skip reason=pdf")
        return None
    try:
        return await asyncio.to_thread(_read_utf8, document_path)
    except OSError as e:
        logger.error("doc.plain.error err=%s", type(e).__name__)
        return None


async def _resolve(document_path: str, extractor: Extractor) -> Tuple[str, TextSource]:
    text = await read_text_cache(document_path)
    if text is not None:
        return text, TextSource.TXT_CACHE

    text = await _from_extractor(document_path, extractor)
    if text is not None:
        return text, TextSource.EXTRACTED

    text = await _from_plain(document_path)
    if text is not None:
        return text, TextSource.FALLBACK_PLAIN

    return "", TextSource.NONE


async def load_document_text(
    document_path: str,
    *,
    max_chars: int = MAX_DOCUMENT_CHARS,
    extractor: Extractor = extract_document_text,
) -> LoadedDocument:
    """
    Resolve a document to prompt-safe text, once per processing session:
      1) `<path>.txt` sidecar cache
      2) extractor on the original (result written back to the sidecar)
      3) raw UTF-8 read, non-PDF only
      4) empty text
    Output is sanitized to tab/LF/CR/printable ASCII, trimmed and cut to
    `max_chars`. Never raises.
    """
    raw, source = await _resolve(document_path, extractor)
    text = bound_text(raw, max_chars)
    logger.info("doc.load source=%s chars=%d", source.value, len(text))
    return LoadedDocument(text=text, source=source)
