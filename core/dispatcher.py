# core/dispatcher.py
import asyncio
import random
import re
from typing import List, Optional
from core.entities import DispatchConfig
from core.evidence_normalizer import (
    failed_result,
    message_text,
    parse_verification,
    to_result,
)
from core.llm_client import chat_completion
from model.checklist import ChecklistItemDefinition
from model.verification import Evidence, EvidenceAnchor, VerificationResult
from util.functions import bound_text
import logging
from util.timing import timed

logger = logging.getLogger(__name__)

_KEYWORD_SPLIT = re.compile(r"[^A-Za-z0-9]+")
KEYWORD_MIN_LEN = 4
MAX_KEYWORDS = 5
WINDOW_PAD = 20


def build_verify_prompt(
    template: str, document_text: str, item: ChecklistItemDefinition, max_chars: int
) -> str:
    content = bound_text(document_text, max_chars)
    return template.format(
        length=len(content),
        document=content,
        description=item.description,
        criteria=item.criteria,
    )


def item_keywords(item: ChecklistItemDefinition) -> List[str]:
    words = _KEYWORD_SPLIT.split(f"{item.description} {item.criteria}")
    return [w for w in words if len(w) >= KEYWORD_MIN_LEN][:MAX_KEYWORDS]


def keyword_anchor(haystack: str, keyword: str) -> Optional[EvidenceAnchor]:
    """
    Window of WINDOW_PAD chars either side of the first match; needs at least
    four words to carry a start pair and an end pair.
    """
    idx = haystack.lower().find(keyword.lower())
    if idx == -1:
        return None
    start = max(0, idx - WINDOW_PAD)
    end = min(len(haystack), idx + len(keyword) + WINDOW_PAD)
    snippet = haystack[start:end].strip()
    words = snippet.split()
    if len(words) < 4:
        return None
    return EvidenceAnchor(
        startTokens=(words[0], words[1]),
        endTokens=(words[-2], words[-1]),
        fullText=snippet,
    )


class VerificationDispatcher:
    """
    Verifies one checklist item against already-loaded document text.

    Backend is picked once from `config.use_real_api`. verify() never raises:
    any failure is folded into a `failed` result for that item.
    """

    def __init__(self, config: DispatchConfig) -> None:
        self._config = config

    async def verify(
        self, token: str, document_text: str, item: ChecklistItemDefinition
    ) -> VerificationResult:
        mode = "real" if self._config.use_real_api else "simulated"
        logger.info("verify.item.start item=%s mode=%s", item.id, mode)
        try:
            with timed(logger, "verify.item", item=item.id, mode=mode):
                if self._config.use_real_api:
                    result = await self._verify_real(token, document_text, item)
                else:
                    result = await self._verify_simulated(document_text, item)
        except Exception as e:
            logger.error(
                "verify.item.error item=%s err=%s msg=%s", item.id, type(e).__name__, e
            )
            return failed_result(item.id, str(e) or type(e).__name__)

        logger.info("verify.item.result item=%s status=%s", item.id, result.status)
        return result

    async def _verify_real(
        self, token: str, document_text: str, item: ChecklistItemDefinition
    ) -> VerificationResult:
        cfg = self._config
        prompt = build_verify_prompt(
            cfg.prompt_template, document_text, item, cfg.max_chars
        )
        data = await chat_completion(
            token=token,
            api_url=cfg.api_url,
            prompt=prompt,
            max_tokens=cfg.max_tokens,
            temperature=cfg.temperature,
            timeout=cfg.timeout,
            op="ai.verify",
        )
        parsed = parse_verification(message_text(data))
        logger.info(
            "ai.verify.parsed item=%s strategy=%s anchors=%d",
            item.id,
            parsed.strategy,
            len(parsed.anchors),
        )
        return to_result(item.id, parsed)

    async def _verify_simulated(
        self, document_text: str, item: ChecklistItemDefinition
    ) -> VerificationResult:
        lo, hi = self._config.simulated_delay
        if hi > 0:
            await asyncio.sleep(random.uniform(lo, hi))

        haystack = document_text or ""
        anchor = None
        for kw in item_keywords(item):
            anchor = keyword_anchor(haystack, kw)
            if anchor is not None:
                break

        if anchor is not None:
            return VerificationResult(
                itemId=item.id,
                status="verified",
                evidence=Evidence(
                    text=f"Found evidence for {item.description}",
                    confidence=0.8,
                    tokens=[anchor],
                ),
                reason="Criteria met",
            )
        return VerificationResult(
            itemId=item.id,
            status="failed",
            evidence=Evidence(
                text=f"Not found: {item.description}", confidence=0.4, tokens=[]
            ),
            reason="Required information not found in document",
        )
