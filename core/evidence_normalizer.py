# core/evidence_normalizer.py
import json
from typing import Any, Dict, List, Optional
from core.entities import ParsedVerification
from model.verification import Evidence, EvidenceAnchor, VerificationResult
from util.functions import clip_chars, normalize_ws
import logging

logger = logging.getLogger(__name__)

HEURISTIC_KEYWORDS = ("verified", "found", "yes")
HEURISTIC_REASON = "Response parsing failed, using text analysis"
DEFAULT_CONFIDENCE = 0.5

_decoder = json.JSONDecoder()


def message_text(payload: Dict[str, Any]) -> str:
    """
    Pull the model text out of `choices[0].message.content`.
    Multi-part content (a list of typed parts) yields its first text part.
    """
    try:
        content = payload["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return ""

    if isinstance(content, list):
        for part in content:
            if isinstance(part, dict) and part.get("type") == "text":
                return str(part.get("text") or "")
        return ""
    return content if isinstance(content, str) else ""


def _strip_fences(raw: str) -> str:
    s = raw.strip()
    if s.startswith("```"):
        s = s.strip("`").strip()
        if s.lower().startswith("json"):
            s = s[4:].strip()
    return s


def _strict(raw: str) -> Optional[Dict[str, Any]]:
    try:
        obj = json.loads(_strip_fences(raw))
    except ValueError:
        return None
    return obj if isinstance(obj, dict) else None


def _lenient(raw: str) -> Optional[Dict[str, Any]]:
    """First decodable top-level JSON object embedded anywhere in `raw`."""
    idx = raw.find("{")
    while idx != -1:
        try:
            obj, _ = _decoder.raw_decode(raw, idx)
        except ValueError:
            obj = None
        if isinstance(obj, dict):
            return obj
        idx = raw.find("{", idx + 1)
    return None


def _heuristic(raw: str) -> ParsedVerification:
    lowered = raw.lower()
    verified = any(k in lowered for k in HEURISTIC_KEYWORDS)
    return ParsedVerification(
        strategy="heuristic",
        status="verified" if verified else "failed",
        confidence=DEFAULT_CONFIDENCE,
        reasoning=HEURISTIC_REASON,
        evidence_text=clip_chars(raw, 200),
    )


def _coerce_confidence(value: Any) -> float:
    if isinstance(value, bool) or value is None:
        return DEFAULT_CONFIDENCE
    try:
        conf = float(value)
    except (TypeError, ValueError):
        return DEFAULT_CONFIDENCE
    if conf != conf:  # NaN
        return DEFAULT_CONFIDENCE
    return max(0.0, min(1.0, conf))


def _coerce_page(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return None


def normalize_anchor(raw: Any) -> Optional[EvidenceAnchor]:
    """
    Keep the first two start tokens and last two end tokens. Entries that
    still lack a pair on either side, or carry no full_text, are dropped.
    """
    if not isinstance(raw, dict):
        return None
    st_raw = raw.get("start_tokens")
    et_raw = raw.get("end_tokens")
    st = [str(t) for t in st_raw[:2]] if isinstance(st_raw, list) else []
    et = [str(t) for t in et_raw[-2:]] if isinstance(et_raw, list) else []
    full = raw.get("full_text") if isinstance(raw.get("full_text"), str) else ""
    if len(st) != 2 or len(et) != 2 or not full:
        return None

    full_norm = normalize_ws(full)
    confirmed = full_norm.startswith(normalize_ws(" ".join(st))) and full_norm.endswith(
        normalize_ws(" ".join(et))
    )
    return EvidenceAnchor(
        startTokens=(st[0], st[1]),
        endTokens=(et[0], et[1]),
        fullText=full,
        pageNumber=_coerce_page(raw.get("page_number")),
        verified=confirmed,
    )


def normalize_anchors(raw: Any) -> List[EvidenceAnchor]:
    if not isinstance(raw, list):
        return []
    anchors = [a for a in (normalize_anchor(r) for r in raw) if a is not None]
    dropped = len(raw) - len(anchors)
    unconfirmed = sum(1 for a in anchors if not a.verified)
    if dropped or unconfirmed:
        logger.info(
            "evidence.anchors kept=%d dropped=%d unconfirmed=%d",
            len(anchors),
            dropped,
            unconfirmed,
        )
    return anchors


def _from_object(obj: Dict[str, Any], strategy: str) -> ParsedVerification:
    status = str(obj.get("status") or "").strip().lower()
    reasoning = obj.get("reasoning") or obj.get("reason")
    evidence_text = obj.get("evidence_text")
    return ParsedVerification(
        strategy=strategy,  # type: ignore[arg-type]
        status="verified" if status == "verified" else "failed",
        anchors=normalize_anchors(obj.get("evidence_tokens")),
        confidence=_coerce_confidence(obj.get("confidence")),
        reasoning=str(reasoning) if reasoning else None,
        evidence_text=str(evidence_text) if evidence_text else None,
    )


def parse_verification(raw: str) -> ParsedVerification:
    """
    strict JSON -> first embedded object -> keyword heuristic.
    Always returns a ParsedVerification.
    """
    raw = raw or ""
    obj = _strict(raw)
    if obj is not None:
        return _from_object(obj, "strict")
    obj = _lenient(raw)
    if obj is not None:
        return _from_object(obj, "lenient")
    logger.warning("evidence.parse.heuristic chars=%d", len(raw))
    return _heuristic(raw)


def to_result(item_id: int, parsed: ParsedVerification) -> VerificationResult:
    first = parsed.anchors[0] if parsed.anchors else None
    text = parsed.evidence_text or (first.fullText if first else "") or "No evidence provided"
    return VerificationResult(
        itemId=item_id,
        status=parsed.status,
        evidence=Evidence(
            text=text,
            confidence=parsed.confidence,
            pageNumber=first.pageNumber if first else None,
            tokens=parsed.anchors,
        ),
        reason=parsed.reasoning or "Verification completed",
    )


def failed_result(
    item_id: int, reason: str, text: str = "API call failed"
) -> VerificationResult:
    """Zero-confidence stand-in for an item whose verification call blew up."""
    return VerificationResult(
        itemId=item_id,
        status="failed",
        evidence=Evidence(text=text, pageNumber=1, confidence=0.0),
        reason=reason or "Unknown error",
    )
