# core/checklist_generator.py
import json
import re
from typing import Any, Dict, List, Optional
from core.evidence_normalizer import message_text
from core.llm_client import chat_completion
from model.checklist import GeneratedItem
import logging

logger = logging.getLogger(__name__)

MIN_PROMPT_ITEMS = 3
MAX_PROMPT_ITEMS = 12
DEFAULT_ITEMS = 6

_ARRAY_SPAN = re.compile(r"\[[\s\S]*\]")
_BULLET = re.compile(r"^[-*]\s*")
_CRITERIA_PREFIX = re.compile(r"^criteria[:\-\s]*", re.IGNORECASE)

SIMULATED_POOLS: Dict[str, List[GeneratedItem]] = {
    "Resume": [
        GeneratedItem(description="Contact information present", criteria="Name, email, and phone number are clearly listed"),
        GeneratedItem(description="Work experience relevance", criteria="Experience aligns with target role; includes quantifiable achievements"),
        GeneratedItem(description="Education details", criteria="Degree, institution, and graduation date included"),
        GeneratedItem(description="Skills section completeness", criteria="Technical and soft skills listed; matches job requirements"),
        GeneratedItem(description="Formatting and consistency", criteria="Consistent dates, bullet styles, and tense"),
        GeneratedItem(description="ATS-friendly structure", criteria="Avoids tables/images; uses standard headings and keywords"),
    ],
    "Contract": [
        GeneratedItem(description="Parties identified", criteria="Legal names and addresses of all parties are included"),
        GeneratedItem(description="Scope of work", criteria="Deliverables and responsibilities clearly defined"),
        GeneratedItem(description="Payment terms", criteria="Amount, schedule, and method specified"),
        GeneratedItem(description="Termination clause", criteria="Conditions for termination and notice periods specified"),
        GeneratedItem(description="Governing law", criteria="Jurisdiction and dispute resolution process stated"),
        GeneratedItem(description="Signatures", criteria="Signatures or e-sign confirmation for all parties present"),
    ],
    "Invoice": [
        GeneratedItem(description="Invoice identifiers", criteria="Invoice number and issue date present"),
        GeneratedItem(description="Vendor and client details", criteria="Names and contact information of both parties present"),
        GeneratedItem(description="Line items", criteria="Items/services listed with quantity, rate, and total"),
        GeneratedItem(description="Tax and totals", criteria="Tax applied correctly; subtotal and grand total accurate"),
        GeneratedItem(description="Payment instructions", criteria="Due date and payment method specified"),
        GeneratedItem(description="Purchase order reference", criteria="PO number included if applicable"),
    ],
}


def clamp_prompt_count(item_count: Optional[int]) -> int:
    return min(max(item_count or DEFAULT_ITEMS, MIN_PROMPT_ITEMS), MAX_PROMPT_ITEMS)


def build_generate_prompt(
    template: str,
    document_type: str,
    custom_description: Optional[str] = None,
    item_count: Optional[int] = None,
) -> str:
    context = f"Additional context: {custom_description}\n\n" if custom_description else ""
    return template.format(
        document_type=document_type,
        context=context,
        count=clamp_prompt_count(item_count),
    )


def _items_from_array(arr: Any) -> Optional[List[GeneratedItem]]:
    if not isinstance(arr, list):
        return None
    out: List[GeneratedItem] = []
    for it in arr:
        if not isinstance(it, dict):
            continue
        desc = str(it.get("description") or "").strip()
        crit = str(it.get("criteria") or "").strip()
        if desc and crit:
            out.append(GeneratedItem(description=desc, criteria=crit))
    return out


def _items_from_lines(raw: str) -> List[GeneratedItem]:
    """Bullet line followed by a 'criteria ...' line, as a last resort."""
    lines = [ln.strip() for ln in raw.splitlines() if ln.strip()]
    out: List[GeneratedItem] = []
    i = 0
    while i < len(lines):
        desc = _BULLET.sub("", lines[i])
        nxt = lines[i + 1] if i + 1 < len(lines) else ""
        if desc and "criteria" in nxt.lower():
            out.append(
                GeneratedItem(description=desc, criteria=_CRITERIA_PREFIX.sub("", nxt))
            )
            i += 2
            continue
        i += 1
    return out


def parse_generated_items(raw: str) -> List[GeneratedItem]:
    """strict JSON array -> embedded array -> line pairs. [] when nothing fits."""
    try:
        items = _items_from_array(json.loads(raw))
        if items is not None:
            return items
    except ValueError:
        pass

    match = _ARRAY_SPAN.search(raw or "")
    if match:
        try:
            items = _items_from_array(json.loads(match.group(0)))
            if items is not None:
                return items
        except ValueError:
            pass

    return _items_from_lines(raw or "")


def simulate_generation(document_type: str, item_count: int) -> List[GeneratedItem]:
    pool = SIMULATED_POOLS.get(document_type) or SIMULATED_POOLS["Resume"]
    count = max(MIN_PROMPT_ITEMS, min(item_count, MAX_PROMPT_ITEMS))
    return [pool[i % len(pool)] for i in range(count)]


async def generate_with_llm(
    *,
    token: str,
    api_url: str,
    prompt: str,
    max_tokens: int,
    temperature: float,
    timeout: float,
) -> List[GeneratedItem]:
    """Raises LLMTimeout / LLMError from the client; parsing never raises."""
    data = await chat_completion(
        token=token,
        api_url=api_url,
        prompt=prompt,
        max_tokens=max_tokens,
        temperature=temperature,
        timeout=timeout,
        op="ai.generate",
    )
    items = parse_generated_items(message_text(data))
    logger.info("ai.generate.items count=%d", len(items))
    return items
