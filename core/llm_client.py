# core/llm_client.py
from typing import Any, Dict
import httpx
from util.errors import LLMError, LLMTimeout
from util.functions import clip_chars
import logging
from util.timing import timed

logger = logging.getLogger(__name__)


async def _post_json(
    url: str, headers: Dict[str, str], payload: Dict[str, Any], timeout: float
) -> Dict[str, Any]:
    """
    JSON POST to `url`. Raises LLMError for non-2xx, LLMTimeout when the
    deadline passes. Returns parsed JSON dict or {} on parse failure.
    """
    try:
        async with httpx.AsyncClient(timeout=timeout) as client:
            r = await client.post(url, headers=headers, json=payload)
    except httpx.TimeoutException as e:
        raise LLMTimeout(f"LLM request timed out after {timeout:.0f}s") from e
    except httpx.RequestError as e:
        raise LLMError(f"LLM request failed: {type(e).__name__}") from e

    if r.status_code // 100 != 2:
        raise LLMError(
            f"LLM API error: {r.status_code} {r.reason_phrase} - {clip_chars(r.text, 300)}",
            status_code=r.status_code,
        )
    try:
        data = r.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


async def chat_completion(
    *,
    token: str,
    api_url: str,
    prompt: str,
    max_tokens: int,
    temperature: float,
    timeout: float,
    op: str = "llm.call",
) -> Dict[str, Any]:
    """
    One chat call against the serving endpoint with bearer auth.
    Returns the raw response body; see evidence_normalizer.message_text for
    reading `choices[0].message.content`.
    """
    headers = {
        "Authorization": f"Bearer {token}",
        "Content-Type": "application/json",
    }
    payload = {
        "messages": [{"role": "user", "content": prompt}],
        "max_tokens": max_tokens,
        "temperature": temperature,
    }
    with timed(logger, op, prompt_chars=len(prompt), timeout=timeout):
        return await _post_json(api_url, headers, payload, timeout=timeout)
