# util/functions.py
import re

_NON_PRINTABLE = re.compile(r"[^\x09\x0A\x0D\x20-\x7E]")
_WS = re.compile(r"\s+")


def sanitize_text(text: str) -> str:
    """Drop every character outside tab/LF/CR and printable ASCII."""
    return _NON_PRINTABLE.sub("", text or "")


def bound_text(text: str, max_chars: int) -> str:
    """Sanitize, trim, then cut to at most `max_chars` characters."""
    return sanitize_text(text).strip()[:max_chars]


def normalize_ws(text: str) -> str:
    """Collapse whitespace runs and case-fold, for loose text comparison."""
    return _WS.sub(" ", text or "").strip().lower()


def clip_chars(text: str, max_chars: int = 200) -> str:
    return text if len(text) <= max_chars else text[:max_chars]


def parse_positive_int(raw: object, default: int) -> int:
    """
    - Accepts ints and numeric strings ("8", " 3 ").
    - Anything non-numeric, zero or negative falls back to `default`.
    """
    if isinstance(raw, bool):
        return default
    try:
        n = int(str(raw).strip())
    except (TypeError, ValueError):
        return default
    return n if n > 0 else default


def is_safe_name(name: str) -> bool:
    """Reject names that could escape their base directory."""
    return bool(name) and ".." not in name and "/" not in name and "\\" not in name
