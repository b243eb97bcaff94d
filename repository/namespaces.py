# repository/namespaces.py
from typing import Final

ROOT: Final[str] = "doccheck"

SESSIONS: Final[str] = f"{ROOT}:sessions"  # session id -> LLM bearer token
