# core/entities.py
from dataclasses import dataclass, field
from typing import List, Optional, Tuple
from model.verification import EvidenceAnchor
from util.enums import TextSource
from util.types import ParseStrategy, VerificationStatus


@dataclass(frozen=True)
class LoadedDocument:
    """
    Sanitized, bounded document text plus where it came from.
    Empty text is a valid (low-signal) input, not an error.
    """

    text: str
    source: TextSource


@dataclass
class ParsedVerification:
    """
    Single shape produced by every tier of the LLM reply parser, so the
    result builder never branches on how the reply was decoded.
    """

    strategy: ParseStrategy
    status: VerificationStatus
    anchors: List[EvidenceAnchor] = field(default_factory=list)
    confidence: float = 0.5
    reasoning: Optional[str] = None
    evidence_text: Optional[str] = None


@dataclass(frozen=True)
class DispatchConfig:
    use_real_api: bool
    api_url: str
    timeout: float = 30.0
    max_tokens: int = 5000
    temperature: float = 0.1
    max_chars: int = 10_000
    prompt_template: str = ""
    simulated_delay: Tuple[float, float] = (0.5, 1.5)
