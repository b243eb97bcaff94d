# util/types.py
from typing import Literal, Tuple


# Flow: Narrow types shared by models and the reply parser.
VerificationStatus = Literal["verified", "failed"]

ParseStrategy = Literal["strict", "lenient", "heuristic"]

TokenPair = Tuple[str, str]
