"""Token estimation heuristic (roughly four characters per token)."""

from __future__ import annotations

import math
from collections.abc import Callable

TokenEstimator = Callable[[str], int]

CHARS_PER_TOKEN = 4


def estimate_tokens(content: str) -> int:
    trimmed = content.strip()
    if not trimmed:
        return 0
    return max(1, math.ceil(len(trimmed) / CHARS_PER_TOKEN))
