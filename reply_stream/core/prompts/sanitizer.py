"""
Input sanitization applied to every user-supplied string before it is
embedded in a prompt.
"""

import re
from typing import List, Optional

from reply_stream.config.constants import (
    PROMPT_INJECTION_PATTERNS, SANITIZED_INPUT_MAX_LENGTH
)

_INJECTION_RES: List[re.Pattern] = [
    re.compile(pattern, re.IGNORECASE) for pattern in PROMPT_INJECTION_PATTERNS
]
_EXCESS_NEWLINES_RE = re.compile(r"\n{4,}")


def sanitize_user_input(text: Optional[str]) -> str:
    """
    Strip known prompt-injection phrases and bound the length.

    Args:
        text: Raw user input, may be None

    Returns:
        Cleaned text, at most SANITIZED_INPUT_MAX_LENGTH characters
    """
    if not text:
        return ""

    sanitized = text
    for pattern in _INJECTION_RES:
        sanitized = pattern.sub("", sanitized)

    sanitized = _EXCESS_NEWLINES_RE.sub("\n\n\n", sanitized)
    return sanitized.strip()[:SANITIZED_INPUT_MAX_LENGTH]
