# utils/validate.py

"""
Request validation - pure checks against the enumerated allow-lists
"""

import math
import re
from dataclasses import dataclass
from typing import Any, Optional

from rewriteforge.core.exceptions import ValidationError
from rewriteforge.models.rewrite import Backend, Granularity, Style

ALLOWED_STYLES = [style.value for style in Style]
ALLOWED_LLMS = [backend.value for backend in Backend]
ALLOWED_GRANULARITIES = [granularity.value for granularity in Granularity]

MAX_TEXT_LENGTH = 5000
MAX_DELAY_MS = 5000

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


@dataclass
class ValidationResult:
    valid: bool
    message: str = ""

    def raise_if_invalid(self) -> None:
        if not self.valid:
            raise ValidationError(self.message)


def validate_request(
        llm: Optional[str],
        text: Any,
        style: Optional[str] = None,
        max_length: int = MAX_TEXT_LENGTH
) -> ValidationResult:
    if not text or not isinstance(text, str):
        return ValidationResult(False, "Text is required and must be a string.")
    if len(text) > max_length:
        return ValidationResult(False, f"Text exceeds {max_length} characters limit.")
    if llm and llm not in ALLOWED_LLMS:
        return ValidationResult(False, f"Unknown LLM: {llm}")
    if style and style not in ALLOWED_STYLES:
        return ValidationResult(False, f"Unknown style: {style}")
    return ValidationResult(True)


def parse_delay(delay: Any) -> Optional[int]:
    """Leading-integer parse of a delay value; None when it is not a number"""
    if isinstance(delay, bool):
        return None
    if isinstance(delay, int):
        return delay
    if isinstance(delay, float):
        return int(delay) if math.isfinite(delay) else None
    if isinstance(delay, str):
        match = _LEADING_INT.match(delay)
        return int(match.group(1)) if match else None
    return None


def validate_stream_options(
        granularity: Optional[str],
        delay: Any,
        max_delay: int = MAX_DELAY_MS
) -> ValidationResult:
    if granularity and granularity not in ALLOWED_GRANULARITIES:
        return ValidationResult(
            False, f"Invalid granularity. Must be one of: {', '.join(ALLOWED_GRANULARITIES)}"
        )

    parsed = parse_delay(delay)
    if parsed is None or parsed < 0 or parsed > max_delay:
        return ValidationResult(False, f"Delay must be a number between 0 and {max_delay} milliseconds")
    return ValidationResult(True)
