"""Input validation utilities."""

import logging
import re
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

_CONTROL_CHARS = re.compile(r'[\x00-\x08\x0b-\x0c\x0e-\x1f\x7f-\x9f]')
MIN_INSIGHT_WORDS = 4


def validate_url(url: str) -> bool:
    """Validate URL format."""
    if not url:
        return False

    pattern = r'^https?://[^\s<>"{}|\\^`\[\]]+$'
    return bool(re.match(pattern, url))


def validate_confidence(value: Any) -> bool:
    """Confidence must be a real number in [0, 1]."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return 0.0 <= value <= 1.0


def sanitize_text(content: str, max_length: int = 2000) -> str:
    """Sanitize and truncate free text."""
    # Remove control characters except newlines and tabs
    sanitized = _CONTROL_CHARS.sub('', content)

    if len(sanitized) > max_length:
        sanitized = sanitized[:max_length-3] + "..."

    return sanitized.strip()


def validate_raw_insight(
    raw: Any,
    categories,
    min_length: int = 20,
    max_length: int = 500,
    min_confidence: float = 0.6,
    default_confidence: float = 0.7
) -> Optional[Dict[str, Any]]:
    """
    Check one insight as returned by the analysis step.

    Args:
        raw: Candidate mapping with category, content and optional confidence
        categories: Accepted category values
        min_length: Minimum characters of content after sanitizing
        max_length: Content is truncated to this length
        min_confidence: Entries below this confidence are rejected
        default_confidence: Used when confidence is missing

    Returns:
        Normalized ``{category, content, confidence}`` or None if rejected
    """
    if not isinstance(raw, dict):
        logger.debug(f"Rejected insight: not an object ({type(raw).__name__})")
        return None

    category = raw.get("category")
    if category not in categories:
        logger.debug(f"Rejected insight: unknown category {category!r}")
        return None

    content = raw.get("content")
    if not isinstance(content, str):
        logger.debug("Rejected insight: content is not text")
        return None

    content = sanitize_text(content, max_length=max_length)
    if len(content) < min_length or len(content.split()) < MIN_INSIGHT_WORDS:
        logger.debug(f"Rejected insight: too short ({content!r})")
        return None

    confidence = raw.get("confidence")
    if confidence is None:
        confidence = default_confidence
    elif not validate_confidence(confidence):
        logger.debug(f"Rejected insight: invalid confidence {confidence!r}")
        return None

    if confidence < min_confidence:
        logger.debug(f"Rejected insight: low confidence {confidence:.2f}")
        return None

    return {
        "category": category,
        "content": content,
        "confidence": float(confidence),
    }
