"""Utility functions and helpers.

Usage:
    from wisdom.utils import setup_logging, validate_raw_insight

    setup_logging(debug_mode=True, log_level="DEBUG")
"""

from wisdom.utils.logging_config import setup_logging
from wisdom.utils.validation import (
    validate_url,
    validate_confidence,
    validate_raw_insight,
    sanitize_text,
)

__all__ = [
    # Logging
    "setup_logging",

    # Validation
    "validate_url",
    "validate_confidence",
    "validate_raw_insight",
    "sanitize_text",
]
