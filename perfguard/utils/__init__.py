"""Utility functions and helpers.

This module provides common utilities used throughout the system:
- Logging configuration
- Config value validation and coercion

Usage:
    from perfguard.utils import setup_logging, ValidationError

    # Setup logging
    setup_logging(debug_mode=True, log_level="DEBUG")
"""

from perfguard.utils.logging_config import setup_logging
from perfguard.utils.validation import (
    ValidationError,
    validate_positive,
    validate_non_negative,
    validate_selector,
    coerce_number,
    coerce_bool,
)

__all__ = [
    # Logging
    "setup_logging",

    # Validation
    "ValidationError",
    "validate_positive",
    "validate_non_negative",
    "validate_selector",
    "coerce_number",
    "coerce_bool",
]
