"""Spec schema - static validation of drag spec trees."""

from .validation import SpecValidationError, ValidationResult, validate_spec

__all__ = [
    "SpecValidationError",
    "ValidationResult",
    "validate_spec",
]
