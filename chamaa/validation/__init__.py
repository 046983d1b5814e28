"""Integrity validation package."""

from chamaa.validation.integrity import (
    ConflictError,
    EmptyResultError,
    IntegrityResult,
    IntegrityValidator,
    IntegrityViolation,
    InvalidInputError,
    LedgerError,
    ReferenceNotFoundError,
    ViolationKind,
)

__all__ = [
    "ConflictError",
    "EmptyResultError",
    "IntegrityResult",
    "IntegrityValidator",
    "IntegrityViolation",
    "InvalidInputError",
    "LedgerError",
    "ReferenceNotFoundError",
    "ViolationKind",
]
