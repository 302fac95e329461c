"""Uniform result envelope returned by every RBAC operation."""

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel

from .errors import ErrorKind, RBACError

T = TypeVar("T")


class OperationResult(BaseModel, Generic[T]):
    """Outcome of an operation.

    ``payload`` holds an entity, a list of entities, or nothing. Failed
    results carry ``error`` and, for policy violations, ``reason``.
    """
    success: bool
    message: str
    payload: Optional[T] = None
    error: Optional[ErrorKind] = None
    reason: Optional[str] = None

    @classmethod
    def ok(cls, message: str, payload: Optional[T] = None) -> "OperationResult[T]":
        return cls(success=True, message=message, payload=payload)

    @classmethod
    def fail(
        cls,
        message: str,
        error: ErrorKind = ErrorKind.UNEXPECTED,
        reason: Optional[str] = None,
    ) -> "OperationResult[T]":
        return cls(success=False, message=message, error=error, reason=reason)

    @classmethod
    def from_error(cls, exc: RBACError) -> "OperationResult[T]":
        return cls.fail(exc.message, error=exc.kind, reason=exc.reason)
