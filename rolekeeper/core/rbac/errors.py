"""Expected failure types raised inside RBAC operations.

These never leave the service boundary: ``RBACService`` converts them into
failed ``OperationResult`` envelopes.
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Classification of a failed operation."""

    NOT_FOUND = "not_found"
    DUPLICATE_KEY = "duplicate_key"
    POLICY_VIOLATION = "policy_violation"
    INVALID_INPUT = "invalid_input"
    CONFLICT = "conflict"          # Lost a concurrent write or uniqueness race
    UNEXPECTED = "unexpected"      # Store or infrastructure fault


class PolicyReason(str, Enum):
    """Which structural policy blocked the operation."""

    PRESET = "preset"                       # Preset roles cannot be deleted
    IN_USE = "in_use"                       # Role still held by users
    PRESET_DOWNGRADE = "preset_downgrade"   # Preset flag is one-way


class RBACError(Exception):
    """Base class for expected RBAC failures."""

    kind: ErrorKind = ErrorKind.UNEXPECTED

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def reason(self) -> Optional[str]:
        return None


class NotFoundError(RBACError):
    """A referenced entity does not exist."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, entity: str, message: Optional[str] = None):
        super().__init__(message or f"{entity} not found.")
        self.entity = entity


class DuplicateKeyError(RBACError):
    """A uniqueness constraint on a name or system name would be violated."""

    kind = ErrorKind.DUPLICATE_KEY

    def __init__(self, field: str, value: str, message: Optional[str] = None):
        super().__init__(message or f"{field} '{value}' is already in use.")
        self.field = field
        self.value = value


class PolicyViolationError(RBACError):
    """A structural policy (preset protection, in-use guard) was violated."""

    kind = ErrorKind.POLICY_VIOLATION

    def __init__(self, policy: PolicyReason, message: str):
        super().__init__(message)
        self.policy = policy

    @property
    def reason(self) -> Optional[str]:
        return self.policy.value


class InvalidInputError(RBACError):
    """An argument failed validation before touching the store."""

    kind = ErrorKind.INVALID_INPUT
