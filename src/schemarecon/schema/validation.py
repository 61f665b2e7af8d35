"""
Structured validation results for proposed schema edits.

Validators never raise on a rejected edit; they return a ValidationResult the
caller can render directly.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Tuple

from ..exceptions import ValidationError


class ValidationRule(str, Enum):
    """Rules an edit can violate."""

    EMPTY_PRIMARY_KEY = "EmptyPrimaryKey"
    INTERLEAVE_PREFIX_VIOLATION = "InterleavePrefixViolation"
    DUPLICATE_CHECK_CONSTRAINT = "DuplicateCheckConstraint"
    INCOMPLETE_CHECK_CONSTRAINT = "IncompleteCheckConstraint"
    DUPLICATE_INDEX_NAME = "DuplicateIndexName"
    DUPLICATE_FOREIGN_KEY_NAME = "DuplicateForeignKeyName"
    INVALID_IDENTIFIER = "InvalidIdentifier"
    DUPLICATE_KEY_COLUMN = "DuplicateKeyColumn"
    UNKNOWN_TABLE = "UnknownTable"
    UNKNOWN_COLUMN = "UnknownColumn"
    INTERLEAVE_COLUMN_LOCKED = "InterleaveColumnLocked"


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating one proposed edit."""

    rule: Optional[ValidationRule] = None
    message: str = ""
    tables: Tuple[str, ...] = ()
    details: Dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def ok(self) -> bool:
        return self.rule is None

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def success(cls) -> "ValidationResult":
        return cls()

    @classmethod
    def failure(
        cls,
        rule: ValidationRule,
        message: str,
        tables: Iterable[str] = (),
        **details: Any,
    ) -> "ValidationResult":
        return cls(rule=rule, message=message, tables=tuple(tables), details=details)

    def raise_for_failure(self) -> None:
        """Escalate a failed result into a ValidationError."""
        if not self.ok:
            raise ValidationError(self.rule.value, self.message, list(self.tables))
