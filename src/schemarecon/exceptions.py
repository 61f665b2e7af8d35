"""
Exception classes for schemarecon.
"""

from typing import Any, Dict, Optional


class SchemaReconError(Exception):
    """Base exception for all schemarecon errors."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.cause = cause

    def __str__(self) -> str:
        result = self.message
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            result += f" [{details_str}]"
        if self.cause:
            result += f" (caused by: {self.cause})"
        return result


class ConfigurationError(SchemaReconError):
    """Raised when there's an error in configuration."""

    pass


class SnapshotError(SchemaReconError):
    """Raised when a schema snapshot cannot be used."""

    pass


class SnapshotLoadError(SnapshotError):
    """Raised when a conversion document cannot be turned into snapshots."""

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        cause: Optional[Exception] = None,
    ) -> None:
        details = {}
        if path:
            details["path"] = path
        super().__init__(message, details, cause)
        self.path = path


class ValidationError(SchemaReconError):
    """Raised when a rejected edit is escalated by the caller."""

    def __init__(
        self,
        rule: str,
        message: str,
        tables: Optional[list] = None,
    ) -> None:
        details = {"rule": rule}
        if tables:
            details["tables"] = ", ".join(tables)
        super().__init__(message, details)
        self.rule = rule
        self.tables = list(tables or [])
