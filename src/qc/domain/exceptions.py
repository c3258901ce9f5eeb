"""Custom exceptions for the QC decision core."""


class QCException(Exception):
    """Base exception for all QC errors."""

    def __init__(self, message: str, details: dict | None = None):
        """
        Initialize QC exception.

        Args:
            message: Human-readable error message
            details: Optional dict with additional error context
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ConfigurationParseError(QCException):
    """Raised when a threshold or rule document cannot be decoded."""

    def __init__(self, source: str, reason: str, errors: list[str] | None = None):
        details = {"source": source, "reason": reason}
        if errors:
            details["errors"] = errors
        super().__init__(message=f"Failed to parse {source}: {reason}", details=details)
        self.source = source
        self.reason = reason
        self.errors = errors or []


class PersistenceError(QCException):
    """Raised when writing thresholds or appending an incident fails."""

    def __init__(self, target: str, original_error: Exception | None = None):
        details = {"target": target}
        if original_error:
            details["original_error"] = str(original_error)
            details["original_error_type"] = type(original_error).__name__
        super().__init__(message=f"Failed to persist to {target}", details=details)
        self.target = target
