"""Custom exceptions for the note janitor.

Provides a structured exception hierarchy with error codes and
machine-readable error information for better error handling.
"""
from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(Enum):
    """Error codes for machine-readable error identification."""

    # Reference block errors (1xxx)
    BLOCK_MALFORMED = 1001

    # Document errors (2xxx)
    DOCUMENT_PARSE_FAILED = 2001

    # Storage errors (4xxx)
    STORAGE_READ_FAILED = 4001
    STORAGE_WRITE_FAILED = 4002
    STORAGE_RENAME_FAILED = 4003

    # Configuration errors (6xxx)
    CONFIG_INVALID = 6001
    CONFIG_MISSING = 6002


class JanitorError(Exception):
    """Base exception for all janitor errors.

    Attributes:
        message: Human-readable error message
        code: Machine-readable error code
        details: Additional context about the error
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.DOCUMENT_PARSE_FAILED,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to a dictionary for serialization."""
        return {
            "error": self.__class__.__name__,
            "code": self.code.value,
            "code_name": self.code.name,
            "message": self.message,
            "details": self.details
        }

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"[{self.code.name}] {self.message} ({detail_str})"
        return f"[{self.code.name}] {self.message}"


class MalformedBlockError(JanitorError):
    """Raised when the //begin ... //end sentinels of a note are inconsistent.

    Only raised in strict mode; otherwise the block is treated as absent.
    """

    def __init__(
        self,
        state: str,
        identifier: Optional[str] = None,
        message: Optional[str] = None
    ):
        details: Dict[str, Any] = {"state": state}
        if identifier:
            details["identifier"] = identifier

        super().__init__(
            message or "Autogenerated link reference block is malformed",
            code=ErrorCode.BLOCK_MALFORMED,
            details=details
        )
        self.state = state
        self.identifier = identifier


class DocumentParseError(JanitorError):
    """Raised when a note cannot be turned into a document."""

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        details = {}
        if path:
            details["path"] = path
        if original_error:
            details["original_error"] = str(original_error)[:200]

        super().__init__(message, code=ErrorCode.DOCUMENT_PARSE_FAILED, details=details)
        self.path = path
        self.original_error = original_error


class StorageError(JanitorError):
    """Raised for read/write/rename failures on note files."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        path: Optional[str] = None,
        code: ErrorCode = ErrorCode.STORAGE_READ_FAILED,
        original_error: Optional[Exception] = None
    ):
        details = {}
        if operation:
            details["operation"] = operation
        if path:
            # Only the file name, full paths stay out of messages
            details["path_hint"] = path.split("/")[-1] if "/" in path else path
        if original_error:
            details["original_error"] = str(original_error)[:200]

        super().__init__(message, code=code, details=details)
        self.operation = operation
        self.path = path
        self.original_error = original_error


class ConfigurationError(JanitorError):
    """Raised for configuration-related errors."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        code: ErrorCode = ErrorCode.CONFIG_INVALID
    ):
        details = {}
        if config_key:
            details["config_key"] = config_key

        super().__init__(message, code=code, details=details)
        self.config_key = config_key
