# PATH: core/exceptions.py
"""
Typed exceptions for the ERC indexer.

Every error carries an ErrorCode so callers (and logs) can tell
configuration problems from infra failures and decode failures.
"""

from typing import Any, Optional

from core.constants import ErrorCode


class IndexerError(Exception):
    """Base exception for the indexer."""

    def __init__(
        self,
        code: ErrorCode = ErrorCode.UNKNOWN,
        message: str = "",
        details: Optional[dict] = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.message}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "error_code": self.code.value,
            "message": self.message,
            "details": self.details,
        }


class ConfigError(IndexerError):
    """Invalid or missing configuration. Fatal at startup."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.CONFIG_INVALID,
        details: Optional[dict] = None,
    ):
        super().__init__(code=code, message=message, details=details)


class DecodeError(IndexerError):
    """ABI decoding of a read-call result failed."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(code=ErrorCode.DECODE_FAILED, message=message, details=details)


class StartingPointError(IndexerError):
    """An explicit starting-point override could not be resolved."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(
            code=ErrorCode.STARTING_POINT_UNRESOLVED,
            message=message,
            details=details,
        )


class RegistryError(IndexerError):
    """Registry file could not be read or written."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(code=ErrorCode.REGISTRY_IO_ERROR, message=message, details=details)
