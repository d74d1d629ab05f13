"""
Module 01 - Schemas & Canonicalization
File: errors.py

Purpose: Standard error taxonomy for the whitelist commitment library.
Defines both Pydantic models for structured error communication
and Python exceptions for control flow.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Error Codes (Machine-Readable Constants)
# =============================================================================

class ErrorCodes:
    """Stable machine-readable error codes used across the library."""

    # Serialization Errors
    CANONICALIZATION_ERROR = "CANONICALIZATION_ERROR"
    MALFORMED_PROOF = "MALFORMED_PROOF"

    # Hashing Errors
    UNSUPPORTED_ALGORITHM = "UNSUPPORTED_ALGORITHM"

    # Tree Lifecycle Errors
    EMPTY_SET = "EMPTY_SET"
    EMPTY_TREE = "EMPTY_TREE"
    TREE_ALREADY_BUILT = "TREE_ALREADY_BUILT"

    # Membership Errors
    NOT_FOUND = "NOT_FOUND"

    # Configuration Errors
    CONFIG_INVALID = "CONFIG_INVALID"


# =============================================================================
# Pydantic Error Models (Structured Communication)
# =============================================================================

class WhitelistError(BaseModel):
    """
    Base error model for structured error communication.

    Used to pass errors across a boundary (CLI JSON output, logs) without
    raising, so they can be serialized and inspected.
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=False,
        validate_assignment=True,
    )

    code: str = Field(
        ...,
        description="Stable machine-readable error code",
        examples=[ErrorCodes.NOT_FOUND],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional structured details about the error",
    )
    retryable: bool = Field(
        default=False,
        description="Whether the operation can be retried",
    )

    def to_exception(self) -> "WhitelistException":
        """Convert this error model to a raisable exception."""
        return WhitelistException(
            code=self.code,
            message=self.message,
            details=self.details,
            retryable=self.retryable,
        )


# =============================================================================
# Python Exceptions (Control Flow)
# =============================================================================

class WhitelistException(Exception):
    """
    Base exception for all whitelist library errors.

    This exception carries structured error information and can be
    converted to/from WhitelistError models.
    """

    def __init__(
        self,
        message: str,
        code: str = "WHITELIST_ERROR",
        details: dict[str, Any] | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}
        self.retryable = retryable

    def to_error_model(self) -> WhitelistError:
        """Convert this exception to a WhitelistError model."""
        return WhitelistError(
            code=self.code,
            message=self.message,
            details=self.details,
            retryable=self.retryable,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class CanonicalizationException(WhitelistException):
    """Exception raised when canonical serialization fails."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.CANONICALIZATION_ERROR,
            details=details,
            retryable=False,
        )


class UnsupportedAlgorithmException(WhitelistException):
    """Exception raised when a hash algorithm is not on the allow-list."""

    def __init__(
        self,
        algorithm: str,
        supported: list[str] | None = None,
    ) -> None:
        details: dict[str, Any] = {"algorithm": algorithm}
        if supported is not None:
            details["supported"] = supported
        super().__init__(
            message=f"Unsupported hash algorithm: {algorithm!r}",
            code=ErrorCodes.UNSUPPORTED_ALGORITHM,
            details=details,
            retryable=False,
        )


class EmptySetError(WhitelistException):
    """Raised when a tree is built from zero items."""

    def __init__(self, message: str = "Cannot build a Merkle tree from an empty item set") -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.EMPTY_SET,
            retryable=False,
        )


class EmptyTreeError(WhitelistException):
    """Raised when a tree is queried before it has been built."""

    def __init__(self, message: str = "Merkle tree has not been built") -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.EMPTY_TREE,
            retryable=False,
        )


class TreeAlreadyBuiltError(WhitelistException):
    """Raised when build() is called on a tree that is already built."""

    def __init__(self, message: str = "Merkle tree is already built; create a new tree instead") -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.TREE_ALREADY_BUILT,
            retryable=False,
        )


class NotFoundError(WhitelistException):
    """
    Raised when a proof is requested for a leaf that is not in the tree.

    This is an expected outcome: callers usually read it as "not a member".
    """

    def __init__(
        self,
        message: str,
        leaf: bytes | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if leaf is not None:
            full_details["leaf"] = "0x" + leaf.hex()
        super().__init__(
            message=message,
            code=ErrorCodes.NOT_FOUND,
            details=full_details,
            retryable=False,
        )


class MalformedProofException(WhitelistException):
    """Exception raised when a proof is structurally invalid."""

    def __init__(
        self,
        message: str,
        step_index: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if step_index is not None:
            full_details["step_index"] = step_index
        super().__init__(
            message=message,
            code=ErrorCodes.MALFORMED_PROOF,
            details=full_details,
            retryable=False,
        )


class ConfigException(WhitelistException):
    """Exception raised for invalid configuration values."""

    def __init__(
        self,
        message: str,
        field_path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if field_path:
            full_details["field_path"] = field_path
        super().__init__(
            message=message,
            code=ErrorCodes.CONFIG_INVALID,
            details=full_details,
            retryable=False,
        )
