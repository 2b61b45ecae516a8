"""
Custom Exceptions Module.

This module defines all custom exceptions used throughout the converter.
Using specific exceptions lets callers present actionable feedback: the
offending field names or a human-readable parse message travel in
``details``.

Exception Hierarchy:
    ConverterError (base)
    ├── InputError
    │   ├── UnsupportedFileTypeError
    │   ├── MissingFileError
    │   ├── CorruptedFileError
    │   └── MalformedInputError
    ├── SchemaError
    ├── ExtractionError
    │   ├── DocumentRejectedError
    │   └── ExtractionQuorumFailure
    ├── UpstreamServiceFailure
    │   └── OCREngineNotAvailableError
    └── OutputError

Falling back to generic ``field<N>`` names for unmapped positions or
unknown segment types is not an error and has no exception class.
"""

from typing import List, Optional


class ConverterError(Exception):
    """
    Base exception for all converter errors.

    Attributes:
        message: Human-readable error message.
        details: Optional dictionary with additional error details.
    """

    def __init__(self, message: str, details: dict = None):
        """
        Initialize the exception.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional context.
        """
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# =============================================================================
# INPUT ERRORS
# =============================================================================

class InputError(ConverterError):
    """Base exception for input handling errors."""
    pass


class UnsupportedFileTypeError(InputError):
    """
    Raised when an unsupported file type is provided.

    Example:
        >>> raise UnsupportedFileTypeError(".doc", [".json", ".hl7"])
    """

    def __init__(self, file_type: str, supported_types: list):
        message = f"Unsupported file type: '{file_type}'"
        details = {"file_type": file_type, "supported_types": sorted(supported_types)}
        super().__init__(message, details)


class MissingFileError(InputError):
    """Raised when an input file cannot be found."""

    def __init__(self, filepath: str):
        message = f"File not found: {filepath}"
        details = {"filepath": filepath}
        super().__init__(message, details)


class CorruptedFileError(InputError):
    """Raised when a file appears to be corrupted, empty or unreadable."""

    def __init__(self, filepath: str, reason: str = None):
        message = f"Corrupted or unreadable file: {filepath}"
        details = {"filepath": filepath, "reason": reason}
        super().__init__(message, details)


class MalformedInputError(InputError):
    """
    Raised when a payload assumed to be well-formed cannot be parsed.

    Example:
        >>> raise MalformedInputError("Expecting value: line 1 column 1")
    """

    def __init__(self, reason: str, source: Optional[str] = None):
        message = f"Malformed input: {reason}"
        details = {"reason": reason}
        if source:
            details["source"] = source
        super().__init__(message, details)


# =============================================================================
# SCHEMA ERRORS
# =============================================================================

class SchemaError(ConverterError):
    """Raised when a segment schema table is inconsistent or unknown."""

    def __init__(self, reason: str, segment_type: Optional[str] = None):
        if segment_type:
            message = f"Invalid schema for segment '{segment_type}': {reason}"
        else:
            message = f"Invalid schema: {reason}"
        details = {"segment_type": segment_type, "reason": reason}
        super().__init__(message, details)


# =============================================================================
# EXTRACTION ERRORS
# =============================================================================

class ExtractionError(ConverterError):
    """Base exception for heuristic OCR extraction failures."""
    pass


class DocumentRejectedError(ExtractionError):
    """
    Raised when OCR text is too short or is not a recognised claim form.
    """

    def __init__(self, reason: str, text_length: int = 0):
        message = f"Document rejected: {reason}"
        details = {"reason": reason, "text_length": text_length}
        super().__init__(message, details)


class ExtractionQuorumFailure(ExtractionError):
    """
    Raised when too few required fields were matched.

    Attributes:
        missing: Names of the required fields that did not match,
                 in declared field order.
        matched: Number of required fields that did match.
        quorum: Threshold that was not reached.
    """

    def __init__(self, missing: List[str], matched: int, quorum: int):
        self.missing = list(missing)
        self.matched = matched
        self.quorum = quorum
        message = (
            f"Only {matched} required field(s) matched, "
            f"at least {quorum} needed"
        )
        details = {"missing_fields": self.missing}
        super().__init__(message, details)


# =============================================================================
# UPSTREAM ERRORS
# =============================================================================

class UpstreamServiceFailure(ConverterError):
    """Raised when the OCR collaborator fails or returns unusable output."""

    def __init__(self, service: str, reason: str = None):
        message = f"Upstream service failed: {service}"
        details = {"service": service, "reason": reason}
        super().__init__(message, details)


class OCREngineNotAvailableError(UpstreamServiceFailure):
    """Raised when the Tesseract engine cannot be reached."""

    def __init__(self, engine_name: str):
        super().__init__(engine_name, "OCR engine not available")


# =============================================================================
# OUTPUT ERRORS
# =============================================================================

class OutputError(ConverterError):
    """Raised when a converted payload cannot be written."""

    def __init__(self, filepath: str, reason: str = None):
        message = f"Failed to write output file: {filepath}"
        details = {"filepath": filepath, "reason": reason}
        super().__init__(message, details)


__all__ = [
    'ConverterError',
    'InputError',
    'UnsupportedFileTypeError',
    'MissingFileError',
    'CorruptedFileError',
    'MalformedInputError',
    'SchemaError',
    'ExtractionError',
    'DocumentRejectedError',
    'ExtractionQuorumFailure',
    'UpstreamServiceFailure',
    'OCREngineNotAvailableError',
    'OutputError',
]
