"""Error taxonomy for claims timeline parsing.

Every failure raised by the pipeline is a ``ClaimsTimelineError`` carrying a
stable ``ErrorKind`` plus recovery suggestions that can be shown to a user.
"""

import errno as errno_codes
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

SUPPORTED_DATE_FORMATS: Tuple[str, ...] = (
    "YYYY-MM-DD",
    "MM/DD/YYYY",
    "DD-MM-YYYY",
    "YYYY/MM/DD",
    "DD/MM/YYYY",
    "MM-DD-YYYY",
)


class ErrorKind(str, Enum):
    """Stable error kinds used in messages, logs and CLI output."""

    FILE_ACCESS = "FILE_ACCESS"
    EMPTY_INPUT = "EMPTY_INPUT"
    JSON_SYNTAX = "JSON_SYNTAX"
    STRUCTURE_VALIDATION = "STRUCTURE_VALIDATION"
    DATE_PARSE = "DATE_PARSE"
    EXTRACTION = "EXTRACTION"
    VALIDATION = "VALIDATION"
    CONFIGURATION = "CONFIGURATION"
    CANCELLED = "CANCELLED"
    ALL_STRATEGIES_FAILED = "ALL_STRATEGIES_FAILED"


class ClaimsTimelineError(Exception):
    """Base exception for claims timeline errors."""

    kind: ErrorKind = ErrorKind.EXTRACTION
    default_suggestions: Tuple[str, ...] = ()

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        recovery_suggestions: Optional[Sequence[str]] = None,
        file_path: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = dict(details or {})
        if recovery_suggestions is None:
            recovery_suggestions = self.default_suggestions
        self.recovery_suggestions: List[str] = list(recovery_suggestions)
        self.file_path = file_path

    def with_file_path(self, file_path: str) -> "ClaimsTimelineError":
        """Attach the source file path and return self for chaining."""
        self.file_path = file_path
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "file_path": self.file_path,
            "recovery_suggestions": self.recovery_suggestions,
        }


_ERRNO_SUGGESTIONS: Dict[int, Tuple[str, List[str]]] = {
    errno_codes.ENOENT: (
        "File not found",
        ["Check that the file path is correct", "Verify the file exists"],
    ),
    errno_codes.EACCES: (
        "Permission denied",
        [
            "Ensure you have read permissions for the file",
            "Check whether another application has the file locked",
        ],
    ),
    errno_codes.EPERM: (
        "Operation not permitted",
        ["Ensure you have read permissions for the file"],
    ),
    errno_codes.ENOSPC: (
        "No space left on device",
        ["Free up disk space and try again"],
    ),
    errno_codes.EISDIR: (
        "Path is a directory",
        ["Select a JSON file rather than a folder", "Use the batch command for folders"],
    ),
    errno_codes.ETIMEDOUT: (
        "Network timeout",
        ["Check your network connection", "Copy the file locally and retry"],
    ),
    errno_codes.EHOSTUNREACH: (
        "Network host unreachable",
        ["Check your network connection", "Copy the file locally and retry"],
    ),
    errno_codes.ECONNRESET: (
        "Network connection reset",
        ["Check your network connection", "Copy the file locally and retry"],
    ),
}


class FileAccessError(ClaimsTimelineError):
    """Raised when the source file cannot be read."""

    kind = ErrorKind.FILE_ACCESS
    default_suggestions = (
        "Check if the file path is correct",
        "Verify the file exists",
        "Ensure you have read permissions",
    )

    def __init__(
        self,
        message: str,
        errno: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
        file_path: Optional[str] = None,
    ):
        suggestions = None
        if errno in _ERRNO_SUGGESTIONS:
            suggestions = _ERRNO_SUGGESTIONS[errno][1]
        super().__init__(message, details, suggestions, file_path)
        self.errno = errno

    @classmethod
    def from_os_error(cls, exc: OSError, file_path: str) -> "FileAccessError":
        label = _ERRNO_SUGGESTIONS.get(exc.errno, ("Cannot read file", []))[0]
        return cls(
            f"{label}: {file_path}",
            errno=exc.errno,
            details={"os_error": exc.strerror or str(exc)},
            file_path=file_path,
        )


class ValidationError(ClaimsTimelineError):
    """Raised when input or output fails validation."""

    kind = ErrorKind.VALIDATION
    default_suggestions = (
        "Check JSON syntax and structure",
        "Verify the file contains valid medical claims data",
        "Ensure all required fields are present",
    )


class EmptyInputError(ValidationError):
    """Raised for zero-byte or whitespace-only sources."""

    kind = ErrorKind.EMPTY_INPUT
    default_suggestions = (
        "The file is empty; export the claims data again",
        "Verify the file was fully written before opening it",
    )


class JsonSyntaxError(ValidationError):
    """Raised when the source is not well-formed JSON."""

    kind = ErrorKind.JSON_SYNTAX
    default_suggestions = (
        "Check for missing commas, brackets or quotes",
        "Validate the file with a JSON linter",
        "Ensure the file is saved as UTF-8",
    )

    def __init__(
        self,
        message: str,
        line: Optional[int] = None,
        column: Optional[int] = None,
        file_path: Optional[str] = None,
    ):
        super().__init__(message, {"line": line, "column": column}, file_path=file_path)
        self.line = line
        self.column = column


class StructureValidationError(ValidationError):
    """Raised when a document parses but holds no recognizable claims."""

    kind = ErrorKind.STRUCTURE_VALIDATION

    def __init__(
        self,
        message: str,
        missing_fields: Sequence[str],
        suggestions: Sequence[str],
        checked_paths: Optional[Dict[str, str]] = None,
    ):
        self.missing_fields = list(missing_fields)
        self.suggestions = list(suggestions)
        self.checked_paths = dict(checked_paths or {})
        super().__init__(
            message,
            {"missing_fields": self.missing_fields, "checked_paths": self.checked_paths},
            [
                "Ensure your JSON contains medical claims data",
                "Verify that arrays contain valid claim objects",
                *self.suggestions,
            ],
        )


class DateParseError(ClaimsTimelineError):
    """Raised when a value cannot be interpreted as a calendar date."""

    kind = ErrorKind.DATE_PARSE

    def __init__(
        self,
        message: str,
        value: Any = None,
        attempted_formats: Optional[Sequence[str]] = None,
        examples: Optional[Dict[str, str]] = None,
        claim_type: Optional[str] = None,
        claim_index: Optional[int] = None,
        claim_id: Optional[str] = None,
        field_name: Optional[str] = None,
        expected_format: str = "YYYY-MM-DD",
    ):
        self.value = value
        self.attempted_formats = list(attempted_formats or [])
        self.examples = dict(examples or {})
        self.claim_type = claim_type
        self.claim_index = claim_index
        self.claim_id = claim_id
        self.field_name = field_name
        self.expected_format = expected_format
        super().__init__(
            message,
            {
                "value": value,
                "attempted_formats": self.attempted_formats,
                "claim_type": claim_type,
                "claim_index": claim_index,
                "claim_id": claim_id,
                "field_name": field_name,
            },
            [
                f"Use the format: {expected_format}",
                "Check your date values",
                "Ensure dates are valid calendar dates",
            ],
        )

    @property
    def supported_formats(self) -> List[str]:
        return list(SUPPORTED_DATE_FORMATS)

    def with_context(
        self,
        claim_type: Optional[str] = None,
        claim_index: Optional[int] = None,
        claim_id: Optional[str] = None,
        field_name: Optional[str] = None,
    ) -> "DateParseError":
        """Fill in claim context that was not known where the error was raised."""
        if claim_type is not None and self.claim_type is None:
            self.claim_type = claim_type
        if claim_index is not None and self.claim_index is None:
            self.claim_index = claim_index
        if claim_id is not None and self.claim_id is None:
            self.claim_id = claim_id
        if field_name is not None and self.field_name is None:
            self.field_name = field_name
        self.details.update(
            claim_type=self.claim_type,
            claim_index=self.claim_index,
            claim_id=self.claim_id,
            field_name=self.field_name,
        )
        return self


class ExtractionError(ClaimsTimelineError):
    """Catch-all for failures while transforming structurally valid records."""

    kind = ErrorKind.EXTRACTION


class ConfigurationError(ClaimsTimelineError):
    """Raised when parser configuration is missing or invalid."""

    kind = ErrorKind.CONFIGURATION
    default_suggestions = (
        "Review your configuration file",
        "Reset configuration to defaults if needed",
        "Check that all required configuration fields are set",
    )


class ExtractionCancelledError(ClaimsTimelineError):
    """Raised when a caller cancels extraction between items."""

    kind = ErrorKind.CANCELLED


class AllStrategiesFailedError(ClaimsTimelineError):
    """Raised by the orchestrator once every strategy has failed."""

    kind = ErrorKind.ALL_STRATEGIES_FAILED

    def __init__(self, attempts: Sequence[Tuple[str, ClaimsTimelineError]]):
        self.attempts = list(attempts)
        self.last_error = self.attempts[-1][1] if self.attempts else None
        names = ", ".join(name for name, _ in self.attempts)
        last_message = self.last_error.message if self.last_error else "Unknown error"
        suggestions: List[str] = []
        for _, error in self.attempts:
            for suggestion in recovery_suggestions(error):
                if suggestion not in suggestions:
                    suggestions.append(suggestion)
        super().__init__(
            f"All parsing strategies failed ({names}). Last error: {last_message}",
            {
                "strategies": [name for name, _ in self.attempts],
                "errors": {name: error.message for name, error in self.attempts},
            },
            suggestions,
        )

    @property
    def terminal_kind(self) -> Optional[ErrorKind]:
        return self.last_error.kind if self.last_error else None


def user_friendly_message(error: BaseException) -> str:
    """Convert an error into a message suitable for end users."""
    if isinstance(error, AllStrategiesFailedError):
        lines = [error.message, ""]
        for name, attempt in error.attempts:
            lines.append(f"• {name}: [{attempt.kind.value}] {attempt.message}")
        return "\n".join(lines)

    if isinstance(error, StructureValidationError):
        message = f"Invalid JSON structure: {error.message}"
        if error.missing_fields:
            message += f"\n\nMissing required fields: {', '.join(error.missing_fields)}"
        if error.suggestions:
            message += "\n\nSuggestions:\n" + "\n".join(f"• {s}" for s in error.suggestions)
        return message

    if isinstance(error, DateParseError):
        message = f"Date parsing error: {error.message}"
        if error.examples:
            message += "\n\nSupported date formats:\n" + "\n".join(
                f"• {fmt} (e.g. {example})" for fmt, example in error.examples.items()
            )
        return message

    if isinstance(error, FileAccessError):
        return f"File access error: {error.message}"

    if isinstance(error, ConfigurationError):
        return f"Configuration error: {error.message}"

    if isinstance(error, JsonSyntaxError):
        return f"Invalid JSON format: {error.message}"

    if isinstance(error, ValidationError):
        return f"Validation error: {error.message}"

    if isinstance(error, ClaimsTimelineError):
        return f"Parsing error: {error.message}"

    return f"Unexpected error: {error}"


def recovery_suggestions(error: BaseException) -> List[str]:
    """Return concrete remediation steps for an error."""
    suggestions: List[str] = []

    if isinstance(error, StructureValidationError):
        suggestions.extend([
            "Verify your JSON file contains medical claims data",
            "Check that at least one of rxTba, rxHistory, or medHistory arrays exists",
            "Ensure the JSON structure matches the expected format",
        ])
    elif isinstance(error, DateParseError):
        suggestions.extend([
            "Check date formats in your JSON file",
            "Ensure dates are in YYYY-MM-DD format or configure a different format",
            f"Supported formats: {', '.join(SUPPORTED_DATE_FORMATS)}",
        ])

    if isinstance(error, ClaimsTimelineError):
        for suggestion in error.recovery_suggestions:
            if suggestion not in suggestions:
                suggestions.append(suggestion)

    return suggestions
