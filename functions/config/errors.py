"""RoofReport error handling.

Custom exceptions and error codes for the report pipeline.
"""

from typing import Optional, Dict, Any


# Error Codes
class ErrorCode:
    """Error code constants."""

    # Validation Errors (1xxx)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    MISSING_FIELD = "MISSING_FIELD"
    INVALID_FIELD = "INVALID_FIELD"

    # Estimator Errors (2xxx)
    UNKNOWN_PROJECT_TYPE = "UNKNOWN_PROJECT_TYPE"
    UNKNOWN_MATERIAL_TIER = "UNKNOWN_MATERIAL_TIER"
    UNKNOWN_TIMELINE = "UNKNOWN_TIMELINE"

    # Assembler Errors (3xxx)
    UNKNOWN_ROLE = "UNKNOWN_ROLE"
    PAYLOAD_FALLBACK = "PAYLOAD_FALLBACK"

    # Renderer Errors (4xxx)
    RENDER_FAILED = "RENDER_FAILED"
    RENDER_INVALID_STATE = "RENDER_INVALID_STATE"
    IMAGE_UNAVAILABLE = "IMAGE_UNAVAILABLE"

    # Firestore Errors (5xxx)
    FIRESTORE_ERROR = "FIRESTORE_ERROR"
    FIRESTORE_WRITE_FAILED = "FIRESTORE_WRITE_FAILED"
    REPORT_NOT_FOUND = "REPORT_NOT_FOUND"
    NOT_AUTHENTICATED = "NOT_AUTHENTICATED"
    NOT_AUTHORIZED = "NOT_AUTHORIZED"

    # Retrieval Errors (6xxx)
    PAYLOAD_MISSING = "PAYLOAD_MISSING"
    DECODE_FAILED = "DECODE_FAILED"

    # LLM Errors (7xxx)
    LLM_ERROR = "LLM_ERROR"
    LLM_RATE_LIMIT = "LLM_RATE_LIMIT"
    LLM_CONTEXT_TOO_LONG = "LLM_CONTEXT_TOO_LONG"

    # External Service Errors (8xxx)
    EXTERNAL_API_ERROR = "EXTERNAL_API_ERROR"
    PRICING_DATA_ERROR = "PRICING_DATA_ERROR"


class RoofReportError(Exception):
    """Base exception for RoofReport errors.

    Provides structured error information for API responses.

    Attributes:
        code: Error code from ErrorCode constants
        message: Human-readable error message
        details: Additional error context
    """

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None
    ):
        """Initialize RoofReportError.

        Args:
            code: Error code from ErrorCode constants
            message: Human-readable error message
            details: Additional error context
        """
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for API response.

        Returns:
            Dictionary with code, message, and details.
        """
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details
        }

    def __repr__(self) -> str:
        return f"RoofReportError(code={self.code!r}, message={self.message!r})"


class ValidationError(RoofReportError):
    """Validation-specific error."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[Dict] = None,
        code: str = ErrorCode.VALIDATION_ERROR
    ):
        super().__init__(
            code=code,
            message=message,
            details={**(details or {}), "field": field} if field else details
        )
        self.field = field


class RenderError(RoofReportError):
    """Renderer-specific error."""

    def __init__(self, code: str, message: str, details: Optional[Dict] = None):
        super().__init__(code=code, message=message, details=details)


class StorageError(RoofReportError):
    """Report storage error."""

    def __init__(
        self,
        code: str,
        message: str,
        document_id: Optional[str] = None,
        details: Optional[Dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            details={**(details or {}), "document_id": document_id} if document_id else details
        )
        self.document_id = document_id
