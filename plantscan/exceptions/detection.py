"""
Error taxonomy for the detection pipeline.

Every failure inside the pipeline is a ``DetectionError`` subclass carrying a
``DetectionErrorCode`` and an ``ErrorCategory``. At the pipeline boundary they
are rewritten into an ``AnalysisError`` whose message is one of a few
user-facing sentences.
"""
from enum import Enum

from plantscan.exceptions.base import BaseErrorCode


class ErrorCategory(str, Enum):
    INPUT_VALIDATION = "input_validation"
    DATA_INTEGRITY = "data_integrity"
    TRANSIENT = "transient"
    PERMANENT = "permanent"


class DetectionErrorCode(BaseErrorCode):
    ANALYSIS_FAILED = (2000, "{message}", 502)
    INVALID_INPUT = (2001, "{message}", 422)
    FILE_UNREADABLE = (2002, "{message}", 422)
    IMAGE_INTEGRITY = (2003, "{message}", 422)
    NETWORK_ERROR = (2004, "{message}", 502)
    TIMEOUT = (2005, "{message}", 504)
    AUTH_ERROR = (2006, "{message}", 502)
    RATE_LIMITED = (2007, "{message}", 429)
    SERVICE_UNAVAILABLE = (2008, "{message}", 502)
    API_ERROR = (2009, "{message}", 502)
    UNEXPECTED_FORMAT = (2010, "{message}", 502)
    NO_PREDICTIONS = (2011, "{message}", 502)


# User-facing sentences, selected by error kind
NETWORK_MESSAGE = "Unable to connect to the analysis service. Please check your internet connection and try again."
TIMEOUT_MESSAGE = "The analysis is taking too long. Please try again with a smaller image or check your connection."
AUTH_MESSAGE = "Authentication failed. Please check the API configuration."
RATE_LIMIT_MESSAGE = "Too many requests. Please wait a moment before trying again."
GENERIC_MESSAGE = "Image analysis failed. Please ensure the image is clear and shows plant issues, then try again."


class DetectionError(Exception):
    """Base exception for detection pipeline errors"""
    code: DetectionErrorCode = DetectionErrorCode.ANALYSIS_FAILED
    category: ErrorCategory = ErrorCategory.PERMANENT
    user_message: str = GENERIC_MESSAGE
    default_message: str = "Image analysis failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidInputError(DetectionError):
    """Bad URI, unsupported detection kind or missing file"""
    code = DetectionErrorCode.INVALID_INPUT
    category = ErrorCategory.INPUT_VALIDATION
    default_message = "Invalid image URI provided"


class FileUnreadableError(DetectionError):
    code = DetectionErrorCode.FILE_UNREADABLE
    category = ErrorCategory.INPUT_VALIDATION
    default_message = "Failed to read image file"


class ImageIntegrityError(DetectionError):
    """Image buffer is too small (likely corrupted) or too large"""
    code = DetectionErrorCode.IMAGE_INTEGRITY
    category = ErrorCategory.DATA_INTEGRITY
    default_message = "Invalid image data"


class InferenceNetworkError(DetectionError):
    code = DetectionErrorCode.NETWORK_ERROR
    user_message = NETWORK_MESSAGE
    default_message = "Network error. Please check your internet connection and try again."


class InferenceTimeoutError(DetectionError):
    code = DetectionErrorCode.TIMEOUT
    category = ErrorCategory.TRANSIENT
    user_message = TIMEOUT_MESSAGE
    default_message = "Request timeout. Please check your internet connection and try again."


class AuthenticationError(DetectionError):
    code = DetectionErrorCode.AUTH_ERROR
    user_message = AUTH_MESSAGE
    default_message = "Invalid inference API key. Please check your token."


class RateLimitedError(DetectionError):
    code = DetectionErrorCode.RATE_LIMITED
    user_message = RATE_LIMIT_MESSAGE
    default_message = "Rate limit exceeded. Please wait before making another request."


class ServiceUnavailableError(DetectionError):
    code = DetectionErrorCode.SERVICE_UNAVAILABLE
    default_message = "Service temporarily unavailable"


class InferenceApiError(DetectionError):
    """Any other HTTP error status returned by the inference endpoint"""
    code = DetectionErrorCode.API_ERROR
    default_message = "API request failed"


class UnexpectedFormatError(DetectionError):
    code = DetectionErrorCode.UNEXPECTED_FORMAT
    category = ErrorCategory.DATA_INTEGRITY
    default_message = "Unexpected API response format"


class NoPredictionsError(DetectionError):
    code = DetectionErrorCode.NO_PREDICTIONS
    category = ErrorCategory.DATA_INTEGRITY
    default_message = (
        "No predictions returned from the AI model. The image may not be clear enough "
        "or may not contain recognizable plant issues."
    )


class AnalysisError(Exception):
    """
    The only error raised out of ``DetectionPipeline.analyze_image``.

    ``str(error)`` is safe to show to the end user. ``code`` and ``category``
    describe the underlying failure for status mapping.
    """

    def __init__(
        self,
        message: str,
        code: DetectionErrorCode = DetectionErrorCode.ANALYSIS_FAILED,
        category: ErrorCategory = ErrorCategory.PERMANENT,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category

    @classmethod
    def from_exception(cls, exc: BaseException) -> "AnalysisError":
        if isinstance(exc, DetectionError):
            return cls(exc.user_message, code=exc.code, category=exc.category)
        return cls(GENERIC_MESSAGE)
