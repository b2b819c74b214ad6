# Custom exceptions package
from plantscan.exceptions.base import BaseErrorCode, EnumException
from plantscan.exceptions.detection import (
    ErrorCategory,
    DetectionErrorCode,
    DetectionError,
    InvalidInputError,
    FileUnreadableError,
    ImageIntegrityError,
    InferenceNetworkError,
    InferenceTimeoutError,
    AuthenticationError,
    RateLimitedError,
    ServiceUnavailableError,
    InferenceApiError,
    UnexpectedFormatError,
    NoPredictionsError,
    AnalysisError,
)

__all__ = [
    'BaseErrorCode',
    'EnumException',
    'ErrorCategory',
    'DetectionErrorCode',
    'DetectionError',
    'InvalidInputError',
    'FileUnreadableError',
    'ImageIntegrityError',
    'InferenceNetworkError',
    'InferenceTimeoutError',
    'AuthenticationError',
    'RateLimitedError',
    'ServiceUnavailableError',
    'InferenceApiError',
    'UnexpectedFormatError',
    'NoPredictionsError',
    'AnalysisError',
]
