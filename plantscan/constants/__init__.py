# Constants package
from plantscan.constants.detection import (
    DETECTION_KINDS,
    LOCAL_URI_SCHEMES,
    CONTENT_TYPES,
    DEFAULT_CONTENT_TYPE,
    DISEASE_KEYWORDS,
    DISEASE_CATEGORY_KEYWORDS,
    UNKNOWN_KEY,
    DEFAULT_CROP,
    is_supported_kind,
)
from plantscan.constants.grading import severity_color, confidence_level

__all__ = [
    'DETECTION_KINDS',
    'LOCAL_URI_SCHEMES',
    'CONTENT_TYPES',
    'DEFAULT_CONTENT_TYPE',
    'DISEASE_KEYWORDS',
    'DISEASE_CATEGORY_KEYWORDS',
    'UNKNOWN_KEY',
    'DEFAULT_CROP',
    'is_supported_kind',
    'severity_color',
    'confidence_level',
]
