"""
Detection constants shared by the image service, resolver and pipeline.
"""

# Supported detection kinds
DETECTION_KINDS = ('disease', 'pest')

# Local resource schemes accepted for image URIs
LOCAL_URI_SCHEMES = ('file://', 'content://', 'ph://')

# File extension -> request content type
CONTENT_TYPES = {
    'jpg': 'image/jpeg',
    'jpeg': 'image/jpeg',
    'png': 'image/png',
    'webp': 'image/webp',
}
DEFAULT_CONTENT_TYPE = 'image/jpeg'

# Keywords used for partial knowledge base matches, in priority order
DISEASE_KEYWORDS = ('blight', 'spot', 'rot', 'mildew', 'rust', 'wilt', 'canker')

# Keywords the knowledge browser uses to tell diseases from pests
DISEASE_CATEGORY_KEYWORDS = DISEASE_KEYWORDS + ('scab', 'mosaic')

# Reserved knowledge base key used as a blanket fallback entry
UNKNOWN_KEY = 'unknown'

DEFAULT_CROP = 'Unknown crop'


def is_supported_kind(kind: str) -> bool:
    """Check if a detection kind is supported"""
    return kind in DETECTION_KINDS
