"""
Severity and confidence grading used by history and result views.
"""
import math

SEVERITY_COLORS = {
    'high': '#ef4444',
    'severe': '#ef4444',
    'medium': '#f59e0b',
    'moderate': '#f59e0b',
    'low': '#10b981',
    'mild': '#10b981',
}
UNKNOWN_SEVERITY_COLOR = '#6b7280'

# (minimum confidence, label), checked top-down
CONFIDENCE_LEVELS = (
    (90, 'Very High'),
    (80, 'High'),
    (70, 'Good'),
    (60, 'Fair'),
)


def severity_color(severity) -> str:
    """Map a free-form severity string to its display colour"""
    if not isinstance(severity, str):
        return UNKNOWN_SEVERITY_COLOR
    return SEVERITY_COLORS.get(severity.lower(), UNKNOWN_SEVERITY_COLOR)


def confidence_level(confidence) -> str:
    if isinstance(confidence, bool) or not isinstance(confidence, (int, float)) or math.isnan(confidence):
        return 'Unknown'
    for threshold, label in CONFIDENCE_LEVELS:
        if confidence >= threshold:
            return label
    return 'Low'
