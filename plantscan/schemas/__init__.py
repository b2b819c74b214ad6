from plantscan.schemas.knowledge import Treatment, TreatmentSet, KnowledgeEntry, NamedKnowledgeEntry
from plantscan.schemas.detection import (
    DetectionKind,
    Prediction,
    DiagnosisResult,
    DetectionRecord,
    AppStats,
    HistorySummary,
    ScanRequest,
    OnboardingStatus,
)

__all__ = [
    "Treatment",
    "TreatmentSet",
    "KnowledgeEntry",
    "NamedKnowledgeEntry",
    "DetectionKind",
    "Prediction",
    "DiagnosisResult",
    "DetectionRecord",
    "AppStats",
    "HistorySummary",
    "ScanRequest",
    "OnboardingStatus",
]
