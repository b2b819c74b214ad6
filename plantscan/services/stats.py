import math
from typing import List, Optional, Sequence

from plantscan.schemas.detection import AppStats, DetectionRecord, HistorySummary

RECENT_SCANS_LIMIT = 5
# Placeholder: there is no treatment outcome data, so 70% of issues are
# assumed to have been treated successfully.
TREATMENT_SUCCESS_RATE = 0.7


def is_issue(detection: DetectionRecord) -> bool:
    return detection.result.severity.lower() != "low" or detection.result.name != "healthy"


def is_healthy(detection: DetectionRecord) -> bool:
    # Not exclusive with is_issue: a record can count towards both totals.
    return detection.result.severity.lower() == "low" or detection.result.confidence > 80


def compute_stats(detections: Sequence[DetectionRecord]) -> AppStats:
    issues_found = sum(1 for d in detections if is_issue(d))
    return AppStats(
        total_scans=len(detections),
        healthy_plants=sum(1 for d in detections if is_healthy(d)),
        issues_found=issues_found,
        successful_treatments=math.floor(issues_found * TREATMENT_SUCCESS_RATE),
        recent_scans=list(detections[:RECENT_SCANS_LIMIT]),
    )


def filter_by_kind(detections: Sequence[DetectionRecord], kind: Optional[str] = None) -> List[DetectionRecord]:
    if not kind or kind == "all":
        return list(detections)
    return [d for d in detections if d.type == kind]


def summarize_history(detections: Sequence[DetectionRecord]) -> HistorySummary:
    return HistorySummary(
        diseases=sum(1 for d in detections if d.type == "disease"),
        pests=sum(1 for d in detections if d.type == "pest"),
        high_severity=sum(1 for d in detections if d.result.severity.lower() == "high"),
    )
