from pydantic import BaseModel, ConfigDict, Field, computed_field
from typing import List, Literal, Optional

from plantscan.constants import grading
from plantscan.schemas.knowledge import TreatmentSet

DetectionKind = Literal["disease", "pest"]


class Prediction(BaseModel):
    """One entry of the classifier response."""
    label: str
    score: float


class DiagnosisResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    scientific_name: str
    severity: str
    confidence: int = Field(ge=0, le=100)
    description: str
    symptoms: List[str] = []
    treatments: TreatmentSet = TreatmentSet()

    @computed_field
    @property
    def severity_color(self) -> str:
        return grading.severity_color(self.severity)

    @computed_field
    @property
    def confidence_level(self) -> str:
        return grading.confidence_level(self.confidence)


class DetectionRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    timestamp: int = Field(description="Creation time in milliseconds since epoch")
    type: DetectionKind
    crop: str
    image: str
    result: DiagnosisResult


class AppStats(BaseModel):
    total_scans: int = 0
    healthy_plants: int = 0
    issues_found: int = 0
    successful_treatments: int = Field(0, description="Placeholder estimate, 70% of issues found")
    recent_scans: List[DetectionRecord] = []


class HistorySummary(BaseModel):
    diseases: int = 0
    pests: int = 0
    high_severity: int = 0


# --- API Requests / Responses ---

class ScanRequest(BaseModel):
    image_uri: str
    type: DetectionKind
    crop: Optional[str] = None


class OnboardingStatus(BaseModel):
    completed: bool
