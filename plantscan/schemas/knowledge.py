from pydantic import BaseModel, ConfigDict, field_validator
from typing import List, Any


def _as_list(value: Any) -> list:
    return value if isinstance(value, list) else []


class Treatment(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = ""
    dosage: str = ""
    frequency: str = ""
    safety: str = ""

    @field_validator("name", "dosage", "frequency", "safety", mode="before")
    @classmethod
    def _none_to_empty(cls, v):
        return "" if v is None else v


class TreatmentSet(BaseModel):
    model_config = ConfigDict(frozen=True)

    organic: List[Treatment] = []
    chemical: List[Treatment] = []
    preventive: List[str] = []

    @field_validator("organic", "chemical", mode="before")
    @classmethod
    def _coerce_treatments(cls, v):
        # Malformed items are dropped instead of failing the whole entry
        return [item for item in _as_list(v) if isinstance(item, (dict, Treatment))]

    @field_validator("preventive", mode="before")
    @classmethod
    def _coerce_preventive(cls, v):
        return [item for item in _as_list(v) if isinstance(item, str)]

    @classmethod
    def coerce(cls, value: Any) -> "TreatmentSet":
        if isinstance(value, TreatmentSet):
            return value
        return cls.model_validate(value if isinstance(value, dict) else {})


class KnowledgeEntry(BaseModel):
    """A knowledge base record describing one disease or pest."""
    model_config = ConfigDict(frozen=True)

    scientific_name: str = ""
    severity: str = ""
    description: str = ""
    symptoms: List[str] = []
    treatments: TreatmentSet = TreatmentSet()

    @field_validator("scientific_name", "severity", "description", mode="before")
    @classmethod
    def _none_to_empty(cls, v):
        return "" if v is None else v

    @field_validator("symptoms", mode="before")
    @classmethod
    def _coerce_symptoms(cls, v):
        return [item for item in _as_list(v) if isinstance(item, str)]

    @field_validator("treatments", mode="before")
    @classmethod
    def _coerce_treatments(cls, v):
        return TreatmentSet.coerce(v)


class NamedKnowledgeEntry(KnowledgeEntry):
    name: str
