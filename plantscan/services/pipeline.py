import logging
import math
import time
import uuid
from typing import Any, List, Optional

from plantscan.constants import DEFAULT_CROP, is_supported_kind
from plantscan.exceptions import AnalysisError, InvalidInputError, UnexpectedFormatError
from plantscan.schemas.detection import (
    AppStats,
    DetectionRecord,
    DiagnosisResult,
    HistorySummary,
    Prediction,
)
from plantscan.services.image import ImageService
from plantscan.services.inference import InferenceClient
from plantscan.services.resolver import LabelResolver
from plantscan.services.stats import filter_by_kind, summarize_history
from plantscan.services.storage import DetectionStore

logger = logging.getLogger(__name__)


def top_prediction(predictions: List[Any]) -> Prediction:
    """First prediction, with an unusable label or score replaced by defaults."""
    top = predictions[0]
    if not isinstance(top, dict):
        raise UnexpectedFormatError("Invalid prediction format received from API")

    label = top.get("label")
    if not isinstance(label, str) or not label.strip():
        label = "unknown"

    score = top.get("score")
    if isinstance(score, bool) or not isinstance(score, (int, float)) or not math.isfinite(score):
        score = 0.0

    return Prediction(label=label, score=score)


def confidence_from_score(score: float) -> int:
    # half-up, not banker's rounding
    return math.floor(max(0.0, min(100.0, score * 100)) + 0.5)


class DetectionPipeline:
    """
    image -> inference -> knowledge lookup -> persisted DetectionRecord
    """

    def __init__(
        self,
        image_service: ImageService,
        inference_client: InferenceClient,
        resolver: LabelResolver,
        store: DetectionStore,
    ):
        self.image_service = image_service
        self.inference_client = inference_client
        self.resolver = resolver
        self.store = store

    async def analyze_image(self, image_uri: str, kind: str, crop: Optional[str] = None) -> DetectionRecord:
        """
        Run one analysis and persist it.

        Raises:
            AnalysisError: with a message suitable for the end user. Details
                of the underlying failure are only logged.
        """
        try:
            record = await self._analyze(image_uri, kind, crop)
        except Exception as e:
            logger.error(f"DetectionPipeline.analyze_image failed: {e!r}", exc_info=True)
            raise AnalysisError.from_exception(e) from e

        await self.store.save_detection(record)
        return record

    async def _analyze(self, image_uri: str, kind: str, crop: Optional[str]) -> DetectionRecord:
        if not isinstance(kind, str) or not is_supported_kind(kind):
            raise InvalidInputError("Type must be either 'pest' or 'disease'")

        image = self.image_service.load(image_uri)
        predictions = await self.inference_client.classify(image.data, kind, image.content_type)

        prediction = top_prediction(predictions)
        logger.info(f"Top prediction: {prediction.label} ({prediction.score:.3f})")

        name, entry = self.resolver.resolve(prediction.label, kind)
        confidence = confidence_from_score(prediction.score)

        now_ms = int(time.time() * 1000)
        record = DetectionRecord(
            id=str(uuid.uuid4()),
            timestamp=now_ms,
            type=kind,
            crop=crop or DEFAULT_CROP,
            image=image_uri,
            result=DiagnosisResult(
                name=name or "unknown",
                scientific_name=entry.scientific_name or f"Unknown {kind}",
                severity=entry.severity or "Low",
                confidence=confidence,
                description=entry.description or f"This appears to be an unidentified {kind}.",
                symptoms=entry.symptoms,
                treatments=entry.treatments,
            ),
        )
        logger.info(f"Analysis complete: {record.result.name} ({confidence}%, severity {record.result.severity})")
        return record

    async def get_detection_history(self, kind: Optional[str] = None) -> List[DetectionRecord]:
        return filter_by_kind(await self.store.get_detections(), kind)

    async def get_history_summary(self) -> HistorySummary:
        return summarize_history(await self.store.get_detections())

    async def get_app_stats(self) -> AppStats:
        return await self.store.get_stats()
