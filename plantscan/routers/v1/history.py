from fastapi import APIRouter, Depends, HTTPException
from typing import List, Literal

from plantscan.dependencies import get_pipeline, get_store
from plantscan.schemas.detection import AppStats, DetectionRecord, HistorySummary
from plantscan.services.pipeline import DetectionPipeline
from plantscan.services.storage import DetectionStore

router = APIRouter()


@router.get("/detections", response_model=List[DetectionRecord])
async def list_detections(
    type: Literal["all", "disease", "pest"] = "all",
    pipeline: DetectionPipeline = Depends(get_pipeline),
):
    """Detection history, most recent first."""
    return await pipeline.get_detection_history(type)


@router.get("/detections/summary", response_model=HistorySummary)
async def detections_summary(pipeline: DetectionPipeline = Depends(get_pipeline)):
    return await pipeline.get_history_summary()


@router.delete("/detections", status_code=204)
async def clear_detections(store: DetectionStore = Depends(get_store)):
    await store.clear_all()


@router.get("/stats", response_model=AppStats)
async def app_stats(pipeline: DetectionPipeline = Depends(get_pipeline)):
    return await pipeline.get_app_stats()


@router.get("/stats/snapshot", response_model=AppStats)
async def saved_stats(store: DetectionStore = Depends(get_store)):
    """Stats as written with the last history update."""
    snapshot = await store.get_saved_stats()
    if snapshot is None:
        raise HTTPException(status_code=404, detail="No stats snapshot saved yet")
    return snapshot
