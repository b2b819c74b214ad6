from fastapi import APIRouter, Depends

from plantscan.dependencies import get_store
from plantscan.schemas.detection import OnboardingStatus
from plantscan.services.storage import DetectionStore

router = APIRouter()


@router.get("/onboarding", response_model=OnboardingStatus)
async def onboarding_status(store: DetectionStore = Depends(get_store)):
    return OnboardingStatus(completed=await store.is_onboarding_completed())


@router.post("/onboarding", response_model=OnboardingStatus)
async def complete_onboarding(store: DetectionStore = Depends(get_store)):
    await store.set_onboarding_completed()
    return OnboardingStatus(completed=await store.is_onboarding_completed())
