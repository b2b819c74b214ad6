from fastapi import APIRouter, UploadFile, File, Form, Depends
from pathlib import Path
from typing import Optional
import logging
import uuid

from plantscan.constants import CONTENT_TYPES
from plantscan.dependencies import get_pipeline, get_upload_dir
from plantscan.exceptions import AnalysisError
from plantscan.schemas.detection import DetectionKind, DetectionRecord, ScanRequest
from plantscan.services.image import content_type_for
from plantscan.services.pipeline import DetectionPipeline

logger = logging.getLogger(__name__)

router = APIRouter()

_EXTENSIONS = {"image/jpeg": "jpg", "image/png": "png", "image/webp": "webp"}


def upload_extension(file: UploadFile) -> str:
    """Extension for the stored copy: a known image extension from the
    client filename, else one derived from the content type."""
    filename = file.filename or ""
    if "." in filename:
        extension = filename.rsplit(".", 1)[-1].lower()
        if extension in CONTENT_TYPES:
            return extension
    return _EXTENSIONS.get(file.content_type or "", "jpg")


@router.post("/scan", response_model=DetectionRecord)
async def scan_image(body: ScanRequest, pipeline: DetectionPipeline = Depends(get_pipeline)):
    """
    Analyze an image already stored on the device (file://, content:// or ph://).
    """
    return await pipeline.analyze_image(body.image_uri, body.type, body.crop)


@router.post("/scan/upload", response_model=DetectionRecord)
async def scan_upload(
    file: UploadFile = File(...),
    type: DetectionKind = Form(..., description="disease or pest"),
    crop: Optional[str] = Form(None),
    pipeline: DetectionPipeline = Depends(get_pipeline),
    upload_dir: Path = Depends(get_upload_dir),
):
    """
    Workflow:
    1. Save the uploaded image under the upload directory.
    2. Analyze it through the same pipeline as /scan using its file:// URI.
    3. Keep the file when the scan succeeds (the detection record points at
       it), delete it when the scan fails.
    """
    image_bytes = await file.read()

    upload_dir.mkdir(parents=True, exist_ok=True)
    local_path = (upload_dir / f"{uuid.uuid4()}.{upload_extension(file)}").resolve()
    with open(local_path, "wb") as f:
        f.write(image_bytes)

    image_uri = local_path.as_uri()
    logger.info(f"💾 Saved upload to {local_path} ({content_type_for(image_uri)})")
    try:
        return await pipeline.analyze_image(image_uri, type, crop)
    except AnalysisError:
        local_path.unlink(missing_ok=True)
        raise
