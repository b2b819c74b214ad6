from fastapi import FastAPI
from redis.exceptions import RedisError
import logging

from plantscan.config import init_settings
from plantscan.database import build_engine
from plantscan.exceptions.handlers import register_exception_handlers
from plantscan.routers.v1.history import router as history_router
from plantscan.routers.v1.knowledge import router as knowledge_router
from plantscan.routers.v1.onboarding import router as onboarding_router
from plantscan.routers.v1.scan import router as scan_router
from plantscan.services.image import ImageService
from plantscan.services.inference import InferenceClient
from plantscan.services.knowledge import KnowledgeBase
from plantscan.services.pipeline import DetectionPipeline
from plantscan.services.resolver import LabelResolver
from plantscan.services.storage import DetectionStore, RedisKeyValueBackend, SqlKeyValueBackend

logger = logging.getLogger(__name__)

settings = init_settings()

app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url=f"{settings.API_V1_STR}/openapi.json"
)
register_exception_handlers(app)


async def build_backend():
    if settings.STORAGE_BACKEND == "redis":
        try:
            return await RedisKeyValueBackend.connect(settings.REDIS_URL)
        except (RedisError, OSError) as e:
            logger.error(f"❌ Redis connection failed: {e}")
            logger.warning("⚠️  Falling back to local SQL storage")

    backend = SqlKeyValueBackend(build_engine(settings.DATABASE_URL))
    await backend.init_db()
    logger.info(f"✅ Local storage ready: {settings.DATABASE_URL}")
    return backend


@app.on_event("startup")
async def startup():
    knowledge_base = KnowledgeBase.from_json(settings.KNOWLEDGE_BASE_PATH)
    backend = await build_backend()
    store = DetectionStore(backend, max_detections=settings.MAX_STORED_DETECTIONS)

    app.state.knowledge_base = knowledge_base
    app.state.backend = backend
    app.state.store = store
    app.state.upload_dir = settings.UPLOAD_DIR
    app.state.pipeline = DetectionPipeline(
        image_service=ImageService(
            media_root=settings.MEDIA_ROOT,
            min_bytes=settings.MIN_IMAGE_BYTES,
            max_bytes=settings.MAX_IMAGE_BYTES,
        ),
        inference_client=InferenceClient(
            api_url=settings.INFERENCE_API_URL,
            api_token=settings.INFERENCE_API_TOKEN,
            disease_model=settings.DISEASE_MODEL,
            pest_model=settings.PEST_MODEL,
            timeout=settings.REQUEST_TIMEOUT_SECONDS,
            max_attempts=settings.MAX_ATTEMPTS,
            max_response_bytes=settings.MAX_RESPONSE_BYTES,
        ),
        resolver=LabelResolver(knowledge_base),
        store=store,
    )


@app.on_event("shutdown")
async def shutdown():
    backend = getattr(app.state, "backend", None)
    if backend is not None:
        await backend.close()


app.include_router(scan_router, prefix=settings.API_V1_STR, tags=["scan"])
app.include_router(history_router, prefix=settings.API_V1_STR, tags=["history"])
app.include_router(knowledge_router, prefix=settings.API_V1_STR, tags=["knowledge"])
app.include_router(onboarding_router, prefix=settings.API_V1_STR, tags=["onboarding"])


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
