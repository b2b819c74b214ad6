from typing import List, Optional
from pathlib import Path
from pydantic_settings import BaseSettings
from pydantic import field_validator, ValidationError
import logging
import sys

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

PACKAGE_DIR = Path(__file__).resolve().parent
DEFAULT_KNOWLEDGE_BASE_PATH = PACKAGE_DIR / "data" / "detection_data.json"


class Settings(BaseSettings):
    """
    Application Settings

    Required Environment Variables:
    - INFERENCE_API_TOKEN

    Optional:
    - STORAGE_BACKEND (sqlite | redis), DATABASE_URL, REDIS_URL
    - MEDIA_ROOT, UPLOAD_DIR, KNOWLEDGE_BASE_PATH
    """

    PROJECT_NAME: str = "PlantScan Detection Service"
    API_V1_STR: str = "/api/v1"

    # Inference API Configuration
    INFERENCE_API_URL: str = "https://api-inference.huggingface.co"
    INFERENCE_API_TOKEN: str
    DISEASE_MODEL: str = "linkanjarad/mobilenet_v2_1.0_224-plant-disease-identification"
    PEST_MODEL: str = "keremberke/yolov8n-plant-pest-detection"
    REQUEST_TIMEOUT_SECONDS: float = 45.0
    MAX_ATTEMPTS: int = 3

    # Image limits
    MIN_IMAGE_BYTES: int = 1024
    MAX_IMAGE_BYTES: int = 10 * 1024 * 1024
    MAX_RESPONSE_BYTES: int = 50 * 1024 * 1024

    # Local files
    KNOWLEDGE_BASE_PATH: Path = DEFAULT_KNOWLEDGE_BASE_PATH
    MEDIA_ROOT: Path = Path("media")
    UPLOAD_DIR: Path = Path("media/uploads")

    # Persistence Configuration
    STORAGE_BACKEND: str = "sqlite"
    DATABASE_URL: str = "sqlite+aiosqlite:///./plantscan.db"
    REDIS_URL: str = "redis://localhost:6379"
    MAX_STORED_DETECTIONS: int = 100

    # Application Configuration
    ENV_MODE: str = "dev"

    @field_validator('INFERENCE_API_TOKEN')
    @classmethod
    def validate_credentials(cls, v: str) -> str:
        """Ensure credentials are not empty"""
        if not v or v.strip() == '':
            raise ValueError("Credential cannot be empty")
        return v

    @field_validator('STORAGE_BACKEND')
    @classmethod
    def validate_storage_backend(cls, v: str) -> str:
        v = v.lower().strip()
        if v not in ("sqlite", "redis"):
            raise ValueError("STORAGE_BACKEND must be 'sqlite' or 'redis'")
        return v

    class Config:
        env_file = ".env"
        env_file_encoding = 'utf-8'
        extra = "ignore"
        case_sensitive = True


def required_settings() -> List[str]:
    return [name for name, field in Settings.model_fields.items() if field.is_required()]


def get_settings() -> Settings:
    """
    Load settings from the environment.

    Every missing or invalid variable is logged before the process exits.
    """
    try:
        settings = Settings()
    except ValidationError as e:
        missing = [str(err['loc'][0]) for err in e.errors() if err['type'] == 'missing' and err['loc']]
        invalid = [err for err in e.errors() if err['type'] != 'missing']

        logger.error("❌ PlantScan configuration is not usable")
        for name in missing:
            logger.error(f"  ❌ {name}: not set")
        for err in invalid:
            name = err['loc'][0] if err['loc'] else "<settings>"
            logger.error(f"  ❌ {name}: {err['msg']} ({err['type']})")
        logger.error(f"Required variables: {', '.join(required_settings())}")
        logger.error("Set them in the environment or a .env file (see .env.example)")
        sys.exit(1)

    logger.info(
        f"✅ Settings loaded ({settings.ENV_MODE}): inference={settings.INFERENCE_API_URL}, "
        f"storage={settings.STORAGE_BACKEND}, knowledge={settings.KNOWLEDGE_BASE_PATH}"
    )
    return settings


_settings: Optional[Settings] = None


def init_settings() -> Settings:
    """Load settings once per process and reuse them"""
    global _settings
    if _settings is None:
        _settings = get_settings()
    return _settings
