"""
Local persistence for detections, the stats snapshot and the onboarding flag.

Every public ``DetectionStore`` operation is best effort: storage failures are
logged and treated as no-ops so callers keep their in-memory results.
"""
import asyncio
import json
import logging
from typing import Dict, Iterable, List, Optional, Protocol

from pydantic import ValidationError
from redis import asyncio as aioredis
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncEngine

from plantscan.database import build_session_factory, init_db
from plantscan.models.kv import KeyValueEntry
from plantscan.schemas.detection import AppStats, DetectionRecord
from plantscan.services.stats import compute_stats

logger = logging.getLogger(__name__)

DETECTIONS_KEY = "plant_detections"
STATS_KEY = "app_stats"
ONBOARDING_KEY = "onboarding_completed"


class KeyValueBackend(Protocol):
    async def get(self, key: str) -> Optional[str]: ...

    async def set_many(self, items: Dict[str, str]) -> None:
        """Write all items in one atomic operation."""
        ...

    async def delete(self, *keys: str) -> None: ...


class SqlKeyValueBackend:
    """Key-value slots stored in a single SQL table (SQLite by default)."""

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self.SessionLocal = build_session_factory(engine)

    async def init_db(self):
        await init_db(self.engine)

    async def get(self, key: str) -> Optional[str]:
        async with self.SessionLocal() as session:
            result = await session.execute(select(KeyValueEntry.value).where(KeyValueEntry.key == key))
            return result.scalar_one_or_none()

    async def set_many(self, items: Dict[str, str]) -> None:
        async with self.SessionLocal() as session:
            async with session.begin():
                for key, value in items.items():
                    await session.merge(KeyValueEntry(key=key, value=value))

    async def delete(self, *keys: str) -> None:
        async with self.SessionLocal() as session:
            async with session.begin():
                await session.execute(delete(KeyValueEntry).where(KeyValueEntry.key.in_(keys)))

    async def close(self):
        await self.engine.dispose()


class RedisKeyValueBackend:
    def __init__(self, redis: aioredis.Redis):
        self.redis = redis

    @classmethod
    async def connect(cls, url: str) -> "RedisKeyValueBackend":
        """Establish Redis connection"""
        redis = await aioredis.from_url(
            url,
            encoding="utf-8",
            decode_responses=True,
            socket_timeout=5,
            socket_connect_timeout=5
        )
        await redis.ping()
        logger.info(f"✅ Redis connected: {url}")
        return cls(redis)

    async def get(self, key: str) -> Optional[str]:
        return await self.redis.get(key)

    async def set_many(self, items: Dict[str, str]) -> None:
        # MSET is atomic
        await self.redis.mset(items)

    async def delete(self, *keys: str) -> None:
        await self.redis.delete(*keys)

    async def close(self):
        await self.redis.aclose()
        logger.info("Redis connection closed")


def _dump_records(records: Iterable[DetectionRecord]) -> str:
    return json.dumps([record.model_dump(mode="json") for record in records])


class DetectionStore:
    """
    Detection history, capped at ``max_detections`` entries, most recent first.

    The list update and the stats snapshot are written together under a lock
    so concurrent saves cannot lose records.
    """

    def __init__(self, backend: KeyValueBackend, max_detections: int = 100):
        self.backend = backend
        self.max_detections = max_detections
        self._lock = asyncio.Lock()

    async def save_detection(self, detection: DetectionRecord):
        try:
            async with self._lock:
                existing = await self._load_detections()
                trimmed = [detection, *existing][:self.max_detections]
                stats = compute_stats(trimmed)
                await self.backend.set_many({
                    DETECTIONS_KEY: _dump_records(trimmed),
                    STATS_KEY: stats.model_dump_json(),
                })
        except Exception as e:
            logger.error(f"Error saving detection: {e}")

    async def get_detections(self) -> List[DetectionRecord]:
        try:
            return await self._load_detections()
        except Exception as e:
            logger.error(f"Error getting detections: {e}")
            return []

    async def get_stats(self) -> AppStats:
        """Stats derived from the current detection list."""
        return compute_stats(await self.get_detections())

    async def get_saved_stats(self) -> Optional[AppStats]:
        """The snapshot written alongside the last detection list update."""
        try:
            raw = await self.backend.get(STATS_KEY)
            return AppStats.model_validate_json(raw) if raw else None
        except Exception as e:
            logger.error(f"Error reading stats snapshot: {e}")
            return None

    async def clear_all(self):
        try:
            async with self._lock:
                await self.backend.delete(DETECTIONS_KEY, STATS_KEY)
                await self.backend.set_many({STATS_KEY: compute_stats([]).model_dump_json()})
        except Exception as e:
            logger.error(f"Error clearing data: {e}")

    async def is_onboarding_completed(self) -> bool:
        try:
            return await self.backend.get(ONBOARDING_KEY) == "true"
        except Exception as e:
            logger.error(f"Error checking onboarding status: {e}")
            return False

    async def set_onboarding_completed(self):
        try:
            await self.backend.set_many({ONBOARDING_KEY: "true"})
        except Exception as e:
            logger.error(f"Error setting onboarding completed: {e}")

    async def _load_detections(self) -> List[DetectionRecord]:
        raw = await self.backend.get(DETECTIONS_KEY)
        if not raw:
            return []

        try:
            items = json.loads(raw)
        except ValueError as e:
            logger.warning(f"Stored detections are not valid JSON, ignoring: {e}")
            return []
        if not isinstance(items, list):
            logger.warning("Stored detections are not a list, ignoring")
            return []

        records = []
        for item in items:
            try:
                records.append(DetectionRecord.model_validate(item))
            except ValidationError as e:
                logger.warning(f"Skipping undecodable detection record: {e}")
        return records
