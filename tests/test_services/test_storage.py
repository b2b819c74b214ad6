import json
import tempfile
import unittest
from pathlib import Path
from unittest.mock import AsyncMock

from plantscan.database import build_engine
from plantscan.schemas.detection import AppStats, DetectionRecord, DiagnosisResult
from plantscan.services.storage import (
    DETECTIONS_KEY,
    ONBOARDING_KEY,
    STATS_KEY,
    DetectionStore,
    RedisKeyValueBackend,
    SqlKeyValueBackend,
)


def make_record(idx: int, severity: str = "Medium", kind: str = "disease") -> DetectionRecord:
    return DetectionRecord(
        id=f"det-{idx}",
        timestamp=1_700_000_000_000 + idx,
        type=kind,
        crop="Tomato",
        image=f"file:///tmp/{idx}.jpg",
        result=DiagnosisResult(
            name="early blight",
            scientific_name="Alternaria solani",
            severity=severity,
            confidence=88,
            description="Fungal disease",
            symptoms=["Dark spots"],
        ),
    )


class TestDetectionStore(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        db_path = Path(self._tmp.name) / "kv.db"
        self.backend = SqlKeyValueBackend(build_engine(f"sqlite+aiosqlite:///{db_path}"))
        await self.backend.init_db()
        self.store = DetectionStore(self.backend, max_detections=100)

    async def asyncTearDown(self):
        await self.backend.close()
        self._tmp.cleanup()

    async def test_empty_store(self):
        self.assertEqual(await self.store.get_detections(), [])
        self.assertEqual(await self.store.get_stats(), AppStats())
        self.assertIsNone(await self.store.get_saved_stats())

    async def test_save_prepends_and_writes_stats(self):
        await self.store.save_detection(make_record(1))
        await self.store.save_detection(make_record(2, severity="Low"))

        detections = await self.store.get_detections()
        self.assertEqual([d.id for d in detections], ["det-2", "det-1"])
        self.assertEqual(detections[1], make_record(1))

        saved = await self.store.get_saved_stats()
        self.assertEqual(saved.total_scans, 2)
        self.assertEqual(saved.issues_found, 2)
        self.assertEqual([d.id for d in saved.recent_scans], ["det-2", "det-1"])

    async def test_history_is_capped(self):
        for idx in range(105):
            await self.store.save_detection(make_record(idx))

        detections = await self.store.get_detections()
        self.assertEqual(len(detections), 100)
        self.assertEqual(detections[0].id, "det-104")
        self.assertEqual(detections[-1].id, "det-5")
        self.assertEqual((await self.store.get_stats()).total_scans, 100)

    async def test_clear_all(self):
        await self.store.save_detection(make_record(1))
        await self.store.clear_all()

        self.assertEqual(await self.store.get_detections(), [])
        self.assertEqual(await self.store.get_saved_stats(), AppStats())

    async def test_onboarding_flag(self):
        self.assertFalse(await self.store.is_onboarding_completed())
        await self.store.set_onboarding_completed()
        self.assertTrue(await self.store.is_onboarding_completed())

    async def test_clear_all_keeps_onboarding(self):
        await self.store.set_onboarding_completed()
        await self.store.clear_all()
        self.assertTrue(await self.store.is_onboarding_completed())

    async def test_undecodable_records_are_skipped(self):
        good = make_record(1).model_dump(mode="json")
        await self.backend.set_many({DETECTIONS_KEY: json.dumps([good, {"id": "broken"}])})
        self.assertEqual([d.id for d in await self.store.get_detections()], ["det-1"])

    async def test_corrupted_list_reads_as_empty(self):
        await self.backend.set_many({DETECTIONS_KEY: "{not json", STATS_KEY: "{}"})
        self.assertEqual(await self.store.get_detections(), [])

    async def test_save_replaces_corrupted_list(self):
        await self.backend.set_many({DETECTIONS_KEY: "{not json"})
        await self.store.save_detection(make_record(1))
        await self.store.save_detection(make_record(2))
        self.assertEqual([d.id for d in await self.store.get_detections()], ["det-2", "det-1"])
        self.assertEqual((await self.store.get_saved_stats()).total_scans, 2)

    async def test_values_are_overwritten(self):
        await self.backend.set_many({ONBOARDING_KEY: "false"})
        await self.backend.set_many({ONBOARDING_KEY: "true"})
        self.assertEqual(await self.backend.get(ONBOARDING_KEY), "true")
        await self.backend.delete(ONBOARDING_KEY)
        self.assertIsNone(await self.backend.get(ONBOARDING_KEY))


class TestRedisKeyValueBackend(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.redis = AsyncMock()
        self.backend = RedisKeyValueBackend(self.redis)
        self.store = DetectionStore(self.backend)

    async def test_save_writes_both_keys_in_one_mset(self):
        self.redis.get.return_value = None

        await self.store.save_detection(make_record(1))

        self.redis.mset.assert_awaited_once()
        written = self.redis.mset.await_args.args[0]
        self.assertEqual(set(written), {DETECTIONS_KEY, STATS_KEY})
        self.assertEqual(json.loads(written[DETECTIONS_KEY])[0]["id"], "det-1")
        self.assertEqual(json.loads(written[STATS_KEY])["total_scans"], 1)

    async def test_reads_existing_list(self):
        self.redis.get.return_value = json.dumps([make_record(3).model_dump(mode="json")])
        detections = await self.store.get_detections()
        self.assertEqual([d.id for d in detections], ["det-3"])
        self.redis.get.assert_awaited_with(DETECTIONS_KEY)

    async def test_clear_all_deletes_then_writes_empty_stats(self):
        await self.store.clear_all()
        self.redis.delete.assert_awaited_once_with(DETECTIONS_KEY, STATS_KEY)
        written = self.redis.mset.await_args.args[0]
        self.assertEqual(json.loads(written[STATS_KEY])["total_scans"], 0)

    async def test_close(self):
        await self.backend.close()
        self.redis.aclose.assert_awaited_once()


class TestStorageFailures(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        backend = AsyncMock(spec=SqlKeyValueBackend)
        backend.get.side_effect = ConnectionError("storage offline")
        backend.set_many.side_effect = ConnectionError("storage offline")
        backend.delete.side_effect = ConnectionError("storage offline")
        self.store = DetectionStore(backend)

    async def test_failures_are_swallowed(self):
        with self.assertLogs("plantscan.services.storage", level="ERROR"):
            await self.store.save_detection(make_record(1))
        self.assertEqual(await self.store.get_detections(), [])
        self.assertEqual(await self.store.get_stats(), AppStats())
        self.assertIsNone(await self.store.get_saved_stats())
        self.assertFalse(await self.store.is_onboarding_completed())
        await self.store.set_onboarding_completed()
        await self.store.clear_all()


if __name__ == '__main__':
    unittest.main()
