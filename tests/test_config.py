import os
import tempfile
import unittest
from unittest import mock

from pydantic import ValidationError

from plantscan.config import DEFAULT_KNOWLEDGE_BASE_PATH, Settings, get_settings, required_settings


class TestSettings(unittest.TestCase):
    @mock.patch.dict(os.environ, {"INFERENCE_API_TOKEN": "hf_test"}, clear=True)
    def test_defaults(self):
        settings = Settings(_env_file=None)
        self.assertEqual(settings.INFERENCE_API_URL, "https://api-inference.huggingface.co")
        self.assertEqual(settings.MAX_ATTEMPTS, 3)
        self.assertEqual(settings.REQUEST_TIMEOUT_SECONDS, 45.0)
        self.assertEqual(settings.MIN_IMAGE_BYTES, 1024)
        self.assertEqual(settings.MAX_IMAGE_BYTES, 10 * 1024 * 1024)
        self.assertEqual(settings.STORAGE_BACKEND, "sqlite")
        self.assertEqual(settings.MAX_STORED_DETECTIONS, 100)
        self.assertEqual(settings.KNOWLEDGE_BASE_PATH, DEFAULT_KNOWLEDGE_BASE_PATH)

    @mock.patch.dict(os.environ, {"INFERENCE_API_TOKEN": "hf_test", "STORAGE_BACKEND": " Redis "}, clear=True)
    def test_storage_backend_is_normalized(self):
        self.assertEqual(Settings(_env_file=None).STORAGE_BACKEND, "redis")

    @mock.patch.dict(os.environ, {"INFERENCE_API_TOKEN": "hf_test", "STORAGE_BACKEND": "mongo"}, clear=True)
    def test_unknown_storage_backend(self):
        with self.assertRaises(ValidationError):
            Settings(_env_file=None)

    @mock.patch.dict(os.environ, {"INFERENCE_API_TOKEN": "   "}, clear=True)
    def test_blank_token(self):
        with self.assertRaises(ValidationError):
            Settings(_env_file=None)

    @mock.patch.dict(os.environ, {}, clear=True)
    def test_missing_token_exits(self):
        cwd = os.getcwd()
        with tempfile.TemporaryDirectory() as tmp:
            os.chdir(tmp)
            try:
                with self.assertLogs("plantscan.config", level="ERROR"):
                    with self.assertRaises(SystemExit):
                        get_settings()
            finally:
                os.chdir(cwd)

    def test_required_settings(self):
        self.assertEqual(required_settings(), ["INFERENCE_API_TOKEN"])


if __name__ == '__main__':
    unittest.main()
