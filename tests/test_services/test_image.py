import os
import tempfile
import unittest
from pathlib import Path

from plantscan.exceptions import ImageIntegrityError, InvalidInputError
from plantscan.services.image import ImageService, content_type_for, is_valid_image_uri


class TestImageService(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)
        self.service = ImageService(media_root=self.tmp / "media", min_bytes=1024, max_bytes=4096)

    def tearDown(self):
        self._tmp.cleanup()

    def _write(self, relative: str, size: int) -> Path:
        path = self.tmp / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"\xff" * size)
        return path

    def test_uri_schemes(self):
        self.assertTrue(is_valid_image_uri("file:///tmp/leaf.jpg"))
        self.assertTrue(is_valid_image_uri("content://media/external/images/1"))
        self.assertTrue(is_valid_image_uri("ph://ABC-123"))
        self.assertFalse(is_valid_image_uri("https://example.com/leaf.jpg"))
        self.assertFalse(is_valid_image_uri(None))

    def test_content_type_for(self):
        self.assertEqual(content_type_for("file:///a/leaf.JPG"), "image/jpeg")
        self.assertEqual(content_type_for("file:///a/leaf.jpeg"), "image/jpeg")
        self.assertEqual(content_type_for("file:///a/leaf.png"), "image/png")
        self.assertEqual(content_type_for("file:///a/leaf.webp"), "image/webp")
        self.assertEqual(content_type_for("file:///a/leaf.heic"), "image/jpeg")
        self.assertEqual(content_type_for("ph://ABC-123"), "image/jpeg")

    def test_load_file_uri(self):
        path = self._write("leaf.png", 2048)
        image = self.service.load(path.as_uri())
        self.assertEqual(len(image.data), 2048)
        self.assertEqual(image.content_type, "image/png")

    def test_load_content_uri_under_media_root(self):
        self._write("media/media/external/images/42.jpg", 2048)
        image = self.service.load("content://media/external/images/42.jpg")
        self.assertEqual(image.path, self.tmp / "media" / "media" / "external" / "images" / "42.jpg")

    def test_rejects_remote_uri(self):
        with self.assertRaises(InvalidInputError):
            self.service.load("https://example.com/leaf.jpg")

    def test_rejects_empty_uri(self):
        with self.assertRaises(InvalidInputError):
            self.service.load("")

    def test_rejects_missing_file(self):
        with self.assertRaises(InvalidInputError):
            self.service.load((self.tmp / "missing.jpg").as_uri())

    def test_rejects_small_buffer(self):
        path = self._write("tiny.jpg", 1023)
        with self.assertRaisesRegex(ImageIntegrityError, "too small"):
            self.service.load(path.as_uri())

    def test_rejects_large_buffer(self):
        path = self._write("huge.jpg", 4097)
        with self.assertRaisesRegex(ImageIntegrityError, "too large"):
            self.service.load(path.as_uri())

    def test_accepts_boundaries(self):
        for size in (1024, 4096):
            path = self._write(f"edge_{size}.jpg", size)
            self.assertEqual(len(self.service.load(path.as_uri()).data), size)


if __name__ == '__main__':
    unittest.main()
