import unittest

from plantscan.exceptions import (
    AnalysisError,
    DetectionErrorCode,
    ErrorCategory,
    ImageIntegrityError,
    InferenceTimeoutError,
    UnexpectedFormatError,
)
from plantscan.exceptions.detection import GENERIC_MESSAGE, TIMEOUT_MESSAGE
from plantscan.exceptions.handlers import to_http_exception


class TestAnalysisError(unittest.TestCase):
    def test_from_detection_error(self):
        error = AnalysisError.from_exception(InferenceTimeoutError())
        self.assertEqual(str(error), TIMEOUT_MESSAGE)
        self.assertEqual(error.code, DetectionErrorCode.TIMEOUT)
        self.assertEqual(error.category, ErrorCategory.TRANSIENT)

    def test_from_unknown_error(self):
        error = AnalysisError.from_exception(KeyError("label"))
        self.assertEqual(str(error), GENERIC_MESSAGE)
        self.assertEqual(error.code, DetectionErrorCode.ANALYSIS_FAILED)

    def test_detection_error_default_message(self):
        self.assertEqual(str(UnexpectedFormatError()), "Unexpected API response format")
        self.assertEqual(str(ImageIntegrityError("Image file too small - may be corrupted")),
                         "Image file too small - may be corrupted")


class TestHttpMapping(unittest.TestCase):
    def test_status_codes(self):
        cases = [
            (ImageIntegrityError(), 422),
            (InferenceTimeoutError(), 504),
            (UnexpectedFormatError(), 502),
            (KeyError("label"), 502),
        ]
        for error, status in cases:
            with self.subTest(error=type(error).__name__):
                self.assertEqual(to_http_exception(AnalysisError.from_exception(error)).status_code, status)

    def test_detail_body(self):
        http_exc = to_http_exception(AnalysisError.from_exception(InferenceTimeoutError()))
        self.assertEqual(http_exc.detail, {
            "code": 2005,
            "message": TIMEOUT_MESSAGE,
            "name": "TIMEOUT",
            "extras": {"category": "transient"},
        })


if __name__ == '__main__':
    unittest.main()
