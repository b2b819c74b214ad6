import unittest

from plantscan.constants import confidence_level, severity_color


class TestGrading(unittest.TestCase):
    def test_severity_color(self):
        self.assertEqual(severity_color("High"), "#ef4444")
        self.assertEqual(severity_color("severe"), "#ef4444")
        self.assertEqual(severity_color("MODERATE"), "#f59e0b")
        self.assertEqual(severity_color("mild"), "#10b981")
        self.assertEqual(severity_color("catastrophic"), "#6b7280")
        self.assertEqual(severity_color(None), "#6b7280")

    def test_confidence_level(self):
        self.assertEqual(confidence_level(95), "Very High")
        self.assertEqual(confidence_level(90), "Very High")
        self.assertEqual(confidence_level(80), "High")
        self.assertEqual(confidence_level(70), "Good")
        self.assertEqual(confidence_level(60), "Fair")
        self.assertEqual(confidence_level(12), "Low")
        self.assertEqual(confidence_level(float("nan")), "Unknown")
        self.assertEqual(confidence_level("90"), "Unknown")


if __name__ == '__main__':
    unittest.main()
