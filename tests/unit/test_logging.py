"""
Unit tests for the structured logging formatter and filter.
"""

import unittest
import json
import logging

from pyarmsim.core.logging import StructuredFormatter, PerformanceFilter, get_logger


def make_record(**extra):
    record = logging.LogRecord("pyarmsim.test", logging.INFO, __file__, 10,
                               "Physics updated", None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestStructuredFormatter(unittest.TestCase):
    """Test structured log output."""

    def test_json_output_with_extra(self):
        """Test that extra fields land in the JSON record."""
        record = make_record(total_power=4.2, angles=[0.0, 1.0, 2.0])
        data = json.loads(StructuredFormatter("json").format(record))

        self.assertEqual(data["level"], "INFO")
        self.assertEqual(data["logger"], "pyarmsim.test")
        self.assertEqual(data["message"], "Physics updated")
        self.assertEqual(data["extra"], {"total_power": 4.2, "angles": [0.0, 1.0, 2.0]})

    def test_human_output(self):
        """Test the human-readable line."""
        line = StructuredFormatter("human").format(make_record(ticks=3))

        self.assertIn("INFO", line)
        self.assertIn("Physics updated", line)
        self.assertIn("ticks=3", line)

    def test_without_extra(self):
        """Test that extra fields can be left out."""
        line = StructuredFormatter("human", include_extra=False).format(make_record(ticks=3))
        self.assertNotIn("ticks=3", line)

    def test_unserializable_extra(self):
        """Test that unserializable values are stringified."""
        data = json.loads(StructuredFormatter("json").format(make_record(path=object())))
        self.assertIsInstance(data["extra"]["path"], str)


class TestPerformanceFilter(unittest.TestCase):
    """Test elapsed time stamping."""

    def test_elapsed_time_is_reported(self):
        """Test that the filter's elapsed time reaches the output."""
        record = make_record()
        self.assertTrue(PerformanceFilter().filter(record))

        data = json.loads(StructuredFormatter("json").format(record))
        self.assertIn("elapsed_time", data["extra"])
        self.assertGreaterEqual(data["extra"]["elapsed_time"], 0.0)

        line = StructuredFormatter("human").format(record)
        self.assertIn("elapsed_time=", line)


class TestGetLogger(unittest.TestCase):
    """Test logger naming."""

    def test_namespaced_logger(self):
        """Test that loggers live under the package namespace."""
        logger = get_logger("physics.robot")

        self.assertEqual(logger.name, "pyarmsim.physics.robot")
        self.assertIs(get_logger("physics.robot"), logger)


if __name__ == '__main__':
    unittest.main()
