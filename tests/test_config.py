import os
import tempfile
import unittest
from unittest import mock

from workout_engine.config import DEFAULT_CONFIG, load_config


class LoadConfigTests(unittest.TestCase):
    def test_missing_file_yields_defaults(self):
        with mock.patch.dict(os.environ, {}, clear=False):
            os.environ.pop("WORKOUT_ENGINE_REGISTRY", None)
            config = load_config("/nonexistent/config.yaml")
        self.assertEqual(config, DEFAULT_CONFIG)
        self.assertIsNot(config, DEFAULT_CONFIG)

    def test_file_overrides_merge_over_defaults(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "config.yaml")
            with open(path, "w", encoding="utf-8") as f:
                f.write("generator:\n  default_minutes: 30\n  registry_path: movements.yaml\n")
            with mock.patch.dict(os.environ, {}, clear=False):
                os.environ.pop("WORKOUT_ENGINE_REGISTRY", None)
                config = load_config(path)
        self.assertEqual(config["generator"]["default_minutes"], 30)
        self.assertEqual(config["generator"]["default_intensity"], 6)
        self.assertEqual(config["generator"]["registry_path"], os.path.join(tmp, "movements.yaml"))
        self.assertEqual(config["output"]["format"], "markdown")

    def test_registry_env_override(self):
        with mock.patch.dict(os.environ, {"WORKOUT_ENGINE_REGISTRY": "/data/movements.yaml"}):
            config = load_config("/nonexistent/config.yaml")
        self.assertEqual(config["generator"]["registry_path"], "/data/movements.yaml")

    def test_non_mapping_config_raises(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "config.yaml")
            with open(path, "w", encoding="utf-8") as f:
                f.write("- just\n- a list\n")
            with self.assertRaises(ValueError):
                load_config(path)


if __name__ == "__main__":
    unittest.main()
