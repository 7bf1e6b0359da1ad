import logging
import os
import tempfile
import unittest

from pydantic import ValidationError

from config import logging_config
from config.config import KeepaliveConfig
from core.errors import ConfigurationError


class TestConfig(unittest.TestCase):
    def test_config_defaults(self):
        config = KeepaliveConfig.from_env({"API_URL": "https://api.example.com"})
        self.assertEqual(config.api_url, "https://api.example.com")
        self.assertEqual(config.warm_endpoint, "/warm")
        self.assertEqual(config.timeout_ms, 8000)
        self.assertEqual(config.max_retries, 3)
        self.assertEqual(config.retry_base_delay_ms, 1500)
        self.assertTrue(config.enable_warm_after_unwarmed)
        self.assertEqual(config.warm_recheck_delay_ms, 1500)
        self.assertIsNone(config.pushgateway_url)

    def test_config_env_override(self):
        config = KeepaliveConfig.from_env(
            {
                "API_URL": "http://svc:8080",
                "WARM_ENDPOINT": "/warmup",
                "PING_TIMEOUT_MS": "2000",
                "MAX_RETRIES": "5",
                "RETRY_BASE_DELAY_MS": "250",
                "ENABLE_WARM_AFTER_UNWARMED": "false",
                "PUSHGATEWAY_URL": "http://pushgateway:9091",
            }
        )
        self.assertEqual(config.warm_endpoint, "/warmup")
        self.assertEqual(config.timeout_ms, 2000)
        self.assertEqual(config.max_retries, 5)
        self.assertEqual(config.retry_base_delay_ms, 250)
        self.assertFalse(config.enable_warm_after_unwarmed)
        self.assertEqual(config.pushgateway_url, "http://pushgateway:9091")

    def test_reads_os_environ_by_default(self):
        os.environ["API_URL"] = "http://from-env:1234"
        try:
            self.assertEqual(KeepaliveConfig.from_env().api_url, "http://from-env:1234")
        finally:
            del os.environ["API_URL"]

    def test_missing_api_url(self):
        with self.assertRaises(ConfigurationError):
            KeepaliveConfig.from_env({})
        with self.assertRaises(ConfigurationError):
            KeepaliveConfig.from_env({"API_URL": "   "})

    def test_invalid_numbers_fall_back_to_defaults(self):
        config = KeepaliveConfig.from_env(
            {"API_URL": "http://svc", "MAX_RETRIES": "lots", "PING_TIMEOUT_MS": "-5"}
        )
        self.assertEqual(config.max_retries, 3)
        self.assertEqual(config.timeout_ms, 8000)

    def test_warm_flag_is_case_insensitive(self):
        config = KeepaliveConfig.from_env(
            {"API_URL": "http://svc", "ENABLE_WARM_AFTER_UNWARMED": "TRUE"}
        )
        self.assertTrue(config.enable_warm_after_unwarmed)

    def test_url_for_strips_trailing_slashes(self):
        config = KeepaliveConfig(api_url="http://svc/api///")
        self.assertEqual(config.url_for("/healthz"), "http://svc/api/healthz")

    def test_config_is_frozen(self):
        config = KeepaliveConfig(api_url="http://svc")
        with self.assertRaises(ValidationError):
            config.max_retries = 10


class TestLoggingConfig(unittest.TestCase):
    def test_logging_setup(self):
        try:
            logging_config.setup_logging()
        except Exception as e:
            self.fail(f"setup_logging() raised {e}")
        logger = logging.getLogger()
        self.assertTrue(logger.hasHandlers())

    def test_unknown_level_falls_back_to_info(self):
        config = logging_config.build_logging_config("verbose", "")
        self.assertEqual(config["root"]["level"], "INFO")
        self.assertEqual(logging_config.normalize_level("debug"), "DEBUG")

    def test_zero_timeout_is_kept(self):
        config = KeepaliveConfig.from_env({"API_URL": "http://svc", "PING_TIMEOUT_MS": "0"})
        self.assertEqual(config.timeout_ms, 0)

    def test_file_handler_only_when_log_file_set(self):
        self.assertEqual(
            list(logging_config.build_logging_config("INFO", "")["handlers"]), ["console"]
        )
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "keepalive.log")
            config = logging_config.build_logging_config("DEBUG", path)
            self.assertEqual(config["handlers"]["file"]["filename"], path)
            self.assertEqual(config["root"]["level"], "DEBUG")


if __name__ == "__main__":
    unittest.main()
