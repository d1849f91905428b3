import unittest

from app_config_schema import ServerSettings
from server.config import EventServerConfig, ServerConfigurationError


class EventServerConfigTests(unittest.TestCase):
    def test_from_settings_copies_values(self) -> None:
        settings = ServerSettings(enabled=False, host=" 0.0.0.0 ", port=9001, ws_path="/events")

        config = EventServerConfig.from_settings(settings)

        self.assertFalse(config.enabled)
        self.assertEqual("0.0.0.0", config.host)
        self.assertEqual(9001, config.port)
        self.assertEqual("/events", config.websocket_path)

    def test_rejects_invalid_values(self) -> None:
        for kwargs in (
            {"host": "  "},
            {"port": 0},
            {"port": 70000},
            {"ws_path": "ws"},
            {"ws_path": "/healthz"},
        ):
            with self.subTest(kwargs=kwargs):
                with self.assertRaises(ServerConfigurationError):
                    EventServerConfig(**kwargs)


if __name__ == "__main__":
    unittest.main()
