import json
import socket
import threading
import unittest
import urllib.error
import urllib.request

from websockets.sync.client import connect

from server import EventServer, EventServerConfig


def _free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


class EventServerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.received = []
        self.command_seen = threading.Event()
        self.server = EventServer(
            EventServerConfig(port=_free_port()),
            command_handler=self._on_command,
        )
        self.server.start(timeout_seconds=5.0)
        self.addCleanup(self.server.stop, 5.0)

    def _on_command(self, raw: str) -> None:
        self.received.append(raw)
        self.command_seen.set()

    def _url(self) -> str:
        return f"ws://{self.server.host}:{self.server.port}{self.server.websocket_path}"

    def test_new_client_gets_hello_then_sticky_events(self) -> None:
        self.server.publish("timer", phase="running", remaining_ms=1000)
        self.server.publish("session", card_id="A")

        with connect(self._url(), open_timeout=5) as client:
            hello = json.loads(client.recv(timeout=5))
            sticky = json.loads(client.recv(timeout=5))

        self.assertEqual("hello", hello["type"])
        self.assertEqual("timer", sticky["type"])
        self.assertEqual(1000, sticky["remaining_ms"])

    def test_client_messages_reach_command_handler(self) -> None:
        with connect(self._url(), open_timeout=5) as client:
            client.recv(timeout=5)
            client.send('{"action": "status"}')
            self.assertTrue(self.command_seen.wait(timeout=5))

        self.assertEqual(['{"action": "status"}'], self.received)

    def test_published_events_are_broadcast(self) -> None:
        with connect(self._url(), open_timeout=5) as client:
            client.recv(timeout=5)
            self.server.publish("notice", message="Break over!")
            notice = json.loads(client.recv(timeout=5))

        self.assertEqual("notice", notice["type"])
        self.assertEqual("Break over!", notice["message"])

    def test_hello_lists_supported_actions(self) -> None:
        with connect(self._url(), open_timeout=5) as client:
            hello = json.loads(client.recv(timeout=5))

        self.assertIn("start", hello["actions"])
        self.assertIn("put_board", hello["actions"])

    def test_closed_prompt_is_not_replayed(self) -> None:
        self.server.publish("stop_reason_prompt", active=True, reasons=["Email"])
        self.server.publish("stop_reason_prompt", active=False)
        self.server.publish("notice", message="Session logged")

        with connect(self._url(), open_timeout=5) as client:
            client.recv(timeout=5)
            replayed = json.loads(client.recv(timeout=5))

        self.assertEqual("notice", replayed["type"])

    def test_healthz_reports_status_and_unknown_paths_404(self) -> None:
        base = f"http://{self.server.host}:{self.server.port}"
        with urllib.request.urlopen(f"{base}/healthz", timeout=5) as response:
            health = json.loads(response.read())

        self.assertEqual({"status": "ok", "clients": 0}, health)
        with self.assertRaises(urllib.error.HTTPError) as context:
            urllib.request.urlopen(f"{base}/missing", timeout=5)
        self.assertEqual(404, context.exception.code)
        context.exception.close()


if __name__ == "__main__":
    unittest.main()
