import json
import unittest

from server.events import StickyEventStore, make_event


class MakeEventTests(unittest.TestCase):
    def test_envelope_carries_type_epoch_ms_timestamp_and_payload(self) -> None:
        raw = make_event("notice", now_ms=lambda: 1_752_141_600_000, message="Break over!")

        self.assertEqual(
            {"type": "notice", "timestamp": 1_752_141_600_000, "message": "Break over!"},
            json.loads(raw),
        )

    def test_default_timestamp_is_integer_milliseconds(self) -> None:
        payload = json.loads(make_event("hello"))

        self.assertIsInstance(payload["timestamp"], int)
        self.assertGreater(payload["timestamp"], 1_600_000_000_000)

    def test_card_titles_are_not_ascii_escaped(self) -> None:
        raw = make_event("session", card_title="Café \U0001F345")
        self.assertIn("Café \U0001F345", raw)


class StickyEventStoreTests(unittest.TestCase):
    def test_only_state_events_are_kept(self) -> None:
        store = StickyEventStore()
        store.remember("hello", '{"type":"hello"}')
        store.remember("session", '{"type":"session"}')
        store.remember("command_result", '{"type":"command_result"}')

        self.assertEqual([], store.snapshot())

    def test_replay_order_is_timer_then_prompt_then_notice(self) -> None:
        store = StickyEventStore()
        store.remember("notice", '{"type":"notice"}')
        store.remember("stop_reason_prompt", '{"type":"stop_reason_prompt"}')
        store.remember("timer", '{"type":"timer"}')

        decoded_types = [json.loads(item)["type"] for item in store.snapshot()]
        self.assertEqual(["timer", "stop_reason_prompt", "notice"], decoded_types)

    def test_newer_timer_snapshot_replaces_older(self) -> None:
        store = StickyEventStore()
        store.remember("timer", '{"type":"timer","remaining_ms":10}')
        store.remember("timer", '{"type":"timer","remaining_ms":9}')
        snapshot = store.snapshot()

        self.assertEqual(1, len(snapshot))
        self.assertEqual(9, json.loads(snapshot[0])["remaining_ms"])

    def test_closed_prompt_is_withdrawn(self) -> None:
        store = StickyEventStore()
        store.remember("timer", '{"type":"timer"}')
        store.remember("stop_reason_prompt", '{"type":"stop_reason_prompt","active":true}')

        store.remember(
            "stop_reason_prompt",
            '{"type":"stop_reason_prompt","active":false}',
            retain=False,
        )

        self.assertEqual(['{"type":"timer"}'], store.snapshot())


if __name__ == "__main__":
    unittest.main()
