import datetime as dt
import unittest

from board import BoardDocument, Card, InMemoryBoardRegistry, Lane
from session_log import FocusSession, SessionLogStore
from timer.constants import MINUTE_MS, MODE_POMODORO


def _card(card_id: str, *lines: str, children=None) -> Card:
    return Card(id=card_id, body="\n".join(lines), children=list(children or []))


def _document(path: str, *cards: Card) -> BoardDocument:
    return BoardDocument(path=path, lanes=[Lane(id=f"{path}-0", title="Doing", cards=list(cards))])


class SessionLogStoreTests(unittest.TestCase):
    def setUp(self) -> None:
        self.card = _card(
            "A",
            "Write report",
            "++ 2025-07-10 10:00 – 10:25 (25 m)",
            "some note",
            "++ 2025-07-11 09:00 – 09:30 (30 m)",
        )
        self.child = _card("A1", "Outline", "++ 2025-07-10 13:00 – 13:10 (10 m)")
        self.parent = _card("P", "Epic", children=[self.child])
        self.registry = InMemoryBoardRegistry([_document("one.md", self.card, self.parent)])
        self.store = SessionLogStore(self.registry)

    def test_parses_cards_and_nested_children(self) -> None:
        sessions = self.store.sessions

        self.assertEqual(3, len(sessions))
        self.assertEqual({"A", "A1"}, {s.card_id for s in sessions})
        self.assertEqual("Outline", [s for s in sessions if s.card_id == "A1"][0].card_title)

    def test_reparse_is_idempotent(self) -> None:
        first = self.store.sessions
        self.store.force_reparse()
        self.store.force_reparse()

        self.assertEqual(first, self.store.sessions)

    def test_duplicate_lines_on_same_card_are_counted_once(self) -> None:
        self.card.body += "\n++ 2025-07-10 10:00 – 10:25 (25 m)"
        self.store.force_reparse()

        self.assertEqual(2, len(self.store.get_logs_for_card("A")))

    def test_logs_for_date_use_local_day_bounds(self) -> None:
        sessions = self.store.get_logs_for_date(dt.date(2025, 7, 10))

        self.assertEqual(2, len(sessions))
        self.assertEqual([], self.store.get_logs_for_date(dt.date(2025, 7, 12)))

    def test_total_focused_sums_card_sessions(self) -> None:
        self.assertEqual(55 * MINUTE_MS, self.store.get_total_focused("A"))
        self.assertEqual(0, self.store.get_total_focused(None))
        self.assertEqual(0, self.store.get_total_focused("unknown"))

    def test_new_document_triggers_rebuild(self) -> None:
        self.assertEqual(3, len(self.store.sessions))

        self.registry.add_document(
            _document("two.md", _card("B", "Email", "++ 2025-07-10 16:00 – 16:20 (20 m)"))
        )

        self.assertEqual(4, len(self.store.sessions))

    def test_added_session_is_kept_until_rebuild(self) -> None:
        self.store.load()
        start = int(dt.datetime(2025, 7, 10, 17, 0, 12).timestamp() * 1000)
        session = FocusSession(
            card_id="A",
            card_title="Write report",
            mode=MODE_POMODORO,
            start=start,
            end=start + 25 * MINUTE_MS,
            duration=25 * MINUTE_MS,
        )

        self.store.add(session)

        self.assertIn(session, self.store.sessions)
        self.assertEqual(80 * MINUTE_MS, self.store.get_total_focused("A"))


if __name__ == "__main__":
    unittest.main()
