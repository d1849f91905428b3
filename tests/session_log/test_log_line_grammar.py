import datetime as dt
import unittest

from session_log import format_log_line, parse_log_line
from timer.constants import MINUTE_MS, MODE_POMODORO, MODE_STOPWATCH


def _local_ms(hour: int, minute: int, second: int = 0) -> int:
    return int(dt.datetime(2025, 7, 10, hour, minute, second).timestamp() * 1000)


class LogLineGrammarTests(unittest.TestCase):
    def test_format_uses_local_times_and_rounded_minutes(self) -> None:
        line = format_log_line(_local_ms(10, 0), _local_ms(10, 25), 25 * MINUTE_MS)
        self.assertEqual("++ 2025-07-10 10:00 – 10:25 (25 m)", line)

    def test_format_rounds_half_minutes_up(self) -> None:
        line = format_log_line(_local_ms(9, 0), _local_ms(9, 2, 30), 150_000)
        self.assertTrue(line.endswith("(3 m)"), line)

    def test_parse_recovers_timestamps(self) -> None:
        parsed = parse_log_line("++ 2025-07-10 10:00 – 10:25 (25 m)")

        self.assertEqual(_local_ms(10, 0), parsed.start)
        self.assertEqual(_local_ms(10, 25), parsed.end)
        self.assertEqual(25 * MINUTE_MS, parsed.duration)
        self.assertEqual(MODE_STOPWATCH, parsed.mode)

    def test_parse_accepts_bullets_emoji_markers_and_dash_variants(self) -> None:
        tomato = parse_log_line("- \U0001F345 2025-07-10 10:00 - 10:25 (25 m)")
        stopwatch = parse_log_line("  ⏱️ 2025-07-10 11:00—11:30 (30 m)")

        self.assertEqual(MODE_POMODORO, tomato.mode)
        self.assertEqual(MODE_STOPWATCH, stopwatch.mode)
        self.assertEqual(30 * MINUTE_MS, stopwatch.duration)

    def test_parse_rejects_malformed_lines(self) -> None:
        for line in (
            "",
            "Write report",
            "++ 2025-07-10 10:00 (25 m)",
            "++ 2025-13-40 10:00 – 10:25 (25 m)",
            "++ 2025-07-10 10:25 – 10:00 (25 m)",
            "++ 2025-07-10 10:00 – 10:25 (0 m)",
            "++ 2025-07-10 10:00 – 10:25 (40 m)",
        ):
            with self.subTest(line=line):
                self.assertIsNone(parse_log_line(line))

    def test_format_then_parse_keeps_minute_precision(self) -> None:
        start = _local_ms(14, 3, 40)
        end = _local_ms(14, 51, 10)

        parsed = parse_log_line(format_log_line(start, end, end - start))

        self.assertEqual(_local_ms(14, 3), parsed.start)
        self.assertEqual(_local_ms(14, 51), parsed.end)
        self.assertLessEqual(abs(parsed.duration - (end - start)), MINUTE_MS)


if __name__ == "__main__":
    unittest.main()
