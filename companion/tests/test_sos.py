import unittest
from unittest.mock import MagicMock
from urllib.parse import parse_qs, urlparse

from companion.sos import (
    LocationUnavailable,
    SafetyTimer,
    SosDispatcher,
    TimerState,
    build_sos_message,
    build_whatsapp_url,
)


def make_dispatcher(location=(3.139, 101.6869), report=None):
    opened = []
    locate = MagicMock(return_value=location)
    dispatcher = SosDispatcher(locate=locate, open_url=opened.append, report=report)
    return dispatcher, locate, opened


class SafetyTimerTests(unittest.TestCase):
    def test_countdown_triggers_exactly_once(self):
        dispatcher, locate, opened = make_dispatcher()
        timer = SafetyTimer(dispatcher=dispatcher)
        self.assertEqual(timer.remaining, 3600)
        timer.start()
        for _ in range(3600):
            timer.tick()
        self.assertEqual(timer.state, TimerState.TRIGGERED)
        self.assertEqual(timer.trigger_count, 1)
        locate.assert_called_once()
        self.assertEqual(len(opened), 1)

        # Further ticks after triggering do nothing.
        timer.advance(10)
        timer.tick()
        self.assertEqual(timer.trigger_count, 1)

    def test_start_stop_keeps_remaining(self):
        timer = SafetyTimer(duration=120)
        self.assertFalse(timer.is_active)
        self.assertEqual(timer.start(), TimerState.ARMED)
        self.assertTrue(timer.is_active)
        timer.advance(30)
        self.assertEqual(timer.stop(), TimerState.IDLE)
        self.assertFalse(timer.is_active)
        self.assertEqual(timer.remaining, 90)
        timer.advance(30)
        self.assertEqual(timer.remaining, 90)
        self.assertEqual(timer.format_remaining(), "1:30")

    def test_check_in_resets(self):
        timer = SafetyTimer(duration=120)
        timer.start()
        timer.advance(100)
        self.assertEqual(timer.check_in(), TimerState.IDLE)
        self.assertEqual(timer.remaining, 120)
        self.assertEqual(timer.trigger_count, 0)

    def test_check_in_after_trigger_rearms(self):
        timer = SafetyTimer(duration=5)
        timer.start()
        timer.advance(5)
        self.assertEqual(timer.state, TimerState.TRIGGERED)
        self.assertEqual(timer.start(), TimerState.TRIGGERED)
        timer.check_in()
        self.assertEqual(timer.start(), TimerState.ARMED)

    def test_panic_from_idle(self):
        dispatcher, _, opened = make_dispatcher()
        timer = SafetyTimer(dispatcher=dispatcher)
        outcome = timer.panic()
        self.assertEqual(timer.state, TimerState.TRIGGERED)
        self.assertTrue(outcome.location_available)
        self.assertEqual(opened, [outcome.url])
        self.assertIs(timer.last_outcome, outcome)

    def test_format_remaining(self):
        timer = SafetyTimer()
        self.assertEqual(timer.format_remaining(), "60:00")
        timer.remaining = 9
        self.assertEqual(timer.format_remaining(), "0:09")

    def test_duration_must_be_positive(self):
        with self.assertRaises(ValueError):
            SafetyTimer(duration=0)


class SosDispatcherTests(unittest.TestCase):
    def test_message_and_url(self):
        dispatcher, _, opened = make_dispatcher(location=(3.139, 101.6869))
        outcome = dispatcher.dispatch()
        self.assertEqual(
            outcome.message,
            "EMERGENCY: I need help. My location: https://www.google.com/maps?q=3.139,101.6869",
        )
        parsed = urlparse(opened[0])
        self.assertEqual(parsed.netloc, "wa.me")
        self.assertEqual(parsed.path, "/60123456789")
        self.assertEqual(parse_qs(parsed.query)["text"], [outcome.message])
        self.assertIn("EMERGENCY%3A%20I%20need%20help.", opened[0])

    def test_falls_back_to_last_known_location(self):
        dispatcher, locate, _ = make_dispatcher(location=(1.0, 2.0))
        dispatcher.dispatch()
        locate.side_effect = LocationUnavailable("timeout")
        with self.assertLogs("companion.sos", level="WARNING"):
            outcome = dispatcher.dispatch()
        self.assertTrue(outcome.location_available)
        self.assertEqual((outcome.latitude, outcome.longitude), (1.0, 2.0))

    def test_no_location_sends_plain_message(self):
        dispatcher, _, opened = make_dispatcher(location=None)
        outcome = dispatcher.dispatch()
        self.assertFalse(outcome.location_available)
        self.assertEqual(outcome.message, "EMERGENCY: I need help.")
        self.assertEqual(len(opened), 1)

    def test_report_is_best_effort(self):
        report = MagicMock(side_effect=RuntimeError("offline"))
        dispatcher, _, opened = make_dispatcher(report=report)
        with self.assertLogs("companion.sos", level="ERROR"):
            outcome = dispatcher.dispatch()
        self.assertFalse(outcome.reported)
        self.assertEqual(len(opened), 1)

    def test_report_receives_alert(self):
        report = MagicMock()
        dispatcher, _, _ = make_dispatcher(location=(1.5, 2.5), report=report)
        outcome = dispatcher.dispatch()
        self.assertTrue(outcome.reported)
        alert = report.call_args.args[0]
        self.assertEqual(alert["alert_type"], "sos")
        self.assertEqual(alert["latitude"], 1.5)
        self.assertEqual(alert["message"], outcome.message)


class HelperTests(unittest.TestCase):
    def test_whatsapp_url_strips_formatting(self):
        url = build_whatsapp_url("+60 12-345 6789", "hi (there)!")
        self.assertEqual(url, "https://wa.me/60123456789?text=hi%20(there)!")

    def test_message_without_location(self):
        self.assertEqual(build_sos_message(None), "EMERGENCY: I need help.")


if __name__ == "__main__":
    unittest.main()
