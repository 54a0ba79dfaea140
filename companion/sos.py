"""
Safety timer and SOS dispatch.

The timer is a three-state machine (idle, armed, triggered). It is driven by
explicit tick() calls so the caller owns the clock; a UI would tick once per
second, tests tick as fast as they like.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Callable, Optional, Tuple
from urllib.parse import quote

logger = logging.getLogger(__name__)

DEFAULT_DURATION_SECONDS = 60 * 60
DEFAULT_EMERGENCY_NUMBER = "60123456789"
MESSAGE_PREFIX = "EMERGENCY: I need help."
MAP_LINK = "https://www.google.com/maps?q={latitude},{longitude}"
WHATSAPP_URL = "https://wa.me/{number}?text={text}"

# Same set of characters a browser's encodeURIComponent leaves alone.
_URI_COMPONENT_SAFE = "~()*!.'"

Coordinates = Tuple[float, float]


class TimerState(str, enum.Enum):
    IDLE = "idle"
    ARMED = "armed"
    TRIGGERED = "triggered"


class LocationUnavailable(Exception):
    """Raised by a locate callable when the device cannot report a position."""


@dataclass(frozen=True)
class SosOutcome:
    message: str
    url: str
    location_available: bool
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    reported: bool = False


def build_sos_message(location: Optional[Coordinates]) -> str:
    if location is None:
        return MESSAGE_PREFIX
    latitude, longitude = location
    link = MAP_LINK.format(latitude=latitude, longitude=longitude)
    return f"{MESSAGE_PREFIX} My location: {link}"


def build_whatsapp_url(number: str, message: str) -> str:
    digits = "".join(ch for ch in number if ch.isdigit())
    return WHATSAPP_URL.format(
        number=digits, text=quote(message, safe=_URI_COMPONENT_SAFE)
    )


class SosDispatcher:
    """
    Sends the emergency message when the timer triggers or panic is pressed.

    Args:
        locate: Returns (latitude, longitude), or None / raises
            LocationUnavailable when no fix is available.
        open_url: Hands the messaging URL to the platform (browser, intent, ...).
        emergency_number: Number the message is addressed to.
        report: Optional callable receiving the safety alert payload, e.g.
            GatewayClient.create_alert. Failures are logged and ignored.
    """

    def __init__(
        self,
        locate: Callable[[], Optional[Coordinates]],
        open_url: Callable[[str], object],
        emergency_number: str = DEFAULT_EMERGENCY_NUMBER,
        report: Optional[Callable[[dict], object]] = None,
    ):
        self.locate = locate
        self.open_url = open_url
        self.emergency_number = emergency_number
        self.report = report
        self.last_known_location: Optional[Coordinates] = None

    def _current_location(self) -> Optional[Coordinates]:
        try:
            location = self.locate()
        except LocationUnavailable as exc:
            logger.warning("Geolocation failed: %s", exc)
            location = None
        if location is not None:
            self.last_known_location = location
            return location
        if self.last_known_location is not None:
            logger.info("Using last known location for SOS")
        return self.last_known_location

    def dispatch(self) -> SosOutcome:
        location = self._current_location()
        message = build_sos_message(location)
        url = build_whatsapp_url(self.emergency_number, message)
        self.open_url(url)

        latitude, longitude = location if location is not None else (None, None)
        reported = False
        if self.report is not None:
            alert = {
                "alert_type": "sos",
                "message": message,
                "latitude": latitude,
                "longitude": longitude,
                "status": "active",
            }
            try:
                self.report(alert)
                reported = True
            except Exception:
                logger.exception("Could not report SOS alert")

        return SosOutcome(
            message=message,
            url=url,
            location_available=location is not None,
            latitude=latitude,
            longitude=longitude,
            reported=reported,
        )


class SafetyTimer:
    def __init__(
        self,
        duration: int = DEFAULT_DURATION_SECONDS,
        dispatcher: Optional[SosDispatcher] = None,
    ):
        if duration <= 0:
            raise ValueError("duration must be positive")
        self.duration = duration
        self.remaining = duration
        self.state = TimerState.IDLE
        self.dispatcher = dispatcher
        self.trigger_count = 0
        self.last_outcome: Optional[SosOutcome] = None

    @property
    def is_active(self) -> bool:
        return self.state is TimerState.ARMED

    def start(self) -> TimerState:
        if self.state is TimerState.IDLE:
            self.state = TimerState.ARMED
        return self.state

    def stop(self) -> TimerState:
        """Pause the countdown, keeping the remaining time."""
        if self.state is TimerState.ARMED:
            self.state = TimerState.IDLE
        return self.state

    def check_in(self) -> TimerState:
        self.state = TimerState.IDLE
        self.remaining = self.duration
        return self.state

    def tick(self) -> TimerState:
        if self.state is not TimerState.ARMED:
            return self.state
        self.remaining = max(self.remaining - 1, 0)
        if self.remaining == 0:
            self._trigger()
        return self.state

    def advance(self, seconds: int) -> TimerState:
        for _ in range(seconds):
            if self.state is not TimerState.ARMED:
                break
            self.tick()
        return self.state

    def panic(self) -> Optional[SosOutcome]:
        return self._trigger()

    def _trigger(self) -> Optional[SosOutcome]:
        self.state = TimerState.TRIGGERED
        self.trigger_count += 1
        logger.warning("SOS triggered (%d)", self.trigger_count)
        if self.dispatcher is None:
            return None
        self.last_outcome = self.dispatcher.dispatch()
        return self.last_outcome

    def format_remaining(self) -> str:
        minutes, seconds = divmod(self.remaining, 60)
        return f"{minutes}:{seconds:02d}"
