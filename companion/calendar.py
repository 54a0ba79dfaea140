"""
Google Calendar integration for journal entries.

The OAuth consent flow itself happens in the browser; this module keeps the
resulting access token and talks to the Calendar REST API with it.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, Optional, Protocol

import requests

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 30  # seconds
CALENDAR_API = "https://www.googleapis.com/calendar/v3"
REVOKE_URL = "https://oauth2.googleapis.com/revoke"
CALENDAR_SCOPE = "https://www.googleapis.com/auth/calendar.events"
DEFAULT_TIME_ZONE = "Asia/Kuala_Lumpur"
DEFAULT_EVENT_TITLE = "Journal Entry"
REFRESH_MARGIN_SECONDS = 5 * 60


class CalendarAccessError(Exception):
    """No usable access token; the user must connect Google Calendar again."""


@dataclass(frozen=True)
class CalendarToken:
    access_token: str
    expires_at: float  # epoch seconds

    def is_expired(self, now: float, margin: float = 0) -> bool:
        return now + margin >= self.expires_at


class TokenStore(Protocol):
    def load(self) -> Optional[CalendarToken]:
        ...

    def save(self, token: CalendarToken) -> None:
        ...

    def clear(self) -> None:
        ...


@dataclass
class InMemoryTokenStore:
    token: Optional[CalendarToken] = None

    def load(self) -> Optional[CalendarToken]:
        return self.token

    def save(self, token: CalendarToken) -> None:
        self.token = token

    def clear(self) -> None:
        self.token = None


@dataclass
class CalendarEvent:
    title: str
    start: datetime
    end: datetime
    description: str = ""

    def to_resource(self, time_zone: str) -> dict:
        return {
            "summary": self.title or DEFAULT_EVENT_TITLE,
            "description": self.description or "",
            "start": {"dateTime": self.start.isoformat(), "timeZone": time_zone},
            "end": {"dateTime": self.end.isoformat(), "timeZone": time_zone},
        }


def journal_event(journal: dict, duration: timedelta = timedelta(hours=1)) -> CalendarEvent:
    """Event data for a journal entry, starting at its creation time."""
    created_at = journal.get("created_at")
    if isinstance(created_at, str):
        start = datetime.fromisoformat(created_at.replace("Z", "+00:00"))
    elif isinstance(created_at, datetime):
        start = created_at
    else:
        start = datetime.now().astimezone()
    return CalendarEvent(
        title=journal.get("title") or DEFAULT_EVENT_TITLE,
        description=journal.get("content") or "",
        start=start,
        end=start + duration,
    )


@dataclass
class GoogleCalendarClient:
    token_store: TokenStore = field(default_factory=InMemoryTokenStore)
    session: Optional[requests.Session] = None
    calendar_id: str = "primary"
    time_zone: str = DEFAULT_TIME_ZONE
    clock: Callable[[], float] = time.time

    def __post_init__(self):
        if self.session is None:
            self.session = requests.Session()

    # Token bookkeeping

    def store_token(self, access_token: str, expires_in: int) -> CalendarToken:
        token = CalendarToken(access_token, self.clock() + expires_in)
        self.token_store.save(token)
        logger.info("Stored Google Calendar access token")
        return token

    def _valid_token(self) -> Optional[CalendarToken]:
        token = self.token_store.load()
        if token is None or token.is_expired(self.clock()):
            return None
        return token

    def has_access(self) -> bool:
        return self._valid_token() is not None

    def needs_refresh(self) -> bool:
        token = self.token_store.load()
        return token is None or token.is_expired(self.clock(), REFRESH_MARGIN_SECONDS)

    def sign_out(self) -> None:
        token = self.token_store.load()
        self.token_store.clear()
        if token is None:
            return
        try:
            response = self.session.post(
                REVOKE_URL,
                params={"token": token.access_token},
                headers={"Content-Type": "application/x-www-form-urlencoded"},
                timeout=REQUEST_TIMEOUT,
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            # The local token is already gone; an unrevoked token simply expires.
            logger.warning("Could not revoke Google Calendar token: %s", exc)

    # Calendar API

    def _events_url(self, event_id: Optional[str] = None) -> str:
        url = f"{CALENDAR_API}/calendars/{self.calendar_id}/events"
        return f"{url}/{event_id}" if event_id else url

    def _request(self, method: str, url: str, **kwargs) -> requests.Response:
        token = self._valid_token()
        if token is None:
            raise CalendarAccessError(
                "No access token. Please connect Google Calendar first."
            )
        headers = {"Authorization": f"Bearer {token.access_token}"}
        response = self.session.request(
            method, url, headers=headers, timeout=REQUEST_TIMEOUT, **kwargs
        )
        if response.status_code == 401:
            self.token_store.clear()
            raise CalendarAccessError("Google Calendar access was revoked or expired.")
        response.raise_for_status()
        return response

    def create_event(self, event: CalendarEvent) -> dict:
        resource = event.to_resource(self.time_zone)
        resource["reminders"] = {"useDefault": True}
        created = self._request("POST", self._events_url(), json=resource).json()
        logger.info("Created calendar event %s", created.get("id"))
        return created

    def list_upcoming(self, max_results: int = 10) -> list[dict]:
        params = {
            "timeMin": datetime.fromtimestamp(self.clock()).astimezone().isoformat(),
            "maxResults": max_results,
            "singleEvents": "true",
            "orderBy": "startTime",
        }
        payload = self._request("GET", self._events_url(), params=params).json()
        return payload.get("items", [])

    def update_event(self, event_id: str, event: CalendarEvent) -> dict:
        return self._request(
            "PUT", self._events_url(event_id), json=event.to_resource(self.time_zone)
        ).json()

    def delete_event(self, event_id: str) -> bool:
        self._request("DELETE", self._events_url(event_id))
        logger.info("Deleted calendar event %s", event_id)
        return True
