"""
Authenticated client for the gateway HTTP API.

Every call fetches a fresh identity token from token_provider and sends it as
a bearer token; the gateway derives the owner from it, so no method takes a
user id.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

import requests

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:3001"
REQUEST_TIMEOUT = 30  # seconds


class ApiError(Exception):
    def __init__(self, status: int, message: str, error: Optional[str] = None):
        super().__init__(message)
        self.status = status
        self.message = message
        self.error = error


class GatewayClient:
    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        token_provider: Optional[Callable[[], str]] = None,
        session: Optional[requests.Session] = None,
        api_prefix: str = "/api",
    ):
        self.base_url = base_url.rstrip("/")
        self.api_prefix = api_prefix
        self.token_provider = token_provider
        self.session = session or requests.Session()

    def _url(self, endpoint: str) -> str:
        return f"{self.base_url}{self.api_prefix}{endpoint}"

    def _request(self, method: str, endpoint: str, *, auth: bool = True, **kwargs):
        headers = {"Content-Type": "application/json"}
        if auth:
            if self.token_provider is None:
                raise ApiError(401, "No authenticated user", "Unauthorized")
            headers["Authorization"] = f"Bearer {self.token_provider()}"
        response = self.session.request(
            method,
            self._url(endpoint),
            headers=headers,
            timeout=REQUEST_TIMEOUT,
            **kwargs,
        )
        if not response.ok:
            raise self._error_from(response)
        return response.json()

    @staticmethod
    def _error_from(response: requests.Response) -> ApiError:
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        message = body.get("message") or body.get("error") or "API request failed"
        logger.warning(
            "API %s %s -> %s: %s",
            response.request.method if response.request else "?",
            response.url,
            response.status_code,
            message,
        )
        return ApiError(response.status_code, message, body.get("error"))

    @staticmethod
    def _filter(name: str, value: Optional[str]) -> Optional[dict]:
        return {name: value} if value else None

    # Health

    def health(self) -> dict:
        return self._request("GET", "/health", auth=False)

    # User profile

    def get_profile(self) -> dict:
        return self._request("GET", "/user/profile")

    def update_profile(self, updates: dict) -> dict:
        return self._request("PUT", "/user/profile", json=updates)

    # Vault

    def get_documents(self, category: Optional[str] = None) -> list:
        return self._request(
            "GET", "/vault/documents", params=self._filter("category", category)
        )

    def create_document(self, document: dict) -> dict:
        return self._request("POST", "/vault/documents", json=document)

    def update_document(self, document_id: str, updates: dict) -> Optional[dict]:
        return self._request("PUT", f"/vault/documents/{document_id}", json=updates)

    def delete_document(self, document_id: str) -> dict:
        return self._request("DELETE", f"/vault/documents/{document_id}")

    def create_upload_url(
        self, filename: str, content_type: Optional[str] = None, expires_in: int = 3600
    ) -> dict:
        payload = {"filename": filename, "expires_in": expires_in}
        if content_type:
            payload["content_type"] = content_type
        return self._request("POST", "/vault/upload-url", json=payload)

    def get_download_url(self, document_id: str, expires_in: int = 3600) -> dict:
        return self._request(
            "GET",
            f"/vault/documents/{document_id}/download-url",
            params={"expires_in": expires_in},
        )

    # Journals

    def get_journals(self, type: Optional[str] = None) -> list:
        return self._request("GET", "/journals", params=self._filter("type", type))

    def create_journal(self, journal: dict) -> dict:
        return self._request("POST", "/journals", json=journal)

    def delete_journal(self, journal_id: str) -> dict:
        return self._request("DELETE", f"/journals/{journal_id}")

    # Career

    def get_goals(self, status: Optional[str] = None) -> list:
        return self._request("GET", "/career/goals", params=self._filter("status", status))

    def create_goal(self, goal: dict) -> dict:
        return self._request("POST", "/career/goals", json=goal)

    def update_goal(self, goal_id: str, updates: dict) -> Optional[dict]:
        return self._request("PUT", f"/career/goals/{goal_id}", json=updates)

    # Safety

    def get_contacts(self) -> list:
        return self._request("GET", "/safety/contacts")

    def add_contact(self, contact: dict) -> dict:
        return self._request("POST", "/safety/contacts", json=contact)

    def create_alert(self, alert: dict) -> dict:
        return self._request("POST", "/safety/alerts", json=alert)

    # Family

    def get_groups(self) -> list:
        return self._request("GET", "/family/groups")

    def create_group(self, group: dict) -> dict:
        return self._request("POST", "/family/groups", json=group)

    def get_tasks(self, group_id: str) -> list:
        return self._request("GET", f"/family/groups/{group_id}/tasks")

    def create_task(self, group_id: str, task: dict) -> dict:
        return self._request("POST", f"/family/groups/{group_id}/tasks", json=task)

    def update_task(self, task_id: str, updates: dict) -> Optional[dict]:
        return self._request("PUT", f"/family/tasks/{task_id}", json=updates)
