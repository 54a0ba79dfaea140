"""
Pydantic schemas for the gateway.

Request models only declare the columns a client may write. Unknown keys,
including any owner identifier, are ignored and never reach the store.
"""

from __future__ import annotations

from datetime import date
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ClientPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    def values(self) -> dict:
        """Only the fields the client actually sent."""
        return self.model_dump(exclude_unset=True)


class HealthResponse(BaseModel):
    status: Literal["ok"]
    timestamp: str
    service: str


class DeleteResponse(BaseModel):
    success: bool


class ErrorResponse(BaseModel):
    error: str
    message: Optional[str] = None
    details: Optional[str] = None


class UserProfileUpdate(ClientPayload):
    display_name: Optional[str] = Field(default=None, max_length=200)
    phone: Optional[str] = Field(default=None, max_length=64)
    emergency_contact: Optional[str] = Field(default=None, max_length=200)
    photo_url: Optional[str] = None


class VaultDocumentPayload(ClientPayload):
    title: Optional[str] = Field(default=None, max_length=500)
    category: Optional[str] = Field(default=None, max_length=100)
    description: Optional[str] = None
    file_url: Optional[str] = None
    storage_path: Optional[str] = None
    file_type: Optional[str] = Field(default=None, max_length=200)
    file_size: Optional[int] = Field(default=None, ge=0)


class JournalPayload(ClientPayload):
    title: Optional[str] = Field(default=None, max_length=500)
    content: Optional[str] = None
    type: Optional[str] = Field(default=None, max_length=100)
    mood: Optional[str] = Field(default=None, max_length=100)
    synced_to_calendar: Optional[bool] = None
    calendar_event_id: Optional[str] = None


class CareerGoalPayload(ClientPayload):
    title: Optional[str] = Field(default=None, max_length=500)
    description: Optional[str] = None
    status: Optional[str] = Field(default=None, max_length=100)
    priority: Optional[str] = Field(default=None, max_length=100)
    target_date: Optional[date] = None
    progress: Optional[int] = Field(default=None, ge=0, le=100)


class TrustedContactPayload(ClientPayload):
    name: Optional[str] = Field(default=None, max_length=200)
    phone: Optional[str] = Field(default=None, max_length=64)
    email: Optional[str] = Field(default=None, max_length=320)
    relationship: Optional[str] = Field(default=None, max_length=100)
    priority: Optional[int] = None


class SafetyAlertPayload(ClientPayload):
    alert_type: Optional[str] = Field(default=None, max_length=100)
    message: Optional[str] = None
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    status: Optional[str] = Field(default=None, max_length=100)


class FamilyGroupPayload(ClientPayload):
    name: Optional[str] = Field(default=None, max_length=200)
    description: Optional[str] = None


class FamilyTaskPayload(ClientPayload):
    title: Optional[str] = Field(default=None, max_length=500)
    description: Optional[str] = None
    assigned_to: Optional[str] = None
    completed: Optional[bool] = None

    @field_validator("completed")
    @classmethod
    def _completed_not_null(cls, value: Optional[bool]) -> bool:
        # The column is NOT NULL; omit the key to leave it unchanged.
        if value is None:
            raise ValueError("completed must be true or false")
        return value


class UploadUrlRequest(BaseModel):
    filename: str = Field(..., min_length=1, max_length=255)
    content_type: Optional[str] = None
    expires_in: int = Field(default=3600, ge=60, le=86400)


class UploadUrlResponse(BaseModel):
    url: str
    storage_path: str
    public_url: str


class SignUrlResponse(BaseModel):
    url: str
