"""
HTTP routes for the gateway API.

Every protected route depends on get_principal, so a request without a
verified token never reaches the database client.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Query

from gateway.auth import Principal, scrub_client_fields
from gateway.config import Settings
from gateway.db import GROUP_OWNER_COLUMN, OWNER_COLUMN, DbClient, RecordKind
from gateway.dependencies import (
    get_app_settings,
    get_db_client,
    get_principal,
    get_storage_client,
)
from gateway.errors import BadRequest, NotFound, StorageError
from gateway.schemas import (
    CareerGoalPayload,
    ClientPayload,
    DeleteResponse,
    ErrorResponse,
    FamilyGroupPayload,
    FamilyTaskPayload,
    HealthResponse,
    JournalPayload,
    SafetyAlertPayload,
    SignUrlResponse,
    TrustedContactPayload,
    UploadUrlRequest,
    UploadUrlResponse,
    UserProfileUpdate,
    VaultDocumentPayload,
)
from gateway.storage import StorageClient, build_object_path, is_owned_path

logger = logging.getLogger(__name__)

ERROR_RESPONSES = {
    401: {"model": ErrorResponse, "description": "No bearer token"},
    403: {"model": ErrorResponse, "description": "Token rejected by Firebase"},
    500: {"model": ErrorResponse, "description": "Storage failure"},
}

router = APIRouter(responses=ERROR_RESPONSES)

ALL_CATEGORIES = "all"


def _owned_values(payload: ClientPayload, owner_column: str = OWNER_COLUMN) -> dict:
    return scrub_client_fields(payload.values(), [owner_column])


def _choice_filter(column: str, value: Optional[str], *, all_value: Optional[str] = None) -> Optional[dict]:
    if not value or value == all_value:
        return None
    return {column: value}


def _award_points(db: DbClient, principal: Principal, points: int, reason: str) -> None:
    """Gamification bookkeeping; a failure never fails the primary write."""
    if points <= 0:
        return
    try:
        _ensure_profile(db, principal)
        total = db.increment_user_points(principal.uid, points)
    except StorageError as exc:
        logger.warning(
            "Could not award %d points to %s for %s: %s",
            points,
            principal.uid,
            reason,
            exc.message,
        )
        return
    if total is None:
        logger.warning(
            "No profile for %s; %d points for %s were not recorded",
            principal.uid,
            points,
            reason,
        )


def _check_storage_path(principal: Principal, values: dict) -> None:
    path = values.get("storage_path")
    if path and not is_owned_path(principal.uid, path):
        raise BadRequest("storage_path must point at one of your own files")


def _ensure_profile(db: DbClient, principal: Principal) -> dict:
    profile = db.get_user(principal.uid)
    if profile is not None:
        return profile
    values = {
        "email": principal.email,
        "display_name": principal.default_display_name(),
        "phone": principal.phone_number,
    }
    logger.info("Creating profile for %s", principal.uid)
    try:
        return db.create_user(
            principal.uid, {key: value for key, value in values.items() if value is not None}
        )
    except StorageError:
        # A concurrent first request may have created it already.
        profile = db.get_user(principal.uid)
        if profile is None:
            raise
        return profile


@router.get("/health", response_model=HealthResponse)
def health(settings: Settings = Depends(get_app_settings)):
    timestamp = datetime.now(timezone.utc).isoformat(timespec="milliseconds")
    return HealthResponse(
        status="ok",
        timestamp=timestamp.replace("+00:00", "Z"),
        service=settings.service_name,
    )


# User profile


@router.get("/user/profile")
def get_user_profile(
    principal: Principal = Depends(get_principal),
    db: DbClient = Depends(get_db_client),
):
    """Return the caller's profile, creating it from the token claims on first use."""
    return _ensure_profile(db, principal)


@router.put("/user/profile")
def update_user_profile(
    payload: UserProfileUpdate,
    principal: Principal = Depends(get_principal),
    db: DbClient = Depends(get_db_client),
):
    values = scrub_client_fields(payload.values(), [OWNER_COLUMN, "total_points"])
    profile = _ensure_profile(db, principal)
    if not values:
        return profile
    return db.update_user(principal.uid, values)


# Vault documents


@router.get("/vault/documents")
def list_vault_documents(
    category: Optional[str] = Query(None),
    principal: Principal = Depends(get_principal),
    db: DbClient = Depends(get_db_client),
):
    return db.list_records(
        RecordKind.VAULT_DOCUMENTS,
        principal.uid,
        _choice_filter("category", category, all_value=ALL_CATEGORIES),
    )


@router.post("/vault/documents")
def create_vault_document(
    payload: VaultDocumentPayload,
    principal: Principal = Depends(get_principal),
    db: DbClient = Depends(get_db_client),
    settings: Settings = Depends(get_app_settings),
):
    values = _owned_values(payload)
    _check_storage_path(principal, values)
    document = db.insert_record(RecordKind.VAULT_DOCUMENTS, principal.uid, values)
    _award_points(db, principal, settings.vault_document_points, "vault document")
    return document


@router.put("/vault/documents/{document_id}")
def update_vault_document(
    document_id: str,
    payload: VaultDocumentPayload,
    principal: Principal = Depends(get_principal),
    db: DbClient = Depends(get_db_client),
):
    values = _owned_values(payload)
    _check_storage_path(principal, values)
    return db.update_record(RecordKind.VAULT_DOCUMENTS, document_id, principal.uid, values)


@router.delete("/vault/documents/{document_id}", response_model=DeleteResponse)
def delete_vault_document(
    document_id: str,
    principal: Principal = Depends(get_principal),
    db: DbClient = Depends(get_db_client),
    storage: StorageClient = Depends(get_storage_client),
):
    document = db.get_record(RecordKind.VAULT_DOCUMENTS, document_id, principal.uid)
    deleted = db.delete_record(RecordKind.VAULT_DOCUMENTS, document_id, principal.uid)
    path = (document or {}).get("storage_path")
    if deleted and path and is_owned_path(principal.uid, path):
        try:
            storage.delete_object(path)
        except StorageError as exc:
            logger.warning("Could not remove stored file %s: %s", path, exc.message)
    return DeleteResponse(success=True)


@router.post("/vault/upload-url", response_model=UploadUrlResponse)
def create_vault_upload_url(
    payload: UploadUrlRequest,
    principal: Principal = Depends(get_principal),
    storage: StorageClient = Depends(get_storage_client),
):
    """Presigned PUT for a new vault file under the caller's own prefix."""
    path = build_object_path(principal.uid, payload.filename)
    url = storage.presign_put(
        path, expires_in=payload.expires_in, content_type=payload.content_type
    )
    return UploadUrlResponse(url=url, storage_path=path, public_url=storage.public_url(path))


@router.get("/vault/documents/{document_id}/download-url", response_model=SignUrlResponse)
def get_vault_download_url(
    document_id: str,
    expires_in: int = Query(3600, ge=60, le=86400),
    principal: Principal = Depends(get_principal),
    db: DbClient = Depends(get_db_client),
    storage: StorageClient = Depends(get_storage_client),
):
    document = db.get_record(RecordKind.VAULT_DOCUMENTS, document_id, principal.uid)
    path = (document or {}).get("storage_path")
    if not path or not is_owned_path(principal.uid, path):
        raise NotFound("Document file not found")
    return SignUrlResponse(url=storage.presign_get(path, expires_in=expires_in))


# Journals


@router.get("/journals")
def list_journals(
    type: Optional[str] = Query(None),
    principal: Principal = Depends(get_principal),
    db: DbClient = Depends(get_db_client),
):
    return db.list_records(
        RecordKind.JOURNALS,
        principal.uid,
        _choice_filter("type", type, all_value=ALL_CATEGORIES),
    )


@router.post("/journals")
def create_journal(
    payload: JournalPayload,
    principal: Principal = Depends(get_principal),
    db: DbClient = Depends(get_db_client),
    settings: Settings = Depends(get_app_settings),
):
    journal = db.insert_record(RecordKind.JOURNALS, principal.uid, _owned_values(payload))
    _award_points(db, principal, settings.journal_points, "journal entry")
    return journal


@router.delete("/journals/{journal_id}", response_model=DeleteResponse)
def delete_journal(
    journal_id: str,
    principal: Principal = Depends(get_principal),
    db: DbClient = Depends(get_db_client),
):
    db.delete_record(RecordKind.JOURNALS, journal_id, principal.uid)
    return DeleteResponse(success=True)


# Career goals


@router.get("/career/goals")
def list_career_goals(
    status: Optional[str] = Query(None),
    principal: Principal = Depends(get_principal),
    db: DbClient = Depends(get_db_client),
):
    return db.list_records(
        RecordKind.CAREER_GOALS, principal.uid, _choice_filter("status", status)
    )


@router.post("/career/goals")
def create_career_goal(
    payload: CareerGoalPayload,
    principal: Principal = Depends(get_principal),
    db: DbClient = Depends(get_db_client),
):
    return db.insert_record(RecordKind.CAREER_GOALS, principal.uid, _owned_values(payload))


@router.put("/career/goals/{goal_id}")
def update_career_goal(
    goal_id: str,
    payload: CareerGoalPayload,
    principal: Principal = Depends(get_principal),
    db: DbClient = Depends(get_db_client),
):
    return db.update_record(
        RecordKind.CAREER_GOALS, goal_id, principal.uid, _owned_values(payload)
    )


# Safety


@router.get("/safety/contacts")
def list_trusted_contacts(
    principal: Principal = Depends(get_principal),
    db: DbClient = Depends(get_db_client),
):
    return db.list_records(RecordKind.TRUSTED_CONTACTS, principal.uid)


@router.post("/safety/contacts")
def add_trusted_contact(
    payload: TrustedContactPayload,
    principal: Principal = Depends(get_principal),
    db: DbClient = Depends(get_db_client),
):
    return db.insert_record(
        RecordKind.TRUSTED_CONTACTS, principal.uid, _owned_values(payload)
    )


@router.post("/safety/alerts")
def create_safety_alert(
    payload: SafetyAlertPayload,
    principal: Principal = Depends(get_principal),
    db: DbClient = Depends(get_db_client),
):
    alert = db.insert_record(RecordKind.SAFETY_ALERTS, principal.uid, _owned_values(payload))
    logger.info("Safety alert %s raised by %s", alert.get("id"), principal.uid)
    return alert


# Family collaboration


@router.get("/family/groups")
def list_family_groups(
    principal: Principal = Depends(get_principal),
    db: DbClient = Depends(get_db_client),
):
    return db.list_family_groups(principal.uid)


@router.post("/family/groups")
def create_family_group(
    payload: FamilyGroupPayload,
    principal: Principal = Depends(get_principal),
    db: DbClient = Depends(get_db_client),
):
    return db.create_family_group(
        principal.uid, _owned_values(payload, GROUP_OWNER_COLUMN)
    )


@router.get("/family/groups/{group_id}/tasks")
def list_family_tasks(
    group_id: str,
    principal: Principal = Depends(get_principal),
    db: DbClient = Depends(get_db_client),
):
    if not db.is_family_member(group_id, principal.uid):
        return []
    return db.list_family_tasks(group_id)


@router.post("/family/groups/{group_id}/tasks")
def create_family_task(
    group_id: str,
    payload: FamilyTaskPayload,
    principal: Principal = Depends(get_principal),
    db: DbClient = Depends(get_db_client),
):
    if not db.is_family_member(group_id, principal.uid):
        raise NotFound("Family group not found")
    values = scrub_client_fields(
        payload.values(), [OWNER_COLUMN, "family_group_id", "updated_by"]
    )
    return db.create_family_task(group_id, principal.uid, values)


@router.put("/family/tasks/{task_id}")
def update_family_task(
    task_id: str,
    payload: FamilyTaskPayload,
    principal: Principal = Depends(get_principal),
    db: DbClient = Depends(get_db_client),
):
    values = scrub_client_fields(
        payload.values(), [OWNER_COLUMN, "family_group_id", "updated_by"]
    )
    return db.update_family_task(task_id, principal.uid, values)
