"""
Database abstraction for Supabase Postgres and an in-memory test implementation.

Every owned-record operation takes the Principal's firebase_uid and uses it
as a mandatory predicate next to any other filter, so an id that belongs to
another Principal matches zero rows.
"""

from __future__ import annotations

import enum
import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Iterator, Optional, Protocol

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    Integer,
    String,
    Text,
    create_engine,
    delete,
    or_,
    select,
    text,
    update,
)
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from gateway.errors import StorageError

OWNER_COLUMN = "firebase_uid"
GROUP_OWNER_COLUMN = "created_by_firebase_uid"
MEMBER_SUMMARY_FIELDS = ("firebase_uid", "role", "status")


class RecordKind(str, enum.Enum):
    """Owned-record tables reachable through the scoped CRUD routes."""

    VAULT_DOCUMENTS = "vault_documents"
    JOURNALS = "journals"
    CAREER_GOALS = "career_goals"
    TRUSTED_CONTACTS = "trusted_contacts"
    SAFETY_ALERTS = "safety_alerts"


class DbClient(Protocol):
    """Interface for database access."""

    def get_user(self, firebase_uid: str) -> Optional[dict]:
        ...

    def create_user(self, firebase_uid: str, values: dict) -> dict:
        ...

    def update_user(self, firebase_uid: str, values: dict) -> Optional[dict]:
        ...

    def increment_user_points(self, firebase_uid: str, points: int) -> Optional[int]:
        ...

    def list_records(
        self, kind: RecordKind, firebase_uid: str, filters: Optional[dict] = None
    ) -> list[dict]:
        ...

    def get_record(
        self, kind: RecordKind, record_id: str, firebase_uid: str
    ) -> Optional[dict]:
        ...

    def insert_record(self, kind: RecordKind, firebase_uid: str, values: dict) -> dict:
        ...

    def update_record(
        self, kind: RecordKind, record_id: str, firebase_uid: str, values: dict
    ) -> Optional[dict]:
        ...

    def delete_record(self, kind: RecordKind, record_id: str, firebase_uid: str) -> int:
        ...

    def list_family_groups(self, firebase_uid: str) -> list[dict]:
        ...

    def create_family_group(self, firebase_uid: str, values: dict) -> dict:
        ...

    def is_family_member(self, group_id: str, firebase_uid: str) -> bool:
        ...

    def list_family_tasks(self, group_id: str) -> list[dict]:
        ...

    def create_family_task(self, group_id: str, firebase_uid: str, values: dict) -> dict:
        ...

    def update_family_task(
        self, task_id: str, firebase_uid: str, values: dict
    ) -> Optional[dict]:
        ...


@dataclass(frozen=True)
class RecordSpec:
    model: type
    order_by: str = "created_at"
    descending: bool = True


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


def _column_names(model) -> set[str]:
    return set(model.__table__.columns.keys())


def _check_columns(model, values: dict) -> None:
    known = _column_names(model)
    for key in values:
        if key not in known:
            raise StorageError(
                f"Could not find the '{key}' column of '{model.__tablename__}'"
            )


def _scalar_defaults(model) -> dict:
    defaults = {}
    for column in model.__table__.columns:
        if column.default is not None and column.default.is_scalar:
            defaults[column.name] = column.default.arg
    return defaults


def _new_row_values(model, values: dict, **server_values) -> dict:
    """Client values plus column defaults and server-assigned fields."""
    _check_columns(model, values)
    row = _scalar_defaults(model)
    row.update(values)
    now = _utcnow()
    row["id"] = _new_id()
    row["created_at"] = now
    if "updated_at" in _column_names(model):
        row["updated_at"] = now
    row.update(server_values)
    return row


def _compact(values: dict) -> dict:
    return {key: value for key, value in values.items() if value is not None}


def _row_to_dict(row) -> dict:
    return _compact(
        {column.name: getattr(row, column.key) for column in row.__table__.columns}
    )


def _ordered(rows: list[dict], order_by: str, descending: bool) -> list[dict]:
    def key(row: dict):
        value = row.get(order_by)
        return (value is None, value if value is not None else 0)

    # Later inserts come first among equal timestamps.
    source = list(reversed(rows)) if descending else list(rows)
    return sorted(source, key=key, reverse=descending)


class InMemoryDbClient:
    """Simple in-memory database for development and tests."""

    def __init__(self):
        self.tables: Dict[str, list[dict]] = {}

    def _table(self, model) -> list[dict]:
        return self.tables.setdefault(model.__tablename__, [])

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        self.tables.clear()

    def _find_user(self, firebase_uid: str) -> Optional[dict]:
        for row in self._table(UserRow):
            if row[OWNER_COLUMN] == firebase_uid:
                return row
        return None

    def _find_owned(self, model, record_id: str, firebase_uid: str) -> Optional[dict]:
        for row in self._table(model):
            if row["id"] == record_id and row[OWNER_COLUMN] == firebase_uid:
                return row
        return None

    def get_user(self, firebase_uid: str) -> Optional[dict]:
        row = self._find_user(firebase_uid)
        return _compact(row) if row else None

    def create_user(self, firebase_uid: str, values: dict) -> dict:
        if self._find_user(firebase_uid) is not None:
            raise StorageError(
                'duplicate key value violates unique constraint "users_firebase_uid_key"'
            )
        row = _new_row_values(UserRow, values, firebase_uid=firebase_uid)
        self._table(UserRow).append(row)
        return _compact(row)

    def update_user(self, firebase_uid: str, values: dict) -> Optional[dict]:
        _check_columns(UserRow, values)
        row = self._find_user(firebase_uid)
        if row is None:
            return None
        row.update(values)
        row["updated_at"] = _utcnow()
        return _compact(row)

    def increment_user_points(self, firebase_uid: str, points: int) -> Optional[int]:
        row = self._find_user(firebase_uid)
        if row is None:
            return None
        row["total_points"] = (row.get("total_points") or 0) + points
        return row["total_points"]

    def list_records(
        self, kind: RecordKind, firebase_uid: str, filters: Optional[dict] = None
    ) -> list[dict]:
        spec = RECORD_SPECS[RecordKind(kind)]
        filters = filters or {}
        _check_columns(spec.model, filters)
        rows = [
            row
            for row in self._table(spec.model)
            if row[OWNER_COLUMN] == firebase_uid
            and all(row.get(key) == value for key, value in filters.items())
        ]
        return [_compact(row) for row in _ordered(rows, spec.order_by, spec.descending)]

    def get_record(
        self, kind: RecordKind, record_id: str, firebase_uid: str
    ) -> Optional[dict]:
        row = self._find_owned(RECORD_SPECS[RecordKind(kind)].model, record_id, firebase_uid)
        return _compact(row) if row else None

    def insert_record(self, kind: RecordKind, firebase_uid: str, values: dict) -> dict:
        model = RECORD_SPECS[RecordKind(kind)].model
        row = _new_row_values(model, values, firebase_uid=firebase_uid)
        self._table(model).append(row)
        return _compact(row)

    def update_record(
        self, kind: RecordKind, record_id: str, firebase_uid: str, values: dict
    ) -> Optional[dict]:
        model = RECORD_SPECS[RecordKind(kind)].model
        _check_columns(model, values)
        row = self._find_owned(model, record_id, firebase_uid)
        if row is None:
            return None
        row.update(values)
        if "updated_at" in row:
            row["updated_at"] = _utcnow()
        return _compact(row)

    def delete_record(self, kind: RecordKind, record_id: str, firebase_uid: str) -> int:
        model = RECORD_SPECS[RecordKind(kind)].model
        table = self._table(model)
        row = self._find_owned(model, record_id, firebase_uid)
        if row is None:
            return 0
        table.remove(row)
        return 1

    def _members_of(self, group_id: str) -> list[dict]:
        return [
            member
            for member in self._table(FamilyMemberRow)
            if member["family_group_id"] == group_id
        ]

    def list_family_groups(self, firebase_uid: str) -> list[dict]:
        member_of = {
            member["family_group_id"]
            for member in self._table(FamilyMemberRow)
            if member["firebase_uid"] == firebase_uid
        }
        groups = [
            group
            for group in self._table(FamilyGroupRow)
            if group[GROUP_OWNER_COLUMN] == firebase_uid or group["id"] in member_of
        ]
        results = []
        for group in _ordered(groups, "created_at", True):
            payload = _compact(group)
            payload["family_members"] = [
                {key: member.get(key) for key in MEMBER_SUMMARY_FIELDS}
                for member in self._members_of(group["id"])
            ]
            results.append(payload)
        return results

    def create_family_group(self, firebase_uid: str, values: dict) -> dict:
        group = _new_row_values(
            FamilyGroupRow, values, created_by_firebase_uid=firebase_uid
        )
        member = _new_row_values(
            FamilyMemberRow,
            {},
            family_group_id=group["id"],
            firebase_uid=firebase_uid,
            role="admin",
            status="active",
        )
        self._table(FamilyGroupRow).append(group)
        self._table(FamilyMemberRow).append(member)
        return _compact(group)

    def is_family_member(self, group_id: str, firebase_uid: str) -> bool:
        for group in self._table(FamilyGroupRow):
            if group["id"] == group_id and group[GROUP_OWNER_COLUMN] == firebase_uid:
                return True
        return any(
            member["firebase_uid"] == firebase_uid
            for member in self._members_of(group_id)
        )

    def list_family_tasks(self, group_id: str) -> list[dict]:
        tasks = [
            task
            for task in self._table(FamilyTaskRow)
            if task["family_group_id"] == group_id
        ]
        return [_compact(task) for task in _ordered(tasks, "updated_at", True)]

    def create_family_task(self, group_id: str, firebase_uid: str, values: dict) -> dict:
        task = _new_row_values(
            FamilyTaskRow,
            values,
            family_group_id=group_id,
            firebase_uid=firebase_uid,
            updated_by=firebase_uid,
        )
        self._table(FamilyTaskRow).append(task)
        return _compact(task)

    def update_family_task(
        self, task_id: str, firebase_uid: str, values: dict
    ) -> Optional[dict]:
        _check_columns(FamilyTaskRow, values)
        for task in self._table(FamilyTaskRow):
            if task["id"] != task_id:
                continue
            if not self.is_family_member(task["family_group_id"], firebase_uid):
                return None
            task.update(values)
            task["updated_by"] = firebase_uid
            task["updated_at"] = _utcnow()
            return _compact(task)
        return None


_SET_REQUEST_UID = text("SELECT set_config('request.firebase_uid', :uid, true)")


def _describe(exc: SQLAlchemyError) -> str:
    return str(getattr(exc, "orig", None) or exc)


class PostgresDbClient:
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL (Supabase Postgres, or SQLite for tests).
    """

    def __init__(self, database_url: str):
        if not database_url:
            raise ValueError("DATABASE_URL is required for PostgresDbClient")
        self.engine = create_engine(
            database_url,
            future=True,
            pool_pre_ping=True,
            pool_recycle=1800,
        )
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        Base.metadata.create_all(self.engine)

    @contextmanager
    def _session(self, firebase_uid: Optional[str] = None) -> Iterator[Session]:
        """
        Open a session carrying the Principal as trust context.

        On Postgres the uid is exposed to row-level-security policies as the
        transaction-local setting request.firebase_uid.
        """
        try:
            with self.Session() as session:
                if firebase_uid and self.engine.dialect.name == "postgresql":
                    session.execute(_SET_REQUEST_UID, {"uid": firebase_uid})
                yield session
        except SQLAlchemyError as exc:
            raise StorageError(_describe(exc)) from exc

    @staticmethod
    def _owned(model, record_id: str, firebase_uid: str):
        return select(model).where(
            model.id == record_id, getattr(model, OWNER_COLUMN) == firebase_uid
        )

    def get_user(self, firebase_uid: str) -> Optional[dict]:
        with self._session(firebase_uid) as session:
            row = session.execute(
                select(UserRow).where(UserRow.firebase_uid == firebase_uid)
            ).scalar_one_or_none()
            return _row_to_dict(row) if row else None

    def create_user(self, firebase_uid: str, values: dict) -> dict:
        with self._session(firebase_uid) as session:
            row = UserRow(**_new_row_values(UserRow, values, firebase_uid=firebase_uid))
            session.add(row)
            session.commit()
            return _row_to_dict(row)

    def update_user(self, firebase_uid: str, values: dict) -> Optional[dict]:
        _check_columns(UserRow, values)
        with self._session(firebase_uid) as session:
            row = session.execute(
                select(UserRow).where(UserRow.firebase_uid == firebase_uid)
            ).scalar_one_or_none()
            if row is None:
                return None
            for key, value in values.items():
                setattr(row, key, value)
            row.updated_at = _utcnow()
            session.commit()
            return _row_to_dict(row)

    def increment_user_points(self, firebase_uid: str, points: int) -> Optional[int]:
        with self._session(firebase_uid) as session:
            session.execute(
                update(UserRow)
                .where(UserRow.firebase_uid == firebase_uid)
                .values(total_points=UserRow.total_points + points)
            )
            total = session.execute(
                select(UserRow.total_points).where(UserRow.firebase_uid == firebase_uid)
            ).scalar_one_or_none()
            session.commit()
            return total

    def list_records(
        self, kind: RecordKind, firebase_uid: str, filters: Optional[dict] = None
    ) -> list[dict]:
        spec = RECORD_SPECS[RecordKind(kind)]
        model = spec.model
        filters = filters or {}
        _check_columns(model, filters)
        stmt = select(model).where(getattr(model, OWNER_COLUMN) == firebase_uid)
        for key, value in filters.items():
            stmt = stmt.where(getattr(model, key) == value)
        column = getattr(model, spec.order_by)
        if spec.descending:
            stmt = stmt.order_by(column.desc().nulls_first())
        else:
            stmt = stmt.order_by(column.asc().nulls_last())
        with self._session(firebase_uid) as session:
            rows = session.execute(stmt).scalars().all()
            return [_row_to_dict(row) for row in rows]

    def get_record(
        self, kind: RecordKind, record_id: str, firebase_uid: str
    ) -> Optional[dict]:
        model = RECORD_SPECS[RecordKind(kind)].model
        with self._session(firebase_uid) as session:
            row = session.execute(
                self._owned(model, record_id, firebase_uid)
            ).scalar_one_or_none()
            return _row_to_dict(row) if row else None

    def insert_record(self, kind: RecordKind, firebase_uid: str, values: dict) -> dict:
        model = RECORD_SPECS[RecordKind(kind)].model
        with self._session(firebase_uid) as session:
            row = model(**_new_row_values(model, values, firebase_uid=firebase_uid))
            session.add(row)
            session.commit()
            return _row_to_dict(row)

    def update_record(
        self, kind: RecordKind, record_id: str, firebase_uid: str, values: dict
    ) -> Optional[dict]:
        model = RECORD_SPECS[RecordKind(kind)].model
        _check_columns(model, values)
        with self._session(firebase_uid) as session:
            row = session.execute(
                self._owned(model, record_id, firebase_uid)
            ).scalar_one_or_none()
            if row is None:
                return None
            for key, value in values.items():
                setattr(row, key, value)
            if hasattr(model, "updated_at"):
                row.updated_at = _utcnow()
            session.commit()
            return _row_to_dict(row)

    def delete_record(self, kind: RecordKind, record_id: str, firebase_uid: str) -> int:
        model = RECORD_SPECS[RecordKind(kind)].model
        with self._session(firebase_uid) as session:
            result = session.execute(
                delete(model).where(
                    model.id == record_id, getattr(model, OWNER_COLUMN) == firebase_uid
                )
            )
            session.commit()
            return result.rowcount or 0

    def list_family_groups(self, firebase_uid: str) -> list[dict]:
        member_of = select(FamilyMemberRow.family_group_id).where(
            FamilyMemberRow.firebase_uid == firebase_uid
        )
        stmt = (
            select(FamilyGroupRow)
            .where(
                or_(
                    FamilyGroupRow.created_by_firebase_uid == firebase_uid,
                    FamilyGroupRow.id.in_(member_of),
                )
            )
            .order_by(FamilyGroupRow.created_at.desc())
        )
        with self._session(firebase_uid) as session:
            groups = session.execute(stmt).scalars().all()
            group_ids = [group.id for group in groups]
            members = []
            if group_ids:
                members = (
                    session.execute(
                        select(FamilyMemberRow)
                        .where(FamilyMemberRow.family_group_id.in_(group_ids))
                        .order_by(FamilyMemberRow.created_at.asc())
                    )
                    .scalars()
                    .all()
                )
            results = []
            for group in groups:
                payload = _row_to_dict(group)
                payload["family_members"] = [
                    {key: getattr(member, key) for key in MEMBER_SUMMARY_FIELDS}
                    for member in members
                    if member.family_group_id == group.id
                ]
                results.append(payload)
            return results

    def create_family_group(self, firebase_uid: str, values: dict) -> dict:
        with self._session(firebase_uid) as session:
            group = FamilyGroupRow(
                **_new_row_values(
                    FamilyGroupRow, values, created_by_firebase_uid=firebase_uid
                )
            )
            member = FamilyMemberRow(
                **_new_row_values(
                    FamilyMemberRow,
                    {},
                    family_group_id=group.id,
                    firebase_uid=firebase_uid,
                    role="admin",
                    status="active",
                )
            )
            session.add_all([group, member])
            session.commit()
            return _row_to_dict(group)

    def _is_member(self, session: Session, group_id: str, firebase_uid: str) -> bool:
        creator = session.execute(
            select(FamilyGroupRow.id).where(
                FamilyGroupRow.id == group_id,
                FamilyGroupRow.created_by_firebase_uid == firebase_uid,
            )
        ).first()
        if creator:
            return True
        member = session.execute(
            select(FamilyMemberRow.id).where(
                FamilyMemberRow.family_group_id == group_id,
                FamilyMemberRow.firebase_uid == firebase_uid,
            )
        ).first()
        return member is not None

    def is_family_member(self, group_id: str, firebase_uid: str) -> bool:
        with self._session(firebase_uid) as session:
            return self._is_member(session, group_id, firebase_uid)

    def list_family_tasks(self, group_id: str) -> list[dict]:
        with self._session() as session:
            rows = (
                session.execute(
                    select(FamilyTaskRow)
                    .where(FamilyTaskRow.family_group_id == group_id)
                    .order_by(FamilyTaskRow.updated_at.desc())
                )
                .scalars()
                .all()
            )
            return [_row_to_dict(row) for row in rows]

    def create_family_task(self, group_id: str, firebase_uid: str, values: dict) -> dict:
        with self._session(firebase_uid) as session:
            row = FamilyTaskRow(
                **_new_row_values(
                    FamilyTaskRow,
                    values,
                    family_group_id=group_id,
                    firebase_uid=firebase_uid,
                    updated_by=firebase_uid,
                )
            )
            session.add(row)
            session.commit()
            return _row_to_dict(row)

    def update_family_task(
        self, task_id: str, firebase_uid: str, values: dict
    ) -> Optional[dict]:
        _check_columns(FamilyTaskRow, values)
        with self._session(firebase_uid) as session:
            row = session.get(FamilyTaskRow, task_id)
            if row is None or not self._is_member(
                session, row.family_group_id, firebase_uid
            ):
                return None
            for key, value in values.items():
                setattr(row, key, value)
            row.updated_by = firebase_uid
            row.updated_at = _utcnow()
            session.commit()
            return _row_to_dict(row)


Base = declarative_base()


class UserRow(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True)
    firebase_uid = Column(String, nullable=False, unique=True, index=True)
    email = Column(String, nullable=True)
    display_name = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    emergency_contact = Column(String, nullable=True)
    photo_url = Column(String, nullable=True)
    total_points = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)


class VaultDocumentRow(Base):
    __tablename__ = "vault_documents"

    id = Column(String, primary_key=True)
    firebase_uid = Column(String, nullable=False, index=True)
    title = Column(String, nullable=True)
    category = Column(String, nullable=True, index=True)
    description = Column(Text, nullable=True)
    file_url = Column(String, nullable=True)
    storage_path = Column(String, nullable=True)
    file_type = Column(String, nullable=True)
    file_size = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)


class JournalRow(Base):
    __tablename__ = "journals"

    id = Column(String, primary_key=True)
    firebase_uid = Column(String, nullable=False, index=True)
    title = Column(String, nullable=True)
    content = Column(Text, nullable=True)
    type = Column(String, nullable=True, index=True)
    mood = Column(String, nullable=True)
    synced_to_calendar = Column(Boolean, nullable=True)
    calendar_event_id = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)


class CareerGoalRow(Base):
    __tablename__ = "career_goals"

    id = Column(String, primary_key=True)
    firebase_uid = Column(String, nullable=False, index=True)
    title = Column(String, nullable=True)
    description = Column(Text, nullable=True)
    status = Column(String, nullable=True, index=True)
    priority = Column(String, nullable=True)
    target_date = Column(Date, nullable=True)
    progress = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)


class TrustedContactRow(Base):
    __tablename__ = "trusted_contacts"

    id = Column(String, primary_key=True)
    firebase_uid = Column(String, nullable=False, index=True)
    name = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    email = Column(String, nullable=True)
    relationship = Column(String, nullable=True)
    priority = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)


class SafetyAlertRow(Base):
    __tablename__ = "safety_alerts"

    id = Column(String, primary_key=True)
    firebase_uid = Column(String, nullable=False, index=True)
    alert_type = Column(String, nullable=True)
    message = Column(Text, nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    status = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)


class FamilyGroupRow(Base):
    __tablename__ = "family_groups"

    id = Column(String, primary_key=True)
    created_by_firebase_uid = Column(String, nullable=False, index=True)
    name = Column(String, nullable=True)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)


class FamilyMemberRow(Base):
    __tablename__ = "family_members"

    id = Column(String, primary_key=True)
    family_group_id = Column(String, nullable=False, index=True)
    firebase_uid = Column(String, nullable=False, index=True)
    role = Column(String, nullable=False, default="member")
    status = Column(String, nullable=False, default="active")
    created_at = Column(DateTime(timezone=True), nullable=False)


class FamilyTaskRow(Base):
    __tablename__ = "family_tasks"

    id = Column(String, primary_key=True)
    family_group_id = Column(String, nullable=False, index=True)
    firebase_uid = Column(String, nullable=False, index=True)
    title = Column(String, nullable=True)
    description = Column(Text, nullable=True)
    assigned_to = Column(String, nullable=True)
    completed = Column(Boolean, nullable=False, default=False)
    updated_by = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)


RECORD_SPECS: Dict[RecordKind, RecordSpec] = {
    RecordKind.VAULT_DOCUMENTS: RecordSpec(VaultDocumentRow),
    RecordKind.JOURNALS: RecordSpec(JournalRow),
    RecordKind.CAREER_GOALS: RecordSpec(CareerGoalRow),
    RecordKind.TRUSTED_CONTACTS: RecordSpec(
        TrustedContactRow, order_by="priority", descending=False
    ),
    RecordKind.SAFETY_ALERTS: RecordSpec(SafetyAlertRow),
}
