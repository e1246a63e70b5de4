"""
Document store abstraction for Firebase Realtime Database, SQL and an
in-memory test implementation.

Records are JSON-compatible dicts addressed by (collection, record_id), the
same shape as children of a Realtime Database node.
"""

from __future__ import annotations

import copy
import json
import logging
import threading
import time
import uuid
from typing import Any, Dict, Optional, Protocol

import firebase_admin
from firebase_admin import credentials
from firebase_admin import db as firebase_db
from sqlalchemy import JSON, Column, Float, String, create_engine, select
from sqlalchemy.orm import Session, declarative_base, sessionmaker

logger = logging.getLogger(__name__)


class DbClient(Protocol):
    """Interface for database access."""

    def list_records(self, collection: str) -> Dict[str, dict]:
        ...

    def get_record(self, collection: str, record_id: str) -> Optional[dict]:
        ...

    def find_records(self, collection: str, field: str, value: Any) -> Dict[str, dict]:
        ...

    def create_record(self, collection: str, data: dict) -> str:
        ...

    def replace_record(self, collection: str, record_id: str, data: dict) -> bool:
        ...

    def update_record(
        self, collection: str, record_id: str, changes: dict
    ) -> Optional[dict]:
        ...

    def delete_record(self, collection: str, record_id: str) -> bool:
        ...

    def increment_field(
        self, collection: str, record_id: str, field: str, amount: int = 1
    ) -> Optional[int]:
        ...


def _new_record_id() -> str:
    # Time-prefixed so ids sort roughly by creation, like Firebase push keys.
    return f"{int(time.time() * 1000):013x}{uuid.uuid4().hex[:12]}"


class InMemoryDbClient:
    """Simple in-memory database for development and tests."""

    def __init__(self):
        self.collections: Dict[str, Dict[str, dict]] = {}
        self._lock = threading.Lock()

    def _collection(self, collection: str) -> Dict[str, dict]:
        return self.collections.setdefault(collection, {})

    def list_records(self, collection: str) -> Dict[str, dict]:
        return copy.deepcopy(self._collection(collection))

    def get_record(self, collection: str, record_id: str) -> Optional[dict]:
        record = self._collection(collection).get(record_id)
        return copy.deepcopy(record) if record is not None else None

    def find_records(self, collection: str, field: str, value: Any) -> Dict[str, dict]:
        return {
            record_id: copy.deepcopy(data)
            for record_id, data in self._collection(collection).items()
            if data.get(field) == value
        }

    def create_record(self, collection: str, data: dict) -> str:
        record_id = _new_record_id()
        self._collection(collection)[record_id] = copy.deepcopy(data)
        return record_id

    def replace_record(self, collection: str, record_id: str, data: dict) -> bool:
        records = self._collection(collection)
        if record_id not in records:
            return False
        records[record_id] = copy.deepcopy(data)
        return True

    def update_record(
        self, collection: str, record_id: str, changes: dict
    ) -> Optional[dict]:
        record = self._collection(collection).get(record_id)
        if record is None:
            return None
        for key, value in changes.items():
            if value is None:
                record.pop(key, None)
            else:
                record[key] = copy.deepcopy(value)
        return copy.deepcopy(record)

    def delete_record(self, collection: str, record_id: str) -> bool:
        return self._collection(collection).pop(record_id, None) is not None

    def increment_field(
        self, collection: str, record_id: str, field: str, amount: int = 1
    ) -> Optional[int]:
        with self._lock:
            record = self._collection(collection).get(record_id)
            if record is None:
                return None
            record[field] = int(record.get(field) or 0) + amount
            return record[field]

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        self.collections.clear()


class FirebaseDbClient:
    """
    Firebase Realtime Database implementation backed by firebase_admin.
    """

    APP_NAME = "pastry-news"

    def __init__(
        self,
        database_url: str,
        *,
        service_account: Optional[dict] = None,
        credentials_file: Optional[str] = None,
        root_path: str = "",
    ):
        if not database_url:
            raise ValueError("FIREBASE_DATABASE_URL is required for FirebaseDbClient")
        self.root_path = root_path.strip("/")
        self.app = self._get_or_init_app(database_url, service_account, credentials_file)

    @classmethod
    def _get_or_init_app(
        cls,
        database_url: str,
        service_account: Optional[dict],
        credentials_file: Optional[str],
    ) -> firebase_admin.App:
        try:
            return firebase_admin.get_app(cls.APP_NAME)
        except ValueError:
            pass
        if service_account:
            cred = credentials.Certificate(service_account)
        elif credentials_file:
            cred = credentials.Certificate(credentials_file)
        else:
            cred = credentials.ApplicationDefault()
        logger.info("Initializing Firebase app for %s", database_url)
        return firebase_admin.initialize_app(
            cred, {"databaseURL": database_url}, name=cls.APP_NAME
        )

    def _ref(self, *parts: str):
        path = "/".join(p for p in (self.root_path, *parts) if p)
        return firebase_db.reference(f"/{path}", app=self.app)

    @staticmethod
    def _as_mapping(value: Any) -> Dict[str, dict]:
        if not value:
            return {}
        if isinstance(value, list):
            # RTDB returns arrays for nodes with sequential integer keys.
            return {str(i): v for i, v in enumerate(value) if v is not None}
        return dict(value)

    def list_records(self, collection: str) -> Dict[str, dict]:
        return self._as_mapping(self._ref(collection).get())

    def get_record(self, collection: str, record_id: str) -> Optional[dict]:
        return self._ref(collection, record_id).get()

    def find_records(self, collection: str, field: str, value: Any) -> Dict[str, dict]:
        snapshot = self._ref(collection).order_by_child(field).equal_to(value).get()
        return self._as_mapping(snapshot)

    def create_record(self, collection: str, data: dict) -> str:
        return self._ref(collection).push(data).key

    def replace_record(self, collection: str, record_id: str, data: dict) -> bool:
        ref = self._ref(collection, record_id)
        if ref.get(shallow=True) is None:
            return False
        ref.set(data)
        return True

    def update_record(
        self, collection: str, record_id: str, changes: dict
    ) -> Optional[dict]:
        ref = self._ref(collection, record_id)
        if ref.get(shallow=True) is None:
            return None
        # A None value deletes the child, matching RTDB update semantics.
        ref.update(changes)
        return ref.get()

    def delete_record(self, collection: str, record_id: str) -> bool:
        ref = self._ref(collection, record_id)
        if ref.get(shallow=True) is None:
            return False
        ref.delete()
        return True

    def increment_field(
        self, collection: str, record_id: str, field: str, amount: int = 1
    ) -> Optional[int]:
        if self._ref(collection, record_id).get(shallow=True) is None:
            return None
        return self._ref(collection, record_id, field).transaction(
            lambda current: int(current or 0) + amount
        )


class SqlDbClient:
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL (e.g., Postgres or SQLite for tests).
    """

    def __init__(self, database_url: str):
        if not database_url:
            raise ValueError("DATABASE_URL is required for SqlDbClient")
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

    def list_records(self, collection: str) -> Dict[str, dict]:
        with self.Session() as session:
            stmt = (
                select(DocumentRow)
                .where(DocumentRow.collection == collection)
                .order_by(DocumentRow.created_at.asc())
            )
            rows = session.execute(stmt).scalars().all()
            return {row.record_id: dict(row.data) for row in rows}

    def get_record(self, collection: str, record_id: str) -> Optional[dict]:
        with self.Session() as session:
            row = session.get(DocumentRow, (collection, record_id))
            return dict(row.data) if row else None

    def find_records(self, collection: str, field: str, value: Any) -> Dict[str, dict]:
        # JSON path operators differ between backends; filter in Python.
        return {
            record_id: data
            for record_id, data in self.list_records(collection).items()
            if data.get(field) == value
        }

    def create_record(self, collection: str, data: dict) -> str:
        now = time.time()
        record_id = _new_record_id()
        with self.Session() as session:
            session.add(
                DocumentRow(
                    collection=collection,
                    record_id=record_id,
                    data=_json_copy(data),
                    created_at=now,
                    updated_at=now,
                )
            )
            session.commit()
        return record_id

    def replace_record(self, collection: str, record_id: str, data: dict) -> bool:
        with self.Session() as session:
            row = session.get(DocumentRow, (collection, record_id))
            if not row:
                return False
            row.data = _json_copy(data)
            row.updated_at = time.time()
            session.commit()
            return True

    def update_record(
        self, collection: str, record_id: str, changes: dict
    ) -> Optional[dict]:
        with self.Session() as session:
            row = session.get(DocumentRow, (collection, record_id))
            if not row:
                return None
            merged = dict(row.data)
            for key, value in changes.items():
                if value is None:
                    merged.pop(key, None)
                else:
                    merged[key] = value
            # Assign a new object so SQLAlchemy detects the JSON change.
            row.data = _json_copy(merged)
            row.updated_at = time.time()
            session.commit()
            return dict(row.data)

    def delete_record(self, collection: str, record_id: str) -> bool:
        with self.Session() as session:
            row = session.get(DocumentRow, (collection, record_id))
            if not row:
                return False
            session.delete(row)
            session.commit()
            return True

    def increment_field(
        self, collection: str, record_id: str, field: str, amount: int = 1
    ) -> Optional[int]:
        with self.Session() as session:
            stmt = (
                select(DocumentRow)
                .where(
                    DocumentRow.collection == collection,
                    DocumentRow.record_id == record_id,
                )
                .with_for_update()
            )
            row = session.execute(stmt).scalar_one_or_none()
            if not row:
                return None
            data = dict(row.data)
            data[field] = int(data.get(field) or 0) + amount
            row.data = data
            row.updated_at = time.time()
            session.commit()
            return data[field]


def _json_copy(data: dict) -> dict:
    return json.loads(json.dumps(data))


Base = declarative_base()


class DocumentRow(Base):
    __tablename__ = "documents"

    collection = Column(String, primary_key=True)
    record_id = Column(String, primary_key=True)
    data = Column(JSON, nullable=False)
    created_at = Column(Float, nullable=False)
    updated_at = Column(Float, nullable=False)
