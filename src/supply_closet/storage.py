"""Persistence gateways for the locations and items records."""
from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional
import json
import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from .config import Settings
from .database import StoredRecord, build_engine, build_session_factory
from .exceptions import StorageError

logger = logging.getLogger(__name__)

LOCATIONS_RECORD = "locations"
ITEMS_RECORD = "items"
RECORD_NAMES = (LOCATIONS_RECORD, ITEMS_RECORD)

DEFAULT_LOCATIONS: List[Dict[str, Any]] = [
    {"id": "loc1", "name": "Main Distribution Hub"},
    {"id": "loc2", "name": "Mobile Unit A"},
]

Records = Dict[str, List[Dict[str, Any]]]


def default_locations() -> List[Dict[str, Any]]:
    return [dict(record) for record in DEFAULT_LOCATIONS]


def _check_collection(name: str, value: Any) -> Optional[List[Dict[str, Any]]]:
    if value is None:
        return None
    if not isinstance(value, list):
        raise StorageError(f"Record '{name}' is not a list")
    return value


class RecordStorage(ABC):
    """Reads and writes named JSON-compatible collections."""

    @abstractmethod
    def read(self, name: str) -> Optional[List[Dict[str, Any]]]:
        """Return the stored collection, or ``None`` when it was never written."""

    @abstractmethod
    def write_all(self, records: Mapping[str, List[Dict[str, Any]]]) -> None:
        """Replace every given collection in a single write."""

    def close(self) -> None:
        """Release any held resources."""


class JsonFileStorage(RecordStorage):
    """Keeps every record in one JSON document, replaced atomically on write."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def _read_document(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            logger.error("Could not read %s: %s", self.path, exc)
            raise StorageError(f"Could not read {self.path}: {exc}") from exc
        if not raw.strip():
            return {}
        try:
            document = json.loads(raw)
        except json.JSONDecodeError as exc:
            logger.error("Corrupt inventory file %s", self.path)
            raise StorageError(f"{self.path} does not contain valid JSON: {exc}") from exc
        if not isinstance(document, dict):
            raise StorageError(f"{self.path} does not contain a JSON object")
        return document

    def read(self, name: str) -> Optional[List[Dict[str, Any]]]:
        return _check_collection(name, self._read_document().get(name))

    def write_all(self, records: Mapping[str, List[Dict[str, Any]]]) -> None:
        document = self._read_document()
        document.update(records)
        temp_path = self.path.with_suffix(".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            temp_path.write_text(
                json.dumps(document, indent=2, ensure_ascii=False), encoding="utf-8"
            )
            temp_path.replace(self.path)
        except OSError as exc:
            logger.error("Could not write %s: %s", self.path, exc)
            raise StorageError(f"Could not write {self.path}: {exc}") from exc


class SqlRecordStorage(RecordStorage):
    """Stores each record as a JSON payload row in the ``records`` table."""

    def __init__(self, database_url: str, *, echo: bool = False) -> None:
        try:
            self._engine = build_engine(database_url, echo=echo)
        except SQLAlchemyError as exc:
            raise StorageError(f"Could not open database: {exc}") from exc
        self._session_factory = build_session_factory(self._engine)

    def read(self, name: str) -> Optional[List[Dict[str, Any]]]:
        try:
            with self._session_factory() as session:
                row = session.get(StoredRecord, name)
                payload = row.payload if row is not None else None
        except SQLAlchemyError as exc:
            logger.error("Could not read record %s: %s", name, exc)
            raise StorageError(f"Could not read record '{name}': {exc}") from exc
        if payload is None:
            return None
        try:
            value = json.loads(payload)
        except json.JSONDecodeError as exc:
            raise StorageError(f"Record '{name}' does not contain valid JSON") from exc
        return _check_collection(name, value)

    def write_all(self, records: Mapping[str, List[Dict[str, Any]]]) -> None:
        try:
            with self._session_factory.begin() as session:
                existing = {
                    row.name: row
                    for row in session.scalars(
                        select(StoredRecord).where(StoredRecord.name.in_(list(records)))
                    )
                }
                for name, collection in records.items():
                    payload = json.dumps(collection, ensure_ascii=False)
                    row = existing.get(name)
                    if row is None:
                        session.add(StoredRecord(name=name, payload=payload))
                    else:
                        row.payload = payload
        except SQLAlchemyError as exc:
            logger.error("Could not write records: %s", exc)
            raise StorageError(f"Could not write records: {exc}") from exc

    def close(self) -> None:
        self._engine.dispose()


def create_storage(settings: Settings) -> RecordStorage:
    """Build the gateway selected by ``settings.storage_backend``."""

    if settings.storage_backend == "sql":
        return SqlRecordStorage(settings.database_url, echo=settings.echo_sql)
    return JsonFileStorage(settings.storage_path)


__all__ = [
    "DEFAULT_LOCATIONS",
    "ITEMS_RECORD",
    "JsonFileStorage",
    "LOCATIONS_RECORD",
    "RECORD_NAMES",
    "RecordStorage",
    "Records",
    "SqlRecordStorage",
    "create_storage",
    "default_locations",
]
