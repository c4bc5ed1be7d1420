"""
Timetable stores.

A store persists whole timetable documents. `TimetableApiClient` is the
remote store; `FileTimetableStore` keeps one JSON file per timetable in a
directory for offline work.
"""

from __future__ import annotations

import logging
import uuid
from pathlib import Path
from typing import Optional, Protocol, Union

from .data.loader import load_timetable, save_timetable
from .data.models import Timetable
from .errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


class TimetableStore(Protocol):
    """Whole-document persistence for timetables."""

    def create(self, timetable: Timetable) -> Timetable:
        ...

    def update(self, timetable_id: str, timetable: Timetable) -> Timetable:
        ...

    def get(self, timetable_id: str) -> Timetable:
        ...

    def get_by_class(self, class_id: str, section: Optional[str] = None) -> Timetable:
        ...

    def delete(self, timetable_id: str) -> None:
        ...


class FileTimetableStore:
    """Stores each timetable as `<directory>/<id>.json`."""

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, timetable_id: str) -> Path:
        if not timetable_id or "/" in timetable_id or "\\" in timetable_id or timetable_id.startswith("."):
            raise NotFoundError(f"Timetable {timetable_id!r} not found")
        return self.directory / f"{timetable_id}.json"

    def create(self, timetable: Timetable) -> Timetable:
        existing = self._find(timetable.class_id, timetable.section)
        if existing is not None:
            raise ValidationError(
                f"Class {timetable.class_id} already has timetable {existing.id}"
            )
        created = timetable.model_copy(update={"id": uuid.uuid4().hex})
        save_timetable(created, self._path(created.id))
        logger.info("Created timetable %s for class %s", created.id, created.class_id)
        return created

    def update(self, timetable_id: str, timetable: Timetable) -> Timetable:
        path = self._path(timetable_id)
        if not path.exists():
            raise NotFoundError(f"Timetable {timetable_id} not found")
        updated = timetable.model_copy(update={"id": timetable_id})
        save_timetable(updated, path)
        return updated

    def get(self, timetable_id: str) -> Timetable:
        path = self._path(timetable_id)
        if not path.exists():
            raise NotFoundError(f"Timetable {timetable_id} not found")
        return load_timetable(path)

    def get_by_class(self, class_id: str, section: Optional[str] = None) -> Timetable:
        found = self._find(class_id, section)
        if found is None:
            raise NotFoundError(f"No timetable for class {class_id}")
        return found

    def delete(self, timetable_id: str) -> None:
        path = self._path(timetable_id)
        if not path.exists():
            raise NotFoundError(f"Timetable {timetable_id} not found")
        path.unlink()
        logger.info("Deleted timetable %s", timetable_id)

    def list_all(self) -> list[Timetable]:
        return [load_timetable(path) for path in sorted(self.directory.glob("*.json"))]

    def _find(self, class_id: str, section: Optional[str]) -> Optional[Timetable]:
        for timetable in self.list_all():
            if timetable.class_id == class_id and timetable.section == (section or None):
                return timetable
        return None
