"""
Editing session for one class timetable.

Mutations are applied to the local timetable first, then the whole document
is written to the store. Mutations against the same timetable id are
serialised through a per-id lock shared by every session in the process.
Under the lock the session re-reads the stored document before applying its
change, so an edit made through another session is never overwritten. If
the store write fails the local timetable is rolled back to the last
version the store confirmed and the error is re-raised.
"""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from typing import Callable, Optional

from . import editor
from .data.generator import LocalScheduleGenerator, ScheduleGenerator, build_timetable
from .data.models import Timetable, TimetableSettings, Weekday
from .errors import NotFoundError, TimetableError, ValidationError
from .grid import NameResolver, ScheduleGrid
from .relocate import relocate_break
from .store import TimetableStore

logger = logging.getLogger(__name__)


class _LockRegistry:
    """One lock per timetable id, shared by every session in the process."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: defaultdict[str, threading.Lock] = defaultdict(threading.Lock)

    def get(self, timetable_id: str) -> threading.Lock:
        with self._guard:
            return self._locks[timetable_id]

    def discard(self, timetable_id: str) -> None:
        with self._guard:
            self._locks.pop(timetable_id, None)

    def __contains__(self, timetable_id: str) -> bool:
        return timetable_id in self._locks


_locks = _LockRegistry()


class TimetableSession:
    """Holds the current timetable of a class/section and applies edits to it."""

    def __init__(self, store: TimetableStore, resolver: NameResolver | None = None):
        self.store = store
        self.resolver = resolver or NameResolver()
        self._timetable: Optional[Timetable] = None
        self._confirmed: Optional[Timetable] = None

    @property
    def timetable(self) -> Optional[Timetable]:
        return self._timetable

    @property
    def grid(self) -> ScheduleGrid:
        return ScheduleGrid(self._timetable, self.resolver)

    def _set_confirmed(self, timetable: Optional[Timetable]) -> Optional[Timetable]:
        self._timetable = timetable
        self._confirmed = timetable
        return timetable

    def _require(self) -> Timetable:
        if self._timetable is None or self._timetable.id is None:
            raise ValidationError("No timetable loaded")
        return self._timetable

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def load(self, class_id: str, section: Optional[str] = None) -> Optional[Timetable]:
        """Fetch the timetable of a class/section; None means none exists yet."""
        try:
            return self._set_confirmed(self.store.get_by_class(class_id, section))
        except NotFoundError:
            logger.info("No timetable for class %s section %s", class_id, section)
            return self._set_confirmed(None)

    def refresh(self) -> Optional[Timetable]:
        """Re-fetch the current timetable, discarding local state."""
        current = self._require()
        return self.load(current.class_id, current.section)

    def create(
        self,
        class_id: str,
        settings: TimetableSettings | None = None,
        section: Optional[str] = None,
        academic_year: Optional[str] = None,
        generator: ScheduleGenerator | None = None,
    ) -> Timetable:
        """Generate a schedule and create the timetable in the store."""
        settings = settings or TimetableSettings()
        generator = generator or LocalScheduleGenerator()
        schedule = generator.generate(settings)
        timetable = build_timetable(class_id, settings, schedule, section, academic_year)
        return self._set_confirmed(self.store.create(timetable))

    def delete(self) -> None:
        current = self._require()
        with _locks.get(current.id):
            self.store.delete(current.id)
            self._set_confirmed(None)
        _locks.discard(current.id)

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def apply(self, change: Callable[[Timetable], Timetable], description: str = "edit") -> Timetable:
        """
        Apply a pure change to the stored timetable and persist the result.

        The document is re-read from the store under the lock, so `change`
        always sees the latest confirmed version.

        Raises:
            ValidationError: If the change is rejected (nothing is sent)
            NetworkError: If persisting fails (local state is rolled back)
            NotFoundError: If the timetable was deleted from the store
        """
        current = self._require()
        with _locks.get(current.id):
            current = self._set_confirmed(self.store.get(self._require().id))
            updated = change(current)
            if updated is current:
                return current

            self._timetable = updated
            try:
                saved = self.store.update(current.id, updated)
            except TimetableError:
                logger.warning(
                    "Failed to save %s on timetable %s, rolling back", description, current.id
                )
                self._timetable = self._confirmed
                raise
            return self._set_confirmed(saved)

    def save_period(
        self,
        day: Weekday | int | str,
        index: int,
        subject: Optional[str] = None,
        teacher: Optional[str] = None,
        room: Optional[str] = "",
    ) -> Timetable:
        return self.apply(
            lambda tt: editor.save_period(tt, day, index, subject, teacher, room),
            description=f"period {day}/{index}",
        )

    def clear_period(self, day: Weekday | int | str, index: int) -> Timetable:
        return self.apply(
            lambda tt: editor.clear_period(tt, day, index),
            description=f"clear {day}/{index}",
        )

    def relocate_break(self, source_index: int, target_index: int) -> Timetable:
        return self.apply(
            lambda tt: relocate_break(tt, source_index, target_index),
            description=f"break move {source_index}->{target_index}",
        )
