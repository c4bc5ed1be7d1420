"""REST client for timetable persistence and reference lookups."""

from __future__ import annotations

import logging
import time
from typing import Any, Optional
from urllib.parse import quote

import requests

from .config import ClientConfig
from .data.models import (
    DaySchedule,
    SchoolClass,
    Subject,
    Teacher,
    Timetable,
    TimetableSettings,
    schedule_from_wire,
)
from .errors import NetworkError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

IDEMPOTENT_METHODS = frozenset({"GET", "PUT", "DELETE"})


class TimetableApiClient:
    """
    Client for the `/timetables` REST resource.

    Responses use the `{"success": ..., "data": ..., "message": ...}` envelope;
    methods return the unwrapped `data`. Failed requests raise NotFoundError
    for 404 and NetworkError for everything else. Idempotent requests are
    retried with exponential backoff on 5xx responses and connection errors.
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        session: Optional[requests.Session] = None,
        backoff: float = 0.5,
    ) -> None:
        self.config = config or ClientConfig.from_env()
        self.session = session or requests.Session()
        self.backoff = backoff

    # -------------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------------

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.config.token:
            headers["Authorization"] = f"Bearer {self.config.token}"
        return headers

    def request(
        self,
        method: str,
        endpoint: str,
        params: Optional[dict[str, Any]] = None,
        body: Optional[dict[str, Any]] = None,
    ) -> Any:
        """Send a request and return the unwrapped response data."""
        method = method.upper()
        url = self.config.api_url + endpoint
        params = {k: v for k, v in (params or {}).items() if v is not None}
        if self.config.institution:
            params.setdefault("institution", self.config.institution)
            if body is not None:
                body = {**body, "institution": body.get("institution", self.config.institution)}

        attempts = self.config.retries + 1 if method in IDEMPOTENT_METHODS else 1
        for attempt in range(attempts):
            last_attempt = attempt == attempts - 1
            try:
                resp = self.session.request(
                    method,
                    url,
                    params=params or None,
                    json=body,
                    headers=self._headers(),
                    timeout=self.config.timeout,
                )
            except requests.Timeout as exc:
                raise NetworkError(f"{method} {endpoint} timed out after {self.config.timeout}s") from exc
            except requests.RequestException as exc:
                logger.warning("Request error: %s", exc)
                if last_attempt:
                    raise NetworkError(f"{method} {endpoint} failed: {exc}") from exc
                time.sleep(self.backoff * 2**attempt)
                continue

            if resp.status_code >= 500 and not last_attempt:
                logger.warning("%s %s returned %d, retrying", method, endpoint, resp.status_code)
                time.sleep(self.backoff * 2**attempt)
                continue
            return self._unwrap(resp, method, endpoint)

        raise NetworkError(f"{method} {endpoint} failed")

    def _unwrap(self, resp: requests.Response, method: str, endpoint: str) -> Any:
        try:
            payload = resp.json() if resp.content else None
        except ValueError:
            payload = None
            if resp.ok:
                raise NetworkError(f"{method} {endpoint} returned invalid JSON", status=resp.status_code)

        message = None
        errors = None
        if isinstance(payload, dict):
            message = payload.get("message")
            errors = payload.get("errors")

        if resp.status_code == 404:
            raise NotFoundError(message or f"{endpoint} not found")
        if not resp.ok:
            logger.error("%s %s failed with %d: %s", method, endpoint, resp.status_code, message)
            raise NetworkError(
                message or f"{method} {endpoint} failed with status {resp.status_code}",
                status=resp.status_code,
                errors=errors,
            )

        if isinstance(payload, dict) and ("data" in payload or "success" in payload):
            return payload.get("data")
        return payload

    # -------------------------------------------------------------------------
    # Timetables
    # -------------------------------------------------------------------------

    def create(self, timetable: Timetable) -> Timetable:
        """Create a timetable and return it with its server id."""
        body = timetable.to_wire()
        body.pop("_id", None)
        data = self.request("POST", "/timetables", body=body)
        return self._timetable_or(data, timetable)

    def update(self, timetable_id: str, timetable: Timetable) -> Timetable:
        """Replace the whole schedule and scalar fields of a timetable."""
        body = timetable.to_wire()
        body.pop("_id", None)
        data = self.request("PUT", f"/timetables/{quote(timetable_id, safe='')}", body=body)
        return self._timetable_or(data, timetable.model_copy(update={"id": timetable_id}))

    def get(self, timetable_id: str) -> Timetable:
        data = self.request("GET", f"/timetables/{quote(timetable_id, safe='')}")
        if not data:
            raise NotFoundError(f"Timetable {timetable_id} not found")
        return Timetable.from_wire(data)

    def get_by_class(self, class_id: str, section: Optional[str] = None) -> Timetable:
        """
        Fetch the timetable of a class, or of one of its sections.

        Raises:
            NotFoundError: If the class has no timetable yet
        """
        data = self.request(
            "GET",
            f"/timetables/class/{quote(class_id, safe='')}",
            params={"section": section},
        )
        if not data:
            raise NotFoundError(f"No timetable for class {class_id}")
        return Timetable.from_wire(data)

    def delete(self, timetable_id: str) -> None:
        self.request("DELETE", f"/timetables/{quote(timetable_id, safe='')}")

    def generate_schedule(self, settings: TimetableSettings) -> tuple[DaySchedule, ...]:
        """Ask the server for an initial schedule."""
        data = self.request("POST", "/timetables/generate-schedule", body=settings.to_wire())
        try:
            return schedule_from_wire(data)
        except ValueError as e:
            raise ValidationError(f"Generated schedule is invalid: {e}") from e

    @staticmethod
    def _timetable_or(data: Any, fallback: Timetable) -> Timetable:
        if isinstance(data, dict) and "schedule" in data:
            return Timetable.from_wire(data)
        if isinstance(data, dict) and data.get("_id"):
            return fallback.model_copy(update={"id": data["_id"]})
        return fallback

    # -------------------------------------------------------------------------
    # Reference lookups
    # -------------------------------------------------------------------------

    def list_subjects(self, limit: int = 100) -> list[Subject]:
        data = self.request("GET", "/subjects", params={"limit": limit}) or []
        return [Subject.model_validate(item) for item in data]

    def list_teachers(self, limit: int = 100) -> list[Teacher]:
        data = self.request("GET", "/users", params={"role": "teacher", "limit": limit}) or []
        return [Teacher.model_validate(item) for item in data]

    def list_classes(self) -> list[SchoolClass]:
        data = self.request("GET", "/classes") or []
        return [SchoolClass.model_validate(item) for item in data]


class RemoteScheduleGenerator:
    """Schedule generator backed by the server's generate-schedule endpoint."""

    def __init__(self, client: TimetableApiClient):
        self.client = client

    def generate(self, settings: TimetableSettings) -> tuple[DaySchedule, ...]:
        return self.client.generate_schedule(settings)
