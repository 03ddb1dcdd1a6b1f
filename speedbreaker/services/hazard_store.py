# path: speed-breaker-api/speedbreaker/services/hazard_store.py

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Dict, List, Optional
import json
import logging
import os
import tempfile
import threading
import uuid

from pydantic import ValidationError

from speedbreaker.models.hazard_models import (
    AlertSettings,
    AlertSettingsUpdate,
    Analytics,
    Hazard,
    HazardCreate,
    HazardUpdate,
    utc_now,
)

logger = logging.getLogger(__name__)

RECENT_WINDOW = timedelta(days=7)


class HazardNotFoundError(KeyError):
    pass


def default_hazards(now: Optional[datetime] = None) -> tuple[List[Hazard], List[Hazard]]:
    now = now or utc_now()

    def ago(days: int) -> datetime:
        return now - timedelta(days=days)

    approved = [
        Hazard(id="sb-1", location="Navsari Railway Station", latitude=20.9467, longitude=72.952,
               description="Large speed breaker near the railway station entrance",
               reported_by="user-1", reported_at=ago(7), status="approved", severity="high"),
        Hazard(id="sb-2", location="Abrama Road, Navsari", latitude=20.95, longitude=72.955,
               description="Small speed breaker with yellow markings",
               reported_by="user-2", reported_at=ago(3), status="approved", severity="low"),
        Hazard(id="sb-3", location="Dudhia Talav, Navsari", latitude=20.948, longitude=72.953,
               description="Medium sized pothole in the middle of the road",
               reported_by="user-1", reported_at=ago(5), status="approved", severity="medium"),
        Hazard(id="sb-4", location="Navsari College Road", latitude=20.951, longitude=72.954,
               description="New speed breaker installed last week",
               reported_by="user-3", reported_at=ago(1), status="approved", severity="medium"),
        Hazard(id="sb-5", location="Lunsikui Road, Navsari", latitude=20.949, longitude=72.951,
               description="Deep pothole causing traffic slowdown",
               reported_by="user-2", reported_at=ago(2), status="approved", severity="high"),
    ]
    pending = [
        Hazard(id="sb-6", location="Jalalpore Road, Navsari", latitude=20.952, longitude=72.956,
               description="New speed breaker installed last week",
               reported_by="user-3", reported_at=ago(1), status="pending", severity="medium"),
        Hazard(id="sb-7", location="Navsari Agricultural University", latitude=20.953, longitude=72.957,
               description="Deep pothole causing traffic slowdown",
               reported_by="user-2", reported_at=ago(2), status="pending", severity="high"),
    ]
    return approved, pending


class HazardStore:
    """
    Approved hazards, pending reports and per-user alert settings.

    With a path the whole store is one JSON document, replaced atomically after
    every change; without one it lives in memory. A file that exists but
    cannot be parsed is moved to ``<name>.corrupt`` and the store refuses to
    seed defaults over it. Every operation holds the store lock, since FastAPI
    runs the sync endpoints in a threadpool.
    """

    def __init__(self, path: Optional[Path | str] = None) -> None:
        self.path = Path(path) if path else None
        self._approved: List[Hazard] = []
        self._pending: List[Hazard] = []
        self._settings: Dict[str, AlertSettings] = {}
        self._lock = threading.RLock()
        self.load_failed = False
        if self.path is not None and self.path.exists():
            self._load()

    # --- persistence ---

    def _load(self) -> None:
        try:
            doc = json.loads(self.path.read_text())
            if not isinstance(doc, dict):
                raise ValueError(f"expected a JSON object, got {type(doc).__name__}")
        except (OSError, ValueError) as e:
            self.load_failed = True
            aside = self.path.with_name(self.path.name + ".corrupt")
            try:
                os.replace(self.path, aside)
            except OSError as move_err:
                logger.error("Could not read hazard store %s (%s) and could not move it aside: %s",
                             self.path, e, move_err)
                raise
            logger.warning("Could not read hazard store %s: %s; moved it to %s", self.path, e, aside)
            return

        self._approved = self._parse_list(doc.get("speed_breakers", []))
        self._pending = self._parse_list(doc.get("pending_reports", []))
        for user_id, raw in (doc.get("alert_settings") or {}).items():
            try:
                self._settings[user_id] = AlertSettings.model_validate({**raw, "user_id": user_id})
            except ValidationError as e:
                logger.warning("Skipping alert settings for %s: %s", user_id, e)
        logger.info("Loaded %d approved / %d pending hazards from %s",
                    len(self._approved), len(self._pending), self.path)

    @staticmethod
    def _parse_list(items) -> List[Hazard]:
        out = []
        for raw in items:
            try:
                out.append(Hazard.model_validate(raw))
            except ValidationError as e:
                logger.warning("Skipping malformed hazard record %r: %s", raw, e)
        return out

    def _save(self) -> None:
        if self.path is None:
            return
        doc = {
            "speed_breakers": [h.model_dump(mode="json") for h in self._approved],
            "pending_reports": [h.model_dump(mode="json") for h in self._pending],
            "alert_settings": {uid: s.model_dump(mode="json") for uid, s in self._settings.items()},
        }
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(prefix=self.path.name + ".", suffix=".tmp", dir=self.path.parent)
        try:
            with os.fdopen(fd, "w") as f:
                json.dump(doc, f, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, self.path)
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise

    def seed_defaults(self) -> bool:
        with self._lock:
            if self.load_failed:
                logger.warning("Not seeding defaults: hazard store %s failed to load", self.path)
                return False
            if self._approved or self._pending:
                return False
            self._approved, self._pending = default_hazards()
            self._save()
        logger.info("Seeded %d approved / %d pending default hazards", len(self._approved), len(self._pending))
        return True

    # --- hazards ---

    def list_approved(self, severity: Optional[str] = None) -> List[Hazard]:
        with self._lock:
            if severity is None:
                return list(self._approved)
            return [h for h in self._approved if h.severity == severity]

    def list_pending(self) -> List[Hazard]:
        with self._lock:
            return list(self._pending)

    def get(self, hazard_id: str) -> Hazard:
        with self._lock:
            for h in self._approved + self._pending:
                if h.id == hazard_id:
                    return h
        raise HazardNotFoundError(hazard_id)

    def report(self, payload: HazardCreate) -> Hazard:
        hazard = Hazard(
            **payload.model_dump(),
            id=f"sb-{uuid.uuid4().hex[:12]}",
            status="pending",
            reported_at=utc_now(),
        )
        with self._lock:
            self._pending.append(hazard)
            self._save()
        logger.info("New report %s at %s by %s", hazard.id, hazard.location, hazard.reported_by)
        return hazard

    def _pop_pending(self, hazard_id: str) -> Hazard:
        # Caller holds the lock.
        for i, h in enumerate(self._pending):
            if h.id == hazard_id:
                return self._pending.pop(i)
        raise HazardNotFoundError(hazard_id)

    def approve(self, hazard_id: str) -> Hazard:
        with self._lock:
            hazard = self._pop_pending(hazard_id).model_copy(update={"status": "approved"})
            self._approved.append(hazard)
            self._save()
        logger.info("Approved report %s", hazard_id)
        return hazard

    def reject(self, hazard_id: str) -> Hazard:
        with self._lock:
            hazard = self._pop_pending(hazard_id).model_copy(update={"status": "rejected"})
            self._save()
        logger.info("Rejected report %s", hazard_id)
        return hazard

    def update(self, hazard_id: str, changes: HazardUpdate) -> Hazard:
        """Apply an admin edit; the merged record is revalidated as a Hazard."""
        with self._lock:
            for i, h in enumerate(self._approved):
                if h.id == hazard_id:
                    updated = Hazard.model_validate({**h.model_dump(), **changes.model_dump(exclude_unset=True)})
                    if not updated.has_valid_coordinates:
                        raise ValueError(f"Hazard {hazard_id} would be left without valid coordinates")
                    self._approved[i] = updated
                    self._save()
                    break
            else:
                raise HazardNotFoundError(hazard_id)
        logger.info("Updated hazard %s", hazard_id)
        return updated

    def delete(self, hazard_id: str) -> None:
        with self._lock:
            before = len(self._approved)
            self._approved = [h for h in self._approved if h.id != hazard_id]
            if len(self._approved) == before:
                raise HazardNotFoundError(hazard_id)
            self._save()
        logger.info("Deleted hazard %s", hazard_id)

    # --- alert settings ---

    def get_alert_settings(self, user_id: str) -> AlertSettings:
        with self._lock:
            return self._settings.get(user_id) or AlertSettings(user_id=user_id)

    def update_alert_settings(self, user_id: str, changes: AlertSettingsUpdate) -> AlertSettings:
        with self._lock:
            current = self.get_alert_settings(user_id)
            updated = current.model_copy(update=changes.model_dump(exclude_unset=True, exclude_none=True))
            self._settings[user_id] = updated
            self._save()
        return updated

    # --- analytics ---

    def analytics(self, now: Optional[datetime] = None) -> Analytics:
        cutoff = (now or utc_now()) - RECENT_WINDOW
        with self._lock:
            recent = sum(1 for h in self._approved if _aware(h.reported_at) > cutoff)
            return Analytics(
                approved_breakers=len(self._approved),
                pending_reports=len(self._pending),
                recent_reports=len(self._pending) + recent,
            )


def _aware(ts: datetime) -> datetime:
    return ts if ts.tzinfo is not None else ts.replace(tzinfo=timezone.utc)
