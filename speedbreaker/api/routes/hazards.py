# path: speed-breaker-api/speedbreaker/api/routes/hazards.py

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, HTTPException, Request, Response

from speedbreaker.models.hazard_models import (
    AlertSettings,
    AlertSettingsUpdate,
    Analytics,
    Hazard,
    HazardCreate,
    HazardUpdate,
    Severity,
)
from speedbreaker.services.hazard_store import HazardNotFoundError, HazardStore

router = APIRouter(prefix="/hazards", tags=["hazards"])


def get_store(request: Request) -> HazardStore:
    return request.app.state.hazard_store


def not_found(e: HazardNotFoundError) -> HTTPException:
    return HTTPException(status_code=404, detail=f"Hazard {e.args[0]} not found")


@router.get("", response_model=List[Hazard])
def list_hazards(request: Request, severity: Optional[Severity] = None) -> List[Hazard]:
    return get_store(request).list_approved(severity=severity)


@router.get("/pending", response_model=List[Hazard])
def list_pending(request: Request) -> List[Hazard]:
    return get_store(request).list_pending()


@router.get("/analytics", response_model=Analytics)
def analytics(request: Request) -> Analytics:
    return get_store(request).analytics()


@router.get("/alert-settings/{user_id}", response_model=AlertSettings)
def get_alert_settings(user_id: str, request: Request) -> AlertSettings:
    return get_store(request).get_alert_settings(user_id)


@router.patch("/alert-settings/{user_id}", response_model=AlertSettings)
def update_alert_settings(user_id: str, changes: AlertSettingsUpdate, request: Request) -> AlertSettings:
    return get_store(request).update_alert_settings(user_id, changes)


@router.post("", response_model=Hazard, status_code=201)
def report_hazard(payload: HazardCreate, request: Request) -> Hazard:
    return get_store(request).report(payload)


@router.get("/{hazard_id}", response_model=Hazard)
def get_hazard(hazard_id: str, request: Request) -> Hazard:
    try:
        return get_store(request).get(hazard_id)
    except HazardNotFoundError as e:
        raise not_found(e)


@router.post("/{hazard_id}/approve", response_model=Hazard)
def approve_hazard(hazard_id: str, request: Request) -> Hazard:
    try:
        return get_store(request).approve(hazard_id)
    except HazardNotFoundError as e:
        raise not_found(e)


@router.post("/{hazard_id}/reject", response_model=Hazard)
def reject_hazard(hazard_id: str, request: Request) -> Hazard:
    try:
        return get_store(request).reject(hazard_id)
    except HazardNotFoundError as e:
        raise not_found(e)


@router.patch("/{hazard_id}", response_model=Hazard)
def update_hazard(hazard_id: str, changes: HazardUpdate, request: Request) -> Hazard:
    try:
        return get_store(request).update(hazard_id, changes)
    except HazardNotFoundError as e:
        raise not_found(e)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.delete("/{hazard_id}", status_code=204)
def delete_hazard(hazard_id: str, request: Request) -> Response:
    try:
        get_store(request).delete(hazard_id)
    except HazardNotFoundError as e:
        raise not_found(e)
    return Response(status_code=204)
