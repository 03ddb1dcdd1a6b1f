# path: speed-breaker-api/speedbreaker/api/routes/navigation.py

from __future__ import annotations

import random

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from speedbreaker.models.route_models import NavigationStatus, RouteAnnotation, RouteRequest
from speedbreaker.services.map_service import GeoJSONMapAdapter
from speedbreaker.services.playback import PlaybackController
from speedbreaker.services.route_annotator import annotate_route

router = APIRouter(prefix="/navigation", tags=["navigation"])


class StartNavigationResponse(BaseModel):
    annotation: RouteAnnotation
    status: NavigationStatus


def get_controller(request: Request) -> PlaybackController:
    return request.app.state.playback


@router.post("/route", response_model=RouteAnnotation)
def preview_route(body: RouteRequest, request: Request) -> RouteAnnotation:
    # Preview only: no playback timer is started.
    hazards = request.app.state.hazard_store.list_approved()
    rng = random.Random(body.seed) if body.seed is not None else None
    try:
        return annotate_route(
            body.start,
            body.end,
            hazards,
            num_points=body.num_points,
            rng=rng,
            map_service=GeoJSONMapAdapter(),
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/start", response_model=StartNavigationResponse)
async def start_navigation(body: RouteRequest, request: Request) -> StartNavigationResponse:
    controller = get_controller(request)
    try:
        session = controller.start(
            body.start,
            body.end,
            num_points=body.num_points,
            rng=random.Random(body.seed) if body.seed is not None else None,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return StartNavigationResponse(annotation=session.annotation, status=session.status())


@router.post("/stop", response_model=NavigationStatus)
async def stop_navigation(request: Request) -> NavigationStatus:
    controller = get_controller(request)
    controller.stop()
    return controller.status()


@router.get("/status", response_model=NavigationStatus)
async def navigation_status(request: Request) -> NavigationStatus:
    return get_controller(request).status()
