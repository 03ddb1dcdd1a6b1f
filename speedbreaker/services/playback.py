# path: speed-breaker-api/speedbreaker/services/playback.py

from __future__ import annotations

from typing import Callable, Iterable, List, Optional
import asyncio
import logging
import random

from speedbreaker import config
from speedbreaker.models.hazard_models import Hazard
from speedbreaker.models.route_models import NavigationStatus, RouteAnnotation, RoutePoint
from speedbreaker.services.map_service import MapService
from speedbreaker.services.narration import waypoint_index_for_step
from speedbreaker.services.proximity import hazard_on_segment, valid_hazards
from speedbreaker.services.route_annotator import annotate_route, validate_endpoints
from speedbreaker.utils.geo import LatLonTuple

logger = logging.getLogger(__name__)

AlertCallback = Callable[[Optional[Hazard]], None]
StepCallback = Callable[[int, str], None]


class PlaybackSession:
    """
    One simulated drive along a route: idle -> navigating -> idle.

    The session owns its timer (an asyncio task) and cancellation flag. It
    advances one narration step per tick and, on each step, checks the current
    waypoint segment against the hazard list. on_alert gets the matched hazard,
    or None when a previously raised alert clears; never more than once a step.
    """

    def __init__(
        self,
        annotation: RouteAnnotation,
        hazards: Iterable[Hazard],
        on_alert: Optional[AlertCallback] = None,
        on_step: Optional[StepCallback] = None,
        tick_seconds: Optional[float] = None,
        hold_seconds: Optional[float] = None,
        alert_distance_km: Optional[float] = None,
    ) -> None:
        self.annotation = annotation
        self.waypoints: List[LatLonTuple] = [wp.as_tuple() for wp in annotation.waypoints]
        self.narration: List[str] = list(annotation.narration)
        self.hazards: List[Hazard] = valid_hazards(hazards)
        self.on_alert = on_alert
        self.on_step = on_step
        self.tick_seconds = config.NAV_TICK_SECONDS if tick_seconds is None else tick_seconds
        self.hold_seconds = config.NAV_HOLD_SECONDS if hold_seconds is None else hold_seconds
        self.alert_distance_km = config.ALERT_DISTANCE_KM if alert_distance_km is None else alert_distance_km

        self.state = "idle"
        self.position = 0
        self.active_alert: Optional[Hazard] = None
        self._cancelled = False
        self._task: Optional[asyncio.Task] = None

    @property
    def final_index(self) -> int:
        return len(self.narration) - 1

    @property
    def is_active(self) -> bool:
        return self.state == "navigating"

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def begin(self) -> None:
        if self._task is not None:
            raise RuntimeError("Playback session already started")
        self.state = "navigating"
        self.position = 0
        self._task = asyncio.get_running_loop().create_task(self._run())

    def stop(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self.state = "idle"
        self._set_alert(None)

    async def wait(self) -> None:
        if self._task is None:
            return
        try:
            await self._task
        except asyncio.CancelledError:
            pass

    def current_segment(self) -> tuple[LatLonTuple, LatLonTuple]:
        idx = waypoint_index_for_step(self.position, len(self.narration), len(self.waypoints))
        nxt = min(idx + 1, len(self.waypoints) - 1)
        return self.waypoints[idx], self.waypoints[nxt]

    def advance(self) -> None:
        """Move one step forward and run the proximity check for the new segment."""
        if self._cancelled or self.position >= self.final_index:
            return
        self.position += 1
        step_text = self.narration[self.position]
        logger.debug("Navigation step %d/%d: %s", self.position, self.final_index, step_text)
        if self.on_step is not None:
            self.on_step(self.position, step_text)

        seg_start, seg_end = self.current_segment()
        self._set_alert(hazard_on_segment(seg_start, seg_end, self.hazards, self.alert_distance_km))

    def status(self) -> NavigationStatus:
        return NavigationStatus(
            state=self.state,
            position=self.position,
            step_count=len(self.narration),
            current_step=self.narration[self.position] if self.narration else None,
            active_alert=self.active_alert,
            start_label=self.annotation.start_label,
            end_label=self.annotation.end_label,
        )

    def _set_alert(self, hazard: Optional[Hazard]) -> None:
        if hazard is None and self.active_alert is None:
            return
        self.active_alert = hazard
        if hazard is not None:
            logger.info("Speed breaker alert: %s (%s)", hazard.location, hazard.severity or "unspecified")
        if self.on_alert is not None:
            self.on_alert(hazard)

    async def _run(self) -> None:
        while self.position < self.final_index:
            await asyncio.sleep(self.tick_seconds)
            if self._cancelled:
                return
            self.advance()

        await asyncio.sleep(self.hold_seconds)
        if self._cancelled:
            return
        self.state = "idle"
        self._set_alert(None)
        logger.info("Navigation finished: arrived at %s", self.annotation.end_label)


class PlaybackController:
    """
    Starts and stops the single playback session.

    Starting a new route cancels whatever session is in flight before the new
    timer is created.
    """

    def __init__(
        self,
        hazard_source: Callable[[], Iterable[Hazard]],
        on_alert: Optional[AlertCallback] = None,
        on_step: Optional[StepCallback] = None,
        map_service: Optional[MapService] = None,
        tick_seconds: Optional[float] = None,
        hold_seconds: Optional[float] = None,
        num_points: Optional[int] = None,
        steps: Optional[int] = None,
        near_route_km: Optional[float] = None,
        alert_distance_km: Optional[float] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.hazard_source = hazard_source
        self.on_alert = on_alert
        self.on_step = on_step
        self.map_service = map_service
        # Unset values come from speedbreaker.config, read when the controller is built.
        self.tick_seconds = config.NAV_TICK_SECONDS if tick_seconds is None else tick_seconds
        self.hold_seconds = config.NAV_HOLD_SECONDS if hold_seconds is None else hold_seconds
        self.num_points = config.ROUTE_WAYPOINTS if num_points is None else num_points
        self.steps = config.NARRATION_STEPS if steps is None else steps
        self.near_route_km = config.NEAR_ROUTE_KM if near_route_km is None else near_route_km
        self.alert_distance_km = config.ALERT_DISTANCE_KM if alert_distance_km is None else alert_distance_km
        self.rng = rng
        self._session: Optional[PlaybackSession] = None

    @property
    def session(self) -> Optional[PlaybackSession]:
        return self._session

    def start(
        self,
        start: RoutePoint,
        end: RoutePoint,
        num_points: Optional[int] = None,
        rng: Optional[random.Random] = None,
    ) -> PlaybackSession:
        """Cancel any running session and start a new one; num_points and rng override the controller's."""
        # Must run inside the event loop that will drive the timer.
        validate_endpoints(start, end)

        self.stop()

        hazards = list(self.hazard_source())
        annotation = annotate_route(
            start,
            end,
            hazards,
            num_points=self.num_points if num_points is None else num_points,
            rng=rng or self.rng,
            steps=self.steps,
            near_route_km=self.near_route_km,
            map_service=self.map_service,
        )
        session = PlaybackSession(
            annotation,
            hazards,
            on_alert=self.on_alert,
            on_step=self.on_step,
            tick_seconds=self.tick_seconds,
            hold_seconds=self.hold_seconds,
            alert_distance_km=self.alert_distance_km,
        )
        self._session = session
        session.begin()
        logger.info("Navigation started: %s -> %s", start.label, end.label)
        return session

    def stop(self) -> None:
        if self._session is None:
            return
        if self._session.is_active:
            logger.info("Navigation stopped at step %d", self._session.position)
        self._session.stop()

    def status(self) -> NavigationStatus:
        if self._session is None:
            return NavigationStatus()
        return self._session.status()
