"""Live tracking session state machine.

    Idle --start()--> Active --stop()--> Completed --finalize()--> Idle
                        \\                   /
                         `----reset()------'--> Idle (discarded)

All mutations happen under one lock, so the timer thread, the position
stream and route responses never leave a half-updated session behind.
"""

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Callable, Optional, Protocol

from loguru import logger
from pydantic import BaseModel

from shallwewalk.api.routing import RouteRequestAdapter
from shallwewalk.core import energy
from shallwewalk.core.config import settings
from shallwewalk.core.errors import StateError
from shallwewalk.core.geo import distance_km, is_finite_coordinate
from shallwewalk.schemas.activity import ActivityKind
from shallwewalk.schemas.geo import Coordinate, PositionSample
from shallwewalk.schemas.record import RunningRecord
from shallwewalk.schemas.route import RouteResult
from shallwewalk.schemas.session import (
    ServerFigures,
    Session,
    SessionSnapshot,
    SessionState,
    SessionSummary,
)
from shallwewalk.services.clock import RepeatingTimer
from shallwewalk.services.profiles import ProfileStore


class PositionSubscription(Protocol):
    def remove(self) -> None: ...


class PositionSource(Protocol):
    """Device location stream; the controller subscribes only while Active."""

    def subscribe(self, callback: Callable[[PositionSample], None]) -> PositionSubscription: ...


class RouteOutcome(BaseModel):
    result: RouteResult
    # False when the session moved on before the response arrived
    applied: bool


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionController:
    def __init__(
        self,
        profiles: ProfileStore | None = None,
        route_adapter: RouteRequestAdapter | None = None,
        position_source: PositionSource | None = None,
        auto_tick: bool = False,
        now: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._profiles = profiles
        self._route_adapter = route_adapter
        self._position_source = position_source
        self._auto_tick = auto_tick
        self._now = now

        self._lock = threading.RLock()
        self._state = SessionState.idle
        self._session: Session | None = None
        # Bumped on every transition; stale route responses compare against it
        self._generation = 0
        self._destination: Coordinate | None = None
        self._last_position: Coordinate | None = None
        self._subscription: PositionSubscription | None = None
        self._ticker: RepeatingTimer | None = None

        if profiles is not None:
            profiles.add_listener(self._on_companions_changed)

    # ---- reads ----

    @property
    def state(self) -> SessionState:
        with self._lock:
            return self._state

    def snapshot(self) -> SessionSnapshot:
        with self._lock:
            return SessionSnapshot(
                state=self._state,
                session=self._session.model_copy(deep=True) if self._session else None,
                destination=self._destination,
                last_position=self._last_position,
            )

    # ---- inputs available in every state ----

    def update_location(self, coord: Coordinate) -> None:
        """Record the latest device fix without touching the session."""
        if not is_finite_coordinate(coord.latitude, coord.longitude):
            logger.debug(f"Dropping non-finite location {coord!r}")
            return
        with self._lock:
            self._last_position = Coordinate(latitude=coord.latitude, longitude=coord.longitude)

    def set_destination(self, coord: Coordinate | None) -> None:
        with self._lock:
            self._destination = coord
            if self._session is not None:
                self._session.destination = coord

    # ---- transitions ----

    def start(self, activity_kind: ActivityKind) -> None:
        """Begin a session. Only valid from Idle."""
        kind = ActivityKind(activity_kind)
        with self._lock:
            if self._state is not SessionState.idle:
                raise StateError(f"start() requires an idle controller, state is {self._state.value}")
            origin = self._last_position or Coordinate(
                latitude=settings.default_latitude,
                longitude=settings.default_longitude,
            )
            self._session = Session(
                activity_kind=kind,
                started_at=self._now(),
                positions=[origin],
                companions=self._profiles.selected_companions() if self._profiles else [],
                destination=self._destination,
            )
            self._state = SessionState.active
            self._generation += 1
            logger.info(f"Session started ({kind.value}) at {origin.latitude:.5f},{origin.longitude:.5f}")

        if self._position_source is not None:
            subscription = self._position_source.subscribe(self.on_position)
            with self._lock:
                if self._state is SessionState.active:
                    self._subscription = subscription
                    subscription = None
            if subscription is not None:
                subscription.remove()
        if self._auto_tick:
            ticker = RepeatingTimer(settings.tick_interval_seconds, self.tick)
            with self._lock:
                if self._state is SessionState.active:
                    self._ticker = ticker
                    ticker.start()

    def stop(self) -> SessionSummary:
        """Freeze the session and return its summary. Only valid from Active."""
        with self._lock:
            if self._state is not SessionState.active:
                raise StateError(f"stop() requires an active session, state is {self._state.value}")
            self._state = SessionState.completed
            self._generation += 1
            summary = SessionSummary.from_session(self._session)
            detached = self._detach_sources()
            logger.info(
                f"Session stopped: {summary.duration_text}, {summary.distance_km:.2f}km, "
                f"{summary.human_kcal}kcal, companions {summary.companion_kcal_total}kcal"
            )
        self._release_sources(*detached)
        return summary

    def finalize(self) -> RunningRecord:
        """Turn the completed session into a RunningRecord and return to Idle."""
        with self._lock:
            if self._state is not SessionState.completed:
                raise StateError(f"finalize() requires a completed session, state is {self._state.value}")
            record = SessionSummary.from_session(self._session).to_running_record()
            self._clear()
        return record

    def reset(self) -> None:
        """Discard the current session without persisting it."""
        with self._lock:
            if self._state is not SessionState.idle:
                logger.info(f"Session reset from {self._state.value}")
            detached = self._detach_sources()
            self._clear()
            self._destination = None
        self._release_sources(*detached)

    # ---- event sources ----

    def tick(self) -> None:
        """One second of elapsed time. Ticks that arrive after stop() are ignored."""
        with self._lock:
            if self._state is not SessionState.active:
                return
            self._session.elapsed_seconds += 1
            self._recompute_energy()

    def on_position(self, coord: Coordinate) -> None:
        """Feed a device position into the live session."""
        if not is_finite_coordinate(coord.latitude, coord.longitude):
            logger.debug(f"Dropping non-finite position {coord!r}")
            return
        point = Coordinate(latitude=coord.latitude, longitude=coord.longitude)
        with self._lock:
            self._last_position = point
            if self._state is not SessionState.active:
                return
            session = self._session
            prev = session.positions[-1] if session.positions else None
            session.positions.append(point)
            if prev is not None and session.server_figures is None:
                session.distance_km += distance_km(prev, point)
            self._recompute_energy()

    # ---- server route ----

    def request_server_route(self) -> "Future[RouteOutcome]":
        """Fetch a route to the destination off the caller's thread.

        The returned future resolves to a RouteOutcome, or raises the
        adapter's RouteError/DecodeError. A response that arrives after the
        session was stopped or reset is discarded.
        """
        with self._lock:
            if self._state is not SessionState.active:
                raise StateError(f"request_server_route() requires an active session, state is {self._state.value}")
            if self._route_adapter is None:
                raise StateError("No routing adapter configured")
            if self._destination is None:
                raise StateError("Pick a destination before requesting a route")
            origin = self._last_position or self._session.positions[-1]
            destination = self._destination
            names = [c.name for c in self._session.companions]
            generation = self._generation

        # One worker per request; it exits as soon as the request finishes
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="route-request")
        future = executor.submit(self._fetch_and_apply, generation, origin, destination, names)
        future.add_done_callback(lambda _: executor.shutdown(wait=False))
        return future

    def _fetch_and_apply(
        self,
        generation: int,
        origin: Coordinate,
        destination: Coordinate,
        names: list[str],
    ) -> RouteOutcome:
        try:
            result = self._route_adapter.request_walk_route(origin, destination, names)
        except Exception as e:
            logger.warning(f"Route request failed: {e}")
            raise

        with self._lock:
            if generation != self._generation or self._state is not SessionState.active:
                logger.info("Discarding route response for a session that is no longer active")
                return RouteOutcome(result=result, applied=False)
            self._apply_route(result)
        return RouteOutcome(result=result, applied=True)

    def _apply_route(self, result: RouteResult) -> None:
        session = self._session
        companion_total = result.companion_kcal_total
        session.server_route = list(result.decoded_path)
        session.server_figures = ServerFigures(
            distance_km=result.distance_km,
            human_kcal=result.human_kcal,
            # A zero total from the server is treated as "not provided"
            companion_kcal_total=companion_total if companion_total else None,
        )
        session.distance_km = result.distance_km
        session.elapsed_seconds = result.duration_seconds
        self._recompute_energy()

    # ---- internals ----

    def _on_companions_changed(self) -> None:
        with self._lock:
            if self._state is not SessionState.active or self._profiles is None:
                return
            self._session.companions = self._profiles.selected_companions()
            self._recompute_energy()

    def _recompute_energy(self) -> None:
        session = self._session
        hours = session.hours
        figures = session.server_figures

        if figures is not None and figures.human_kcal is not None:
            session.human_kcal = figures.human_kcal
        else:
            session.human_kcal = energy.human_kcal(session.activity_kind, hours)

        if not session.companions:
            session.companion_kcal_total = 0
        elif figures is not None and figures.companion_kcal_total is not None:
            session.companion_kcal_total = figures.companion_kcal_total
        else:
            session.companion_kcal_total = energy.companion_kcal_total(
                session.companions, hours, session.distance_km, session.activity_kind
            )

    def _clear(self) -> None:
        self._session = None
        self._state = SessionState.idle
        self._generation += 1

    def _detach_sources(self) -> tuple[Optional[PositionSubscription], Optional[RepeatingTimer]]:
        subscription, ticker = self._subscription, self._ticker
        self._subscription = None
        self._ticker = None
        return subscription, ticker

    @staticmethod
    def _release_sources(subscription: Optional[PositionSubscription], ticker: Optional[RepeatingTimer]) -> None:
        # Called outside the lock: the ticker thread may be waiting on it
        if subscription is not None:
            subscription.remove()
        if ticker is not None:
            ticker.cancel()

    def close(self) -> None:
        """Stop the timer and the position subscription. The session itself is kept."""
        with self._lock:
            detached = self._detach_sources()
        self._release_sources(*detached)

    def __enter__(self) -> "SessionController":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
