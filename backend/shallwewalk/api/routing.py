"""Client for the remote walk-routing service.

One attempt per call: failures are classified and raised, never retried here.
"""

from typing import Callable, Iterable, Optional

import httpx
from loguru import logger
from pydantic import ValidationError

from shallwewalk.core import polyline
from shallwewalk.core.config import settings
from shallwewalk.core.energy import round_half_up
from shallwewalk.core.errors import AuthError, NetworkError, RouteError
from shallwewalk.schemas.geo import Coordinate
from shallwewalk.schemas.profile import AnimalProfile
from shallwewalk.schemas.route import (
    CompanionRegistration,
    RouteResult,
    RouteWalkRequest,
    RouteWalkResponse,
)


class RouteRequestAdapter:
    def __init__(
        self,
        base_url: str | None = None,
        timeout_seconds: float | None = None,
        token_provider: Optional[Callable[[], Optional[str]]] = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._base_url = (base_url or settings.routing_base_url).rstrip("/")
        self._timeout = timeout_seconds if timeout_seconds is not None else settings.routing_timeout_seconds
        self._token_provider = token_provider
        self._transport = transport

    def _client(self) -> httpx.Client:
        return httpx.Client(
            base_url=self._base_url,
            timeout=self._timeout,
            transport=self._transport,
            headers={"Content-Type": "application/json"},
        )

    def _auth_headers(self) -> dict[str, str]:
        token = self._token_provider() if self._token_provider else None
        return {"Authorization": f"Bearer {token}"} if token else {}

    def _post(self, path: str, body: dict) -> httpx.Response:
        try:
            with self._client() as client:
                r = client.post(path, json=body, headers=self._auth_headers())
        except httpx.TimeoutException as e:
            raise NetworkError(f"[POST {path}] timed out after {self._timeout}s") from e
        except httpx.HTTPError as e:
            raise NetworkError(f"[POST {path}] {e}") from e

        if r.status_code == 401:
            raise AuthError(f"[POST {path}] 401 session expired", status_code=401)
        if not r.is_success:
            raise RouteError(f"[POST {path}] {r.status_code} {r.text}", status_code=r.status_code)
        return r

    def request_walk_route(
        self,
        origin: Coordinate,
        destination: Coordinate,
        companion_names: Iterable[str] = (),
    ) -> RouteResult:
        """Ask the routing service for a walking route and decode it.

        Raises:
            AuthError: The service answered 401.
            NetworkError: The service could not be reached or timed out.
            RouteError: Any other non-success answer or an unreadable body.
            DecodeError: The returned polyline is malformed.
        """
        path = settings.routing_walk_path
        body = RouteWalkRequest(
            origin=origin,
            destination=destination,
            companion_names=list(companion_names),
        ).model_dump(mode="json", by_alias=True)

        r = self._post(path, body)
        try:
            payload = RouteWalkResponse.model_validate(r.json())
        except (ValueError, ValidationError) as e:
            raise RouteError(f"[POST {path}] unreadable response: {e}", status_code=r.status_code) from e

        decoded = polyline.decode(payload.encoded_polyline)

        per_animal: dict[str, int] = {}
        for animal in payload.per_animal:
            if animal.walk_calories_kcal is None:
                continue
            per_animal[animal.name] = per_animal.get(animal.name, 0) + round_half_up(animal.walk_calories_kcal)

        human = payload.human_walk_calories_kcal
        result = RouteResult(
            distance_km=payload.distance_meters / 1000,
            duration_seconds=round_half_up(payload.duration_seconds),
            decoded_path=decoded,
            human_kcal=round_half_up(human) if human is not None else None,
            per_animal_kcal=per_animal or None,
        )
        logger.info(
            f"Walk route received: {result.distance_km:.2f}km, {result.duration_seconds}s, {len(decoded)} point(s)"
        )
        return result

    def register_companions(self, profiles: Iterable[AnimalProfile]) -> bool:
        """Send companion profiles to the server. Best effort: returns False on any failure."""
        dogs = [
            CompanionRegistration(
                name=p.name,
                breed=p.breed,
                weight_kg=p.weight_kg,
                age_months=p.age_years * 12,
            ).model_dump(mode="json", by_alias=True)
            for p in profiles
        ]
        if not dogs:
            return True
        try:
            self._post(settings.routing_profile_path, {"dogs": dogs})
        except RouteError as e:
            logger.warning(f"Companion registration failed: {e}")
            return False
        return True
