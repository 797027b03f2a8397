from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class Coordinate(BaseModel):
    """An immutable WGS84 position in decimal degrees."""

    model_config = ConfigDict(frozen=True)

    latitude: float
    longitude: float


class PositionSample(Coordinate):
    """A device fix as delivered by the position source."""

    timestamp: Optional[datetime] = None
