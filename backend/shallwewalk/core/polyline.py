"""Encoded polyline codec.

Wire format: each signed coordinate delta (scaled by 1e5) is zig-zag encoded
and split into 5-bit chunks, least significant first. Every chunk except the
last has the 0x20 continuation bit set, and each is offset by 63 so the
result is printable ASCII. Latitude and longitude deltas alternate.
"""

from typing import Iterable

from shallwewalk.core.constants import POLYLINE_PRECISION
from shallwewalk.core.errors import DecodeError
from shallwewalk.schemas.geo import Coordinate

_OFFSET = 63
_CHUNK_MASK = 0x1F
_CONTINUATION = 0x20
# Highest character a chunk can produce: 63 + 0x3f
_MAX_CHAR = _OFFSET + 0x3F


def _read_value(encoded: str, index: int) -> tuple[int, int]:
    result = 0
    shift = 0
    while True:
        if index >= len(encoded):
            raise DecodeError(f"Polyline ends mid-value at offset {index}")
        code = ord(encoded[index])
        if code < _OFFSET or code > _MAX_CHAR:
            raise DecodeError(f"Invalid polyline character {encoded[index]!r} at offset {index}")
        chunk = code - _OFFSET
        index += 1
        result |= (chunk & _CHUNK_MASK) << shift
        shift += 5
        if chunk < _CONTINUATION:
            break
    delta = ~(result >> 1) if result & 1 else result >> 1
    return delta, index


def decode(encoded: str, precision: int = POLYLINE_PRECISION) -> list[Coordinate]:
    """Decode an encoded polyline into an ordered list of coordinates.

    Raises:
        DecodeError: If the string is truncated or contains characters outside
            the encoding alphabet.
    """
    if not encoded:
        return []

    factor = 10**precision
    coordinates: list[Coordinate] = []
    index = 0
    lat = 0
    lng = 0
    while index < len(encoded):
        dlat, index = _read_value(encoded, index)
        if index >= len(encoded):
            raise DecodeError("Polyline has a latitude without a matching longitude")
        dlng, index = _read_value(encoded, index)
        lat += dlat
        lng += dlng
        coordinates.append(Coordinate(latitude=lat / factor, longitude=lng / factor))
    return coordinates


def _encode_value(value: int) -> str:
    value = ~(value << 1) if value < 0 else value << 1
    chunks = []
    while value >= _CONTINUATION:
        chunks.append(chr((_CONTINUATION | (value & _CHUNK_MASK)) + _OFFSET))
        value >>= 5
    chunks.append(chr(value + _OFFSET))
    return "".join(chunks)


def encode(path: Iterable[Coordinate], precision: int = POLYLINE_PRECISION) -> str:
    """Encode coordinates; the inverse of decode() up to 1e-5 degree precision."""
    factor = 10**precision
    out = []
    prev_lat = 0
    prev_lng = 0
    for point in path:
        lat = int(round(point.latitude * factor))
        lng = int(round(point.longitude * factor))
        out.append(_encode_value(lat - prev_lat))
        out.append(_encode_value(lng - prev_lng))
        prev_lat, prev_lng = lat, lng
    return "".join(out)
