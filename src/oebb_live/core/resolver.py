"""Station search: free text to an ordered list of stations."""

import logging
from typing import Any

from .config import ClientConfig
from .exceptions import UpstreamFormatError, ValidationError
from .models import Station
from .upstream import UpstreamSource

logger = logging.getLogger(__name__)


def _coordinate(value: Any) -> float | None:
    """Convert an upstream coordinate to degrees.

    Integer micro-degrees (e.g. ``16375326``) are scaled down.
    """
    if value in (None, ""):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if abs(number) > 180:
        number = number / 1_000_000
    return number


def _station_from_entry(entry: dict[str, Any]) -> Station | None:
    """Normalize one search result, or return None if it has no id."""
    if "extId" in entry or "value" in entry:
        # ajax-getstop suggestion shape
        station_id = entry.get("extId")
        name = entry.get("value")
        latitude = _coordinate(entry.get("ycoord"))
        longitude = _coordinate(entry.get("xcoord"))
    else:
        station_id = entry.get("number")
        name = entry.get("meta") or entry.get("name")
        latitude = _coordinate(entry.get("latitude"))
        longitude = _coordinate(entry.get("longitude"))

    if station_id in (None, ""):
        return None

    return Station(
        station_id=str(station_id),
        name=str(name or station_id),
        latitude=latitude,
        longitude=longitude,
    )


class StationResolver:
    """Resolve station names through the upstream station search."""

    def __init__(self, upstream: UpstreamSource, config: ClientConfig | None = None):
        self.upstream = upstream
        self.config = config or ClientConfig()

    def resolve(self, query: str, count: int | None = None) -> list[Station]:
        """Search stations by name.

        Args:
            query: Free-text station name
            count: Maximum number of results, defaults to the configured limit

        Returns:
            Stations in the upstream's relevance order

        Raises:
            ValidationError: If the query is empty
            UpstreamFormatError: If the response has an unexpected shape
            UpstreamUnavailableError: If the upstream cannot be reached
        """
        if not query or not query.strip():
            raise ValidationError("Station name cannot be empty")

        limit = count or self.config.max_stations
        payload = self.upstream.search_stations(query.strip(), limit)

        if isinstance(payload, dict) and "suggestions" in payload:
            entries = payload["suggestions"]
        else:
            entries = payload

        if not isinstance(entries, list):
            raise UpstreamFormatError(
                f"Expected a list of stations, got {type(entries).__name__}"
            )

        stations: list[Station] = []
        for entry in entries:
            if not isinstance(entry, dict):
                raise UpstreamFormatError("Station entry is not an object")
            station = _station_from_entry(entry)
            if station is None:
                logger.debug(f"Skipping station entry without id: {entry}")
                continue
            stations.append(station)

        logger.info(f"Found {len(stations)} stations matching '{query}'")
        return stations[:limit]
