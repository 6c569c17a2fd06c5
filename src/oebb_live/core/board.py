"""Departure boards: station id to a list of departure records."""

import logging
from datetime import datetime

from pydantic import ValidationError as PydanticValidationError

from . import models
from .config import ClientConfig
from .exceptions import NoDeparturesError, ValidationError
from .models import DepartureRecord
from .upstream import UpstreamSource

logger = logging.getLogger(__name__)


class BoardFetcher:
    """Fetch live departure boards from the upstream."""

    def __init__(self, upstream: UpstreamSource, config: ClientConfig | None = None):
        self.upstream = upstream
        self.config = config or ClientConfig()

    def fetch_board(
        self, station_id: str, at: datetime | None = None
    ) -> list[DepartureRecord]:
        """Get the departures scheduled from a station.

        The upstream answers for the current day whatever date is sent;
        ``at`` mostly selects the start time of the board.

        Args:
            station_id: Upstream station id, e.g. "1290401" for Wien Hbf
            at: Board start time, defaults to now

        Returns:
            Departure records in board order

        Raises:
            ValidationError: If the station id is empty
            UpstreamUnavailableError: If the upstream cannot be reached
            UpstreamFormatError: If the payload cannot be decoded
            NoDeparturesError: If the payload has no departures list
        """
        if not station_id or not str(station_id).strip():
            raise ValidationError("Station id cannot be empty")

        station_id = str(station_id).strip()
        when = at or models._now()
        payload = self.upstream.fetch_board(
            station_id, when, self.config.max_departures
        )

        journeys = payload.get("journey") if isinstance(payload, dict) else None
        if not isinstance(journeys, list):
            logger.debug(f"Board payload without departures: {payload!r:.500}")
            raise NoDeparturesError(
                f"No departures data in response for station {station_id}"
            )

        records: list[DepartureRecord] = []
        for entry in journeys[: self.config.max_departures]:
            if not isinstance(entry, dict):
                logger.warning(f"Skipping malformed departure at {station_id}: {entry!r}")
                continue
            try:
                records.append(DepartureRecord.from_upstream(entry))
            except PydanticValidationError as e:
                logger.warning(f"Skipping invalid departure at {station_id}: {e}")

        logger.info(f"Station {station_id}: {len(records)} departures")
        return records
