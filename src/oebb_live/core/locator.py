"""Train locating: match a train on station boards and infer its position."""

import logging
import re
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta

from . import models
from .board import BoardFetcher
from .config import ClientConfig
from .exceptions import NotFoundError, OebbLiveError, UpstreamFormatError
from .models import (
    CheckpointStatus,
    DelayReport,
    DepartureRecord,
    JourneyCheckpoint,
    JourneyPosition,
    JourneyStatus,
    PositionKind,
)

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")


def _squash(label: str) -> str:
    return _WHITESPACE.sub("", label).lower()


def _match_normalized(query: str, label: str) -> bool:
    return bool(label) and _squash(label) == _squash(query)


def _match_exact(query: str, label: str) -> bool:
    return bool(label) and label == query


def _match_contains(query: str, label: str) -> bool:
    return bool(label) and query.lower() in label.lower()


# Ordered by precedence
MATCHERS = (_match_normalized, _match_exact, _match_contains)


def label_matches(query: str, label: str) -> bool:
    """Whether a board label refers to the queried train."""
    return any(matcher(query, label) for matcher in MATCHERS)


def find_train(
    records: Sequence[DepartureRecord], train_label: str
) -> DepartureRecord | None:
    """Find a train on a board.

    Each matching rule is tried against the whole board before falling
    back to the next, looser one; the first record matching wins.
    """
    for matcher in MATCHERS:
        for record in records:
            if matcher(train_label, record.train_label):
                return record
    return None


def derive_status(
    record: DepartureRecord, now: datetime
) -> tuple[CheckpointStatus, datetime, datetime]:
    """Derive the status of a matched departure.

    Returns:
        (status, scheduled departure, actual departure)

    Raises:
        UpstreamFormatError: If the scheduled date or time cannot be parsed
    """
    try:
        scheduled = record.scheduled_at(default_date=now.date())
    except ValueError as e:
        raise UpstreamFormatError(
            f"Invalid schedule for {record.train_label}: {e}"
        ) from e

    actual = scheduled + timedelta(minutes=record.delay_minutes)

    if now > actual:
        status = CheckpointStatus.DEPARTED
    elif record.has_delay:
        status = CheckpointStatus.DELAYED
    else:
        status = CheckpointStatus.SCHEDULED
    return status, scheduled, actual


def build_checkpoint(
    station_id: str,
    records: Sequence[DepartureRecord],
    train_label: str,
    now: datetime,
) -> JourneyCheckpoint:
    """Build the checkpoint of a train at one station from its board."""
    record = find_train(records, train_label)
    if record is None:
        return JourneyCheckpoint(station_id=station_id)

    try:
        status, scheduled, actual = derive_status(record, now)
    except UpstreamFormatError as e:
        # on the board, but without a usable schedule
        return JourneyCheckpoint(
            station_id=station_id,
            found=True,
            platform=record.platform,
            canceled=record.canceled,
            record=record,
            error=str(e),
        )

    return JourneyCheckpoint(
        station_id=station_id,
        found=True,
        status=status,
        scheduled_departure=scheduled,
        actual_departure=actual,
        delay_minutes=record.delay_minutes,
        platform=record.platform,
        canceled=record.canceled,
        record=record,
    )


def infer_position(checkpoints: Sequence[JourneyCheckpoint]) -> JourneyPosition:
    """Infer where the train is from checkpoints in route order."""
    last_idx: int | None = None
    for idx, checkpoint in enumerate(checkpoints):
        if checkpoint.status == CheckpointStatus.DEPARTED:
            last_idx = idx

    next_idx: int | None = None
    start = 0 if last_idx is None else last_idx + 1
    for idx in range(start, len(checkpoints)):
        if checkpoints[idx].status in (
            CheckpointStatus.SCHEDULED,
            CheckpointStatus.DELAYED,
        ):
            next_idx = idx
            break

    if last_idx is not None and next_idx is not None:
        kind = PositionKind.BETWEEN
    elif last_idx is not None:
        kind = PositionKind.PASSED_ALL
    elif next_idx is not None:
        kind = PositionKind.NOT_DEPARTED
    else:
        kind = PositionKind.UNKNOWN

    return JourneyPosition(
        kind=kind,
        last_departed=checkpoints[last_idx] if last_idx is not None else None,
        last_departed_index=last_idx,
        next_arrival=checkpoints[next_idx] if next_idx is not None else None,
        next_arrival_index=next_idx,
    )


class TrainLocator:
    """Locate a train across the departure boards of several stations."""

    def __init__(self, boards: BoardFetcher, config: ClientConfig | None = None):
        self.boards = boards
        self.config = config or boards.config

    def check_delay(self, station_id: str, train_label: str) -> DelayReport:
        """Check whether a train is delayed at one station.

        Raises:
            NotFoundError: If the train is not on the station board
            UpstreamUnavailableError: If the upstream cannot be reached
            UpstreamFormatError: If the payload cannot be decoded
            NoDeparturesError: If the payload has no departures list
        """
        records = self.boards.fetch_board(station_id)
        logger.info(f"Searching for train {train_label} in {len(records)} departures")

        checkpoint = build_checkpoint(station_id, records, train_label, models._now())
        record = checkpoint.record
        if record is None:
            raise NotFoundError(
                f"Train {train_label} not found at station {station_id}"
            )
        if checkpoint.error:
            raise UpstreamFormatError(checkpoint.error)

        scheduled = f"{record.scheduled_date} {record.scheduled_time}".strip()
        realtime = record.realtime
        if realtime is not None:
            actual = "{} {}".format(
                realtime.actual_date or record.scheduled_date,
                realtime.actual_time or record.scheduled_time,
            ).strip()
        else:
            actual = scheduled

        return DelayReport(
            station_id=station_id,
            train_label=record.train_label,
            record=record,
            status=checkpoint.status,
            is_delayed=record.delay_minutes > 0,
            delay_minutes=record.delay_minutes,
            scheduled_departure=scheduled,
            actual_departure=actual,
            platform=record.platform,
            direction=record.destination,
            realtime_status=realtime.status if realtime else None,
            canceled=record.canceled,
        )

    def track(self, train_label: str, station_ids: Sequence[str]) -> JourneyStatus:
        """Track a train through stations given in route order.

        The order of ``station_ids`` is trusted as the route order; it is
        not checked against the real route of the train. A station whose
        board cannot be fetched yields a ``found=False`` checkpoint with
        the error recorded instead of failing the whole lookup; a train
        found without a usable schedule stays ``found`` with the error set.
        """
        now = models._now()
        station_ids = [str(s).strip() for s in station_ids if str(s).strip()]
        logger.info(
            f"Tracking train {train_label} through stations: {', '.join(station_ids)}"
        )

        def check_station(station_id: str) -> JourneyCheckpoint:
            try:
                records = self.boards.fetch_board(station_id)
                return build_checkpoint(station_id, records, train_label, now)
            except OebbLiveError as e:
                logger.warning(f"Error checking station {station_id}: {e}")
                return JourneyCheckpoint(station_id=station_id, error=str(e))

        if station_ids:
            workers = min(self.config.max_workers, len(station_ids))
            with ThreadPoolExecutor(max_workers=workers) as executor:
                checkpoints = list(executor.map(check_station, station_ids))
        else:
            checkpoints = []

        return JourneyStatus(
            train_label=train_label,
            checkpoints=checkpoints,
            position=infer_position(checkpoints),
        )
