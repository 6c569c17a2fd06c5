"""Data models for ÖBB stations, departures and train tracking."""

from datetime import date, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

DATE_FORMAT = "%d.%m.%Y"
TIME_FORMAT = "%H:%M"

CANCELED_STATUS = "Ausfall"


def _now() -> datetime:
    """Current local time. Extracted for test patching."""
    return datetime.now()


def _text(value: Any) -> str | None:
    """Upstream value as a string, None when empty."""
    if value is None or value == "" or value is False:
        return None
    return str(value)


class Station(BaseModel):
    """Represents a railway station returned by the station search."""

    station_id: str = Field(..., description="Upstream station id (EVA number)")
    name: str = Field(..., description="Display name")
    latitude: float | None = Field(None, description="Latitude in degrees")
    longitude: float | None = Field(None, description="Longitude in degrees")

    def __str__(self) -> str:
        return self.name


class Realtime(BaseModel):
    """Live tracking data attached to a scheduled departure."""

    delay_minutes: str | None = Field(
        None, description="Delay in minutes, as sent by the upstream"
    )
    actual_time: str | None = Field(None, description="Expected time (HH:MM)")
    actual_date: str | None = Field(None, description="Expected date (DD.MM.YYYY)")
    status: str | None = Field(None, description="Upstream status tag")

    @property
    def has_delay(self) -> bool:
        """Whether the delay field is set.

        A literal "0" is sent for live trains running on time and does not
        count as a delay.
        """
        if not self.delay_minutes:
            return False
        return self.delay_minutes.strip() not in ("", "0")

    @property
    def delay(self) -> int:
        """Delay in whole minutes, 0 when absent or unparsable."""
        if not self.has_delay:
            return 0
        try:
            return int(str(self.delay_minutes).strip())
        except ValueError:
            return 0

    @property
    def canceled(self) -> bool:
        return self.status == CANCELED_STATUS


class DepartureRecord(BaseModel):
    """One departure from a station board."""

    train_label: str = Field(..., description="Public train name, e.g. 'RJ 840'")
    scheduled_time: str = Field("", description="Scheduled time (HH:MM)")
    scheduled_date: str = Field("", description="Scheduled date (DD.MM.YYYY)")
    destination: str = Field("", description="Last stop of the train")
    platform: str = Field("", description="Departure platform, may be empty")
    realtime: Realtime | None = Field(None, description="Live data, if any")
    raw: dict[str, Any] = Field(
        default_factory=dict, description="Untouched upstream record"
    )

    @classmethod
    def from_upstream(cls, raw: dict[str, Any]) -> "DepartureRecord":
        """Translate an abbreviated board entry into a record.

        Upstream keys: ``pr`` product/train name, ``ti`` time, ``da`` date,
        ``lastStop``/``st`` destination, ``tr`` track and ``rt`` realtime
        (``dlm`` delay minutes, ``dlt`` time, ``dld`` date, ``status``).
        """
        realtime = None
        rt = raw.get("rt")
        if isinstance(rt, dict):
            dlm = rt.get("dlm")
            realtime = Realtime(
                delay_minutes=None if dlm is None else str(dlm),
                actual_time=_text(rt.get("dlt")),
                actual_date=_text(rt.get("dld")),
                status=_text(rt.get("status")),
            )

        return cls(
            train_label=str(raw.get("pr") or ""),
            scheduled_time=str(raw.get("ti") or ""),
            scheduled_date=str(raw.get("da") or ""),
            destination=str(raw.get("lastStop") or raw.get("st") or ""),
            platform=str(raw.get("tr") or ""),
            realtime=realtime,
            raw=raw,
        )

    @property
    def has_delay(self) -> bool:
        return self.realtime is not None and self.realtime.has_delay

    @property
    def delay_minutes(self) -> int:
        return self.realtime.delay if self.realtime else 0

    @property
    def canceled(self) -> bool:
        return self.realtime is not None and self.realtime.canceled

    def scheduled_at(self, default_date: date | None = None) -> datetime:
        """Combine scheduled date and time into a naive local datetime.

        Raises:
            ValueError: If the date or time cannot be parsed
        """
        if self.scheduled_date:
            day = datetime.strptime(self.scheduled_date, DATE_FORMAT).date()
        elif default_date is not None:
            day = default_date
        else:
            raise ValueError(f"No scheduled date for {self.train_label}")

        clock = datetime.strptime(self.scheduled_time, TIME_FORMAT).time()
        return datetime.combine(day, clock)

    def __str__(self) -> str:
        return f"{self.train_label} → {self.destination} ({self.scheduled_time})"


class CheckpointStatus(str, Enum):
    """Status of a train at one checked station."""

    SCHEDULED = "scheduled"
    DELAYED = "delayed"
    DEPARTED = "departed"
    NOT_FOUND = "not_found"


class JourneyCheckpoint(BaseModel):
    """Derived status of a train at one station for a single locate call."""

    station_id: str = Field(..., description="Checked station id")
    found: bool = Field(False, description="Whether the train was on the board")
    status: CheckpointStatus = Field(CheckpointStatus.NOT_FOUND)
    scheduled_departure: datetime | None = Field(None)
    actual_departure: datetime | None = Field(
        None, description="Scheduled departure plus delay"
    )
    delay_minutes: int = Field(0)
    platform: str = Field("")
    canceled: bool = Field(False)
    record: DepartureRecord | None = Field(None, description="Matched departure")
    error: str | None = Field(None, description="Lookup error, if the board failed")

    @property
    def departed(self) -> bool:
        return self.status == CheckpointStatus.DEPARTED


class PositionKind(str, Enum):
    """Coarse position of a train relative to the checked stations."""

    BETWEEN = "between"
    PASSED_ALL = "passed_all"
    NOT_DEPARTED = "not_departed"
    UNKNOWN = "unknown"


class JourneyPosition(BaseModel):
    """Where a train is, inferred from ordered checkpoints."""

    kind: PositionKind = Field(PositionKind.UNKNOWN)
    last_departed: JourneyCheckpoint | None = Field(None)
    last_departed_index: int | None = Field(None)
    next_arrival: JourneyCheckpoint | None = Field(None)
    next_arrival_index: int | None = Field(None)

    def describe(self) -> str:
        """One-line human readable description."""
        last = self.last_departed.station_id if self.last_departed else None
        upcoming = self.next_arrival.station_id if self.next_arrival else None

        if self.kind == PositionKind.BETWEEN:
            return f"Between stations {last} and {upcoming}"
        if self.kind == PositionKind.PASSED_ALL:
            return f"Departed from all checked stations, last seen at {last}"
        if self.kind == PositionKind.NOT_DEPARTED:
            return f"Not yet departed from first station {upcoming}"
        return "Unable to determine train location"


class JourneyStatus(BaseModel):
    """Result of tracking one train across several stations."""

    train_label: str
    checkpoints: list[JourneyCheckpoint] = Field(default_factory=list)
    position: JourneyPosition = Field(default_factory=JourneyPosition)


class DelayReport(BaseModel):
    """Delay check for one train at one station."""

    station_id: str
    train_label: str
    record: DepartureRecord
    status: CheckpointStatus
    is_delayed: bool = Field(False, description="True when delay is above zero")
    delay_minutes: int = Field(0)
    scheduled_departure: str = Field("", description="'DD.MM.YYYY HH:MM'")
    actual_departure: str = Field("", description="'DD.MM.YYYY HH:MM'")
    platform: str = Field("")
    direction: str = Field("")
    realtime_status: str | None = Field(None)
    canceled: bool = Field(False)

    def __str__(self) -> str:
        if self.canceled:
            return f"{self.train_label} is canceled"
        if self.is_delayed:
            return f"{self.train_label} is delayed by {self.delay_minutes} min"
        return f"{self.train_label} is on time"
