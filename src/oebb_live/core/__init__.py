"""Core ÖBB live data functionality."""

from .board import BoardFetcher
from .client import OebbLiveClient
from .config import ClientConfig, Credentials
from .exceptions import (
    NoDeparturesError,
    NotFoundError,
    OebbLiveError,
    UpstreamFormatError,
    UpstreamUnavailableError,
    ValidationError,
)
from .locator import TrainLocator
from .models import (
    CheckpointStatus,
    DelayReport,
    DepartureRecord,
    JourneyCheckpoint,
    JourneyPosition,
    JourneyStatus,
    PositionKind,
    Realtime,
    Station,
)
from .resolver import StationResolver
from .upstream import ScottyUpstream, UpstreamSource, fetch_credentials

__all__ = [
    "BoardFetcher",
    "CheckpointStatus",
    "ClientConfig",
    "Credentials",
    "DelayReport",
    "DepartureRecord",
    "JourneyCheckpoint",
    "JourneyPosition",
    "JourneyStatus",
    "OebbLiveClient",
    "PositionKind",
    "Realtime",
    "ScottyUpstream",
    "Station",
    "StationResolver",
    "TrainLocator",
    "UpstreamSource",
    "fetch_credentials",
    "OebbLiveError",
    "UpstreamUnavailableError",
    "UpstreamFormatError",
    "NotFoundError",
    "NoDeparturesError",
    "ValidationError",
]
