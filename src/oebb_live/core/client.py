"""High level client wiring the upstream, resolver, boards and locator."""

from collections.abc import Sequence
from datetime import datetime

from .board import BoardFetcher
from .config import ClientConfig, Credentials
from .locator import TrainLocator
from .models import DelayReport, DepartureRecord, JourneyStatus, Station
from .resolver import StationResolver
from .upstream import ScottyUpstream, UpstreamSource


class OebbLiveClient:
    """Client for ÖBB station search, departure boards and train tracking."""

    def __init__(
        self,
        config: ClientConfig | None = None,
        credentials: Credentials | None = None,
        upstream: UpstreamSource | None = None,
    ):
        """Initialize the client.

        Args:
            config: Endpoints, timeout and limits
            credentials: Session credentials, anonymous by default
            upstream: Replacement upstream, e.g. for another endpoint or tests
        """
        self.config = config or ClientConfig()
        self.upstream = upstream or ScottyUpstream(self.config, credentials)
        self.resolver = StationResolver(self.upstream, self.config)
        self.boards = BoardFetcher(self.upstream, self.config)
        self.locator = TrainLocator(self.boards, self.config)

    def search_stations(self, name: str, count: int | None = None) -> list[Station]:
        return self.resolver.resolve(name, count=count)

    def get_departures(
        self, station_id: str, at: datetime | None = None
    ) -> list[DepartureRecord]:
        return self.boards.fetch_board(station_id, at=at)

    def check_delay(self, station_id: str, train_label: str) -> DelayReport:
        return self.locator.check_delay(station_id, train_label)

    def track_train(
        self, train_label: str, station_ids: Sequence[str]
    ) -> JourneyStatus:
        return self.locator.track(train_label, station_ids)
