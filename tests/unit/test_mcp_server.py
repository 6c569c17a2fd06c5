"""Tests for MCP server functionality."""

from datetime import datetime
from unittest.mock import MagicMock

import pytest

from conftest import departure
from oebb_live.core.exceptions import (
    NotFoundError,
    UpstreamUnavailableError,
    ValidationError,
)
from oebb_live.core.locator import infer_position
from oebb_live.core.models import (
    CheckpointStatus,
    DelayReport,
    DepartureRecord,
    JourneyCheckpoint,
    JourneyStatus,
    Station,
)
from oebb_live.mcp.server import OebbMCPServer


class TestOebbMCPServer:
    """Test cases for OebbMCPServer."""

    @pytest.fixture
    def server(self):
        """Create an OebbMCPServer with a mocked client."""
        return OebbMCPServer(client=MagicMock())

    @pytest.fixture
    def sample_stations(self):
        """Create sample stations for testing."""
        return [
            Station(station_id="1290401", name="Wien Hbf", latitude=48.185, longitude=16.376),
            Station(station_id="1291501", name="Wien Meidling"),
        ]

    @pytest.fixture
    def sample_records(self):
        """Create sample departure records for testing."""
        return [
            DepartureRecord.from_upstream(departure("RJ 840", "11:50")),
            DepartureRecord.from_upstream(departure("REX 7", "12:10", delay="10", tr="3")),
            DepartureRecord.from_upstream(
                departure("RJX 160", "12:30", delay="", status="Ausfall")
            ),
        ]

    def test_server_initialization(self, server):
        """Test that server initializes correctly."""
        assert server.server is not None
        assert server.client is not None
        assert callable(server.server.list_tools)

    @pytest.mark.asyncio
    async def test_search_stations_success(self, server, sample_stations):
        """Test successful station search."""
        server.client.search_stations.return_value = sample_stations

        result = await server._search_stations({"query": "Wien", "limit": 5})

        assert len(result) == 2
        text_content = result[0].text
        assert "Found 2 stations matching 'Wien'" in text_content
        assert "Wien Hbf" in text_content
        assert "ID: 1291501" in text_content
        assert "JSON Data:" in result[1].text
        assert '"station_id": "1290401"' in result[1].text
        server.client.search_stations.assert_called_once_with("Wien", 5)

    @pytest.mark.asyncio
    async def test_search_stations_default_limit(self, server):
        """Test that a missing limit falls back to the configured one."""
        server.client.search_stations.return_value = []

        result = await server._search_stations({"query": "Xyz"})

        assert len(result) == 1
        assert "No stations found matching 'Xyz'" in result[0].text
        server.client.search_stations.assert_called_once_with("Xyz", None)

    @pytest.mark.asyncio
    async def test_search_stations_validation_error(self, server):
        """Test station search with validation error."""
        server.client.search_stations.side_effect = ValidationError(
            "Station name cannot be empty"
        )

        result = await server._search_stations({"query": ""})

        assert len(result) == 1
        assert "Station search failed" in result[0].text
        assert "Station name cannot be empty" in result[0].text

    @pytest.mark.asyncio
    async def test_get_departures(self, server, sample_records):
        """Test departure board output."""
        server.client.get_departures.return_value = sample_records

        result = await server._get_departures({"station_id": "1290401"})

        assert len(result) == 2
        text_content = result[0].text
        assert "3 departures from station 1290401" in text_content
        assert "REX 7 to Salzburg Hbf (DELAYED by 10 min) - Platform: 3" in text_content
        assert "RJX 160 to Salzburg Hbf (CANCELED)" in text_content
        assert '"raw"' not in result[1].text

    @pytest.mark.asyncio
    async def test_get_departures_unavailable(self, server):
        """Test departure lookup when the upstream is down."""
        server.client.get_departures.side_effect = UpstreamUnavailableError(
            "connection refused"
        )

        result = await server._get_departures({"station_id": "1290401"})

        assert len(result) == 1
        assert "Departure lookup failed: connection refused" in result[0].text

    @pytest.mark.asyncio
    async def test_check_delay(self, server, sample_records):
        """Test a delayed train report."""
        server.client.check_delay.return_value = DelayReport(
            station_id="1290401",
            train_label="REX 7",
            record=sample_records[1],
            status=CheckpointStatus.DELAYED,
            is_delayed=True,
            delay_minutes=10,
            scheduled_departure="18.10.2026 12:10",
            actual_departure="18.10.2026 12:20",
            platform="3",
            direction="Salzburg Hbf",
        )

        result = await server._check_delay({"station_id": "1290401", "train": "REX 7"})

        assert "DELAYED by 10 minutes" in result[0].text
        assert "Actual departure: 18.10.2026 12:20" in result[0].text
        assert '"is_delayed": true' in result[1].text
        server.client.check_delay.assert_called_once_with("1290401", "REX 7")

    @pytest.mark.asyncio
    async def test_check_delay_not_found(self, server):
        """Test a delay check for a train that is not on the board."""
        server.client.check_delay.side_effect = NotFoundError(
            "Train RJ 999 not found at station 1290401"
        )

        result = await server._check_delay({"station_id": "1290401", "train": "RJ 999"})

        assert len(result) == 1
        assert "Delay check failed" in result[0].text
        assert "RJ 999" in result[0].text

    @pytest.mark.asyncio
    async def test_track_train(self, server, sample_records):
        """Test tracking output with a failed station."""
        checkpoints = [
            JourneyCheckpoint(
                station_id="1290401",
                found=True,
                status=CheckpointStatus.DEPARTED,
                scheduled_departure=datetime(2026, 10, 18, 11, 50),
                actual_departure=datetime(2026, 10, 18, 11, 50),
                platform="8",
                record=sample_records[0],
            ),
            JourneyCheckpoint(station_id="8100008", error="Request timed out"),
            JourneyCheckpoint(
                station_id="8100013",
                found=True,
                status=CheckpointStatus.DELAYED,
                scheduled_departure=datetime(2026, 10, 18, 13, 10),
                actual_departure=datetime(2026, 10, 18, 13, 15),
                delay_minutes=5,
            ),
        ]
        server.client.track_train.return_value = JourneyStatus(
            train_label="RJ 840",
            checkpoints=checkpoints,
            position=infer_position(checkpoints),
        )

        result = await server._track_train(
            {"train": "RJ 840", "station_ids": "1290401,8100008,8100013"}
        )

        text_content = result[0].text
        assert "Station 1290401: DEPARTED (platform 8)" in text_content
        assert "Station 8100008: error (Request timed out)" in text_content
        assert "Station 8100013: DELAYED (platform N/A, 5 min delay)" in text_content
        assert "Between stations 1290401 and 8100013" in text_content
        assert '"raw"' not in result[1].text
        server.client.track_train.assert_called_once_with(
            "RJ 840", ["1290401", "8100008", "8100013"]
        )

    @pytest.mark.asyncio
    async def test_track_train_failure(self, server):
        """Test tracking when the client raises."""
        server.client.track_train.side_effect = ValidationError("Train name cannot be empty")

        result = await server._track_train({"train": "", "station_ids": ["1"]})

        assert len(result) == 1
        assert "Tracking failed: Train name cannot be empty" in result[0].text
