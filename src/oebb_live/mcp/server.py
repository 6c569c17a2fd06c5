"""MCP Server for ÖBB live data.

This module implements a Model Context Protocol (MCP) server that exposes
station search, departure boards, delay checks and train tracking.
"""

import asyncio
import json
import logging
from typing import Any

from mcp.server import NotificationOptions, Server
from mcp.server.models import InitializationOptions
from mcp.types import (
    TextContent,
    Tool,
)

from ..core.client import OebbLiveClient
from ..core.exceptions import OebbLiveError

logger = logging.getLogger(__name__)


def _json_block(data: Any) -> TextContent:
    return TextContent(
        type="text",
        text=f"JSON Data:\n```json\n{json.dumps(data, indent=2, ensure_ascii=False)}\n```",
    )


class OebbMCPServer:
    """MCP Server for ÖBB live data functionality."""

    def __init__(self, client: OebbLiveClient | None = None) -> None:
        """Initialize the server.

        Args:
            client: Client used for all lookups, a default one if omitted
        """
        self.server = Server("oebb-live")
        self.client = client or OebbLiveClient()
        self._register_handlers()

    def _register_handlers(self) -> None:
        """Register MCP protocol handlers."""

        @self.server.list_tools()
        async def handle_list_tools() -> list[Tool]:
            """List available tools."""
            return [
                Tool(
                    name="search_stations",
                    description="Search for Austrian railway stations by name",
                    inputSchema={
                        "type": "object",
                        "properties": {
                            "query": {
                                "type": "string",
                                "description": "Station name, e.g. 'Wien Hbf'",
                            },
                            "limit": {
                                "type": "integer",
                                "description": "Maximum number of results to return",
                                "default": 15,
                                "minimum": 1,
                                "maximum": 50,
                            },
                        },
                        "required": ["query"],
                    },
                ),
                Tool(
                    name="get_departures",
                    description="Get the live departure board of a station",
                    inputSchema={
                        "type": "object",
                        "properties": {
                            "station_id": {
                                "type": "string",
                                "description": "Station id from search_stations",
                            },
                        },
                        "required": ["station_id"],
                    },
                ),
                Tool(
                    name="check_delay",
                    description="Check whether a train is delayed at a station",
                    inputSchema={
                        "type": "object",
                        "properties": {
                            "station_id": {
                                "type": "string",
                                "description": "Station id from search_stations",
                            },
                            "train": {
                                "type": "string",
                                "description": "Train name, e.g. 'RJ 840'",
                            },
                        },
                        "required": ["station_id", "train"],
                    },
                ),
                Tool(
                    name="track_train",
                    description=(
                        "Track a train through several stations given in route "
                        "order and estimate its current position"
                    ),
                    inputSchema={
                        "type": "object",
                        "properties": {
                            "train": {
                                "type": "string",
                                "description": "Train name, e.g. 'RJ 840'",
                            },
                            "station_ids": {
                                "type": "array",
                                "items": {"type": "string"},
                                "description": "Station ids in route order",
                            },
                        },
                        "required": ["train", "station_ids"],
                    },
                ),
            ]

        @self.server.call_tool()
        async def handle_call_tool(
            name: str, arguments: dict[str, Any]
        ) -> list[TextContent]:
            """Handle tool calls."""
            try:
                if name == "search_stations":
                    return await self._search_stations(arguments)
                elif name == "get_departures":
                    return await self._get_departures(arguments)
                elif name == "check_delay":
                    return await self._check_delay(arguments)
                elif name == "track_train":
                    return await self._track_train(arguments)
                else:
                    return [TextContent(type="text", text=f"Unknown tool: {name}")]

            except Exception as e:
                logger.error(f"Error in tool {name}: {e}")
                return [TextContent(type="text", text=f"Error: {str(e)}")]

    async def _search_stations(self, arguments: dict[str, Any]) -> list[TextContent]:
        """Search for stations by name."""
        query = arguments["query"]
        limit = arguments.get("limit")

        try:
            stations = await asyncio.to_thread(
                self.client.search_stations, query, limit
            )
        except OebbLiveError as e:
            return [TextContent(type="text", text=f"Station search failed: {str(e)}")]

        if not stations:
            return [
                TextContent(type="text", text=f"No stations found matching '{query}'")
            ]

        result_text = f"**Found {len(stations)} stations matching '{query}':**\n\n"
        for i, station in enumerate(stations, 1):
            result_text += f"{i}. **{station.name}** (ID: {station.station_id})\n"

        return [
            TextContent(type="text", text=result_text),
            _json_block([s.model_dump(mode="json") for s in stations]),
        ]

    async def _get_departures(self, arguments: dict[str, Any]) -> list[TextContent]:
        """Get departures from a station."""
        station_id = arguments["station_id"]

        try:
            records = await asyncio.to_thread(self.client.get_departures, station_id)
        except OebbLiveError as e:
            return [
                TextContent(type="text", text=f"Departure lookup failed: {str(e)}")
            ]

        if not records:
            return [
                TextContent(
                    type="text", text=f"No departures found for station {station_id}"
                )
            ]

        result_text = f"**{len(records)} departures from station {station_id}:**\n\n"
        for record in records:
            if record.canceled:
                info = " (CANCELED)"
            elif record.has_delay:
                info = f" (DELAYED by {record.delay_minutes} min)"
            else:
                info = ""
            result_text += (
                f"• {record.scheduled_time} {record.train_label or 'Unknown'} "
                f"to {record.destination or 'Unknown'}{info}"
                f" - Platform: {record.platform or 'N/A'}\n"
            )

        return [
            TextContent(type="text", text=result_text),
            _json_block([r.model_dump(mode="json", exclude={"raw"}) for r in records]),
        ]

    async def _check_delay(self, arguments: dict[str, Any]) -> list[TextContent]:
        """Check the delay of one train at one station."""
        station_id = arguments["station_id"]
        train = arguments["train"]

        try:
            report = await asyncio.to_thread(self.client.check_delay, station_id, train)
        except OebbLiveError as e:
            return [TextContent(type="text", text=f"Delay check failed: {str(e)}")]

        if report.canceled:
            result_text = f"**Train {report.train_label} is CANCELED**\n"
        elif report.is_delayed:
            result_text = (
                f"**Train {report.train_label} is DELAYED by "
                f"{report.delay_minutes} minutes**\n"
                f"• Scheduled departure: {report.scheduled_departure}\n"
                f"• Actual departure: {report.actual_departure}\n"
            )
        else:
            result_text = (
                f"**Train {report.train_label} is on time**\n"
                f"• Departure: {report.scheduled_departure}\n"
            )
        result_text += f"• Direction: {report.direction or 'Unknown'}\n"
        result_text += f"• Platform: {report.platform or 'N/A'}\n"

        return [
            TextContent(type="text", text=result_text),
            _json_block(report.model_dump(mode="json", exclude={"record": {"raw"}})),
        ]

    async def _track_train(self, arguments: dict[str, Any]) -> list[TextContent]:
        """Track a train through stations."""
        train = arguments["train"]
        station_ids = arguments["station_ids"]
        if isinstance(station_ids, str):
            station_ids = station_ids.split(",")

        try:
            journey = await asyncio.to_thread(
                self.client.track_train, train, station_ids
            )
        except OebbLiveError as e:
            return [TextContent(type="text", text=f"Tracking failed: {str(e)}")]

        result_text = f"**Results for train {journey.train_label}:**\n\n"
        for checkpoint in journey.checkpoints:
            if checkpoint.error:
                result_text += (
                    f"• Station {checkpoint.station_id}: error ({checkpoint.error})\n"
                )
            elif checkpoint.found:
                result_text += (
                    f"• Station {checkpoint.station_id}: "
                    f"{checkpoint.status.value.upper()}"
                    f" (platform {checkpoint.platform or 'N/A'}"
                )
                if checkpoint.delay_minutes > 0:
                    result_text += f", {checkpoint.delay_minutes} min delay"
                if checkpoint.canceled:
                    result_text += ", canceled"
                result_text += ")\n"
            else:
                result_text += f"• Station {checkpoint.station_id}: train not found\n"

        result_text += f"\n**Current status:** {journey.position.describe()}\n"

        without_raw = {"record": {"raw"}}
        data = journey.model_dump(
            mode="json",
            exclude={
                "checkpoints": {"__all__": without_raw},
                "position": {"last_departed": without_raw, "next_arrival": without_raw},
            },
        )
        return [TextContent(type="text", text=result_text), _json_block(data)]


async def main() -> None:
    """Main entry point for the MCP server."""
    # Configure logging
    logging.basicConfig(level=logging.INFO)
    logger.info("Starting ÖBB Live MCP Server")

    server_instance = OebbMCPServer()

    from mcp.server.stdio import stdio_server

    async with stdio_server() as (read_stream, write_stream):
        logger.info("MCP Server running with stdio transport")
        await server_instance.server.run(
            read_stream,
            write_stream,
            InitializationOptions(
                server_name="oebb-live",
                server_version="0.1.0",
                capabilities=server_instance.server.get_capabilities(
                    notification_options=NotificationOptions(),
                    experimental_capabilities={},
                ),
            ),
        )


def main_sync() -> None:
    """Synchronous wrapper for the async main function - used as entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    main_sync()
