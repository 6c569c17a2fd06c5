"""ÖBB Live Package

A Python package for searching Austrian railway stations, reading live
departure boards and tracking trains, with CLI and MCP server interfaces.
"""

__version__ = "0.1.0"

from .core.client import OebbLiveClient
from .core.models import DepartureRecord, JourneyStatus, Station

__all__ = ["DepartureRecord", "JourneyStatus", "OebbLiveClient", "Station"]
