"""Access to the ÖBB HTTP endpoints.

Everything above this module talks to an :class:`UpstreamSource`, so the
concrete endpoints can be swapped without touching the resolver, the board
fetcher or the train locator.
"""

import json
import logging
import random
import re
import string
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any

import requests

from .config import ClientConfig, Credentials
from .exceptions import UpstreamFormatError, UpstreamUnavailableError

logger = logging.getLogger(__name__)

BOARD_MARKER = "journeysObj"
STATION_MARKER = r"SLs\.sls"


def decode_payload(text: str, marker: str | None = None) -> Any:
    """Decode a plain JSON body or a JSONP-style ``marker = {...}`` body.

    Args:
        text: Raw response body
        marker: Regex for the variable name wrapping the JSON object

    Returns:
        The decoded JSON value

    Raises:
        UpstreamFormatError: If no JSON can be extracted
    """
    if text is None:
        raise UpstreamFormatError("Empty response from upstream")

    body = text.strip()
    if body.startswith(("{", "[")):
        try:
            return json.loads(body)
        except json.JSONDecodeError as e:
            raise UpstreamFormatError(f"Invalid JSON in response: {e}") from e

    if marker:
        match = re.search(marker + r"\s*=\s*(\{.*\})", body, re.DOTALL)
        if match:
            try:
                return json.loads(match.group(1))
            except json.JSONDecodeError as e:
                raise UpstreamFormatError(
                    f"Invalid JSON after '{marker}' marker: {e}"
                ) from e

    logger.debug(f"Unparsable response sample: {body[:200]!r}")
    raise UpstreamFormatError("Could not extract JSON from response")


class UpstreamSource(ABC):
    """Contract for the external railway information service."""

    @abstractmethod
    def search_stations(self, name: str, count: int) -> Any:
        """Return the decoded station search payload for ``name``.

        Raises:
            UpstreamUnavailableError: On transport failure
            UpstreamFormatError: If the payload cannot be decoded
        """

    @abstractmethod
    def fetch_board(self, station_id: str, at: datetime, max_journeys: int) -> Any:
        """Return the decoded departure board payload for ``station_id``.

        Raises:
            UpstreamUnavailableError: On transport failure
            UpstreamFormatError: If the payload cannot be decoded
        """


class ScottyUpstream(UpstreamSource):
    """Upstream backed by the ticket shop station search and the SCOTTY
    live ticker board."""

    def __init__(
        self,
        config: ClientConfig | None = None,
        credentials: Credentials | None = None,
        session: requests.Session | None = None,
    ):
        """Initialize the upstream.

        Args:
            config: Endpoints, timeout and limits
            credentials: Session credentials, anonymous by default
            session: Optional pre-configured requests session
        """
        self.config = config or ClientConfig()
        self.credentials = credentials or Credentials.anonymous()
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "User-Agent": self.config.user_agent,
                "Accept": "application/json, text/javascript, */*; q=0.01",
            }
        )

    def search_stations(self, name: str, count: int) -> Any:
        logger.info(f"Searching stations matching '{name}' (count={count})")
        text = self._get(
            self.config.stations_url,
            params={"count": count, "name": name},
            headers=self.credentials.headers(),
        )
        return decode_payload(text, STATION_MARKER)

    def fetch_board(self, station_id: str, at: datetime, max_journeys: int) -> Any:
        params = {
            "L": "vs_scotty.vs_liveticker",
            "evaId": station_id,
            "boardType": "dep",
            "time": at.strftime("%H:%M"),
            "date": at.strftime("%d.%m.%Y"),
            "productsFilter": "1111111111111111",
            "additionalTime": "0",
            "maxJourneys": str(max_journeys),
            "outputMode": "tickerDataOnly",
            "start": "yes",
            "selectDate": "today",
        }
        logger.info(
            f"Requesting departures for station {station_id} "
            f"on {params['date']} at {params['time']}"
        )
        text = self._get(self.config.board_url, params=params)
        return decode_payload(text, BOARD_MARKER)

    def _get(
        self,
        url: str,
        params: dict[str, Any],
        headers: dict[str, str] | None = None,
    ) -> str:
        """Perform a single GET request and return the body text.

        Raises:
            UpstreamUnavailableError: If the request fails
        """
        try:
            response = self.session.get(
                url, params=params, headers=headers, timeout=self.config.timeout
            )
            response.raise_for_status()
            return response.text
        except requests.exceptions.RequestException as e:
            raise UpstreamUnavailableError(f"Request to {url} failed: {e}") from e


def fetch_credentials(
    config: ClientConfig | None = None, session: requests.Session | None = None
) -> Credentials:
    """Run the ticket shop session handshake.

    The station and board endpoints no longer require it; it is kept for
    endpoints that still check the session headers.

    Raises:
        UpstreamUnavailableError: If the request fails
        UpstreamFormatError: If the response carries no access token
    """
    config = config or ClientConfig()
    session = session or requests.Session()
    user_id = "".join(random.choices(string.ascii_lowercase + string.digits, k=13))

    try:
        response = session.get(
            config.auth_url,
            params={"userId": user_id},
            headers={"Channel": "inet", "User-Agent": config.user_agent},
            timeout=config.timeout,
        )
        response.raise_for_status()
    except requests.exceptions.RequestException as e:
        raise UpstreamUnavailableError(f"Authentication request failed: {e}") from e

    body = decode_payload(response.text)
    if not isinstance(body, dict) or not body.get("accessToken"):
        raise UpstreamFormatError("No access token in authentication response")

    logger.info("Obtained ticket shop session")
    fields = {
        "access_token": body["accessToken"],
        "channel": body.get("channel"),
        "session_id": body.get("sessionId"),
        "support_id": body.get("supportId"),
    }
    # ids come back as numbers or strings
    return Credentials(
        **{key: None if value is None else str(value) for key, value in fields.items()}
    )
