"""Client configuration and credentials."""

from pydantic import BaseModel, Field

STATIONS_URL = "https://tickets.oebb.at/api/hafas/v1/stations"
BOARD_URL = "https://fahrplan.oebb.at/bin/stboard.exe/dn"
AUTH_URL = "https://tickets.oebb.at/api/domain/v3/init"

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


class ClientConfig(BaseModel):
    """Settings shared by every upstream request."""

    stations_url: str = Field(STATIONS_URL, description="Station search endpoint")
    board_url: str = Field(BOARD_URL, description="Live departure board endpoint")
    auth_url: str = Field(AUTH_URL, description="Session init endpoint")
    timeout: float = Field(10.0, gt=0, description="Per-request timeout in seconds")
    max_stations: int = Field(
        15, ge=1, description="Maximum number of station search results"
    )
    max_departures: int = Field(
        50, ge=1, description="Maximum departures fetched per station"
    )
    max_workers: int = Field(
        8, ge=1, description="Parallel board lookups when tracking a train"
    )
    user_agent: str = Field(DEFAULT_USER_AGENT, description="User-Agent header")


class Credentials(BaseModel):
    """Session credentials for the ticket shop API.

    The station and board endpoints currently answer without a session, so
    the anonymous variant is the default everywhere. Use
    :func:`oebb_live.core.upstream.fetch_credentials` to obtain a real one.
    """

    access_token: str | None = Field(None, description="AccessToken header value")
    channel: str | None = Field(None, description="Channel header value")
    session_id: str | None = Field(None, description="SessionId header value")
    support_id: str | None = Field(None, description="Support id (without prefix)")

    @classmethod
    def anonymous(cls) -> "Credentials":
        """Credentials that add no authentication headers."""
        return cls()

    @property
    def is_anonymous(self) -> bool:
        return not self.access_token

    def headers(self) -> dict[str, str]:
        """Request headers carrying these credentials."""
        if self.is_anonymous:
            return {}

        headers = {"AccessToken": str(self.access_token)}
        if self.channel:
            headers["Channel"] = self.channel
        if self.session_id:
            headers["SessionId"] = self.session_id
        if self.support_id:
            headers["x-ts-supportid"] = f"WEB_{self.support_id}"
        return headers
