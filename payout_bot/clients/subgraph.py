"""
Subgraph client.

Fetches the newest winning ticket redemption from the Livepeer subgraph.
"""

from typing import Optional

import requests
import structlog

from ..config.loader import DEFAULT_SUBGRAPH_URL
from ..core.errors import UpstreamFetchError
from ..storage.models import RedemptionEvent

logger = structlog.get_logger(__name__)


LATEST_REDEMPTION_QUERY = """
{
  winningTicketRedeemedEvents(
    first: 1
    orderDirection: desc
    orderBy: timestamp
  ) {
    timestamp
    faceValue
    faceValueUSD
    recipient {
      id
    }
    transaction {
      id
    }
  }
}
"""


class SubgraphClient:
    """GraphQL client for the redemption event source.

    No retries: any failure aborts the invocation.
    """

    def __init__(
        self,
        url: str = DEFAULT_SUBGRAPH_URL,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None
    ):
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()

    def fetch_latest_redemption(self) -> RedemptionEvent:
        """Return the most recent redemption event.

        Raises:
            UpstreamFetchError: On network failure, HTTP error, GraphQL
                errors, an empty result or a malformed event
        """
        try:
            response = self.session.post(
                self.url,
                json={"query": LATEST_REDEMPTION_QUERY},
                timeout=self.timeout
            )
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as e:
            raise UpstreamFetchError(
                f"Subgraph request failed: {e}", {"url": self.url}
            ) from e
        except ValueError as e:
            raise UpstreamFetchError(
                "Subgraph returned invalid JSON", {"url": self.url}
            ) from e

        if not isinstance(payload, dict):
            raise UpstreamFetchError("Subgraph returned an unexpected payload")

        if payload.get("errors"):
            raise UpstreamFetchError(
                "Subgraph query failed", {"errors": payload["errors"]}
            )

        events = (payload.get("data") or {}).get("winningTicketRedeemedEvents") or []
        if not events:
            raise UpstreamFetchError("Subgraph returned no redemption events")

        try:
            event = RedemptionEvent.from_subgraph(events[0])
        except ValueError as e:
            raise UpstreamFetchError(str(e), {"event": events[0]}) from e

        logger.debug(
            "latest_redemption_fetched",
            event_timestamp=event.timestamp,
            transaction=event.transaction
        )
        return event
