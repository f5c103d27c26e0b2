"""
Payout check orchestration.

One invocation reads the ledger, fetches the newest redemption, and
announces it when it is strictly newer than the last announced payout.

Outcomes:
1. UNAUTHORIZED - bearer token missing or wrong, nothing else runs
2. NO_NEW_PAYOUT - newest event is not newer than the ledger
3. ANNOUNCED - both announcements sent, then the ledger advanced
"""

import hmac
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

import structlog

from ..clients import DiscordWebhook, IdentityDirectory, SubgraphClient, TwitterClient
from ..config.loader import DEFAULT_IPFS_GATEWAY, Settings
from ..storage.repository import PayoutLedger
from .conversion import PRICING, PricingConstants, estimate_minutes
from .errors import AuthError, PayoutBotError
from .identity import resolve_identity
from .notifier import Notifier

logger = structlog.get_logger(__name__)


class Outcome(Enum):
    """Terminal states of one invocation."""
    UNAUTHORIZED = "unauthorized"
    NO_NEW_PAYOUT = "no_new_payout"
    ANNOUNCED = "announced"


@dataclass(frozen=True)
class HandlerResponse:
    """HTTP-agnostic response produced by the handler."""
    status: int
    body: Union[str, dict]
    outcome: Outcome


SUCCESS_BODY = "Success"


class PayoutHandler:
    """Runs the payout check with injected collaborators.

    Build one per process; the ledger it holds keeps its connection open
    between invocations.
    """

    def __init__(
        self,
        api_token: str,
        ledger,
        subgraph,
        directory,
        notifier: Notifier,
        ipfs_gateway: str = DEFAULT_IPFS_GATEWAY,
        pricing: PricingConstants = PRICING
    ):
        if not api_token:
            raise ValueError("api_token is required and cannot be empty")
        self._expected_authorization = f"Bearer {api_token}"
        self.ledger = ledger
        self.subgraph = subgraph
        self.directory = directory
        self.notifier = notifier
        self.ipfs_gateway = ipfs_gateway
        self.pricing = pricing

    def is_authorized(self, authorization: Optional[str]) -> bool:
        """Check an Authorization header against the configured token."""
        if not authorization:
            return False
        return hmac.compare_digest(
            authorization.encode("utf-8"),
            self._expected_authorization.encode("utf-8")
        )

    def authorize(self, authorization: Optional[str]) -> None:
        """Raise AuthError unless the header carries the right token."""
        if not self.is_authorized(authorization):
            raise AuthError("Unauthorized")

    def check_for_payout(self) -> Outcome:
        """Announce the newest payout if the ledger has not seen it yet.

        Raises:
            UpstreamFetchError: If the subgraph query fails
            PersistenceError: If the ledger cannot be read or written
            NotificationError: If an announcement fails
        """
        last_timestamp = self.ledger.get_last_timestamp()
        event = self.subgraph.fetch_latest_redemption()

        log = logger.bind(
            event_timestamp=event.timestamp,
            last_timestamp=last_timestamp,
            transaction=event.transaction
        )

        if event.timestamp <= last_timestamp:
            log.info("no_new_payout")
            return Outcome.NO_NEW_PAYOUT

        identity = resolve_identity(event.recipient, self.directory, self.ipfs_gateway)

        minutes = estimate_minutes(
            event.face_value_eth,
            event.face_value_dollars,
            self.pricing.price_per_pixel,
            self.pricing.pixels_per_minute
        )

        log.info("new_payout", recipient=event.recipient, name=identity.name, minutes=minutes)
        self.notifier.announce(event, identity, minutes)

        self.ledger.set_last_timestamp(event.timestamp)
        return Outcome.ANNOUNCED

    def handle(self, authorization: Optional[str]) -> HandlerResponse:
        """Handle one webhook invocation.

        An auth failure stops here with a 403. Other failures propagate
        after being logged; the caller turns them into a server error.
        """
        try:
            self.authorize(authorization)
        except AuthError as e:
            logger.warning("unauthorized_request")
            return HandlerResponse(
                status=403,
                body={"errors": [e.message]},
                outcome=Outcome.UNAUTHORIZED
            )

        try:
            outcome = self.check_for_payout()
        except PayoutBotError as e:
            logger.error("payout_check_failed", code=e.code, error=e.message, details=e.details)
            raise

        return HandlerResponse(status=200, body=SUCCESS_BODY, outcome=outcome)


def build_handler(settings: Settings) -> PayoutHandler:
    """Wire a handler and its collaborators from settings."""
    timeout = settings.request_timeout
    notifier = Notifier(
        twitter=TwitterClient.from_credentials(settings.twitter, timeout=timeout),
        discord=DiscordWebhook(settings.discord_webhook_url, timeout=timeout)
    )
    return PayoutHandler(
        api_token=settings.api_token,
        ledger=PayoutLedger(settings.db_path),
        subgraph=SubgraphClient(settings.subgraph_url, timeout=timeout),
        directory=IdentityDirectory(settings.identity_api_url, timeout=timeout),
        notifier=notifier,
        ipfs_gateway=settings.ipfs_gateway
    )
