"""
Payout announcements.

Formats the tweet and the Discord embed for a payout and dispatches them.
"""

from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict

import structlog

from ..storage.models import RedemptionEvent
from .conversion import round_minutes
from .identity import Identity

logger = structlog.get_logger(__name__)

BOT_USERNAME = "Payout Alert Bot"
BOT_AVATAR_URL = (
    "https://user-images.githubusercontent.com/555740/"
    "107160745-213a9480-6966-11eb-927f-a53ae12ab219.png"
)
EMBED_COLOR = 60296
EMBED_TITLE = "Orchestrator Payout"


def transaction_url(event: RedemptionEvent) -> str:
    return f"https://arbiscan.io/tx/{event.transaction}"


def account_url(event: RedemptionEvent) -> str:
    return f"https://explorer.livepeer.org/accounts/{event.recipient}/campaign"


def format_timestamp(timestamp: int) -> str:
    """ISO-8601 UTC time with milliseconds and a Z suffix."""
    moment = datetime.fromtimestamp(timestamp, tz=timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _fixed(value: str, places: str) -> str:
    """Round half up to a fixed number of places, never in exponent form."""
    return f"{Decimal(value).quantize(Decimal(places), rounding=ROUND_HALF_UP):f}"


def _amounts(event: RedemptionEvent) -> str:
    eth = _fixed(event.face_value, "0.0001")
    usd = _fixed(event.face_value_usd, "0.01")
    return f"{eth} ETH (${usd})"


def format_status(event: RedemptionEvent, identity: Identity, minutes: float) -> str:
    """Tweet text for a payout."""
    return (
        f"Livepeer orchestrator {identity.name} just earned {_amounts(event)} "
        f"transcoding approximately {round_minutes(minutes):,} minutes of video. "
        f"{transaction_url(event)}"
    )


def build_discord_payload(
    event: RedemptionEvent,
    identity: Identity,
    minutes: float
) -> Dict[str, Any]:
    """Discord webhook message for a payout.

    The thumbnail is only included when the identity has an image.
    """
    embed: Dict[str, Any] = {
        "color": EMBED_COLOR,
        "title": EMBED_TITLE,
        "description": (
            f"[**{identity.name}**]({account_url(event)}) just earned "
            f"**{_amounts(event)}** transcoding approximately "
            f"{round_minutes(minutes):,} minutes of video."
        ),
        "timestamp": format_timestamp(event.timestamp),
        "url": transaction_url(event),
    }
    if identity.image:
        embed["thumbnail"] = {"url": identity.image}

    return {
        "username": BOT_USERNAME,
        "avatar_url": BOT_AVATAR_URL,
        "embeds": [embed],
    }


class Notifier:
    """Sends a payout announcement to Twitter, then Discord.

    Posts are sequential and not rolled back: if Discord fails after the
    tweet went out, the tweet stays.
    """

    def __init__(self, twitter, discord):
        self.twitter = twitter
        self.discord = discord

    def announce(self, event: RedemptionEvent, identity: Identity, minutes: float) -> None:
        """Dispatch both announcements.

        Raises:
            NotificationError: If either channel fails
        """
        log = logger.bind(transaction=event.transaction, event_timestamp=event.timestamp)

        self.twitter.post_status(format_status(event, identity, minutes))
        log.info("announced", channel="twitter")

        self.discord.send(build_discord_payload(event, identity, minutes))
        log.info("announced", channel="discord")
