"""
Twitter client wrapper.

Posts status updates with OAuth 1.0a user credentials.
"""

from typing import Any, Dict, Optional

import requests
import structlog
from requests_oauthlib import OAuth1Session

from ..config.loader import TwitterCredentials
from ..core.errors import NotificationError

logger = structlog.get_logger(__name__)

STATUS_UPDATE_URL = "https://api.twitter.com/1.1/statuses/update.json"


class TwitterClient:
    """Minimal Twitter client that can post a status.

    Failures are loud: a rejected post raises NotificationError.
    """

    def __init__(self, session: requests.Session, timeout: float = 10.0):
        """Initialize with an already signed session.

        Args:
            session: Session that signs requests (normally OAuth1Session)
            timeout: Request timeout in seconds
        """
        self.session = session
        self.timeout = timeout

    @classmethod
    def from_credentials(
        cls,
        credentials: TwitterCredentials,
        timeout: float = 10.0
    ) -> "TwitterClient":
        """Build a client signing with the app's user-context credentials."""
        session = OAuth1Session(
            client_key=credentials.consumer_key,
            client_secret=credentials.consumer_secret,
            resource_owner_key=credentials.access_token_key,
            resource_owner_secret=credentials.access_token_secret
        )
        return cls(session, timeout=timeout)

    def post_status(self, status: str) -> Dict[str, Any]:
        """Publish a status update.

        Args:
            status: Tweet text

        Returns:
            The created tweet as returned by the API

        Raises:
            NotificationError: If the request fails or is rejected
        """
        try:
            response = self.session.post(
                STATUS_UPDATE_URL,
                data={"status": status},
                timeout=self.timeout
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise NotificationError(f"Twitter post failed: {e}", channel="twitter") from e

        try:
            tweet = response.json()
        except ValueError:
            tweet = {}
        if not isinstance(tweet, dict):
            tweet = {}
        logger.info("tweet_posted", tweet_id=tweet.get("id_str"))
        return tweet
