"""
Identity directory client.

Looks up 3Box profiles and spaces for an address. Lookups are best
effort: every failure is logged and reported as "no data".
"""

from typing import Any, Dict, Optional

import requests
import structlog

from ..config.loader import DEFAULT_IDENTITY_API_URL

logger = structlog.get_logger(__name__)


class IdentityDirectory:
    """Read-only client for the 3Box profile API."""

    def __init__(
        self,
        base_url: str = DEFAULT_IDENTITY_API_URL,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def get_profile(self, address: str) -> Optional[Dict[str, Any]]:
        """Public 3Box profile for an address, or None."""
        return self._get("profile", {"address": address})

    def get_space(self, address: str, name: str = "livepeer") -> Optional[Dict[str, Any]]:
        """Public data of a named 3Box space for an address, or None."""
        return self._get("space", {"address": address, "name": name})

    def _get(self, resource: str, params: Dict[str, str]) -> Optional[Dict[str, Any]]:
        url = f"{self.base_url}/{resource}"
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning("identity_lookup_failed", resource=resource, error=str(e), **params)
            return None

        if not isinstance(data, dict):
            return None
        return data
