"""
Orchestrator identity resolution.

Picks a display name and avatar for a payout recipient. The recipient's
"livepeer" 3Box space names which profile it wants shown:

1. "3box" - name and image from the public 3Box profile
2. "livepeer" - name and image stored in the space itself
3. anything else - truncated address, no image
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

import structlog

from ..config.loader import DEFAULT_IPFS_GATEWAY

logger = structlog.get_logger(__name__)

SPACE_NAME = "livepeer"


class ProfileSource(Enum):
    """Where the recipient's display identity comes from."""
    THREE_BOX = "3box"
    LIVEPEER = "livepeer"
    ADDRESS = "address"


@dataclass(frozen=True)
class Identity:
    """Display identity of an orchestrator."""
    name: str
    image: Optional[str] = None


def truncate_address(address: str) -> str:
    """Shorten an address to its first 8 characters and everything from offset 36.

    For a 42-character hex address that leaves the last 6 characters.
    """
    if len(address) <= 8:
        return address
    return address[:8] + "…" + address[36:]


def select_source(space: Optional[Dict[str, Any]]) -> ProfileSource:
    """Read the default profile declared by a space."""
    declared = (space or {}).get("defaultProfile")
    try:
        source = ProfileSource(declared)
    except ValueError:
        return ProfileSource.ADDRESS
    return source


def _text(value: Any) -> Optional[str]:
    if isinstance(value, str) and value:
        return value
    return None


def _ipfs_url(value: str, gateway: str) -> str:
    if value.startswith(("http://", "https://")):
        return value
    return gateway + value


def _three_box_identity(
    fallback: Identity,
    profile: Optional[Dict[str, Any]],
    gateway: str
) -> Identity:
    profile = profile or {}
    name = _text(profile.get("name")) or fallback.name
    image = fallback.image

    images = profile.get("image")
    if isinstance(images, list) and images:
        content_url = images[0].get("contentUrl") if isinstance(images[0], dict) else None
        if isinstance(content_url, dict) and _text(content_url.get("/")):
            image = _ipfs_url(content_url["/"], gateway)

    return Identity(name=name, image=image)


def _livepeer_identity(
    fallback: Identity,
    space: Dict[str, Any],
    gateway: str
) -> Identity:
    name = _text(space.get("name")) or fallback.name
    image = fallback.image
    if _text(space.get("image")):
        image = _ipfs_url(space["image"], gateway)
    return Identity(name=name, image=image)


def resolve_identity(
    address: str,
    directory,
    gateway: str = DEFAULT_IPFS_GATEWAY
) -> Identity:
    """Resolve the display identity for a recipient address.

    Lookups are best effort; a failed or empty lookup leaves the
    truncated-address default in place.

    Args:
        address: Recipient address
        directory: Object with get_profile(address) and get_space(address, name)
        gateway: IPFS gateway prefix for content hashes

    Returns:
        Identity with a name and optional image URL
    """
    fallback = Identity(name=truncate_address(address))

    profile = directory.get_profile(address)
    space = directory.get_space(address, SPACE_NAME)

    source = select_source(space)
    if source is ProfileSource.THREE_BOX:
        identity = _three_box_identity(fallback, profile, gateway)
    elif source is ProfileSource.LIVEPEER:
        identity = _livepeer_identity(fallback, space, gateway)
    else:
        identity = fallback

    logger.debug("identity_resolved", address=address, source=source.value, name=identity.name)
    return identity
