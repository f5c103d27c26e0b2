"""
Clients for the services the payout bot talks to.

Provides the subgraph event source, the identity directory and the two
announcement channels.
"""

from .discord import DiscordWebhook
from .identity_directory import IdentityDirectory
from .subgraph import SubgraphClient
from .twitter import TwitterClient

__all__ = ["DiscordWebhook", "IdentityDirectory", "SubgraphClient", "TwitterClient"]
