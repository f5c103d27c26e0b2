"""
Data models for storage layer.

Defines the ledger record and the payout event read from the subgraph.
"""

from dataclasses import dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class PayoutLedgerRecord:
    """Timestamp of the last payout that was announced.

    Exactly one record exists; writes replace it wholesale.
    """
    timestamp: int


@dataclass(frozen=True)
class RedemptionEvent:
    """A winning ticket redemption as reported by the subgraph.

    Face values are kept as the decimal strings the subgraph returns.
    """
    timestamp: int
    face_value: str
    face_value_usd: str
    recipient: str
    transaction: str

    @classmethod
    def from_subgraph(cls, data: Dict[str, Any]) -> "RedemptionEvent":
        """Build an event from a `winningTicketRedeemedEvents` entry.

        Raises:
            ValueError: If a field is missing or has the wrong shape
        """
        try:
            return cls(
                timestamp=int(data["timestamp"]),
                face_value=str(data["faceValue"]),
                face_value_usd=str(data["faceValueUSD"]),
                recipient=str(data["recipient"]["id"]),
                transaction=str(data["transaction"]["id"])
            )
        except (KeyError, TypeError) as e:
            raise ValueError(f"Malformed redemption event: {e!r}") from e

    @property
    def face_value_eth(self) -> float:
        return float(self.face_value)

    @property
    def face_value_dollars(self) -> float:
        return float(self.face_value_usd)
