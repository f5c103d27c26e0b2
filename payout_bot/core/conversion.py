"""
Fee-to-duration conversion.

Turns a ticket payout into an estimate of how many minutes of video the
orchestrator transcoded to earn it.
"""

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class PricingConstants:
    """Fixed transcoding price used to derive minutes from fees."""
    price_per_pixel: float  # ETH per pixel
    pixels_per_minute: int  # Pixels in one minute of the reference rendition ladder


# 1200 wei per pixel. Pixels per minute covers the 240p, 360p, 480p and 720p
# 30fps renditions (width * height * framerate * 60).
PRICING = PricingConstants(
    price_per_pixel=0.0000000000000012,
    pixels_per_minute=2995488000
)


def estimate_minutes(
    face_value: float,
    face_value_usd: float,
    price_per_unit: float,
    units_per_minute: float
) -> float:
    """Estimate transcoded minutes paid for by a ticket.

    The ETH/USD rate implied by the ticket converts the per-pixel price
    into dollars, and the dollar value of the ticket is then spread over
    that price and the pixels in one minute of video.

    Args:
        face_value: Ticket value in ETH
        face_value_usd: Ticket value in USD at redemption time
        price_per_unit: Price per pixel in ETH
        units_per_minute: Pixels per minute of reference video

    Returns:
        Estimated minutes, or 0.0 when any step is not finite
    """
    try:
        eth_usd_rate = face_value / face_value_usd
        usd_price_per_unit = price_per_unit / eth_usd_rate
        minutes = face_value_usd / usd_price_per_unit / units_per_minute
    except ZeroDivisionError:
        return 0.0

    if not math.isfinite(minutes):
        return 0.0
    return minutes


def round_minutes(minutes: float) -> int:
    """Round minutes half-up for display."""
    return int(math.floor(minutes + 0.5))
