"""Rolling price baseline — feeds the price-anomaly flag.

A zone's baseline is a running mean over every accepted price report.
A new price is anomalous when the baseline is established and the new
value deviates from the mean by more than the configured fraction.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class PriceBaseline(BaseModel):
    """Immutable running-mean snapshot for one zone."""

    count: int = Field(default=0, ge=0)
    mean: float = Field(default=0.0, ge=0.0)

    model_config = {"frozen": True}

    def observe(self, price: float) -> PriceBaseline:
        """Return a new baseline that includes *price*."""
        count = self.count + 1
        mean = self.mean + (price - self.mean) / count
        return PriceBaseline(count=count, mean=mean)


def detect_price_anomaly(
    new_price: float,
    average_price: float,
    price_count: int,
    threshold: float = 0.5,
    min_count: int = 3,
) -> bool:
    """True if *new_price* deviates from the baseline by more than *threshold*.

    Returns False until the baseline holds at least *min_count* prices.
    """
    if price_count < min_count or average_price <= 0:
        return False
    deviation = abs(new_price - average_price) / average_price
    return deviation > threshold
