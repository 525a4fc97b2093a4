"""
Subscription price tiers by country of residence.

The country picked at registration fixes the subscriber's currency, the
monthly price charged after the billing cutover date, and the VAT bucket the
collected tax is booked under.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PriceTier:
    country: str
    code: str  # tax bucket
    currency: str
    monthly_price: float
    vat_rate: float

    @property
    def vat_per_month(self) -> float:
        """VAT included in one monthly (tax-inclusive) price."""
        return round(self.monthly_price * self.vat_rate / (1 + self.vat_rate), 2)


PRICE_TIERS: dict[str, PriceTier] = {
    t.country: t
    for t in (
        PriceTier("France", "FR", "EUR", 15.0, 0.055),
        PriceTier("Belgique", "BE", "EUR", 15.0, 0.06),
        PriceTier("Luxembourg", "LU", "EUR", 15.0, 0.03),
        PriceTier("Monaco", "MC", "EUR", 15.0, 0.055),
        PriceTier("Suisse", "CH", "CHF", 14.0, 0.026),
        PriceTier("Canada", "CA", "CAD", 25.0, 0.05),
    )
}


def tier_for(country: str) -> PriceTier | None:
    return PRICE_TIERS.get(country)
