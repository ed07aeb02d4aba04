"""Market snapshot models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

UNKNOWN_COMPANY = "Unknown Company Name"
UNKNOWN_INDUSTRY = "Unknown Industry"


class StockProfile(BaseModel):
    """Static company profile as reported by the price feed.

    Either field may be ``None`` when the provider omits it.
    """

    model_config = ConfigDict(frozen=True)

    company: str | None = None
    industry: str | None = None


class Stock(BaseModel):
    """Point-in-time snapshot of one ticker: price plus profile.

    Snapshots are immutable so a reader never sees a price from one refresh
    paired with a profile from another. ``MarketCache`` swaps in a new
    snapshot instead of mutating the old one.
    """

    model_config = ConfigDict(frozen=True)

    ticker: str
    market_price: float = Field(ge=0.0)
    profile: StockProfile | None = None

    @property
    def profile_resolved(self) -> bool:
        return self.profile is not None

    @property
    def company(self) -> str:
        if self.profile is None or not self.profile.company:
            return UNKNOWN_COMPANY
        return self.profile.company

    @property
    def industry(self) -> str:
        if self.profile is None or not self.profile.industry:
            return UNKNOWN_INDUSTRY
        return self.profile.industry

    def with_price(self, price: float) -> Stock:
        """Return a copy of this snapshot carrying *price*."""
        return self.model_copy(update={"market_price": price})
