"""Application configuration models, loaded from YAML.

The API key itself never appears in the YAML; ``FeedConfig.api_key_env`` names
the environment variable it is read from (``.env`` files are loaded first by
``app.context``).
"""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import BaseModel, Field


class FeedConfig(BaseModel):
    """Configuration for the remote market-data provider."""

    base_url: str = Field(
        default="https://finnhub.io/api/v1",
        description="Base URL of the Finnhub-compatible REST API.",
    )
    api_key_env: str = Field(
        default="STOCK_API_KEY",
        description="Environment variable holding the API token.",
    )
    timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Upper bound on a single HTTP request.",
    )


class MarketConfig(BaseModel):
    """Watch-list and refresh schedule for the market cache."""

    tickers: list[str] = Field(
        default_factory=list,
        description="Ordered watch-list of ticker symbols.",
    )
    tickers_file: str | None = Field(
        default=None,
        description="Optional text file with one ticker per line, appended to ``tickers``.",
    )
    refresh_interval_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Delay between scheduled refresh cycles.",
    )
    rate_limit_cooldown_seconds: float = Field(
        default=60.0,
        ge=0,
        description="Extra delay before the next cycle after the provider rate-limits us.",
    )
    profiles_on_every_refresh: bool = Field(
        default=False,
        description="If false, scheduled cycles after the first only refresh prices.",
    )


class StoreConfig(BaseModel):
    """Where user accounts are kept."""

    path: str | None = Field(
        default=None,
        description="JSON file for user accounts. In-memory store when omitted.",
    )


class AppConfig(BaseModel):
    """Top-level configuration, loaded from YAML."""

    feed: FeedConfig = Field(default_factory=FeedConfig)
    market: MarketConfig = Field(default_factory=MarketConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)

    @classmethod
    def from_yaml(cls, path: str | Path) -> AppConfig:
        """Load and validate an ``AppConfig`` from a YAML file.

        Raises ``FileNotFoundError`` if the file does not exist and
        ``ValueError`` if the content is not a valid YAML mapping. Relative
        ``market.tickers_file`` and ``store.path`` values are resolved against
        the config file's folder.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with path.open(encoding="utf-8") as fh:
            raw = yaml.safe_load(fh)

        if not isinstance(raw, dict):
            raise ValueError(
                f"Expected a YAML mapping in {path}, got {type(raw).__name__}."
            )

        config = cls(**raw)
        tickers_file = config.market.tickers_file
        if tickers_file is not None and not Path(tickers_file).is_absolute():
            config.market.tickers_file = str(path.parent / tickers_file)
        store_path = config.store.path
        if store_path is not None and not Path(store_path).is_absolute():
            config.store.path = str(path.parent / store_path)
        return config
