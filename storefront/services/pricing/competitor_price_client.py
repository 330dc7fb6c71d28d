"""
Competitor Price Client
Fetches the competitor price list used by the dynamic pricing batch.
"""

from __future__ import annotations

import requests
from flask import current_app

from storefront.business.errors import PriceSourceUnavailableError
from storefront.logger import get_logger

logger = get_logger("storefront.services.competitor_prices")


class CompetitorPriceClient:
    """
    HTTP client for the competitor pricing API.

    `GET {base_url}/prices?api_key=...` returns a JSON list of
    `{"name": ..., "price": ...}` records.
    """

    def __init__(self, base_url: str | None, api_key: str | None = None, timeout: float = 10.0):
        self.base_url = base_url.rstrip('/') if base_url else None
        self.api_key = api_key
        self.timeout = timeout

    @classmethod
    def from_config(cls, config=None) -> "CompetitorPriceClient":
        config = config if config is not None else current_app.config
        return cls(
            config.get('COMPETITOR_API_BASE_URL'),
            config.get('COMPETITOR_API_KEY'),
            config.get('COMPETITOR_API_TIMEOUT', 10.0),
        )

    def fetch_snapshot(self) -> list[dict]:
        """
        Fetch the current competitor price list.

        Returns:
            List of {"name", "price"} records

        Raises:
            PriceSourceUnavailableError: not configured, transport error,
                non-200 response or a body that is not a JSON list
        """
        if not self.base_url:
            raise PriceSourceUnavailableError("Competitor pricing API is not configured")

        try:
            response = requests.get(
                f"{self.base_url}/prices",
                params={"api_key": self.api_key},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Failed to fetch competitor data: {e}")
            raise PriceSourceUnavailableError(f"Competitor pricing API request failed: {e}") from e

        if response.status_code != 200:
            raise PriceSourceUnavailableError(
                f"Competitor pricing API returned HTTP {response.status_code}"
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise PriceSourceUnavailableError("Competitor pricing API returned invalid JSON") from e

        if not isinstance(payload, list):
            raise PriceSourceUnavailableError("Competitor pricing API returned an unexpected payload")

        logger.debug(f"Fetched {len(payload)} competitor prices")
        return payload
