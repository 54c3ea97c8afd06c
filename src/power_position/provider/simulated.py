"""Simulated trade provider for local runs and integration tests.

Mirrors the behaviour of the upstream power trading service: a random number
of trades, each with one volume per period of the trading day, and a random
transient failure rate.
"""

import asyncio
import random
from datetime import date

from power_position.config import ProviderSettings
from power_position.exceptions import TradeProviderError
from power_position.logging import get_logger
from power_position.models import Trade
from power_position.provider.client import TradeProvider
from power_position.reporting.trading_day import CANONICAL_PERIODS

logger = get_logger(__name__)


class SimulatedTradeProvider(TradeProvider):
    """In-process stand-in for the upstream trade service.

    Args:
        settings: Failure rate, trade count and latency configuration.
        rng: Random source; pass a seeded ``random.Random`` for reproducibility.
    """

    def __init__(
        self,
        settings: ProviderSettings,
        rng: random.Random | None = None,
    ) -> None:
        self._settings = settings
        self._rng = rng or random.Random()
        self._calls = 0

    @property
    def calls(self) -> int:
        """Number of get_trades calls made so far."""
        return self._calls

    async def get_trades(self, trade_date: date) -> list[Trade]:
        self._calls += 1
        if self._settings.latency_ms > 0:
            await asyncio.sleep(self._settings.latency_ms / 1000)

        if self._rng.random() < self._settings.failure_rate:
            logger.debug("simulated_provider_failure", trade_date=trade_date.isoformat())
            raise TradeProviderError("Error retrieving power volume")

        count = self._rng.randint(1, self._settings.max_trades)
        trades = [
            Trade.from_volumes(
                trade_date,
                [
                    round(self._rng.uniform(-500.0, 500.0), 2)
                    for _ in range(CANONICAL_PERIODS)
                ],
            )
            for _ in range(count)
        ]
        logger.debug(
            "simulated_trades_generated",
            trade_date=trade_date.isoformat(),
            count=count,
        )
        return trades
