"""Abstract trade provider interface.

The extraction worker depends only on this interface; the upstream service
behind it may fail transiently at any call.
"""

from abc import ABC, abstractmethod
from datetime import date

from power_position.models import Trade


class TradeProvider(ABC):
    """Abstract base class for trade data sources."""

    @abstractmethod
    async def get_trades(self, trade_date: date) -> list[Trade]:
        """Return all trades for the trading day ``trade_date``.

        Raises:
            TradeProviderError: If the upstream source fails transiently.
        """
        ...
