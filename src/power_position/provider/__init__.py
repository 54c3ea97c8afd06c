"""Trade data providers."""

from power_position.provider.client import TradeProvider
from power_position.provider.simulated import SimulatedTradeProvider

__all__ = ["SimulatedTradeProvider", "TradeProvider"]
