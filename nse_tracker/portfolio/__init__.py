"""Portfolio symbol list persisted to a JSON file."""

from .store import PortfolioStore

__all__ = ["PortfolioStore"]
