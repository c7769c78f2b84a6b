"""Divine betting market: pricing, placement, the favor ledger and resolution."""

from .models import Bet, BetFilters, BetStatus, FavorAccount, OddsQuote, ResolutionSummary
from .registry import (
    BetTypeConfig,
    ConfidenceConfig,
    ConfigRegistry,
    TargetModifier,
    TimeframeModifier,
)
from .odds import OddsEngine, Quote
from .ledger import FavorLedger
from .market import BettingMarket
from .resolution import ResolutionEngine

__all__ = [
    "Bet",
    "BetFilters",
    "BetStatus",
    "BetTypeConfig",
    "BettingMarket",
    "ConfidenceConfig",
    "ConfigRegistry",
    "FavorAccount",
    "FavorLedger",
    "OddsEngine",
    "OddsQuote",
    "Quote",
    "ResolutionEngine",
    "ResolutionSummary",
    "TargetModifier",
    "TimeframeModifier",
]
