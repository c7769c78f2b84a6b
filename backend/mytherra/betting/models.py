"""Betting market data models."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Literal
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

BetStatus = Literal["active", "won", "lost", "expired"]


def generate_bet_id() -> str:
    """Generate unique bet ID with format: bet_{uuid_hex[:8]}."""
    return f"bet_{uuid4().hex[:8]}"


class Bet(BaseModel):
    """A wager of divine favor on the future state of a world entity."""

    model_config = ConfigDict(validate_assignment=True)

    id: str = Field(default_factory=generate_bet_id)
    player_id: str
    bet_type: str
    target_id: str
    target_type: str
    description: str
    timeframe: int = Field(ge=1)
    confidence: str
    divine_favor_stake: int = Field(gt=0)
    potential_payout: int = Field(ge=0)
    current_odds: float = Field(ge=1.0)
    status: BetStatus = "active"
    placed_year: int = Field(ge=1)
    resolved_year: int | None = None
    resolution_notes: str | None = None
    baseline: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def expiry_year(self) -> int:
        return self.placed_year + self.timeframe

    @property
    def is_active(self) -> bool:
        return self.status == "active"


class BetFilters(BaseModel):
    status: BetStatus | None = None
    bet_type: str | None = None
    target_id: str | None = None
    confidence: str | None = None
    player_id: str | None = None
    limit: int = Field(default=20, ge=1)
    offset: int = Field(default=0, ge=0)

    def matches(self, bet: Bet) -> bool:
        if self.status is not None and bet.status != self.status:
            return False
        if self.bet_type is not None and bet.bet_type != self.bet_type:
            return False
        if self.target_id is not None and bet.target_id != self.target_id:
            return False
        if self.confidence is not None and bet.confidence != self.confidence:
            return False
        if self.player_id is not None and bet.player_id != self.player_id:
            return False
        return True


class OddsQuote(BaseModel):
    """Caller-facing odds answer."""

    bet_type: str
    target_id: str
    target_type: str
    confidence: str
    timeframe: int
    odds: float
    implied_probability: float
    stake: int | None = None
    payout: int | None = None


class ResolutionSummary(BaseModel):
    """Outcome counts of one resolution pass."""

    year: int
    processed_count: int = 0
    won: int = 0
    lost: int = 0
    expired: int = 0
    still_active: int = 0
    favor_paid_out: int = 0
    favor_returned: int = 0
    resolved_bet_ids: list[str] = Field(default_factory=list)


class FavorAccount(BaseModel):
    """A player's divine favor. Balance is spendable; reserved is locked in active bets."""

    model_config = ConfigDict(validate_assignment=True)

    player_id: str
    balance: int = Field(default=0, ge=0)
    reserved: int = Field(default=0, ge=0)

    @property
    def total(self) -> int:
        return self.balance + self.reserved
