"""Bet placement, lookup and odds queries."""

from __future__ import annotations

import logging

from mytherra.config import BettingConfig
from mytherra.exceptions import ValidationError
from mytherra.storage.repositories import BetRepository, WorldStateRepository
from mytherra.world.models import TARGET_TYPES, Clock

from .ledger import FavorLedger
from .models import Bet, BetFilters, OddsQuote
from .odds import OddsEngine
from .predicates import capture_baseline, check_preconditions

logger = logging.getLogger(__name__)


class BettingMarket:
    """Validates and records wagers against the favor ledger."""

    def __init__(
        self,
        odds_engine: OddsEngine,
        ledger: FavorLedger,
        bets: BetRepository,
        world: WorldStateRepository,
        clock: Clock,
        config: BettingConfig | None = None,
    ):
        self.odds_engine = odds_engine
        self.registry = odds_engine.registry
        self.ledger = ledger
        self.bets = bets
        self.world = world
        self.clock = clock
        self.config = config or BettingConfig()

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def _validate_request(
        self,
        bet_type: str,
        confidence: str,
        timeframe: int,
        stake: int,
        description: str,
        target_type: str | None,
    ):
        if not description or not description.strip():
            raise ValidationError("description", "Description is required")
        if bet_type not in self.registry.bet_type_codes:
            raise ValidationError("bet_type", f"Unknown bet type: {bet_type}")
        if confidence not in self.registry.confidence_codes:
            raise ValidationError("confidence", f"Unknown confidence level: {confidence}")
        if target_type is not None and target_type not in TARGET_TYPES:
            raise ValidationError("target_type", f"Unknown target type: {target_type}")

        bet_config = self.registry.bet_type(bet_type)
        if isinstance(timeframe, bool) or not isinstance(timeframe, int) or not (
            bet_config.min_timeframe <= timeframe <= bet_config.max_timeframe
        ):
            raise ValidationError(
                "timeframe",
                f"Timeframe must be between {bet_config.min_timeframe} and "
                f"{bet_config.max_timeframe} years for {bet_type}",
            )

        if isinstance(stake, bool) or not isinstance(stake, int) or stake <= 0:
            raise ValidationError("divine_favor_stake", "Stake must be a positive whole amount")
        multiplier = self.registry.confidence(confidence).stake_multiplier
        max_stake = int(self.config.max_stake * multiplier)
        if stake < self.config.min_stake or stake > max_stake:
            raise ValidationError(
                "divine_favor_stake",
                f"Stake must be between {self.config.min_stake} and {max_stake} "
                f"for confidence '{confidence}'",
            )
        return bet_config

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def place_bet(
        self,
        player_id: str,
        bet_type: str,
        target_id: str,
        description: str,
        timeframe: int,
        confidence: str,
        stake: int,
        target_type: str | None = None,
    ) -> Bet:
        """Validate a wager, reserve its stake and record it as active.

        Nothing is mutated unless every check passes. The funds check, the
        reservation and the insert all run under the player's ledger lock.
        """
        bet_config = self._validate_request(
            bet_type, confidence, timeframe, stake, description, target_type
        )

        world = self.world.get()
        kind, _ = self.odds_engine.resolve_target(world, target_id, target_type)
        if kind not in bet_config.target_types:
            raise ValidationError(
                "target_type",
                f"{bet_type} accepts {', '.join(bet_config.target_types)} targets, not {kind}",
            )
        entity = world.get(kind, target_id)
        check_preconditions(bet_type, kind, entity, world)

        with self.ledger.locked(player_id):
            self.ledger.get_account(player_id)
            quote = self.odds_engine.quote(
                world, bet_type, confidence, timeframe, target_id, kind
            )
            self.ledger.reserve(player_id, stake)

            bet = Bet(
                player_id=player_id,
                bet_type=bet_type,
                target_id=target_id,
                target_type=kind,
                description=description.strip(),
                timeframe=timeframe,
                confidence=confidence,
                divine_favor_stake=stake,
                potential_payout=quote.payout(stake),
                current_odds=quote.odds,
                placed_year=self.clock.current_year,
                baseline=capture_baseline(bet_type, kind, entity, world),
            )
            try:
                self.bets.add(bet)
            except Exception as e:
                logger.error(f"Failed to store bet {bet.id}, returning stake: {e}")
                self.ledger.release(player_id, stake, credit=stake)
                raise

        logger.info(
            f"Bet placed: {bet.id} {bet_type} on {kind} {target_id} "
            f"stake={stake} odds={quote.odds} payout={bet.potential_payout}"
        )
        return bet

    def get_bet(self, bet_id: str) -> Bet:
        return self.bets.get(bet_id)

    def list_bets(self, filters: BetFilters | None = None) -> list[Bet]:
        """Matching bets, newest first."""
        filters = filters or BetFilters(limit=self.config.default_list_limit)
        limit = min(filters.limit, self.config.max_list_limit)
        matching = [bet for bet in reversed(self.bets.all()) if filters.matches(bet)]
        return matching[filters.offset : filters.offset + limit]

    def get_odds(
        self,
        bet_type: str,
        target_id: str,
        confidence: str,
        timeframe: int,
        target_type: str | None = None,
        stake: int | None = None,
    ) -> OddsQuote:
        if timeframe < 1:
            raise ValidationError("timeframe", "Timeframe must be at least 1 year")
        if target_type is not None and target_type not in TARGET_TYPES:
            raise ValidationError("target_type", f"Unknown target type: {target_type}")
        if stake is not None and stake <= 0:
            raise ValidationError("stake", "Stake must be positive")

        quote = self.odds_engine.quote(
            self.world.get(), bet_type, confidence, timeframe, target_id, target_type
        )
        return OddsQuote(
            bet_type=bet_type,
            target_id=target_id,
            target_type=quote.target_type,
            confidence=confidence,
            timeframe=timeframe,
            odds=quote.odds,
            implied_probability=quote.implied_probability,
            stake=stake,
            payout=quote.payout(stake) if stake is not None else None,
        )

