"""Settles active bets against the current world."""

from __future__ import annotations

import logging

from mytherra.storage.repositories import BetRepository
from mytherra.world.state import WorldState

from .ledger import FavorLedger
from .models import Bet, ResolutionSummary
from .predicates import evaluate

logger = logging.getLogger(__name__)


class ResolutionEngine:
    """Moves active bets to won, lost or expired.

    Each bet is re-read under its player's ledger lock and skipped unless it
    is still active, so running a pass twice in the same year changes nothing.
    """

    def __init__(self, bets: BetRepository, ledger: FavorLedger):
        self.bets = bets
        self.ledger = ledger

    def _settle(self, bet: Bet, world: WorldState, year: int, summary: ResolutionSummary) -> None:
        with self.ledger.locked(bet.player_id):
            current = self.bets.get(bet.id)
            if not current.is_active:
                return

            verdict = evaluate(current, world)
            if verdict.outcome == "won":
                self.ledger.release(
                    current.player_id, current.divine_favor_stake, credit=current.potential_payout
                )
                current.status = "won"
                current.resolution_notes = verdict.notes
                summary.won += 1
                summary.favor_paid_out += current.potential_payout
            elif verdict.outcome == "lost":
                self.ledger.release(current.player_id, current.divine_favor_stake)
                current.status = "lost"
                current.resolution_notes = verdict.notes
                summary.lost += 1
            elif current.expiry_year <= year:
                self.ledger.release(
                    current.player_id,
                    current.divine_favor_stake,
                    credit=current.divine_favor_stake,
                )
                current.status = "expired"
                current.resolution_notes = (
                    f"Timeframe of {current.timeframe} years elapsed in year {year}; stake returned"
                )
                summary.expired += 1
                summary.favor_returned += current.divine_favor_stake
            else:
                summary.still_active += 1
                return

            current.resolved_year = year
            self.bets.update(current)
            summary.processed_count += 1
            summary.resolved_bet_ids.append(current.id)
            logger.info(f"Bet {current.id} {current.status} in year {year}: {current.resolution_notes}")

    def resolve(self, world: WorldState, year: int) -> ResolutionSummary:
        """Run one resolution pass over every active bet."""
        summary = ResolutionSummary(year=year)
        for bet in self.bets.active():
            self._settle(bet, world, year, summary)

        if summary.processed_count:
            logger.info(
                f"Resolution for year {year}: {summary.won} won, {summary.lost} lost, "
                f"{summary.expired} expired, {summary.still_active} still active"
            )
        return summary
