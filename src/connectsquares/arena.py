"""MatchArena — the action boundary around Match, Ledger, and Clock.

Receives join / play / cancel actions for matches by id, serialises them
per match, reads the clock, escrows wagers, and settles the pot when a
match ends. The flow for a winning move is:

    lock match -> Match.play -> winner check -> pot plan -> ledger transfers

Each action is all-or-nothing. Ledger transfers for one action run inside
a single ledger transaction, and if settlement fails after the match
already recorded the move, the match is rolled back to its pre-action
snapshot before the error is re-raised. A win is never recorded without
its payout.
"""

from __future__ import annotations

import logging
import random
import threading
from dataclasses import asdict
from pathlib import Path

from connectsquares.config import ArenaConfig
from connectsquares.core.clock import Clock, SystemClock
from connectsquares.core.errors import ErrorKind, MatchError
from connectsquares.core.ledger import Ledger, Movement
from connectsquares.core.schemas import load_schema, validate_or_reject
from connectsquares.core.telemetry import TelemetryEntry, TelemetryLogger
from connectsquares.game.match import Match, Phase, PlayOutcome, PlayResult, derive_match_id
from connectsquares.game.pot import Transfer, payout, refund, tie_refund

logger = logging.getLogger(__name__)

__all__ = ["MatchArena", "pot_holder"]

_NONCE_BITS = 32


def pot_holder(match_id: str) -> str:
    """Ledger holder id of a match's escrow pot."""
    return f"pot:{match_id}"


class MatchArena:
    """Hosts matches and executes actions against them one at a time."""

    def __init__(
        self,
        config: ArenaConfig | None = None,
        *,
        ledger: Ledger | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.config = config or ArenaConfig()
        self.ledger = ledger if ledger is not None else Ledger()
        self.clock = clock if clock is not None else SystemClock(self.config.slot_ms)
        self._action_schema = load_schema(
            Path(__file__).parent / "game" / "action.schema.json"
        )
        self._matches: dict[str, Match] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._telemetry: dict[str, TelemetryLogger] = {}
        self._registry_lock = threading.Lock()
        self._nonce_rng = random.Random()

    @property
    def treasury(self) -> str:
        return self.config.treasury

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def create(
        self,
        creator: str,
        rows: int | None = None,
        cols: int | None = None,
        connect: int | None = None,
        min_players: int | None = None,
        max_players: int | None = None,
        wager: int | None = None,
        *,
        nonce: int | None = None,
    ) -> str:
        """Create a match, escrow the creator's wager, and return the match id."""
        rules = self.config.rules
        with self._registry_lock:
            if nonce is None:
                nonce = self._free_nonce(creator)
            match = Match.create(
                creator,
                rules.rows if rows is None else rows,
                rules.cols if cols is None else cols,
                rules.connect if connect is None else connect,
                rules.min_players if min_players is None else min_players,
                rules.max_players if max_players is None else max_players,
                rules.wager if wager is None else wager,
                nonce=nonce,
                creation_time=self.clock.unix_timestamp(),
                turn_timeout=rules.turn_timeout_ticks,
                deathmatch=rules.deathmatch,
            )
            if match.match_id in self._matches:
                raise MatchError(ErrorKind.MATCH_ALREADY_EXISTS, f"{creator} nonce {nonce}")
            self._escrow(creator, match)
            self._register(match)

        logger.info(
            "match %s created by %s (%dx%d connect %d, wager %d)",
            match.match_id, creator, match.rows, match.cols, match.connect, match.wager,
        )
        self._log_action(match, "create", creator, self.clock.current_tick())
        return match.match_id

    def join(self, match_id: str, player: str) -> bool:
        """Escrow ``player``'s wager and seat them. Returns True on activation."""
        match, lock = self._lookup(match_id)
        with lock:
            tick = self.clock.current_tick()
            # Seat rules outrank funds: a full table is NOT_ACCEPTING_PLAYERS for everyone
            match.check_join(player)
            with self.ledger.transaction() as journal:
                journal.append(self._escrow(player, match))
                activated = match.join(player, tick, self.clock.unix_timestamp())

        if activated:
            logger.info("match %s active, seating order %s", match_id, match.roster)
        self._log_action(match, "join", player, tick)
        return activated

    def play(self, match_id: str, player: str, row: int, col: int) -> PlayResult:
        """Play (row, col) for ``player`` and settle the pot if the match ended."""
        match, lock = self._lookup(match_id)
        with lock:
            tick = self.clock.current_tick()
            saved = match.to_snapshot()
            result = match.play(player, row, col, tick)
            try:
                transfers = self._settle(match, result, player)
            except MatchError as exc:
                match.rewind(saved)
                logger.warning("match %s: settlement failed, move undone: %s", match_id, exc)
                raise

        if result.outcome == PlayOutcome.RESET:
            logger.info("match %s: board full with no winner, board reset", match_id)
        self._log_action(match, "play", player, tick, result)
        if transfers is not None:
            logger.info("match %s ended: %s", match_id, match.phase.value)
            self._finalize(match, transfers)
        return result

    def cancel(self, match_id: str, caller: str) -> None:
        """Cancel a waiting match and return the pot to its creator."""
        match, lock = self._lookup(match_id)
        with lock:
            saved = match.to_snapshot()
            match.cancel(caller)
            pot = pot_holder(match_id)
            plan = refund(self.ledger.balance(pot), match.creator)
            try:
                self._execute(pot, plan)
            except MatchError:
                match.rewind(saved)
                raise

        logger.info("match %s cancelled by %s", match_id, caller)
        self._log_action(match, "cancel", caller, self.clock.current_tick())
        self._finalize(match, plan)

    def submit(self, match_id: str, action: dict) -> PlayResult | bool | None:
        """Validate an action dict against the action schema and dispatch it."""
        validate_or_reject(action, self._action_schema, ErrorKind.INVALID_ACTION)
        kind = action["action"]
        if kind == "join":
            return self.join(match_id, action["player"])
        if kind == "play":
            return self.play(match_id, action["player"], action["row"], action["col"])
        return self.cancel(match_id, action["player"])

    # ------------------------------------------------------------------
    # Queries and snapshots
    # ------------------------------------------------------------------

    def get(self, match_id: str) -> Match:
        return self._lookup(match_id)[0]

    def match_ids(self) -> list[str]:
        with self._registry_lock:
            return list(self._matches)

    def current_player(self, match_id: str) -> str | None:
        return self.get(match_id).current_player(self.clock.current_tick())

    def pot_balance(self, match_id: str) -> int:
        self._lookup(match_id)
        return self.ledger.balance(pot_holder(match_id))

    def snapshot(self, match_id: str) -> dict:
        match, lock = self._lookup(match_id)
        with lock:
            return match.to_snapshot()

    def restore(self, snapshot: dict, *, replace: bool = False) -> str:
        """Register a match rebuilt from ``snapshot``; returns its id.

        With ``replace``, an already-hosted match is rewound in place under
        its lock, so existing references see the restored state.
        """
        match = Match.from_snapshot(snapshot)
        with self._registry_lock:
            existing = self._matches.get(match.match_id)
            if existing is None:
                self._register(match)
                return match.match_id
            if not replace:
                raise MatchError(ErrorKind.MATCH_ALREADY_EXISTS, match.match_id)
            lock = self._locks[match.match_id]
        with lock:
            existing.rewind(snapshot)
        return match.match_id

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _lookup(self, match_id: str) -> tuple[Match, threading.Lock]:
        with self._registry_lock:
            match = self._matches.get(match_id)
            if match is None:
                raise MatchError(ErrorKind.MATCH_NOT_FOUND, match_id)
            return match, self._locks[match_id]

    def _register(self, match: Match) -> None:
        # Caller holds _registry_lock
        self._matches[match.match_id] = match
        self._locks.setdefault(match.match_id, threading.Lock())

    def _free_nonce(self, creator: str) -> int:
        # Caller holds _registry_lock
        while True:
            nonce = self._nonce_rng.getrandbits(_NONCE_BITS)
            if derive_match_id(creator, nonce) not in self._matches:
                return nonce

    def _escrow(self, player: str, match: Match) -> Movement:
        held = self.ledger.balance(player)
        if held < match.wager:
            raise MatchError(
                ErrorKind.INSUFFICIENT_FUNDS,
                f"{player} holds {held}, wager is {match.wager}",
            )
        return self.ledger.move_funds(player, pot_holder(match.match_id), match.wager)

    def _settle(self, match: Match, result: PlayResult, player: str) -> list[Transfer] | None:
        """Pay out a finished match. Returns None if the match is still running."""
        pot = pot_holder(match.match_id)
        if result.outcome == PlayOutcome.WIN:
            if match.winner != player:
                raise MatchError(
                    ErrorKind.PLAYER_WINNER_MISMATCH,
                    f"winner {match.winner}, mover {player}",
                )
            plan = payout(
                self.ledger.balance(pot), match.wager, match.joined_count,
                match.winner, self.treasury,
            )
        elif result.outcome == PlayOutcome.TIE:
            plan = tie_refund(
                self.ledger.balance(pot), match.wager, match.roster, self.treasury,
            )
        else:
            return None
        self._execute(pot, plan)
        return plan

    def _execute(self, pot: str, plan: list[Transfer]) -> None:
        with self.ledger.transaction() as journal:
            for transfer in plan:
                journal.append(self.ledger.move_funds(pot, transfer.destination, transfer.amount))

    def _telemetry_for(self, match: Match) -> TelemetryLogger | None:
        output_dir = self.config.telemetry.output_dir
        if output_dir is None:
            return None
        with self._registry_lock:
            tl = self._telemetry.get(match.match_id)
            if tl is None:
                tl = TelemetryLogger(output_dir, match.match_id)
                self._telemetry[match.match_id] = tl
            return tl

    def _log_action(
        self,
        match: Match,
        action: str,
        player: str,
        tick: int,
        result: PlayResult | None = None,
    ) -> None:
        tl = self._telemetry_for(match)
        if tl is None:
            return
        tl.log_action(TelemetryEntry(
            action=action,
            player_id=player,
            tick=tick,
            phase=match.phase.value,
            moves_played=match.moves_played,
            turn_cursor=match.turn_cursor,
            joined_count=match.joined_count,
            row=result.row if result else None,
            col=result.col if result else None,
            outcome=result.outcome.value if result else None,
            board=match.board.to_list() if result else None,
        ))

    def _finalize(self, match: Match, transfers: list[Transfer]) -> None:
        tl = self._telemetry_for(match)
        if tl is None:
            return
        tl.finalize_match(
            phase=match.phase.value,
            winner=match.winner,
            transfers=[asdict(t) for t in transfers],
            extra={
                "roster": match.roster,
                "wager": match.wager,
                "cancelled": match.phase == Phase.CANCELLED,
            },
        )
