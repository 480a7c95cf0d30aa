"""Match — the wagered connect-N state machine.

Phases run Waiting -> Active -> Won(winner) | Cancelled. A full board with
no winner does not end an Active match: the board is wiped and play
continues ("deathmatch"), so a match never ties under the default rules.
Tie remains a defined phase, reachable only when a match is created with
``deathmatch=False``.

Every action validates before it mutates. A rejected action raises
MatchError and leaves the match exactly as it was.

The engine is clock-agnostic: callers pass in the current tick (and, for
the activating join, the unix timestamp used to seed the shuffle).
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from connectsquares.core.errors import ErrorKind, MatchError
from connectsquares.core.schemas import load_schema, validate_or_reject
from connectsquares.game.board import Board
from connectsquares.game.shuffle import shuffle_roster
from connectsquares.game.turn_clock import TURN_TIMEOUT, TurnClock
from connectsquares.game.win import winning_axis

__all__ = [
    "GameState",
    "Match",
    "Phase",
    "PlayOutcome",
    "PlayResult",
    "derive_match_id",
]

SNAPSHOT_VERSION = 1
U8_MAX = 255
U32_MAX = 2**32 - 1

# More than two players lets players collude against one another in a
# winner-take-pot game, so both bounds are pinned to exactly two.
PLAYER_COUNT = 2

_SNAPSHOT_SCHEMA = load_schema(Path(__file__).parent / "snapshot.schema.json")


class Phase(Enum):
    WAITING = "waiting"
    ACTIVE = "active"
    TIE = "tie"
    WON = "won"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class GameState:
    """Tagged phase; ``winner`` is set only for Phase.WON."""

    phase: Phase
    winner: str | None = None

    @classmethod
    def won(cls, winner: str) -> GameState:
        return cls(Phase.WON, winner)

    @property
    def is_terminal(self) -> bool:
        return self.phase in (Phase.TIE, Phase.WON, Phase.CANCELLED)


class PlayOutcome(Enum):
    MOVE = "move"
    WIN = "win"
    RESET = "reset"
    TIE = "tie"


@dataclass(frozen=True)
class PlayResult:
    """What an accepted move did."""

    outcome: PlayOutcome
    player_index: int
    row: int
    col: int
    axis: str | None = None


def derive_match_id(creator: str, nonce: int) -> str:
    """Stable id from creator and nonce. Same inputs always produce the same id."""
    digest = hashlib.sha256(f"game:{creator}:{nonce}".encode("utf-8")).hexdigest()
    return digest[:32]


class Match:
    """One match: board, roster, phase, and turn bookkeeping.

    Build with ``Match.create`` (validated) or ``Match.from_snapshot``.
    """

    def __init__(
        self,
        *,
        match_id: str,
        creator: str,
        nonce: int,
        rows: int,
        cols: int,
        connect: int,
        min_players: int,
        max_players: int,
        wager: int,
        creation_time: int = 0,
        turn_timeout: int = TURN_TIMEOUT,
        deathmatch: bool = True,
    ) -> None:
        self._match_id = match_id
        self._creator = creator
        self._nonce = nonce
        self._rows = rows
        self._cols = cols
        self._connect = connect
        self._min_players = min_players
        self._max_players = max_players
        self._wager = wager
        self._creation_time = creation_time
        self._clock = TurnClock(turn_timeout)
        self._deathmatch = deathmatch

        self._state = GameState(Phase.WAITING)
        self._roster: list[str | None] = [None] * max_players
        self._roster[0] = creator
        self._joined_count = 1
        self._board = Board(rows, cols)
        self._moves_played = 0
        self._turn_cursor = 0
        self._last_move_slot = 0

    @classmethod
    def create(
        cls,
        creator: str,
        rows: int,
        cols: int,
        connect: int,
        min_players: int,
        max_players: int,
        wager: int,
        *,
        nonce: int = 0,
        creation_time: int = 0,
        turn_timeout: int = TURN_TIMEOUT,
        deathmatch: bool = True,
    ) -> Match:
        _validate_grid(rows, cols)
        _validate_player_bounds(min_players, max_players)
        _validate_connect(connect, rows, cols)
        if not isinstance(wager, int) or not (0 <= wager <= U32_MAX):
            raise MatchError(ErrorKind.INVALID_WAGER, f"wager={wager!r}")
        return cls(
            match_id=derive_match_id(creator, nonce),
            creator=creator,
            nonce=nonce,
            rows=rows,
            cols=cols,
            connect=connect,
            min_players=min_players,
            max_players=max_players,
            wager=wager,
            creation_time=creation_time,
            turn_timeout=turn_timeout,
            deathmatch=deathmatch,
        )

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def join(self, candidate: str, tick: int, timestamp: int) -> bool:
        """Seat ``candidate``. Returns True if this join activated the match."""
        self.check_join(candidate)
        self._roster[self._joined_count] = candidate
        self._joined_count += 1

        if self._joined_count == self._min_players:
            self._roster = shuffle_roster(self._roster, timestamp, tick)
            self._state = GameState(Phase.ACTIVE)
            # The turn clock starts at activation, not creation
            self._last_move_slot = tick
            return True
        return False

    def check_join(self, candidate: str) -> None:
        """Raise the error ``join(candidate, ...)`` would raise, without seating anyone."""
        if self._state.phase != Phase.WAITING:
            raise MatchError(ErrorKind.NOT_ACCEPTING_PLAYERS, f"phase is {self._state.phase.value}")
        if candidate in self._roster[: self._joined_count]:
            raise MatchError(ErrorKind.ALREADY_JOINED, candidate)

    def cancel(self, caller: str) -> None:
        """Cancel a match that has not started. Cancelling twice is allowed."""
        if self._state.phase not in (Phase.WAITING, Phase.CANCELLED):
            raise MatchError(ErrorKind.GAME_ALREADY_STARTED, f"phase is {self._state.phase.value}")
        if caller != self._creator:
            raise MatchError(ErrorKind.NOT_AUTHORIZED, f"{caller} is not the creator")
        self._state = GameState(Phase.CANCELLED)

    def play(self, caller: str, row: int, col: int, tick: int) -> PlayResult:
        """Claim (row, col) for ``caller`` at ``tick``."""
        if self._state.phase != Phase.ACTIVE:
            raise MatchError(ErrorKind.GAME_ALREADY_OVER, f"phase is {self._state.phase.value}")
        if not (0 <= row < self._rows and 0 <= col < self._cols):
            raise MatchError(
                ErrorKind.TILE_OUT_OF_BOUNDS,
                f"[{row}, {col}] on a {self._rows}x{self._cols} board",
            )

        acting = self.current_player_index(tick)
        if self._roster[acting] != caller:
            raise MatchError(
                ErrorKind.NOT_PLAYERS_TURN,
                f"{caller} tried to move, turn belongs to {self._roster[acting]}",
            )

        # Raises TILE_ALREADY_SET before anything else is touched
        self._board.set(row, col, acting)
        self._last_move_slot = tick
        self._moves_played += 1
        self._turn_cursor = acting

        axis = winning_axis(self._board, row, col, self._connect)
        if axis is not None:
            # The mover is the winner by definition; no roster lookup
            self._state = GameState.won(caller)
            return PlayResult(PlayOutcome.WIN, acting, row, col, axis)

        outcome = PlayOutcome.MOVE
        if self._moves_played == self._rows * self._cols:
            if not self._deathmatch:
                self._state = GameState(Phase.TIE)
                return PlayResult(PlayOutcome.TIE, acting, row, col)
            self._board.reset()
            self._moves_played = 0
            outcome = PlayOutcome.RESET

        self._turn_cursor = (acting + 1) % self._joined_count
        return PlayResult(outcome, acting, row, col)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def current_player_index(self, tick: int) -> int:
        return self._clock.resolve(
            self._last_move_slot, self._turn_cursor, self._joined_count, tick
        )

    def current_player(self, tick: int) -> str | None:
        """Identity whose turn is live at ``tick``; None unless Active."""
        if self._state.phase != Phase.ACTIVE:
            return None
        return self._roster[self.current_player_index(tick)]

    @property
    def match_id(self) -> str:
        return self._match_id

    @property
    def creator(self) -> str:
        return self._creator

    @property
    def nonce(self) -> int:
        return self._nonce

    @property
    def rows(self) -> int:
        return self._rows

    @property
    def cols(self) -> int:
        return self._cols

    @property
    def connect(self) -> int:
        return self._connect

    @property
    def min_players(self) -> int:
        return self._min_players

    @property
    def max_players(self) -> int:
        return self._max_players

    @property
    def wager(self) -> int:
        return self._wager

    @property
    def state(self) -> GameState:
        return self._state

    @property
    def phase(self) -> Phase:
        return self._state.phase

    @property
    def winner(self) -> str | None:
        return self._state.winner

    @property
    def is_active(self) -> bool:
        return self._state.phase == Phase.ACTIVE

    @property
    def roster(self) -> list[str]:
        """Joined players in seat order."""
        return [p for p in self._roster[: self._joined_count] if p is not None]

    @property
    def joined_count(self) -> int:
        return self._joined_count

    @property
    def board(self) -> Board:
        return self._board

    @property
    def moves_played(self) -> int:
        return self._moves_played

    @property
    def turn_cursor(self) -> int:
        return self._turn_cursor

    @property
    def last_move_slot(self) -> int:
        return self._last_move_slot

    @property
    def creation_time(self) -> int:
        return self._creation_time

    @property
    def turn_timeout(self) -> int:
        return self._clock.timeout

    @property
    def deathmatch(self) -> bool:
        return self._deathmatch

    @property
    def pot_target(self) -> int:
        """What the pot must hold: one wager per seated player."""
        return self._wager * self._joined_count

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    def to_snapshot(self) -> dict:
        return {
            "version": SNAPSHOT_VERSION,
            "match_id": self._match_id,
            "creator": self._creator,
            "nonce": self._nonce,
            "phase": self._state.phase.value,
            "winner": self._state.winner,
            "rows": self._rows,
            "cols": self._cols,
            "connect": self._connect,
            "min_players": self._min_players,
            "max_players": self._max_players,
            "wager": self._wager,
            "roster": list(self._roster),
            "joined_count": self._joined_count,
            "board": self._board.to_list(),
            "moves_played": self._moves_played,
            "turn_cursor": self._turn_cursor,
            "last_move_slot": self._last_move_slot,
            "creation_time": self._creation_time,
            "turn_timeout": self._clock.timeout,
            "deathmatch": self._deathmatch,
        }

    @classmethod
    def from_snapshot(cls, data: dict) -> Match:
        """Rebuild a match between moves. Raises INVALID_SNAPSHOT on bad input."""
        validate_or_reject(data, _SNAPSHOT_SCHEMA, ErrorKind.INVALID_SNAPSHOT)
        problem = _snapshot_problem(data)
        if problem:
            raise MatchError(ErrorKind.INVALID_SNAPSHOT, problem)

        match = cls(
            match_id=data["match_id"],
            creator=data["creator"],
            nonce=data["nonce"],
            rows=data["rows"],
            cols=data["cols"],
            connect=data["connect"],
            min_players=data["min_players"],
            max_players=data["max_players"],
            wager=data["wager"],
            creation_time=data["creation_time"],
            turn_timeout=data["turn_timeout"],
            deathmatch=data["deathmatch"],
        )
        match._state = GameState(Phase(data["phase"]), data["winner"])
        match._roster = list(data["roster"])
        match._joined_count = data["joined_count"]
        match._board = Board.from_list(data["board"])
        match._moves_played = data["moves_played"]
        match._turn_cursor = data["turn_cursor"]
        match._last_move_slot = data["last_move_slot"]
        return match

    def rewind(self, data: dict) -> None:
        """Restore this object in place to an earlier snapshot of itself.

        References to the match held elsewhere see the restored state.
        """
        restored = Match.from_snapshot(data)
        if restored.match_id != self._match_id:
            raise MatchError(
                ErrorKind.INVALID_SNAPSHOT,
                f"snapshot is of {restored.match_id}, not {self._match_id}",
            )
        self.__dict__.update(vars(restored))

    def __repr__(self) -> str:
        return (
            f"Match({self._match_id[:8]}, {self._rows}x{self._cols} connect {self._connect}, "
            f"{self._state.phase.value}, players={self.roster})"
        )


def _check_dimension(name: str, value: int) -> None:
    if not isinstance(value, int) or not (2 < value <= U8_MAX):
        raise MatchError(ErrorKind.INVALID_DIMENSIONS, f"{name} must be 3-{U8_MAX}, got {value!r}")


def _validate_grid(rows: int, cols: int) -> None:
    _check_dimension("rows", rows)
    _check_dimension("cols", cols)


def _validate_connect(connect: int, rows: int, cols: int) -> None:
    # Runs after the player bounds: a bad table size outranks a bad connect
    _check_dimension("connect", connect)
    if connect > rows:
        raise MatchError(ErrorKind.INVALID_DIMENSIONS, f"connect {connect} exceeds rows {rows}")
    if connect > cols:
        raise MatchError(ErrorKind.INVALID_DIMENSIONS, f"connect {connect} exceeds cols {cols}")


def _validate_player_bounds(min_players: int, max_players: int) -> None:
    if min_players <= 1 or max_players <= 1:
        raise MatchError(
            ErrorKind.MINIMUM_PLAYERS_MUST_BE_GREATER_THAN_ONE,
            f"min={min_players}, max={max_players}",
        )
    if min_players != PLAYER_COUNT or max_players != PLAYER_COUNT:
        raise MatchError(
            ErrorKind.TOO_MANY_PLAYERS,
            f"exactly {PLAYER_COUNT} players supported, got min={min_players}, max={max_players}",
        )


def _snapshot_problem(data: dict) -> str | None:
    """Cross-field checks the JSON Schema cannot express."""
    rows, cols = data["rows"], data["cols"]
    joined = data["joined_count"]
    if len(data["board"]) != rows or any(len(r) != cols for r in data["board"]):
        return f"board is not {rows}x{cols}"
    if len(data["roster"]) != data["max_players"]:
        return "roster length differs from max_players"
    if not (1 <= joined <= data["max_players"]):
        return f"joined_count {joined} out of range"
    if any(p is None for p in data["roster"][:joined]):
        return "empty seat inside the joined range"
    if not (0 <= data["turn_cursor"] < joined):
        return f"turn_cursor {data['turn_cursor']} out of range"
    if any(c is not None and c >= joined for r in data["board"] for c in r):
        return "board references an unseated player"
    phase = Phase(data["phase"])
    if (phase == Phase.WON) != (data["winner"] is not None):
        return "winner must be set exactly when the phase is won"
    if phase == Phase.WAITING and joined >= data["min_players"]:
        return "a waiting match cannot have a full table"
    return None
