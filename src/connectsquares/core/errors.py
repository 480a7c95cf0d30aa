"""MatchError — the single rejection type raised by the match engine.

Every failed action surfaces as a MatchError carrying an ErrorKind. All
kinds are local, synchronous rejections: the action did not happen and
nothing was mutated. Callers decide whether to resubmit.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(Enum):
    INVALID_DIMENSIONS = "invalid_dimensions"
    TOO_MANY_PLAYERS = "too_many_players"
    MINIMUM_PLAYERS_MUST_BE_GREATER_THAN_ONE = "minimum_players_must_be_greater_than_one"
    INVALID_WAGER = "invalid_wager"
    NOT_ACCEPTING_PLAYERS = "not_accepting_players"
    ALREADY_JOINED = "already_joined"
    GAME_ALREADY_STARTED = "game_already_started"
    NOT_AUTHORIZED = "not_authorized"
    GAME_ALREADY_OVER = "game_already_over"
    TILE_OUT_OF_BOUNDS = "tile_out_of_bounds"
    TILE_ALREADY_SET = "tile_already_set"
    NOT_PLAYERS_TURN = "not_players_turn"
    PLAYER_WINNER_MISMATCH = "player_winner_mismatch"
    PAYOUT_DEBIT_NUMERICAL_OVERFLOW = "payout_debit_numerical_overflow"
    PAYOUT_CREDIT_NUMERICAL_OVERFLOW = "payout_credit_numerical_overflow"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    MATCH_NOT_FOUND = "match_not_found"
    MATCH_ALREADY_EXISTS = "match_already_exists"
    INVALID_ACTION = "invalid_action"
    INVALID_SNAPSHOT = "invalid_snapshot"


_MESSAGES = {
    ErrorKind.INVALID_DIMENSIONS: "board dimensions or connect length are invalid",
    ErrorKind.TOO_MANY_PLAYERS: "too many players specified",
    ErrorKind.MINIMUM_PLAYERS_MUST_BE_GREATER_THAN_ONE: "minimum players must be greater than 1",
    ErrorKind.INVALID_WAGER: "wager must be an unsigned 32-bit amount",
    ErrorKind.NOT_ACCEPTING_PLAYERS: "game is not accepting new players",
    ErrorKind.ALREADY_JOINED: "player has already joined this game",
    ErrorKind.GAME_ALREADY_STARTED: "game has already started",
    ErrorKind.NOT_AUTHORIZED: "caller is not authorized",
    ErrorKind.GAME_ALREADY_OVER: "game has already ended",
    ErrorKind.TILE_OUT_OF_BOUNDS: "specified tile is out of bounds",
    ErrorKind.TILE_ALREADY_SET: "specified tile is occupied",
    ErrorKind.NOT_PLAYERS_TURN: "it is not your player's turn",
    ErrorKind.PLAYER_WINNER_MISMATCH: "player and winner don't match",
    ErrorKind.PAYOUT_DEBIT_NUMERICAL_OVERFLOW: "debiting the game pot has caused a numerical overflow",
    ErrorKind.PAYOUT_CREDIT_NUMERICAL_OVERFLOW: "crediting the winner account has caused a numerical overflow",
    ErrorKind.INSUFFICIENT_FUNDS: "insufficient funds to cover the wager",
    ErrorKind.MATCH_NOT_FOUND: "no such match",
    ErrorKind.MATCH_ALREADY_EXISTS: "a match with this id already exists",
    ErrorKind.INVALID_ACTION: "action does not match the action schema",
    ErrorKind.INVALID_SNAPSHOT: "snapshot does not describe a valid match",
}


class MatchError(Exception):
    """Raised on any rejected match action. Never retried internally."""

    def __init__(self, kind: ErrorKind, details: str = "") -> None:
        self.kind = kind
        self.details = details
        message = _MESSAGES[kind]
        super().__init__(f"{message}: {details}" if details else message)

    @property
    def message(self) -> str:
        return _MESSAGES[self.kind]
