"""Headless, synchronous rules engine for Go Fish.

IMPORTANT: This package must never import from gofish.services or do I/O.
"""

from .actions import AdvanceTurnAction, AskAction, DrawAction
from .ai import AutomatedMove, ai_take_turn, pick_automated_move
from .game import (
    EmptyHand,
    GameAlreadyOver,
    GameConfig,
    GameError,
    GameState,
    InvalidAsk,
    InvalidPlayerCount,
    NotYourTurn,
    PlayerState,
    UnknownPlayer,
    advance_turn,
    ask,
    draw,
    evaluate_outcome,
    new_game,
    replay,
    replenish_if_empty,
    resolve_sets,
    take_turn,
)
from .serialize import RecordError, snapshot, state_from_record, state_to_record
from .types import RANKS, SUITS, Card, Rank, Suit

__all__ = [
    "AdvanceTurnAction",
    "AskAction",
    "AutomatedMove",
    "Card",
    "DrawAction",
    "EmptyHand",
    "GameAlreadyOver",
    "GameConfig",
    "GameError",
    "GameState",
    "InvalidAsk",
    "InvalidPlayerCount",
    "NotYourTurn",
    "PlayerState",
    "RANKS",
    "Rank",
    "RecordError",
    "SUITS",
    "Suit",
    "UnknownPlayer",
    "advance_turn",
    "ai_take_turn",
    "ask",
    "draw",
    "evaluate_outcome",
    "new_game",
    "pick_automated_move",
    "replay",
    "replenish_if_empty",
    "resolve_sets",
    "snapshot",
    "state_from_record",
    "state_to_record",
    "take_turn",
]
