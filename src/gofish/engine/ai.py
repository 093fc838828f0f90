from __future__ import annotations

import random
from dataclasses import dataclass

from .actions import Action
from .game import (
    EmptyHand,
    GameState,
    advance_turn,
    get_player,
    get_valid_targets,
    replenish_if_empty,
    take_turn,
)
from .types import Rank


@dataclass(frozen=True)
class AutomatedMove:
    rank: Rank
    target: int


def pick_automated_move(state: GameState, player_id: int, rng: random.Random | None = None) -> AutomatedMove:
    """Choose what an automated player asks for, without touching the game.

    The rank comes from a uniformly random card in the player's hand and the
    target is a uniformly random other player.
    """
    rng = rng or state.rng
    player = get_player(state, player_id)
    if not player.hand:
        raise EmptyHand(f"{player.name} has no cards to ask with.")
    card = player.hand[rng.randrange(len(player.hand))]
    targets = get_valid_targets(state, player.id)
    return AutomatedMove(rank=card.rank, target=targets[rng.randrange(len(targets))])


def ai_take_turn(state: GameState, player_id: int) -> list[Action]:
    """Play an automated player's whole turn.

    The AI draws from the engine RNG (`state.rng`) so it stays deterministic
    for a given seed. Returns the actions applied, in order.
    """
    start = len(state.action_log)
    while not state.is_over and state.current_player.id == player_id:
        replenish_if_empty(state, player_id)
        if state.is_over:
            break
        if not get_player(state, player_id).hand:
            # Nothing to ask with and nothing left to draw
            advance_turn(state)
            break
        move = pick_automated_move(state, player_id)
        if not take_turn(state, player_id, move.target, move.rank):
            break
    return state.action_log[start:]
