from __future__ import annotations

import random

import pytest

from gofish.engine.ai import ai_take_turn, pick_automated_move
from gofish.engine.actions import AskAction
from gofish.engine.game import EmptyHand, GameState, PlayerState, new_game
from gofish.engine.types import Card


def C(rank: str, suit: str = "hearts") -> Card:
    return Card(rank=rank, suit=suit)  # type: ignore[arg-type]


def _state(*hands: list[Card], deck: list[Card] | None = None) -> GameState:
    players = [PlayerState(id=i, name=f"P{i}", is_automated=i != 0, hand=list(h)) for i, h in enumerate(hands)]
    return GameState(players=players, deck=list(deck or []), rng=random.Random(7))


def test_pick_uses_a_held_rank_and_another_player() -> None:
    state = new_game(4, seed=11)
    for p in state.players:
        for _ in range(20):
            move = pick_automated_move(state, p.id)
            assert move.rank in {c.rank for c in p.hand}
            assert move.target != p.id
            assert 0 <= move.target < 4


def test_pick_does_not_mutate_game_state() -> None:
    state = new_game(3, seed=5)
    hands = [list(p.hand) for p in state.players]
    deck = list(state.deck)
    message = state.last_action_message
    pick_automated_move(state, 1)
    assert [p.hand for p in state.players] == hands
    assert state.deck == deck
    assert state.last_action_message == message
    assert state.action_log == []


def test_pick_reaches_every_target_and_rank() -> None:
    state = _state([C("2")], [C("3"), C("4", "clubs")], [C("5")], [C("6")])
    targets = set()
    ranks = set()
    for _ in range(300):
        move = pick_automated_move(state, 1)
        targets.add(move.target)
        ranks.add(move.rank)
    assert targets == {0, 2, 3}
    assert ranks == {"3", "4"}


def test_pick_with_explicit_rng_is_reproducible() -> None:
    state = new_game(4, seed=3)
    a = [pick_automated_move(state, 2, rng=random.Random(1)) for _ in range(5)]
    b = [pick_automated_move(state, 2, rng=random.Random(1)) for _ in range(5)]
    assert a == b


def test_pick_on_empty_hand_raises() -> None:
    state = _state([C("2")], [])
    with pytest.raises(EmptyHand):
        pick_automated_move(state, 1)


def test_ai_take_turn_does_nothing_out_of_turn() -> None:
    state = new_game(2, seed=8)
    other = 1 - state.current_player_index
    assert ai_take_turn(state, other) == []


def test_ai_take_turn_ends_with_turn_passed_or_game_over() -> None:
    for seed in range(20):
        state = new_game(3, seed=seed)
        player = state.current_player.id
        actions = ai_take_turn(state, player)
        assert actions
        assert state.is_over or state.current_player.id != player


def test_ai_take_turn_skips_empty_hand() -> None:
    state = _state([C("2")], [], [C("2", "clubs")])
    state.current_player_index = 1
    ai_take_turn(state, 1)
    assert state.current_player_index == 2
    assert state.players[0].hand == [C("2")]


def test_ai_take_turn_refills_an_empty_hand_before_asking() -> None:
    deck = [C("5", "clubs"), C("6", "clubs"), C("7", "clubs")]
    state = _state([C("2")], [], deck=deck)
    state.current_player_index = 1
    actions = ai_take_turn(state, 1)
    assert isinstance(actions[0], AskAction)
    assert actions[0].player == 1
    assert sorted(c.rank for c in state.players[1].hand) == ["5", "6", "7"]
    assert state.deck == []
    assert state.current_player_index == 0
