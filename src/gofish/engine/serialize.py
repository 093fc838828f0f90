from __future__ import annotations

import random
from typing import Mapping

from .actions import Action, AdvanceTurnAction, AskAction, DrawAction
from .game import GameConfig, GameError, GameState, PlayerState
from .types import DECK_SIZE, RANKS, SUITS, Card, Rank

RECORD_KEYS = (
    "players",
    "deck",
    "current_player_index",
    "last_action_message",
    "has_active_game",
    "is_over",
    "winner",
    "is_tie",
)


class RecordError(GameError):
    pass


def action_to_dict(a: Action) -> dict[str, object]:
    if isinstance(a, AskAction):
        return {"type": "ask", "player": a.player, "target": a.target, "rank": a.rank}
    if isinstance(a, DrawAction):
        return {"type": "draw", "player": a.player, "target": a.target, "asked_rank": a.asked_rank}
    if isinstance(a, AdvanceTurnAction):
        return {"type": "advance_turn"}
    # should be unreachable
    return {"type": "unknown"}


def card_to_dict(c: Card) -> dict[str, str]:
    return {"rank": c.rank, "suit": c.suit}


def _player_to_dict(p: PlayerState) -> dict[str, object]:
    return {
        "id": p.id,
        "name": p.name,
        "is_automated": p.is_automated,
        "hand": [card_to_dict(c) for c in p.hand],
        "score": p.score,
    }


def state_to_record(state: GameState) -> dict[str, object]:
    """Flat, JSON-serializable record of everything needed to resume a game."""
    return {
        "players": [_player_to_dict(p) for p in state.players],
        "deck": [card_to_dict(c) for c in state.deck],
        "current_player_index": state.current_player_index,
        "last_action_message": state.last_action_message,
        "has_active_game": state.has_active_game,
        "is_over": state.is_over,
        "winner": state.winner.id if state.winner is not None else None,
        "is_tie": state.is_tie,
    }


def snapshot(state: GameState) -> dict[str, object]:
    """Persisted record plus the seed and action log, for replay comparisons."""
    snap = state_to_record(state)
    snap["seed"] = state.seed
    snap["action_log"] = [action_to_dict(a) for a in state.action_log]
    return snap


def _require_int(obj: Mapping[str, object], key: str) -> int:
    v = obj.get(key)
    if not isinstance(v, int) or isinstance(v, bool):
        raise RecordError(f"Expected int for {key}")
    return v


def _require_str(obj: Mapping[str, object], key: str) -> str:
    v = obj.get(key)
    if not isinstance(v, str):
        raise RecordError(f"Expected string for {key}")
    return v


def _require_bool(obj: Mapping[str, object], key: str) -> bool:
    v = obj.get(key)
    if not isinstance(v, bool):
        raise RecordError(f"Expected bool for {key}")
    return v


def _require_rank(raw: object) -> Rank:
    if raw not in RANKS:
        raise RecordError(f"Unknown rank: {raw!r}")
    return raw  # type: ignore[return-value]


def _parse_card(raw: object) -> Card:
    if not isinstance(raw, dict):
        raise RecordError("Card must be an object")
    suit = raw.get("suit")
    if suit not in SUITS:
        raise RecordError(f"Unknown suit: {suit!r}")
    return Card(rank=_require_rank(raw.get("rank")), suit=suit)  # type: ignore[arg-type]


def _parse_cards(raw: object, context: str) -> list[Card]:
    if not isinstance(raw, list):
        raise RecordError(f"{context} must be a list")
    return [_parse_card(c) for c in raw]


def _parse_player(raw: object) -> PlayerState:
    if not isinstance(raw, dict):
        raise RecordError("Player must be an object")
    score = _require_int(raw, "score")
    if score < 0:
        raise RecordError("score must not be negative")
    return PlayerState(
        id=_require_int(raw, "id"),
        name=_require_str(raw, "name"),
        is_automated=_require_bool(raw, "is_automated"),
        hand=_parse_cards(raw.get("hand"), "hand"),
        score=score,
    )


def state_from_record(
    record: Mapping[str, object],
    seed: int | None = None,
    config: GameConfig | None = None,
) -> GameState:
    """Rebuild a GameState from `state_to_record` output.

    The RNG is reseeded (from `seed`, or randomly) since it is not part of
    the record. Raises RecordError on anything that could not have come from
    a real game.
    """
    cfg = config or GameConfig()
    missing = [k for k in RECORD_KEYS if k not in record]
    if missing:
        raise RecordError(f"Record missing keys: {', '.join(missing)}")

    raw_players = record.get("players")
    if not isinstance(raw_players, list):
        raise RecordError("players must be a list")
    players = [_parse_player(p) for p in raw_players]
    if not cfg.min_players <= len(players) <= cfg.max_players:
        raise RecordError(f"Record holds {len(players)} players")
    ids = [p.id for p in players]
    if len(set(ids)) != len(ids):
        raise RecordError("Player ids must be unique")

    deck = _parse_cards(record.get("deck"), "deck")

    cards = deck + [c for p in players for c in p.hand]
    if len(set(cards)) != len(cards):
        raise RecordError("Record contains duplicate cards")
    if len(cards) + sum(p.score for p in players) != DECK_SIZE:
        raise RecordError("Card count does not match scores")
    # Hands are refilled whenever they run dry and the deck has cards
    empty = [p.name for p in players if not p.hand]
    if deck and empty:
        raise RecordError(f"Empty hand while the deck has cards: {', '.join(empty)}")

    index = _require_int(record, "current_player_index")
    if not 0 <= index < len(players):
        raise RecordError(f"current_player_index {index} out of range")

    winner: PlayerState | None = None
    winner_id = record.get("winner")
    if winner_id is not None:
        if not isinstance(winner_id, int):
            raise RecordError("winner must be a player id or null")
        matches = [p for p in players if p.id == winner_id]
        if not matches:
            raise RecordError(f"winner {winner_id} is not a player")
        winner = matches[0]

    is_over = _require_bool(record, "is_over")
    if is_over and cards:
        raise RecordError("Finished game still has cards in play")

    if seed is None:
        seed = random.randrange(2**31)
    return GameState(
        players=players,
        deck=deck,
        config=cfg,
        seed=seed,
        rng=random.Random(seed),
        current_player_index=index,
        last_action_message=_require_str(record, "last_action_message"),
        is_over=is_over,
        winner=winner,
        is_tie=_require_bool(record, "is_tie"),
    )
