from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Iterable

from .actions import Action, AdvanceTurnAction, AskAction, DrawAction
from .types import DECK_SIZE, RANKS, Card, Rank, count_ranks, full_deck, has_rank

logger = logging.getLogger(__name__)

Event = dict[str, object]


class GameError(RuntimeError):
    pass


class InvalidPlayerCount(GameError):
    pass


class UnknownPlayer(GameError):
    pass


class EmptyHand(GameError):
    pass


class NotYourTurn(GameError):
    pass


class InvalidAsk(GameError):
    pass


class GameAlreadyOver(GameError):
    pass


@dataclass(frozen=True)
class GameConfig:
    hand_size: int = 7
    min_players: int = 2
    max_players: int = 4
    # Reject ask/draw from anyone but the current player
    strict_turns: bool = False
    human_name: str = "You"
    automated_name_prefix: str = "Computer"


@dataclass
class PlayerState:
    id: int
    name: str
    is_automated: bool
    hand: list[Card] = field(default_factory=list)
    score: int = 0


@dataclass
class GameState:
    players: list[PlayerState]
    deck: list[Card]  # draw end is the back of the list
    config: GameConfig = field(default_factory=GameConfig)
    seed: int = 0
    rng: random.Random = field(default_factory=random.Random)
    current_player_index: int = 0
    last_action_message: str = ""
    is_over: bool = False
    winner: PlayerState | None = None
    is_tie: bool = False
    action_log: list[Action] = field(default_factory=list)
    event_log: list[Event] = field(default_factory=list)

    @property
    def has_active_game(self) -> bool:
        return len(self.players) > 0

    @property
    def current_player(self) -> PlayerState:
        return self.players[self.current_player_index]


def _shuffle(rng: random.Random, items: list[Card]) -> None:
    # random.shuffle is a Fisher-Yates pass from the last index down
    rng.shuffle(items)


def _set_message(state: GameState, message: str) -> None:
    state.last_action_message = message
    logger.debug(message)


def get_player(state: GameState, player_id: int) -> PlayerState:
    for p in state.players:
        if p.id == player_id:
            return p
    raise UnknownPlayer(f"No player with id {player_id}.")


def get_valid_targets(state: GameState, player_id: int) -> list[int]:
    """Ids of every player `player_id` may ask."""
    get_player(state, player_id)
    return [p.id for p in state.players if p.id != player_id]


def get_askable_ranks(state: GameState, player_id: int) -> list[Rank]:
    """Ranks held by the player, in rank order."""
    hand = get_player(state, player_id).hand
    return [rank for rank in RANKS if has_rank(hand, rank)]


def card_count(state: GameState) -> int:
    return sum(len(p.hand) for p in state.players) + len(state.deck)


def _require_active(state: GameState) -> None:
    if state.is_over:
        raise GameAlreadyOver("Game already ended.")


def _require_turn(state: GameState, player: PlayerState) -> None:
    if state.config.strict_turns and state.current_player.id != player.id:
        raise NotYourTurn(f"It is {state.current_player.name}'s turn, not {player.name}'s.")


def resolve_sets(state: GameState, player_id: int) -> list[Rank]:
    """Remove every completed pair from a player's hand and score it.

    Each pair is worth 2 points. A rank held an odd number of times keeps
    exactly one card in hand. Afterwards the player is replenished if the
    hand ran dry and the outcome is re-evaluated.

    Returns the ranks that paired, in rank order.
    """
    player = get_player(state, player_id)
    counts = count_ranks(player.hand)
    paired = [rank for rank in RANKS if counts.get(rank, 0) >= 2]

    if paired:
        kept: list[Card] = []
        seen: set[Rank] = set()
        # A triple keeps one card and scores the other two as a pair, so
        # hands + deck + scores stays at 52.
        for card in player.hand:
            n = counts[card.rank]
            if n < 2 or (n % 2 == 1 and card.rank not in seen):
                kept.append(card)
            seen.add(card.rank)
        pairs = sum(counts[rank] // 2 for rank in paired)
        player.hand = kept
        player.score += 2 * pairs
        _set_message(state, f"{player.name} matched {pairs} pair(s) of {', '.join(paired)}s!")
        state.event_log.append(
            {"type": "PAIRS_MATCHED", "player": player.id, "ranks": list(paired), "points": 2 * pairs}
        )

    replenish_if_empty(state, player.id)
    evaluate_outcome(state)
    return paired


def replenish_if_empty(state: GameState, player_id: int) -> int:
    """Refill an empty hand from the deck. Returns the number of cards drawn."""
    player = get_player(state, player_id)
    if player.hand or not state.deck:
        return 0

    drawn = min(state.config.hand_size, len(state.deck))
    for _ in range(drawn):
        player.hand.append(state.deck.pop())
    _set_message(state, f"{player.name} ran out of cards and drew {drawn} from the deck.")
    state.event_log.append({"type": "HAND_REPLENISHED", "player": player.id, "count": drawn})

    # Fresh cards may pair among themselves
    resolve_sets(state, player.id)
    return drawn


def evaluate_outcome(state: GameState) -> bool:
    """End the game once the deck and every hand are empty. Returns `is_over`."""
    if state.is_over:
        return True
    if state.deck or any(p.hand for p in state.players):
        return False

    ranked = sorted(state.players, key=lambda p: p.score, reverse=True)
    top = ranked[0]
    tied = [p for p in ranked if p.score == top.score]
    state.winner = top
    state.is_tie = len(tied) > 1
    state.is_over = True

    if state.is_tie:
        _set_message(state, f"Game Over! It's a tie with {top.score} points!")
    else:
        _set_message(state, f"Game Over! {top.name} wins with {top.score} points!")
    state.event_log.append(
        {
            "type": "GAME_ENDED",
            "winner": top.id,
            "tie": state.is_tie,
            "scores": {p.id: p.score for p in state.players},
        }
    )
    logger.info("Game over: %s", state.last_action_message)
    return True


def ask(state: GameState, asker_id: int, target_id: int, rank: Rank) -> bool:
    """Ask another player for every card of `rank` they hold.

    Returns True when at least one card changed hands. A miss leaves both
    hands untouched and the driver is expected to follow with `draw`.
    """
    _require_active(state)
    asker = get_player(state, asker_id)
    target = get_player(state, target_id)
    if asker.id == target.id:
        raise InvalidAsk(f"{asker.name} cannot ask themselves.")
    if rank not in RANKS:
        raise InvalidAsk(f"Unknown rank: {rank!r}")
    _require_turn(state, asker)
    if state.config.strict_turns and not has_rank(asker.hand, rank):
        raise InvalidAsk(f"{asker.name} must hold a {rank} to ask for it.")

    state.action_log.append(AskAction(player=asker.id, target=target.id, rank=rank))

    matching = [c for c in target.hand if c.rank == rank]
    if not matching:
        _set_message(state, f"{asker.name} asked {target.name} for {rank}s - Go Fish!")
        state.event_log.append({"type": "GO_FISH", "player": asker.id, "target": target.id, "rank": rank})
        return False

    target.hand = [c for c in target.hand if c.rank != rank]
    asker.hand.extend(matching)
    _set_message(state, f"{asker.name} got {len(matching)} {rank}(s) from {target.name}")
    state.event_log.append(
        {
            "type": "CARDS_TRANSFERRED",
            "player": asker.id,
            "target": target.id,
            "rank": rank,
            "count": len(matching),
        }
    )

    resolve_sets(state, asker.id)
    replenish_if_empty(state, target.id)
    evaluate_outcome(state)
    return True


def draw(
    state: GameState,
    player_id: int,
    target_id: int | None = None,
    asked_rank: Rank | None = None,
) -> Card | None:
    """Draw the top card of the deck. Returns None when the deck is empty.

    A finished game always has an empty deck, so a go-fish draw that
    follows the final ask returns None instead of raising.
    """
    if state.is_over and not state.deck:
        return None
    _require_active(state)
    player = get_player(state, player_id)
    target = get_player(state, target_id) if target_id is not None else None
    _require_turn(state, player)

    if not state.deck:
        return None

    state.action_log.append(DrawAction(player=player.id, target=target_id, asked_rank=asked_rank))
    card = state.deck.pop()
    player.hand.append(card)

    if asked_rank is not None and target is not None:
        _set_message(state, f"{player.name} asked {target.name} for {asked_rank}s - Go Fish! Drew a card.")
    elif asked_rank is not None:
        _set_message(state, f"{player.name} asked for {asked_rank}s - Go Fish! Drew a card.")
    else:
        _set_message(state, f"{player.name} drew a card")
    state.event_log.append({"type": "CARD_DRAWN", "player": player.id, "rank": card.rank, "suit": card.suit})

    resolve_sets(state, player.id)
    evaluate_outcome(state)
    return card


def advance_turn(state: GameState) -> PlayerState:
    _require_active(state)
    state.action_log.append(AdvanceTurnAction())
    state.current_player_index = (state.current_player_index + 1) % len(state.players)
    state.event_log.append({"type": "TURN_ADVANCED", "player": state.current_player.id})
    return state.current_player


def take_turn(state: GameState, player_id: int, target_id: int, rank: Rank) -> bool:
    """Run one ask for `player_id` with the usual go-fish follow-up.

    The player keeps the turn after a successful ask or after drawing the
    rank they asked for; otherwise the turn passes on. A player left with no
    cards also passes. Returns True when the same player asks again.
    """
    if ask(state, player_id, target_id, rank):
        keeps_turn = True
    else:
        card = draw(state, player_id, target_id, rank)
        keeps_turn = card is not None and card.rank == rank

    if state.is_over:
        return False
    if not keeps_turn or not get_player(state, player_id).hand:
        advance_turn(state)
        return False
    return True


def apply(state: GameState, action: Action) -> bool | Card | PlayerState | None:
    """Dispatch a recorded action to the matching command."""
    if isinstance(action, AskAction):
        return ask(state, action.player, action.target, action.rank)
    if isinstance(action, DrawAction):
        return draw(state, action.player, action.target, action.asked_rank)
    if isinstance(action, AdvanceTurnAction):
        return advance_turn(state)
    raise TypeError(f"Unknown action: {action!r}")


def new_game(num_players: int, seed: int | None = None, config: GameConfig | None = None) -> GameState:
    cfg = config or GameConfig()
    if not cfg.min_players <= num_players <= cfg.max_players:
        raise InvalidPlayerCount(
            f"Games need {cfg.min_players}-{cfg.max_players} players, got {num_players}."
        )
    if cfg.hand_size * num_players > DECK_SIZE:
        raise ValueError(f"Cannot deal {cfg.hand_size} cards to {num_players} players.")

    if seed is None:
        seed = random.randrange(2**31)
    rng = random.Random(seed)
    deck = full_deck()
    _shuffle(rng, deck)

    players = [
        PlayerState(
            id=i,
            name=cfg.human_name if i == 0 else f"{cfg.automated_name_prefix} {i}",
            is_automated=i != 0,
        )
        for i in range(num_players)
    ]
    state = GameState(players=players, deck=deck, config=cfg, seed=seed, rng=rng)

    # Deal from the front of the deck; draws later come off the back
    for p in players:
        p.hand = state.deck[: cfg.hand_size]
        del state.deck[: cfg.hand_size]

    for p in players:
        resolve_sets(state, p.id)

    state.current_player_index = rng.randrange(num_players)
    _set_message(state, f"Game started. {state.current_player.name} goes first.")
    state.event_log.append(
        {"type": "GAME_STARTED", "players": num_players, "first_player": state.current_player.id}
    )
    logger.info("New game: %d players, seed %d", num_players, seed)
    return state


def replay(
    num_players: int,
    seed: int,
    actions: Iterable[Action],
    config: GameConfig | None = None,
) -> GameState:
    state = new_game(num_players, seed=seed, config=config)
    for a in actions:
        apply(state, a)
        if state.is_over:
            break
    return state
