from __future__ import annotations

import pytest

from gofish.engine.game import GameConfig, GameError, NotYourTurn, get_askable_ranks, get_valid_targets
from gofish.engine.serialize import state_to_record
from gofish.paths import Paths, get_paths
from gofish.session import GameSession


def _session(tmp_path, config: GameConfig | None = None) -> GameSession:
    real = get_paths()
    paths = Paths(
        repo_root=tmp_path,
        data_dir=real.data_dir,
        schema_dir=real.schema_dir,
        userdata_dir=tmp_path / "userdata",
    )
    return GameSession.from_paths(paths, config=config)


def _human_move(session: GameSession) -> None:
    state = session.state
    assert state is not None
    human = state.current_player
    rank = get_askable_ranks(state, human.id)[0]
    target = get_valid_targets(state, human.id)[0]
    session.human_ask(target, rank)


def test_start_saves_and_logs(tmp_path) -> None:
    session = _session(tmp_path)
    session.start(3, seed=12)
    assert session.has_active_game
    assert session.saves.exists()
    assert session.telemetry is not None
    types = [r["type"] for r in session.telemetry.read()]
    assert "GAME_STARTED" in types


def test_automated_turns_stop_at_the_human(tmp_path) -> None:
    for seed in range(10):
        session = _session(tmp_path / str(seed))
        session.start(4, seed=seed)
        session.run_automated_turns()
        state = session.state
        assert state is not None
        assert state.is_over or not state.current_player.is_automated


def test_pause_runs_before_each_automated_turn(tmp_path) -> None:
    session = _session(tmp_path)
    state = session.start(4, seed=3)
    state.current_player_index = 1
    calls: list[int] = []
    turns = session.run_automated_turns(pause=lambda: calls.append(1))
    assert 1 <= len(calls) <= turns


def test_human_cannot_act_on_an_automated_turn(tmp_path) -> None:
    session = _session(tmp_path)
    state = session.start(2, seed=0)
    # Put an automated player on turn
    state.current_player_index = 1
    with pytest.raises(NotYourTurn):
        session.human_ask(0, "A")


def test_commands_need_a_game(tmp_path) -> None:
    session = _session(tmp_path)
    with pytest.raises(GameError):
        session.run_automated_turns()
    with pytest.raises(GameError):
        session.human_ask(1, "A")


def test_full_game_through_session(tmp_path) -> None:
    session = _session(tmp_path, config=GameConfig(strict_turns=True))
    state = session.start(3, seed=2024)
    for _ in range(5_000):
        session.run_automated_turns()
        if state.is_over:
            break
        _human_move(session)
    assert state.is_over
    assert sum(p.score for p in state.players) == 52

    types = [r["type"] for r in session.telemetry.read()]  # type: ignore[union-attr]
    assert "GAME_STARTED" in types
    assert types[-1] == "GAME_ENDED"


def test_resume_restores_saved_game(tmp_path) -> None:
    session = _session(tmp_path)
    session.start(2, seed=31)
    session.run_automated_turns()
    saved = state_to_record(session.state)  # type: ignore[arg-type]

    fresh = _session(tmp_path)
    restored = fresh.resume()
    assert restored is not None
    assert state_to_record(restored) == saved


def test_resume_with_corrupt_save_starts_clean(tmp_path) -> None:
    session = _session(tmp_path)
    session.saves.path.parent.mkdir(parents=True, exist_ok=True)
    session.saves.path.write_text('{"players": []}', encoding="utf-8")
    assert session.resume() is None
    assert not session.has_active_game
    state = session.start(2, seed=1)
    assert state.has_active_game


def test_reset_forgets_the_game(tmp_path) -> None:
    session = _session(tmp_path)
    session.start(2, seed=5)
    session.reset()
    assert not session.has_active_game
    assert not session.saves.exists()
    assert _session(tmp_path).resume() is None


def test_human_with_empty_hand_is_refilled_not_skipped(tmp_path) -> None:
    session = _session(tmp_path)
    state = session.start(2, seed=17)
    human = state.players[0]
    held = list(human.hand)
    state.deck.extend(human.hand)
    human.hand = []
    state.current_player_index = 0

    assert session.run_automated_turns() == 1
    assert sorted(human.hand, key=str) == sorted(held, key=str)
    assert state.current_player.id == 0
