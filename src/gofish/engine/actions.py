from __future__ import annotations

from dataclasses import dataclass

from .types import Rank


@dataclass(frozen=True)
class AskAction:
    player: int
    target: int
    rank: Rank


@dataclass(frozen=True)
class DrawAction:
    player: int
    target: int | None = None
    asked_rank: Rank | None = None


@dataclass(frozen=True)
class AdvanceTurnAction:
    pass


Action = AskAction | DrawAction | AdvanceTurnAction
