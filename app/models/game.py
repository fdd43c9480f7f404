"""
Models / game.py
Role:
- Typed snapshots returned by the game endpoints (state, break result,
  claim result, leaderboard).

Fields of `GameStateView`:
- deadline: end of the current round, epoch milliseconds.
- broken_eggs: ids in break order.
- progress: share of broken eggs, in percent.
- allowed_egg_id / link_id / link_used: only set when a linkId was given.
"""
from typing import List, Optional, Union

from pydantic import Field

from .base import CamelModel, Reward
from .egg import EggView


class GameStateView(CamelModel):
    deadline: int
    broken_eggs: List[int] = Field(default_factory=list)
    progress: float = 0.0
    eggs: List[EggView] = Field(default_factory=list)
    allowed_egg_id: Optional[int] = None
    link_id: Optional[int] = None
    link_used: Optional[bool] = None


class BreakEggResult(CamelModel):
    egg_id: int
    reward: Reward
    won: bool
    success: bool = True
    # filled when the egg was broken through a custom link (prize wall)
    eggs: Optional[List[EggView]] = None


class ClaimRewardsResult(CamelModel):
    total_reward: Union[int, float]
    success: bool = True


class LeaderboardEntry(CamelModel):
    id: int
    username: str
    score: Union[int, float]
