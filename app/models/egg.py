"""
Models / egg.py
Role:
- `Egg`: admin-side configuration and state of one egg of the grid.
- `EggView`: what the player grid sees of an egg (reward may be masked).

Fields:
- reward: amount or free text; only amounts count towards the running total.
- winning_rate: percent chance (0-100) that breaking the egg pays its reward.
- manually_broken: True when an admin forced the broken flag.
"""
from pydantic import Field

from .base import CamelModel, Reward


class Egg(CamelModel):
    id: int
    reward: Reward
    winning_rate: float = Field(100, ge=0, le=100)
    broken: bool = False
    manually_broken: bool = False


class EggView(CamelModel):
    """One cell of the grid as returned by /api/game-state and the reveal."""
    id: int
    broken: bool
    reward: Reward
    winning_rate: float
    manually_broken: bool = False
    allowed: bool = False
