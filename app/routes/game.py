"""
Module routes/game.py
Role:
- Public player endpoints: grid state, egg break, reward claim, reset,
  leaderboard.

Integrations:
- GAME_STORE: in-memory store doing all the game logic.
- Store errors (`GameStoreError`) become HTTP errors with their status code;
  the app-level handler renders them as `{"message": ...}`.

Notes:
- `linkId` (query on /game-state, body on /break-egg) ties the request to a
  single-use custom link.
"""
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query
from pydantic import Field

from app.models.base import CamelModel
from app.models.game import BreakEggResult, ClaimRewardsResult, GameStateView, LeaderboardEntry
from app.services.game_store import GAME_STORE, GameStoreError

router = APIRouter(prefix="/api", tags=["game"])


class BreakEggPayload(CamelModel):
    egg_id: int = Field(..., description="Egg to break (1..TOTAL_EGGS)")
    link_id: Optional[int] = Field(None, description="Custom link used to reach the game")


@router.get("/game-state", response_model=GameStateView, response_model_exclude_none=True)
def game_state(
    link_id: Optional[int] = Query(default=None, alias="linkId", description="Custom link id"),
):
    """Grid state; with `linkId`, the visible rewards follow the link's used flag."""
    try:
        return GAME_STORE.get_game_state(link_id)
    except GameStoreError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc


@router.get("/leaderboard", response_model=List[LeaderboardEntry])
def leaderboard():
    return GAME_STORE.get_leaderboard()


@router.post("/break-egg", response_model=BreakEggResult, response_model_exclude_none=True)
def break_egg(payload: BreakEggPayload):
    """
    Break one egg.
    - 400 `Invalid egg ID` when eggId is outside the grid.
    - 400 when the egg is already broken or the link already used.
    - 404 when the link does not exist.
    """
    if not 1 <= payload.egg_id <= GAME_STORE.total_eggs:
        raise HTTPException(status_code=400, detail="Invalid egg ID")
    try:
        return GAME_STORE.break_egg(payload.egg_id, payload.link_id)
    except GameStoreError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc


@router.post("/claim-rewards", response_model=ClaimRewardsResult)
def claim_rewards():
    try:
        return GAME_STORE.claim_rewards()
    except GameStoreError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc


@router.post("/reset-game")
def reset_game():
    """Clear broken eggs and the total; admin-configured rewards/odds are kept."""
    GAME_STORE.reset_game()
    return {"success": True}
