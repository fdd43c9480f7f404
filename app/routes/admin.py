"""
Module routes/admin.py
Role:
- Admin panel endpoints: egg rewards/odds, manual broken flag, custom links.
- Guarded by `admin_required` (bearer token, only when ADMIN_TOKEN is set).

Integrations:
- GAME_STORE for every read/mutation.
- `/eggs` (POST) and `/update-egg` are the same operation; so are
  `/links` (POST) and `/create-link`. Both spellings are used by the panel.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import Field

from app.deps.auth import admin_required
from app.models.base import CamelModel, Reward
from app.models.egg import Egg
from app.models.link import CustomLink
from app.services.game_store import GAME_STORE, GameStoreError

router = APIRouter(
    prefix="/api/admin",
    tags=["admin"],
    dependencies=[Depends(admin_required)],
)


class UpdateEggPayload(CamelModel):
    egg_id: int
    reward: Reward
    winning_rate: float = Field(..., ge=0, le=100, description="Percent chance to win (0-100)")


class SetEggBrokenPayload(CamelModel):
    egg_id: int
    broken: bool


class CreateLinkPayload(CamelModel):
    subdomain: str = Field(..., min_length=1)
    egg_id: int
    domain: Optional[str] = None
    path: Optional[str] = None
    protocol: Optional[str] = Field(None, description="http or https (default from settings)")


def _store_error(exc: GameStoreError) -> HTTPException:
    return HTTPException(status_code=exc.status_code, detail=str(exc))


@router.get("/eggs", response_model=List[Egg])
def list_eggs():
    return GAME_STORE.get_all_eggs()


@router.post("/eggs", response_model=Egg)
@router.post("/update-egg", response_model=Egg)
def update_egg(payload: UpdateEggPayload):
    """Set reward (amount or text) and winning rate of one egg."""
    try:
        return GAME_STORE.update_egg(payload.egg_id, payload.reward, payload.winning_rate)
    except GameStoreError as exc:
        raise _store_error(exc) from exc


@router.post("/set-egg-broken", response_model=Egg)
def set_egg_broken(payload: SetEggBrokenPayload):
    """Force an egg broken/unbroken, regardless of the draw."""
    try:
        return GAME_STORE.set_egg_broken(payload.egg_id, payload.broken)
    except GameStoreError as exc:
        raise _store_error(exc) from exc


@router.get("/links", response_model=List[CustomLink])
def list_links():
    return GAME_STORE.get_custom_links()


@router.post("/links", response_model=CustomLink, status_code=201)
@router.post("/create-link", response_model=CustomLink, status_code=201)
def create_link(payload: CreateLinkPayload):
    """Create a single-use link; its reward is drawn now, independently of the eggs."""
    try:
        return GAME_STORE.create_custom_link(
            subdomain=payload.subdomain,
            egg_id=payload.egg_id,
            domain=payload.domain,
            path=payload.path,
            protocol=payload.protocol,
        )
    except GameStoreError as exc:
        raise _store_error(exc) from exc


@router.get("/links/{link_id}", response_model=CustomLink)
def get_link(link_id: int):
    try:
        return GAME_STORE.get_custom_link(link_id)
    except GameStoreError as exc:
        raise _store_error(exc) from exc


@router.delete("/links/{link_id}")
def delete_link(link_id: int):
    try:
        GAME_STORE.delete_custom_link(link_id)
    except GameStoreError as exc:
        raise _store_error(exc) from exc
    return {"success": True}
