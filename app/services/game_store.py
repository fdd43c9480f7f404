"""
Service: game_store.py
Role:
- Hold the whole game in memory: egg configuration, custom links, broken
  eggs, running reward total, round deadline and leaderboard.
- Resolve egg breaks (random draw against the egg's winning rate) and gate
  single-use links.
- Provide a process-wide singleton `GAME_STORE`.

Concurrency:
- FastAPI runs sync handlers in a thread pool; every public method takes
  `_lock`, so "check link unused, then mark it used" is atomic.

Persistence:
- Purely in-memory by default. With `settings.PERSIST_STATE` the store
  writes `DATA_DIR/game_store.json` after every mutation and reloads it at
  start-up.
"""
from __future__ import annotations

import logging
import math
import random
import re
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from threading import RLock
from typing import Any, Dict, List, Optional, Union

from app.config.settings import settings
from app.models.base import Reward
from app.models.egg import Egg, EggView
from app.models.game import BreakEggResult, ClaimRewardsResult, GameStateView, LeaderboardEntry
from app.models.link import CustomLink
from .io_utils import read_json, write_json

logger = logging.getLogger(__name__)

SNAPSHOT_PATH = Path(settings.DATA_DIR) / "game_store.json"
HOUR_MS = 60 * 60 * 1000
MAX_TEXT_REWARD_LENGTH = 200
ALLOWED_PROTOCOLS = ("http", "https")
_SUBDOMAIN_RE = re.compile(r"^[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?$")


class GameStoreError(RuntimeError):
    """Base class of the errors raised by the store; carries the HTTP status."""

    status_code = 400


class EggNotFoundError(GameStoreError):
    status_code = 404


class LinkNotFoundError(GameStoreError):
    status_code = 404


class EggAlreadyBrokenError(GameStoreError):
    pass


class LinkAlreadyUsedError(GameStoreError):
    pass


class InvalidEggConfigError(GameStoreError):
    pass


class InvalidLinkError(GameStoreError):
    pass


class NothingToClaimError(GameStoreError):
    pass


def is_number(value: Any) -> bool:
    """Amounts count towards the total; text prizes and booleans do not."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _now_ms() -> int:
    return int(time.time() * 1000)


def _demo_leaderboard() -> List[LeaderboardEntry]:
    return [
        LeaderboardEntry(id=1, username="1st********", score=188000),
        LeaderboardEntry(id=2, username="2nd********", score=88000),
        LeaderboardEntry(id=3, username="3rd********", score=88000),
    ]


@dataclass
class GameStore:
    total_eggs: int = field(default_factory=lambda: settings.TOTAL_EGGS)
    rng: random.Random = field(default_factory=lambda: random.Random(settings.RNG_SEED))
    snapshot_path: Optional[Path] = None
    _lock: RLock = field(default_factory=RLock, init=False, repr=False)
    eggs: Dict[int, Egg] = field(default_factory=dict, init=False)
    links: Dict[int, CustomLink] = field(default_factory=dict, init=False)
    broken_eggs: List[int] = field(default_factory=list, init=False)
    resolved_rewards: Dict[int, Reward] = field(default_factory=dict, init=False)
    total_reward: Union[int, float] = field(default=0, init=False)
    deadline: int = field(default=0, init=False)
    leaderboard: List[LeaderboardEntry] = field(default_factory=list, init=False)
    next_link_id: int = field(default=1, init=False)

    def __post_init__(self) -> None:
        self.reinitialize()

    # -----------------------------
    # Lifecycle
    # -----------------------------
    def reinitialize(self) -> None:
        """Back to a fresh process: new random rewards, no links, demo leaderboard."""
        with self._lock:
            self.eggs = {
                egg_id: Egg(
                    id=egg_id,
                    reward=self._random_reward(),
                    winning_rate=settings.DEFAULT_WINNING_RATE,
                )
                for egg_id in range(1, self.total_eggs + 1)
            }
            self.links = {}
            self.leaderboard = _demo_leaderboard()
            self.next_link_id = 1
            self._reset_round()

    def reset_game(self) -> None:
        """Clear broken flags and the total; configured rewards and odds stay."""
        with self._lock:
            self._reset_round()
            logger.info("Game reset (%d eggs, rewards preserved)", len(self.eggs))
            self._persist()

    def _reset_round(self) -> None:
        for egg in self.eggs.values():
            egg.broken = False
            egg.manually_broken = False
        self.broken_eggs = []
        self.resolved_rewards = {}
        self.total_reward = 0
        self.deadline = _now_ms() + settings.GAME_DURATION_HOURS * HOUR_MS

    def _random_reward(self) -> int:
        return self.rng.randint(settings.MIN_REWARD, settings.MAX_REWARD)

    # -----------------------------
    # Lookups
    # -----------------------------
    def _get_egg(self, egg_id: int) -> Egg:
        egg = self.eggs.get(egg_id)
        if egg is None:
            raise EggNotFoundError(f"Egg with ID {egg_id} does not exist")
        return egg

    def _get_link(self, link_id: int) -> CustomLink:
        link = self.links.get(link_id)
        if link is None:
            raise LinkNotFoundError(f"Link with ID {link_id} does not exist")
        return link

    def _visible_reward(self, egg: Egg, link_used: bool = False) -> Reward:
        # an egg already resolved by a draw always shows what it paid
        if egg.id in self.resolved_rewards:
            return self.resolved_rewards[egg.id]
        if egg.winning_rate == 0 or link_used:
            return 0
        return egg.reward

    def _egg_view(self, egg: Egg, link_used: bool = False, allowed_egg_id: Optional[int] = None) -> EggView:
        return EggView(
            id=egg.id,
            broken=egg.broken,
            reward=self._visible_reward(egg, link_used),
            winning_rate=egg.winning_rate,
            manually_broken=egg.manually_broken,
            allowed=egg.id == allowed_egg_id,
        )

    # -----------------------------
    # Game
    # -----------------------------
    def get_game_state(self, link_id: Optional[int] = None) -> GameStateView:
        """Player view of the grid; with `link_id`, also the link's gate state."""
        with self._lock:
            link = self._get_link(link_id) if link_id is not None else None
            link_used = bool(link and link.used)
            allowed_egg_id = link.egg_id if link else None
            state = GameStateView(
                deadline=self.deadline,
                broken_eggs=list(self.broken_eggs),
                progress=len(self.broken_eggs) / self.total_eggs * 100 if self.total_eggs else 0.0,
                eggs=[
                    self._egg_view(egg, link_used, allowed_egg_id)
                    for egg in sorted(self.eggs.values(), key=lambda e: e.id)
                ],
            )
            if link is not None:
                state.allowed_egg_id = allowed_egg_id
                state.link_id = link.id
                state.link_used = link.used
            return state

    def break_egg(self, egg_id: int, link_id: Optional[int] = None) -> BreakEggResult:
        """
        Break one egg.
        - The egg must exist and not be broken yet.
        - With `link_id`, the link must exist and be unused; it is consumed
          before the draw, then every egg is revealed in the result.
        - Win iff a uniform draw in [0, 100) is below the winning rate; a loss pays 0.
        """
        with self._lock:
            egg = self._get_egg(egg_id)
            if egg.broken:
                logger.warning("Refused break: egg %d already broken", egg_id)
                raise EggAlreadyBrokenError(f"Egg with ID {egg_id} is already broken")

            link = None
            if link_id is not None:
                link = self._get_link(link_id)
                if link.used:
                    logger.warning("Refused break: link %d already used", link_id)
                    raise LinkAlreadyUsedError(f"Link with ID {link_id} has already been used")
                link.used = True
                logger.info("Link %d consumed on egg %d", link_id, egg_id)

            won = self.rng.random() * 100 < egg.winning_rate
            reward: Reward = egg.reward if won else 0

            egg.broken = True
            egg.manually_broken = False
            self.broken_eggs.append(egg_id)
            self.resolved_rewards[egg_id] = reward
            if is_number(reward):
                self.total_reward += reward

            logger.info("Egg %d broken: won=%s reward=%r total=%s", egg_id, won, reward, self.total_reward)

            result = BreakEggResult(egg_id=egg_id, reward=reward, won=won)
            if link is not None:
                result.eggs = self._reveal_all_eggs()
            self._persist()
            return result

    def _reveal_all_eggs(self) -> List[EggView]:
        """Prize wall shown after a link break; resolved eggs keep their draw."""
        return [self._egg_view(egg) for egg in sorted(self.eggs.values(), key=lambda e: e.id)]

    def claim_rewards(self) -> ClaimRewardsResult:
        """Bank the running total on the leaderboard and start a new round."""
        with self._lock:
            if self.total_reward <= 0:
                raise NothingToClaimError("No rewards to claim")
            total = self.total_reward
            entry = LeaderboardEntry(
                id=max((e.id for e in self.leaderboard), default=0) + 1,
                username=f"{len(self.leaderboard) + 1}th********",
                score=total,
            )
            self.leaderboard.append(entry)
            self.leaderboard.sort(key=lambda e: e.score, reverse=True)
            self._reset_round()
            logger.info("Rewards claimed: %s", total)
            self._persist()
            return ClaimRewardsResult(total_reward=total)

    def get_leaderboard(self) -> List[LeaderboardEntry]:
        with self._lock:
            return sorted((e.model_copy() for e in self.leaderboard), key=lambda e: e.score, reverse=True)

    # -----------------------------
    # Admin: eggs
    # -----------------------------
    def get_all_eggs(self) -> List[Egg]:
        with self._lock:
            return [egg.model_copy() for egg in sorted(self.eggs.values(), key=lambda e: e.id)]

    def update_egg(self, egg_id: int, reward: Any, winning_rate: Any) -> Egg:
        """Set reward (amount or text) and winning rate (0-100) of one egg."""
        with self._lock:
            egg = self._get_egg(egg_id)
            rate = _normalize_winning_rate(winning_rate)
            egg.reward = _normalize_reward(reward)
            egg.winning_rate = rate
            logger.info("Egg %d updated: reward=%r winning_rate=%s", egg_id, egg.reward, rate)
            self._persist()
            return egg.model_copy()

    def set_egg_broken(self, egg_id: int, broken: bool) -> Egg:
        """
        Force the broken flag, bypassing the draw.
        Un-breaking an egg paid by a draw takes its payout back out of the total.
        """
        with self._lock:
            egg = self._get_egg(egg_id)
            egg.broken = bool(broken)
            egg.manually_broken = bool(broken)
            if egg.broken:
                if egg_id not in self.broken_eggs:
                    self.broken_eggs.append(egg_id)
            else:
                if egg_id in self.broken_eggs:
                    self.broken_eggs.remove(egg_id)
                paid = self.resolved_rewards.pop(egg_id, None)
                if is_number(paid):
                    self.total_reward -= paid
            logger.info("Egg %d manually set broken=%s", egg_id, egg.broken)
            self._persist()
            return egg.model_copy()

    # -----------------------------
    # Admin: links
    # -----------------------------
    def create_custom_link(
        self,
        *,
        subdomain: str,
        egg_id: int,
        domain: Optional[str] = None,
        path: Optional[str] = None,
        protocol: Optional[str] = None,
    ) -> CustomLink:
        with self._lock:
            self._get_egg(egg_id)

            sub = (subdomain or "").strip().lower()
            if not _SUBDOMAIN_RE.match(sub):
                raise InvalidLinkError(f"Invalid subdomain: {subdomain!r}")
            proto = (protocol or settings.DEFAULT_PROTOCOL).strip().lower()
            if proto not in ALLOWED_PROTOCOLS:
                raise InvalidLinkError(f"Unsupported protocol: {protocol!r}")
            host = (domain or "").strip().lower() or settings.DEFAULT_DOMAIN
            clean_path = (path or "").strip()
            if clean_path and not clean_path.startswith("/"):
                clean_path = "/" + clean_path

            link = CustomLink(
                id=self.next_link_id,
                domain=host,
                subdomain=sub,
                path=clean_path,
                protocol=proto,
                egg_id=egg_id,
                reward=self._random_reward(),
                created_at=datetime.now(timezone.utc),
            )
            self.links[link.id] = link
            self.next_link_id += 1
            logger.info("Link %d created: %s", link.id, link.full_url)
            self._persist()
            return link.model_copy()

    def get_custom_links(self) -> List[CustomLink]:
        with self._lock:
            return [link.model_copy() for link in sorted(self.links.values(), key=lambda link: link.id)]

    def get_custom_link(self, link_id: int) -> CustomLink:
        with self._lock:
            return self._get_link(link_id).model_copy()

    def delete_custom_link(self, link_id: int) -> None:
        with self._lock:
            self._get_link(link_id)
            del self.links[link_id]
            logger.info("Link %d deleted", link_id)
            self._persist()

    # -----------------------------
    # Snapshot
    # -----------------------------
    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "eggs": [egg.model_dump(mode="json") for egg in self.eggs.values()],
                "links": [link.model_dump(mode="json", exclude={"full_url"}) for link in self.links.values()],
                "broken_eggs": list(self.broken_eggs),
                "resolved_rewards": {str(k): v for k, v in self.resolved_rewards.items()},
                "total_reward": self.total_reward,
                "deadline": self.deadline,
                "leaderboard": [e.model_dump(mode="json") for e in self.leaderboard],
                "next_link_id": self.next_link_id,
            }

    def restore(self, data: Dict[str, Any]) -> None:
        with self._lock:
            self.eggs = {e.id: e for e in (Egg.model_validate(raw) for raw in data.get("eggs", []))}
            self.total_eggs = len(self.eggs)
            self.links = {link.id: link for link in (CustomLink.model_validate(raw) for raw in data.get("links", []))}
            self.broken_eggs = [int(i) for i in data.get("broken_eggs", [])]
            self.resolved_rewards = {int(k): v for k, v in (data.get("resolved_rewards") or {}).items()}
            self.total_reward = data.get("total_reward", 0)
            self.deadline = data.get("deadline") or _now_ms() + settings.GAME_DURATION_HOURS * HOUR_MS
            self.leaderboard = [LeaderboardEntry.model_validate(raw) for raw in data.get("leaderboard", [])]
            self.next_link_id = data.get("next_link_id") or max(self.links, default=0) + 1

    def load(self) -> None:
        """Reload the snapshot file when persistence is on and the file exists."""
        if self.snapshot_path is None:
            return
        data = read_json(self.snapshot_path)
        if data:
            self.restore(data)
            logger.info("Game store restored from %s", self.snapshot_path)

    def _persist(self) -> None:
        if self.snapshot_path is None:
            return
        try:
            write_json(self.snapshot_path, self.snapshot())
        except OSError:
            # in-memory state stays authoritative; the next mutation retries the write
            logger.exception("Could not write snapshot to %s", self.snapshot_path)


def _normalize_winning_rate(value: Any) -> float:
    if not is_number(value) or not 0 <= value <= 100:
        raise InvalidEggConfigError("Winning rate must be a number between 0 and 100")
    return float(value)


def _normalize_reward(value: Any) -> Reward:
    if is_number(value):
        if not math.isfinite(value):
            raise InvalidEggConfigError("Reward must be a finite number")
        if value < 0:
            raise InvalidEggConfigError("Reward must not be negative")
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise InvalidEggConfigError("Reward text must not be empty")
        if len(text) > MAX_TEXT_REWARD_LENGTH:
            raise InvalidEggConfigError(f"Reward text is limited to {MAX_TEXT_REWARD_LENGTH} characters")
        return text
    raise InvalidEggConfigError("Reward must be a number or a text")


# -----------------------------
# Singleton
# -----------------------------
_instance: Optional[GameStore] = None


def get_game_store() -> GameStore:
    """Single `GameStore` for the whole backend (lazy-built, snapshot loaded)."""
    global _instance
    if _instance is None:
        _instance = GameStore(snapshot_path=SNAPSHOT_PATH if settings.PERSIST_STATE else None)
        _instance.load()
    return _instance


GAME_STORE = get_game_store()
