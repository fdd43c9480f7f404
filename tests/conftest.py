import random

import pytest

from app.config.settings import settings
from app.services.game_store import GAME_STORE


@pytest.fixture(autouse=True)
def fresh_store(monkeypatch):
    """Every test starts from a freshly seeded singleton with an open admin panel."""
    monkeypatch.setattr(settings, "ADMIN_TOKEN", None)
    GAME_STORE.rng = random.Random(1234)
    GAME_STORE.reinitialize()
    yield GAME_STORE
    GAME_STORE.reinitialize()
