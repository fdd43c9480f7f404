"""
Models / link.py
Role:
- `CustomLink`: a shareable single-use link created from the admin panel.

Notes:
- `used` goes from False to True once, when an egg is broken through the link.
- `reward` is drawn at creation time and is unrelated to the egg rewards.
- `full_url` carries `?linkId=` so the game page can send it back.
"""
from datetime import datetime

from pydantic import computed_field

from .base import CamelModel, Reward


class CustomLink(CamelModel):
    id: int
    domain: str
    subdomain: str
    path: str = ""
    protocol: str = "https"
    egg_id: int
    reward: Reward
    used: bool = False
    active: bool = True
    created_at: datetime

    @computed_field(alias="fullUrl")
    @property
    def full_url(self) -> str:
        return f"{self.protocol}://{self.subdomain}.{self.domain}{self.path}?linkId={self.id}"
