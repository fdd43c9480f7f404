"""
Configuration de l'application (Settings)
=========================================

Rôle
----
- Centraliser les paramètres du service (nom, host/port, jeton admin,
  constantes de jeu, chemins de persistance).
- Les valeurs par défaut conviennent pour un environnement de dev local.
- Chaque valeur peut être surchargée via l'environnement ou un fichier `.env`.

Intégrations
------------
- `pydantic-settings` charge automatiquement les variables d'env et `.env`.
- Les services/routeurs importent `from app.config.settings import settings`.

Remarques
---------
- Laisser `ADMIN_TOKEN` vide en dev garde le panneau admin ouvert ; en prod,
  le renseigner pour exiger `Authorization: Bearer <ADMIN_TOKEN>`.
- `RNG_SEED` rend les tirages des œufs reproductibles (tests, démos).
- `DATA_DIR` ne sert que si `PERSIST_STATE` est vrai.

Exemple de `.env`
-----------------
APP_NAME="Golden Egg Backend (Staging)"
PORT=8080
ADMIN_TOKEN="mettre-une-valeur-secrète-en-prod"
DEFAULT_DOMAIN="example.com"
PERSIST_STATE=true
DATA_DIR="/var/opt/golden-egg/data"
"""
from typing import List, Optional
import os

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Nom du service (apparaît sur / et /api/health)
    APP_NAME: str = "Golden Egg Backend"
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    LOG_LEVEL: str = "INFO"

    # Frontends autorisés par le middleware CORS
    ALLOWED_ORIGINS: List[str] = ["*"]

    # Jeton Bearer des routes admin (None = panneau admin ouvert)
    ADMIN_TOKEN: Optional[str] = None

    # Constantes de jeu
    TOTAL_EGGS: int = 9
    MIN_REWARD: int = 50
    MAX_REWARD: int = 500
    DEFAULT_WINNING_RATE: float = 100
    GAME_DURATION_HOURS: int = 24
    RNG_SEED: Optional[int] = None

    # Liens personnalisés
    DEFAULT_DOMAIN: str = "dammedaga.fun"
    DEFAULT_PROTOCOL: str = "https"

    # Snapshot JSON optionnel du store
    PERSIST_STATE: bool = False
    DATA_DIR: str = os.path.join(os.path.dirname(os.path.dirname(__file__)), "data")

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


settings = Settings()
