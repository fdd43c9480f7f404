"""
Dépendance d'authentification admin
===================================

Objectif
--------
`admin_required` protège les routes `/api/admin/*` par un jeton Bearer statique.

Comportement & codes retour
---------------------------
- `settings.ADMIN_TOKEN` vide : panneau admin ouvert (dev local).
- `settings.ADMIN_TOKEN` renseigné : `Authorization: Bearer <ADMIN_TOKEN>` exigé.
  - 401 si aucun Bearer n'est fourni,
  - 403 si le Bearer ne correspond pas.

Notes
-----
- On garde `HTTPBearer(auto_error=False)` pour renvoyer nos propres 401/403.
- Les préflights CORS (OPTIONS) sont traités par le middleware avant le routage :
  la garde ne les voit jamais.
"""

from __future__ import annotations

import logging
import secrets
from typing import Optional

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.config.settings import settings

logger = logging.getLogger(__name__)

bearer = HTTPBearer(auto_error=False)


def admin_required(credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer)) -> bool:
    expected = settings.ADMIN_TOKEN
    if not expected:
        return True

    if credentials and (credentials.scheme or "").lower() == "bearer":
        if secrets.compare_digest(credentials.credentials, expected):
            return True
        logger.warning("Admin request with an invalid token")
        raise HTTPException(status_code=403, detail="Invalid token")

    raise HTTPException(status_code=401, detail="Admin authentication required")
