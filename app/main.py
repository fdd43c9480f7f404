"""
Application FastAPI — Point d'entrée
====================================

Rôle
----
- Instancie l'app FastAPI, configure le CORS pour le front,
- monte les routeurs (jeu, admin, santé),
- rend toutes les erreurs en JSON `{"message": ...}`,
- journalise la configuration et la liste des routes au démarrage.

Notes
-----
- Le middleware CORS est ajouté AVANT les include_router.
- La garde admin est posée sur le routeur admin : les préflights OPTIONS ne sont jamais bloqués.
"""
import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config.settings import settings
from app.routes.admin import router as admin_router
from app.routes.game import router as game_router
from app.routes.health import router as health_router
from app.services.game_store import GAME_STORE

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        "== Game config == eggs=%d rewards=[%d, %d] persist=%s admin_token=%s",
        GAME_STORE.total_eggs,
        settings.MIN_REWARD,
        settings.MAX_REWARD,
        settings.PERSIST_STATE,
        "set" if settings.ADMIN_TOKEN else "unset",
    )
    for route in app.routes:
        methods = getattr(route, "methods", None)
        if methods:
            logger.debug("route %s %s", ",".join(sorted(methods)), route.path)
    try:
        yield
    finally:
        logger.info("Stop server")


app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(game_router)
app.include_router(admin_router)
app.include_router(health_router)


# ===========================
# Rendu des erreurs
# ===========================
@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = f"Invalid request: {field}: {first.get('msg')}" if field else "Invalid request body"
    return JSONResponse(
        status_code=400,
        content={"message": message, "errors": jsonable_encoder(errors)},
    )


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"message": "Internal server error"})


@app.get("/")
async def root():
    """Ping basique : vérifie que l'app tourne."""
    return {"ok": True, "service": settings.APP_NAME}


def run() -> None:
    """Lance uvicorn sur settings.HOST / settings.PORT."""
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_level=settings.LOG_LEVEL.lower())
