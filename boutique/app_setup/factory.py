"""
Factory d'application pour les entrypoints (boutique.app, boutique.asgi).
"""
import logging
import os

from fastapi import FastAPI

from boutique import config
from .exceptions import register_exception_handlers
from .lifespan import lifespan
from .middlewares import (
    register_basic_middlewares,
    register_csrf_middleware,
    register_no_cache_middleware,
    register_security_middleware,
)
from .routers import register_routers

def configure_logging() -> None:
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "info").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

def create_app() -> FastAPI:
    """
    Construit l'app FastAPI avec le lifespan et enregistre:
      - middlewares de base, CSRF, sécurité, no-cache
      - gestionnaires d'exceptions
      - tous les routers (panier, commandes, paiements, admin, health)
    """
    configure_logging()
    app = FastAPI(title=config.SITE_NAME, lifespan=lifespan)
    register_basic_middlewares(app)
    register_csrf_middleware(app)
    register_security_middleware(app)
    register_no_cache_middleware(app)
    register_exception_handlers(app)
    register_routers(app)
    return app
