"""
Gestionnaires d'exceptions.
- BoutiqueError: {"error": "<message public>"} avec le code HTTP de la classe.
  Le détail interne est journalisé; il n'est renvoyé que pour les erreurs client.
- HTTPException (dépendances d'authentification): JSON FastAPI standard {"detail": ...}.
"""
import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from boutique.errors import BoutiqueError

logger = logging.getLogger(__name__)

def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(BoutiqueError)
    async def boutique_error_handler(request: Request, exc: BoutiqueError):
        if exc.status_code >= 500:
            logger.error("%s %s -> %s %s: %s", request.method, request.url.path, exc.status_code, exc.__class__.__name__, exc)
        else:
            logger.info("%s %s -> %s %s: %s", request.method, request.url.path, exc.status_code, exc.__class__.__name__, exc)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.public_message})

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=getattr(exc, "headers", None))
