"""
ASGI entrypoint: expose `app` pour les process managers (ex: uvicorn boutique.asgi:app).
"""
from boutique.app import app

__all__ = ["app"]
