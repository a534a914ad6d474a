"""
Registre central des routers (API v1, admin, health).
"""
from fastapi import FastAPI

from boutique.admin.views import router as admin_router
from boutique.cart.views import router as cart_router
from boutique.health.router import router as health_router
from boutique.orders.views import router as orders_router
from boutique.payments.views import router as payments_router

def register_routers(app: FastAPI) -> None:
    # API v1
    app.include_router(cart_router)
    app.include_router(orders_router)
    app.include_router(payments_router)
    # Admin
    app.include_router(admin_router)
    # Health & monitoring
    app.include_router(health_router)
