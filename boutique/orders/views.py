# module boutique.orders.views
"""Endpoints Commandes côté client.
- POST /api/v1/orders: soumission du checkout, crée une commande « pending » (invité ou connecté).
- GET /api/v1/orders/mine[/{id}]: historique de l'utilisateur connecté (propriété vérifiée).
- GET /api/v1/orders/{id}/confirmation: résumé public relu par la page de confirmation (?orderId=).
"""
from typing import Any, Dict, Optional
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from boutique.orders import service as orders_service
from boutique.utils.rate_limit import optional_rate_limit
from boutique.utils.security import get_optional_user, require_user
from boutique.utils.validators import read_json_body

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/orders", tags=["Orders API"])

@router.post("", dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
async def submit_checkout(request: Request, user: Optional[Dict[str, Any]] = Depends(get_optional_user)):
    """Entrée: saisie du formulaire (camelCase). Sortie 201: {"orderId": "..."}."""
    body = await read_json_body(request)
    user_id = (user or {}).get("id")
    order_id = await run_in_threadpool(orders_service.submit_checkout, body, user_id)
    return JSONResponse({"orderId": order_id}, status_code=201)

@router.get("/mine")
async def my_orders(user: Dict[str, Any] = Depends(require_user)):
    orders = await run_in_threadpool(orders_service.get_orders_by_user_id, user["id"])
    return {"orders": [o.to_api() for o in orders]}

@router.get("/mine/{order_id}")
async def my_order(order_id: str, user: Dict[str, Any] = Depends(require_user)):
    order = await run_in_threadpool(orders_service.get_order_for_user, order_id, user["id"])
    return {"order": order.to_api()}

@router.get("/{order_id}/confirmation")
async def order_confirmation(order_id: str):
    order = await run_in_threadpool(orders_service.get_order_or_404, order_id)
    return {"order": order.confirmation_view()}
