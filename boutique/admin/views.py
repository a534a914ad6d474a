# module boutique.admin.views
"""Back-office des commandes (liste blanche ADMIN_EMAILS)."""
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Request
from starlette.concurrency import run_in_threadpool

from boutique.errors import ValidationError
from boutique.orders import service as orders_service
from boutique.utils.security import require_admin
from boutique.utils.validators import read_json_body, require_str

router = APIRouter(prefix="/admin/api", tags=["Admin"])

@router.get("/orders")
async def admin_list_orders(status: Optional[str] = None, admin: Dict[str, Any] = Depends(require_admin)):
    orders = await run_in_threadpool(orders_service.get_orders, status)
    return {"orders": [o.to_api() for o in orders]}

@router.get("/orders/{order_id}")
async def admin_get_order(order_id: str, admin: Dict[str, Any] = Depends(require_admin)):
    order = await run_in_threadpool(orders_service.get_order_or_404, order_id)
    return {"order": order.to_api()}

@router.post("/orders/{order_id}/status")
async def admin_update_order_status(order_id: str, request: Request, admin: Dict[str, Any] = Depends(require_admin)):
    """
    Entrée: {"status": "...", "trackingNumber": "..." (optionnel, "" efface)}.
    Sortie: {"orderId", "status"} avec le statut effectivement enregistré.
    """
    body = await read_json_body(request)
    status = require_str(body, "status")
    tracking_number = body.get("trackingNumber")
    if tracking_number is not None and not isinstance(tracking_number, str):
        raise ValidationError("trackingNumber doit être une chaîne")
    effective = await run_in_threadpool(orders_service.update_order_status, order_id, status, tracking_number)
    return {"orderId": order_id, "status": effective}
