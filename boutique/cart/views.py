# module boutique.cart.views
"""API du panier (références stockées dans la session cookie, instantanés relus du catalogue)."""
from typing import Any, Dict

from fastapi import APIRouter, Request
from starlette.concurrency import run_in_threadpool

from boutique.cart import pricing
from boutique.cart import state as cart_state
from boutique.cart.storage import load_cart, save_cart
from boutique.errors import ValidationError
from boutique.inventory import service as inventory_service
from boutique.site_config import repository as site_config
from boutique.utils.validators import read_json_body, require_str

router = APIRouter(prefix="/api/v1/cart", tags=["Cart API"])

def _quantity(body: Dict[str, Any], default=None) -> int:
    value = body.get("quantity", default)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError("quantity doit être un entier")
    return value

async def _cart_response(state: cart_state.CartState) -> Dict[str, Any]:
    policy = await run_in_threadpool(site_config.get_shipping_policy)
    totals = pricing.price_cart(state.lines, policy)
    return {
        "cart": state.to_api(),
        "totalItems": cart_state.total_items(state),
        "summary": totals._asdict(),
    }

@router.get("")
async def get_cart(request: Request):
    return await _cart_response(await run_in_threadpool(load_cart, request))

@router.post("/items")
async def add_cart_item(request: Request):
    """Entrée: {"productId": "...", "quantity": 1}. Quantité bornée au stock connu."""
    body = await read_json_body(request)
    product_id = require_str(body, "productId")
    quantity = _quantity(body, default=1)
    if quantity < 1:
        raise ValidationError("quantity doit être >= 1")
    product = await run_in_threadpool(inventory_service.get_product_snapshot, product_id)
    state = cart_state.add_item(await run_in_threadpool(load_cart, request), product, quantity)
    save_cart(request, state)
    return await _cart_response(state)

@router.patch("/items/{product_id}")
async def update_cart_item(product_id: str, request: Request):
    """Entrée: {"quantity": n}; n <= 0 retire la ligne."""
    body = await read_json_body(request)
    state = cart_state.update_quantity(await run_in_threadpool(load_cart, request), product_id, _quantity(body))
    save_cart(request, state)
    return await _cart_response(state)

@router.delete("/items/{product_id}")
async def remove_cart_item(product_id: str, request: Request):
    state = cart_state.remove_item(await run_in_threadpool(load_cart, request), product_id)
    save_cart(request, state)
    return await _cart_response(state)

@router.delete("")
async def clear_cart(request: Request):
    state = cart_state.clear(await run_in_threadpool(load_cart, request))
    save_cart(request, state)
    return await _cart_response(state)
