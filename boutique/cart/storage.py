"""
Adaptateur de persistance du panier: session cookie (SessionMiddleware).

La session ne garde que des références {productId, quantity}: le cookie signé
reste petit quel que soit le produit. Les instantanés produit (prix, nom, stock,
images) sont relus du catalogue à chaque chargement.

Seul point à effet de bord du panier; l'état lui-même (boutique.cart.state)
reste une valeur pure.
"""
from typing import Any, Dict, List
import logging

from fastapi import Request
from pydantic import Field
from pydantic import ValidationError as PydanticValidationError

from boutique.cart import state as cart_state
from boutique.cart.models import CartLine
from boutique.cart.state import CartState
from boutique.inventory import service as inventory_service
from boutique.utils.serialization import CamelModel

logger = logging.getLogger(__name__)

SESSION_KEY = "cart"


class CartRef(CamelModel):
    product_id: str
    quantity: int = Field(ge=1)


def _read_refs(raw: Any) -> List[CartRef]:
    if not isinstance(raw, list):
        raise TypeError(f"liste attendue, reçu {type(raw).__name__}")
    return [CartRef.model_validate(item) for item in raw]

def load_cart(request: Request) -> CartState:
    """
    Relit le panier depuis la session (appel bloquant: lecture catalogue).
    - contenu illisible: panier vide
    - produit retiré du catalogue: ligne ignorée
    - quantité bornée au stock actuel (ligne retirée à 0)
    """
    raw = request.session.get(SESSION_KEY)
    if not raw:
        return CartState()
    try:
        refs = _read_refs(raw)
    except (PydanticValidationError, TypeError):
        logger.warning("cart.storage.load_cart: contenu de session invalide, panier réinitialisé")
        return CartState()

    snapshots = inventory_service.get_product_snapshots(ref.product_id for ref in refs)
    state = CartState(lines=[
        CartLine(product_id=ref.product_id, product=snapshots[ref.product_id], quantity=ref.quantity)
        for ref in refs
        if ref.product_id in snapshots
    ])
    if len(state.lines) < len(refs):
        logger.info("cart.storage.load_cart: %s produit(s) retiré(s) du catalogue", len(refs) - len(state.lines))
    for line in list(state.lines):
        state = cart_state.update_quantity(state, line.product_id, line.quantity)
    return state

def save_cart(request: Request, state: CartState) -> None:
    refs: List[Dict[str, Any]] = [
        CartRef(product_id=line.product_id, quantity=line.quantity).to_api() for line in state.lines
    ]
    request.session[SESSION_KEY] = refs
