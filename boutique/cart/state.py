"""
État du panier explicite et sérialisable.

Chaque opération retourne un nouvel état; le stockage (session cookie) est un
adaptateur séparé (boutique.cart.storage).
"""
from typing import Any, Dict, List

from pydantic import Field

from boutique.cart.models import CartLine, ProductSnapshot
from boutique.utils.serialization import CamelModel


class CartState(CamelModel):
    lines: List[CartLine] = Field(default_factory=list)

    def find(self, product_id: str):
        return next((line for line in self.lines if line.product_id == product_id), None)


def _clamp_to_stock(product: ProductSnapshot, quantity: int) -> int:
    # Garde-fou côté panier seulement: le stock n'est pas revérifié au webhook
    if product.stock is not None:
        return min(quantity, max(product.stock, 0))
    return quantity


def add_item(state: CartState, product: ProductSnapshot, quantity: int = 1) -> CartState:
    """Ajoute un produit; si la ligne existe déjà, les quantités s'additionnent."""
    existing = state.find(product.id)
    if existing is None:
        # Ligne provisoire, la quantité réelle est posée (et bornée) par update_quantity
        state = CartState(lines=[*state.lines, CartLine(product_id=product.id, product=product, quantity=1)])
        wanted = quantity
    else:
        wanted = existing.quantity + quantity
    return update_quantity(state, product.id, wanted, product=product)


def remove_item(state: CartState, product_id: str) -> CartState:
    return CartState(lines=[line for line in state.lines if line.product_id != product_id])


def update_quantity(state: CartState, product_id: str, quantity: int, product: ProductSnapshot = None) -> CartState:
    """
    Met à jour la quantité d'une ligne.
    - quantité <= 0 (ou bornée à 0 par le stock): la ligne est retirée.
    - la quantité ne dépasse jamais le stock connu du produit.
    - product: instantané plus récent à stocker dans la ligne (optionnel).
    """
    existing = state.find(product_id)
    if existing is None:
        return state
    snapshot = product or existing.product
    quantity = _clamp_to_stock(snapshot, quantity)
    if quantity <= 0:
        return remove_item(state, product_id)
    lines = [
        CartLine(product_id=product_id, product=snapshot, quantity=quantity) if line.product_id == product_id else line
        for line in state.lines
    ]
    return CartState(lines=lines)


def clear(state: CartState) -> CartState:
    return CartState()


def total_items(state: CartState) -> int:
    return sum(line.quantity for line in state.lines)


def to_order_items(state: CartState) -> List[Dict[str, Any]]:
    """Convertit le panier en lignes de commande (prix figé = prix de l'instantané)."""
    return [
        {
            "productId": line.product_id,
            "product": line.product.to_api(),
            "quantity": line.quantity,
            "price": line.product.price,
        }
        for line in state.lines
    ]
