"""
Ajustement d'inventaire.

decrement_stock n'est appelé que depuis la réconciliation du webhook de paiement,
jamais à la création de commande (une commande abandonnée ne consomme pas de stock).
"""
from typing import Any, Dict, Iterable, List
import logging

from boutique import config
from boutique.cart.models import ProductSnapshot
from boutique.errors import NotFoundError, PersistenceError, ValidationError
from boutique.inventory import repository

logger = logging.getLogger(__name__)

# module boutique.inventory.service
def decrement_stock(product_id: str, quantity: int) -> int:
    """
    Retire `quantity` du stock du produit et retourne le nouveau stock.
    - Lecture puis compare-and-set, rejouée jusqu'à STOCK_DECREMENT_MAX_ATTEMPTS fois
      si une écriture concurrente s'intercale.
    - Le compteur est borné à 0; une survente est journalisée en warning.
    - NotFoundError si le produit n'existe pas, PersistenceError si le store échoue
      ou si les tentatives sont épuisées.
    """
    if quantity <= 0:
        raise ValidationError(f"Quantité invalide: {quantity}")

    attempts = max(1, int(config.STOCK_DECREMENT_MAX_ATTEMPTS))
    for attempt in range(1, attempts + 1):
        product = repository.get_product(product_id)
        if product is None:
            raise NotFoundError(f"Produit introuvable: {product_id}")
        current = int(product.get("stock") or 0)
        new_stock = max(current - quantity, 0)
        if repository.compare_and_set_stock(product_id, current, new_stock):
            if current < quantity:
                logger.warning(
                    "inventory.decrement_stock survente product_id=%s stock=%s demandé=%s",
                    product_id, current, quantity,
                )
            logger.info("inventory.decrement_stock product_id=%s %s -> %s", product_id, current, new_stock)
            return new_stock
        logger.info("inventory.decrement_stock conflit product_id=%s tentative=%s", product_id, attempt)

    raise PersistenceError(f"decrement_stock: conflits répétés product_id={product_id}")

def validate_order_stock(items: Iterable[Any]) -> List[Dict[str, Any]]:
    """
    Pré-contrôle du checkout: retourne les lignes dont la quantité dépasse le stock actuel.
    - items: OrderItem (ou objets exposant product_id / quantity / product.name).
    - Chaque manque: {"productId", "name", "requested", "available"}.
    - Un produit absent de la table compte comme stock 0.
    """
    items = list(items)
    requested: Dict[str, int] = {}
    names: Dict[str, str] = {}
    for item in items:
        requested[item.product_id] = requested.get(item.product_id, 0) + int(item.quantity)
        names.setdefault(item.product_id, getattr(item.product, "name", "") or item.product_id)

    stock_by_id = repository.fetch_stock_by_ids(requested.keys())
    shortages: List[Dict[str, Any]] = []
    for product_id, qty in requested.items():
        row = stock_by_id.get(product_id) or {}
        available = int(row.get("stock") or 0)
        if qty > available:
            shortages.append({
                "productId": product_id,
                "name": row.get("name") or names[product_id],
                "requested": qty,
                "available": available,
            })
    return shortages

def get_product_snapshot(product_id: str) -> ProductSnapshot:
    """Instantané du produit pour le panier (prix et stock actuels)."""
    row = repository.get_product(product_id)
    if row is None:
        raise NotFoundError(f"Produit introuvable: {product_id}")
    return ProductSnapshot.model_validate(row)

def get_product_snapshots(product_ids: Iterable[str]) -> Dict[str, ProductSnapshot]:
    """Instantanés de plusieurs produits en une lecture; les produits supprimés sont absents."""
    rows = repository.get_products_by_ids(product_ids)
    return {product_id: ProductSnapshot.model_validate(row) for product_id, row in rows.items()}
