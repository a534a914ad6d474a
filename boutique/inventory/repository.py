"""
Accès aux compteurs de stock (table 'products').
"""
from typing import Any, Dict, Iterable, List, Optional
import logging

import boutique.infra.supabase_client as supabase_client
from boutique.errors import PersistenceError
from boutique.utils.serialization import utcnow_iso

logger = logging.getLogger(__name__)

TABLE = "products"

# module boutique.inventory.repository
def _execute(query, action: str, **context):
    try:
        return query.execute()
    except Exception as exc:
        logger.exception("inventory.repository.%s failed %s", action, context)
        raise PersistenceError(f"{action}: {exc}") from exc

def get_product(product_id: str) -> Optional[Dict[str, Any]]:
    """Produit complet (sert d'instantané pour le panier); None si introuvable."""
    if not product_id:
        return None
    query = (
        supabase_client.get_service_supabase()
        .table(TABLE)
        .select("*")
        .eq("id", product_id)
        .limit(1)
    )
    rows = _execute(query, "get_product", product_id=product_id).data or []
    return rows[0] if rows else None

def get_products_by_ids(ids: Iterable[str]) -> Dict[str, Dict[str, Any]]:
    """Produits complets indexés par id; les ids inconnus sont absents du résultat."""
    ids = [str(i) for i in ids if i]
    if not ids:
        return {}
    query = (
        supabase_client.get_service_supabase()
        .table(TABLE)
        .select("*")
        .in_("id", ids)
    )
    rows: List[Dict[str, Any]] = _execute(query, "get_products_by_ids", ids=ids).data or []
    return {str(r.get("id")): r for r in rows}

def fetch_stock_by_ids(ids: Iterable[str]) -> Dict[str, Dict[str, Any]]:
    """Retourne {id: {id, name, stock}} pour les produits demandés."""
    ids = [str(i) for i in ids if i]
    if not ids:
        return {}
    query = (
        supabase_client.get_service_supabase()
        .table(TABLE)
        .select("id, name, stock")
        .in_("id", ids)
    )
    rows: List[Dict[str, Any]] = _execute(query, "fetch_stock_by_ids", ids=ids).data or []
    return {str(r.get("id")): r for r in rows}

def compare_and_set_stock(product_id: str, expected_stock: int, new_stock: int) -> bool:
    """
    Écrit new_stock seulement si le stock vaut encore expected_stock.
    in_stock suit le compteur (False à zéro). Retourne False si la valeur a changé entre-temps.
    """
    data = {"stock": new_stock, "in_stock": new_stock > 0, "updated_at": utcnow_iso()}
    query = (
        supabase_client.get_service_supabase()
        .table(TABLE)
        .update(data)
        .eq("id", product_id)
        .eq("stock", expected_stock)
    )
    rows = _execute(query, "compare_and_set_stock", product_id=product_id, expected=expected_stock).data or []
    return bool(rows)
