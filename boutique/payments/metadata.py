"""
Métadonnées Stripe: l'orderId est la seule clé de corrélation entre une session
de paiement et une commande.
"""
from typing import Any, Dict, Optional

METADATA_ORDER_ID = "orderId"

# module boutique.payments.metadata
def make_metadata(order_id: str) -> Dict[str, str]:
    return {METADATA_ORDER_ID: order_id}

def session_from_event(event: Dict[str, Any]) -> Dict[str, Any]:
    """Retourne event.data.object (la session Checkout), {} si absent."""
    data = (event or {}).get("data") or {}
    obj = data.get("object") if isinstance(data, dict) else None
    return obj if isinstance(obj, dict) else {}

def extract_order_id(session: Dict[str, Any]) -> Optional[str]:
    """
    Lit metadata.orderId d'une session Checkout.
    - Tolérant: None si la clé est absente, vide ou d'un type inattendu.
    """
    meta = (session or {}).get("metadata") or {}
    if not isinstance(meta, dict):
        return None
    order_id = meta.get(METADATA_ORDER_ID)
    if not isinstance(order_id, str) or not order_id.strip():
        return None
    return order_id.strip()

def payment_method_from_session(session: Dict[str, Any]) -> str:
    """Premier moyen de paiement déclaré par la session, "card" par défaut."""
    types = (session or {}).get("payment_method_types") or []
    if isinstance(types, list) and types and isinstance(types[0], str):
        return types[0]
    return "card"
