"""
Accès aux données pour la feature 'orders' (table 'orders', client service-role).

- Une opération = une seule écriture de document (jamais d'écriture partielle).
- Toute erreur du store est journalisée puis relevée en PersistenceError.
- Lecture introuvable = None (issue normale, pas une erreur), y compris pour
  un identifiant que la base refuse comme mal formé.
"""
from typing import Any, Dict, List, Optional
import logging

from postgrest.exceptions import APIError

import boutique.infra.supabase_client as supabase_client
from boutique.errors import PersistenceError
from boutique.orders.models import CreateOrderInput, Order, GUEST_USER_ID
from boutique.utils.serialization import strip_empty, utcnow_iso

logger = logging.getLogger(__name__)

TABLE = "orders"
# invalid_text_representation: id mal formé pour une colonne uuid
INVALID_ID_CODE = "22P02"

# module boutique.orders.repository
def _execute(query, action: str, **context):
    """Exécute la requête; un id mal formé donne None (aucune ligne ne peut correspondre)."""
    try:
        return query.execute()
    except APIError as exc:
        if exc.code == INVALID_ID_CODE:
            logger.info("orders.repository.%s identifiant mal formé %s", action, context)
            return None
        logger.exception("orders.repository.%s failed %s", action, context)
        raise PersistenceError(f"{action}: {exc}") from exc
    except Exception as exc:
        logger.exception("orders.repository.%s failed %s", action, context)
        raise PersistenceError(f"{action}: {exc}") from exc

def _rows(res) -> List[Dict[str, Any]]:
    rows = getattr(res, "data", None) or []
    return rows if isinstance(rows, list) else [rows]

def row_to_order(row: Dict[str, Any]) -> Order:
    return Order.model_validate(row)

def create_order(data: CreateOrderInput, user_id: Optional[str] = None) -> str:
    """
    Insère une commande 'pending' et retourne l'id attribué par la base.
    - status/payment_status/payment_method sont forcés à "pending".
    - created_at = updated_at = maintenant (jamais fournis par le client).
    """
    now = utcnow_iso()
    doc = strip_empty({
        "user_id": user_id or GUEST_USER_ID,
        "customer_name": data.customer_name,
        "customer_given_name": data.customer_given_name,
        "customer_family_name": data.customer_family_name,
        "customer_email": str(data.customer_email),
        "customer_phone": data.customer_phone,
        "items": [item.model_dump(mode="json") for item in data.items],
        "total": data.total,
        "shipping": data.shipping,
        "tax": data.tax,
        "shipping_option_name": data.shipping_option_name,
        "status": "pending",
        "payment_method": "pending",
        "payment_status": "pending",
        "shipping_address": data.shipping_address.model_dump(mode="json"),
        "created_at": now,
        "updated_at": now,
    })
    query = supabase_client.get_service_supabase().table(TABLE).insert(doc)
    rows = _rows(_execute(query, "create_order", user_id=user_id))
    order_id = rows[0].get("id") if rows else None
    if not order_id:
        raise PersistenceError("create_order: la base n'a pas renvoyé d'identifiant")
    return str(order_id)

def get_order_by_id(order_id: str) -> Optional[Order]:
    if not order_id:
        return None
    query = (
        supabase_client.get_service_supabase()
        .table(TABLE)
        .select("*")
        .eq("id", order_id)
        .limit(1)
    )
    rows = _rows(_execute(query, "get_order_by_id", order_id=order_id))
    return row_to_order(rows[0]) if rows else None

def get_orders(status: Optional[str] = None) -> List[Order]:
    """Toutes les commandes, plus récentes d'abord; filtre de statut appliqué en mémoire."""
    query = (
        supabase_client.get_service_supabase()
        .table(TABLE)
        .select("*")
        .order("created_at", desc=True)
    )
    orders = [row_to_order(r) for r in _rows(_execute(query, "get_orders"))]
    if status is not None:
        orders = [o for o in orders if o.status == status]
    return orders

def get_orders_by_user_id(user_id: str) -> List[Order]:
    if not user_id:
        return []
    query = (
        supabase_client.get_service_supabase()
        .table(TABLE)
        .select("*")
        .eq("user_id", user_id)
        .order("created_at", desc=True)
    )
    return [row_to_order(r) for r in _rows(_execute(query, "get_orders_by_user_id", user_id=user_id))]

def update_order_status(order_id: str, status: str, tracking_number: Optional[str] = None) -> bool:
    """
    Écrit status (+ updated_at) et gère le numéro de suivi:
    - None: non fourni, valeur existante conservée
    - "" (ou espaces): effacé explicitement
    - sinon: stocké (trimé)
    Retourne False si aucune commande ne correspond à l'id.
    """
    data: Dict[str, Any] = {"status": status, "updated_at": utcnow_iso()}
    if tracking_number is not None:
        data["tracking_number"] = tracking_number.strip() or None
    query = supabase_client.get_service_supabase().table(TABLE).update(data).eq("id", order_id)
    return bool(_rows(_execute(query, "update_order_status", order_id=order_id, status=status)))

def compare_and_set_payment(order_id: str, expected_payment_status: str, changes: Dict[str, Any]) -> Optional[Order]:
    """
    Écrit les changements de paiement seulement si payment_status vaut encore
    expected_payment_status (compare-and-set). Retourne la commande écrite, ou
    None si une autre requête est passée avant.
    """
    data = dict(changes, updated_at=utcnow_iso())
    query = (
        supabase_client.get_service_supabase()
        .table(TABLE)
        .update(data)
        .eq("id", order_id)
        .eq("payment_status", expected_payment_status)
    )
    rows = _rows(_execute(query, "compare_and_set_payment", order_id=order_id, expected=expected_payment_status))
    return row_to_order(rows[0]) if rows else None
