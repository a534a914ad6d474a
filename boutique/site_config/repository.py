"""
Configuration du site (ligne 'site-config' de la table 'config').
Seule la politique de livraison est consommée par ce service.
"""
import logging

import boutique.infra.supabase_client as supabase_client
from boutique.cart.models import ShippingPolicy
from boutique.errors import PersistenceError

logger = logging.getLogger(__name__)

TABLE = "config"
DOC_ID = "site-config"

def get_shipping_policy() -> ShippingPolicy:
    """
    Politique de livraison configurée en back-office.
    - Ligne ou clés absentes: 0 partout (pas de seuil de gratuité, port à 0 tant que non configuré).
    """
    try:
        res = (
            supabase_client.get_service_supabase()
            .table(TABLE)
            .select("shipping")
            .eq("id", DOC_ID)
            .limit(1)
            .execute()
        )
    except Exception as exc:
        logger.exception("site_config.repository.get_shipping_policy failed")
        raise PersistenceError(f"get_shipping_policy: {exc}") from exc
    rows = res.data or []
    shipping = (rows[0].get("shipping") if rows else None) or {}
    return ShippingPolicy(
        free_shipping_threshold=int(shipping.get("freeShippingThreshold") or 0),
        standard_shipping_cost=int(shipping.get("standardShippingCost") or 0),
        express_shipping_cost=int(shipping.get("expressShippingCost") or 0),
    )
