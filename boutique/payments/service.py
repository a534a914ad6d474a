"""
Cas d'usage 'payments': création de la session Checkout pour une commande existante.
"""
from typing import Any, Dict, List, Optional
import logging

import stripe

from boutique import config
from boutique.errors import InvalidOrderState, PaymentGatewayError
from boutique.orders import service as orders_service
from boutique.orders.models import Order
from boutique.payments import stripe_client
from boutique.payments.metadata import make_metadata

logger = logging.getLogger(__name__)

def resolve_origin(return_base_url: Optional[str] = None) -> str:
    """Base des URLs de retour: celle fournie par l'appelant (http/https) ou SITE_URL."""
    base = (return_base_url or "").strip()
    if base.startswith(("http://", "https://")):
        return base.rstrip("/")
    return config.SITE_URL.rstrip("/")

def _first_image_url(order: Order) -> Optional[str]:
    if not order.items:
        return None
    images = (order.items[0].product.model_extra or {}).get("images") or []
    first = images[0] if isinstance(images, list) and images else None
    if isinstance(first, dict):
        return first.get("url") or None
    if isinstance(first, str):
        return first or None
    return None

def build_line_items(order: Order) -> List[Dict[str, Any]]:
    """
    Une seule ligne Stripe dont le montant est le total de la commande (port inclus).
    Le détail des articles reste dans la commande; Stripe ne voit qu'un montant.
    """
    product_data: Dict[str, Any] = {
        "name": f"Commande #{order.id[:8]}",
        "description": f"{len(order.items)} article(s) - Livraison incluse",
    }
    image = _first_image_url(order)
    if image:
        product_data["images"] = [image]
    return [{
        "price_data": {
            "currency": config.STRIPE_CURRENCY,
            "unit_amount": order.total,
            "product_data": product_data,
        },
        "quantity": 1,
    }]

def create_checkout_session(order_id: str, return_base_url: Optional[str] = None) -> str:
    """
    Ouvre une session de paiement hébergée pour la commande et retourne son URL.
    - NotFoundError si la commande n'existe pas.
    - InvalidOrderState si total <= 0 ou si le paiement n'est plus "pending".
    - PaymentGatewayError si Stripe échoue (message fournisseur journalisé, pas de relance).
    L'URL de succès porte ?orderId=... pour que la page de confirmation relise la commande.
    """
    order = orders_service.get_order_or_404(order_id)
    if order.total <= 0:
        raise InvalidOrderState("Le total de la commande doit être supérieur à 0")
    if order.payment_status != "pending":
        raise InvalidOrderState(f"Paiement déjà traité ({order.payment_status})")

    origin = resolve_origin(return_base_url)
    success_url = f"{origin}{config.CHECKOUT_SUCCESS_PATH}?orderId={order.id}"
    cancel_url = f"{origin}{config.CHECKOUT_CANCEL_PATH}"

    try:
        session = stripe_client.create_session(
            line_items=build_line_items(order),
            success_url=success_url,
            cancel_url=cancel_url,
            metadata=make_metadata(order.id),
            customer_email=order.customer_email or None,
        )
    except stripe.StripeError as exc:
        logger.error("payments.create_checkout_session stripe error order_id=%s: %s", order.id, exc)
        raise PaymentGatewayError(str(exc)) from exc

    url = session.get("url")
    if not url:
        logger.error("payments.create_checkout_session session sans url order_id=%s session_id=%s", order.id, session.get("id"))
        raise PaymentGatewayError("Session Stripe sans URL")
    logger.info("payments.create_checkout_session order_id=%s session_id=%s", order.id, session.get("id"))
    return url
