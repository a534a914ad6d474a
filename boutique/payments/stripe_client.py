"""
Adaptateur Stripe: centralise les appels et la configuration Stripe.
"""
import json
import logging
from typing import Any, Dict, List, Optional

import stripe

from boutique import config
from boutique.errors import AuthenticationError, ServiceUnavailableError, ValidationError

logger = logging.getLogger(__name__)

# module boutique.payments.stripe_client
def require_stripe():
    """
    Prépare et retourne le module stripe prêt à l'emploi.
    - Configure stripe.api_key via STRIPE_SECRET_KEY.
    - Sans clé: ServiceUnavailableError (503), aucun appel n'est tenté.
    """
    if not config.STRIPE_SECRET_KEY:
        raise ServiceUnavailableError("STRIPE_SECRET_KEY non configurée")
    stripe.api_key = config.STRIPE_SECRET_KEY
    return stripe

def create_session(
    *,
    line_items: List[Dict[str, Any]],
    success_url: str,
    cancel_url: str,
    metadata: Dict[str, str],
    customer_email: Optional[str] = None,
    mode: str = "payment",
) -> Dict[str, Any]:
    """
    Crée une session Stripe Checkout.
    - line_items: lignes Stripe (price_data/quantity)
    - metadata: {"orderId": "..."}; recopiée telle quelle par Stripe dans l'événement
    Retour: {"id": "cs_test_...", "url": "https://checkout.stripe.com/..."}
    Les erreurs du SDK (stripe.StripeError) remontent à l'appelant.
    """
    require_stripe()
    params: Dict[str, Any] = {
        "mode": mode,
        "line_items": line_items,
        "success_url": success_url,
        "cancel_url": cancel_url,
        "metadata": metadata,
        "payment_method_types": list(config.STRIPE_PAYMENT_METHOD_TYPES),
    }
    if customer_email:
        params["customer_email"] = customer_email
    session = stripe.checkout.Session.create(**params)
    return {"id": session.id, "url": session.url}

def parse_event(payload: bytes, sig_header: Optional[str]) -> Dict[str, Any]:
    """
    Vérifie la signature d'un webhook Stripe puis décode l'événement.
    - La signature est contrôlée sur le corps brut AVANT tout décodage JSON.
    - Secret absent: ServiceUnavailableError; en-tête absent ou signature invalide:
      AuthenticationError (détail journalisé, jamais renvoyé).
    Retour: l'événement sous forme de dict ({"id", "type", "data": {"object": {...}}}).
    """
    secret = config.STRIPE_WEBHOOK_SECRET
    if not secret:
        raise ServiceUnavailableError("STRIPE_WEBHOOK_SECRET non configurée")
    if not sig_header:
        raise AuthenticationError("En-tête Stripe-Signature absent")

    try:
        text = payload.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise AuthenticationError("Corps du webhook non UTF-8") from exc

    try:
        stripe.WebhookSignature.verify_header(
            text, sig_header, secret, tolerance=stripe.Webhook.DEFAULT_TOLERANCE
        )
    except stripe.SignatureVerificationError as exc:
        logger.warning("payments.stripe_client.parse_event signature invalide: %s", exc)
        raise AuthenticationError(f"Signature invalide: {exc}") from exc

    try:
        event = json.loads(text)
    except ValueError as exc:
        raise ValidationError("Événement Stripe illisible") from exc
    if not isinstance(event, dict):
        raise ValidationError("Événement Stripe illisible")
    return event
