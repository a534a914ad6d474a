# module boutique.payments.views
"""Endpoints de paiement.
- /checkout-session: ouvre une session Stripe Checkout pour une commande existante (rate-limité).
- /webhook: reçoit les événements Stripe signés et réconcilie la commande payée.
Les services sont synchrones (SDK Stripe, client Supabase): ils tournent dans le threadpool.
"""
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from boutique.payments import reconciliation
from boutique.payments import service as payments_service
from boutique.payments import stripe_client
from boutique.utils.rate_limit import optional_rate_limit
from boutique.utils.validators import optional_str, read_json_body, require_str

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/payments", tags=["Payments API"])

@router.post("/checkout-session", dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
async def create_checkout_session(request: Request):
    """
    Entrée JSON: {"orderId": "...", "baseUrl": "https://..." (optionnel)}
    Sortie: {"url": "<page de paiement hébergée>"}
    Erreurs: 400 corps invalide, 404 commande introuvable, 409 commande non payable,
    502 refus Stripe, 503 Stripe non configuré.
    """
    body = await read_json_body(request)
    order_id = require_str(body, "orderId")
    base_url = optional_str(body, "baseUrl")
    url = await run_in_threadpool(payments_service.create_checkout_session, order_id, base_url)
    return {"url": url}

@router.post("/webhook", include_in_schema=False)
async def stripe_webhook(request: Request):
    """
    Webhook Stripe.
    - Signature vérifiée sur le corps brut avant tout décodage (400 sinon, sans détail).
    - Réponse {"received": true} pour tout événement traité ou ignoré.
    - Erreur seulement si l'écriture du statut de paiement échoue (Stripe relivrera).
    """
    payload = await request.body()
    event = stripe_client.parse_event(payload, request.headers.get("stripe-signature"))
    report = await run_in_threadpool(reconciliation.handle_event, event)
    if report is not None:
        logger.info(
            "payments.webhook event_id=%s order_id=%s transitioned=%s",
            event.get("id"), report.order_id, report.transitioned,
        )
    return JSONResponse({"received": True})
