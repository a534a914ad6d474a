"""
Module 'payments' (feature-first): point d'entrée public.
Réunit le client Stripe, les métadonnées de corrélation, la création de session et la réconciliation.
"""

from .metadata import make_metadata, extract_order_id, payment_method_from_session
from .stripe_client import require_stripe, create_session, parse_event
from .service import create_checkout_session
from .reconciliation import handle_event, reconcile_paid_order, settle_all

__all__ = [
    # metadata
    "make_metadata",
    "extract_order_id",
    "payment_method_from_session",
    # stripe
    "require_stripe",
    "create_session",
    "parse_event",
    # services
    "create_checkout_session",
    "handle_event",
    "reconcile_paid_order",
    "settle_all",
]
