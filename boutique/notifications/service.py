"""
Envoi des notifications de commande (best effort).

Les fonctions publiques ne lèvent jamais: elles retournent un EmailResult que
l'appelant journalise. Sans RESEND_API_KEY l'envoi est un no-op "not_configured".
"""
from pathlib import Path
from typing import NamedTuple, Optional
import logging

from jinja2 import Environment, FileSystemLoader, select_autoescape

from boutique import config
from boutique.cart.pricing import format_money, format_price
from boutique.notifications import email_client
from boutique.orders.models import Order

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"

_env = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=select_autoescape(["html"]),
)
_env.filters["money"] = lambda cents: format_money(cents, config.STRIPE_CURRENCY)

SENT = "sent"
NOT_CONFIGURED = "not_configured"
FAILED = "failed"


class EmailResult(NamedTuple):
    status: str
    error: Optional[str] = None
    message_id: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == SENT


def render_order_confirmation(order: Order) -> str:
    return _env.get_template("order_confirmation.html").render(
        order=order,
        site_name=config.SITE_NAME,
        greeting_name=order.customer_given_name or order.customer_name or "client",
    )

def render_new_order_alert(order: Order) -> str:
    return _env.get_template("new_order_alert.html").render(
        order=order,
        site_name=config.SITE_NAME,
        admin_url=f"{config.SITE_URL}/admin/orders/{order.id}",
    )

def _send(kind: str, order: Order, to: Optional[str], subject: str, render) -> EmailResult:
    if not email_client.is_configured():
        logger.warning("notifications.%s RESEND_API_KEY non configurée, email non envoyé order_id=%s", kind, order.id)
        return EmailResult(NOT_CONFIGURED, error="Email non configuré")
    recipient = (to or "").strip()
    if not recipient:
        logger.warning("notifications.%s destinataire absent order_id=%s", kind, order.id)
        return EmailResult(FAILED, error="Aucun destinataire")
    try:
        response = email_client.send_email(to=[recipient], subject=subject, html=render(order))
    except Exception as exc:
        logger.exception("notifications.%s échec d'envoi order_id=%s", kind, order.id)
        return EmailResult(FAILED, error=str(exc) or exc.__class__.__name__)
    message_id = response.get("id") if isinstance(response, dict) else getattr(response, "id", None)
    logger.info("notifications.%s envoyé order_id=%s message_id=%s", kind, order.id, message_id)
    return EmailResult(SENT, message_id=message_id)

def send_order_confirmation_email(order: Order) -> EmailResult:
    """Email de confirmation au client (lignes, sous-total, port, total, adresse)."""
    subject = f"Confirmation de commande #{order.id} - {config.SITE_NAME}"
    return _send("send_order_confirmation_email", order, order.customer_email, subject, render_order_confirmation)

def send_new_order_alert(order: Order) -> EmailResult:
    """Alerte « nouvelle commande » vers la boîte opérateur (ADMIN_NOTIFY_EMAIL, sinon premier admin)."""
    to = config.ADMIN_NOTIFY_EMAIL or (config.ADMIN_EMAILS[0] if config.ADMIN_EMAILS else "")
    subject = f"[{config.SITE_NAME}] Nouvelle commande #{order.id} - {format_price(order.total)} {config.STRIPE_CURRENCY.upper()}"
    return _send("send_new_order_alert", order, to, subject, render_new_order_alert)
