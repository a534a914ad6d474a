"""
Machine à états de la commande.

Règles pures, sans I/O:
- le paiement n'avance que dans un sens (pending -> paid|failed, paid -> refunded);
- la confirmation du paiement et la confirmation de la commande sont un seul
  événement métier: apply_payment_confirmed pose paid ET confirmed;
- un numéro de suivi saisi avant expédition fait passer la commande en shipped.
"""
import logging
from typing import Optional

from boutique.errors import InvalidOrderState, ValidationError
from boutique.orders.models import Order

logger = logging.getLogger(__name__)

ORDER_STATUSES = ("pending", "confirmed", "processing", "shipped", "delivered", "cancelled")
PAYMENT_STATUSES = ("pending", "paid", "failed", "refunded")

PAYMENT_TRANSITIONS = {
    "pending": {"paid", "failed"},
    "paid": {"refunded"},
    "failed": set(),
    "refunded": set(),
}

# Statuts dans lesquels un numéro de suivi déclenche le passage en "shipped"
TRACKING_PROMOTABLE_STATUSES = {"pending", "confirmed", "processing"}

# Statuts que la confirmation de paiement remplace par "confirmed"
PAYMENT_CONFIRMABLE_STATUSES = {"pending", "confirmed"}


def check_payment_transition(current: str, target: str) -> bool:
    """
    Valide une transition de paiement.
    Retour:
      - True si la transition doit être écrite,
      - False si l'état visé est déjà l'état courant (rejeu sans effet).
    Lève ValidationError pour un statut inconnu, InvalidOrderState pour un retour en arrière.
    """
    if target not in PAYMENT_STATUSES:
        raise ValidationError(f"Statut de paiement inconnu: {target}")
    if current == target:
        return False
    if target not in PAYMENT_TRANSITIONS.get(current, set()):
        raise InvalidOrderState(f"Transition de paiement interdite: {current} -> {target}")
    return True


def apply_payment_status(order: Order, payment_status: str, payment_method: Optional[str] = None) -> Order:
    """Retourne la commande après changement de statut de paiement (sans écrire)."""
    changes = {"payment_status": payment_status}
    if payment_method:
        changes["payment_method"] = payment_method
    if payment_status == "paid":
        if order.status in PAYMENT_CONFIRMABLE_STATUSES:
            changes["status"] = "confirmed"
        else:
            logger.warning(
                "orders.state: paiement reçu pour order_id=%s au statut %s, statut conservé",
                order.id, order.status,
            )
    return order.model_copy(update=changes)


def apply_payment_confirmed(order: Order, payment_method: Optional[str] = None) -> Order:
    return apply_payment_status(order, "paid", payment_method)


def resolve_status(status: str, tracking_number: Optional[str]) -> str:
    """Statut effectif d'une mise à jour admin (promotion en shipped si suivi saisi)."""
    if status not in ORDER_STATUSES:
        raise ValidationError(f"Statut de commande inconnu: {status}")
    if tracking_number and tracking_number.strip() and status in TRACKING_PROMOTABLE_STATUSES:
        return "shipped"
    return status
