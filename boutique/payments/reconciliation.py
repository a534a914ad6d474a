"""
Réconciliation des paiements Stripe (webhook checkout.session.completed).

Séquence:
1) passage de la commande en paid/confirmed (compare-and-set). Une erreur de
   persistance remonte: le webhook répond en erreur et Stripe relivre.
2) effets secondaires indépendants: décrément de stock par ligne, email client,
   alerte opérateur. Chacun est isolé (settle_all): un échec est journalisé et
   n'empêche ni les autres ni l'acquittement du webhook.

Seul l'appel qui fait réellement passer la commande en "paid" déclenche l'étape 2;
un événement rejoué est acquitté sans redécrémenter le stock.
"""
from functools import partial
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Tuple
import logging

from boutique.errors import InvalidOrderState, NotFoundError, PersistenceError
from boutique.inventory import service as inventory_service
from boutique.notifications import service as notifications_service
from boutique.orders import service as orders_service
from boutique.orders.models import Order
from boutique.payments import metadata

logger = logging.getLogger(__name__)

CHECKOUT_COMPLETED = "checkout.session.completed"


class TaskOutcome(NamedTuple):
    name: str
    ok: bool
    error: Optional[str] = None
    value: Any = None


class ReconciliationReport(NamedTuple):
    order_id: str
    transitioned: bool
    outcomes: Tuple[TaskOutcome, ...] = ()

    @property
    def failures(self) -> List[TaskOutcome]:
        return [o for o in self.outcomes if not o.ok]


def settle_all(tasks: List[Tuple[str, Callable[[], Any]]]) -> List[TaskOutcome]:
    """
    Exécute chaque tâche et collecte son issue; une exception n'interrompt jamais les suivantes.
    Une tâche qui retourne un résultat avec ok=False (EmailResult) compte comme un échec.
    """
    outcomes: List[TaskOutcome] = []
    for name, task in tasks:
        try:
            value = task()
        except Exception as exc:
            logger.exception("payments.reconciliation tâche %s en échec", name)
            outcomes.append(TaskOutcome(name, False, error=str(exc) or exc.__class__.__name__))
            continue
        ok = bool(getattr(value, "ok", True))
        error = None if ok else getattr(value, "error", None)
        if not ok:
            logger.warning("payments.reconciliation tâche %s sans succès: %s", name, error)
        outcomes.append(TaskOutcome(name, ok, error=error, value=value))
    return outcomes

def post_payment_tasks(order: Order) -> List[Tuple[str, Callable[[], Any]]]:
    tasks: List[Tuple[str, Callable[[], Any]]] = [
        (f"decrement_stock:{item.product_id}", partial(inventory_service.decrement_stock, item.product_id, item.quantity))
        for item in order.items
    ]
    tasks.append(("send_order_confirmation_email", partial(notifications_service.send_order_confirmation_email, order)))
    tasks.append(("send_new_order_alert", partial(notifications_service.send_new_order_alert, order)))
    return tasks

def reconcile_paid_order(order_id: str, payment_method: Optional[str] = None) -> ReconciliationReport:
    """
    Applique le paiement puis les effets secondaires.
    - Commande introuvable ou transition interdite: journalisé puis acquitté (une relivraison n'y changerait rien).
    - PersistenceError sur l'écriture du paiement: propagée.
    """
    try:
        written = orders_service.update_order_payment_status(order_id, "paid", payment_method)
    except (NotFoundError, InvalidOrderState) as exc:
        logger.warning("payments.reconcile_paid_order order_id=%s ignoré: %s", order_id, exc)
        return ReconciliationReport(order_id, transitioned=False)

    if written is None:
        logger.info("payments.reconcile_paid_order order_id=%s déjà payée, effets non rejoués", order_id)
        return ReconciliationReport(order_id, transitioned=False)

    # Relire la commande payée; à défaut, l'état écrit suffit pour les effets secondaires
    try:
        order = orders_service.get_order_by_id(order_id) or written
    except PersistenceError:
        logger.exception("payments.reconcile_paid_order relecture impossible order_id=%s", order_id)
        order = written

    outcomes = settle_all(post_payment_tasks(order))
    report = ReconciliationReport(order_id, transitioned=True, outcomes=tuple(outcomes))
    logger.info(
        "payments.reconcile_paid_order order_id=%s tâches=%s échecs=%s",
        order_id, len(outcomes), [o.name for o in report.failures],
    )
    return report

def handle_event(event: Dict[str, Any]) -> Optional[ReconciliationReport]:
    """
    Point d'entrée après vérification de signature.
    Retourne None pour les événements ignorés (autre type, orderId absent).
    """
    event_type = (event or {}).get("type")
    if event_type != CHECKOUT_COMPLETED:
        logger.info("payments.handle_event type=%s ignoré", event_type)
        return None

    session = metadata.session_from_event(event)
    order_id = metadata.extract_order_id(session)
    if not order_id:
        logger.error("payments.handle_event %s sans metadata.orderId event_id=%s", CHECKOUT_COMPLETED, event.get("id"))
        return None

    return reconcile_paid_order(order_id, metadata.payment_method_from_session(session))
