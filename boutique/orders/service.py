"""Couche service de la feature Commandes.
Rôles:
- Valider la saisie du checkout et créer la commande « pending ».
- Lectures (admin, historique client avec contrôle de propriété, page de confirmation).
- Mises à jour de statut (admin) avec promotion automatique en « shipped ».
- Transition de paiement (webhook) via la machine à états, en compare-and-set.
"""
from typing import Any, Dict, List, Optional
import logging

from pydantic import ValidationError as PydanticValidationError

from boutique.errors import NotFoundError, PersistenceError, ValidationError
from boutique.inventory import service as inventory_service
from boutique.orders import repository
from boutique.orders import state
from boutique.orders.models import CreateOrderInput, Order

logger = logging.getLogger(__name__)

def parse_create_order_input(body: Any) -> CreateOrderInput:
    """Transforme le JSON du formulaire en CreateOrderInput (ValidationError sinon)."""
    if not isinstance(body, dict):
        raise ValidationError("Corps JSON invalide")
    try:
        return CreateOrderInput.model_validate(body)
    except PydanticValidationError as e:
        first = e.errors()[0] if e.errors() else {}
        where = ".".join(str(p) for p in first.get("loc", ()))
        msg = first.get("msg", "donnée invalide")
        raise ValidationError(f"{where}: {msg}" if where else msg) from e

def create_order(data: CreateOrderInput, user_id: Optional[str] = None) -> str:
    order_id = repository.create_order(data, user_id=user_id)
    logger.info("orders.create_order order_id=%s user_id=%s total=%s items=%s", order_id, user_id, data.total, len(data.items))
    return order_id

def submit_checkout(body: Any, user_id: Optional[str] = None) -> str:
    """
    Soumission du checkout:
    1) valider la saisie (champs requis, cohérence du total),
    2) vérifier que les quantités demandées restent disponibles (pré-contrôle, pas de réservation),
    3) créer la commande « pending ». Le stock n'est PAS décrémenté ici.
    """
    data = parse_create_order_input(body)
    shortages = inventory_service.validate_order_stock(data.items)
    if shortages:
        names = ", ".join(s["name"] for s in shortages)
        raise ValidationError(f"Stock insuffisant pour: {names}")
    return create_order(data, user_id=user_id)

def get_order_by_id(order_id: str) -> Optional[Order]:
    return repository.get_order_by_id(order_id)

def get_order_or_404(order_id: str) -> Order:
    order = repository.get_order_by_id(order_id)
    if order is None:
        raise NotFoundError("Commande introuvable")
    return order

def get_orders(status: Optional[str] = None) -> List[Order]:
    return repository.get_orders(status)

def get_orders_by_user_id(user_id: str) -> List[Order]:
    return repository.get_orders_by_user_id(user_id)

def get_order_for_user(order_id: str, user_id: str) -> Order:
    """Commande de l'utilisateur courant; celle d'un autre compte est traitée comme introuvable."""
    order = repository.get_order_by_id(order_id)
    if order is None or order.user_id != user_id:
        raise NotFoundError("Commande introuvable")
    return order

def update_order_status(order_id: str, status: str, tracking_number: Optional[str] = None) -> str:
    """
    Mise à jour admin du statut.
    - Un numéro de suivi non vide sur une commande pending/confirmed/processing la passe en shipped.
    - tracking_number="" efface le suivi sans changer la règle de statut.
    Retour: le statut effectivement enregistré.
    """
    effective = state.resolve_status(status, tracking_number)
    if not repository.update_order_status(order_id, effective, tracking_number):
        raise NotFoundError("Commande introuvable")
    if effective != status:
        logger.info("orders.update_order_status order_id=%s %s -> %s (numéro de suivi saisi)", order_id, status, effective)
    return effective

def update_order_payment_status(order_id: str, payment_status: str, payment_method: Optional[str] = None) -> Optional[Order]:
    """
    Applique une transition de paiement.
    - paid force aussi status=confirmed (même événement métier).
    - Retourne la commande écrite si la transition a eu lieu, None si elle était
      déjà appliquée (rejeu d'un webhook).
    - NotFoundError si la commande n'existe pas, InvalidOrderState si retour en arrière.
    """
    order = get_order_or_404(order_id)
    if not state.check_payment_transition(order.payment_status, payment_status):
        logger.info("orders.update_order_payment_status order_id=%s déjà %s", order_id, payment_status)
        return None

    target = state.apply_payment_status(order, payment_status, payment_method)
    changes: Dict[str, Any] = {"payment_status": target.payment_status, "status": target.status}
    if payment_method:
        changes["payment_method"] = target.payment_method

    written = repository.compare_and_set_payment(order_id, order.payment_status, changes)
    if written is not None:
        return written

    # Une autre requête a modifié le paiement entre la lecture et l'écriture
    current = get_order_or_404(order_id)
    if current.payment_status == payment_status:
        logger.info("orders.update_order_payment_status order_id=%s appliqué par une requête concurrente", order_id)
        return None
    raise PersistenceError(
        f"update_order_payment_status: conflit order_id={order_id} "
        f"attendu={order.payment_status} trouvé={current.payment_status}"
    )
