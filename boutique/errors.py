"""
Taxonomie d'erreurs du cycle de vie des commandes.

Chaque exception porte le code HTTP et le message public rendus par le handler
enregistré dans la factory (`{"error": ...}`). Le message interne (str(exc))
est journalisé; il n'est renvoyé tel quel que pour les erreurs client.
"""
from typing import Optional


class BoutiqueError(Exception):
    status_code = 500
    default_public_message = "Erreur interne"
    expose_detail = False

    def __init__(self, message: str = "", *, public_message: Optional[str] = None):
        super().__init__(message or self.default_public_message)
        self._public_message = public_message

    @property
    def public_message(self) -> str:
        if self._public_message:
            return self._public_message
        if self.expose_detail:
            return str(self)
        return self.default_public_message


class ValidationError(BoutiqueError):
    """Corps de requête invalide ou incomplet."""
    status_code = 400
    default_public_message = "Requête invalide"
    expose_detail = True


class NotFoundError(BoutiqueError):
    """Commande ou produit introuvable."""
    status_code = 404
    default_public_message = "Ressource introuvable"
    expose_detail = True


class InvalidOrderState(BoutiqueError):
    """Transition interdite (paiement d'une commande à 0, retour en arrière du paiement...)."""
    status_code = 409
    default_public_message = "État de commande invalide"
    expose_detail = True


class AuthenticationError(BoutiqueError):
    """Signature webhook absente ou invalide. Le détail reste côté serveur."""
    status_code = 400
    default_public_message = "Signature invalide"


class PaymentGatewayError(BoutiqueError):
    """Le fournisseur de paiement a refusé ou raté la création de session."""
    status_code = 502
    default_public_message = "Impossible de démarrer le paiement, veuillez réessayer"


class PersistenceError(BoutiqueError):
    """Base de données injoignable ou écriture rejetée."""
    status_code = 503
    default_public_message = "Service temporairement indisponible"


class ServiceUnavailableError(BoutiqueError):
    """Intégration non configurée (clé Stripe/secret webhook manquant)."""
    status_code = 503
    default_public_message = "Service non configuré"
