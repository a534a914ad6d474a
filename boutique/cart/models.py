"""
Types du panier: instantané produit, ligne de panier, politique de livraison.
Tous les montants sont des entiers en centimes.
"""
from typing import Optional

from pydantic import ConfigDict, Field

from boutique.utils.serialization import CamelModel


class ProductSnapshot(CamelModel):
    """
    Copie figée d'un produit au moment de l'ajout au panier / de la commande.
    Les champs inconnus (images, catégorie, attributs...) sont conservés tels quels.
    """
    model_config = ConfigDict(extra="allow")

    id: str
    name: str = ""
    price: int = Field(ge=0)
    stock: Optional[int] = None


class CartLine(CamelModel):
    product_id: str
    product: ProductSnapshot
    quantity: int = Field(ge=1)


class ShippingPolicy(CamelModel):
    """freeShippingThreshold = 0 signifie « pas de livraison offerte au-delà d'un seuil »."""
    model_config = ConfigDict(frozen=True)

    free_shipping_threshold: int = Field(default=0, ge=0)
    standard_shipping_cost: int = Field(default=0, ge=0)
    express_shipping_cost: int = Field(default=0, ge=0)
