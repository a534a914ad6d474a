# module boutique.orders.models
"""Modèles de la commande (agrégat racine du sous-système).
- OrderItem: produit et prix figés à la création, insensibles aux modifications du catalogue.
- CreateOrderInput: saisie du formulaire de checkout, validée avant écriture.
- Order: document persisté (colonnes snake_case, JSON camelCase).
"""
from typing import List, Literal, Optional

from pydantic import EmailStr, Field, model_validator

from boutique.cart.models import ProductSnapshot
from boutique.utils.serialization import CamelModel

OrderStatus = Literal["pending", "confirmed", "processing", "shipped", "delivered", "cancelled"]
PaymentStatus = Literal["pending", "paid", "failed", "refunded"]

GUEST_USER_ID = "guest"


class Address(CamelModel):
    street: str = Field(min_length=1)
    street2: Optional[str] = None
    city: str = Field(min_length=1)
    postal_code: str = Field(min_length=1)
    country: str = Field(min_length=1)
    state: Optional[str] = None


class OrderItem(CamelModel):
    product_id: str = Field(min_length=1)
    product: ProductSnapshot
    quantity: int = Field(ge=1)
    price: int = Field(ge=0)

    @property
    def line_total(self) -> int:
        return self.price * self.quantity


class CreateOrderInput(CamelModel):
    customer_name: Optional[str] = None
    customer_given_name: str = Field(min_length=1)
    customer_family_name: str = Field(min_length=1)
    customer_email: EmailStr
    customer_phone: Optional[str] = None
    items: List[OrderItem] = Field(min_length=1)
    total: int = Field(ge=0)
    shipping: int = Field(ge=0)
    tax: int = Field(default=0, ge=0)
    # Accepté pour compatibilité du formulaire; une commande naît toujours "pending"
    payment_method: Optional[str] = None
    shipping_option_name: Optional[str] = None
    shipping_address: Address

    @model_validator(mode="after")
    def _check_total(self):
        items_total = sum(item.line_total for item in self.items)
        expected = items_total + self.shipping + self.tax
        if self.total != expected:
            raise ValueError(f"total incohérent: reçu {self.total}, attendu {expected}")
        if not (self.customer_name or "").strip():
            self.customer_name = f"{self.customer_given_name.strip()} {self.customer_family_name.strip()}".strip()
        return self


class Order(CamelModel):
    id: str
    user_id: str = GUEST_USER_ID
    customer_name: Optional[str] = None
    customer_given_name: Optional[str] = None
    customer_family_name: Optional[str] = None
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
    items: List[OrderItem] = Field(default_factory=list)
    total: int = 0
    shipping: int = 0
    tax: int = 0
    shipping_option_name: Optional[str] = None
    status: OrderStatus = "pending"
    payment_method: str = "pending"
    payment_status: PaymentStatus = "pending"
    shipping_address: Address
    tracking_number: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def items_subtotal(self) -> int:
        return sum(item.line_total for item in self.items)

    def confirmation_view(self) -> dict:
        """Résumé renvoyé à la page de confirmation publique (sans email ni téléphone)."""
        data = self.to_api()
        for key in ("customerEmail", "customerPhone", "userId"):
            data.pop(key, None)
        return data
