"""
Logique de prix pure (pas de Stripe, pas de DB).

Les montants restent des entiers en centimes de bout en bout; la division par
100 n'existe que dans les couches d'affichage (emails).
"""
from typing import Iterable, NamedTuple

from boutique.cart.models import CartLine, ShippingPolicy

# module boutique.cart.pricing
class CartTotals(NamedTuple):
    subtotal: int
    shipping: int
    total: int


def subtotal(lines: Iterable[CartLine]) -> int:
    """Somme des prix unitaires (instantané produit) multipliés par les quantités."""
    return sum(line.product.price * line.quantity for line in lines)


def shipping_cost(cart_subtotal: int, policy: ShippingPolicy) -> int:
    """
    Frais de port standard, offerts si un seuil est configuré (> 0) et atteint.
    - Le résultat vaut toujours 0 ou policy.standard_shipping_cost.
    """
    threshold = policy.free_shipping_threshold
    if threshold > 0 and cart_subtotal >= threshold:
        return 0
    return policy.standard_shipping_cost


def total(lines: Iterable[CartLine], policy: ShippingPolicy) -> int:
    return price_cart(lines, policy).total


def price_cart(lines: Iterable[CartLine], policy: ShippingPolicy) -> CartTotals:
    lines = list(lines)
    sub = subtotal(lines)
    shipping = shipping_cost(sub, policy)
    return CartTotals(subtotal=sub, shipping=shipping, total=sub + shipping)


def format_price(cents: int) -> str:
    """Rendu lisible (« 45.00 ») sans passer par un float."""
    sign = "-" if cents < 0 else ""
    cents = abs(int(cents))
    return f"{sign}{cents // 100}.{cents % 100:02d}"


CURRENCY_SYMBOLS = {"eur": "€", "usd": "$", "gbp": "£"}

def currency_symbol(currency: str) -> str:
    """Symbole d'affichage; code ISO en majuscules pour une devise sans symbole connu."""
    code = (currency or "").strip().lower()
    return CURRENCY_SYMBOLS.get(code, code.upper())


def format_money(cents: int, currency: str) -> str:
    return f"{format_price(cents)} {currency_symbol(currency)}"
