"""Boutique: cycle de vie des commandes (panier, commandes, paiement Stripe, stock, notifications)."""
