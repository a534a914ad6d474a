# boutique.config
from pathlib import Path
import os
from dotenv import load_dotenv

# Calculer le chemin du projet puis charger .env de manière explicite
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH, override=True)

"""
Configuration centrale de la boutique.

- Charge le fichier .env à la racine du projet (BASE_DIR/.env)
- Normalise et expose les secrets/URLs (Supabase, Stripe, Resend)
- Expose la liste d'administrateurs autorisés, CORS/hosts et cookies
- Fournit les chemins de redirection du checkout (succès/annulation)

Les modules lisent `config.X` au moment de l'appel (et non à l'import) pour que
les tests puissent monkeypatcher les valeurs.
"""

def _clean_env(v: str) -> str:
    """
    Nettoie une valeur d'environnement:
    - supprime les espaces et guillemets (simples, doubles) et backticks
    - retourne toujours une chaîne (jamais None)
    """
    return (v or "").strip().strip("'").strip('"').strip("`")

def _csv_env(name: str, default: str) -> list:
    return [x.strip() for x in os.getenv(name, default).split(",") if x.strip()]

# Supabase: URL et clés (anon pour l'auth utilisateur, service pour les écritures serveur)
SUPABASE_URL = _clean_env(os.getenv("SUPABASE_URL") or os.getenv("NEXT_PUBLIC_SUPABASE_URL") or "")
SUPABASE_ANON_KEY = _clean_env(os.getenv("SUPABASE_ANON_KEY") or os.getenv("SUPABASE_KEY") or "")
SUPABASE_SERVICE_KEY = _clean_env(os.getenv("SUPABASE_SERVICE_KEY") or "")

if SUPABASE_URL and not SUPABASE_URL.startswith("http"):
    SUPABASE_URL = "https://" + SUPABASE_URL
if SUPABASE_URL.endswith("/"):
    SUPABASE_URL = SUPABASE_URL.rstrip("/")

# Cookies / sécurité
COOKIE_SECURE = (os.getenv("COOKIE_SECURE", "false").lower() == "true")
SESSION_SECRET_KEY = _clean_env(os.getenv("SESSION_SECRET_KEY") or "replace_me_with_a_long_random_secret")

# Liste blanche d'administrateurs (pas de moteur de permissions)
ADMIN_EMAILS = [e.lower() for e in _csv_env("ADMIN_EMAILS", "atelier@example.com")]

# CORS (dev)
CORS_ORIGINS = _csv_env("CORS_ORIGINS", "*")
ALLOWED_HOSTS = _csv_env("ALLOWED_HOSTS", "localhost,127.0.0.1")

# URL publique du site (base des redirections Stripe et des liens dans les emails)
SITE_URL = _clean_env(os.getenv("SITE_URL") or os.getenv("BASE_URL") or "http://localhost:8000").rstrip("/")
SITE_NAME = os.getenv("SITE_NAME", "Atelier Boutique")

# Stripe: clé secrète, secret webhook, devise et moyens de paiement proposés
STRIPE_SECRET_KEY = _clean_env(os.getenv("STRIPE_SECRET_KEY") or "")
STRIPE_WEBHOOK_SECRET = _clean_env(os.getenv("STRIPE_WEBHOOK_SECRET") or "")
STRIPE_CURRENCY = _clean_env(os.getenv("STRIPE_CURRENCY") or "eur").lower()
STRIPE_PAYMENT_METHOD_TYPES = _csv_env("STRIPE_PAYMENT_METHOD_TYPES", "card,klarna")

# Pages de succès/annulation du checkout (relatives à la base URL)
CHECKOUT_SUCCESS_PATH = os.getenv("CHECKOUT_SUCCESS_PATH", "/checkout/confirmation")
CHECKOUT_CANCEL_PATH = os.getenv("CHECKOUT_CANCEL_PATH", "/checkout")

# Emails transactionnels (Resend). Sans clé: envoi désactivé (no-op documenté)
RESEND_API_KEY = _clean_env(os.getenv("RESEND_API_KEY") or "")
EMAIL_FROM = _clean_env(os.getenv("EMAIL_FROM") or "onboarding@resend.dev")
ADMIN_NOTIFY_EMAIL = _clean_env(os.getenv("ADMIN_NOTIFY_EMAIL") or "")

# Décrément de stock: nombre de tentatives compare-and-set avant abandon
STOCK_DECREMENT_MAX_ATTEMPTS = int(os.getenv("STOCK_DECREMENT_MAX_ATTEMPTS", "3"))
