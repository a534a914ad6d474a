from fastapi import APIRouter, Request

from boutique import config
from boutique.utils.rate_limit import rate_limit_health_info

router = APIRouter(prefix="/health", tags=["Health"])

@router.get("")
def health_root():
    return {"ok": True}

@router.get("/config")
def health_config(request: Request):
    """Intégrations configurées (sans exposer de valeur secrète) et état du rate limiting."""
    return {
        "supabase": bool(config.SUPABASE_URL and config.SUPABASE_SERVICE_KEY),
        "stripe": bool(config.STRIPE_SECRET_KEY),
        "stripeWebhook": bool(config.STRIPE_WEBHOOK_SECRET),
        "email": bool(config.RESEND_API_KEY),
        "rateLimit": rate_limit_health_info(request),
    }
