from typing import Optional
from supabase import create_client, Client
from boutique import config
from boutique.errors import ServiceUnavailableError

_supabase: Optional[Client] = None
_service_supabase: Optional[Client] = None

def get_supabase() -> Client:
    """Client 'anon' partagé (auth utilisateur, lectures publiques)."""
    global _supabase
    if _supabase is None:
        if not config.SUPABASE_URL or not config.SUPABASE_ANON_KEY:
            raise ServiceUnavailableError("SUPABASE_URL/SUPABASE_ANON_KEY manquants")
        _supabase = create_client(config.SUPABASE_URL, config.SUPABASE_ANON_KEY)
    return _supabase

def get_service_supabase() -> Client:
    """Client service-role (bypass RLS): commandes, stock, configuration du site."""
    global _service_supabase
    if _service_supabase is None:
        if not config.SUPABASE_URL or not config.SUPABASE_SERVICE_KEY:
            raise ServiceUnavailableError("SUPABASE_SERVICE_KEY manquant pour get_service_supabase()")
        _service_supabase = create_client(config.SUPABASE_URL, config.SUPABASE_SERVICE_KEY)
    return _service_supabase
