"""
Résolution de l'utilisateur courant. Pas de moteur de permissions: le rôle admin
est une liste blanche d'emails (ADMIN_EMAILS).
"""
from typing import Any, Dict, Optional

from boutique import config
from boutique.auth import repository

def determine_role(email: Optional[str]) -> str:
    if email and email.strip().lower() in config.ADMIN_EMAILS:
        return "admin"
    return "user"

def get_user_from_token(access_token: str) -> Dict[str, Any]:
    """Retourne {id, email, role} pour un jeton Supabase valide."""
    raw = repository.get_user_from_access_token(access_token)
    email = raw.get("email")
    return {"id": raw.get("id"), "email": email, "role": determine_role(email)}
