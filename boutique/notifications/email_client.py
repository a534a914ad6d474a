"""
Adaptateur Resend (emails transactionnels).
"""
from typing import Any, Dict, List

import resend

from boutique import config

# module boutique.notifications.email_client
def is_configured() -> bool:
    return bool(config.RESEND_API_KEY)

def require_resend():
    """Configure resend.api_key; à n'appeler que si is_configured()."""
    resend.api_key = config.RESEND_API_KEY
    return resend

def sender() -> str:
    return f"{config.SITE_NAME} <{config.EMAIL_FROM}>"

def send_email(*, to: List[str], subject: str, html: str) -> Dict[str, Any]:
    """
    Envoie un email HTML via Resend.
    Retour: réponse du SDK (ex: {"id": "..."}). Les exceptions du SDK remontent.
    """
    require_resend()
    params = {
        "from": sender(),
        "to": to,
        "subject": subject,
        "html": html,
    }
    return resend.Emails.send(params)
