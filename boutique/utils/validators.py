import json
from typing import Any, Dict

from fastapi import Request

from boutique.errors import ValidationError

async def read_json_body(request: Request) -> Dict[str, Any]:
    """Corps JSON objet de la requête; ValidationError si absent, illisible ou non-objet."""
    raw = await request.body()
    try:
        body = json.loads(raw) if raw else None
    except ValueError:
        raise ValidationError("Corps JSON invalide")
    if not isinstance(body, dict):
        raise ValidationError("Corps JSON invalide")
    return body

def require_str(body: Dict[str, Any], field: str) -> str:
    value = body.get(field)
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field} est requis")
    return value.strip()

def optional_str(body: Dict[str, Any], field: str):
    value = body.get(field)
    return value if isinstance(value, str) else None
