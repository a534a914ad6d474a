"""
Helpers de sérialisation partagés par les entités persistées.

- CamelModel: champs snake_case côté Python/BD, alias camelCase côté JSON (API).
- strip_empty: retire les colonnes None avant écriture en base, pour ne pas
  écraser une colonne avec un champ optionnel non fourni. Les valeurs jsonb
  (lignes, adresse) sont écrites telles quelles.
"""
from datetime import datetime, timezone
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_api(self) -> dict:
        """Représentation JSON (clés camelCase)."""
        return self.model_dump(by_alias=True, mode="json")


def strip_empty(row: Dict[str, Any]) -> Dict[str, Any]:
    return {column: value for column, value in row.items() if value is not None}


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()
