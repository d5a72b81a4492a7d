"""
Catalog entries as exposed to clients.
"""

import json
import math
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, TypeAdapter


class ModelInfo(BaseModel):
    """One upstream catalog item."""

    model_config = ConfigDict(frozen=True)

    id: str
    slug: Optional[str] = None
    name: str
    description: Optional[str] = None
    context_length: Optional[int] = None
    pricing: Optional[Dict[str, str]] = None

    @classmethod
    def from_upstream(cls, item: Any) -> Optional["ModelInfo"]:
        """Project a loosely-typed upstream item; None when it has no string ``id``."""
        if not isinstance(item, dict):
            return None

        model_id = _text(item.get("id"))
        if model_id is None:
            return None

        slug = _text(item.get("canonical_slug"))
        if slug is None:
            slug = _text(item.get("slug"))

        name = _text(item.get("name"))

        return cls(
            id=model_id,
            slug=slug,
            name=name if name is not None else model_id,
            description=_text(item.get("description")),
            context_length=_coerce_int(item.get("context_length")),
            pricing=_normalize_pricing(item.get("pricing")),
        )


ModelInfoList = TypeAdapter(List[ModelInfo])


def _text(value: Any) -> Optional[str]:
    # json.loads lets lone surrogates through; they cannot be re-encoded as UTF-8
    if not isinstance(value, str):
        return None
    try:
        value.encode("utf-8")
    except UnicodeEncodeError:
        return None
    return value


def _coerce_int(value: Any) -> Optional[int]:
    # bool is an int subclass; a flag is not a context length
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and math.isfinite(value):
        return int(value)
    return None


def _normalize_pricing(value: Any) -> Optional[Dict[str, str]]:
    if not isinstance(value, dict):
        return None

    pricing: Dict[str, str] = {}
    for key, raw in value.items():
        key = _text(key)
        if key is None:
            continue
        if isinstance(raw, str):
            text = _text(raw)
            if text is not None:
                pricing[key] = text
        elif isinstance(raw, (int, float)) and not isinstance(raw, bool):
            pricing[key] = str(raw)
        else:
            pricing[key] = json.dumps(raw)
    return pricing


def dump_catalog(models: List[ModelInfo]) -> bytes:
    """Serialize a catalog list for the cache store."""
    return ModelInfoList.dump_json(models)


def load_catalog(payload: bytes) -> List[ModelInfo]:
    """Deserialize a cached catalog list; raises pydantic.ValidationError when corrupt."""
    return ModelInfoList.validate_json(payload)
