# stockdesk/utils/listing.py
import math
from typing import Any, Dict, Optional, Type

from fastapi import Response
from pydantic import BaseModel


def list_params(page: int, page_size: int, **filters: Any) -> Dict[str, Any]:
    """Query string for a backend list endpoint; empty filters are dropped."""
    params: Dict[str, Any] = {"page": page, "limit": page_size}
    for key, value in filters.items():
        if value is None or value == "":
            continue
        params[key] = str(value).lower() if isinstance(value, bool) else value
    return params


# Convert the backend list envelope ({<key>: [...], total, page, limit, pages})
def to_page(data: Optional[dict], key: str, model: Type[BaseModel], page: int, page_size: int) -> dict:
    data = data or {}
    rows = data.get(key) or []
    total = int(data.get("total") or len(rows))
    total_pages = int(data.get("pages") or math.ceil(total / page_size))
    return {
        "items": [model.model_validate(row).model_dump() for row in rows],
        "total": total,
        "page": int(data.get("page") or page),
        "page_size": int(data.get("limit") or page_size),
        "total_pages": total_pages,
    }


def entity_response(data: Any, status_code: int = 200) -> Any:
    """Backend entity as returned, or an empty response when the backend sent no body."""
    if data is None:
        return Response(status_code=status_code)
    return data
