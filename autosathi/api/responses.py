"""Response envelope helpers"""
import math
from typing import Any, Optional

from fastapi.encoders import jsonable_encoder


def success(data: Any = None, message: Optional[str] = None) -> dict:
    """Wrap a payload as {"success": true, "data": ...}"""
    body: dict = {"success": True}
    if message:
        body["message"] = message
    if data is not None:
        body["data"] = jsonable_encoder(data)
    return body


def pagination(page: int, limit: int, total: int) -> dict:
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "pages": math.ceil(total / limit) if limit else 0,
    }
