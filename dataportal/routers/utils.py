"""Helpers shared by the routers."""

import json
import math
from typing import Any, Dict

from fastapi import Request

from dataportal.exceptions import ValidationError


async def parse_json_body(request: Request) -> Dict[str, Any]:
    """Read the request body as a JSON object.

    Raises:
        ValidationError: If the body isn't a JSON object.
    """
    try:
        payload = json.loads(await request.body())
    except ValueError:
        raise ValidationError("Invalid JSON")

    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON")

    return payload


def finite_or_none(value: Any) -> Any:
    """Replace NaN and infinite floats with None, as JSON can't represent them."""
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, dict):
        return {key: finite_or_none(item) for key, item in value.items()}
    if isinstance(value, list):
        return [finite_or_none(item) for item in value]
    return value
