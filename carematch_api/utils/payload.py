from typing import Any

from flask import request

from carematch.shared.errors import ValidationError


def json_body() -> dict[str, Any]:
    """Return the request's JSON object body or raise ValidationError."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Missing JSON in request")
    return data


def int_arg(name: str, default: int) -> int:
    """Read an integer query parameter, falling back to ``default`` when absent."""
    raw = request.args.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ValidationError(f"{name} must be an integer") from e
