from __future__ import annotations

from enum import Enum
from typing import Any, Mapping, Optional
from urllib.parse import quote, urlencode


def _stringify(value: Any) -> Any:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return value.value
    return value


def clean_params(params: Optional[Mapping[str, Any]] = None) -> dict[str, Any]:
    """Drop None values and render booleans as "true"/"false"."""
    return {name: _stringify(value) for name, value in (params or {}).items() if value is not None}


def build(path: str, params: Optional[Mapping[str, Any]] = None) -> str:
    """Append a query string built from params to path.

    Example:
        >>> build("/v3/market/catalog/item", {"id": 123, "page": None})
        '/v3/market/catalog/item?id=123'
        >>> build("/v1/market/total-users.json")
        '/v1/market/total-users.json?'
    """
    return f"{path}?{urlencode(clean_params(params))}"


def prepare(template: str, *values: Any) -> str:
    """Interpolate printf-style template with escaped values.

    Strings are percent-encoded, booleans become "true"/"false", None is skipped.

    Example:
        >>> prepare("/v1/market/new-files:%s,%s.json", "themeforest", "wordpress")
        '/v1/market/new-files:themeforest,wordpress.json'
    """
    rendered = []
    for value in values:
        if value is None:
            continue
        value = _stringify(value)
        if isinstance(value, str):
            value = quote(value, safe="")
        rendered.append(value)
    return template % tuple(rendered)


def join(base_url: str, path: str) -> str:
    return base_url.rstrip("/") + "/" + path.lstrip("/")
