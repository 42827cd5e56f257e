"""
Deterministic cache key construction from request parameters.
"""

import json
from typing import Any, Mapping

from shared.errors import CacheKeyError

KEY_SEPARATOR = "|"


def encode_value(value: Any) -> str:
    """
    Canonical JSON encoding of a single parameter value.

    Nested mappings are rendered with sorted keys so their input order never
    changes the result. Values JSON cannot represent exactly (cycles,
    NaN/Infinity, arbitrary objects) raise CacheKeyError.
    """
    try:
        return json.dumps(
            value,
            sort_keys=True,
            separators=(",", ":"),
            ensure_ascii=False,
            allow_nan=False,
        )
    except (TypeError, ValueError) as exc:
        raise CacheKeyError(
            f"Cannot encode cache key parameter: {exc}",
            details={"value_type": type(value).__name__}
        ) from exc


def create_cache_key(prefix: str, params: Mapping[str, Any]) -> str:
    """Create cache key from query parameters, independent of their order."""
    for name in params:
        if not isinstance(name, str):
            raise CacheKeyError(
                "Cache key parameter names must be strings",
                details={"prefix": prefix, "name": repr(name)}
            )

    parts = []
    for name in sorted(params):
        try:
            parts.append(f"{name}:{encode_value(params[name])}")
        except CacheKeyError as exc:
            exc.details.update(prefix=prefix, name=name)
            raise

    return f"{prefix}:{KEY_SEPARATOR.join(parts)}"
