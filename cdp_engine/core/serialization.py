"""Wire format for notifications the engine publishes.

canonical_bytes(event) -> Ok[bytes] | Err[str]: sorted, compact JSON.
content_hash(event)    -> Ok[str] | Err[str]:   SHA-256 of those bytes.

Amounts are uint256 and lose precision as JSON numbers in most
consumers, so every int is written as a decimal string. Dataclasses
carry their class name under "_type" so consumers can dispatch.
"""

from __future__ import annotations

import dataclasses
import hashlib
import json
from datetime import UTC, datetime
from typing import Any

from cdp_engine.core.result import Err, Ok
from cdp_engine.core.types import Address, UtcDatetime


def _to_serializable(obj: object) -> Any:  # noqa: PLR0911
    match obj:
        case None | bool() | str():
            return obj
        case int():
            return str(obj)
        case Address(value=raw):
            return raw
        case UtcDatetime(value=moment):
            return moment.isoformat()
        case datetime() if obj.tzinfo is None:
            raise TypeError("naive datetime has no place on the wire, use UtcDatetime")
        case datetime():
            return obj.astimezone(UTC).isoformat()
        case tuple() | list():
            return [_to_serializable(x) for x in obj]
        case dict():
            return {str(k): _to_serializable(v) for k, v in sorted(obj.items())}
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        payload: dict[str, Any] = {"_type": type(obj).__name__}
        for f in dataclasses.fields(obj):
            payload[f.name] = _to_serializable(getattr(obj, f.name))
        return payload
    raise TypeError(f"Cannot serialize {type(obj).__name__}")


def canonical_bytes(obj: object) -> Ok[bytes] | Err[str]:
    """Event (or error value) -> JSON bytes; Err instead of TypeError."""
    try:
        serializable = _to_serializable(obj)
    except TypeError as e:
        return Err(f"Unsupported type in canonical serialization: {e}")
    return Ok(
        json.dumps(serializable, sort_keys=True, separators=(",", ":")).encode("utf-8")
    )


def content_hash(obj: object) -> Ok[str] | Err[str]:
    """Stable digest used as a dedup key by notification consumers."""
    return canonical_bytes(obj).map(lambda b: hashlib.sha256(b).hexdigest())
