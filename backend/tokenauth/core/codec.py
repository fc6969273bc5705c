from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class TokenPayload:
    data: Any
    exp: int | float


def encode(payload: TokenPayload) -> bytes:
    """Encode with sorted keys and compact separators so equal payloads give equal bytes."""
    body = {"data": payload.data, "exp": payload.exp}
    return json.dumps(body, separators=(",", ":"), sort_keys=True, ensure_ascii=False).encode("utf-8")


def decode(raw: bytes) -> TokenPayload | None:
    """Decode a payload, returning None for anything that is not a well-formed ``{data, exp}`` object."""
    try:
        body: Any = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, ValueError):
        return None
    if not isinstance(body, dict) or "data" not in body or "exp" not in body:
        return None
    exp = body["exp"]
    if isinstance(exp, bool) or not isinstance(exp, (int, float)):
        return None
    return TokenPayload(data=body["data"], exp=exp)
