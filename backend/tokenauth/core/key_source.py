from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from tokenauth.core.errors import ConfigurationError


MIN_SECRET_BYTES = 20


@dataclass(frozen=True)
class Endpoint:
    """An application endpoint with its configured secret."""

    name: str
    secret_key_base: str | None = None


@dataclass(frozen=True)
class Connection:
    """A connection-like (or socket-like) context.

    It may carry an explicit secret, a reference to the endpoint that
    serves it, or both. The explicit secret wins.
    """

    secret_key_base: str | None = None
    endpoint: Endpoint | None = None


KeySource = Union[str, bytes, Connection, Endpoint]


def resolve_secret(source: KeySource) -> bytes:
    """Resolve a key source to the raw secret, raising ConfigurationError on failure."""
    return validate_secret(_key_base(source))


def validate_secret(secret: str | bytes | None) -> bytes:
    if secret is None:
        raise ConfigurationError("The secret_key_base has not been set")
    raw = secret.encode("utf-8") if isinstance(secret, str) else bytes(secret)
    if len(raw) < MIN_SECRET_BYTES:
        raise ConfigurationError(
            f"The secret_key_base is too short. It should be at least {MIN_SECRET_BYTES} bytes long."
        )
    return raw


def _key_base(source: KeySource) -> str | bytes | None:
    if isinstance(source, Connection):
        if source.secret_key_base is not None:
            return source.secret_key_base
        if source.endpoint is not None:
            return _endpoint_key_base(source.endpoint)
        return None
    if isinstance(source, Endpoint):
        return _endpoint_key_base(source)
    if isinstance(source, (str, bytes)):
        return source
    raise ConfigurationError(f"Unsupported key source: {type(source).__name__}")


def _endpoint_key_base(endpoint: Endpoint) -> str:
    if not endpoint.secret_key_base:
        raise ConfigurationError(f"no secret_key_base configuration found in {endpoint.name!r}")
    return endpoint.secret_key_base
