from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from functools import lru_cache

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from tokenauth.core.errors import ConfigurationError
from tokenauth.core.key_source import MIN_SECRET_BYTES


MIN_KEY_LENGTH = 20


class Digest(str, Enum):
    SHA256 = "sha256"
    SHA512 = "sha512"


_ALGORITHMS = {
    Digest.SHA256: hashes.SHA256,
    Digest.SHA512: hashes.SHA512,
}


@dataclass(frozen=True)
class KeyOptions:
    iterations: int = 1000
    length: int = 32
    digest: Digest | str = Digest.SHA256


def parse_digest(value: Digest | str) -> Digest:
    try:
        return Digest(value)
    except ValueError:
        raise ConfigurationError(f"Unsupported key digest: {value!r}") from None


def derive_key(secret: bytes, salt: str, options: KeyOptions = KeyOptions(), *, cache: bool = True) -> bytes:
    """Derive a ``options.length`` byte key from the secret and salt.

    Raises ConfigurationError for a short secret, a short key length,
    a non-positive iteration count or a digest outside ``Digest``.
    Results are memoized per input tuple unless ``cache`` is False.
    """
    if len(secret) < MIN_SECRET_BYTES:
        raise ConfigurationError(
            f"The secret_key_base is too short. It should be at least {MIN_SECRET_BYTES} bytes long."
        )
    if options.length < MIN_KEY_LENGTH:
        raise ConfigurationError(
            f"The key_length is too short. It should be at least {MIN_KEY_LENGTH} bytes long."
        )
    if options.iterations < 1:
        raise ConfigurationError("The key_iterations must be a positive integer.")
    digest = parse_digest(options.digest)

    if cache:
        return _cached_derive(secret, salt, options.iterations, options.length, digest)
    return _derive(secret, salt, options.iterations, options.length, digest)


def _derive(secret: bytes, salt: str, iterations: int, length: int, digest: Digest) -> bytes:
    kdf = PBKDF2HMAC(
        algorithm=_ALGORITHMS[digest](),
        length=length,
        salt=salt.encode("utf-8"),
        iterations=iterations,
    )
    return kdf.derive(secret)


_cached_derive = lru_cache(maxsize=256)(_derive)


def clear_key_cache() -> None:
    _cached_derive.cache_clear()
