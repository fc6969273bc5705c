from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable

from tokenauth.core import codec, signing
from tokenauth.core.config import Settings
from tokenauth.core.key_source import KeySource, resolve_secret
from tokenauth.core.keys import KeyOptions, derive_key


INVALID_TOKEN = "invalid token"
EXPIRED_TOKEN = "expired token"


@dataclass(frozen=True)
class TokenOptions:
    """Per-call overrides. Anything left as None falls back to Settings.

    The key options (iterations, length, digest, salt) must match between
    sign and verify. ``max_age`` only affects signing.
    """

    max_age: int | None = None
    key_iterations: int | None = None
    key_length: int | None = None
    key_digest: str | None = None
    token_salt: str | None = None


@dataclass(frozen=True)
class VerifyResult:
    ok: bool
    data: Any = None
    error: str | None = None


class TokenService:
    """Sign and verify stateless, expiring tokens.

    The data is signed but not encrypted: user ids are fine, secrets are not.
    """

    def __init__(self, settings: Settings, clock: Callable[[], float] = time.time) -> None:
        self._settings = settings
        self._clock = clock

    def sign(self, key_source: KeySource, data: Any, options: TokenOptions | None = None) -> str:
        options = options or TokenOptions()
        key, digest = self._signing_key(key_source, options)
        max_age = options.max_age if options.max_age is not None else self._settings.token_max_age
        payload = codec.TokenPayload(data=data, exp=self._now() + max_age)
        return signing.sign(codec.encode(payload), key, digest)

    def verify(self, key_source: KeySource, token: Any, options: TokenOptions | None = None) -> VerifyResult:
        # Reject non-string input before paying for key derivation.
        if not isinstance(token, str):
            return VerifyResult(False, error=INVALID_TOKEN)

        key, digest = self._signing_key(key_source, options or TokenOptions())
        message = signing.verify(token, key, digest)
        if message is None:
            return VerifyResult(False, error=INVALID_TOKEN)

        payload = codec.decode(message)
        if payload is None:
            return VerifyResult(False, error=INVALID_TOKEN)
        if payload.exp < self._now():
            return VerifyResult(False, error=EXPIRED_TOKEN)
        return VerifyResult(True, data=payload.data)

    def _signing_key(self, key_source: KeySource, options: TokenOptions) -> tuple[bytes, str]:
        s = self._settings
        key_options = KeyOptions(
            iterations=_pick(options.key_iterations, s.key_iterations),
            length=_pick(options.key_length, s.key_length),
            digest=_pick(options.key_digest, s.key_digest),
        )
        salt = _pick(options.token_salt, s.token_salt)
        key = derive_key(resolve_secret(key_source), salt, key_options)
        return key, key_options.digest

    def _now(self) -> int:
        return int(self._clock())


def _pick(value: Any, default: Any) -> Any:
    return default if value is None else value
