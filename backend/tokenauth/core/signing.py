from __future__ import annotations

import hashlib
import hmac

from itsdangerous import Signer
from itsdangerous.encoding import base64_decode, base64_encode
from itsdangerous.exc import BadData

from tokenauth.core.keys import Digest, parse_digest


_DIGEST_METHODS = {
    Digest.SHA256: hashlib.sha256,
    Digest.SHA512: hashlib.sha512,
}


def _signer(key: bytes, digest: Digest | str) -> Signer:
    return Signer(
        secret_key=key,
        key_derivation="none",
        digest_method=_DIGEST_METHODS[parse_digest(digest)],
    )


def sign(message: bytes, key: bytes, digest: Digest | str = Digest.SHA256) -> str:
    return _signer(key, digest).sign(base64_encode(message)).decode("ascii")


def verify(token: str, key: bytes, digest: Digest | str = Digest.SHA256) -> bytes | None:
    """Return the signed message, or None for any malformed or forged token."""
    signer = _signer(key, digest)
    try:
        raw = token.encode("ascii")
    except UnicodeEncodeError:
        return None
    value, sep, sig = raw.rpartition(signer.sep)
    if not sep:
        return None
    # Compare the encoded form: lenient base64 decoding would ignore changed padding bits.
    if not hmac.compare_digest(signer.get_signature(value), sig):
        return None
    try:
        return base64_decode(value)
    except BadData:
        return None
