"""Tests for the message authenticator: format, tampering, wrong keys."""

from __future__ import annotations

import string

from tokenauth.core.signing import sign, verify


KEY = b"0123456789abcdef0123456789abcdef"
MESSAGE = b'{"data":{"id":1},"exp":1700000000}'


def test_sign_and_verify():
    token = sign(MESSAGE, KEY)
    assert verify(token, KEY) == MESSAGE


def test_token_is_printable_and_opaque():
    token = sign(MESSAGE, KEY)
    assert token.isascii() and token.isprintable()
    assert token.count(".") == 1
    assert "data" not in token


def test_sha512_tokens_need_sha512_to_verify():
    token = sign(MESSAGE, KEY, "sha512")
    assert verify(token, KEY, "sha512") == MESSAGE
    assert verify(token, KEY, "sha256") is None


def test_wrong_key_is_rejected():
    token = sign(MESSAGE, KEY)
    assert verify(token, b"f" * 32) is None


def test_every_single_character_change_is_rejected():
    token = sign(MESSAGE, KEY)
    alphabet = string.ascii_letters + string.digits + "-_."
    for i, ch in enumerate(token):
        replacement = next(c for c in alphabet if c != ch)
        tampered = token[:i] + replacement + token[i + 1:]
        assert verify(tampered, KEY) is None, f"accepted change at position {i}"


def test_structural_garbage_is_rejected():
    assert verify("", KEY) is None
    assert verify("no-separator", KEY) is None
    assert verify(".", KEY) is None
    assert verify("Ω.Ω", KEY) is None
    assert verify(sign(MESSAGE, KEY) + ".extra", KEY) is None
