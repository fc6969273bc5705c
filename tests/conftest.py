"""Shared test fixtures for tokenauth tests."""

from __future__ import annotations

from typing import Any

import pytest

from tokenauth.core.config import Settings
from tokenauth.core.keys import clear_key_cache
from tokenauth.core.security import TokenService


SECRET = "test-secret-key-base-do-not-use-in-production"


class FakeClock:
    def __init__(self, now: float = 1_700_000_000) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeUsers:
    """In-memory user_context: ``get_by`` matches every given attribute."""

    def __init__(self, *users: dict[str, Any]) -> None:
        self.users = list(users)
        self.queries: list[Any] = []

    def get_by(self, attrs: Any) -> dict[str, Any] | None:
        self.queries.append(attrs)
        if not isinstance(attrs, dict):
            attrs = {"id": attrs}
        for user in self.users:
            if all(user.get(k) == v for k, v in attrs.items()):
                return user
        return None


@pytest.fixture(autouse=True)
def _fresh_key_cache() -> None:
    clear_key_cache()


@pytest.fixture
def settings() -> Settings:
    return Settings(secret_key_base=SECRET, token_salt="test-salt")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def tokens(settings: Settings, clock: FakeClock) -> TokenService:
    return TokenService(settings, clock=clock)
