from __future__ import annotations

from functools import lru_cache
from typing import Any, Callable, Mapping

from fastapi import Depends, Header, HTTPException

from tokenauth.core.config import Settings, get_settings
from tokenauth.core.key_source import KeySource
from tokenauth.core.logging import get_logger
from tokenauth.core.security import TokenOptions, TokenService
from tokenauth.services.confirm import UserLookup, drop_keys, user_as_dict


logger = get_logger(__name__)


@lru_cache(maxsize=1)
def get_token_service() -> TokenService:
    return TokenService(get_settings())


def token_authenticator(
    user_context: UserLookup,
    *,
    options: TokenOptions | None = None,
    key_source: KeySource | None = None,
    log_meta: Mapping[str, Any] | None = None,
) -> Callable[..., dict[str, Any]]:
    """Build a dependency that loads the user behind an ``Authorization: Bearer`` token."""
    meta = dict(log_meta or {})

    def require_user(
        authorization: str | None = Header(default=None, alias="Authorization"),
        settings: Settings = Depends(get_settings),
        token_service: TokenService = Depends(get_token_service),
    ) -> dict[str, Any]:
        if not authorization or not authorization.startswith("Bearer "):
            logger.warning("anonymous user", **{**meta, "user": None})
            raise HTTPException(status_code=401, detail="invalid_token")
        token = authorization.removeprefix("Bearer ").strip()

        source = key_source if key_source is not None else settings.endpoint()
        verified = token_service.verify(source, token, options)
        if not verified.ok:
            logger.warning(verified.error, **{**meta, "user": None})
            raise HTTPException(status_code=401, detail="invalid_token")

        found = user_context.get_by(verified.data)
        if found is None:
            logger.warning("no user found", **{**meta, "user": None})
            raise HTTPException(status_code=401, detail="invalid_token")

        user = user_as_dict(found)
        logger.info("user authenticated", **{**meta, "user": user.get("id")})
        return drop_keys(user, settings.drop_user_keys)

    return require_user
