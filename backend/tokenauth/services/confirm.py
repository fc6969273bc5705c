from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Callable, Optional, Protocol

from tokenauth.core.config import Settings
from tokenauth.core.errors import InvalidParamsError
from tokenauth.core.key_source import KeySource
from tokenauth.core.logging import get_logger
from tokenauth.core.security import TokenOptions, TokenService


UserRecord = Mapping[str, Any]


class UserLookup(Protocol):
    def get_by(self, attrs: Any) -> Any:  # pragma: no cover - interface
        ...


class ConfirmStage(str, Enum):
    AWAITING_TOKEN = "awaiting_token"
    TOKEN_VERIFIED = "token_verified"
    USER_RESOLVED = "user_resolved"
    REPORTED = "reported"


@dataclass(frozen=True)
class Rejection:
    reason: str
    # Settings attribute holding the caller-facing text.
    user_message: str = "default_error"
    level: str = "warning"


@dataclass(frozen=True)
class ConfirmResult:
    ok: bool
    user: Optional[dict] = None
    error: Optional[str] = None


Guard = Callable[[UserRecord], Optional[Rejection]]


def unconfirmed(user: UserRecord) -> Optional[Rejection]:
    # A record without the field at all is not treated as unconfirmed.
    if "confirmed_at" in user and user["confirmed_at"] is None:
        return None
    return Rejection("user already confirmed", user_message="already_confirmed", level="info")


def reset_requested(user: UserRecord) -> Optional[Rejection]:
    if user.get("reset_sent_at") is not None:
        return None
    return Rejection("no reset token found")


def user_as_dict(user: Any) -> dict:
    if hasattr(user, "model_dump"):
        return user.model_dump()
    if dataclasses.is_dataclass(user) and not isinstance(user, type):
        return dataclasses.asdict(user)
    if isinstance(user, Mapping):
        return dict(user)
    return {k: v for k, v in vars(user).items() if not k.startswith("_")}


def drop_keys(user: UserRecord, keys: frozenset[str]) -> dict:
    return {k: v for k, v in user.items() if k not in keys}


class ConfirmService:
    def __init__(
        self,
        guard: Guard,
        success_message: str,
        *,
        settings: Settings,
        user_context: UserLookup,
        tokens: TokenService | None = None,
        key_source: KeySource | None = None,
    ) -> None:
        self._guard = guard
        self._success_message = success_message
        self._settings = settings
        self._users = user_context
        self._tokens = tokens or TokenService(settings)
        self._key_source = key_source if key_source is not None else settings.endpoint()
        self._log = get_logger(__name__)

    def issue(self, data: Any, options: TokenOptions | None = None) -> str:
        """Sign a confirmation token, valid for ``settings.confirm_max_age`` seconds."""
        return self._tokens.sign(self._key_source, data, self._with_confirm_age(options))

    def verify(
        self,
        params: Mapping[str, Any],
        *,
        options: TokenOptions | None = None,
        log_meta: Mapping[str, Any] | None = None,
    ) -> ConfirmResult:
        if "key" not in params:
            raise InvalidParamsError("No key found in the params")
        meta = dict(log_meta or {})

        verified = self._tokens.verify(self._key_source, params["key"], self._with_confirm_age(options))
        if not verified.ok:
            return self._reject(Rejection(verified.error or "invalid token"), ConfirmStage.AWAITING_TOKEN, None, meta)

        found = self._users.get_by(verified.data)
        if found is None:
            return self._reject(Rejection("no user found"), ConfirmStage.TOKEN_VERIFIED, None, meta)
        user = user_as_dict(found)

        rejection = self._guard(user)
        if rejection is not None:
            return self._reject(rejection, ConfirmStage.USER_RESOLVED, user.get("id"), meta)

        self._log.info(self._success_message, **{**meta, "user": user.get("id"), "stage": ConfirmStage.REPORTED.value})
        return ConfirmResult(True, user=drop_keys(user, self._settings.drop_user_keys))

    def _reject(
        self, rejection: Rejection, stage: ConfirmStage, user_id: Any, meta: dict
    ) -> ConfirmResult:
        log = getattr(self._log, rejection.level)
        log(rejection.reason, **{**meta, "user": user_id, "stage": stage.value})
        return ConfirmResult(False, error=getattr(self._settings, rejection.user_message))

    def _with_confirm_age(self, options: TokenOptions | None) -> TokenOptions:
        return replace(options or TokenOptions(), max_age=self._settings.confirm_max_age)


def account_confirmation(**kwargs: Any) -> ConfirmService:
    """Confirm a new account; the user must not be confirmed yet."""
    return ConfirmService(unconfirmed, "user confirmed", **kwargs)


def password_reset(**kwargs: Any) -> ConfirmService:
    """Authorize a password reset; a reset must have been requested."""
    return ConfirmService(reset_requested, "user confirmed for password reset", **kwargs)
