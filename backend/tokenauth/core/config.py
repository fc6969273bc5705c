from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from tokenauth.core.key_source import Endpoint


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=None, extra="ignore", populate_by_name=True)

    # Ключ приложения
    secret_key_base: str | None = Field(default=None, validation_alias="SECRET_KEY_BASE")
    endpoint_name: str = Field(default="tokenauth", validation_alias="ENDPOINT_NAME")

    # Токены
    token_salt: str = Field(default="tokenauth-token", validation_alias="TOKEN_SALT")
    token_max_age: int = Field(default=4 * 60 * 60, validation_alias="TOKEN_MAX_AGE")
    confirm_max_age: int = Field(default=20 * 60, validation_alias="CONFIRM_MAX_AGE")
    key_iterations: int = Field(default=1000, validation_alias="KEY_ITERATIONS")
    key_length: int = Field(default=32, validation_alias="KEY_LENGTH")
    key_digest: str = Field(default="sha256", validation_alias="KEY_DIGEST")

    # Пользователи
    drop_user_keys: frozenset[str] = Field(
        default=frozenset({"password_hash", "password", "otp_secret"}),
        validation_alias="DROP_USER_KEYS",
    )
    default_error: str = Field(default="Invalid credentials", validation_alias="DEFAULT_ERROR_MESSAGE")
    already_confirmed: str = Field(
        default="Your account has already been confirmed",
        validation_alias="ALREADY_CONFIRMED_MESSAGE",
    )

    # Логи
    log_level: str = Field(default="info", validation_alias="LOG_LEVEL")
    log_json: bool = Field(default=True, validation_alias="LOG_JSON")

    def endpoint(self) -> Endpoint:
        return Endpoint(name=self.endpoint_name, secret_key_base=self.secret_key_base)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
