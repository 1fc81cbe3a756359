"""Settings shared by all retdec services."""

from __future__ import annotations

import os
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

from pyretdec.errors import InvalidConfigError
from pyretdec.utils import default_user_agent

DEFAULT_API_URL = "https://retdec.com/service/api"

API_KEY_ENV_VAR = "RETDEC_API_KEY"
API_URL_ENV_VAR = "RETDEC_API_URL"


class ServiceConfig(BaseModel):
    """Connection settings for the retdec.com API.

    An API key is required; everything else has a sensible default::

        config = ServiceConfig(api_key="MY-API-KEY")
        config.api_url     # https://retdec.com/service/api
        config.user_agent  # pyretdec/0.1.0 (Linux)

    Instances are immutable and may be shared by any number of services.
    """

    model_config = ConfigDict(frozen=True)

    api_key: SecretStr | None = None
    api_url: str = DEFAULT_API_URL
    user_agent: str = Field(default_factory=default_user_agent)

    @field_validator("api_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    def model_post_init(self, __context: Any) -> None:
        if self.api_key is None or not self.api_key.get_secret_value().strip():
            raise InvalidConfigError("missing API key")
        if not self.api_url:
            raise InvalidConfigError("missing API URL")

    @classmethod
    def from_env(
        cls,
        api_key: str | None = None,
        api_url: str | None = None,
        user_agent: str | None = None,
    ) -> ServiceConfig:
        """Build settings, falling back to RETDEC_API_KEY / RETDEC_API_URL."""
        values: dict[str, Any] = {
            "api_key": api_key or os.environ.get(API_KEY_ENV_VAR),
            "api_url": api_url or os.environ.get(API_URL_ENV_VAR) or DEFAULT_API_URL,
        }
        if user_agent is not None:
            values["user_agent"] = user_agent
        return cls(**values)

    @property
    def secret_key(self) -> str:
        assert self.api_key is not None
        return self.api_key.get_secret_value()
