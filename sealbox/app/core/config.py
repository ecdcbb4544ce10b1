"""
Centralized configuration management for the sealbox service.

Pydantic v2 settings management to enforce strict validation,
zero secret leakage, and fast-failure on invalid configuration.
"""

from functools import lru_cache
from typing import Annotated, Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


# -------------------------------------------------------------------------
# Reusable Type Aliases
# -------------------------------------------------------------------------

SensitiveEnv = Annotated[
    SecretStr,
    Field(
        min_length=1,
        description="Sensitive credential, redacted from logs",
    ),
]


# -------------------------------------------------------------------------
# Settings Model
# -------------------------------------------------------------------------

class Settings(BaseSettings):
    """
    Application settings parsed from the environment.

    Fails fast at startup if the HMAC secret is missing or any
    primitive selection is unknown.
    """

    # ---------------------------------------------------------------------
    # Signing
    # ---------------------------------------------------------------------

    hmac_secret: SensitiveEnv

    hmac_algorithm: Annotated[
        Literal["sha256", "sha384", "sha512"],
        Field(
            default="sha256",
            description="Digest used by the HMAC signing primitive",
        ),
    ]

    # ---------------------------------------------------------------------
    # Encoding
    # ---------------------------------------------------------------------

    codec: Annotated[
        Literal["base64", "base64url"],
        Field(
            default="base64",
            description="Reversible codec applied per field",
        ),
    ]

    # ---------------------------------------------------------------------
    # Runtime
    # ---------------------------------------------------------------------

    log_level: Annotated[
        Literal["DEBUG", "INFO", "WARNING", "ERROR"],
        Field(default="INFO"),
    ]

    host: Annotated[
        str,
        Field(default="127.0.0.1", min_length=1),
    ]

    port: Annotated[
        int,
        Field(default=8000, ge=1, le=65535),
    ]

    model_config = SettingsConfigDict(
        env_prefix="SEALBOX_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
        frozen=True,
    )


# -------------------------------------------------------------------------
# Settings Provider
# -------------------------------------------------------------------------

@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Process-wide settings singleton.

    Used by the CLI entrypoint; the application lifespan builds its own
    instance so tests can vary the environment per app.
    """
    return Settings()  # singleton within process
