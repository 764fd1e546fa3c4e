# eato/config/loader.py
"""
Project configuration loader.
The single source of truth is config/config.json.
Secrets are overridden from environment variables.
"""

from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings


# =============================================================================
# PATHS
# =============================================================================

def get_project_root() -> Path:
    """Returns the project root directory."""
    return Path(__file__).parent.parent.parent


def get_config_path() -> Path:
    """Returns the path to the configuration file."""
    return get_project_root() / "config" / "config.json"


def load_config_json() -> dict[str, Any]:
    """Loads config.json and returns it as a dict."""
    config_path = get_config_path()
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        return json.load(f)


# =============================================================================
# CONFIGURATION SECTIONS
# =============================================================================

class SystemSettings(BaseModel):
    """System settings."""
    PROJECT_NAME: str = "eato"
    VERSION: str = "1.0.0"
    DEBUG: bool = True
    LOG_LEVEL: str = "DEBUG"
    ENVIRONMENT: str = "production"
    COMPONENT_MODE: str = "all"

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT.lower() == "development"


class DeploymentSettings(BaseModel):
    """Component deployment settings."""
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 5000


class LoggingSettings(BaseModel):
    """Logging settings."""
    LOG_LEVEL: str = "DEBUG"
    LOG_TO_FILE: bool = True
    LOG_FILE_PATH: str = "logs/app.log"
    LOG_FORMAT: str = "colored"
    LOG_MAX_BYTES: int = 10485760


class AuthSettings(BaseModel):
    """Identity token verification settings."""
    AUTH_JWT_SECRET: str = ""
    AUTH_JWT_ALGORITHM: str = "HS256"
    AUTH_JWT_AUDIENCE: str | None = None

    @field_validator("AUTH_JWT_SECRET", mode="before")
    @classmethod
    def get_from_env(cls, v: str) -> str:
        """Reads the signing secret from the environment if not set."""
        if not v:
            return os.getenv("AUTH_JWT_SECRET", "")
        return v


class DomainSettings(BaseModel):
    """Public domain and client settings."""
    PUBLIC_BASE_URL: str = "http://localhost:5000"
    CORS_ORIGINS: list[str] = Field(default_factory=lambda: ["http://localhost:5000"])


class DatabaseSettings(BaseModel):
    """PostgreSQL settings."""
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_NAME: str = "eato"
    DB_USER: str = "postgres"
    DB_PASSWORD: str = ""
    DB_MIN_POOL_SIZE: int = 5
    DB_MAX_POOL_SIZE: int = 20
    DB_COMMAND_TIMEOUT: int = 60
    DB_RETRY_ATTEMPTS: int = 3
    DB_RETRY_DELAY: float = 1.0

    @field_validator("DB_PASSWORD", mode="before")
    @classmethod
    def get_from_env(cls, v: str) -> str:
        """Reads the password from the environment."""
        if not v:
            return os.getenv("DB_PASSWORD", "")
        return v

    @property
    def dsn(self) -> str:
        """Returns the PostgreSQL DSN."""
        return (
            f"postgresql://{self.DB_USER}:{self.DB_PASSWORD}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )


class RedisSettings(BaseModel):
    """Redis settings."""
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0
    REDIS_PASSWORD: str = ""
    REDIS_NAMESPACE: str = "eato"
    REDIS_MAX_CONNECTIONS: int = 50

    @field_validator("REDIS_PASSWORD", mode="before")
    @classmethod
    def get_from_env(cls, v: str) -> str:
        """Reads the password from the environment."""
        if not v:
            return os.getenv("REDIS_PASSWORD", "")
        return v

    @property
    def url(self) -> str:
        """Returns the Redis connection URL."""
        auth = f":{self.REDIS_PASSWORD}@" if self.REDIS_PASSWORD else ""
        return f"redis://{auth}{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"


class RedisTTLSettings(BaseModel):
    """Cache TTL settings."""
    WEBHOOK_EVENT_TTL: int = 604800


class RabbitMQSettings(BaseModel):
    """RabbitMQ settings."""
    RABBITMQ_HOST: str = "localhost"
    RABBITMQ_PORT: int = 5672
    RABBITMQ_USER: str = "guest"
    RABBITMQ_PASSWORD: str = "guest"
    RABBITMQ_VHOST: str = "/"
    RABBITMQ_EXCHANGE: str = "eato.events"
    RABBITMQ_PREFETCH_COUNT: int = 10

    @field_validator("RABBITMQ_PASSWORD", mode="before")
    @classmethod
    def get_from_env(cls, v: str) -> str:
        """Reads the password from the environment."""
        env_pass = os.getenv("RABBITMQ_PASSWORD", "")
        if env_pass:
            return env_pass
        return v

    @property
    def url(self) -> str:
        """Returns the RabbitMQ connection URL."""
        return (
            f"amqp://{self.RABBITMQ_USER}:{self.RABBITMQ_PASSWORD}"
            f"@{self.RABBITMQ_HOST}:{self.RABBITMQ_PORT}{self.RABBITMQ_VHOST}"
        )


class StripeSettings(BaseModel):
    """
    Billing provider settings.

    PRICE_IDS maps role -> tier -> Stripe price id. Any entry can be
    overridden with STRIPE_PRICE_<ROLE>_<TIER>.
    """
    STRIPE_SECRET_KEY: str = ""
    STRIPE_WEBHOOK_SECRET: str = ""
    STRIPE_SUBSCRIPTION_WEBHOOK_SECRET: str = ""
    CURRENCY: str = "usd"
    PRICE_IDS: dict[str, dict[str, str]] = Field(default_factory=dict)

    @field_validator(
        "STRIPE_SECRET_KEY",
        "STRIPE_WEBHOOK_SECRET",
        "STRIPE_SUBSCRIPTION_WEBHOOK_SECRET",
        mode="before",
    )
    @classmethod
    def get_from_env(cls, v: str, info) -> str:
        """Reads Stripe secrets from the environment if not set."""
        if not v:
            return os.getenv(info.field_name, "")
        return v

    def price_id_for(self, role: str, tier: str) -> str | None:
        """Returns the configured price id for (role, tier)."""
        env_value = os.getenv(f"STRIPE_PRICE_{role.upper()}_{tier.upper()}")
        if env_value:
            return env_value
        return self.PRICE_IDS.get(role, {}).get(tier) or None


class DepositSettings(BaseModel):
    """Booking deposit settings."""
    DEPOSIT_PERCENT: float = 25.0
    DEFAULT_DEPOSIT: int = 100


class EmailSettings(BaseModel):
    """Transactional email settings."""
    RESEND_API_KEY: str = ""
    RESEND_API_URL: str = "https://api.resend.com/emails"
    EMAIL_FROM: str = "Eato <notifications@eato.app>"
    EMAIL_TIMEOUT: float = 10.0

    @field_validator("RESEND_API_KEY", mode="before")
    @classmethod
    def get_from_env(cls, v: str) -> str:
        """Reads the API key from the environment."""
        if not v:
            return os.getenv("RESEND_API_KEY", "")
        return v


class TierSettings(BaseModel):
    """Subscription tier limits."""
    FREE_TRUCK_LIMIT: int = 1


# =============================================================================
# SETTINGS AGGREGATE
# =============================================================================

class Settings(BaseSettings):
    """
    Application settings.
    Aggregates all configuration sections.
    """
    system: SystemSettings = Field(default_factory=SystemSettings)
    deployment: DeploymentSettings = Field(default_factory=DeploymentSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    auth: AuthSettings = Field(default_factory=AuthSettings)
    domain: DomainSettings = Field(default_factory=DomainSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    redis: RedisSettings = Field(default_factory=RedisSettings)
    redis_ttl: RedisTTLSettings = Field(default_factory=RedisTTLSettings)
    rabbitmq: RabbitMQSettings = Field(default_factory=RabbitMQSettings)
    stripe: StripeSettings = Field(default_factory=StripeSettings)
    deposit: DepositSettings = Field(default_factory=DepositSettings)
    email: EmailSettings = Field(default_factory=EmailSettings)
    tiers: TierSettings = Field(default_factory=TierSettings)

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @classmethod
    def from_config_json(cls) -> "Settings":
        """
        Builds Settings from config.json.
        Secrets and hosts are overridden from environment variables.
        """
        config_data = load_config_json()

        # Skip comment keys (_comment_*)
        filtered_data = {k: v for k, v in config_data.items() if not k.startswith("_comment_")}

        return cls(
            system=SystemSettings(
                PROJECT_NAME=filtered_data.get("PROJECT_NAME", "eato"),
                VERSION=filtered_data.get("VERSION", "1.0.0"),
                DEBUG=filtered_data.get("DEBUG", True),
                LOG_LEVEL=filtered_data.get("LOG_LEVEL", "DEBUG"),
                ENVIRONMENT=os.getenv("ENVIRONMENT", filtered_data.get("ENVIRONMENT", "production")),
                COMPONENT_MODE=os.getenv("COMPONENT_MODE", filtered_data.get("COMPONENT_MODE", "all")),
            ),
            deployment=DeploymentSettings(
                API_HOST=os.getenv("API_HOST", filtered_data.get("API_HOST", "0.0.0.0")),
                API_PORT=int(os.getenv("API_PORT", filtered_data.get("API_PORT", 5000))),
            ),
            logging=LoggingSettings(
                LOG_LEVEL=filtered_data.get("LOG_LEVEL", "DEBUG"),
                LOG_TO_FILE=filtered_data.get("LOG_TO_FILE", True),
                LOG_FILE_PATH=filtered_data.get("LOG_FILE_PATH", "logs/app.log"),
                LOG_FORMAT=filtered_data.get("LOG_FORMAT", "json"),
                LOG_MAX_BYTES=filtered_data.get("LOG_MAX_BYTES", 10485760),
            ),
            auth=AuthSettings(
                AUTH_JWT_SECRET=os.getenv("AUTH_JWT_SECRET", filtered_data.get("AUTH_JWT_SECRET", "")),
                AUTH_JWT_ALGORITHM=filtered_data.get("AUTH_JWT_ALGORITHM", "HS256"),
                AUTH_JWT_AUDIENCE=filtered_data.get("AUTH_JWT_AUDIENCE"),
            ),
            domain=DomainSettings(
                PUBLIC_BASE_URL=os.getenv("PUBLIC_BASE_URL", filtered_data.get("PUBLIC_BASE_URL", "http://localhost:5000")),
                CORS_ORIGINS=filtered_data.get("CORS_ORIGINS", ["http://localhost:5000"]),
            ),
            database=DatabaseSettings(
                DB_HOST=os.getenv("DB_HOST", filtered_data.get("DB_HOST", "localhost")),
                DB_PORT=int(os.getenv("DB_PORT", filtered_data.get("DB_PORT", 5432))),
                DB_NAME=os.getenv("DB_NAME", filtered_data.get("DB_NAME", "eato")),
                DB_USER=os.getenv("DB_USER", filtered_data.get("DB_USER", "postgres")),
                DB_PASSWORD=os.getenv("DB_PASSWORD", filtered_data.get("DB_PASSWORD", "")),
                DB_MIN_POOL_SIZE=filtered_data.get("DB_MIN_POOL_SIZE", 5),
                DB_MAX_POOL_SIZE=filtered_data.get("DB_MAX_POOL_SIZE", 20),
                DB_COMMAND_TIMEOUT=filtered_data.get("DB_COMMAND_TIMEOUT", 60),
                DB_RETRY_ATTEMPTS=filtered_data.get("DB_RETRY_ATTEMPTS", 3),
                DB_RETRY_DELAY=filtered_data.get("DB_RETRY_DELAY", 1.0),
            ),
            redis=RedisSettings(
                REDIS_HOST=os.getenv("REDIS_HOST", filtered_data.get("REDIS_HOST", "localhost")),
                REDIS_PORT=int(os.getenv("REDIS_PORT", filtered_data.get("REDIS_PORT", 6379))),
                REDIS_DB=filtered_data.get("REDIS_DB", 0),
                REDIS_PASSWORD=os.getenv("REDIS_PASSWORD", filtered_data.get("REDIS_PASSWORD", "")),
                REDIS_NAMESPACE=filtered_data.get("REDIS_NAMESPACE", "eato"),
                REDIS_MAX_CONNECTIONS=filtered_data.get("REDIS_MAX_CONNECTIONS", 50),
            ),
            redis_ttl=RedisTTLSettings(
                WEBHOOK_EVENT_TTL=filtered_data.get("WEBHOOK_EVENT_TTL", 604800),
            ),
            rabbitmq=RabbitMQSettings(
                RABBITMQ_HOST=os.getenv("RABBITMQ_HOST", filtered_data.get("RABBITMQ_HOST", "localhost")),
                RABBITMQ_PORT=int(os.getenv("RABBITMQ_PORT", filtered_data.get("RABBITMQ_PORT", 5672))),
                RABBITMQ_USER=os.getenv("RABBITMQ_USER", filtered_data.get("RABBITMQ_USER", "guest")),
                RABBITMQ_PASSWORD=os.getenv("RABBITMQ_PASSWORD", filtered_data.get("RABBITMQ_PASSWORD", "guest")),
                RABBITMQ_VHOST=filtered_data.get("RABBITMQ_VHOST", "/"),
                RABBITMQ_EXCHANGE=filtered_data.get("RABBITMQ_EXCHANGE", "eato.events"),
                RABBITMQ_PREFETCH_COUNT=filtered_data.get("RABBITMQ_PREFETCH_COUNT", 10),
            ),
            stripe=StripeSettings(
                STRIPE_SECRET_KEY=os.getenv("STRIPE_SECRET_KEY", filtered_data.get("STRIPE_SECRET_KEY", "")),
                STRIPE_WEBHOOK_SECRET=os.getenv("STRIPE_WEBHOOK_SECRET", filtered_data.get("STRIPE_WEBHOOK_SECRET", "")),
                STRIPE_SUBSCRIPTION_WEBHOOK_SECRET=os.getenv(
                    "STRIPE_SUBSCRIPTION_WEBHOOK_SECRET",
                    filtered_data.get("STRIPE_SUBSCRIPTION_WEBHOOK_SECRET", ""),
                ),
                CURRENCY=filtered_data.get("CURRENCY", "usd"),
                PRICE_IDS=filtered_data.get("STRIPE_PRICE_IDS", {}),
            ),
            deposit=DepositSettings(
                DEPOSIT_PERCENT=filtered_data.get("DEPOSIT_PERCENT", 25.0),
                DEFAULT_DEPOSIT=filtered_data.get("DEFAULT_DEPOSIT", 100),
            ),
            email=EmailSettings(
                RESEND_API_KEY=os.getenv("RESEND_API_KEY", filtered_data.get("RESEND_API_KEY", "")),
                RESEND_API_URL=filtered_data.get("RESEND_API_URL", "https://api.resend.com/emails"),
                EMAIL_FROM=filtered_data.get("EMAIL_FROM", "Eato <notifications@eato.app>"),
                EMAIL_TIMEOUT=filtered_data.get("EMAIL_TIMEOUT", 10.0),
            ),
            tiers=TierSettings(
                FREE_TRUCK_LIMIT=filtered_data.get("FREE_TRUCK_LIMIT", 1),
            ),
        )


@lru_cache()
def get_settings() -> Settings:
    """
    Returns the settings singleton.
    Cached so config.json is parsed once per process.
    """
    from dotenv import load_dotenv

    env_path = get_project_root() / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    return Settings.from_config_json()


settings = get_settings()
