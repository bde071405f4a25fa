"""netprobe settings: protocol defaults and timeouts, read from the environment."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Query defaults; every field can be overridden by its environment alias."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    environment: Literal["development", "production", "test"] = Field(
        default="development", alias="NODE_ENV"
    )
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Stored equipment credentials are encrypted with a key derived from this
    credential_secret: str = Field(
        default="default-secret-key-for-development", alias="SESSION_SECRET"
    )

    # SNMP
    snmp_port: int = Field(default=161, alias="SNMP_PORT")
    snmp_community: str = Field(default="public", alias="SNMP_COMMUNITY")
    snmp_timeout_ms: int = Field(default=5000, alias="SNMP_TIMEOUT_MS")
    snmp_retries: int = Field(default=1, alias="SNMP_RETRIES")
    snmp_walk_timeout: float = Field(default=30.0, alias="SNMP_WALK_TIMEOUT")
    snmp_max_repetitions: int = Field(default=25, alias="SNMP_MAX_REPETITIONS")

    # SSH / Telnet
    ssh_port: int = Field(default=22, alias="SSH_PORT")
    telnet_port: int = Field(default=23, alias="TELNET_PORT")
    ssh_command_timeout: float = Field(default=30.0, alias="SSH_COMMAND_TIMEOUT")
    ssh_login_timeout: float = Field(default=20.0, alias="SSH_LOGIN_TIMEOUT")
    telnet_timeout: float = Field(default=30.0, alias="TELNET_TIMEOUT")
    terminal_read_size: int = Field(default=4096, alias="TERMINAL_READ_SIZE")

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
