"""SDK configuration management using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """SDK settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_prefix="AESDK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Nodes
    node_url: str | None = Field(default=None, description="Primary node HTTP endpoint")
    node_name: str = Field(default="node", description="Pool name of the primary node")
    extra_node_urls: dict[str, str] = Field(
        default_factory=dict,
        description="Additional nodes to pool, keyed by name",
    )
    network_id: str | None = Field(
        default=None,
        description="Fixed network id; when unset it is read from the selected node",
    )

    # Compiler
    compiler_url: str | None = Field(default=None, description="Compiler HTTP endpoint")
    ignore_version: bool = Field(
        default=False, description="Skip node and compiler version checks"
    )

    # Account
    secret_key: str | None = Field(
        default=None, description="Secret key of the default signing account"
    )

    # Amounts
    denomination: str = Field(default="aettos", description="Default amount denomination")

    # HTTP behavior
    request_timeout: float = Field(default=30.0, description="HTTP timeout in seconds")
    max_retries: int = Field(default=3, description="Retry attempts per request")
    retry_delay: float = Field(default=0.5, description="Base delay between retries")

    # Polling
    poll_interval: float = Field(default=1.0, description="Seconds between polls")
    poll_blocks: int = Field(default=5, description="Blocks to wait for inclusion")

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: Literal["json", "console"] = Field(
        default="console", description="Log output format"
    )

    @field_validator("node_url", "compiler_url")
    @classmethod
    def _check_scheme(cls, value: str | None) -> str | None:
        if value and not value.lower().startswith(("http://", "https://")):
            raise ValueError(f"URL must start with http:// or https://, got: {value!r}")
        return value.rstrip("/") if value else value

    @computed_field
    @property
    def node_urls(self) -> dict[str, str]:
        """All configured nodes, primary first."""
        nodes: dict[str, str] = {}
        if self.node_url:
            nodes[self.node_name] = self.node_url
        for name, url in self.extra_node_urls.items():
            nodes.setdefault(name, url.rstrip("/"))
        return nodes

    @computed_field
    @property
    def has_account(self) -> bool:
        """Check if a default account key is configured."""
        return bool(self.secret_key)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
