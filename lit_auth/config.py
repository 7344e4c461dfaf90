"""
Configuration management for the auth client.

Loads settings from environment variables with validation.
"""

from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LitAuthSettings(BaseSettings):
    """
    Auth client settings.

    Loads from environment variables with LIT_AUTH_ prefix.
    """
    model_config = SettingsConfigDict(
        env_prefix="LIT_AUTH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Relay
    relay_url: str = Field(
        default="https://relayer-server-staging-cayenne.getlit.dev",
        description="Relay server URL"
    )
    relay_api_key: Optional[str] = Field(None, description="Relay API key", repr=False)
    relay_poll_interval: float = Field(default=15.0, ge=0.0, description="Mint status poll interval (seconds)")
    relay_poll_attempts: int = Field(default=20, ge=1, description="Max mint status polls")

    # OAuth gateway
    login_base_url: str = Field(
        default="https://login.litgateway.com",
        description="OAuth login gateway URL"
    )
    state_param_key: str = Field(default="lit-state-param", description="Session key for CSRF state")

    # OTP
    otp_url: str = Field(
        default="https://auth-api.litgateway.com",
        description="OTP service URL"
    )

    # Discord
    discord_api_url: str = Field(default="https://discord.com/api", description="Discord API URL")
    discord_client_id: str = Field(
        default="1052874239658692668",
        description="Discord application id used in identifier derivation"
    )

    # Chain
    rpc_url: str = Field(
        default="https://chain-rpc.litprotocol.com/http",
        description="JSON-RPC URL used for WebAuthn challenges"
    )

    # WebAuthn
    webauthn_timeout_ms: int = Field(default=60000, ge=1000, description="Assertion ceremony timeout")

    # Wallet signatures
    default_expiration_hours: int = Field(default=24, ge=1, description="Default sign-in expiry")

    # Timeouts
    request_timeout: float = Field(default=30.0, ge=1.0, description="Request timeout (seconds)")
    connect_timeout: float = Field(default=10.0, ge=1.0, description="Connection timeout (seconds)")

    # Connection pooling
    pool_connections: int = Field(default=10, ge=1, le=200, description="HTTP connection pool size")
    pool_maxsize: int = Field(default=20, ge=1, le=500, description="Max connections per pool")

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_requests: bool = Field(default=False, description="Log all HTTP requests")

    # Metrics
    enable_metrics: bool = Field(default=True, description="Enable Prometheus metrics")
    metrics_port: int = Field(default=9090, ge=1024, le=65535, description="Metrics server port")

    def __repr__(self) -> str:
        """Safe repr without sensitive data."""
        return (
            f"LitAuthSettings("
            f"relay_url={self.relay_url}, "
            f"login_base_url={self.login_base_url}, "
            f"rpc_url={self.rpc_url}"
            ")"
        )


def get_settings() -> LitAuthSettings:
    """
    Get auth client settings.

    Returns:
        Validated settings instance
    """
    return LitAuthSettings()
