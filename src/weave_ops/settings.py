"""Environment-backed settings primitives for :mod:`weave_ops`."""

from __future__ import annotations

from pydantic import Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = ["WeaveOpsSettings", "get_settings"]

_DEFAULT_REQUEST_TIMEOUT = 30.0
_DEFAULT_POLL_INTERVAL = 1.0


class WeaveOpsSettings(BaseSettings):
    """Expose environment-derived configuration knobs for gateway uploads.

    All environment lookups go through this class. Each attribute maps to a
    documented environment variable and falls back to an inline default.

    Attributes:
        gateway_host: Host name of the gateway node.
        gateway_port: Explicit port. When unset the scheme default is used
            (443 for https, 80 for http).
        insecure: Talk plain http instead of https.
        wallet_path: Path to the JWK wallet file used for signing.
        request_timeout: Timeout in seconds applied to each HTTP request.
        poll_interval: Delay in seconds between confirmation polls.
    """

    gateway_host: str = Field(default="arweave.net", alias="WEAVE_OPS_GATEWAY_HOST")
    gateway_port: int | None = Field(default=None, alias="WEAVE_OPS_GATEWAY_PORT")
    insecure: bool = Field(default=False, alias="WEAVE_OPS_INSECURE")
    wallet_path: str | None = Field(default=None, alias="ARWEAVE_WALLET")
    request_timeout: float = Field(
        default=_DEFAULT_REQUEST_TIMEOUT, alias="WEAVE_OPS_REQUEST_TIMEOUT"
    )
    poll_interval: float = Field(
        default=_DEFAULT_POLL_INTERVAL, alias="WEAVE_OPS_POLL_INTERVAL"
    )

    model_config = SettingsConfigDict(
        env_file=None, extra="ignore", populate_by_name=True
    )

    @field_validator("request_timeout", "poll_interval", mode="before")
    @classmethod
    def _parse_positive_float(cls, value: object, info: ValidationInfo) -> float:
        """Parse duration fields, reverting to defaults on malformed input.

        Args:
            value: Raw environment value.
            info: Validation context naming the field being parsed.

        Returns:
            The parsed positive float, or the field default.
        """

        field_name = info.field_name
        default = (
            _DEFAULT_POLL_INTERVAL
            if field_name == "poll_interval"
            else _DEFAULT_REQUEST_TIMEOUT
        )
        parsed: float | None = None
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            parsed = float(value)
        elif isinstance(value, str):
            try:
                parsed = float(value.strip())
            except ValueError:
                parsed = None
        if parsed is None or parsed <= 0:
            return default
        return parsed

    @field_validator("gateway_port", mode="before")
    @classmethod
    def _parse_optional_port(cls, value: object) -> int | None:
        """Parse the optional port, ignoring malformed values."""

        if value is None:
            return None
        if isinstance(value, int) and not isinstance(value, bool):
            port = value
        elif isinstance(value, str):
            try:
                port = int(value.strip())
            except ValueError:
                return None
        else:
            return None
        if not 0 < port < 65536:
            return None
        return port

    @property
    def gateway_scheme(self) -> str:
        return "http" if self.insecure else "https"

    @property
    def gateway_url(self) -> str:
        """Return the gateway base URL, e.g. ``https://arweave.net:443``."""

        port = self.gateway_port
        if port is None:
            port = 80 if self.insecure else 443
        return f"{self.gateway_scheme}://{self.gateway_host}:{port}"


def get_settings() -> WeaveOpsSettings:
    """Return a :class:`WeaveOpsSettings` instance.

    Returns:
        Settings parsed from environment variables.
    """

    return WeaveOpsSettings()
