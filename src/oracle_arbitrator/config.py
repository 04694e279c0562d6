"""Gateway configuration.

Provides gateway configuration with env var support.
Uses a protocol-based injection pattern so the calling application
can provide its own config implementation.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@runtime_checkable
class GatewayConfigProtocol(Protocol):
    """Protocol defining gateway configuration requirements.

    Calling applications should implement this protocol and register
    it via set_gateway_config().
    """

    @property
    def operator(self) -> str | None:
        """Identity that operates the gateway."""
        ...

    @property
    def default_fee(self) -> int:
        """Dispute fee applied at construction."""
        ...

    @property
    def metadata(self) -> str:
        """Terms of service published by the arbitrator."""
        ...


@dataclass
class GatewaySettings:
    """Concrete gateway configuration.

    Reads from environment variables with ARBITRATOR_ prefix.
    Can be instantiated directly for testing.
    """

    operator: str | None = None
    default_fee: int = 0
    metadata: str = ""

    @classmethod
    def from_env(cls) -> GatewaySettings:
        """Create settings from environment variables."""
        raw_fee = os.environ.get("ARBITRATOR_DEFAULT_FEE", "0")
        try:
            default_fee = int(raw_fee)
        except ValueError as e:
            raise ValueError(f"ARBITRATOR_DEFAULT_FEE must be an integer, got {raw_fee!r}") from e

        return cls(
            operator=os.environ.get("ARBITRATOR_OPERATOR") or None,
            default_fee=default_fee,
            metadata=os.environ.get("ARBITRATOR_METADATA", ""),
        )


# Global gateway config - set by application layer at startup
_gateway_config: GatewayConfigProtocol | None = None
_core_settings: GatewaySettings | None = None


def set_gateway_config(config: GatewayConfigProtocol) -> None:
    """Set the global gateway config.

    Args:
        config: An object implementing GatewayConfigProtocol
    """
    global _gateway_config
    _gateway_config = config


def get_gateway_config_or_none() -> GatewayConfigProtocol | None:
    """Get the global gateway config, or None if not set."""
    return _gateway_config


def clear_gateway_config() -> None:
    """Clear the global gateway config. For testing."""
    global _gateway_config
    _gateway_config = None


def get_config() -> GatewaySettings:
    """Get gateway settings loaded from environment (cached)."""
    global _core_settings
    if _core_settings is None:
        _core_settings = GatewaySettings.from_env()
    return _core_settings


def clear_config_cache() -> None:
    """Clear the config cache. For testing."""
    global _core_settings
    _core_settings = None
