"""
Merchant credentials and gateway settings.

A GatewayConfig is built once at process start (usually from the
environment) and handed to the HeaderAssembler, Verifier and GatewayClient.
"""

import os
from dataclasses import dataclass, field, replace
from typing import Dict, Mapping, Optional

from dotenv import load_dotenv

from .constants import (
    DEFAULT_BASE_URL,
    DEFAULT_CONFIG,
    DEFAULT_ENDPOINTS,
    DEFAULT_HOST,
)
from .exceptions import ConfigurationError
from .models import ProtocolVersion

# Environment variable -> GatewayConfig field
ENV_VARS = {
    'GATEWAY_BASE_URL': 'base_url',
    'GATEWAY_HOST': 'host',
    'MERCHANT_ID': 'merchant_id',
    'API_KEY': 'api_key',
    'API_SECRET': 'api_secret',
    'TNPG_PROTOCOL_VERSION': 'protocol_version',
    'TNPG_REPLAY_WINDOW': 'replay_window',
    'TNPG_TIMEOUT': 'timeout',
}

ENDPOINT_ENV_VARS = {
    'PAYMENT_ORDER_ENDPOINT': 'create_order',
    'PAYMENT_VERIFY_ENDPOINT': 'verify',
    'PAYMENT_INQUIRY_ENDPOINT': 'inquiry',
}


@dataclass(frozen=True)
class GatewayConfig:
    """Credentials and settings for one merchant account."""
    merchant_id: str
    api_key: str
    api_secret: str = field(repr=False)
    host: str = DEFAULT_HOST
    base_url: str = DEFAULT_BASE_URL
    protocol_version: ProtocolVersion = ProtocolVersion.V2
    replay_window: int = DEFAULT_CONFIG['replay_window']
    timeout: float = DEFAULT_CONFIG['timeout']
    endpoints: Mapping[str, str] = field(default_factory=lambda: dict(DEFAULT_ENDPOINTS))

    def __post_init__(self):
        try:
            version = ProtocolVersion(self.protocol_version)
        except ValueError:
            raise ConfigurationError(
                f"protocol_version must be one of "
                f"{', '.join(v.value for v in ProtocolVersion)}, got {self.protocol_version!r}"
            )
        object.__setattr__(self, 'protocol_version', version)

    def validate(self) -> 'GatewayConfig':
        """
        Check that every credential is present and settings are sane.

        Returns:
            self, to allow chaining

        Raises:
            ConfigurationError: If a credential is blank or a setting invalid
        """
        for name, label in (('merchant_id', 'MERCHANT_ID'),
                            ('api_key', 'API_KEY'),
                            ('api_secret', 'API_SECRET')):
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                raise ConfigurationError(f"{label} is required for gateway authentication")

        if not self.host or not str(self.host).strip():
            raise ConfigurationError("GATEWAY_HOST is required for gateway authentication")

        if self.replay_window <= 0:
            raise ConfigurationError("replay_window must be positive")

        if self.timeout <= 0:
            raise ConfigurationError("timeout must be positive")

        return self

    def endpoint(self, name: str) -> str:
        try:
            return self.endpoints[name]
        except KeyError:
            raise ConfigurationError(f"no endpoint configured for {name!r}")

    def with_overrides(self, **changes) -> 'GatewayConfig':
        return replace(self, **changes)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None,
                 env_file: Optional[str] = None, **overrides) -> 'GatewayConfig':
        """
        Load configuration from environment variables.

        Args:
            environ: Mapping to read instead of os.environ
            env_file: Optional .env file loaded into os.environ first
            **overrides: Field values taking precedence over the environment

        Raises:
            ConfigurationError: If required values are missing or malformed
        """
        if env_file is not None:
            load_dotenv(dotenv_path=env_file)
        if environ is None:
            environ = os.environ

        values: Dict[str, object] = {}
        for env_name, attr in ENV_VARS.items():
            raw = environ.get(env_name)
            if raw is not None and raw.strip():
                values[attr] = raw.strip()

        endpoints = dict(DEFAULT_ENDPOINTS)
        for env_name, key in ENDPOINT_ENV_VARS.items():
            raw = environ.get(env_name)
            if raw is not None and raw.strip():
                endpoints[key] = raw.strip()
        values['endpoints'] = endpoints

        for attr, cast in (('replay_window', int), ('timeout', float)):
            if attr in values:
                try:
                    values[attr] = cast(values[attr])
                except ValueError:
                    raise ConfigurationError(f"{attr} must be numeric, got {values[attr]!r}")

        values.update(overrides)
        values.setdefault('merchant_id', '')
        values.setdefault('api_key', '')
        values.setdefault('api_secret', '')
        return cls(**values).validate()
