"""
Server-side lookup of merchant secrets. Secret values are never logged.
"""

from types import MappingProxyType
from typing import Iterable, Mapping, Optional

import structlog

from .config import GatewayConfig

logger = structlog.get_logger(__name__)


class SecretStore:
    """
    Read-mostly mapping of merchant id to API secret.

    Readers always see one complete snapshot: replace() builds a new frozen
    mapping and swaps it in with a single reference assignment.
    """

    def __init__(self, secrets: Optional[Mapping[str, str]] = None):
        self._secrets = self._freeze(secrets or {})

    @staticmethod
    def _freeze(secrets: Mapping[str, str]) -> Mapping[str, str]:
        return MappingProxyType({
            str(merchant_id): secret
            for merchant_id, secret in secrets.items()
            if merchant_id and secret
        })

    @classmethod
    def from_config(cls, *configs: GatewayConfig) -> 'SecretStore':
        return cls({config.merchant_id: config.api_secret for config in configs})

    def get(self, merchant_id: str) -> Optional[str]:
        return self._secrets.get(merchant_id)

    __call__ = get

    def replace(self, secrets: Mapping[str, str]) -> None:
        """Atomically swap in a new set of secrets (rotation)."""
        snapshot = self._freeze(secrets)
        self._secrets = snapshot
        logger.info("Merchant secrets rotated", merchants=len(snapshot))

    def merchants(self) -> Iterable[str]:
        return tuple(self._secrets)

    def __contains__(self, merchant_id) -> bool:
        return merchant_id in self._secrets

    def __len__(self) -> int:
        return len(self._secrets)

    def __repr__(self):
        return f"SecretStore(merchants={len(self._secrets)})"
