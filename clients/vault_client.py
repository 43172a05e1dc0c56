"""
Vault access for the billing service's connection secrets.

Authenticates with AppRole (VAULT_ADDR, VAULT_ROLE_ID, VAULT_SECRET_ID,
optional VAULT_NAMESPACE). Reads are confined to the KV v2 'billing/'
subtree. Any misconfiguration or missing secret is fatal at startup.
"""

import os
import logging

import hvac
from hvac.exceptions import InvalidPath, Unauthorized, Forbidden

logger = logging.getLogger(__name__)

_SECRET_PREFIX = "billing"

_vault_client_instance: "VaultClient | None" = None
_secret_cache: dict[str, str] = {}


class VaultError(Exception):
    """Vault refused or could not serve a request. The service cannot start."""


class VaultClient:
    """Authenticated hvac client scoped to billing/ secrets."""

    def __init__(self, vault_addr: str | None = None, vault_namespace: str | None = None):
        """
        Raises:
            ValueError: Required environment variables are missing
            VaultError: AppRole login was rejected
        """
        self.vault_addr = vault_addr or os.getenv("VAULT_ADDR")
        if not self.vault_addr:
            raise ValueError("VAULT_ADDR environment variable is required")

        role_id = os.getenv("VAULT_ROLE_ID")
        secret_id = os.getenv("VAULT_SECRET_ID")
        if not role_id or not secret_id:
            raise ValueError("VAULT_ROLE_ID and VAULT_SECRET_ID environment variables are required")

        namespace = vault_namespace or os.getenv("VAULT_NAMESPACE")
        self.client = hvac.Client(url=self.vault_addr, **({"namespace": namespace} if namespace else {}))
        self._login(role_id, secret_id)

        if not self.client.is_authenticated():
            raise VaultError("Vault authentication failed: token not accepted after login")

        logger.info(f"Authenticated to Vault at {self.vault_addr}")

    def _login(self, role_id: str, secret_id: str) -> None:
        try:
            response = self.client.auth.approle.login(role_id=role_id, secret_id=secret_id)
        except (Unauthorized, Forbidden, InvalidPath) as e:
            logger.error(f"AppRole authentication failed: {e}")
            raise VaultError(f"AppRole authentication failed: {e}") from e

        self.client.token = response["auth"]["client_token"]

    def get_secret(self, path: str, field: str) -> str:
        """
        One field of the KV v2 secret at billing/<path>.

        Raises:
            VaultError: The path does not exist or is not readable
            KeyError: The secret has no such field
        """
        full_path = f"{_SECRET_PREFIX}/{path}"

        try:
            response = self.client.secrets.kv.v2.read_secret_version(
                path=full_path, raise_on_deleted_version=True
            )
        except InvalidPath as e:
            raise VaultError(f"Secret path '{full_path}' not found in Vault") from e
        except (Unauthorized, Forbidden) as e:
            raise VaultError(f"Access denied to secret '{full_path}': {e}") from e

        values = response["data"]["data"]
        if field not in values:
            raise KeyError(f"Field '{field}' not found in secret '{full_path}' (has: {', '.join(values)})")
        return values[field]


def _cached_secret(path: str, field: str) -> str:
    """Read through a process-wide client and cache; secrets are fetched once."""
    global _vault_client_instance

    key = f"{path}/{field}"
    if key not in _secret_cache:
        if _vault_client_instance is None:
            _vault_client_instance = VaultClient()
        _secret_cache[key] = _vault_client_instance.get_secret(path, field)
    return _secret_cache[key]


def get_database_url() -> str:
    """PostgreSQL DSN from billing/database."""
    return _cached_secret("database", "url")


def get_valkey_url() -> str:
    """Valkey URL from billing/valkey."""
    return _cached_secret("valkey", "url")
