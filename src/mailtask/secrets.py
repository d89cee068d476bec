# =============================================================================
# Secret Access
# =============================================================================
# The mail task reads SMTP settings and credentials from a secret store
# scoped to "mail". The store itself belongs to the host engine; this module
# only defines the lookup interface plus two backends:
#
#   - KeyringSecretProvider: the system keyring (production)
#   - MappingSecretProvider: an in-memory dict (tests, embedding)
#
# It also declares which keys the task may read from where. The declaration
# is handed to the host's access-control layer and is what keeps a plain
# task parameter from ever being treated as a password secret.
# =============================================================================

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Protocol

import keyring
from keyring.errors import KeyringError

from mailtask.config import APP_NAME
from mailtask.errors import ConfigurationError

logger = logging.getLogger(__name__)


class SecretProvider(Protocol):
    """Looks up secret values by key within one scope."""

    def get_secret(self, key: str) -> str | None:
        """Return the secret stored under key, or None if there isn't one."""
        ...


@dataclass(frozen=True)
class SecretAccessList:
    """
    Which keys a task may read, and from where.

    Attributes:
        scope: Secret scope, e.g. "mail".
        secret_access: Keys readable as a secret or as a plain parameter.
        secret_only_access: Keys readable only as a secret.
    """
    scope: str
    secret_access: frozenset[str]
    secret_only_access: frozenset[str]

    def allows_secret(self, key: str) -> bool:
        return key in self.secret_access or key in self.secret_only_access

    def allows_plain(self, key: str) -> bool:
        return key not in self.secret_only_access


class KeyringSecretProvider:
    """
    Reads secrets from the system keyring.

    Secrets are stored under the service name ``mailtask:<scope>`` so they
    can be managed with the keyring CLI:
        keyring set mailtask:mail password
    """

    def __init__(self, scope: str = "mail") -> None:
        self.scope = scope

    @property
    def keyring_service(self) -> str:
        return f"{APP_NAME}:{self.scope}"

    def get_secret(self, key: str) -> str | None:
        try:
            return keyring.get_password(self.keyring_service, key)
        except KeyringError as e:
            raise ConfigurationError(
                f"Secret store unavailable while reading {self.scope}.{key}: {e}"
            ) from e

    def __repr__(self) -> str:
        return f"KeyringSecretProvider(scope={self.scope!r})"


class MappingSecretProvider:
    """Serves secrets from a plain mapping. Values are never printed."""

    def __init__(self, secrets: Mapping[str, str] | None = None) -> None:
        self._secrets = dict(secrets or {})

    def get_secret(self, key: str) -> str | None:
        return self._secrets.get(key)

    def __repr__(self) -> str:
        return f"MappingSecretProvider(keys={sorted(self._secrets)!r})"
