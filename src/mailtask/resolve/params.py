# =============================================================================
# Task Parameters
# =============================================================================
# Read access to one task invocation's parameters, filtered through the
# mail secret-access declaration.
#
# Lookup order for a key:
#   1. the "mail" secret scope, if the key may be read as a secret
#   2. the task's own parameter of that name
#   3. the same key inside the task's "mail" table (exported defaults)
#
# "password" is secret-only: get("password") never returns a plain task
# parameter. The one place allowed to look at a plain password is the
# deprecated compatibility branch in the resolver, via plain_only().
# =============================================================================

from collections.abc import Mapping
from typing import Any

from mailtask.secrets import SecretAccessList, SecretProvider

# Keys under this name in the task parameters act as defaults for the task
MAIL_SCOPE = "mail"

MAIL_SECRET_ACCESS = SecretAccessList(
    scope=MAIL_SCOPE,
    secret_access=frozenset({"host", "port", "tls", "ssl", "username"}),
    secret_only_access=frozenset({"password"}),
)


class TaskParams:
    """
    Parameters of one task invocation.

    Usage:
        >>> params = TaskParams({"to": "a@example.com"}, MappingSecretProvider())
        >>> params.get("to")
        'a@example.com'

    Attributes:
        raw: The task parameters exactly as the engine passed them.
        secrets: Secret provider for the "mail" scope.
        access: Which keys may come from secrets and which from parameters.
    """

    def __init__(
        self,
        raw: Mapping[str, Any],
        secrets: SecretProvider,
        access: SecretAccessList = MAIL_SECRET_ACCESS,
    ) -> None:
        self.raw = raw
        self.secrets = secrets
        self.access = access

    def get(self, key: str) -> Any:
        """Return the value for key following the lookup order, or None."""
        if self.access.allows_secret(key):
            secret = self.secrets.get_secret(key)
            if secret is not None:
                return secret

        if self.access.allows_plain(key):
            return self.plain_only(key)

        return None

    def plain_only(self, key: str) -> Any:
        """
        Return the plain task parameter for key, ignoring secrets and the
        access declaration.
        """
        if key in self.raw:
            return self.raw[key]

        scoped = self.raw.get(MAIL_SCOPE)
        if isinstance(scoped, Mapping):
            return scoped.get(key)

        return None

    def template_params(self) -> dict[str, Any]:
        """Variables made available to the body template."""
        return dict(self.raw)
