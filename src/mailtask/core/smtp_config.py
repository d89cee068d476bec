# =============================================================================
# SMTP Configuration Model
# =============================================================================
# Describes one SMTP endpoint: where to connect, how to secure the
# connection, and (optionally) which credentials to present.
#
# IMPORTANT: A single SmtpConfig always comes from exactly one origin. It is
# either built entirely from the task's own parameters/secrets (USER) or it
# is the operator's system configuration (SYSTEM). Fields are never merged
# across the two, otherwise a task could point a trusted username/password
# at a host it controls.
# =============================================================================

from dataclasses import dataclass, field
from enum import Enum


class SmtpOrigin(Enum):
    """Where an SmtpConfig was sourced from."""
    USER = "user"       # Task parameters and the task's secret scope
    SYSTEM = "system"   # Operator configuration loaded at startup


@dataclass(frozen=True)
class SmtpConfig:
    """
    A complete, immutable SMTP endpoint description.

    Attributes:
        host: Hostname of the SMTP server.
        port: Port to connect to. Common values:
              - 25 for relay without encryption
              - 465 for implicit TLS (ssl=True)
              - 587 for submission with STARTTLS
        start_tls: Negotiate STARTTLS when the server offers it.
        ssl: Use TLS from the moment the socket connects (implicit TLS).
        debug: Trace the SMTP conversation to the log.
        username: Login name. None means an anonymous session.
        password: Login password. Hidden from repr so it never ends up in logs.
        origin: Which source produced this config.
    """
    host: str
    port: int
    start_tls: bool = True
    ssl: bool = False
    debug: bool = False
    username: str | None = None
    password: str | None = field(default=None, repr=False)
    origin: SmtpOrigin = SmtpOrigin.USER

    @property
    def authenticated(self) -> bool:
        """True if a login will be attempted for this endpoint."""
        return self.username is not None

    def __str__(self) -> str:
        """Human-readable endpoint, e.g. ``smtp.example.com:587 (system)``."""
        return f"{self.host}:{self.port} ({self.origin.value})"
