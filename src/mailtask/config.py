# =============================================================================
# System Configuration
# =============================================================================
# Loads the operator's process-wide mail configuration.
#
# XDG Base Directory Compliance (https://specifications.freedesktop.org/basedir-spec/):
#   - Config:  $XDG_CONFIG_HOME/mailtask/config.toml
#              (default: ~/.config/mailtask/config.toml)
#
# Recognized keys (either as a [config.mail] table or as flat dotted keys):
#   config.mail.from       Default sender
#   config.mail.subject    Default subject
#   config.mail.host       System SMTP host (enables the system endpoint)
#   config.mail.port       Required when host is set
#   config.mail.tls        STARTTLS, default true
#   config.mail.ssl        Implicit TLS, default false
#   config.mail.debug      Protocol tracing, default false
#   config.mail.username   Optional login
#   config.mail.password   Optional password
#
# The result is a frozen SystemConfig built once at startup and handed to
# every task invocation. Nothing mutates it afterwards.
# =============================================================================

import logging
import os
import tomllib  # Built into Python 3.11+
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import tomli_w  # For writing TOML (tomllib is read-only)

from mailtask.core import MailDefaults, SmtpConfig, SmtpOrigin
from mailtask.errors import ConfigurationError, MailTaskError
from mailtask.values import as_bool, as_int, as_str

logger = logging.getLogger(__name__)


# =============================================================================
# XDG Directory Management
# =============================================================================

# Application identifier used in XDG paths and keyring service names
APP_NAME = "mailtask"

# Prefix of every system mail key
MAIL_PREFIX = "config.mail"


def get_xdg_config_home() -> Path:
    """
    Returns the XDG config directory for mailtask.

    Respects $XDG_CONFIG_HOME if set, otherwise uses ~/.config/mailtask/
    """
    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        base = Path(xdg_config)
    else:
        base = Path.home() / ".config"
    return base / APP_NAME


def default_config_path() -> Path:
    """Returns the path to the default system config file."""
    return get_xdg_config_home() / "config.toml"


# =============================================================================
# Configuration Data Structures
# =============================================================================

@dataclass(frozen=True)
class SystemConfig:
    """
    Process-wide, read-only mail configuration.

    Attributes:
        mail_defaults: Fallback subject and sender for every task.
        smtp: The operator's SMTP endpoint, or None if config.mail.host
              isn't set. Its credentials are only ever used together with
              its own host.

    Usage:
        >>> config = SystemConfig.load()
        >>> config.smtp.host
        'smtp.internal.example.com'
    """
    mail_defaults: MailDefaults = field(default_factory=MailDefaults)
    smtp: SmtpConfig | None = None

    # -------------------------------------------------------------------------
    # Loading and Saving
    # -------------------------------------------------------------------------

    @classmethod
    def load(cls, path: Path | None = None) -> "SystemConfig":
        """
        Load configuration from a TOML file.

        If the file doesn't exist, returns an empty configuration (no
        defaults, no system SMTP endpoint).

        Args:
            path: Config file to read. Defaults to the XDG location.

        Raises:
            ConfigError: If the file exists but is invalid.
        """
        config_path = path or default_config_path()

        if not config_path.exists():
            logger.debug(f"No system config at {config_path}, using empty defaults")
            return cls()

        try:
            with open(config_path, "rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid config file {config_path}: {e}") from e

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SystemConfig":
        """
        Create a SystemConfig from a dictionary (parsed TOML).

        Raises:
            ConfigError: If a value has the wrong type, or host is set
                         without a port.
        """
        try:
            subject = _optional(data, "subject", as_str)
            from_address = _optional(data, "from", as_str)
            smtp = _system_smtp_config(data)
        except ConfigurationError as e:
            raise ConfigError(f"Invalid system mail configuration: {e}") from e

        config = cls(
            mail_defaults=MailDefaults(subject=subject, from_address=from_address),
            smtp=smtp,
        )
        if smtp is not None:
            logger.info(f"System SMTP endpoint configured: {smtp}")
        return config

    def save(self, path: Path | None = None) -> Path:
        """
        Write this configuration as TOML.

        Creates the parent directory if it doesn't exist.

        Returns:
            The path written to.
        """
        config_path = path or default_config_path()
        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, "wb") as f:
            tomli_w.dump(self.to_dict(), f)

        return config_path

    def to_dict(self) -> dict[str, Any]:
        """
        Convert to the nested [config.mail] layout for TOML serialization.

        TOML has no null, so unset values are left out.
        """
        mail: dict[str, Any] = {}

        if self.mail_defaults.from_address is not None:
            mail["from"] = self.mail_defaults.from_address
        if self.mail_defaults.subject is not None:
            mail["subject"] = self.mail_defaults.subject

        if self.smtp is not None:
            mail["host"] = self.smtp.host
            mail["port"] = self.smtp.port
            mail["tls"] = self.smtp.start_tls
            mail["ssl"] = self.smtp.ssl
            mail["debug"] = self.smtp.debug
            if self.smtp.username is not None:
                mail["username"] = self.smtp.username
            if self.smtp.password is not None:
                mail["password"] = self.smtp.password

        return {"config": {"mail": mail}}


def _lookup(data: dict[str, Any], key: str) -> Any:
    """
    Find ``config.mail.<key>`` as a flat dotted key or in nested tables.

    Returns None if absent.
    """
    dotted = f"{MAIL_PREFIX}.{key}"
    if dotted in data:
        return data[dotted]

    node: Any = data
    for part in dotted.split("."):
        if not isinstance(node, dict) or part not in node:
            return None
        node = node[part]
    return node


def _optional(data: dict[str, Any], key: str, convert) -> Any:
    value = _lookup(data, key)
    if value is None:
        return None
    return convert(f"{MAIL_PREFIX}.{key}", value)


def _system_smtp_config(data: dict[str, Any]) -> SmtpConfig | None:
    """
    Build the system SMTP endpoint, or None if no system host is set.

    Every field here comes from the system configuration only.
    """
    host = _optional(data, "host", as_str)
    if host is None:
        return None

    port = _optional(data, "port", as_int)
    if port is None:
        raise ConfigurationError(f"{MAIL_PREFIX}.port is required when {MAIL_PREFIX}.host is set")

    start_tls = _optional(data, "tls", as_bool)
    ssl = _optional(data, "ssl", as_bool)
    debug = _optional(data, "debug", as_bool)

    return SmtpConfig(
        host=host,
        port=port,
        start_tls=True if start_tls is None else start_tls,
        ssl=False if ssl is None else ssl,
        debug=False if debug is None else debug,
        username=_optional(data, "username", as_str),
        password=_optional(data, "password", as_str),
        origin=SmtpOrigin.SYSTEM,
    )


# =============================================================================
# Exceptions
# =============================================================================

class ConfigError(MailTaskError):
    """Raised when there's an error loading or parsing system configuration."""
    pass


# =============================================================================
# Utility Functions
# =============================================================================

def print_paths() -> None:
    """
    Print config paths for debugging.
    Useful for operators wondering where the system config is read from.
    """
    print(f"Config:       {get_xdg_config_home()}")
    print(f"Config file:  {default_config_path()}")
