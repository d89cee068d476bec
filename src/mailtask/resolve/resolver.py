# =============================================================================
# Configuration Resolver
# =============================================================================
# Turns one task's parameters, its secrets and the process-wide system
# configuration into the inputs of exactly one send.
#
# SMTP endpoint selection is the security-sensitive part:
#
#     user candidate   built only if the task (params or secrets) sets "host"
#     system candidate built at startup only if config.mail.host is set
#     result           user candidate, else system candidate, else error
#
# The two candidates are never combined. A task that only sets
# username/password gets the system endpoint with the system credentials,
# and a task that sets its own host never sees the system credentials.
# =============================================================================

import logging
import re
from collections.abc import Mapping, Sequence
from email.utils import getaddresses
from typing import Any

from mailtask.config import SystemConfig
from mailtask.core import (
    DEFAULT_CONTENT_TYPE,
    AttachmentSpec,
    MailDefaults,
    ResolvedMailParams,
    SmtpConfig,
    SmtpOrigin,
)
from mailtask.errors import (
    InvalidAddressError,
    InvalidParameterError,
    MissingRequiredFieldError,
    MissingSmtpConfigurationError,
)
from mailtask.resolve.params import TaskParams
from mailtask.resolve.precedence import first_present, require
from mailtask.values import as_bool, as_int, as_str

logger = logging.getLogger(__name__)

# local-part@domain, no whitespace, exactly one "@"
_ADDRESS_RE = re.compile(r"[^@\s<>,;]+@[^@\s<>,;.][^@\s<>,;]*")

# type/subtype, e.g. text/csv
_CONTENT_TYPE_RE = re.compile(r"[\w.+-]+/[\w.+-]+")

# Connection keys that only make sense together with "host"
_USER_SMTP_KEYS = ("port", "tls", "ssl", "username", "password")


# =============================================================================
# SMTP Endpoint
# =============================================================================

def user_smtp_config(params: TaskParams) -> SmtpConfig | None:
    """
    Build the task's own SMTP endpoint.

    Returns None when the task doesn't set "host". Every field of the
    returned config comes from the task's parameters or its secret scope;
    optional fields take their built-in defaults, never system values.

    Raises:
        MissingRequiredFieldError: If host is set but port isn't.
        InvalidParameterError: If a value has the wrong type.
    """
    host = params.get("host")
    if host is None:
        return None
    host = as_str("host", host)

    port = params.get("port")
    if port is None:
        raise MissingRequiredFieldError("port", "Parameter 'port' is required when 'host' is set")

    username = params.get("username")
    password = params.get("password")
    deprecated_password = _deprecated_plain_password(params)
    if password is None:
        password = deprecated_password

    return SmtpConfig(
        host=host,
        port=as_int("port", port),
        start_tls=_flag(params, "tls", default=True),
        ssl=_flag(params, "ssl", default=False),
        debug=_flag(params, "debug", default=False),
        username=None if username is None else as_str("username", username),
        password=None if password is None else as_str("password", password),
        origin=SmtpOrigin.USER,
    )


def _deprecated_plain_password(params: TaskParams) -> Any:
    """
    Compatibility branch: a plain "password" task parameter.

    Passwords belong in the secret store. The plain parameter is still
    honoured when no secret is set, but always logs a warning.
    """
    password = params.plain_only("password")
    if password is not None:
        logger.warning(
            "Unsecure 'password' parameter is deprecated. "
            "Store the SMTP password as the 'mail.password' secret instead."
        )
    return password


def select_smtp_config(user: SmtpConfig | None, system: SmtpConfig | None) -> SmtpConfig:
    """
    Pick exactly one endpoint: the user's if there is one, else the system's.

    Raises:
        MissingSmtpConfigurationError: If neither exists.
    """
    if user is not None:
        return user
    if system is not None:
        return system
    raise MissingSmtpConfigurationError()


def _flag(params: TaskParams, key: str, default: bool) -> bool:
    value = params.get(key)
    if value is None:
        return default
    return as_bool(key, value)


def _header_text(key: str, value: str) -> str:
    # Header values are written verbatim; a line break would start a new header
    if "\r" in value or "\n" in value:
        raise InvalidParameterError(key, "must not contain line breaks")
    return value


# =============================================================================
# Addresses
# =============================================================================

def validate_address(value: Any) -> str:
    """
    Check that value is a single address of the form local-part@domain.

    A display name is allowed (``Alice <alice@example.com>``); the value is
    returned as given, minus surrounding whitespace.

    Raises:
        InvalidAddressError: If value isn't exactly one valid address.
    """
    if not isinstance(value, str):
        raise InvalidAddressError(value)

    pairs = getaddresses([value])
    if len(pairs) != 1:
        raise InvalidAddressError(value)

    _, address = pairs[0]
    if not _ADDRESS_RE.fullmatch(address):
        raise InvalidAddressError(value)
    if "<" not in value and address != value.strip():
        # The parser dropped or rewrote part of a bare address
        raise InvalidAddressError(value)

    return value.strip()


# =============================================================================
# Resolver
# =============================================================================

class ConfigResolver:
    """
    Resolves the inputs of a send from task parameters and system config.

    The resolver holds no per-invocation state; one instance can serve
    any number of concurrent tasks.

    Usage:
        >>> resolver = ConfigResolver(SystemConfig.load())
        >>> params = TaskParams(task_params, secrets)
        >>> resolved = resolver.resolve(params, body="Hello")

    Attributes:
        system_config: Frozen process-wide configuration.
    """

    def __init__(self, system_config: SystemConfig) -> None:
        self.system_config = system_config

    @property
    def mail_defaults(self) -> MailDefaults:
        return self.system_config.mail_defaults

    def resolve(self, params: TaskParams, body: str) -> ResolvedMailParams:
        """
        Resolve everything needed for one send.

        Args:
            params: The task's parameters and secrets.
            body: Already rendered body text.

        Raises:
            ConfigurationError: If anything required is missing or invalid.
        """
        smtp = self.resolve_smtp_config(params)
        resolved = ResolvedMailParams(
            to=self.resolve_recipients(params),
            from_address=self.resolve_from(params),
            subject=self.resolve_subject(params),
            is_html=_flag(params, "html", default=False),
            body=body,
            smtp=smtp,
            attachments=self.resolve_attachments(params),
        )
        logger.debug(
            f"Resolved mail: to={resolved.to} smtp={smtp} "
            f"attachments={len(resolved.attachments)}"
        )
        return resolved

    def resolve_smtp_config(self, params: TaskParams) -> SmtpConfig:
        """
        Choose the SMTP endpoint for this task.

        Raises:
            MissingSmtpConfigurationError: If neither task nor system sets a host.
        """
        user = user_smtp_config(params)
        if user is None:
            ignored = [key for key in _USER_SMTP_KEYS if params.plain_only(key) is not None]
            if ignored:
                logger.warning(
                    f"Ignoring SMTP parameters {ignored} because 'host' is not set"
                )
        smtp = select_smtp_config(user, self.system_config.smtp)
        auth = " with authentication" if smtp.authenticated else ""
        logger.info(f"Using SMTP endpoint {smtp}{auth}")
        return smtp

    def resolve_subject(self, params: TaskParams) -> str:
        """Task subject, else the system default subject, else an error."""
        subject = params.get("subject")
        if subject is not None:
            subject = as_str("subject", subject)
        subject = require(first_present("subject", subject, self.mail_defaults.subject))
        return _header_text("subject", subject)

    def resolve_from(self, params: TaskParams) -> str:
        """Task sender, else the system default sender, else an error."""
        from_address = require(
            first_present("from", params.get("from"), self.mail_defaults.from_address)
        )
        return validate_address(from_address)

    def resolve_recipients(self, params: TaskParams) -> list[str]:
        """
        Normalize "to" into an ordered list of validated addresses.

        Accepts a single address or a list of addresses.

        Raises:
            MissingRequiredFieldError: If "to" is absent or an empty list.
            InvalidAddressError: If any entry isn't a valid address.
        """
        to = params.get("to")
        if to is None:
            raise MissingRequiredFieldError("to")

        if isinstance(to, str):
            entries: Sequence[Any] = [to]
        elif isinstance(to, Sequence):
            entries = to
        else:
            raise InvalidAddressError(to)

        if not entries:
            raise MissingRequiredFieldError("to", "Parameter 'to' must list at least one address")

        return [validate_address(entry) for entry in entries]

    def resolve_attachments(self, params: TaskParams) -> list[AttachmentSpec]:
        """
        Read the optional "attach_files" list.

        Each entry needs a "path"; "filename" defaults to the last path
        segment and "content_type" to application/octet-stream.

        Raises:
            InvalidParameterError: If the list or an entry has the wrong shape.
            MissingRequiredFieldError: If an entry has no path.
        """
        attach_files = params.get("attach_files")
        if attach_files is None:
            return []
        if isinstance(attach_files, str) or not isinstance(attach_files, Sequence):
            raise InvalidParameterError("attach_files", "expected a list of attachments")

        attachments = []
        for index, entry in enumerate(attach_files):
            key = f"attach_files[{index}]"
            if not isinstance(entry, Mapping):
                raise InvalidParameterError(key, "expected a table with at least 'path'")

            path = entry.get("path")
            if not path:
                raise MissingRequiredFieldError(f"{key}.path")
            path = _header_text(f"{key}.path", as_str(f"{key}.path", path))

            content_type = entry.get("content_type")
            if content_type is None:
                content_type = DEFAULT_CONTENT_TYPE
            elif not isinstance(content_type, str) or not _CONTENT_TYPE_RE.fullmatch(content_type):
                raise InvalidParameterError(
                    f"{key}.content_type", f"expected type/subtype, got {content_type!r}"
                )

            filename = entry.get("filename")
            attachments.append(AttachmentSpec(
                path=path,
                content_type=content_type,
                filename="" if filename is None else _header_text(
                    f"{key}.filename", as_str(f"{key}.filename", filename)
                ),
            ))

        return attachments
