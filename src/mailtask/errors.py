# =============================================================================
# Errors
# =============================================================================
# Exception hierarchy for the mail task.
#
#   MailTaskError
#   ├── ConfigurationError            (bad task/system configuration)
#   │   ├── MissingSmtpConfigurationError
#   │   ├── MissingRequiredFieldError
#   │   ├── InvalidAddressError
#   │   └── InvalidParameterError
#   ├── AttachmentReadError           (workspace file could not be read)
#   ├── BodyTemplateError             (body template could not be read)
#   └── TaskExecutionError            (the single failure reported to the host)
#
# Everything raised while running a task ends up wrapped in a
# TaskExecutionError by the MailSender.
# =============================================================================

from typing import Any


class MailTaskError(Exception):
    """Base exception for the mail task."""
    pass


class ConfigurationError(MailTaskError):
    """Raised when task or system configuration is unusable. Never retried."""
    pass


class MissingSmtpConfigurationError(ConfigurationError):
    """Raised when neither the task nor the system provides an SMTP host."""

    def __init__(self, message: str = "Missing SMTP configuration") -> None:
        super().__init__(message)


class MissingRequiredFieldError(ConfigurationError):
    """Raised when a required field has no value and no fallback."""

    def __init__(self, field: str, message: str | None = None) -> None:
        self.field = field
        super().__init__(message or f"Parameter '{field}' is required but not set")


class InvalidAddressError(ConfigurationError):
    """Raised when an email address is not of the form local-part@domain."""

    def __init__(self, address: Any) -> None:
        self.address = address
        super().__init__(f"Invalid address: {address!r}")


class InvalidParameterError(ConfigurationError):
    """Raised when a parameter is present but has the wrong type or shape."""

    def __init__(self, key: str, message: str) -> None:
        self.key = key
        super().__init__(f"Invalid parameter '{key}': {message}")


class AttachmentReadError(MailTaskError):
    """Raised when an attachment can't be loaded from the workspace."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        super().__init__(f"Failed to read attachment '{path}': {reason}")


class BodyTemplateError(MailTaskError):
    """Raised when the body template file can't be read."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        super().__init__(f"Failed to read body template '{path}': {reason}")


class TaskExecutionError(MailTaskError):
    """
    The single failure channel reported back to the workflow engine.

    Attributes:
        kind: Error classification: "configuration", "attachment",
              "template" or "transport".
        cause: The original exception, if any.
    """

    # Only transport failures may succeed on a later attempt
    RETRYABLE_KINDS = frozenset({"transport"})

    def __init__(self, kind: str, message: str, cause: BaseException | None = None) -> None:
        self.kind = kind
        self.cause = cause
        super().__init__(message)

    @property
    def retryable(self) -> bool:
        """Whether the host engine may retry the task."""
        return self.kind in self.RETRYABLE_KINDS

    def error_config(self) -> dict[str, Any]:
        """
        Structured payload for the host engine's error reporting.

        Example:
            >>> TaskExecutionError("transport", "Connection refused").error_config()
            {'kind': 'transport', 'message': 'Connection refused', 'retryable': True}
        """
        config: dict[str, Any] = {
            "kind": self.kind,
            "message": str(self),
            "retryable": self.retryable,
        }
        if self.cause is not None:
            config["cause"] = {
                "type": type(self.cause).__name__,
                "message": str(self.cause),
            }
        return config
