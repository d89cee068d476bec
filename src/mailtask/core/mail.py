# =============================================================================
# Mail Models
# =============================================================================
# Value objects that carry one email from resolution to transmission:
#   - MailDefaults: process-wide fallbacks for subject and sender
#   - AttachmentSpec: a workspace file to attach
#   - ResolvedMailParams: everything needed for exactly one send
#
# All of these are frozen. MailDefaults lives for the whole process and is
# shared by every task invocation; the others are built per invocation and
# thrown away once the message is sent.
# =============================================================================

from dataclasses import dataclass, field

from mailtask.core.smtp_config import SmtpConfig


# Used when an attachment doesn't declare its own content type
DEFAULT_CONTENT_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class MailDefaults:
    """
    Process-wide defaults, read from ``config.mail.subject`` and
    ``config.mail.from`` at startup.

    Attributes:
        subject: Subject used when a task doesn't set one.
        from_address: Sender used when a task doesn't set one.
    """
    subject: str | None = None
    from_address: str | None = None


@dataclass(frozen=True)
class AttachmentSpec:
    """
    A file from the task's workspace to attach to the message.

    Attributes:
        path: Location of the file, relative to the workspace root.
        content_type: MIME type the part is tagged with.
        filename: Name presented to the recipient. Defaults to the last
                  segment of ``path``.

    Example:
        >>> AttachmentSpec(path="reports/q1.csv").filename
        'q1.csv'
    """
    path: str
    content_type: str = DEFAULT_CONTENT_TYPE
    filename: str = ""

    def __post_init__(self) -> None:
        if not self.filename:
            # Frozen dataclass, so go through object.__setattr__
            object.__setattr__(self, "filename", default_filename(self.path))


def default_filename(path: str) -> str:
    """Return the text after the last ``/`` in path, or path itself."""
    return path.rsplit("/", 1)[-1]


@dataclass(frozen=True)
class ResolvedMailParams:
    """
    The fully resolved inputs of a single send.

    Attributes:
        to: Primary recipients, in the order the task listed them.
        from_address: Sender, used for both From and Sender headers.
        subject: Subject line.
        is_html: Tag the body as text/html instead of text/plain.
        body: Rendered body text.
        smtp: The one SMTP endpoint this message goes through.
        attachments: Workspace files to attach, in order.
    """
    to: list[str]
    from_address: str
    subject: str
    is_html: bool
    body: str
    smtp: SmtpConfig
    attachments: list[AttachmentSpec] = field(default_factory=list)
