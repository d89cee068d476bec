# =============================================================================
# Message Composer
# =============================================================================
# Builds the MIME message for a resolved send.
#
# Structure:
#   - no attachments:  a single text/plain or text/html part (UTF-8)
#   - attachments:     multipart/mixed
#                        ├── text/plain or text/html body (UTF-8)
#                        └── one base64 part per attachment, in order
#
# Attachment bytes are read from the workspace; nothing is written back.
# =============================================================================

import logging
from email.encoders import encode_base64
from email.message import Message
from email.mime.base import MIMEBase
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formatdate, make_msgid, parseaddr

from mailtask import __app_name__
from mailtask.core import AttachmentSpec, ResolvedMailParams
from mailtask.errors import AttachmentReadError
from mailtask.workspace import Workspace

logger = logging.getLogger(__name__)


class MessageComposer:
    """
    Turns ResolvedMailParams into a MIME message ready for transmission.

    Usage:
        >>> composer = MessageComposer()
        >>> message = composer.compose(resolved, workspace)
        >>> message["To"]
        'a@example.com, b@example.com'
    """

    def compose(self, mail: ResolvedMailParams, workspace: Workspace) -> Message:
        """
        Build the message.

        Raises:
            AttachmentReadError: If an attachment can't be read.
        """
        subtype = "html" if mail.is_html else "plain"

        if not mail.attachments:
            msg: Message = MIMEText(mail.body, subtype, "utf-8")
        else:
            msg = MIMEMultipart("mixed")
            msg.attach(MIMEText(mail.body, subtype, "utf-8"))
            for attachment in mail.attachments:
                msg.attach(self._attachment_part(attachment, workspace))

        # Set headers
        msg["From"] = mail.from_address
        msg["Sender"] = mail.from_address
        msg["To"] = ", ".join(mail.to)
        msg["Subject"] = mail.subject
        msg["Date"] = formatdate(localtime=True)
        msg["Message-ID"] = make_msgid(domain=_domain_of(mail.from_address))

        # User agent
        msg["X-Mailer"] = __app_name__

        logger.debug(
            f"Composed {msg.get_content_type()} message {msg['Message-ID']} "
            f"with {len(mail.attachments)} attachment(s)"
        )
        return msg

    def _attachment_part(self, attachment: AttachmentSpec, workspace: Workspace) -> MIMEBase:
        try:
            data = workspace.read_bytes(attachment.path)
        except OSError as e:
            raise AttachmentReadError(attachment.path, str(e)) from e

        maintype, subtype = attachment.content_type.split("/", 1)
        part = MIMEBase(maintype, subtype)
        part.set_payload(data)
        encode_base64(part)
        part.add_header(
            "Content-Disposition",
            "attachment",
            filename=attachment.filename,
        )
        return part


def _domain_of(address: str) -> str | None:
    """Domain part of an address (display name allowed), for Message-ID."""
    _, addr = parseaddr(address)
    if "@" not in addr:
        return None
    return addr.rsplit("@", 1)[1]
