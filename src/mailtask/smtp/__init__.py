# =============================================================================
# SMTP Module
# =============================================================================
# Handles composing and sending the task's email via SMTP.
#
# Features:
#   - MIME message building (plain text or HTML, attachments)
#   - Connection with implicit TLS or opportunistic STARTTLS
#   - Optional authentication
#   - Orchestration and failure reporting for one task run
# =============================================================================

from mailtask.smtp.composer import MessageComposer
from mailtask.smtp.sender import MailSender, SendResult, SendState
from mailtask.smtp.session import SessionFactory, SessionParams, SmtpSession

__all__ = [
    "MessageComposer",
    "MailSender",
    "SendResult",
    "SendState",
    "SessionFactory",
    "SessionParams",
    "SmtpSession",
]
