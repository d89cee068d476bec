# =============================================================================
# Core Module
# =============================================================================
# Domain models for the mail task. These are plain dataclasses with no
# dependencies outside the standard library, so every other layer can
# import them freely.
#
#   - SmtpConfig / SmtpOrigin: one SMTP endpoint and where it came from
#   - MailDefaults: process-wide subject/sender fallbacks
#   - AttachmentSpec: a workspace file to attach
#   - ResolvedMailParams: everything needed for one send
# =============================================================================

from mailtask.core.mail import (
    DEFAULT_CONTENT_TYPE,
    AttachmentSpec,
    MailDefaults,
    ResolvedMailParams,
    default_filename,
)
from mailtask.core.smtp_config import SmtpConfig, SmtpOrigin

__all__ = [
    "SmtpConfig",
    "SmtpOrigin",
    "MailDefaults",
    "AttachmentSpec",
    "ResolvedMailParams",
    "DEFAULT_CONTENT_TYPE",
    "default_filename",
]
