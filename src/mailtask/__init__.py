# =============================================================================
# mailtask: the mail-sending task of a workflow engine
# =============================================================================
#
# Given a task's parameters, mailtask resolves which SMTP server to use,
# composes a MIME email (plain text or HTML, optional attachments) and sends
# it.
#
# Features:
#   - Task-supplied or operator-supplied SMTP endpoint, never a mix of both
#   - Secret-store backed credentials (system keyring)
#   - Implicit TLS or opportunistic STARTTLS
#   - Attachments from the task's workspace
#   - TOML system configuration, XDG Base Directory compliant
#
# =============================================================================

__version__ = "0.1.0"
__app_name__ = "mailtask"

# Main entry point - this is what gets called by the 'mailtask' command
from mailtask.app import main

__all__ = ["main", "__version__", "__app_name__"]
