# =============================================================================
# Resolve Module
# =============================================================================
# Configuration resolution for a single task invocation:
#   - TaskParams: parameter/secret lookup under the mail access declaration
#   - first_present / require: explicit precedence chains
#   - ConfigResolver: SMTP endpoint selection and mail field resolution
# =============================================================================

from mailtask.resolve.params import MAIL_SECRET_ACCESS, TaskParams
from mailtask.resolve.precedence import MissingRequired, Present, first_present, require
from mailtask.resolve.resolver import (
    ConfigResolver,
    select_smtp_config,
    user_smtp_config,
    validate_address,
)

__all__ = [
    "MAIL_SECRET_ACCESS",
    "TaskParams",
    "Present",
    "MissingRequired",
    "first_present",
    "require",
    "ConfigResolver",
    "select_smtp_config",
    "user_smtp_config",
    "validate_address",
]
