# =============================================================================
# Precedence
# =============================================================================
# Ordered fallback chains such as
#
#     task subject  >  system default subject  >  error
#
# are expressed as a call to first_present(), which returns a tagged result
# instead of raising. That keeps the order itself testable; callers decide
# when a MissingRequired becomes an error by passing it to require().
# =============================================================================

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from mailtask.errors import MissingRequiredFieldError

T = TypeVar("T")


@dataclass(frozen=True)
class Present(Generic[T]):
    """A value was found."""
    value: T


@dataclass(frozen=True)
class MissingRequired:
    """No candidate had a value for a required field."""
    field: str


def first_present(field: str, *candidates: Any) -> Present[Any] | MissingRequired:
    """
    Return the first candidate that isn't None.

    Args:
        field: Name of the field being resolved (used in MissingRequired).
        *candidates: Values in decreasing order of precedence.

    Example:
        >>> first_present("subject", None, "Report")
        Present(value='Report')
        >>> first_present("subject", None, None)
        MissingRequired(field='subject')
    """
    for candidate in candidates:
        if candidate is not None:
            return Present(candidate)
    return MissingRequired(field)


def require(result: Present[T] | MissingRequired) -> T:
    """
    Unwrap a precedence result.

    Raises:
        MissingRequiredFieldError: If result is MissingRequired.
    """
    if isinstance(result, MissingRequired):
        raise MissingRequiredFieldError(result.field)
    return result.value
