# =============================================================================
# Value Coercion
# =============================================================================
# Parameters reach us from TOML files, from the workflow engine and from the
# secret store. Secrets are always strings, so a port may show up as 587 or
# as "587" and a flag as true or as "true". These helpers normalize both
# forms and reject anything else.
# =============================================================================

from typing import Any

from mailtask.errors import InvalidParameterError


_TRUE_STRINGS = frozenset({"true", "yes", "on", "1"})
_FALSE_STRINGS = frozenset({"false", "no", "off", "0"})


def as_str(key: str, value: Any) -> str:
    """Return value if it's a string, otherwise raise InvalidParameterError."""
    if not isinstance(value, str):
        raise InvalidParameterError(key, f"expected a string, got {type(value).__name__}")
    return value


def as_int(key: str, value: Any) -> int:
    """
    Coerce an integer parameter.

    Example:
        >>> as_int("port", "587")
        587
    """
    # bool is a subclass of int; `port = true` is a mistake, not 1
    if isinstance(value, bool):
        raise InvalidParameterError(key, "expected an integer, got a boolean")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    raise InvalidParameterError(key, f"expected an integer, got {value!r}")


def as_bool(key: str, value: Any) -> bool:
    """
    Coerce a boolean parameter.

    Accepts real booleans and the strings true/false, yes/no, on/off, 1/0
    (case-insensitive).
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    raise InvalidParameterError(key, f"expected a boolean, got {value!r}")
