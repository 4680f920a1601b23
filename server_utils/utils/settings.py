"""Process-defined constants and the named runtime setting accessor.

Constants are values the hosting application defines once at startup
(``define('WP_DEBUG', True)``). A named setting is looked up in the
environment first and falls back to the constant of the same name.
"""
import os
import threading
from typing import Any, Dict, Optional

_TRUTHY = {"1", "true", "on", "yes"}

_constants: Dict[str, Any] = {}
_lock = threading.Lock()


def define(name: str, value: Any) -> bool:
    """Define a constant. Returns False if it was already defined."""
    with _lock:
        if name in _constants:
            return False
        _constants[name] = value
        return True


def defined(name: str) -> bool:
    """Check if a constant is defined"""
    return name in _constants


def constant(name: str, default: Any = None) -> Any:
    """Get the value of a constant"""
    return _constants.get(name, default)


def undefine(name: str) -> None:
    """Remove a constant"""
    with _lock:
        _constants.pop(name, None)


def clear_constants() -> None:
    """Remove every constant"""
    with _lock:
        _constants.clear()


def get_setting(name: str, default: Any = None) -> Any:
    """Get a named setting: non-empty environment variable first, then constant"""
    value = os.environ.get(name)
    if value:
        return value
    if defined(name):
        return constant(name)
    return default


def is_truthy(value: Any) -> bool:
    """Interpret a setting value as a boolean"""
    if isinstance(value, str):
        return value.strip().lower() in _TRUTHY
    return bool(value)


def setting_equals(name: str, expected: str) -> bool:
    """Check if a named setting equals a value, ignoring case"""
    value: Optional[Any] = get_setting(name)
    if not value or not isinstance(value, str):
        return False
    return value.lower() == expected.lower()
