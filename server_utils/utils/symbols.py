"""Resolve builtin and dotted names to Python objects"""
import builtins
import importlib
import inspect
import logging
import sys
from typing import Any, Optional

logger = logging.getLogger(__name__)


def resolve_symbol(name: str, import_missing: bool = True) -> Optional[Any]:
    """Resolve 'len' or 'package.module.attr' to the object it names.

    With import_missing=False only modules that are already imported are
    searched, which is how "is this class loaded" probes behave.
    """
    name = name.strip()
    if not name:
        return None

    if '.' not in name:
        return getattr(builtins, name, None)

    module_name, _, attr = name.rpartition('.')
    module = sys.modules.get(module_name)
    if module is None:
        if not import_missing:
            return None
        try:
            module = importlib.import_module(module_name)
        except ImportError as e:
            logger.debug(f"Cannot import {module_name} while resolving {name}: {e}")
            return None

    return getattr(module, attr, None)


def symbol_exists(name: str, import_missing: bool = True) -> bool:
    """Check if a name resolves to something callable"""
    return callable(resolve_symbol(name, import_missing))


def class_exists(name: str) -> bool:
    """Check if a class is loaded (never imports)"""
    return inspect.isclass(resolve_symbol(name, import_missing=False))
