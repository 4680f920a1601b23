"""Request metadata ("server vars") for the current context.

Outside a request the process environment is used, which is where CGI
and most WSGI servers publish SERVER_SOFTWARE and HTTP_* values. Inside
a request the server sets its own mapping with ``server_vars()``.
"""
import os
from contextlib import contextmanager
from contextvars import ContextVar, Token
from typing import Iterator, Mapping, Optional

_server_vars: ContextVar[Optional[Mapping[str, str]]] = ContextVar("server_vars", default=None)


def get_server_vars() -> Mapping[str, str]:
    """Get the server vars for the current context"""
    values = _server_vars.get()
    return values if values is not None else os.environ


def get_server_var(name: str, default: Optional[str] = None) -> Optional[str]:
    """Get a single server var"""
    return get_server_vars().get(name, default)


def has_server_var(name: str) -> bool:
    """Check if a server var is set"""
    return name in get_server_vars()


def set_server_vars(values: Mapping[str, str]) -> Token:
    """Use the given server vars in the current context until reset"""
    return _server_vars.set(values)


def reset_server_vars(token: Token) -> None:
    _server_vars.reset(token)


@contextmanager
def server_vars(values: Mapping[str, str]) -> Iterator[Mapping[str, str]]:
    """Use the given server vars for the duration of the block"""
    token = set_server_vars(values)
    try:
        yield values
    finally:
        reset_server_vars(token)


def header_to_server_var(header: str) -> str:
    """Translate an HTTP header name to its CGI name, e.g. cf-ray -> HTTP_CF_RAY"""
    return "HTTP_" + header.upper().replace("-", "_")
