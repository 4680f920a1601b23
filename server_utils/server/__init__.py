"""Web server software detection and capabilities"""
from .identity import SERVER_TYPES, Server, ServerInfo, ServerType
from .modules import list_apache_modules

__all__ = [
    'Server',
    'ServerInfo',
    'ServerType',
    'SERVER_TYPES',
    'list_apache_modules'
]
