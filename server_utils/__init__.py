"""Static helpers describing the runtime, environment, web server and host of a site"""
from .environment import Environment, EnvironmentType
from .runtime import Runtime
from .server import Server, ServerInfo, ServerType
from .system import DiskSpaceInfo, LoadAverage, System

__version__ = "1.0.0"

__all__ = [
    'Runtime',
    'Environment',
    'EnvironmentType',
    'Server',
    'ServerInfo',
    'ServerType',
    'System',
    'DiskSpaceInfo',
    'LoadAverage'
]
