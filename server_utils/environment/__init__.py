"""Environment type, hosting platform and container detection"""
from .detection import Environment, EnvironmentType
from .platforms import HOSTING_PLATFORMS, detect_hosting_platform

__all__ = [
    'Environment',
    'EnvironmentType',
    'HOSTING_PLATFORMS',
    'detect_hosting_platform'
]
