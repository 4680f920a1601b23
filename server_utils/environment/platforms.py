"""Managed hosting platform probes.

Probes are not mutually exclusive, so HOSTING_PLATFORMS is evaluated in
order and the first match wins.
"""
import logging
import socket
from typing import Callable, Optional, Sequence, Tuple
from ..utils.request import get_server_var, has_server_var
from ..utils.settings import constant, defined, get_setting, is_truthy
from ..utils.symbols import class_exists, symbol_exists

logger = logging.getLogger(__name__)

PlatformProbe = Tuple[str, Callable[[], bool]]


def get_hostname() -> Optional[str]:
    """Get the machine hostname, or None if it cannot be read"""
    try:
        return socket.gethostname() or None
    except OSError as e:
        logger.debug(f"Cannot read hostname: {e}")
        return None


def is_wordpress_com() -> bool:
    return defined('IS_WPCOM') and is_truthy(constant('IS_WPCOM'))


def is_wp_engine() -> bool:
    return (defined('WPE_APIKEY') or
            class_exists('wpe.WpeCommon') or
            has_server_var('IS_WPE'))


def is_kinsta() -> bool:
    return (has_server_var('KINSTA_CACHE_ZONE') or
            defined('KINSTAMU_VERSION'))


def is_siteground() -> bool:
    return (has_server_var('SG_CACHEPRESS_SUPERCACHER') or
            symbol_exists('sg_cachepress.purge_cache', import_missing=False))


def is_cloudways() -> bool:
    return (has_server_var('cw_allowed_ip') or
            'cloudways' in (get_hostname() or ''))


def is_pantheon() -> bool:
    return get_setting('PANTHEON_ENVIRONMENT') is not None


def is_flywheel() -> bool:
    return (defined('FLYWHEEL_CONFIG_DIR') or
            'Flywheel' in (get_server_var('SERVER_SOFTWARE') or ''))


HOSTING_PLATFORMS: Tuple[PlatformProbe, ...] = (
    ('WordPress.com', is_wordpress_com),
    ('WP Engine', is_wp_engine),
    ('Kinsta', is_kinsta),
    ('SiteGround', is_siteground),
    ('Cloudways', is_cloudways),
    ('Pantheon', is_pantheon),
    ('Flywheel', is_flywheel),
)


def detect_hosting_platform(probes: Sequence[PlatformProbe] = HOSTING_PLATFORMS) -> Optional[str]:
    """Return the label of the first probe that matches"""
    for platform, probe in probes:
        if probe():
            logger.debug(f"Hosting platform detected: {platform}")
            return platform
    return None
