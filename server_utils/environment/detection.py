"""Environment type detection: localhost, staging, development or production"""
import ipaddress
import logging
import re
from enum import Enum
from typing import List, Optional, Sequence
from urllib.parse import urlsplit
from ..config import get_config
from ..utils.settings import constant, defined, get_setting, is_truthy, setting_equals
from . import platforms, virtualization

logger = logging.getLogger(__name__)


class EnvironmentType(str, Enum):
    """Environment types, in detection precedence order"""
    LOCALHOST = "localhost"
    STAGING = "staging"
    DEVELOPMENT = "development"
    PRODUCTION = "production"


LOCALHOST_DOMAINS = (
    "localhost",
    "localhost.localdomain",
    "127.0.0.1",
    "::1",
    "local.wordpress.test",
    "local.wordpress-trunk.test",
    "src.wordpress-develop.test",
    "build.wordpress-develop.test",
)

LOCAL_TLD_PATTERN = re.compile(r"\.(test|local|dev)$", re.IGNORECASE)
STAGING_HOST_PATTERN = re.compile(r"(^|\.)(staging|stage|dev|test|beta|demo)(\.|$)", re.IGNORECASE)

# Setting name -> values that mark a non-production deployment
STAGING_SETTINGS = {
    "WP_ENV": ("staging", "development"),
    "ENVIRONMENT": ("staging", "development"),
    "APP_ENV": ("staging", "development"),
    "WORDPRESS_ENV": ("staging", "development"),
}


def url_hostname(url: str) -> Optional[str]:
    """Extract the hostname of a URL; bare hostnames are accepted too"""
    url = url.strip()
    if not url:
        return None
    if "//" not in url:
        url = "//" + url
    try:
        return urlsplit(url).hostname
    except ValueError:
        return None


def is_non_routable_ip(host: str) -> bool:
    """Check if host is an IP literal outside the globally routable range.

    Hostnames that are not IP literals are not considered here at all, so
    a public domain never counts as local through this rule.
    """
    try:
        address = ipaddress.ip_address(host.strip("[]"))
    except ValueError:
        return False
    return not address.is_global


class Environment:
    """Classify the environment the site runs in"""

    platform_probes: Sequence[platforms.PlatformProbe] = platforms.HOSTING_PLATFORMS

    @classmethod
    def get_type(cls) -> EnvironmentType:
        """Get the environment type; production when nothing else matches"""
        if cls.is_localhost():
            env_type = EnvironmentType.LOCALHOST
        elif cls.is_staging():
            env_type = EnvironmentType.STAGING
        elif cls.is_development():
            env_type = EnvironmentType.DEVELOPMENT
        else:
            env_type = EnvironmentType.PRODUCTION

        logger.debug(f"Environment classified as {env_type.value}")
        return env_type

    @classmethod
    def get_site_hostnames(cls) -> List[Optional[str]]:
        """Get the distinct site and home hostnames (None when a URL is empty)"""
        config = get_config()
        hostnames = []
        for url in (config.site_url, config.home_url):
            hostname = url_hostname(url)
            if hostname not in hostnames:
                hostnames.append(hostname)
        return hostnames

    @classmethod
    def is_localhost(cls) -> bool:
        for domain in cls.get_site_hostnames():
            if not domain:
                return True

            if domain in LOCALHOST_DOMAINS:
                return True

            if LOCAL_TLD_PATTERN.search(domain):
                return True

            if is_non_routable_ip(domain):
                return True

        return False

    @classmethod
    def is_staging(cls) -> bool:
        hostname = url_hostname(get_config().site_url)
        if hostname and STAGING_HOST_PATTERN.search(hostname):
            return True

        for name, values in STAGING_SETTINGS.items():
            value = get_setting(name)
            if isinstance(value, str) and value.lower() in values:
                return True

        return defined("WP_STAGE") and constant("WP_STAGE") == "staging"

    @classmethod
    def is_development(cls) -> bool:
        if is_truthy(get_setting("WP_DEBUG", False)):
            return True

        return setting_equals("WP_ENV", "development")

    @classmethod
    def is_production(cls) -> bool:
        return not cls.is_localhost() and not cls.is_staging() and not cls.is_development()

    # Hosting platforms

    is_wordpress_com = staticmethod(platforms.is_wordpress_com)
    is_wp_engine = staticmethod(platforms.is_wp_engine)
    is_kinsta = staticmethod(platforms.is_kinsta)
    is_siteground = staticmethod(platforms.is_siteground)
    is_cloudways = staticmethod(platforms.is_cloudways)
    is_pantheon = staticmethod(platforms.is_pantheon)
    is_flywheel = staticmethod(platforms.is_flywheel)
    get_hostname = staticmethod(platforms.get_hostname)

    @classmethod
    def get_hosting_platform(cls) -> Optional[str]:
        """Get the managed hosting platform name, or None if unknown"""
        return platforms.detect_hosting_platform(cls.platform_probes)

    # Containers & virtualization

    is_docker = staticmethod(virtualization.is_docker)
    is_virtual_machine = staticmethod(virtualization.is_virtual_machine)
