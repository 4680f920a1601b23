"""Shared fixtures: every test starts from a clean process state"""
import pytest

from server_utils.config import get_config
from server_utils.server import Server
from server_utils.utils.settings import clear_constants

AMBIENT_VARS = (
    # Config fields
    "SITE_URL", "HOME_URL", "SITE_ROOT", "MEMORY_LIMIT", "MAX_EXECUTION_TIME",
    "UPLOAD_MAX_FILESIZE", "POST_MAX_SIZE", "MAX_INPUT_VARS", "DISABLE_FUNCTIONS",
    "FILE_UPLOADS", "ALLOW_URL_FOPEN", "NGINX_MARKERS_STR", "NGINX_XSENDFILE",
    "SERVER_SOFTWARE", "DIAGNOSTICS_PORT", "DIAGNOSTICS_HOST", "ENABLE_REQUEST_LOGGING",
    "TRUSTED_HOSTS_STR", "LOG_LEVEL", "LOG_FILE",
    # Environment signals
    "WP_ENV", "ENVIRONMENT", "APP_ENV", "WORDPRESS_ENV", "WP_DEBUG", "PANTHEON_ENVIRONMENT",
    # Server vars that CGI would publish
    "SERVER_ADDR", "SERVER_PORT", "HTTP_CF_RAY", "HTTP_CF_CONNECTING_IP", "HTTP_MOD_REWRITE",
    "IIS_UrlRewriteModule", "IS_WPE", "KINSTA_CACHE_ZONE", "SG_CACHEPRESS_SUPERCACHER", "cw_allowed_ip",
)


def _reset_state():
    get_config.cache_clear()
    clear_constants()
    Server.reset_cache()


@pytest.fixture(autouse=True)
def isolated_state(monkeypatch):
    """Clear ambient variables and process-wide caches around each test"""
    for var in AMBIENT_VARS:
        monkeypatch.delenv(var, raising=False)
    # Never shell out to a real apachectl from tests
    monkeypatch.setattr(Server, "module_lister", lambda: None)
    _reset_state()
    yield
    _reset_state()


@pytest.fixture
def configure(monkeypatch):
    """Set config values through the environment and reload the config"""
    def _configure(**values):
        for key, value in values.items():
            monkeypatch.setenv(key.upper(), str(value))
        get_config.cache_clear()
        return get_config()
    return _configure


@pytest.fixture
def site(configure):
    """Point both site and home URL at the same address"""
    def _site(url: str, **values):
        return configure(site_url=url, home_url=url, **values)
    return _site
