"""Web server identification from the advertised server software string"""
import importlib.util
import logging
import re
import socket
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, ClassVar, Dict, List, Optional, Tuple
from ..config import get_config
from ..utils.request import get_server_var, has_server_var
from .modules import list_apache_modules

logger = logging.getLogger(__name__)

_TAGS = re.compile(r"<[^>]*>")
_CONTROL = re.compile(r"[\x00-\x1f\x7f]+")
_WHITESPACE = re.compile(r"\s+")

_UNSET = object()


def sanitize_text(value: str) -> str:
    """Strip tags and control characters and collapse whitespace"""
    value = _TAGS.sub("", value)
    value = _CONTROL.sub(" ", value)
    return _WHITESPACE.sub(" ", value).strip()


def _module_available(name: str) -> bool:
    try:
        return importlib.util.find_spec(name) is not None
    except (ImportError, ValueError):
        return False


class ServerType(Enum):
    """Web server families"""
    APACHE = "Apache"
    NGINX = "Nginx"
    LITESPEED = "LiteSpeed"
    IIS = "IIS"
    UNKNOWN = "Unknown"


@dataclass(frozen=True)
class ServerInfo:
    """Server type and the raw software string it was derived from"""
    type: ServerType
    software: str

    def to_dict(self) -> Dict[str, str]:
        return {"type": self.type.value, "software": self.software}


class Server:
    """Detect the web server and what it can do"""

    _software: ClassVar[Optional[str]] = None
    _modules: ClassVar[Any] = _UNSET
    _lock: ClassVar[threading.Lock] = threading.Lock()

    # Returns loaded Apache module names, or None when they cannot be listed
    module_lister: ClassVar[Callable[[], Optional[List[str]]]] = staticmethod(list_apache_modules)

    @classmethod
    def reset_cache(cls) -> None:
        """Forget the cached software string and module list"""
        with cls._lock:
            cls._software = None
            cls._modules = _UNSET

    @classmethod
    def get_software(cls) -> str:
        """Get the server software string, or '' if not advertised"""
        if cls._software is None:
            with cls._lock:
                if cls._software is None:
                    raw = get_server_var("SERVER_SOFTWARE")
                    cls._software = sanitize_text(raw) if raw else ""
        return cls._software

    @classmethod
    def get_ip(cls) -> Optional[str]:
        """Get the server address, resolving the hostname if it is not advertised"""
        address = get_server_var("SERVER_ADDR")
        if address:
            return address
        try:
            return socket.gethostbyname(socket.gethostname() or "localhost")
        except OSError as e:
            logger.debug(f"Cannot resolve server address: {e}")
            return None

    @classmethod
    def get_port(cls) -> int:
        port = get_server_var("SERVER_PORT")
        try:
            return int(port) if port else 80
        except ValueError:
            return 80

    # Server type detection

    @classmethod
    def _software_contains(cls, needle: str) -> bool:
        return needle.lower() in cls.get_software().lower()

    @classmethod
    def is_apache(cls) -> bool:
        return cls._software_contains("apache")

    @classmethod
    def is_nginx(cls) -> bool:
        """Nginx, including hosts that rebrand it (see Config.nginx_markers)"""
        if cls._software_contains("nginx"):
            return True
        return any(cls._software_contains(marker) for marker in get_config().nginx_markers)

    @classmethod
    def is_litespeed(cls) -> bool:
        return cls._software_contains("litespeed")

    @classmethod
    def is_iis(cls) -> bool:
        return cls._software_contains("microsoft-iis")

    @classmethod
    def is_cloudflare(cls) -> bool:
        """Check if the request came through Cloudflare"""
        return has_server_var("HTTP_CF_RAY") or has_server_var("HTTP_CF_CONNECTING_IP")

    @classmethod
    def get_type(cls) -> ServerType:
        for server_type, check in SERVER_TYPES:
            if check():
                return server_type
        return ServerType.UNKNOWN

    @classmethod
    def get_info(cls) -> ServerInfo:
        return ServerInfo(type=cls.get_type(), software=cls.get_software())

    # Capabilities

    @classmethod
    def _list_modules(cls) -> Optional[List[str]]:
        if cls._modules is _UNSET:
            with cls._lock:
                if cls._modules is _UNSET:
                    cls._modules = cls.module_lister()
        return cls._modules

    @classmethod
    def supports_htaccess(cls) -> bool:
        return cls.is_apache() and cls.has_mod_rewrite()

    @classmethod
    def has_mod_rewrite(cls) -> bool:
        """Check for mod_rewrite; without a module list, trust HTTP_MOD_REWRITE"""
        if not cls.is_apache():
            return False

        modules = cls._list_modules()
        if modules is not None:
            return "mod_rewrite" in modules

        return get_server_var("HTTP_MOD_REWRITE") == "On"

    @classmethod
    def supports_url_rewriting(cls) -> bool:
        if cls.is_apache():
            return cls.has_mod_rewrite()

        if cls.is_nginx() or cls.is_litespeed():
            return True

        if cls.is_iis():
            return has_server_var("IIS_UrlRewriteModule")

        return False

    @classmethod
    def supports_gzip(cls) -> bool:
        return _module_available("zlib")

    @classmethod
    def supports_brotli(cls) -> bool:
        return _module_available("brotli") or _module_available("brotlicffi")

    @classmethod
    def has_xsendfile(cls) -> bool:
        """Check if X-Sendfile style file delivery is available"""
        if cls.is_apache():
            return cls.has_apache_module("mod_xsendfile")

        if cls.is_litespeed():
            return True

        if cls.is_nginx():
            return get_config().nginx_xsendfile

        return False

    @classmethod
    def get_apache_modules(cls) -> Optional[List[str]]:
        """Get loaded Apache modules, or None if not Apache or not listable"""
        if not cls.is_apache():
            return None
        modules = cls._list_modules()
        return list(modules) if modules is not None else None

    @classmethod
    def has_apache_module(cls, module: str) -> bool:
        modules = cls.get_apache_modules()
        return modules is not None and module in modules


SERVER_TYPES: Tuple[Tuple[ServerType, Callable[[], bool]], ...] = (
    (ServerType.APACHE, Server.is_apache),
    (ServerType.NGINX, Server.is_nginx),
    (ServerType.LITESPEED, Server.is_litespeed),
    (ServerType.IIS, Server.is_iis),
)
