"""Configuration for server-utils: site identity, runtime directives and diagnostics"""
from functools import lru_cache
from pathlib import Path
from typing import List, Literal, Optional
from pydantic import Field, validator
from pydantic_settings import BaseSettings

# Directive names that can be read through Runtime.get_directive()
DIRECTIVES = (
    "memory_limit",
    "max_execution_time",
    "upload_max_filesize",
    "post_max_size",
    "max_input_vars",
    "disable_functions",
    "file_uploads",
    "allow_url_fopen",
)


class Config(BaseSettings):
    """Settings read from the environment, one field per setting"""

    # Site identity
    site_url: str = Field(default="", description="Public URL of the site")
    home_url: str = Field(default="", description="Home URL of the site (may differ from site_url)")
    site_root: Path = Field(default_factory=Path.cwd, description="Directory the site is installed in")

    # Runtime directives
    memory_limit: str = Field(default="128M", description="Memory limit (-1 for unlimited)")
    max_execution_time: int = Field(default=30, ge=0, description="Maximum execution time in seconds")
    upload_max_filesize: str = Field(default="2M", description="Maximum size of an uploaded file")
    post_max_size: str = Field(default="8M", description="Maximum size of a request body")
    max_input_vars: int = Field(default=1000, ge=0, description="Maximum number of input variables")
    disable_functions: str = Field(default="", description="Disabled functions (comma-separated)")
    file_uploads: str = Field(default="On", description="Whether file uploads are accepted")
    allow_url_fopen: str = Field(default="On", description="Whether URLs can be opened as files")

    # Server detection
    nginx_markers_str: str = Field(
        default="flywheel",
        description="Server software substrings that identify a rebranded Nginx (comma-separated)"
    )
    nginx_xsendfile: bool = Field(default=False, description="Nginx is configured for X-Accel/X-Sendfile")
    server_software: str = Field(default="uvicorn", description="Server software advertised by the diagnostics server")

    # Diagnostics server
    diagnostics_port: int = Field(default=8080, ge=1, le=65535, description="Diagnostics server port")
    diagnostics_host: str = Field(default="127.0.0.1", description="Diagnostics server host")
    enable_request_logging: bool = Field(default=True, description="Enable HTTP request logging")
    trusted_hosts_str: str = Field(default="", description="Trusted Host header values (comma-separated)")

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO", description="Log level")
    log_file: Optional[Path] = Field(default=None, description="Log file (stdout only when unset)")

    class Config:
        env_prefix = ""
        case_sensitive = False

    @validator('log_level', pre=True)
    def normalize_log_level(cls, v):
        if isinstance(v, str):
            return v.upper()
        return v

    @validator('log_file')
    def ensure_log_directory(cls, v):
        if isinstance(v, Path):
            v.parent.mkdir(parents=True, exist_ok=True)
        return v

    @property
    def nginx_markers(self) -> List[str]:
        """Get Nginx rebrand markers as a list"""
        return [item.strip() for item in self.nginx_markers_str.split(',') if item.strip()]

    @property
    def trusted_hosts(self) -> List[str]:
        """Get trusted hosts as a list"""
        return [item.strip() for item in self.trusted_hosts_str.split(',') if item.strip()]

    def get_directive(self, name: str) -> Optional[str]:
        """Get a runtime directive as a string, like ini_get()"""
        if name not in DIRECTIVES:
            return None
        return str(getattr(self, name))


@lru_cache(maxsize=1)
def get_config() -> Config:
    """Get the process-wide configuration"""
    return Config()
