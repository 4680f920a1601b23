"""Aggregate the four query groups into a single JSON-ready report"""
from typing import Any, Dict
from .environment import Environment
from .runtime import Runtime
from .server import Server
from .system import System
from .utils.sizes import size_format


def runtime_report() -> Dict[str, Any]:
    return {
        "version": Runtime.get_version(),
        "memory_limit": Runtime.get_memory_limit(),
        "memory_usage": size_format(Runtime.get_memory_usage(), 1),
        "peak_memory_usage": size_format(Runtime.get_peak_memory_usage(), 1),
        "max_execution_time": Runtime.get_max_execution_time(),
        "upload_max_filesize": Runtime.get_upload_max_filesize(),
        "post_max_size": Runtime.get_post_max_size(),
        "max_input_vars": Runtime.get_max_input_vars(),
        "uploads_enabled": Runtime.are_uploads_enabled(),
        "url_fopen_enabled": Runtime.is_url_fopen_enabled(),
        "disabled_functions": Runtime.get_disabled_functions(),
    }


def environment_report() -> Dict[str, Any]:
    return {
        "type": Environment.get_type().value,
        "hosting_platform": Environment.get_hosting_platform(),
        "hostname": Environment.get_hostname(),
        "docker": Environment.is_docker(),
        "virtual_machine": Environment.is_virtual_machine(),
    }


def server_report() -> Dict[str, Any]:
    report = Server.get_info().to_dict()
    report.update({
        "ip": Server.get_ip(),
        "port": Server.get_port(),
        "cloudflare": Server.is_cloudflare(),
        "url_rewriting": Server.supports_url_rewriting(),
        "htaccess": Server.supports_htaccess(),
        "gzip": Server.supports_gzip(),
        "brotli": Server.supports_brotli(),
        "xsendfile": Server.has_xsendfile(),
        "apache_modules": Server.get_apache_modules(),
    })
    return report


def system_report() -> Dict[str, Any]:
    disk = System.get_disk_space()
    load = System.get_load_average()
    return {
        "os_family": System.get_os_family(),
        "disk": disk.to_dict() if disk else None,
        "disk_free": size_format(disk.free, 1) if disk else None,
        "load_average": list(load) if load else None,
        "high_load": System.is_high_load(),
        "temp_dir": System.get_temp_dir(),
    }


def build_report() -> Dict[str, Any]:
    """Build the full report, one section per query group"""
    return {
        "runtime": runtime_report(),
        "environment": environment_report(),
        "server": server_report(),
        "system": system_report(),
    }
