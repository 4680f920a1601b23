"""Apache module listing through the apachectl control script"""
import logging
import re
import shutil
import subprocess
from typing import List, Optional

logger = logging.getLogger(__name__)

APACHECTL_CANDIDATES = ("apache2ctl", "apachectl", "httpd")

# " rewrite_module (shared)" -> "rewrite"
_MODULE_LINE = re.compile(r"^\s*(\w+)_module\s+\((?:static|shared)\)")


def find_apachectl() -> Optional[str]:
    """Find the first Apache control binary on PATH"""
    for candidate in APACHECTL_CANDIDATES:
        path = shutil.which(candidate)
        if path:
            return path
    return None


def parse_module_list(output: str) -> List[str]:
    """Parse `apachectl -M` output into mod_* names"""
    modules = []
    for line in output.splitlines():
        match = _MODULE_LINE.match(line)
        if match:
            modules.append(f"mod_{match.group(1)}")
    return modules


def list_apache_modules() -> Optional[List[str]]:
    """List loaded Apache modules, or None if they cannot be listed"""
    binary = find_apachectl()
    if binary is None:
        return None

    try:
        result = subprocess.run(
            [binary, "-M"],
            capture_output=True,
            text=True,
            timeout=10
        )
    except (subprocess.TimeoutExpired, OSError) as e:
        logger.debug(f"Listing Apache modules with {binary} failed: {e}")
        return None

    if result.returncode != 0:
        logger.debug(f"{binary} -M exited with {result.returncode}: {result.stderr.strip()}")
        return None

    return parse_module_list(result.stdout)
