"""Container and virtual machine detection from well-known system files"""
import logging
from pathlib import Path
from typing import Dict, Optional, Tuple

logger = logging.getLogger(__name__)

DOCKERENV_PATH = "/.dockerenv"
CGROUP_PATH = "/proc/1/cgroup"

# File -> hypervisor markers that may appear in it (lowercase)
VM_INDICATORS: Dict[str, Tuple[str, ...]] = {
    "/proc/cpuinfo": ("hypervisor", "vmware", "virtualbox", "kvm"),
    "/proc/scsi/scsi": ("vmware", "vbox"),
}


def _read_text(path: str) -> Optional[str]:
    """Read a system file, or None if it is missing or unreadable"""
    file_path = Path(path)
    if not file_path.exists():
        return None
    try:
        return file_path.read_text(errors="replace")
    except OSError as e:
        logger.debug(f"Cannot read {path}: {e}")
        return None


def is_docker() -> bool:
    """Check for the Docker sentinel file or a docker cgroup"""
    if Path(DOCKERENV_PATH).exists():
        return True

    content = _read_text(CGROUP_PATH)
    return content is not None and "docker" in content


def is_virtual_machine() -> bool:
    """Check CPU and SCSI descriptions for hypervisor names"""
    for path, markers in VM_INDICATORS.items():
        content = _read_text(path)
        if content is None:
            continue
        content = content.lower()
        for marker in markers:
            if marker in content:
                logger.debug(f"Virtual machine marker {marker!r} found in {path}")
                return True
    return False
