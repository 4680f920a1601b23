"""Operating system, disk space and load average information"""
import logging
import os
import platform
import tempfile
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Callable, Dict, NamedTuple, Optional, Union
import psutil
from .config import get_config
from .utils.sizes import convert_hr_to_bytes

logger = logging.getLogger(__name__)

LOADAVG_PATH = "/proc/loadavg"


@dataclass(frozen=True)
class DiskSpaceInfo:
    """Disk usage of the filesystem holding a directory"""
    total: int
    free: int
    used: int
    percent: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class LoadAverage(NamedTuple):
    load1: float
    load5: float
    load15: float


class System:
    """Basic host information needed by plugins"""

    size_converter: Callable[[Union[str, int]], int] = staticmethod(convert_hr_to_bytes)

    @classmethod
    def get_os_family(cls) -> str:
        """Get the OS family name, e.g. 'Linux', 'Darwin' or 'Windows'"""
        return platform.system()

    @classmethod
    def _os_family_starts_with(cls, prefix: str) -> bool:
        return cls.get_os_family().upper().startswith(prefix)

    @classmethod
    def is_windows(cls) -> bool:
        return cls._os_family_starts_with("WIN")

    @classmethod
    def is_linux(cls) -> bool:
        return cls._os_family_starts_with("LINUX")

    @classmethod
    def is_macos(cls) -> bool:
        return cls._os_family_starts_with("DARWIN")

    # Disk space

    @classmethod
    def get_disk_space(cls, directory: Optional[Union[str, Path]] = None) -> Optional[DiskSpaceInfo]:
        """Get disk space for a directory (the site root by default)"""
        directory = Path(directory) if directory is not None else get_config().site_root
        if not directory.is_dir():
            return None

        try:
            usage = psutil.disk_usage(str(directory))
        except OSError as e:
            logger.debug(f"Cannot stat disk usage for {directory}: {e}")
            return None

        total = int(usage.total)
        free = int(usage.free)
        used = total - free
        percent = round(used / total * 100, 2) if total else 0.0

        return DiskSpaceInfo(total=total, free=free, used=used, percent=percent)

    @classmethod
    def has_sufficient_disk_space(cls, required_space: Union[str, int],
                                  directory: Optional[Union[str, Path]] = None) -> bool:
        """Check if a directory has at least the required free space"""
        directory = Path(directory) if directory is not None else get_config().site_root
        try:
            free = psutil.disk_usage(str(directory)).free
        except OSError as e:
            logger.debug(f"Cannot stat free space for {directory}: {e}")
            return False

        required_bytes = cls.size_converter(required_space) if isinstance(required_space, str) else int(required_space)
        return free >= required_bytes

    # Load

    @classmethod
    def get_load_average(cls) -> Optional[LoadAverage]:
        """Get the 1, 5 and 15 minute load averages, or None if unsupported"""
        try:
            return LoadAverage(*os.getloadavg())
        except (AttributeError, OSError):
            logger.debug("os.getloadavg() unavailable, trying /proc/loadavg")

        try:
            with open(LOADAVG_PATH, "r") as f:
                values = f.read().split()
            return LoadAverage(float(values[0]), float(values[1]), float(values[2]))
        except (OSError, ValueError, IndexError) as e:
            logger.debug(f"Error reading load averages: {e}")
            return None

    @classmethod
    def is_high_load(cls, threshold: float = 2.0) -> bool:
        """Check if the 1 minute load average is above the threshold"""
        load = cls.get_load_average()
        if load is None:
            return False
        return load.load1 > threshold

    @classmethod
    def get_temp_dir(cls) -> str:
        return tempfile.gettempdir()
