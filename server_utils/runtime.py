"""Interpreter version, extension, directive and function introspection"""
import importlib.util
import logging
import os
import platform
import sys
from importlib import metadata
from typing import Callable, Dict, List, Optional, Union
import psutil
from packaging.version import InvalidVersion, Version
from .config import get_config
from .utils.settings import is_truthy
from .utils.sizes import UNLIMITED, convert_hr_to_bytes
from .utils.symbols import symbol_exists

logger = logging.getLogger(__name__)


class Runtime:
    """Read-only queries about the running interpreter and its directives"""

    # Size-string converter; hosts may swap in their own
    size_converter: Callable[[Union[str, int]], int] = staticmethod(convert_hr_to_bytes)

    @classmethod
    def get_version(cls) -> str:
        """Get the interpreter version, e.g. '3.12.4'"""
        return platform.python_version()

    @classmethod
    def meets_version_requirement(cls, required_version: str) -> bool:
        """Check if the interpreter is at least the given version"""
        try:
            return Version(cls.get_version()) >= Version(required_version)
        except InvalidVersion as e:
            logger.debug(f"Cannot compare against version {required_version!r}: {e}")
            return False

    # Directives

    @classmethod
    def get_directive(cls, name: str) -> Optional[str]:
        """Get a runtime directive, or None if it is not known"""
        return get_config().get_directive(name)

    @classmethod
    def is_directive_enabled(cls, name: str) -> bool:
        """Check if a boolean directive is switched on"""
        return is_truthy(cls.get_directive(name) or "")

    @classmethod
    def are_uploads_enabled(cls) -> bool:
        return cls.is_directive_enabled("file_uploads")

    @classmethod
    def is_url_fopen_enabled(cls) -> bool:
        return cls.is_directive_enabled("allow_url_fopen")

    @classmethod
    def get_memory_limit(cls) -> str:
        return get_config().memory_limit

    @classmethod
    def get_memory_limit_bytes(cls) -> int:
        return cls.size_converter(cls.get_memory_limit())

    @classmethod
    def get_max_execution_time(cls) -> int:
        return get_config().max_execution_time

    @classmethod
    def get_upload_max_filesize(cls) -> str:
        return get_config().upload_max_filesize

    @classmethod
    def get_upload_max_filesize_bytes(cls) -> int:
        return cls.size_converter(cls.get_upload_max_filesize())

    @classmethod
    def get_post_max_size(cls) -> str:
        return get_config().post_max_size

    @classmethod
    def get_post_max_size_bytes(cls) -> int:
        return cls.size_converter(cls.get_post_max_size())

    @classmethod
    def get_max_input_vars(cls) -> int:
        return get_config().max_input_vars

    # Extensions

    @classmethod
    def has_extension(cls, extension: str) -> bool:
        """Check if a module is installed and importable.

        This does not import it, so an available module may be missing
        from get_loaded_extensions() until something imports it.
        """
        try:
            return importlib.util.find_spec(extension) is not None
        except (ImportError, ValueError) as e:
            logger.debug(f"Extension lookup for {extension} failed: {e}")
            return False

    @classmethod
    def get_loaded_extensions(cls) -> List[str]:
        """Get the top-level modules imported so far (a subset of what has_extension() accepts)"""
        return sorted({name.split('.')[0] for name in sys.modules if not name.startswith('_')})

    @classmethod
    def get_extension_version(cls, extension: str) -> Optional[str]:
        """Get the installed version of a module, or None if unknown"""
        if not cls.has_extension(extension):
            return None

        try:
            return metadata.version(extension)
        except metadata.PackageNotFoundError:
            pass

        module = sys.modules.get(extension)
        version = getattr(module, "__version__", None) if module else None
        return str(version) if version else None

    @classmethod
    def check_extensions(cls, extensions: List[str]) -> Dict[str, bool]:
        """Check several extensions at once"""
        return {extension: cls.has_extension(extension) for extension in extensions}

    @classmethod
    def get_missing_extensions(cls, required_extensions: List[str]) -> List[str]:
        """Get the required extensions that are not available, in input order"""
        return [extension for extension in required_extensions if not cls.has_extension(extension)]

    # Functions

    @classmethod
    def has_function(cls, function: str, check_disabled: bool = True) -> bool:
        """Check if a function exists and, optionally, is not disabled.

        Dotted names are only looked up in modules that are already
        imported; the check never imports anything.
        """
        if not symbol_exists(function, import_missing=False):
            return False

        if check_disabled:
            return not cls.is_function_disabled(function)

        return True

    @classmethod
    def is_function_disabled(cls, function: str) -> bool:
        return function in cls.get_disabled_functions()

    @classmethod
    def get_disabled_functions(cls) -> List[str]:
        """Get the names listed in the disable_functions directive"""
        disabled = cls.get_directive("disable_functions")
        if not disabled:
            return []
        return [name.strip() for name in disabled.split(',')]

    @classmethod
    def check_functions(cls, functions: List[str]) -> Dict[str, bool]:
        return {function: cls.has_function(function) for function in functions}

    # Memory

    @classmethod
    def get_memory_usage(cls) -> int:
        """Get the resident memory of this process in bytes"""
        return psutil.Process(os.getpid()).memory_info().rss

    @classmethod
    def get_peak_memory_usage(cls) -> int:
        """Get the peak resident memory of this process in bytes"""
        os_family = platform.system()
        if os_family == "Windows":
            return psutil.Process(os.getpid()).memory_info().peak_wset

        import resource
        max_rss = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss
        # ru_maxrss is in bytes on macOS and kilobytes elsewhere
        return max_rss if os_family == "Darwin" else max_rss * 1024

    @classmethod
    def has_sufficient_memory(cls, required_memory: Union[str, int]) -> bool:
        """Check if the memory limit leaves room for the required amount.

        Only the UNLIMITED sentinel skips the check; a limit of 0 leaves
        no memory available.
        """
        memory_limit = cls.get_memory_limit_bytes()
        if memory_limit == UNLIMITED:
            return True

        required_bytes = cls.size_converter(required_memory) if isinstance(required_memory, str) else int(required_memory)
        available = memory_limit - cls.get_memory_usage()
        return available >= required_bytes
