"""
Runtime collaborators for the requirements checker.

Everything the checker reads from (or briefly writes to) the host goes
through one of these interfaces, so checks can run against the live
interpreter or against a synthetic environment in tests:

- ConfigSource: named settings with get/set
- CapabilityRegistry: optional modules and types
- HttpClient: the single outbound request used by the rewrite probe
"""

import builtins
import importlib
import importlib.util
import logging
import os
import sys
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, Optional, Set

import requests

from .units import memory_limit_bytes

try:
    import resource
except ImportError:  # Windows has no resource module
    resource = None

logger = logging.getLogger(__name__)

MEMORY_LIMIT = 'memory_limit'
INCLUDE_PATH = 'include_path'
TIMEZONE = 'date.timezone'


# === Configuration sources ===

class ConfigSource(ABC):
    """Read and write named runtime settings."""

    @abstractmethod
    def get(self, name: str) -> Optional[str]:
        """Return the current value, or None if the setting is unknown."""

    @abstractmethod
    def set(self, name: str, value: Optional[str]) -> bool:
        """Apply a new value. Returns False if the runtime refused it."""

    def capture(self, name: str) -> Any:
        """Exact saved state of a setting, for restore()."""
        return self.get(name)

    def restore(self, name: str, saved: Any) -> bool:
        """Put back state returned by capture()."""
        return self.set(name, saved)


class DictConfigSource(ConfigSource):
    """
    In-memory settings.

    Names listed in ``readonly`` refuse writes, which lets tests model a
    host that forbids raising a limit.
    """

    def __init__(self, values: Optional[Dict[str, Optional[str]]] = None,
                 readonly: Iterable[str] = ()):
        self.values: Dict[str, Optional[str]] = dict(values or {})
        self.readonly: Set[str] = set(readonly)

    def get(self, name):
        return self.values.get(name)

    def set(self, name, value):
        if name in self.readonly:
            return False
        self.values[name] = value
        return True


class PythonRuntimeConfig(ConfigSource):
    """
    Live settings of the running interpreter.

    - memory_limit: soft RLIMIT_AS in bytes ("-1" when unlimited)
    - include_path: sys.path joined with os.pathsep
    - date.timezone: the TZ environment setting
    - any sys.flags field, e.g. "optimize" or "no_site" (read-only)
    """

    def get(self, name):
        if name == MEMORY_LIMIT:
            return self._get_memory_limit()
        if name == INCLUDE_PATH:
            return os.pathsep.join(sys.path)
        if name == TIMEZONE:
            return os.environ.get('TZ')
        if hasattr(sys.flags, name):
            return str(int(getattr(sys.flags, name)))
        return None

    def set(self, name, value):
        if name == MEMORY_LIMIT:
            return self._set_memory_limit(value)
        if name == INCLUDE_PATH:
            sys.path[:] = value.split(os.pathsep) if value else []
            return True
        if name == TIMEZONE:
            if value is None:
                os.environ.pop('TZ', None)
            else:
                os.environ['TZ'] = value
            if hasattr(time, 'tzset'):
                time.tzset()
            return True
        return False

    def capture(self, name):
        # the joined string loses entries such as [''], keep the list itself
        if name == INCLUDE_PATH:
            return list(sys.path)
        return super().capture(name)

    def restore(self, name, saved):
        if name == INCLUDE_PATH:
            sys.path[:] = saved
            return True
        return super().restore(name, saved)

    @staticmethod
    def _get_memory_limit() -> Optional[str]:
        if resource is None:
            return None
        soft, _hard = resource.getrlimit(resource.RLIMIT_AS)
        if soft == resource.RLIM_INFINITY:
            return '-1'
        return str(soft)

    @staticmethod
    def _set_memory_limit(value) -> bool:
        if resource is None or value is None:
            return False
        try:
            limit = memory_limit_bytes(value)
            soft = resource.RLIM_INFINITY if limit < 0 else limit
            _soft, hard = resource.getrlimit(resource.RLIMIT_AS)
            resource.setrlimit(resource.RLIMIT_AS, (soft, hard))
            return True
        except (ValueError, OSError) as e:
            logger.debug(f"Could not set memory limit to {value}: {e}")
            return False


# === Capabilities ===

class CapabilityRegistry(ABC):
    """Which optional modules and types the runtime provides."""

    @abstractmethod
    def is_loaded(self, name: str) -> bool:
        """True if the named module can be imported."""

    @abstractmethod
    def has_type(self, name: str) -> bool:
        """True if the named builtin or dotted ``module.Class`` resolves."""


class ImportCapabilityRegistry(CapabilityRegistry):
    """Capabilities of the running interpreter, resolved via importlib."""

    def is_loaded(self, name):
        if name in sys.modules:
            return True
        try:
            return importlib.util.find_spec(name) is not None
        except (ImportError, ValueError):
            return False

    def has_type(self, name):
        module_name, _, attr = name.rpartition('.')
        if not module_name:
            return isinstance(getattr(builtins, name, None), type)
        try:
            module = importlib.import_module(module_name)
        except ImportError:
            return False
        return isinstance(getattr(module, attr, None), type)


class StaticCapabilityRegistry(CapabilityRegistry):
    """A fixed set of modules and types."""

    def __init__(self, modules: Iterable[str] = (), types: Iterable[str] = ()):
        self.modules = set(modules)
        self.types = set(types)

    def is_loaded(self, name):
        return name in self.modules

    def has_type(self, name):
        return name in self.types


# === Outbound HTTP ===

class HttpClient:
    """Thin wrapper over a requests session.

    Errors are raised as requests.RequestException; callers decide how to
    degrade.
    """

    def __init__(self, session: Optional[requests.Session] = None):
        self.session = session or requests.Session()

    def get(self, url: str, timeout: float) -> str:
        response = self.session.get(url, timeout=timeout)
        return response.text
