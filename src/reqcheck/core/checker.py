"""
Environment Checker

Individual assertions against the running interpreter and host. Every
predicate returns a definite boolean: a missing module, an unset option or
an unreachable URL is a negative result, never an exception.

Usage:
    checker = EnvironmentChecker()
    checker.is_version_at_least('3.9')
    checker.is_capability_present('ssl')
    checker.can_raise_memory_limit('64M')
"""

import logging
import os
import platform
import tempfile
import threading
from contextlib import contextmanager
from typing import Callable, Iterable, Optional, Union

import requests
import zoneinfo

from .models import RequestContext
from .runtime import (
    INCLUDE_PATH,
    MEMORY_LIMIT,
    TIMEZONE,
    CapabilityRegistry,
    ConfigSource,
    HttpClient,
    ImportCapabilityRegistry,
    PythonRuntimeConfig,
)
from .snapshot import MetadataInfoProvider, PlatformInfoProvider
from .units import bytes_to_limit_string, memory_limit_bytes
from .versions import VersionLookup, version_at_least
from ..utils.system import SystemDescriber

logger = logging.getLogger(__name__)

# Values a setting may hold and still count as "off"
DISABLED_VALUES = {'', '0', 'off', 'false', 'no', 'none'}

# Body returned by the rewrite test endpoint for ?testquery=testvalue
REWRITE_MARKER = 'rewritetest queryval: testvalue'
REWRITE_TEST_PATH = 'rewritetest/test-url'

# (label, module that must be importable, runtime flag that must be off)
CODE_CACHERS = (
    ('PyPy JIT', '__pypy__', None),
    ('Bytecode cache', 'marshal', 'dont_write_bytecode'),
)

DEFAULT_PROBE_TIMEOUT = 5.0

# Settings are process-wide; one scope at a time across threads
_settings_lock = threading.RLock()


@contextmanager
def scoped_setting(config: ConfigSource, name: str):
    """
    Yield the current value of a setting and restore it on exit.

    The restore runs whether the body returns, fails or raises, so a check
    that temporarily changes a runtime setting cannot leak the change.
    Scopes are serialized across threads: a second scope only captures
    once the first has restored.
    """
    with _settings_lock:
        saved = config.capture(name)
        try:
            yield config.get(name)
        finally:
            if not config.restore(name, saved):
                logger.warning(f"Could not restore {name} to {saved!r}")


def is_disabled_value(value) -> bool:
    """Loose "off" test: None, False, 0, "", "0", "off", ... are all off."""
    if value is None or value is False:
        return True
    if isinstance(value, (int, float)):
        return value == 0
    return str(value).strip().lower() in DISABLED_VALUES


class EnvironmentChecker:
    """
    Predicates against the hosting runtime.

    The runtime snapshot is built once, here, from the injected provider;
    it is read-only afterwards. Everything else is queried live through the
    injected collaborators.
    """

    def __init__(self,
                 config: Optional[ConfigSource] = None,
                 capabilities: Optional[CapabilityRegistry] = None,
                 info_provider: Optional[PlatformInfoProvider] = None,
                 http: Optional[HttpClient] = None,
                 describer: Optional[SystemDescriber] = None,
                 version_lookup: Optional[VersionLookup] = None,
                 runtime_version: Optional[str] = None,
                 timezones: Optional[Callable[[], Iterable[str]]] = None,
                 temp_dir: Optional[Callable[[], str]] = None,
                 probe_timeout: float = DEFAULT_PROBE_TIMEOUT):
        self.config = config or PythonRuntimeConfig()
        self.capabilities = capabilities or ImportCapabilityRegistry()
        self.snapshot = (info_provider or MetadataInfoProvider()).snapshot()
        self.versions = version_lookup or VersionLookup(self.snapshot)
        self.http = http or HttpClient()
        self.describer = describer or SystemDescriber()
        self.runtime_version = runtime_version or platform.python_version()
        self.timezones = timezones or zoneinfo.available_timezones
        self.temp_dir = temp_dir or tempfile.gettempdir
        self.probe_timeout = probe_timeout

    # === Configuration ===

    def is_config_flag_disabled(self, name: str) -> bool:
        """True if the named setting is off, empty or unknown."""
        return is_disabled_value(self.config.get(name))

    def is_version_at_least(self, minimum: str) -> bool:
        """True if the interpreter version is at least ``minimum``."""
        return version_at_least(self.runtime_version, minimum)

    def is_timezone_configured_and_valid(self) -> bool:
        """True if a timezone is set and is a known IANA identifier."""
        tz = self.config.get(TIMEZONE)
        if not tz:
            return False
        return tz in set(self.timezones())

    # === Capabilities ===

    def is_capability_present(self, name: str) -> bool:
        """True if the named module can be imported."""
        return self.capabilities.is_loaded(name)

    def type_exists(self, name: str) -> bool:
        """True if a builtin or dotted ``module.Class`` type is available."""
        return self.capabilities.has_type(name)

    def capability_version(self, name: str) -> Optional[str]:
        """Best-effort version of a capability, or None if unknown."""
        return self.versions.lookup(name)

    def is_capability_version_at_least(self, name: str, minimum: str) -> bool:
        """True if the capability's version is known and at least ``minimum``.

        An unknown version fails.
        """
        return version_at_least(self.capability_version(name), minimum)

    # === Memory ===

    @staticmethod
    def memory_limit_bytes(value: Union[str, int]) -> int:
        """Convert "64M", "1G", "512K" or plain bytes into bytes."""
        return memory_limit_bytes(value)

    @staticmethod
    def convert_bytes_to_string(num_bytes: int) -> str:
        """Format bytes for writing back as a memory limit."""
        return bytes_to_limit_string(num_bytes)

    def current_memory_limit(self) -> Optional[int]:
        """Current limit in bytes; -1 when unlimited, None when unknown."""
        return self._parse_limit(self.config.get(MEMORY_LIMIT))

    def is_memory_at_least(self, minimum: Union[str, int]) -> bool:
        """True if the memory limit is unlimited or at least ``minimum``."""
        current = self.current_memory_limit()
        if current is None:
            return False
        if current < 0:
            return True
        return current >= memory_limit_bytes(minimum)

    def can_raise_memory_limit(self, increase: Union[str, int]) -> bool:
        """
        Try raising the memory limit by ``increase`` and read it back.

        The original limit is restored afterwards in every case. An
        unlimited limit has nothing to raise and passes.
        """
        with _settings_lock:
            original = self.current_memory_limit()
            if original is None:
                return False
            if original < 0:
                return True

            target = original + memory_limit_bytes(increase)
            with scoped_setting(self.config, MEMORY_LIMIT):
                self.config.set(MEMORY_LIMIT, bytes_to_limit_string(target))
                observed = self._parse_limit(self.config.get(MEMORY_LIMIT))

        return observed == target

    # === Search path ===

    def can_extend_search_path(self, path: str) -> bool:
        """
        Prepend ``path`` to the module search path and read it back.

        The original search path is restored afterwards in every case.
        """
        with scoped_setting(self.config, INCLUDE_PATH) as original:
            if original is None:
                return False
            expected = path + os.pathsep + original if original else path
            self.config.set(INCLUDE_PATH, expected)
            observed = self.config.get(INCLUDE_PATH)

        return observed == expected

    # === Code cache and temp path ===

    def bytecode_cacher(self) -> Optional[str]:
        """Name and version of the active code cache, or None."""
        for label, module, off_flag in CODE_CACHERS:
            if not self.is_capability_present(module):
                continue
            if off_flag and not self.is_config_flag_disabled(off_flag):
                continue
            return f"{label} {self.runtime_version}".strip()
        return None

    def is_bytecode_cacher_enabled(self) -> bool:
        return self.bytecode_cacher() is not None

    def default_temp_path(self) -> Optional[str]:
        """The directory temporary files go to, or None if there is none."""
        try:
            return self.temp_dir() or None
        except OSError as e:
            logger.debug(f"No usable temp directory: {e}")
            return None

    def has_default_temp_path(self) -> bool:
        return self.default_temp_path() is not None

    def is_temp_path_writable(self) -> bool:
        """True if a new directory can be created (and removed) in the temp path."""
        path = self.default_temp_path()
        if not path:
            return False
        try:
            created = tempfile.mkdtemp(prefix='reqcheck-test', dir=path)
            os.rmdir(created)
            return True
        except OSError as e:
            logger.debug(f"Temp path {path} not writable: {e}")
            return False

    # === Webserver ===

    @staticmethod
    def rewrite_test_url(context: RequestContext) -> str:
        """URL of the rewrite test endpoint, relative to the current app."""
        parts = [context.host, context.script_name.strip('/'), REWRITE_TEST_PATH]
        return 'http://' + '/'.join(p for p in parts if p) + '?testquery=testvalue'

    def probe_url_rewrite_support(self, url: str) -> bool:
        """
        Request the rewrite test URL and look for the marker in the body.

        Bounded by the probe timeout. Any request failure is a negative
        result.
        """
        try:
            body = self.http.get(url, timeout=self.probe_timeout)
        except requests.RequestException as e:
            logger.info(f"URL rewrite probe failed for {url}: {e}")
            return False
        return bool(body) and REWRITE_MARKER in body

    # === Host ===

    def describe_host_system(self, fallback: Optional[str] = None) -> str:
        """One-line OS description; ``fallback`` (then "Unknown") if unavailable."""
        return self.describer.describe(fallback)

    @staticmethod
    def _parse_limit(value) -> Optional[int]:
        if value is None:
            return None
        try:
            return memory_limit_bytes(value)
        except ValueError:
            logger.debug(f"Unparseable memory limit: {value!r}")
            return None
