"""
Version parsing, comparison and capability version lookup.

Capability versions come from a table of known sources (module attributes,
installed distribution metadata) and, failing that, from a heuristic scan of
the runtime snapshot: the first key mentioning "version" wins and the first
dotted number in its value is taken.
"""

import importlib
import logging
import re
from importlib import metadata
from typing import Callable, Dict, List, Mapping, Optional, Tuple

from .models import RuntimeSnapshot, SnapshotValue

logger = logging.getLogger(__name__)

VERSION_TOKEN = re.compile(r'\d+\.\d+(?:\.\d+)?')
NUMERIC_VALUE = re.compile(r'\d+(?:\.\d+)?')
VERSION_KEY = re.compile(r'version', re.IGNORECASE)
_LEADING_DIGITS = re.compile(r'(\d+)')


def parse_version(version_str: Optional[str]) -> Tuple[int, ...]:
    """Parse a dotted version into a tuple of ints.

    Non-numeric suffixes are dropped ("3.12.1rc1" -> (3, 12, 1)) and parsing
    stops at the first segment that does not start with a digit.
    """
    if not version_str:
        return ()

    parts = []
    for segment in str(version_str).strip().lstrip('vV').split('.'):
        match = _LEADING_DIGITS.match(segment)
        if not match:
            break
        parts.append(int(match.group(1)))
        if match.end() != len(segment):
            break
    return tuple(parts)


def compare_versions(left: str, right: str) -> int:
    """Compare two dotted versions, padding the shorter one with zeros.

    Returns -1, 0 or 1.
    """
    a = parse_version(left)
    b = parse_version(right)
    width = max(len(a), len(b))
    a = a + (0,) * (width - len(a))
    b = b + (0,) * (width - len(b))
    return (a > b) - (a < b)


def version_at_least(current: Optional[str], minimum: str) -> bool:
    """True if current >= minimum. An absent or unparseable current fails."""
    if not parse_version(current):
        return False
    return compare_versions(current, minimum) >= 0


def normalize_version(value: Optional[SnapshotValue]) -> Optional[str]:
    """Pull a version token out of free text, or None if there isn't one."""
    if value is None:
        return None
    if isinstance(value, tuple):
        value = value[0]
    value = str(value).strip()

    match = VERSION_TOKEN.search(value)
    if match:
        return match.group(0)
    if NUMERIC_VALUE.fullmatch(value):
        return value
    return None


def extract_version(section: Mapping[str, SnapshotValue]) -> Optional[str]:
    """Find the version in one snapshot section.

    Only the first key containing "version" (case-insensitive) is looked at.
    """
    for key, value in section.items():
        if VERSION_KEY.search(key):
            return normalize_version(value)
    return None


# === Version sources ===

VersionSource = Callable[[], Optional[str]]


def module_attribute(module_name: str, attribute: str) -> VersionSource:
    """Read a version string from a module attribute."""
    def source():
        try:
            module = importlib.import_module(module_name)
        except ImportError:
            return None
        value = getattr(module, attribute, None)
        return str(value) if value is not None else None
    return source


def distribution(dist_name: str) -> VersionSource:
    """Read a version from installed distribution metadata."""
    def source():
        try:
            return metadata.version(dist_name)
        except metadata.PackageNotFoundError:
            return None
    return source


# Capability name -> where to look, in order
VERSION_SOURCES: Dict[str, List[VersionSource]] = {
    'PIL': [module_attribute('PIL', '__version__'), distribution('Pillow')],
    'sqlite3': [module_attribute('sqlite3', 'sqlite_version')],
    'ssl': [module_attribute('ssl', 'OPENSSL_VERSION')],
    'zlib': [module_attribute('zlib', 'ZLIB_RUNTIME_VERSION')],
    'pyexpat': [module_attribute('pyexpat', 'EXPAT_VERSION')],
    'lzma': [module_attribute('lzma', '__version__')],
}


def default_sources(name: str) -> List[VersionSource]:
    return [module_attribute(name, '__version__'), distribution(name)]


class VersionLookup:
    """
    Table-driven capability version lookup.

    Tries each source registered for the capability, then falls back to the
    snapshot section of the same name. Returns None when nothing yields a
    version token.
    """

    def __init__(self, snapshot: Optional[RuntimeSnapshot] = None,
                 sources: Optional[Dict[str, List[VersionSource]]] = None,
                 use_defaults: bool = True):
        self.snapshot = snapshot if snapshot is not None else RuntimeSnapshot()
        self.sources = VERSION_SOURCES if sources is None else sources
        self.use_defaults = use_defaults

    def lookup(self, name: str) -> Optional[str]:
        if name in self.sources:
            candidates = self.sources[name]
        elif self.use_defaults:
            candidates = default_sources(name)
        else:
            candidates = []

        for source in candidates:
            version = normalize_version(source())
            if version:
                return version

        version = extract_version(self.snapshot.section(name))
        if version is None:
            logger.debug(f"No version found for {name}")
        return version
