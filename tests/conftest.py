"""
Shared fixtures: a checker wired to a synthetic environment.

Nothing here touches the real interpreter settings, network or processes.
"""

import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

from reqcheck.core.checker import EnvironmentChecker, REWRITE_MARKER
from reqcheck.core.models import RuntimeSnapshot
from reqcheck.core.runtime import DictConfigSource, StaticCapabilityRegistry
from reqcheck.core.snapshot import StaticInfoProvider
from reqcheck.core.versions import VersionLookup
from reqcheck.utils.system import SystemDescriber


# Settings of a host that meets every requirement
PASSING_CONFIG = {
    'memory_limit': '128M',
    'include_path': '/usr/lib/python3/dist-packages',
    'date.timezone': 'Europe/London',
    'no_site': '0',
    'inspect': '0',
    'optimize': '0',
    'dont_write_bytecode': '0',
    'dev_mode': '0',
    'verbose': '0',
}

ALL_MODULES = [
    'ssl', 'sqlite3', 'zlib', 'hashlib', 'pyexpat', 'json',
    'bz2', 'lzma', 'ctypes', 'posix', 'PIL', 'marshal',
]

ALL_TYPES = [
    'xml.dom.minidom.Document',
    'xml.etree.ElementTree.Element',
]

PASSING_SECTIONS = {
    'PIL': {'Version': '10.0.1'},
}

TEST_SYSTEM_INFO = {
    'platform': 'Linux',
    'os': 'Debian GNU/Linux 12 (bookworm)',
    'os_version': '12',
    'arch': 'x86_64',
    'kernel': '6.1.0',
    'python': '3.11.4',
    'implementation': 'CPython',
    'executable': '/usr/bin/python3',
    'prefix': '/usr',
}


@pytest.fixture
def http():
    """HTTP client whose rewrite probe succeeds."""
    client = MagicMock()
    client.get.return_value = REWRITE_MARKER
    return client


@pytest.fixture
def make_checker(tmp_path, http):
    """Factory for checkers over a synthetic environment.

    Every argument overrides one part of the passing environment.
    """
    def factory(config=None, overrides=None, readonly=(), modules=None, types=None,
                sections=None, runtime_version='3.11.4', timezones=None,
                temp_dir=None, runner=None, http_client=None):
        values = dict(PASSING_CONFIG if config is None else config)
        values.update(overrides or {})
        sections = PASSING_SECTIONS if sections is None else sections

        return EnvironmentChecker(
            config=DictConfigSource(values, readonly=readonly),
            capabilities=StaticCapabilityRegistry(
                ALL_MODULES if modules is None else modules,
                ALL_TYPES if types is None else types,
            ),
            info_provider=StaticInfoProvider(sections),
            http=http_client or http,
            describer=SystemDescriber(
                runner=runner or (lambda cmd: (0, ['Linux testhost 6.1.0 x86_64 GNU/Linux'])),
                system='Linux',
            ),
            version_lookup=VersionLookup(RuntimeSnapshot(sections), sources={}, use_defaults=False),
            runtime_version=runtime_version,
            timezones=timezones or (lambda: {'Europe/London', 'UTC', 'America/New_York'}),
            temp_dir=temp_dir or (lambda: str(tmp_path)),
            probe_timeout=1.0,
        )

    return factory
