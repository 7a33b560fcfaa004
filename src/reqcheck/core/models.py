"""
Requirement Check Data Models

These data structures are shared by the checker, formatter and driver:
- CLI and Web both render the same CheckResult objects
- JSON serialization built-in for --json and /api/report
- Snapshots are read-only once built
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple, Union


# === Status Enums ===

class CheckStatus(Enum):
    """Rendered status of a single requirement check."""
    PASSED = "passed"     # Requirement met
    WARNING = "warning"   # Not met, but the application still runs
    FAILED = "failed"     # Not met - the application cannot run


class Severity(Enum):
    """How much a failing check matters. Set by the driver, never computed."""
    FATAL = "fatal"
    WARNING = "warning"
    INFO = "info"


class OutputMode(Enum):
    """Rendering target, fixed for the lifetime of one report."""
    TERMINAL = "terminal"
    DOCUMENT = "document"

    @classmethod
    def for_environ(cls, environ: Optional[Mapping[str, str]]) -> 'OutputMode':
        """DOCUMENT when the environ carries an inbound Host header."""
        if environ and environ.get('HTTP_HOST'):
            return cls.DOCUMENT
        return cls.TERMINAL


# === Core Result Types ===

@dataclass
class CheckResult:
    """
    Result of a single requirement check.

    Every check in the report produces exactly one CheckResult, which is
    rendered as exactly one line.

    Attributes:
        name: Label shown when the check passes
        passed: Boolean outcome of the assertion
        severity: FATAL or WARNING (INFO never fails the report)
        detail: Message shown instead of the label when the check fails
        category: Report block the check belongs to
        duration_ms: How long the check took
    """
    name: str
    passed: bool
    severity: Severity = Severity.FATAL
    detail: Optional[str] = None
    category: Optional[str] = None
    duration_ms: Optional[float] = None

    @property
    def is_fatal(self) -> bool:
        return self.severity == Severity.FATAL

    @property
    def status(self) -> CheckStatus:
        """Three-way status: passed, warning or failed."""
        if self.passed:
            return CheckStatus.PASSED
        return CheckStatus.FAILED if self.is_fatal else CheckStatus.WARNING

    def is_failure(self) -> bool:
        """Return True if the check failed fatally."""
        return self.status == CheckStatus.FAILED

    def to_dict(self) -> dict:
        """Serialize for API/JSON output."""
        return {
            "name": self.name,
            "passed": self.passed,
            "status": self.status.value,
            "severity": self.severity.value,
            "detail": self.detail,
            "category": self.category,
            "duration_ms": self.duration_ms,
        }


SnapshotValue = Union[str, Tuple[str, str]]


class RuntimeSnapshot(Mapping):
    """
    Read-only nested mapping: section -> key -> value.

    Values are either a single string or a (local, master) pair, matching
    the two- and three-column rows of an info dump. Built once, before any
    check runs, by a PlatformInfoProvider.
    """

    def __init__(self, sections: Optional[Mapping[str, Mapping[str, SnapshotValue]]] = None):
        frozen = {}
        for name, entries in (sections or {}).items():
            frozen[name] = MappingProxyType(dict(entries))
        self._sections = MappingProxyType(frozen)

    def __getitem__(self, section: str) -> Mapping[str, SnapshotValue]:
        return self._sections[section]

    def __iter__(self):
        return iter(self._sections)

    def __len__(self) -> int:
        return len(self._sections)

    def section(self, name: str) -> Mapping[str, SnapshotValue]:
        """Return a section, or an empty mapping if it is missing."""
        return self._sections.get(name, MappingProxyType({}))

    def to_dict(self) -> Dict[str, Dict[str, SnapshotValue]]:
        return {name: dict(entries) for name, entries in self._sections.items()}

    def __repr__(self) -> str:
        return f"RuntimeSnapshot({len(self)} sections)"


@dataclass
class RequestContext:
    """
    The parts of an inbound web request the report uses.

    Built from a WSGI environ; absent when running from a terminal.
    """
    host: str
    port: Optional[int] = None
    script_name: str = ""
    user_agent: Optional[str] = None
    server_software: Optional[str] = None

    @classmethod
    def from_environ(cls, environ: Mapping[str, str]) -> Optional['RequestContext']:
        """Return a context, or None when the environ has no Host header."""
        host = environ.get('HTTP_HOST')
        if not host:
            return None
        try:
            port = int(environ.get('SERVER_PORT', ''))
        except ValueError:
            port = None
        return cls(
            host=host,
            port=port,
            script_name=environ.get('SCRIPT_NAME', ''),
            user_agent=environ.get('HTTP_USER_AGENT'),
            server_software=environ.get('SERVER_SOFTWARE'),
        )


@dataclass
class Report:
    """
    A complete requirements report.

    Contains the rendered text and the ordered check results that produced
    it. Can be serialized to JSON for the API.
    """
    mode: OutputMode
    text: str
    results: List[CheckResult] = field(default_factory=list)

    @property
    def summary(self) -> Dict[str, int]:
        """Counts by status."""
        counts = {status.value: 0 for status in CheckStatus}
        for result in self.results:
            counts[result.status.value] += 1
        return counts

    @property
    def has_failures(self) -> bool:
        """True if any fatal check failed."""
        return any(r.is_failure() for r in self.results)

    @property
    def exit_code(self) -> int:
        return 1 if self.has_failures else 0

    def to_dict(self) -> dict:
        """Serialize for API/JSON output."""
        return {
            "mode": self.mode.value,
            "summary": self.summary,
            "checks": [r.to_dict() for r in self.results],
        }
