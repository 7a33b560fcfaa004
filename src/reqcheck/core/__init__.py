"""
Requirement checks for reqcheck

Usage:
    from reqcheck.core import EnvironmentChecker, ReportDriver

    report = ReportDriver(EnvironmentChecker()).generate()
    print(report.text)
"""

from .models import (
    CheckStatus,
    Severity,
    OutputMode,
    CheckResult,
    RuntimeSnapshot,
    RequestContext,
    Report,
)
from .checker import EnvironmentChecker, scoped_setting
from .formatter import ReportFormatter
from .driver import ReportDriver

__all__ = [
    'EnvironmentChecker',
    'ReportFormatter',
    'ReportDriver',
    'scoped_setting',
    'CheckStatus',
    'Severity',
    'OutputMode',
    'CheckResult',
    'RuntimeSnapshot',
    'RequestContext',
    'Report',
]
