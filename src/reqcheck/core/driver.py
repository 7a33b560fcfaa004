"""
Report Driver

Runs the fixed, ordered list of requirement checks and assembles the
report. The output mode is chosen by the caller (OutputMode.for_environ):
a report generated inside a web request is an HTML page, anything else is
plain text.

Each check is isolated: if evaluating one check raises, it is recorded as a
failing result carrying the error and the report carries on.

Usage:
    driver = ReportDriver(EnvironmentChecker())
    report = driver.generate()
    print(report.text, end='')
    sys.exit(report.exit_code)
"""

import html
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Union

from .checker import EnvironmentChecker
from .formatter import ReportFormatter
from .models import CheckResult, OutputMode, Report, RequestContext, Severity
from ..utils.system import get_system_info, is_windows

logger = logging.getLogger(__name__)

TITLE = 'Python Server Requirements'

MIN_PYTHON_VERSION = '3.9'
MIN_MEMORY = '64M'
MEMORY_INCREASE = '64M'
TEST_SEARCH_PATH = '/test/path'
MIN_PIL_VERSION = '8.0'

Text = Union[str, Callable[[], str]]


def _resolve(value):
    return value() if callable(value) else value


@dataclass
class Check:
    """A named assertion plus how to report it."""
    label: Text
    evaluate: Callable[[], bool]
    detail: Text = ''
    fatal: Union[bool, Callable[[], bool]] = True
    when: Optional[Callable[[], bool]] = None


@dataclass
class Info:
    """A plain "Label: value" line."""
    label: str
    value: Callable[[], Optional[str]]
    when: Optional[Callable[[], bool]] = None


@dataclass
class Block:
    title: Optional[str]
    items: List[Union[Check, Info]] = field(default_factory=list)
    level: int = 2
    document_only: bool = False


# (flag, fatal, message when the flag is on)
RUNTIME_FLAGS = [
    ('no_site', True,
     'no_site flag (-S) is set, so site-packages are never imported. '
     'Please run Python without <strong>-S</strong>'),
    ('inspect', True,
     'inspect flag (-i, PYTHONINSPECT) is set, worker processes will stop at an interactive prompt. '
     'Please set it to <strong>Off</strong>'),
    ('optimize', False,
     'optimize flag (-O, PYTHONOPTIMIZE) is set, assert statements are removed. '
     'Please set it to <strong>Off</strong>'),
    ('dont_write_bytecode', False,
     'dont_write_bytecode flag (-B, PYTHONDONTWRITEBYTECODE) is set, every worker recompiles on start. '
     'Please set it to <strong>Off</strong>'),
    ('dev_mode', False,
     'dev_mode flag (-X dev) is set, which adds runtime overhead. '
     'Please set it to <strong>Off</strong> in production'),
    ('verbose', False,
     'verbose flag (-v, PYTHONVERBOSE) is set, every import is logged. '
     'Please set it to <strong>Off</strong>'),
]

# (module, fatal)
REQUIRED_MODULES = [
    ('ssl', True),
    ('sqlite3', True),
    ('zlib', True),
    ('hashlib', True),
    ('pyexpat', True),
    ('json', True),
    ('bz2', False),
    ('lzma', False),
    ('ctypes', False),
]

REQUIRED_TYPES = [
    'xml.dom.minidom.Document',
    'xml.etree.ElementTree.Element',
]


class ReportDriver:
    """
    Sequences the requirement checks and renders them.

    Args:
        checker: The EnvironmentChecker to evaluate checks with
        context: Inbound request, or None when run from a terminal
        system_info: Host summary (defaults to get_system_info())
        mode: Rendering target, see OutputMode.for_environ
    """

    def __init__(self, checker: EnvironmentChecker,
                 context: Optional[RequestContext] = None,
                 system_info: Optional[Dict[str, str]] = None,
                 mode: OutputMode = OutputMode.TERMINAL):
        self.checker = checker
        self.context = context
        self.mode = mode
        self.formatter = ReportFormatter(self.mode)
        self._system_info = system_info

    @property
    def system_info(self) -> Dict[str, str]:
        if self._system_info is None:
            self._system_info = get_system_info()
        return self._system_info

    # === Check execution ===

    def run_check(self, check: Check, category: Optional[str] = None) -> CheckResult:
        """Evaluate one check. Never raises."""
        start = time.time()
        try:
            label = _resolve(check.label)
        except Exception as e:
            logger.exception(f"Could not build label for check in {category}")
            label = f"check in {category or 'report'} ({e})"

        fatal = check.fatal if isinstance(check.fatal, bool) else True
        try:
            fatal = bool(_resolve(check.fatal))
            passed = bool(check.evaluate())
            detail = '' if passed else _resolve(check.detail)
        except Exception as e:
            logger.exception(f"Check '{label}' raised")
            passed = False
            detail = f"{label}: check could not run ({html.escape(str(e))})"

        result = CheckResult(
            name=label,
            passed=passed,
            severity=Severity.FATAL if fatal else Severity.WARNING,
            detail=detail or None,
            category=category,
            duration_ms=(time.time() - start) * 1000,
        )
        logger.debug(f"{result.status.value}: {label}")
        return result

    def _info_line(self, info: Info) -> str:
        try:
            value = info.value()
        except Exception as e:
            logger.exception(f"Could not read {info.label}")
            value = None
        # values may come from request headers
        return self.formatter.render(f"{info.label}: {html.escape(str(value or 'Unknown'))}")

    # === Report ===

    def generate(self) -> Report:
        """Run every check, in order, and render the full report."""
        f = self.formatter
        parts = [f.document_open(TITLE), f.render_heading(f"{TITLE} Checker", 1)]
        results: List[CheckResult] = []

        for block in self.blocks():
            if block.document_only and self.mode != OutputMode.DOCUMENT:
                continue
            if block.title:
                parts.append(f.render_heading(block.title, block.level))
            for item in block.items:
                if item.when is not None and not item.when():
                    continue
                if isinstance(item, Info):
                    parts.append(self._info_line(item))
                    continue
                result = self.run_check(item, block.title)
                results.append(result)
                parts.append(f.render_result(result))
            parts.append(f.blank_line())

        parts.append(f.document_close())

        report = Report(mode=self.mode, text=''.join(parts), results=results)
        logger.info(f"Report complete: {report.summary}")
        return report

    def blocks(self) -> List[Block]:
        return [
            self.system_block(),
            self.webserver_block(),
            self.configuration_block(),
            self.modules_block(),
            self.cache_block(),
        ]

    # === Blocks ===

    def system_block(self) -> Block:
        ctx = self.context
        user_agent = ctx.user_agent if ctx else None
        return Block('System information', [
            Info('System', lambda: self.checker.describe_host_system(user_agent)),
            Info('Distribution', lambda: self.system_info.get('os'),
                 when=lambda: self.system_info.get('platform') == 'Linux'),
            Info('Webserver Software', lambda: ctx.server_software, when=lambda: ctx is not None),
            Info('Interpreter', lambda: self.system_info.get('implementation')),
            Info('Python Version', lambda: self.checker.runtime_version),
            Info('Python executable', lambda: self.system_info.get('executable')),
        ])

    def webserver_block(self) -> Block:
        items = []
        if self.context is not None:
            url = self.checker.rewrite_test_url(self.context)
            link = html.escape(url, quote=True)
            items.append(Check(
                'URL rewrite support',
                lambda: self.checker.probe_url_rewrite_support(url),
                f'URL rewrite test failed. Please check <a href="{link}">{link}</a> in your browser directly',
                fatal=False,
            ))
        return Block('Webserver configuration', items, document_only=True)

    def configuration_block(self) -> Block:
        c = self.checker
        version = c.runtime_version

        items = [
            Check(
                f'Python version at least <strong>{MIN_PYTHON_VERSION}</strong> ({version})',
                lambda: c.is_version_at_least(MIN_PYTHON_VERSION),
                f'Python {version} is too old. At least <strong>{MIN_PYTHON_VERSION}</strong> is required',
            ),
            Check(
                lambda: f'memory limit at least <strong>{MIN_MEMORY}</strong> ({self._memory_display()})',
                lambda: c.is_memory_at_least(MIN_MEMORY),
                lambda: (f'You only have {self._memory_display()} memory. '
                         f'At least <strong>{MIN_MEMORY}</strong> is required'),
                fatal=False,
            ),
            Check(
                f'can increase memory limit by {MEMORY_INCREASE} using setrlimit()',
                lambda: c.can_raise_memory_limit(MEMORY_INCREASE),
                f'Unable to increase memory by {MEMORY_INCREASE}. '
                f'Please make sure the memory limit is at least <strong>{MIN_MEMORY}</strong>',
                fatal=lambda: not c.is_memory_at_least(MIN_MEMORY),
            ),
            Check(
                'can add module search paths using sys.path',
                lambda: c.can_extend_search_path(TEST_SEARCH_PATH),
                'Additional paths cannot be added to sys.path. Imports from outside site-packages will fail',
            ),
            Check(
                lambda: f'TZ option set and valid ({html.escape(c.config.get("date.timezone") or "")})',
                c.is_timezone_configured_and_valid,
                lambda: ('TZ needs to be set to your server timezone. '
                         f'Python guessed <strong>{time.tzname[0]}</strong>, '
                         "but it's not safe to rely on the system timezone"),
                fatal=False,
            ),
        ]

        for flag, fatal, message in RUNTIME_FLAGS:
            items.append(Check(
                f'{flag} flag set to <strong>Off</strong>',
                lambda flag=flag: c.is_config_flag_disabled(flag),
                message,
                fatal=fatal,
            ))

        return Block('Python configuration', items)

    def modules_block(self) -> Block:
        c = self.checker
        items = []
        for module, fatal in REQUIRED_MODULES:
            items.append(self._module_check(module, fatal))

        items.append(self._module_check('posix', True, when=lambda: not is_windows()))
        items.append(self._module_check('PIL', False))
        items.append(Check(
            lambda: f'PIL version at least <strong>{MIN_PIL_VERSION}</strong> ({c.capability_version("PIL") or "unknown"})',
            lambda: c.is_capability_version_at_least('PIL', MIN_PIL_VERSION),
            f'PIL (Pillow) is missing or too old. At least version {MIN_PIL_VERSION} is needed for image handling',
            fatal=False,
        ))

        for type_name in REQUIRED_TYPES:
            items.append(Check(
                f'{type_name} exists',
                lambda type_name=type_name: c.type_exists(type_name),
                f'{type_name} is not available',
            ))

        return Block('Python modules', items)

    def cache_block(self) -> Block:
        c = self.checker
        return Block('Code cache and temp path', [
            Check(
                lambda: f'code cache available ({c.bytecode_cacher() or "none"})',
                c.is_bytecode_cacher_enabled,
                'no code cache is available. Bytecode writing is disabled; '
                'please unset <strong>PYTHONDONTWRITEBYTECODE</strong> and run without <strong>-B</strong>',
                fatal=False,
            ),
            Check(
                lambda: f'default temp path is accessible ({c.default_temp_path()})',
                c.has_default_temp_path,
                'no default temp path found. Please set <strong>TMPDIR</strong> to a directory '
                'the webserver user can write to',
                fatal=False,
            ),
            Check(
                'default temp path is writable, and new directories can be created',
                c.is_temp_path_writable,
                'default temp path is not writable, new directories cannot be created. '
                'Please set <strong>TMPDIR</strong> to a directory the webserver user can write to',
                fatal=False,
                when=c.has_default_temp_path,
            ),
        ])

    # === Helpers ===

    def _module_check(self, module: str, fatal: bool, when=None) -> Check:
        return Check(
            f'{module} module available',
            lambda: self.checker.is_capability_present(module),
            f'{module} module not available',
            fatal=fatal,
            when=when,
        )

    def _memory_display(self) -> str:
        limit = self.checker.current_memory_limit()
        if limit is None:
            return 'unknown'
        if limit < 0:
            return 'unlimited'
        return self.checker.convert_bytes_to_string(limit)
