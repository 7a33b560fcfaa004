"""
Tests for the Rich console helpers.

Run: python3 -m pytest tests/test_console.py -v
"""

import io

import pytest
from rich.console import Console

from reqcheck.utils.console import (
    REQCHECK_THEME,
    get_console,
    print_report,
    reset_console,
    style_for_line,
)


@pytest.fixture(autouse=True)
def fresh_console():
    reset_console()
    yield
    reset_console()


class TestStyleForLine:
    """Tests for line classification."""

    def test_heading(self):
        assert style_for_line('** Python modules **') == 'heading'

    def test_statuses(self):
        assert style_for_line('PASSED: ssl module available') == 'passed'
        assert style_for_line('WARNING: bz2 module not available') == 'warning'
        assert style_for_line('FAILED: ssl module not available') == 'failed'

    def test_plain(self):
        assert style_for_line('Python Version: 3.11.4') is None
        assert style_for_line('') is None


class TestConsole:
    """Tests for the console singleton and report printing."""

    def test_singleton(self):
        assert get_console() is get_console()

    def test_reset(self):
        first = get_console()
        reset_console()
        assert get_console() is not first

    def test_print_report_plain(self):
        buffer = io.StringIO()
        console = Console(file=buffer, theme=REQCHECK_THEME, no_color=True, markup=False, width=200)
        text = '** Title **\nPASSED: a [b] check\nSystem: Linux\n'

        print_report(text, console=console)

        assert buffer.getvalue() == '** Title **\nPASSED: a [b] check\nSystem: Linux\n'

    def test_print_report_colored(self):
        buffer = io.StringIO()
        console = Console(file=buffer, theme=REQCHECK_THEME, force_terminal=True,
                          color_system='standard', width=200)

        print_report('FAILED: ssl module not available\n', console=console)

        output = buffer.getvalue()
        assert 'FAILED: ssl module not available' in output
        assert '\x1b[' in output
