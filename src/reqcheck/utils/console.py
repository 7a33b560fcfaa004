"""
reqcheck Console Manager

Provides a singleton Rich Console for terminal output, and prints plain
text reports with each status line colored by its outcome.

Usage:
    from reqcheck.utils.console import print_report
    print_report(report.text)
"""

import threading
from typing import Optional

from rich.console import Console
from rich.text import Text
from rich.theme import Theme

# Thread-safe singleton
_console: Optional[Console] = None
_lock = threading.Lock()

REQCHECK_THEME = Theme({
    "passed": "green",
    "warning": "yellow",
    "failed": "red bold",
    "heading": "bold magenta",
    "info": "cyan",
})

# Line prefix -> theme style
STATUS_STYLES = {
    'PASSED:': 'passed',
    'WARNING:': 'warning',
    'FAILED:': 'failed',
}


def get_console(force_terminal: bool = None,
                no_color: bool = None,
                width: int = None) -> Console:
    """
    Get the singleton Console instance.

    Args:
        force_terminal: Force terminal mode (for testing)
        no_color: Disable color output
        width: Override console width
    """
    global _console

    if _console is None:
        with _lock:
            if _console is None:
                _console = Console(
                    theme=REQCHECK_THEME,
                    force_terminal=force_terminal,
                    no_color=no_color,
                    width=width,
                    highlight=False,
                    markup=False,
                )

    return _console


def reset_console():
    """Reset the console singleton (useful for testing)."""
    global _console
    with _lock:
        _console = None


def style_for_line(line: str) -> Optional[str]:
    """Theme style for one report line, or None for plain lines."""
    if line.startswith('** ') and line.endswith(' **'):
        return 'heading'
    for prefix, style in STATUS_STYLES.items():
        if line.startswith(prefix):
            return style
    return None


def print_report(text: str, console: Optional[Console] = None):
    """Print a plain text report, coloring headings and status lines."""
    console = console or get_console()
    for line in text.splitlines():
        console.print(Text(line, style=style_for_line(line) or ''), soft_wrap=True)
