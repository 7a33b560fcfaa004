"""
Report Formatter

Renders report lines for a terminal or a browser. The output mode is
chosen once, when the formatter is built, and never changes afterwards.
"""

import html
import os
import re

from .models import CheckResult, CheckStatus, OutputMode

_TAG = re.compile(r'<[^>]+>')

STYLESHEET = 'styles.css'


def strip_tags(text: str) -> str:
    """Remove markup and decode entities for plain-text output."""
    return html.unescape(_TAG.sub('', text))


def assertion_status(result: bool, is_fatal: bool = True) -> CheckStatus:
    """Three-way status of an assertion."""
    if result:
        return CheckStatus.PASSED
    return CheckStatus.FAILED if is_fatal else CheckStatus.WARNING


class ReportFormatter:
    """Format text based on whether the report goes to a terminal or a browser."""

    def __init__(self, mode: OutputMode = OutputMode.TERMINAL, eol: str = os.linesep):
        self.mode = mode
        self.eol = eol

    @property
    def is_terminal(self) -> bool:
        return self.mode == OutputMode.TERMINAL

    def render(self, text: str) -> str:
        """One line of output. Markup is stripped in the terminal."""
        if self.is_terminal:
            return strip_tags(text) + self.eol
        return text + '<br>' + self.eol

    def render_heading(self, text: str, level: int = 1) -> str:
        if self.is_terminal:
            return f"** {strip_tags(text)} **" + self.eol
        level = min(max(int(level), 1), 6)
        return f"<h{level}>{text}</h{level}>" + self.eol

    def render_assertion(self, label: str, result: bool, detail: str = '',
                         is_fatal: bool = True) -> str:
        """
        Render an assertion as ``STATUS: label`` or ``STATUS: detail``.

        Args:
            label: What was asserted, shown when it passes
            result: Outcome of the assertion
            detail: Shown instead of the label when it does not pass
            is_fatal: A failing fatal assertion is "failed", otherwise "warning"
        """
        status = assertion_status(result, is_fatal)
        text = label if result else (detail or label)
        return self.render(f'<span class="{status.value}">{status.value.upper()}: {text}</span>')

    def render_result(self, result: CheckResult) -> str:
        return self.render_assertion(result.name, result.passed, result.detail or '', result.is_fatal)

    def blank_line(self) -> str:
        if self.is_terminal:
            return self.eol
        return '<br>' + self.eol

    def document_open(self, title: str) -> str:
        """Page header; empty in the terminal."""
        if self.is_terminal:
            return ''
        return self.eol.join([
            '<html>',
            '<head>',
            f'<title>{html.escape(title)}</title>',
            '<style type="text/css">',
            f'@import url("{STYLESHEET}");',
            '</style>',
            '</head>',
            '<body>',
        ]) + self.eol

    def document_close(self) -> str:
        if self.is_terminal:
            return ''
        return '</body>' + self.eol + '</html>'
