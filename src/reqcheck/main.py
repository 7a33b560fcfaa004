#!/usr/bin/env python3
"""
reqcheck - Python Server Requirements Checker

Checks that this server can run a Python web application and prints a
report. Exits with status 1 when a fatal requirement is not met.

Usage:
    reqcheck                    # Plain text report
    reqcheck --json             # Results as JSON
    reqcheck --serve            # HTML report at http://127.0.0.1:8080/

Environment variables (or a .env file):
    REQCHECK_LOG_LEVEL=DEBUG       # Log level (default WARNING)
    REQCHECK_LOG_FILE=/tmp/rc.log  # Also log to a rotating file
    REQCHECK_PROBE_TIMEOUT=5       # URL rewrite probe timeout, seconds
    REQCHECK_WEB_HOST=0.0.0.0      # --serve bind address
    REQCHECK_WEB_PORT=9000         # --serve port
"""

import json
import logging
import sys

import click

from .__version__ import get_full_version
from .core.checker import EnvironmentChecker
from .core.driver import ReportDriver
from .utils.console import get_console, print_report
from .utils.env_config import initialize_config
from .utils.logging_config import parse_level, setup_logging

logger = logging.getLogger(__name__)


def build_checker(config: dict) -> EnvironmentChecker:
    """Checker for the running interpreter."""
    return EnvironmentChecker(probe_timeout=config['probe_timeout'])


def serve(host: str, port: int, debug: bool = False):
    """Run the web front-end."""
    from .web import create_app

    app = create_app()
    click.echo(f"Serving requirements report on http://{host}:{port}/")
    # threaded: the rewrite probe calls back into this server mid-request
    app.run(host=host, port=port, debug=debug, threaded=True)


@click.command()
@click.option('--json', 'as_json', is_flag=True, help='Print results as JSON')
@click.option('--serve', 'serve_web', is_flag=True, help='Serve the HTML report over HTTP')
@click.option('--host', default=None, help='Bind address for --serve (env: REQCHECK_WEB_HOST)')
@click.option('--port', '-p', type=int, default=None, help='Port for --serve (env: REQCHECK_WEB_PORT)')
@click.option('--debug', is_flag=True, help='Enable debug logging')
@click.option('--log-file', default=None, help='Also write logs to this file')
@click.option('--no-color', is_flag=True, help='Disable colored output')
@click.option('--version', is_flag=True, help='Show version information')
def main(as_json, serve_web, host, port, debug, log_file, no_color, version):
    """Check that this server meets the requirements for Python web applications."""

    config_result = initialize_config()
    config = config_result['config']

    level = logging.DEBUG if debug else parse_level(config['log_level'], logging.WARNING)
    setup_logging(level=level, log_file=log_file or config['log_file'], use_colors=not no_color)

    for error in config_result['errors']:
        logger.error(error)
    for warning in config_result['warnings']:
        logger.warning(warning)

    if version:
        click.echo(f"reqcheck v{get_full_version()}")
        return

    if serve_web:
        serve(host or config['web_host'], port or config['web_port'], debug=debug)
        return

    report = ReportDriver(build_checker(config)).generate()

    if as_json:
        data = report.to_dict()
        data['exit_code'] = report.exit_code
        click.echo(json.dumps(data, indent=2))
    else:
        print_report(report.text, console=get_console(no_color=no_color or None))

    sys.exit(report.exit_code)


if __name__ == '__main__':
    main()
