"""
reqcheck Web Front-end

Serves the requirements report inside a web request, where it renders as
HTML and includes the webserver URL rewrite check.

Usage:
    from reqcheck.web import create_app
    app = create_app()
    app.run(threaded=True)
"""

import logging
from typing import Callable, Optional

from flask import Flask

from ..core.checker import EnvironmentChecker
from ..utils.env_config import validate_config
from .blueprints.report import report_bp

logger = logging.getLogger(__name__)


def default_checker_factory() -> EnvironmentChecker:
    return EnvironmentChecker(probe_timeout=validate_config()['config']['probe_timeout'])


def create_app(checker_factory: Optional[Callable[[], EnvironmentChecker]] = None) -> Flask:
    """
    Build the Flask application.

    Args:
        checker_factory: Returns the EnvironmentChecker for each request
    """
    app = Flask(__name__, static_folder='static')
    app.config['REQCHECK_CHECKER_FACTORY'] = checker_factory or default_checker_factory
    app.register_blueprint(report_bp)
    logger.debug("Web front-end created")
    return app


__all__ = ['create_app', 'report_bp']
