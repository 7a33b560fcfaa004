"""
Report Blueprint - the HTML report, its JSON form, and the rewrite test

The rewrite test endpoint is what the URL rewrite probe requests: when the
webserver routes pretty URLs to the application, the probe sees the marker.
"""

from flask import Blueprint, Response, current_app, jsonify, request, send_from_directory

from ...core.driver import ReportDriver
from ...core.models import OutputMode, RequestContext

report_bp = Blueprint('report', __name__)


def _build_report():
    context = RequestContext.from_environ(request.environ)
    checker = current_app.config['REQCHECK_CHECKER_FACTORY']()
    mode = OutputMode.for_environ(request.environ)
    return ReportDriver(checker, context=context, mode=mode).generate()


@report_bp.route('/')
def index():
    """Render the requirements report as an HTML page."""
    report = _build_report()
    return Response(report.text, mimetype='text/html')


@report_bp.route('/api/report')
def api_report():
    """Requirements report as JSON."""
    report = _build_report()
    data = report.to_dict()
    data['exit_code'] = report.exit_code
    return jsonify(data)


@report_bp.route('/rewritetest/test-url')
def rewrite_test():
    """Echo the test query so the probe can recognise a rewritten request."""
    value = request.args.get('testquery', '')
    return Response(f"rewritetest queryval: {value}", mimetype='text/plain')


@report_bp.route('/styles.css')
def stylesheet():
    return send_from_directory(current_app.static_folder, 'styles.css', mimetype='text/css')
