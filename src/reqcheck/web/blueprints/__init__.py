"""
Flask Blueprints for the reqcheck web front-end
"""

from .report import report_bp

__all__ = [
    'report_bp',
]
