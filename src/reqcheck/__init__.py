"""
reqcheck - checks that a server can run Python web applications.

Inspects the running interpreter and host (version, modules, runtime flags,
memory limit, search path, timezone, URL rewriting) and reports each
requirement as passed, warning or failed.
"""

from .__version__ import __version__

__all__ = ['__version__']
