"""Version information for reqcheck"""

__version__ = "1.2.0"
__version_info__ = (1, 2, 0)
__release_date__ = "2026-10-12"

# Version history
VERSION_HISTORY = [
    {
        "version": "1.2.0",
        "date": "2026-10-12",
        "changes": [
            "Added code cache and temp path checks",
            "Added --json output and /api/report endpoint",
            "Non-zero exit code when a fatal requirement fails",
        ]
    },
    {
        "version": "1.1.0",
        "date": "2026-09-21",
        "changes": [
            "Added memory limit, sys.path and TZ checks",
            "Added webserver URL rewrite probe",
            "Fatal and warning results are shown separately",
        ]
    },
    {
        "version": "1.0.0",
        "date": "2026-09-02",
        "changes": [
            "Initial release",
            "Python version, runtime flag and module checks",
            "Terminal and HTML output",
        ]
    },
]


def get_version():
    """Get current version string"""
    return __version__


def get_full_version():
    """Get version with release date"""
    return f"{__version__} ({__release_date__})"
