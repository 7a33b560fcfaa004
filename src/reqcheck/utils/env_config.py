"""Environment configuration loader and validator"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

# Default configuration values
DEFAULTS = {
    # Logging
    'REQCHECK_LOG_LEVEL': 'WARNING',
    'REQCHECK_LOG_FILE': '',

    # URL rewrite probe
    'REQCHECK_PROBE_TIMEOUT': '5',

    # Web front-end
    'REQCHECK_WEB_HOST': '127.0.0.1',
    'REQCHECK_WEB_PORT': '8080',
}

VALID_LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']


def find_env_file() -> Optional[Path]:
    """Find the .env file in standard locations"""
    search_paths = [
        Path.cwd() / '.env',
        Path.home() / '.reqcheck.env',
    ]

    for path in search_paths:
        if path.exists():
            return path

    return None


def load_env_file(env_path: Optional[Path] = None) -> Dict[str, str]:
    """Load environment variables from a .env file

    Variables already set in the environment win over the file.

    Args:
        env_path: Optional path to .env file. If None, auto-discovers.

    Returns:
        Dictionary of variables read from the file
    """
    loaded_vars = {}

    if env_path is None:
        env_path = find_env_file()

    if env_path is None or not env_path.exists():
        return loaded_vars

    try:
        with open(env_path, 'r') as f:
            for line in f:
                line = line.strip()

                # Skip empty lines and comments
                if not line or line.startswith('#') or '=' not in line:
                    continue

                key, _, value = line.partition('=')
                key = key.strip()
                value = value.strip()

                # Remove quotes if present
                if len(value) >= 2 and value[0] in ('"', "'") and value[-1] == value[0]:
                    value = value[1:-1]

                if key:
                    loaded_vars[key] = value
                    os.environ.setdefault(key, value)

    except OSError as e:
        logger.warning(f"Could not load .env file {env_path}: {e}")

    return loaded_vars


def get_config(key: str, default: Optional[str] = None) -> str:
    """Get configuration value from environment or defaults

    Priority:
    1. Environment variable
    2. Provided default
    3. Built-in default
    """
    value = os.environ.get(key)
    if value is not None:
        return value
    if default is not None:
        return default
    return DEFAULTS.get(key, '')


def get_config_bool(key: str, default: bool = False) -> bool:
    """Get boolean configuration value"""
    value = get_config(key, str(default).lower())
    return value.lower() in ('true', 'yes', '1', 'on')


def get_config_int(key: str, default: int = 0) -> int:
    """Get integer configuration value"""
    try:
        return int(get_config(key, str(default)))
    except ValueError:
        return default


def get_config_float(key: str, default: float = 0.0) -> float:
    """Get float configuration value"""
    try:
        return float(get_config(key, str(default)))
    except ValueError:
        return default


def validate_config() -> Dict[str, Any]:
    """Validate current configuration and return status

    Returns:
        Dictionary with validation results
    """
    results = {
        'valid': True,
        'warnings': [],
        'errors': [],
        'config': {}
    }

    log_level = get_config('REQCHECK_LOG_LEVEL').upper()
    if log_level not in VALID_LOG_LEVELS:
        results['errors'].append(f"Invalid REQCHECK_LOG_LEVEL: {log_level}")
        results['valid'] = False
    results['config']['log_level'] = log_level

    try:
        timeout = float(get_config('REQCHECK_PROBE_TIMEOUT'))
    except ValueError:
        timeout = -1.0
    if timeout <= 0:
        results['warnings'].append(
            f"REQCHECK_PROBE_TIMEOUT must be a positive number of seconds, using {DEFAULTS['REQCHECK_PROBE_TIMEOUT']}"
        )
        timeout = float(DEFAULTS['REQCHECK_PROBE_TIMEOUT'])
    results['config']['probe_timeout'] = timeout

    try:
        port = int(get_config('REQCHECK_WEB_PORT'))
    except ValueError:
        port = -1
    if not 0 < port < 65536:
        results['errors'].append(f"Invalid REQCHECK_WEB_PORT: {get_config('REQCHECK_WEB_PORT')}")
        results['valid'] = False
    results['config']['web_port'] = port
    results['config']['web_host'] = get_config('REQCHECK_WEB_HOST')
    results['config']['log_file'] = get_config('REQCHECK_LOG_FILE') or None

    return results


def initialize_config() -> Dict[str, Any]:
    """Load the .env file and validate. Call this at application startup."""
    env_file = find_env_file()
    loaded = load_env_file(env_file)

    if loaded:
        logger.info(f"Loaded {len(loaded)} settings from {env_file}")

    return validate_config()
