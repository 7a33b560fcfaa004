"""System utilities for OS detection and information"""

import logging
import platform
import subprocess
import sys
from typing import Callable, List, Optional, Tuple

import distro

logger = logging.getLogger(__name__)

# (exit status, output lines)
ProcessRunner = Callable[[List[str]], Tuple[int, List[str]]]


def get_system_info():
    """Get a summary of the host and interpreter"""
    info = {}

    # OS information
    info['platform'] = platform.system()
    if info['platform'] == 'Linux':
        info['os'] = distro.name(pretty=True) or 'Unknown Linux'
        info['os_version'] = distro.version() or 'Unknown'
    else:
        info['os'] = info['platform'] or 'Unknown'
        info['os_version'] = platform.version() or 'Unknown'

    info['arch'] = platform.machine()
    info['kernel'] = platform.release()

    # Interpreter
    info['python'] = platform.python_version()
    info['implementation'] = platform.python_implementation()
    info['executable'] = sys.executable or 'Unknown'
    info['prefix'] = sys.prefix

    return info


def is_windows(system: Optional[str] = None) -> bool:
    """Check if the host runs Windows"""
    return (system or platform.system()) == 'Windows'


def run_command(command, timeout=30):
    """Run a system command and return the result"""
    try:
        if isinstance(command, str):
            command = command.split()

        result = subprocess.run(
            command,
            capture_output=True,
            text=True,
            timeout=timeout
        )

        return {
            'returncode': result.returncode,
            'stdout': result.stdout,
            'stderr': result.stderr,
            'success': result.returncode == 0
        }
    except subprocess.TimeoutExpired:
        return {
            'returncode': -1,
            'stdout': '',
            'stderr': 'Command timed out',
            'success': False
        }
    except OSError as e:
        return {
            'returncode': -1,
            'stdout': '',
            'stderr': str(e),
            'success': False
        }


def run_lines(command, timeout=30) -> Tuple[int, List[str]]:
    """Run a command and return (exit status, output lines)"""
    result = run_command(command, timeout=timeout)
    if not result['success'] and result['stderr']:
        logger.debug(f"{command}: {result['stderr'].strip()}")
    return result['returncode'], result['stdout'].splitlines()


class SystemDescriber:
    """
    Best-effort one-line description of the host operating system.

    Asks the OS through an external command (``systeminfo`` on Windows,
    ``uname -a`` elsewhere) and falls back to the caller's identity, then to
    "Unknown". Never raises.
    """

    # systeminfo pads its labels to this column
    SYSTEMINFO_VALUE_COLUMN = 25

    def __init__(self, runner: ProcessRunner = run_lines, system: Optional[str] = None):
        self.runner = runner
        self.system = system

    def describe(self, fallback: Optional[str] = None) -> str:
        try:
            value = self._query()
        except Exception as e:
            logger.debug(f"System description failed: {e}")
            value = ''

        return value or fallback or 'Unknown'

    def _query(self) -> str:
        if is_windows(self.system):
            status, output = self.runner(['systeminfo'])
            if status != 0:
                return ''
            parts = [line[self.SYSTEMINFO_VALUE_COLUMN:].strip()
                     for line in output if 'OS' in line]
            return ' '.join(p for p in parts if p).strip()

        status, output = self.runner(['uname', '-a'])
        if status == 0 and output:
            return output[0].strip()
        return ''
