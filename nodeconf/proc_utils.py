"""
Process table queries used by the node health check.

Process existence is answered from the /proc filesystem where it exists,
and by probing with signal 0 elsewhere. No external dependencies (no psutil).
"""

import os
from pathlib import Path
from typing import Dict, Optional


PROC_ROOT = Path("/proc")


def check_process_running(pid: int) -> bool:
    """
    Check if a process with the given id exists.

    Args:
        pid: Process ID to check

    Returns:
        True if process exists, False otherwise
    """
    if pid <= 0:
        return False

    if PROC_ROOT.is_dir():
        return (PROC_ROOT / str(pid)).exists()

    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    except PermissionError:
        # Exists, owned by another user
        return True
    except OSError:
        return False
    return True


def parse_proc_status(pid: int) -> Optional[Dict[str, str]]:
    """
    Parse /proc/[pid]/status into a key-value dictionary.

    Args:
        pid: Process ID to parse

    Returns:
        Dictionary of status fields, or None if process doesn't exist
        or /proc is not available

    Example:
        {'Name': 'bitcoind', 'State': 'S (sleeping)', 'Pid': '123', ...}
    """
    status_file = PROC_ROOT / str(pid) / "status"

    if not status_file.exists():
        return None

    info = {}
    try:
        with open(status_file, 'r') as f:
            for line in f:
                if ':' in line:
                    key, value = line.split(':', 1)
                    info[key.strip()] = value.strip()
    except (OSError, ValueError):
        return None

    return info


def process_name(pid: int) -> Optional[str]:
    """Return the executable name of a running process, if /proc knows it."""
    info = parse_proc_status(pid)
    if info is None:
        return None
    return info.get('Name')
