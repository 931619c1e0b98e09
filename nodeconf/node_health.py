"""
Node liveness check based on the configured pid file.

The result is best effort: a pid can be recycled between reading the
file and querying the process table. Every call checks again from
scratch and nothing is cached.
"""

import logging
import re
from enum import Enum
from pathlib import Path
from typing import NamedTuple, Optional

from conf_model import ConfigModel, SectionNotFound
from conf_parser import DEFAULT_SECTION
from option_catalog import DATADIR_KEY, PID_FILE_KEY
from proc_utils import check_process_running, process_name


logger = logging.getLogger(__name__)

PID_RE = re.compile(r'[0-9]+')

# Network sections keep their data in a subdirectory of datadir
NETWORK_SUBDIRS = {
    "test": "testnet3",
    "testnet4": "testnet4",
    "signet": "signet",
    "regtest": "regtest",
}


class HealthStatus(Enum):
    NO_PID_FILE_CONFIGURED = "no_pid_file_configured"
    PID_FILE_MISSING = "pid_file_missing"
    PID_FILE_UNREADABLE = "pid_file_unreadable"
    PROCESS_NOT_RUNNING = "process_not_running"
    PROCESS_RUNNING = "process_running"


class HealthReport(NamedTuple):
    status: HealthStatus
    pid: Optional[int] = None
    pid_file: Optional[Path] = None
    process_name: Optional[str] = None

    @property
    def running(self) -> bool:
        return self.status is HealthStatus.PROCESS_RUNNING


def _lookup(model: ConfigModel, section: str, key: str) -> Optional[str]:
    # Network section first, then the top of the file
    names = [section] if section == DEFAULT_SECTION else [section, DEFAULT_SECTION]
    for name in names:
        try:
            value = model.get(name, key)
        except SectionNotFound:
            continue
        if value:
            return str(value)
    return None


def resolve_pid_file(model: ConfigModel, section: str = DEFAULT_SECTION,
                     base_dir: Optional[Path] = None) -> Optional[Path]:
    """
    Work out which pid file the node writes.

    Relative paths live in the network's data directory, e.g.
    <datadir>/testnet3 for the [test] section.

    Args:
        model: Parsed configuration
        section: Network section the node runs with
        base_dir: Directory for relative paths when no datadir is configured

    Returns:
        Path of the pid file, or None if no pid option is set
    """
    value = _lookup(model, section, PID_FILE_KEY)
    if value is None:
        return None

    pid_file = Path(value).expanduser()
    if pid_file.is_absolute():
        return pid_file

    datadir = _lookup(model, section, DATADIR_KEY)
    if datadir is not None:
        root = Path(datadir).expanduser()
    elif base_dir is not None:
        root = Path(base_dir)
    else:
        return pid_file
    return root / NETWORK_SUBDIRS.get(section, "") / pid_file


def parse_pid(text: str) -> Optional[int]:
    """Return the pid stored in a pid file's text, or None if it isn't one."""
    text = text.strip()
    if not PID_RE.fullmatch(text):
        return None
    pid = int(text)
    return pid if pid > 0 else None


def check_pid_file(pid_file: Path) -> HealthReport:
    """
    Check liveness of the process named by a pid file.

    Args:
        pid_file: Path to the pid file

    Returns:
        HealthReport; filesystem and process errors are mapped to statuses
    """
    try:
        exists = pid_file.exists()
    except OSError as e:
        logger.warning(f"Could not stat pid file {pid_file}: {e}")
        return HealthReport(HealthStatus.PID_FILE_UNREADABLE, pid_file=pid_file)
    if not exists:
        return HealthReport(HealthStatus.PID_FILE_MISSING, pid_file=pid_file)

    try:
        text = pid_file.read_text(encoding='utf-8')
    except FileNotFoundError:
        # Removed after the existence check
        return HealthReport(HealthStatus.PID_FILE_MISSING, pid_file=pid_file)
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"Could not read pid file {pid_file}: {e}")
        return HealthReport(HealthStatus.PID_FILE_UNREADABLE, pid_file=pid_file)

    pid = parse_pid(text)
    if pid is None:
        logger.warning(f"Pid file {pid_file} does not contain a process id")
        return HealthReport(HealthStatus.PID_FILE_UNREADABLE, pid_file=pid_file)

    if not check_process_running(pid):
        return HealthReport(HealthStatus.PROCESS_NOT_RUNNING, pid=pid, pid_file=pid_file)

    return HealthReport(HealthStatus.PROCESS_RUNNING, pid=pid, pid_file=pid_file,
                        process_name=process_name(pid))


def check(model: ConfigModel, section: str = DEFAULT_SECTION,
          base_dir: Optional[Path] = None) -> HealthReport:
    """
    Report whether the node configured by model is alive.

    Example:
        report = check(model, section="test")
        if not report.running:
            logger.warning(f"bitcoind not running: {report.status.value}")
    """
    pid_file = resolve_pid_file(model, section, base_dir)
    if pid_file is None:
        return HealthReport(HealthStatus.NO_PID_FILE_CONFIGURED)

    report = check_pid_file(pid_file)
    logger.debug(f"Health of {pid_file}: {report.status.value}")
    return report
