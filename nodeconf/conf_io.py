"""
Loading and saving bitcoin.conf files.

Saving writes to a temporary file next to the destination and renames it
into place, so an interrupted write never leaves a truncated config.
"""

import logging
import os
import sys
import tempfile
from pathlib import Path
from typing import List, Tuple

from conf_model import ConfigModel
from conf_parser import ParseIssue
from conf_writer import serialize


logger = logging.getLogger(__name__)


def default_datadir() -> Path:
    """Return the OS-dependent default data directory of Bitcoin Core."""
    if sys.platform == "win32":
        return Path(os.environ.get("APPDATA", Path.home())) / "Bitcoin"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "Bitcoin"
    return Path.home() / ".bitcoin"


def default_conf_path() -> Path:
    return default_datadir() / "bitcoin.conf"


def load_config(config_file: Path) -> Tuple[ConfigModel, List[ParseIssue]]:
    """
    Load a configuration file into a model.

    Args:
        config_file: Path to bitcoin.conf

    Returns:
        Tuple of (model, parse_issues). A missing file gives an empty model.

    Raises:
        OSError: If the file exists but cannot be read
        UnicodeDecodeError: If the file is not UTF-8 text
    """
    if not config_file.exists():
        logger.info(f"Configuration file not found, starting empty: {config_file}")
        return ConfigModel.new(), []

    # newline='' keeps CRLF line endings intact
    with open(config_file, 'r', encoding='utf-8', newline='') as f:
        text = f.read()

    model, issues = ConfigModel.from_text(text)
    for issue in issues:
        logger.warning(f"{config_file}:{issue.line}: {issue.message}")
    return model, issues


def save_config(model: ConfigModel, config_file: Path) -> Tuple[bool, str]:
    """
    Write a model to disk atomically.

    Args:
        model: Configuration to write
        config_file: Destination path

    Returns:
        Tuple of (success: bool, error_message: str)

    Example:
        success, error = save_config(model, path)
        if not success:
            logger.error(f"Could not save configuration: {error}")
    """
    text = serialize(model.document)
    directory = config_file.parent

    try:
        fd, tmp_name = tempfile.mkstemp(prefix=f".{config_file.name}.", suffix=".tmp", dir=directory)
    except OSError as e:
        return False, f"Failed to create temporary file in {directory}: {e}"

    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, 'w', encoding='utf-8', newline='') as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())

        if config_file.exists():
            os.chmod(tmp_path, config_file.stat().st_mode & 0o777)
        os.replace(tmp_path, config_file)
    except OSError as e:
        try:
            tmp_path.unlink()
        except OSError as cleanup_error:
            logger.warning(f"Could not remove temporary file {tmp_path}: {cleanup_error}")
        return False, f"Failed to write {config_file}: {e}"

    logger.info(f"Configuration saved: {config_file}")
    return True, ""
