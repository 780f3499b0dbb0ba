"""Program directory checks run before anything touches the disk."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from loguru import logger

from utils import constants
from utils.errors import FileWriteError

MISSING_DIRECTORIES_STATUS = "Program directories do not exist.  Hit enter to create them now."


@dataclass(frozen=True)
class DirectoryCheck:
    config_dir: Path
    data_dir: Path
    config_dir_exists: bool
    data_dir_exists: bool
    status: str

    @property
    def ready(self) -> bool:
        return self.config_dir_exists and self.data_dir_exists


def directory_check(
    config_dir: Path = constants.CONFIG_DIR, data_dir: Path = constants.DATA_DIR
) -> DirectoryCheck:
    """Report whether the config and data directories exist."""
    config_exists = config_dir.is_dir()
    data_exists = data_dir.is_dir()
    if config_exists and data_exists:
        status = f"Directory found at {config_dir}"
    else:
        status = MISSING_DIRECTORIES_STATUS
    logger.debug(f"Directory check: config={config_exists} data={data_exists}")
    return DirectoryCheck(config_dir, data_dir, config_exists, data_exists, status)


def create_directories(
    config_dir: Path = constants.CONFIG_DIR, data_dir: Path = constants.DATA_DIR
) -> DirectoryCheck:
    """
    Create the config and data directories.

    Raises:
        FileWriteError: a directory cannot be created
    """
    for path in (config_dir, data_dir):
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise FileWriteError(f"Unable to create directory {path}: {exc}") from exc
    logger.info(f"Created program directories {config_dir} and {data_dir}")
    return DirectoryCheck(
        config_dir, data_dir, True, True, f"Directories created at {config_dir} and {data_dir}"
    )


__all__ = ["DirectoryCheck", "MISSING_DIRECTORIES_STATUS", "create_directories", "directory_check"]
