from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import tomli_w
from loguru import logger

from utils import constants
from utils.errors import ConfigInvalid, FileWriteError
from utils.game_constants import Currency


@dataclass
class DecklistConfig:
    """User preferences persisted in ``config.toml``."""

    use_database: bool = True
    database_path: str = field(default_factory=lambda: str(constants.DATA_DIR))
    database_age_limit: int = constants.DEFAULT_AGE_LIMIT_DAYS
    database_num: int = constants.DEFAULT_RETENTION
    collection_path: str | None = None
    currency: Currency = Currency.USD

    @property
    def data_dir(self) -> Path:
        return Path(self.database_path).expanduser()

    @classmethod
    def from_dict(
        cls, data: dict[str, Any], defaults: DecklistConfig | None = None
    ) -> DecklistConfig:
        """Build a config from parsed TOML, falling back to defaults per key."""
        defaults = defaults or cls()
        collection_path = data.get("collection_path")
        return cls(
            use_database=coerce_bool(data.get("use_database", defaults.use_database)),
            database_path=str(data.get("database_path") or defaults.database_path),
            database_age_limit=clamp_int(
                data.get("database_age_limit"),
                default=defaults.database_age_limit,
                minimum=constants.MIN_AGE_LIMIT_DAYS,
                maximum=constants.MAX_AGE_LIMIT_DAYS,
            ),
            database_num=clamp_int(
                data.get("database_num"),
                default=defaults.database_num,
                minimum=constants.MIN_RETENTION,
                maximum=constants.MAX_RETENTION,
            ),
            collection_path=str(collection_path) if collection_path else None,
            currency=Currency.parse(data.get("currency"), default=defaults.currency),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "use_database": self.use_database,
            "database_path": self.database_path,
            "database_age_limit": self.database_age_limit,
            "database_num": self.database_num,
            "currency": self.currency.value,
        }
        if self.collection_path:
            data["collection_path"] = self.collection_path
        return data


def coerce_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


def clamp_int(value: Any, *, default: int, minimum: int, maximum: int) -> int:
    if value is None or isinstance(value, bool):
        return default
    try:
        number = int(float(value))
    except (TypeError, ValueError):
        return default
    return max(minimum, min(number, maximum))


class ConfigService:
    """Loads and persists the decklist config file."""

    def __init__(self, config_path: Path | None = None, data_dir: Path | None = None) -> None:
        self.config_path = config_path or constants.CONFIG_FILE
        self.data_dir = data_dir or constants.DATA_DIR

    def defaults(self) -> DecklistConfig:
        return DecklistConfig(database_path=str(self.data_dir))

    def read(self) -> DecklistConfig:
        """
        Parse the config file.

        Raises:
            FileNotFoundError: no config file yet
            ConfigInvalid: the file is not valid TOML or not a table
        """
        try:
            with self.config_path.open("rb") as fh:
                data = tomllib.load(fh)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigInvalid(f"Invalid config file {self.config_path}: {exc}") from exc
        except UnicodeDecodeError as exc:
            raise ConfigInvalid(f"Config file {self.config_path} is not UTF-8: {exc}") from exc
        return DecklistConfig.from_dict(data, self.defaults())

    def load(self) -> tuple[DecklistConfig, str, bool]:
        """
        Load the config, falling back to defaults on any problem.

        Returns:
            (config, status message, whether the file was read)
        """
        try:
            config = self.read()
        except FileNotFoundError:
            logger.info(f"No config file at {self.config_path}; using defaults")
            return (
                self.defaults(),
                "No config file found.  Press C to create one.  Using default settings...",
                False,
            )
        except (ConfigInvalid, OSError) as exc:
            logger.warning(f"Failed to load config: {exc}")
            return (
                self.defaults(),
                f"Failed to load config file: {exc}.  Using default settings...",
                False,
            )
        logger.info(f"Loaded config from {self.config_path}")
        return config, "Config successfully loaded.", True

    def save(self, config: DecklistConfig) -> Path:
        """
        Persist the config.

        Raises:
            FileWriteError: the file or its directory cannot be written
        """
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            with self.config_path.open("wb") as fh:
                tomli_w.dump(config.to_dict(), fh)
        except OSError as exc:
            raise FileWriteError(f"Unable to write config {self.config_path}: {exc}") from exc
        logger.info(f"Saved config to {self.config_path}")
        return self.config_path

    def create_default(self) -> Path:
        """Write a config file holding the default settings."""
        return self.save(self.defaults())


__all__ = ["ConfigService", "DecklistConfig", "clamp_int", "coerce_bool"]
