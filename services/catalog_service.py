"""
Catalog Service - Lifecycle of the Scryfall oracle-cards bulk file.

Stages, each returning a plain result object for the controller:

1. locate: newest ``oracle-cards-<YYYYMMDDHHMMSS>.json`` in the data directory
2. age check: decide between loading the local file and downloading a new one
3. download: two-step fetch (bulk metadata, then the file itself)
4. load: decode the JSON array and build the catalog index
5. prune: keep at most ``retention`` catalog files after a download
"""

from __future__ import annotations

import json
import os
import re
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

from curl_cffi import requests
from loguru import logger

from repositories.card_repository import CardRepository
from utils.card_data import decode_catalog
from utils.constants import (
    BULK_DATA_URL,
    CATALOG_MARKER,
    CHUNK_SIZE,
    DEFAULT_AGE_LIMIT_DAYS,
    DEFAULT_RETENTION,
    REQUEST_TIMEOUT,
    USER_AGENT,
)
from utils.errors import CatalogAbsent, CatalogCorrupt, NetworkFailure
from utils.game_constants import Currency

TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"
_TIMESTAMP_PATTERN = re.compile(rf"{re.escape(CATALOG_MARKER)}-([^.]*)")


def parse_catalog_timestamp(filename: str) -> int:
    """Numeric timestamp embedded in a catalog filename; 0 when unreadable."""
    match = _TIMESTAMP_PATTERN.search(filename)
    if not match:
        return 0
    digits = match.group(1).strip()
    return int(digits) if digits.isdecimal() else 0


def timestamp_to_datetime(timestamp: int) -> datetime | None:
    try:
        return datetime.strptime(f"{timestamp:014d}", TIMESTAMP_FORMAT)
    except ValueError:
        return None


def is_stale(timestamp: int, now: datetime, age_limit_days: int) -> bool:
    """True when the file is older than ``age_limit_days`` whole days."""
    stamped = timestamp_to_datetime(timestamp)
    if stamped is None:
        return True
    return now - stamped > timedelta(days=age_limit_days)


@dataclass(frozen=True)
class CatalogCheck:
    """Where the catalog pipeline stands after the age check or a download."""

    data_dir: Path
    filename: str = ""
    timestamp: int = 0
    need_download: bool = False
    ready_load: bool = False
    downloaded: bool = False
    degraded: bool = False
    status: str = "Waiting on startup checks..."

    @property
    def path(self) -> Path | None:
        return self.data_dir / self.filename if self.filename else None


@dataclass(frozen=True)
class CatalogLoad:
    index: CardRepository
    path: Path
    skipped: int
    status: str


class CatalogService:
    """Locates, refreshes, loads and prunes the local catalog files."""

    def __init__(
        self,
        data_dir: Path,
        age_limit_days: int = DEFAULT_AGE_LIMIT_DAYS,
        retention: int = DEFAULT_RETENTION,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.data_dir = Path(data_dir)
        self.age_limit_days = age_limit_days
        self.retention = retention
        self._clock = clock

    # ============= Locate / age check =============

    def catalog_files(self) -> list[tuple[str, int]]:
        """All catalog files in the data directory as (filename, timestamp), oldest first."""
        if not self.data_dir.is_dir():
            return []
        found = [
            (entry.name, parse_catalog_timestamp(entry.name))
            for entry in self.data_dir.iterdir()
            if entry.is_file() and CATALOG_MARKER in entry.name and not entry.name.endswith(".part")
        ]
        return sorted(found, key=lambda item: (item[1], item[0]))

    def locate(self) -> tuple[str, int] | None:
        """Newest catalog file by embedded timestamp."""
        files = self.catalog_files()
        return files[-1] if files else None

    def age_check(self) -> CatalogCheck:
        located = self.locate()
        if located is None:
            logger.info(f"No card database found in {self.data_dir}")
            return CatalogCheck(
                data_dir=self.data_dir,
                need_download=True,
                status="No card database file found.  Downloading latest from Scryfall...",
            )
        filename, timestamp = located
        if is_stale(timestamp, self._clock(), self.age_limit_days):
            logger.info(f"Card database {filename} is older than {self.age_limit_days} days")
            return CatalogCheck(
                data_dir=self.data_dir,
                filename=filename,
                timestamp=timestamp,
                need_download=True,
                status=(
                    f"Database file found, but it is older than {self.age_limit_days} days.  "
                    "Downloading new file..."
                ),
            )
        return CatalogCheck(
            data_dir=self.data_dir,
            filename=filename,
            timestamp=timestamp,
            ready_load=True,
            status=f"Recent database file found: {filename}",
        )

    # ============= Download =============

    def fetch_bulk_metadata(self) -> dict[str, Any]:
        """Ask Scryfall where the latest oracle-cards file lives."""
        logger.info("Fetching bulk data metadata from Scryfall...")
        resp = requests.get(
            BULK_DATA_URL,
            headers={"User-Agent": USER_AGENT, "Accept": "*/*"},
            timeout=REQUEST_TIMEOUT,
        )
        resp.raise_for_status()
        metadata = resp.json()
        if not isinstance(metadata, dict) or not metadata.get("download_uri"):
            raise NetworkFailure("No download URI in bulk data response")
        return metadata

    def fetch_latest(self) -> str:
        """
        Download the newest catalog file into the data directory.

        Returns:
            The filename written

        Raises:
            NetworkFailure: any request, size or write problem
        """
        try:
            metadata = self.fetch_bulk_metadata()
            download_uri = str(metadata["download_uri"])
            size_limit = int(metadata.get("size") or 0)
            filename = Path(urlparse(download_uri).path).name
            if not filename:
                raise NetworkFailure(f"Cannot derive a filename from {download_uri}")

            logger.info(f"Downloading bulk data from {download_uri}")
            logger.info(f"Size: {size_limit / (1024 * 1024):.1f} MB")
            resp = requests.get(
                download_uri,
                headers={"User-Agent": USER_AGENT, "Accept": "application/file"},
                timeout=REQUEST_TIMEOUT,
                stream=True,
            )
            resp.raise_for_status()

            self.data_dir.mkdir(parents=True, exist_ok=True)
            target = self.data_dir / filename
            partial = target.with_name(f"{filename}.part")
            received = 0
            try:
                with partial.open("wb") as fh:
                    for chunk in resp.iter_content(chunk_size=CHUNK_SIZE):
                        received += len(chunk)
                        if size_limit and received > size_limit:
                            raise NetworkFailure(
                                f"Download exceeded advertised size of {size_limit} bytes"
                            )
                        fh.write(chunk)
                os.replace(partial, target)
            finally:
                resp.close()
                if partial.exists():
                    partial.unlink()
        except NetworkFailure:
            raise
        except Exception as exc:
            raise NetworkFailure(f"{exc}") from exc

        logger.info(f"Bulk data downloaded successfully: {filename} ({received} bytes)")
        return filename

    def download(self, check: CatalogCheck) -> CatalogCheck:
        """
        Refresh the catalog, falling back to the previous file on failure.

        Raises:
            NetworkFailure: the download failed and no local file exists
        """
        try:
            filename = self.fetch_latest()
        except NetworkFailure as exc:
            if not check.filename:
                logger.error(f"Failed to download card database: {exc}")
                raise NetworkFailure(f"Failed to download file from Scryfall: {exc}") from exc
            logger.warning(f"Download failed, falling back to {check.filename}: {exc}")
            return replace(
                check,
                need_download=False,
                ready_load=True,
                degraded=True,
                status=(
                    f"Failed to download a new file from Scryfall: {exc}.  "
                    f"Using fallback file: {check.filename}"
                ),
            )
        return replace(
            check,
            filename=filename,
            timestamp=parse_catalog_timestamp(filename),
            need_download=False,
            ready_load=True,
            downloaded=True,
            degraded=False,
            status=f"JSON successfully downloaded: {filename}",
        )

    # ============= Load =============

    def load(self, path: Path | str, currency: Currency = Currency.USD) -> CatalogLoad:
        """
        Decode a catalog file and index it.

        Raises:
            CatalogAbsent: the file cannot be read
            CatalogCorrupt: the file is not a JSON array
        """
        path = Path(path)
        if not path.is_absolute():
            path = self.data_dir / path
        try:
            with path.open("r", encoding="utf-8") as fh:
                payload = json.load(fh)
        except FileNotFoundError as exc:
            raise CatalogAbsent(f"Card database file not found: {path}") from exc
        except OSError as exc:
            raise CatalogAbsent(f"Unable to read card database {path}: {exc}") from exc
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise CatalogCorrupt(f"Card database {path.name} is not valid JSON: {exc}") from exc

        cards, skipped = decode_catalog(payload)
        index = CardRepository(cards, currency)
        status = f"Loaded {len(index)} cards from {path.name}"
        if skipped:
            status += f" ({skipped} unreadable records skipped)"
        logger.info(status)
        return CatalogLoad(index=index, path=path, skipped=skipped, status=status)

    # ============= Prune =============

    def prune(self) -> list[Path]:
        """Delete the oldest catalog files beyond the retention count."""
        files = self.catalog_files()
        removed: list[Path] = []
        while len(files) > self.retention:
            filename, _ = files.pop(0)
            target = self.data_dir / filename
            try:
                target.unlink()
            except OSError as exc:
                logger.warning(f"Unable to delete old card database {target}: {exc}")
                break
            logger.info(f"Pruned old card database {filename}")
            removed.append(target)
        return removed


__all__ = [
    "CatalogCheck",
    "CatalogLoad",
    "CatalogService",
    "is_stale",
    "parse_catalog_timestamp",
    "timestamp_to_datetime",
]
