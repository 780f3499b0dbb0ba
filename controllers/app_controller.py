"""
App Controller - Staged pipeline behind the decklist front end.

The controller owns every piece of mutable application state. Long-running
work (directory scan, config read, catalog age check, download, load, file
parsing, missing/legality/pricing) runs on background threads through
:class:`BackgroundWorker`; each stage reports back exactly once on its own
channel, and :meth:`AppController.tick` polls those channels from the UI loop,
commits results and decides what to spawn next.

The UI only ever reads :meth:`AppController.snapshot` and watches the redraw
flag.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Protocol

from loguru import logger

from repositories.card_repository import CardRepository
from services.catalog_service import CatalogCheck, CatalogLoad, CatalogService
from services.collection_service import get_collection_service
from services.config_service import ConfigService, DecklistConfig
from services.deck_service import get_deck_service
from services.export_service import copy_to_clipboard, format_missing, write_missing_file
from services.legality_service import LegalityVector, check_legality, legality_lines
from services.missing_service import find_missing_cards, missing_lines
from services.price_service import PriceReport, price_missing
from services.startup_service import DirectoryCheck, create_directories, directory_check
from utils import constants
from utils.background_worker import BackgroundWorker, StageChannel, StageResult
from utils.deck import CardRef, total_quantity
from utils.errors import DecklistError

WAITING_STATUS = "Waiting on startup checks..."
WAITING_INPUTS_STATUS = "Waiting for a collection and a decklist..."
NO_DATABASE_STATUS = "No card database loaded."
DEBUG_HISTORY = 500


class Stage(str, Enum):
    DIRECTORY = "directory"
    CONFIG = "config"
    DATABASE = "database"
    DOWNLOAD = "download"
    LOAD = "load"
    PRUNE = "prune"
    COLLECTION = "collection"
    DECKLIST = "decklist"
    MISSING = "missing"
    LEGALITY = "legality"
    PRICING = "pricing"


class StageState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    DONE = "done"
    FAILED = "failed"


CATALOG_STAGES = (Stage.DATABASE, Stage.DOWNLOAD, Stage.LOAD)
DERIVED_STAGES = (Stage.MISSING, Stage.LEGALITY, Stage.PRICING)


@dataclass(frozen=True)
class AppSnapshot:
    """Read-only view of the controller state handed to the renderer."""

    statuses: dict[Stage, str]
    states: dict[Stage, StageState]
    ok: dict[Stage, bool]
    config: DecklistConfig
    collection_path: Path | None
    collection: list[CardRef] | None
    decklist_path: Path | None
    decklist: list[CardRef] | None
    catalog_path: Path | None
    catalog_cards: int
    missing: list[CardRef] | None
    missing_lines: list[str]
    price_lines: list[str]
    price_total: str
    legality: LegalityVector | None
    legality_lines: list[str]
    export_status: str
    debug: list[str]


class Renderer(Protocol):
    def render(self, snapshot: AppSnapshot) -> None: ...


class AppController:
    """Drives the directory, config, catalog, file and comparison stages."""

    def __init__(
        self,
        config_dir: Path | None = None,
        data_dir: Path | None = None,
        *,
        worker: BackgroundWorker | None = None,
        config_overrides: dict[str, Any] | None = None,
        clock: Callable[[], datetime] = datetime.now,
        clipboard: Callable[[str], None] = copy_to_clipboard,
    ) -> None:
        self.config_dir = Path(config_dir) if config_dir else constants.CONFIG_DIR
        self.data_dir = Path(data_dir) if data_dir else constants.DATA_DIR
        self.config_service = ConfigService(
            self.config_dir / constants.CONFIG_FILE_NAME, self.data_dir
        )
        self.collection_service = get_collection_service()
        self.deck_service = get_deck_service()
        self.catalog_service: CatalogService | None = None
        self.worker = worker or BackgroundWorker()
        self._overrides = dict(config_overrides or {})
        self._clock = clock
        self._clipboard = clipboard

        # Config as read from disk and as used (with command-line overrides)
        self._file_config = self.config_service.defaults()
        self.config = self._apply_overrides(self._file_config)

        # Stage bookkeeping
        self._states: dict[Stage, StageState] = {stage: StageState.IDLE for stage in Stage}
        self._ok: dict[Stage, bool] = {stage: False for stage in Stage}
        self._statuses: dict[Stage, str] = {stage: WAITING_STATUS for stage in Stage}
        self._statuses[Stage.COLLECTION] = "No collection loaded."
        self._statuses[Stage.DECKLIST] = "No decklist loaded."
        for stage in DERIVED_STAGES:
            self._statuses[stage] = WAITING_INPUTS_STATUS
        self._channels: dict[Stage, StageChannel[Any]] = {}
        self._handlers: dict[Stage, Callable[[StageResult[Any]], None]] = {
            Stage.DIRECTORY: self._on_directory,
            Stage.CONFIG: self._on_config,
            Stage.DATABASE: self._on_database,
            Stage.DOWNLOAD: self._on_download,
            Stage.LOAD: self._on_load,
            Stage.PRUNE: self._on_prune,
            Stage.COLLECTION: self._on_collection,
            Stage.DECKLIST: self._on_decklist,
            Stage.MISSING: self._on_missing,
            Stage.LEGALITY: self._on_legality,
            Stage.PRICING: self._on_pricing,
        }

        # Application data
        self.directories: DirectoryCheck | None = None
        self.catalog_check: CatalogCheck | None = None
        self.index: CardRepository | None = None
        self.catalog_path: Path | None = None
        self.collection_path: Path | None = None
        self.collection: list[CardRef] | None = None
        self.decklist_path: Path | None = None
        self.decklist: list[CardRef] | None = None
        self.missing: list[CardRef] | None = None
        self.missing_display: list[str] = []
        self.legality: LegalityVector | None = None
        self.price_report: PriceReport | None = None
        self.export_status = ""

        # Gating
        self._catalog_override: Path | None = None
        self._load_currency = self.config.currency
        self._catalog_settled = False
        self._auto_collection_fired = False
        self._inputs_version = 0
        self._missing_version = -1

        self.redraw = True
        self._debug_lines: deque[str] = deque(maxlen=DEBUG_HISTORY)

    # ============= Loop =============

    def start(self) -> None:
        """Kick off the startup pipeline."""
        self._debug("Starting directory check")
        self._spawn(
            Stage.DIRECTORY,
            directory_check,
            self.config_dir,
            self.data_dir,
            status="Checking program directories...",
        )

    def tick(self) -> bool:
        """
        Poll every stage channel once, commit results and spawn what is now ready.

        Returns:
            Whether the snapshot changed since the redraw flag was last consumed
        """
        for stage, channel in list(self._channels.items()):
            if self._channels.get(stage) is not channel:
                continue
            result = channel.poll()
            if result is None:
                continue
            del self._channels[stage]
            self._handlers[stage](result)
        if self._missing_ready():
            self._spawn_missing()
        return self.redraw

    def consume_redraw(self) -> bool:
        redraw, self.redraw = self.redraw, False
        return redraw

    def is_idle(self) -> bool:
        """True when no stage is running and nothing is waiting to be spawned."""
        return not self._channels and not self._missing_ready()

    def snapshot(self) -> AppSnapshot:
        report = self.price_report
        return AppSnapshot(
            statuses=dict(self._statuses),
            states=dict(self._states),
            ok=dict(self._ok),
            config=self.config,
            collection_path=self.collection_path,
            collection=list(self.collection) if self.collection is not None else None,
            decklist_path=self.decklist_path,
            decklist=list(self.decklist) if self.decklist is not None else None,
            catalog_path=self.catalog_path,
            catalog_cards=len(self.index) if self.index is not None else 0,
            missing=list(self.missing) if self.missing is not None else None,
            missing_lines=list(self.missing_display),
            price_lines=[line.display for line in report.lines] if report else [],
            price_total=report.total_display if report else "",
            legality=dict(self.legality) if self.legality is not None else None,
            legality_lines=legality_lines(self.legality) if self.legality is not None else [],
            export_status=self.export_status,
            debug=list(self._debug_lines),
        )

    def close(self, timeout: float = 1.0) -> None:
        """Stop listening; stages still running are abandoned."""
        self._channels.clear()
        self.worker.shutdown(timeout=timeout)

    # ============= User actions =============

    def create_directories(self) -> bool:
        try:
            check = create_directories(self.config_dir, self.data_dir)
        except DecklistError as exc:
            self._finish(Stage.DIRECTORY, False, str(exc))
            return False
        self._debug("Program directories created")
        self._accept_directories(check)
        return True

    def create_config(self) -> Path | None:
        """Write a default config file (the current file config if one was loaded)."""
        try:
            path = self.config_service.save(self._file_config)
        except DecklistError as exc:
            self._finish(Stage.CONFIG, False, str(exc))
            return None
        self._finish(Stage.CONFIG, True, f"Config file created at {path}")
        return path

    def remember_collection_path(self) -> bool:
        """Persist the loaded collection path so it auto-loads next time."""
        if self.collection is None or self.collection_path is None:
            self._finish(Stage.CONFIG, False, "No collection loaded to remember.")
            return False
        updated = replace(self._file_config, collection_path=str(self.collection_path))
        try:
            self.config_service.save(updated)
        except DecklistError as exc:
            self._finish(Stage.CONFIG, False, str(exc))
            return False
        self._file_config = updated
        self.config = self._apply_overrides(updated)
        self._finish(Stage.CONFIG, True, f"Collection path saved to {self.config_service.config_path}")
        return True

    def load_collection(self, path: Path | str) -> None:
        self.collection_path = Path(path).expanduser().absolute()
        self._spawn(
            Stage.COLLECTION,
            self.collection_service.read_collection,
            self.collection_path,
            status=f"Loading collection {self.collection_path}...",
        )

    def load_decklist(self, path: Path | str) -> None:
        self.decklist_path = Path(path).expanduser().absolute()
        self._spawn(
            Stage.DECKLIST,
            self.deck_service.read_decklist,
            self.decklist_path,
            status=f"Loading decklist {self.decklist_path}...",
        )

    def load_catalog_file(self, path: Path | str) -> None:
        """Load a specific catalog file, skipping the age check and download.

        The chosen file stays in use for the rest of the session; startup stages
        still running report their status but no longer load a catalog.
        """
        self._catalog_override = Path(path).expanduser().absolute()
        self._catalog_settled = False
        self._spawn_load(self._catalog_override)

    def clear_collection(self) -> None:
        self.collection = None
        self.collection_path = None
        self._channels.pop(Stage.COLLECTION, None)
        self._set(Stage.COLLECTION, StageState.IDLE, False, "No collection loaded.")
        self._invalidate("collection cleared")

    def clear_decklist(self) -> None:
        self.decklist = None
        self.decklist_path = None
        self._channels.pop(Stage.DECKLIST, None)
        self._set(Stage.DECKLIST, StageState.IDLE, False, "No decklist loaded.")
        self._invalidate("decklist cleared")

    def copy_missing(self) -> bool:
        if not self.missing:
            self._export("Nothing missing to copy.")
            return False
        try:
            self._clipboard(format_missing(self.missing))
        except DecklistError as exc:
            self._export(str(exc))
            return False
        self._export(f"Copied {len(self.missing)} missing cards to the clipboard.")
        return True

    def write_missing(self, directory: Path | None = None) -> Path | None:
        if not self.missing:
            self._export("Nothing missing to write.")
            return None
        try:
            target = write_missing_file(self.missing, self.decklist_path, directory)
        except DecklistError as exc:
            self._export(str(exc))
            return None
        self._export(f"Missing cards written to {target}")
        return target

    # ============= Stage handlers =============

    def _on_directory(self, result: StageResult[DirectoryCheck]) -> None:
        if not result.ok:
            self._finish(Stage.DIRECTORY, False, result.message)
            self._catalog_unavailable("Waiting on program directories.")
            return
        self._accept_directories(result.value)

    def _accept_directories(self, check: DirectoryCheck) -> None:
        self.directories = check
        self._finish(Stage.DIRECTORY, check.ready, check.status)
        if not check.ready:
            self._set(Stage.CONFIG, StageState.IDLE, False, "No directory for config file.")
            self._catalog_unavailable("Waiting on program directories.")
            return
        if self._catalog_override is None:
            self._catalog_settled = False
        self._spawn(
            Stage.CONFIG, self.config_service.load, status="Loading config file..."
        )

    def _on_config(self, result: StageResult[tuple[DecklistConfig, str, bool]]) -> None:
        if result.ok:
            config, status, found = result.value
            self._file_config = config
            self._finish(Stage.CONFIG, found, status)
        else:
            self._file_config = self.config_service.defaults()
            self._finish(Stage.CONFIG, False, result.message)
        self.config = self._apply_overrides(self._file_config)
        self._debug(f"Config in use: {self.config.to_dict()}")

        if self._catalog_override is not None:
            self._finish(
                Stage.DATABASE, True, f"Using chosen card database {self._catalog_override.name}."
            )
            if self.config.currency != self._load_currency:
                self._catalog_settled = False
                self._spawn_load(self._catalog_override)
        elif not self.config.use_database:
            for stage in CATALOG_STAGES:
                self._finish(stage, True, "Card database disabled in config.")
            self._catalog_settled = True
            self._invalidate("card database disabled")
        else:
            self.catalog_service = None
            self._spawn(
                Stage.DATABASE,
                self._catalog().age_check,
                status="Looking for a card database...",
            )

        path = self.config.collection_path
        if (
            path
            and not self._auto_collection_fired
            and self.collection is None
            and Stage.COLLECTION not in self._channels
        ):
            self._auto_collection_fired = True
            self._debug(f"Auto-loading collection from config: {path}")
            self.load_collection(path)

    def _on_database(self, result: StageResult[CatalogCheck]) -> None:
        if not result.ok:
            self._finish(Stage.DATABASE, False, result.message)
            self._catalog_unavailable(NO_DATABASE_STATUS)
            return
        check = result.value
        self.catalog_check = check
        self._finish(Stage.DATABASE, True, check.status)
        if self._catalog_override is not None:
            self._debug(f"Keeping user-chosen card database {self._catalog_override.name}")
            return
        if check.need_download:
            self._spawn(
                Stage.DOWNLOAD,
                self._catalog().download,
                check,
                status="Downloading latest card database from Scryfall...",
            )
        elif check.ready_load and check.path is not None:
            self._spawn_load(check.path)

    def _on_download(self, result: StageResult[CatalogCheck]) -> None:
        if not result.ok:
            self._finish(Stage.DOWNLOAD, False, result.message)
            if self._catalog_override is not None:
                return
            self._set(Stage.LOAD, StageState.IDLE, False, "No card database available.")
            self._catalog_settled = True
            self._invalidate("card database unavailable")
            return
        check = result.value
        self.catalog_check = check
        self._finish(Stage.DOWNLOAD, not check.degraded, check.status)
        if check.downloaded:
            self._spawn(Stage.PRUNE, self._catalog().prune, status="Pruning old card databases...")
        if self._catalog_override is None and check.ready_load and check.path is not None:
            self._spawn_load(check.path)

    def _on_load(self, result: StageResult[CatalogLoad]) -> None:
        self._catalog_settled = True
        if not result.ok:
            self._finish(Stage.LOAD, False, result.message)
            self._invalidate("card database load failed")
            return
        loaded = result.value
        self.index = loaded.index
        self.catalog_path = loaded.path
        self._finish(Stage.LOAD, True, loaded.status)
        self._invalidate("card database loaded")

    def _on_prune(self, result: StageResult[list[Path]]) -> None:
        if not result.ok:
            self._finish(Stage.PRUNE, False, result.message)
            return
        removed = result.value
        self._finish(Stage.PRUNE, True, f"Removed {len(removed)} old card database file(s).")

    def _on_collection(self, result: StageResult[list[CardRef]]) -> None:
        if result.ok:
            self.collection = result.value
            self._finish(
                Stage.COLLECTION,
                True,
                f"Collection loaded successfully: {self.collection_path} "
                f"({len(self.collection)} unique cards)",
            )
        else:
            self.collection = None
            self._finish(Stage.COLLECTION, False, result.message)
        self._invalidate("collection changed")

    def _on_decklist(self, result: StageResult[list[CardRef]]) -> None:
        if result.ok:
            self.decklist = result.value
            self._finish(
                Stage.DECKLIST,
                True,
                f"Decklist loaded successfully: {self.decklist_path} "
                f"({len(self.decklist)} entries)",
            )
        else:
            self.decklist = None
            self._finish(Stage.DECKLIST, False, result.message)
        self._invalidate("decklist changed")

    def _on_missing(self, result: StageResult[list[CardRef] | None]) -> None:
        if not result.ok:
            self._finish(Stage.MISSING, False, result.message)
            return
        self.missing = result.value
        self.missing_display = missing_lines(self.missing, self.index)
        if self.missing:
            count = total_quantity(self.missing)
            self._finish(Stage.MISSING, True, f"{count} cards missing from collection.")
        else:
            self._finish(Stage.MISSING, True, "Nothing missing.  You own every card in this deck.")

        if self.index is None:
            self._set(Stage.LEGALITY, StageState.DONE, False, NO_DATABASE_STATUS)
            self._set(Stage.PRICING, StageState.DONE, False, NO_DATABASE_STATUS)
            return
        self._spawn(
            Stage.LEGALITY,
            check_legality,
            self.index,
            list(self.decklist or ()),
            status="Checking format legality...",
        )
        self._spawn(
            Stage.PRICING,
            price_missing,
            self.index,
            list(self.missing or ()),
            self.config.currency,
            status="Pricing missing cards...",
        )

    def _on_legality(self, result: StageResult[LegalityVector]) -> None:
        if not result.ok:
            self._finish(Stage.LEGALITY, False, result.message)
            return
        self.legality = result.value
        legal = sum(1 for flag in self.legality.values() if flag)
        self._finish(Stage.LEGALITY, True, f"Deck is legal in {legal} of {len(self.legality)} formats.")

    def _on_pricing(self, result: StageResult[PriceReport]) -> None:
        if not result.ok:
            self._finish(Stage.PRICING, False, result.message)
            return
        self.price_report = result.value
        self._finish(Stage.PRICING, True, f"Missing cards priced in {self.config.currency.value}.")

    # ============= Helpers =============

    def _catalog(self) -> CatalogService:
        if self.catalog_service is None:
            self.catalog_service = CatalogService(
                self.config.data_dir,
                self.config.database_age_limit,
                self.config.database_num,
                clock=self._clock,
            )
        return self.catalog_service

    def _spawn_load(self, path: Path) -> None:
        self._load_currency = self.config.currency
        self._spawn(
            Stage.LOAD,
            self._catalog().load,
            path,
            self.config.currency,
            status=f"Loading card database {path.name}...",
        )

    def _missing_ready(self) -> bool:
        return (
            self.collection is not None
            and self.decklist is not None
            and self._catalog_settled
            and self._missing_version != self._inputs_version
        )

    def _spawn_missing(self) -> None:
        self._missing_version = self._inputs_version
        self._spawn(
            Stage.MISSING,
            find_missing_cards,
            list(self.collection or ()),
            list(self.decklist or ()),
            status="Comparing decklist to collection...",
        )

    def _invalidate(self, reason: str) -> None:
        """Drop missing/legality/pricing results computed from older inputs."""
        self._inputs_version += 1
        self.missing = None
        self.missing_display = []
        self.legality = None
        self.price_report = None
        for stage in DERIVED_STAGES:
            self._channels.pop(stage, None)
            self._set(stage, StageState.IDLE, False, WAITING_INPUTS_STATUS)
        self._debug(f"Comparison results invalidated: {reason}")

    def _catalog_unavailable(self, status: str) -> None:
        if self._catalog_override is not None:
            return
        for stage in CATALOG_STAGES:
            self._set(stage, StageState.IDLE, False, status)
        self._catalog_settled = True

    def _apply_overrides(self, config: DecklistConfig) -> DecklistConfig:
        return replace(config, **self._overrides) if self._overrides else config

    def _spawn(self, stage: Stage, func: Callable[..., Any], *args: Any, status: str) -> None:
        self._channels[stage] = self.worker.submit(stage.value, func, *args)
        self._set(stage, StageState.RUNNING, False, status)

    def _finish(self, stage: Stage, ok: bool, status: str) -> None:
        self._set(stage, StageState.DONE if ok else StageState.FAILED, ok, status)

    def _set(self, stage: Stage, state: StageState, ok: bool, status: str) -> None:
        self._states[stage] = state
        self._ok[stage] = ok
        self._statuses[stage] = status
        self.redraw = True
        self._debug(f"[{stage.value}] {state.value}: {status}")

    def _export(self, status: str) -> None:
        self.export_status = status
        self.redraw = True
        self._debug(status)

    def _debug(self, message: str) -> None:
        logger.debug(message)
        self._debug_lines.append(f"{self._clock():%H:%M:%S} {message}")


__all__ = [
    "AppController",
    "AppSnapshot",
    "CATALOG_STAGES",
    "DERIVED_STAGES",
    "Renderer",
    "Stage",
    "StageState",
]
