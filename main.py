#!/usr/bin/env python3
"""Console entry point: compare a decklist to a collection and print the results."""

from __future__ import annotations

import argparse
import sys
import time
from collections.abc import Sequence
from pathlib import Path
from typing import TextIO

from loguru import logger

from controllers.app_controller import AppController, AppSnapshot, Stage
from utils import constants
from utils.game_constants import Currency
from utils.logging_config import configure_logging

STATUS_ORDER = (
    Stage.DIRECTORY,
    Stage.CONFIG,
    Stage.DATABASE,
    Stage.DOWNLOAD,
    Stage.LOAD,
    Stage.COLLECTION,
    Stage.DECKLIST,
    Stage.MISSING,
    Stage.LEGALITY,
    Stage.PRICING,
)


class ConsoleRenderer:
    """Prints a snapshot as plain text sections."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self.stream = stream or sys.stdout

    def _section(self, title: str, lines: Sequence[str]) -> None:
        print(f"\n== {title} ==", file=self.stream)
        for line in lines:
            print(line, file=self.stream)

    def render(self, snapshot: AppSnapshot) -> None:
        width = max(len(stage.value) for stage in STATUS_ORDER)
        self._section(
            "Status",
            [
                f"{stage.value.ljust(width)}  {'ok ' if snapshot.ok[stage] else '-- '} "
                f"{snapshot.statuses[stage]}"
                for stage in STATUS_ORDER
            ],
        )
        if snapshot.missing_lines:
            self._section("Missing", snapshot.missing_lines)
        if snapshot.price_lines:
            name_width = max(len(line) for line in snapshot.missing_lines or [""])
            rows = [
                f"{missing.ljust(name_width)}  {price}"
                for missing, price in zip(snapshot.missing_lines, snapshot.price_lines)
            ]
            self._section("Prices", [*rows, snapshot.price_total])
        if snapshot.legality_lines:
            self._section("Legality", snapshot.legality_lines)
        if snapshot.export_status:
            self._section("Export", [snapshot.export_status])


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=constants.APP_NAME,
        description="Find the cards of a decklist missing from a collection, "
        "with format legality and prices from Scryfall.",
    )
    parser.add_argument("--collection", type=Path, help="Collection CSV export (Name, Count)")
    parser.add_argument("--decklist", type=Path, help="Decklist text file")
    parser.add_argument("--catalog", type=Path, help="Load this oracle-cards JSON file")
    parser.add_argument(
        "--currency",
        choices=[currency.value for currency in Currency],
        help="Currency for pricing (overrides config)",
    )
    parser.add_argument(
        "--no-database", action="store_true", help="Skip the Scryfall card database"
    )
    parser.add_argument("--copy", action="store_true", help="Copy the missing list to the clipboard")
    parser.add_argument(
        "--write-missing",
        nargs="?",
        const="",
        metavar="DIR",
        help="Write missing_<decklist>.txt (next to the decklist unless DIR is given)",
    )
    parser.add_argument(
        "--remember", action="store_true", help="Save the collection path to the config file"
    )
    parser.add_argument(
        "--create-dirs", action="store_true", help="Create the program directories if missing"
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Log debug output to stderr")
    return parser


def run_until_idle(controller: AppController, timeout: float | None = None) -> bool:
    """Tick the controller until no stage is running; False on timeout."""
    deadline = None if timeout is None else time.monotonic() + timeout
    while True:
        controller.tick()
        if controller.is_idle():
            return True
        if deadline is not None and time.monotonic() > deadline:
            return False
        time.sleep(constants.TICK_SECONDS)


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(constants.LOGS_DIR, level="DEBUG" if args.verbose else "WARNING")

    overrides: dict[str, object] = {}
    if args.currency:
        overrides["currency"] = Currency.parse(args.currency)
    if args.no_database:
        overrides["use_database"] = False

    controller = AppController(config_overrides=overrides)
    renderer = ConsoleRenderer()
    try:
        controller.start()
        run_until_idle(controller)

        directories = controller.directories
        if directories is None or not directories.ready:
            if not args.create_dirs:
                print(
                    "Program directories are missing; rerun with --create-dirs to create them.",
                    file=sys.stderr,
                )
            elif controller.create_directories():
                run_until_idle(controller)

        if args.catalog:
            controller.load_catalog_file(args.catalog)
        if args.collection:
            controller.load_collection(args.collection)
        if args.decklist:
            controller.load_decklist(args.decklist)
        run_until_idle(controller)

        if args.remember:
            controller.remember_collection_path()
        if args.copy:
            controller.copy_missing()
        if args.write_missing is not None:
            controller.write_missing(Path(args.write_missing) if args.write_missing else None)

        controller.consume_redraw()
        renderer.render(controller.snapshot())
    except KeyboardInterrupt:
        logger.info("Interrupted")
    finally:
        controller.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
