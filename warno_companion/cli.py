#!/usr/bin/env python3
"""
warno-ndf-to-json
=================

Extract WARNO units from parsed NDF descriptors and write them as JSON.

Inputs are ``.ndf`` files (run through the external parser) or JSON files
previously produced by it. All inputs are merged into one descriptor index
before extraction, so ammunition, weapon managers and units may live in
separate files.

Usage:
    warno-ndf-to-json UniteDescriptor.ndf Ammunition.ndf WeaponDescriptor.ndf -o units.json
    warno-ndf-to-json parsed/*.json --speed-modifiers speed.json --pretty --validate
"""

from __future__ import annotations

import argparse
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from warno_descriptor_extractor.diagnostics import (
    export_diagnostics,
    get_collector,
    reset_collector,
)
from warno_descriptor_extractor.extractor import DescriptorExtractor
from warno_descriptor_extractor.inputs import no_unit_cards
from warno_descriptor_extractor.validation import UnitValidator

from .config import ConfigError, Settings, load_env, load_settings, load_speed_modifiers
from .json_utils import units_to_json, write_units
from .ndf_bridge import ParserError, build_descriptor_index, load_descriptors
from .unit_cards import UnitCardTable

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_INPUT_ERROR = 1
EXIT_VALIDATION_FAILED = 2


def configure_logging(settings: Settings) -> None:
    """Configure console + rotating file logging (when WARNO_LOG_DIR is set)."""
    level = getattr(logging, settings.log_level, logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler()]

    if settings.log_dir:
        settings.log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                settings.log_dir / "warno-ndf-to-json.log",
                maxBytes=5_000_000,
                backupCount=3,
                encoding="utf-8",
            )
        )

    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="warno-ndf-to-json",
        description="Extract WARNO units from NDF descriptors as JSON",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment Variables:
  NDF_PARSER_BINARY      Path to the ndf-parser binary
  WARNO_SPEED_MODIFIERS  Default speed-modifier JSON file
  WARNO_UNIT_CARDS       Default unit-card JSON table
  WARNO_LOG_LEVEL        Logging level (default: INFO)
  WARNO_LOG_DIR          Directory for a rotating log file
        """,
    )
    parser.add_argument(
        "inputs",
        nargs="+",
        type=Path,
        help=".ndf files or saved parser JSON files",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Output JSON file (default: stdout)",
    )
    parser.add_argument(
        "--speed-modifiers",
        type=Path,
        default=None,
        help="Speed-modifier JSON file (overrides WARNO_SPEED_MODIFIERS)",
    )
    parser.add_argument(
        "--unit-cards",
        type=Path,
        default=None,
        help="Unit-card JSON table (overrides WARNO_UNIT_CARDS)",
    )
    parser.add_argument("--pretty", action="store_true", help="Indent JSON output")
    parser.add_argument(
        "--validate",
        action="store_true",
        help="Check extracted units and exit with status 2 on failures",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Extraction threads (default: 1)",
    )
    parser.add_argument(
        "--diagnostics",
        type=Path,
        default=None,
        help="Write a diagnostics report (skipped units, timings) to this file",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Main entry point. Returns the process exit code."""
    load_env()
    settings = load_settings()
    configure_logging(settings)
    args = parse_args(argv)

    try:
        descriptors = []
        for path in args.inputs:
            descriptors.extend(load_descriptors(path, settings.parser_binary))
        speed_modifiers = load_speed_modifiers(args.speed_modifiers or settings.speed_modifiers_path)
        unit_cards_path = args.unit_cards or settings.unit_cards_path
        find_unit_card = (
            UnitCardTable.from_json(unit_cards_path).find_unit_card_by_descriptor
            if unit_cards_path
            else no_unit_cards
        )
    except ParserError as e:
        location = f" (line {e.line}, col {e.col})" if e.line is not None else ""
        logger.error(f"Parser failed: {e}{location}")
        return EXIT_INPUT_ERROR
    except (ConfigError, FileNotFoundError) as e:
        logger.error(str(e))
        return EXIT_INPUT_ERROR

    index, unit_descriptors = build_descriptor_index(descriptors)
    extractor = DescriptorExtractor(index, speed_modifiers, find_unit_card)

    reset_collector()
    collector = get_collector()
    collector.start_session()
    units = extractor.extract_units(unit_descriptors, max_workers=args.workers)
    collector.end_session()

    if args.output:
        write_units(units, args.output, pretty=args.pretty)
    else:
        sys.stdout.write(units_to_json(units, pretty=args.pretty) + "\n")

    if args.diagnostics:
        export_diagnostics(args.diagnostics)

    if args.validate:
        result = UnitValidator().validate_all(units)
        for warning in result.warnings:
            logger.warning(f"[{warning['check']}] {warning['message']}")
        for issue in result.issues:
            logger.error(f"[{issue['check']}] {issue['message']}")
        logger.info(
            f"Validation: {result.checks_passed} passed, "
            f"{result.checks_failed} failed, {result.checks_warned} warnings"
        )
        if not result.valid:
            return EXIT_VALIDATION_FAILED

    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
