"""Bridge to the external NDF parser.

The parser is a separate binary that reads one ``.ndf`` file and prints the
descriptor tree as JSON on stdout. Its output can also be saved to disk and
loaded later with :func:`load_parsed_json`.

The binary can be located in multiple places (in order of priority):
0. NDF_PARSER_BINARY (environment variable or the loaded settings)
1. Development: bin/ndf-parser under the repo root
2. System: PATH-accessible ndf-parser binary

Typical use:

    descriptors = parse_ndf_file("UniteDescriptor.ndf")
    descriptors += load_parsed_json("Ammunition.json")
    index, units = build_descriptor_index(descriptors)
"""

from __future__ import annotations

import logging
import os
import platform
import shutil
import subprocess
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import orjson

from warno_descriptor_extractor.errors import MalformedToken
from warno_descriptor_extractor.extractor import DescriptorIndex
from warno_descriptor_extractor.tree import Object, node_from_json

from .paths import get_repo_root

logger = logging.getLogger(__name__)

PARSER_TIMEOUT_S = 60

# NDF class name -> DescriptorIndex attribute
INDEXED_DESCRIPTOR_TYPES = {
    "TAmmunitionDescriptor": "ammo",
    "TSmokeDescriptor": "smoke",
    "TMissileDescriptor": "missiles",
    "TWeaponManagerModuleDescriptor": "weapons",
}
UNIT_DESCRIPTOR_TYPE = "TEntityDescriptor"


class ParserError(Exception):
    """Error from the external NDF parser.

    Attributes:
        message: Human-readable error description
        line: Line number where error occurred (if available)
        col: Column number where error occurred (if available)
        exit_code: Process exit code
    """

    def __init__(
        self,
        message: str,
        line: int | None = None,
        col: int | None = None,
        exit_code: int | None = None,
    ):
        self.line = line
        self.col = col
        self.exit_code = exit_code
        super().__init__(message)


def _get_binary_path(override: Path | None = None) -> Path:
    """Get path to the ndf-parser binary.

    Args:
        override: Explicit binary path from settings; wins over every lookup

    Returns:
        Path to the binary (may not exist if not found)
    """
    if override:
        return Path(override)

    env_binary = os.environ.get("NDF_PARSER_BINARY")
    if env_binary:
        return Path(env_binary)

    binary_name = "ndf-parser.exe" if platform.system().lower() == "windows" else "ndf-parser"

    dev_path = get_repo_root(Path(__file__)) / "bin" / binary_name
    if dev_path.exists():
        return dev_path

    on_path = shutil.which(binary_name)
    if on_path:
        return Path(on_path)

    # Fallback to development path (even if not found, for error messages)
    return dev_path


def _parse_error(stderr: bytes, exit_code: int | None = None) -> dict:
    """Parse error info from stderr.

    The parser reports errors as JSON on stderr:
    {"error":"SyntaxError","message":"...","line":123,"col":45}

    Returns:
        Dict with keys: message, line, col, exit_code
    """
    try:
        err = orjson.loads(stderr)
        if not isinstance(err, dict):
            raise ValueError("non-object error payload")
        return {
            "message": err.get("message") or err.get("error", "Unknown error"),
            "line": err.get("line"),
            "col": err.get("col"),
            "exit_code": exit_code,
        }
    except ValueError:
        # Non-JSON error output (orjson.JSONDecodeError is a ValueError)
        return {
            "message": stderr.decode(errors="replace").strip() or "Unknown error",
            "line": None,
            "col": None,
            "exit_code": exit_code,
        }


def descriptors_from_json(data: Any) -> list[Object]:
    """Decode parser JSON into top-level descriptor objects.

    Accepts a JSON list of object nodes or ``{"descriptors": [...]}``.

    Raises:
        ParserError: If the payload or one of its nodes is malformed
    """
    if isinstance(data, dict):
        data = data.get("descriptors", [])
    if not isinstance(data, list):
        raise ParserError("Parser output is neither a list nor {'descriptors': [...]}")

    descriptors = []
    for entry in data:
        try:
            node = node_from_json(entry)
        except MalformedToken as e:
            raise ParserError(f"Malformed parser output: {e}") from e
        if isinstance(node, Object):
            descriptors.append(node)
        else:
            logger.debug(f"Ignoring non-object top-level node: {type(node).__name__}")
    return descriptors


def load_parsed_json(path: str | Path) -> list[Object]:
    """Load previously saved parser output.

    Raises:
        FileNotFoundError: If the file does not exist
        ParserError: If the file is not valid parser JSON
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Parsed descriptor file not found: {path}")
    try:
        data = orjson.loads(path.read_bytes())
    except orjson.JSONDecodeError as e:
        raise ParserError(f"Invalid JSON in {path}: {e}") from e
    descriptors = descriptors_from_json(data)
    logger.info(f"Loaded {len(descriptors)} descriptors from {path.name}")
    return descriptors


def parse_ndf_file(ndf_path: str | Path, parser_binary: Path | None = None) -> list[Object]:
    """Run the external parser on one NDF file.

    Raises:
        ParserError: If parsing fails or times out
        FileNotFoundError: If the binary or NDF file is not found
    """
    binary_path = _get_binary_path(parser_binary)
    if not binary_path.exists():
        raise FileNotFoundError(f"Parser binary not found: {binary_path}")

    ndf_path = Path(ndf_path)
    if not ndf_path.exists():
        raise FileNotFoundError(f"NDF file not found: {ndf_path}")

    try:
        result = subprocess.run(
            [str(binary_path), str(ndf_path), "--format", "json"],
            capture_output=True,
            timeout=PARSER_TIMEOUT_S,
        )
    except subprocess.TimeoutExpired as e:
        raise ParserError(f"Parser timed out after {PARSER_TIMEOUT_S}s on {ndf_path.name}") from e

    if result.returncode != 0:
        raise ParserError(**_parse_error(result.stderr, result.returncode))

    try:
        data = orjson.loads(result.stdout)
    except orjson.JSONDecodeError as e:
        raise ParserError(f"Parser produced invalid JSON for {ndf_path.name}: {e}") from e

    descriptors = descriptors_from_json(data)
    logger.info(f"Parsed {len(descriptors)} descriptors from {ndf_path.name}")
    return descriptors


def load_descriptors(path: str | Path, parser_binary: Path | None = None) -> list[Object]:
    """Load descriptors from ``.ndf`` (via the parser) or saved ``.json``."""
    path = Path(path)
    if path.suffix.lower() == ".ndf":
        return parse_ndf_file(path, parser_binary)
    return load_parsed_json(path)


def build_descriptor_index(descriptors: Iterable[Object]) -> tuple[DescriptorIndex, list[Object]]:
    """Route top-level descriptors into the lookup index by NDF type.

    Returns:
        Tuple of (DescriptorIndex, unit descriptors in input order)
    """
    maps: dict[str, dict[str, Object]] = {attr: {} for attr in INDEXED_DESCRIPTOR_TYPES.values()}
    units: list[Object] = []

    for descriptor in descriptors:
        if descriptor.type == UNIT_DESCRIPTOR_TYPE:
            units.append(descriptor)
            continue
        attr = INDEXED_DESCRIPTOR_TYPES.get(descriptor.type or "")
        if attr is None or not descriptor.name:
            continue
        if descriptor.name in maps[attr]:
            logger.warning(f"Duplicate {attr} descriptor {descriptor.name}; keeping the last one")
        maps[attr][descriptor.name] = descriptor

    logger.info(
        "Indexed "
        + ", ".join(f"{len(entries)} {attr}" for attr, entries in maps.items())
        + f"; {len(units)} units"
    )
    return DescriptorIndex(**maps), units
