"""Diagnostics collection for batch unit extraction.

Tracks which units were skipped (and why) plus per-unit timings, without
keeping any extracted data. The collector is thread-local so parallel
batches on different threads do not mix their reports.
"""

from __future__ import annotations

import logging
import platform
import sys
import threading
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import orjson

logger = logging.getLogger(__name__)

_diagnostics_tls = threading.local()


@dataclass
class ExtractionTiming:
    """Timing information for a single unit extraction."""

    descriptor: str
    duration_ms: float


@dataclass
class DiagnosticsCollector:
    """Collects skipped units, warnings and timings for one extraction run."""

    python_version: str = field(default_factory=lambda: sys.version)
    platform_info: str = field(default_factory=lambda: platform.platform())

    skipped: list[dict[str, Any]] = field(default_factory=list)
    warnings: list[dict[str, Any]] = field(default_factory=list)
    timings: list[ExtractionTiming] = field(default_factory=list)

    started_at: float | None = None
    ended_at: float | None = None

    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def start_session(self) -> None:
        self.started_at = time.time()

    def end_session(self) -> None:
        self.ended_at = time.time()

    def record_skip(self, descriptor: str, error: Exception) -> None:
        """Record a unit that failed extraction and was left out of the output."""
        with self._lock:
            self.skipped.append(
                {
                    "descriptor": descriptor,
                    "error_type": type(error).__name__,
                    "message": str(error),
                    "timestamp": time.time(),
                }
            )

    def record_warning(self, descriptor: str, message: str) -> None:
        with self._lock:
            self.warnings.append({"descriptor": descriptor, "message": message, "timestamp": time.time()})

    def record_timing(self, descriptor: str, duration_ms: float) -> None:
        with self._lock:
            self.timings.append(ExtractionTiming(descriptor=descriptor, duration_ms=duration_ms))


def get_collector() -> DiagnosticsCollector:
    """Get or create the thread-local diagnostics collector."""
    if not hasattr(_diagnostics_tls, "collector"):
        _diagnostics_tls.collector = DiagnosticsCollector()
    return _diagnostics_tls.collector


def reset_collector() -> None:
    _diagnostics_tls.collector = DiagnosticsCollector()


def get_diagnostics() -> dict[str, Any]:
    """Summarize the current collector.

    Returns:
        Dict with system info, skipped units, warnings and timing stats
    """
    collector = get_collector()
    durations = [timing.duration_ms for timing in collector.timings]
    session_duration = None
    if collector.started_at is not None and collector.ended_at is not None:
        session_duration = round(collector.ended_at - collector.started_at, 3)

    return {
        "system": {
            "python_version": collector.python_version,
            "platform": collector.platform_info,
        },
        "session_duration_s": session_duration,
        "units_extracted": len(durations),
        "units_skipped": len(collector.skipped),
        "skipped": list(collector.skipped),
        "warnings": list(collector.warnings),
        "timing": {
            "total_ms": round(sum(durations), 2),
            "max_ms": round(max(durations), 2) if durations else 0,
            "slowest": [
                {"descriptor": timing.descriptor, "duration_ms": round(timing.duration_ms, 2)}
                for timing in sorted(collector.timings, key=lambda t: t.duration_ms, reverse=True)[:5]
            ],
        },
    }


def export_diagnostics(filepath: str | Path) -> Path:
    """Write the diagnostics summary as JSON and return the written path."""
    path = Path(filepath)
    path.write_bytes(orjson.dumps(get_diagnostics(), option=orjson.OPT_INDENT_2))
    logger.info(f"Diagnostics exported to {path}")
    return path
