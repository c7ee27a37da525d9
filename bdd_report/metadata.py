"""Execution metadata sidecar written around a test run."""

import logging
from datetime import datetime
from pathlib import Path

from pydantic import ValidationError

from bdd_report.models.sidecar import SidecarMetadata

log = logging.getLogger(__name__)

SIDECAR_FILENAME = "execution-metadata.json"
FRAMEWORK_NAME = "Playwright BDD"
FRAMEWORK_VERSION = "1.0.0"


def load_sidecar_metadata(path: Path) -> SidecarMetadata | None:
    """Load the sidecar file, returning None when absent or unreadable."""
    if not path.exists():
        return None

    try:
        metadata = SidecarMetadata.model_validate_json(path.read_bytes())
    except (OSError, ValidationError) as exc:
        log.warning("Could not load execution metadata file %s: %s", path, exc)
        return None

    log.info("Loaded execution metadata from %s", path)
    return metadata


def record_execution_start(
    reports_dir: Path, browser: str, environment: str, now: datetime
) -> Path:
    """Create the sidecar at the start of a run, replacing any previous one."""
    reports_dir.mkdir(parents=True, exist_ok=True)
    path = reports_dir / SIDECAR_FILENAME
    metadata = SidecarMetadata(
        start_time=now,
        browser=browser,
        environment=environment,
        framework=FRAMEWORK_NAME,
        version=FRAMEWORK_VERSION,
    )
    _write(path, metadata)
    log.info("Test execution started at %s", now.isoformat())
    return path


def record_execution_end(
    reports_dir: Path, executed_scenarios: int, now: datetime
) -> SidecarMetadata | None:
    """Complete the sidecar with end time, duration and scenario count.

    Returns the updated metadata, or None if no start was recorded.
    """
    path = reports_dir / SIDECAR_FILENAME
    metadata = load_sidecar_metadata(path)
    if metadata is None:
        log.warning("No execution metadata at %s, cannot record end", path)
        return None

    total_duration = 0
    if metadata.start_time is not None:
        elapsed = now - metadata.start_time
        total_duration = max(0, int(elapsed.total_seconds() * 1000))

    updated = metadata.model_copy(
        update={
            "end_time": now,
            "total_duration": total_duration,
            "total_scenarios": executed_scenarios,
        }
    )
    _write(path, updated)
    log.info(
        "Test execution completed at %s (%.2fs)",
        now.isoformat(),
        total_duration / 1000,
    )
    return updated


def _write(path: Path, metadata: SidecarMetadata) -> None:
    path.write_text(
        metadata.model_dump_json(by_alias=True, exclude_none=True, indent=2),
        encoding="utf-8",
    )
