"""Remove report files left behind by previous runs."""

import logging
from pathlib import Path

log = logging.getLogger(__name__)

CLEANED_SUFFIXES: frozenset[str] = frozenset([".json", ".html"])


def cleanup_reports(reports_dir: Path) -> int:
    """Delete top-level JSON and HTML files, keeping report directories.

    Returns:
        Number of files removed

    """
    if not reports_dir.is_dir():
        log.info("Reports directory %s does not exist, nothing to clean", reports_dir)
        return 0

    log.info("Cleaning up reports directory %s", reports_dir)
    removed = 0
    for path in sorted(reports_dir.iterdir()):
        if not path.is_file() or path.suffix not in CLEANED_SUFFIXES:
            continue
        try:
            path.unlink()
        except OSError as exc:
            log.warning("Failed to remove %s: %s", path.name, exc)
            continue
        log.info("Removed: %s", path.name)
        removed += 1

    log.info("Cleanup complete: %d file(s) removed", removed)
    return removed
