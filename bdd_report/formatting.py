"""Human-readable formatting shared by the renderer and dispatchers."""

from bdd_report.models.report import ExecutionStats

NANOS_PER_MILLI = 1_000_000


def format_duration(duration_ms: int | float) -> str:
    """Format milliseconds as e.g. ``1h 1m 1s``.

    Zero-valued leading units are omitted and seconds are always shown when
    nothing else is, so zero renders as ``0s``.
    """
    total_seconds = int(duration_ms // 1000)
    hours, remainder = divmod(total_seconds, 3600)
    minutes, seconds = divmod(remainder, 60)

    parts: list[str] = []
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")
    if seconds > 0 or not parts:
        parts.append(f"{seconds}s")
    return " ".join(parts)


def success_rate(stats: ExecutionStats) -> str:
    """Percentage of passed scenarios with one decimal."""
    if stats.total_scenarios == 0:
        return "0.0"
    return f"{stats.passed / stats.total_scenarios * 100:.1f}"
