"""Replay a CSV export through the decision core."""

from loguru import logger

from src.config import AppConfig
from src.qc.application.monitoring_loop import MonitoringLoop
from src.qc.domain.models import QCStatus, SystemStatus
from src.qc.infrastructure.container import build_container
from src.qc.infrastructure.csv_source import CsvReadingSource
from src.qc.infrastructure.logging import configure_logging


def log_status(status: SystemStatus) -> None:
    """Listener that reports RED cycles and their top recommendation."""
    if status.current_qc != QCStatus.RED:
        return

    if status.recommendations:
        top = status.recommendations[0]
        logger.warning(
            f"{status.timestamp}: RED on {status.red_parameters()} -> "
            f"{top.rule_id} {top.rule_name} ({top.confidence:.0%})"
        )
    else:
        logger.warning(f"{status.timestamp}: RED on {status.red_parameters()}, no matching rule")


def run_replay(config: AppConfig | None = None, max_cycles: int | None = None) -> int:
    """
    Wire the engine from ``config`` and replay the configured data file.

    Returns:
        Number of cycles processed
    """
    config = config or AppConfig()
    configure_logging(config.logging, config.paths.logs_dir)

    logger.info("🚀 Starting gas extraction QC replay...")

    container = build_container(config)
    engine = container.decision_engine()

    source = CsvReadingSource(
        config.data_source.file_path,
        data_source=config.data_source,
        timestamp=config.timestamp,
        missing_value=config.monitor.missing_value,
    )
    monitor = MonitoringLoop(source, engine, listeners=[log_status])

    try:
        cycles = monitor.run(max_cycles=max_cycles, playback_speed=config.data_source.playback_speed)
    finally:
        if source.is_connected:
            source.disconnect()

    logger.info(f"🛑 Replay finished ({cycles} cycles)")
    return cycles


if __name__ == "__main__":
    run_replay()
