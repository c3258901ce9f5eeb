"""Serial driver feeding a reading source into the decision engine."""

import threading
import time
from collections.abc import Iterable

import pandas as pd
from loguru import logger

from src.qc.application.decision_engine import DecisionEngine
from src.qc.domain.models import QCStatus, Reading, SystemStatus
from src.qc.domain.protocols import ReadingSource, StatusListener


class MonitoringLoop:
    """
    Single producer for a :class:`DecisionEngine`.

    Readings are processed one at a time in source order and each snapshot
    is handed to every listener. A failing listener is logged and skipped.
    """

    def __init__(
        self,
        source: ReadingSource,
        engine: DecisionEngine,
        listeners: Iterable[StatusListener] = (),
    ):
        self.source = source
        self.engine = engine
        self.listeners: list[StatusListener] = list(listeners)
        self.last_status: SystemStatus | None = None

    def subscribe(self, listener: StatusListener) -> None:
        self.listeners.append(listener)
        logger.info(f"Listener registered. Total listeners: {len(self.listeners)}")

    def _notify(self, status: SystemStatus) -> None:
        for listener in self.listeners:
            try:
                listener(status)
            except Exception as e:
                logger.error(f"Error in status listener {listener!r}: {e}")

    def run(
        self,
        max_cycles: int | None = None,
        playback_speed: float = 1.0,
        stop_event: threading.Event | None = None,
        loop: bool = False,
    ) -> int:
        """
        Replay the source through the engine.

        Args:
            max_cycles: Stop after this many readings
            playback_speed: Readings per second multiplier; <= 0 disables sleeping
            stop_event: Set from another thread to stop between cycles
            loop: Restart from the first reading when the source is exhausted

        Returns:
            Number of cycles processed
        """
        if not self.source.is_connected and not self.source.connect():
            logger.error("Failed to connect to data source")
            return 0

        delay = 1.0 / playback_speed if playback_speed > 0 else 0.0
        cycles = 0

        logger.info(f"Playback started (speed: {playback_speed}x)")

        while True:
            produced = False
            for reading in self.source.readings():
                if stop_event is not None and stop_event.is_set():
                    logger.info(f"Playback stopped after {cycles} cycles")
                    return cycles
                if max_cycles is not None and cycles >= max_cycles:
                    logger.info(f"Playback finished after {cycles} cycles")
                    return cycles

                self.last_status = self.engine.process_update(reading)
                self._notify(self.last_status)
                cycles += 1
                produced = True

                if delay:
                    time.sleep(delay)

            if not loop or not produced:
                break
            logger.info("Reached end of source, restarting")

        logger.info(f"Playback finished after {cycles} cycles")
        return cycles


def evaluate_dataframe(engine: DecisionEngine, df: pd.DataFrame) -> pd.DataFrame:
    """
    Single-pass evaluation of a wide DataFrame.

    Args:
        engine: Decision engine to feed
        df: DatetimeIndex and one column per parameter

    Returns:
        One row per cycle with overall status and top recommendation
    """
    if not isinstance(df.index, pd.DatetimeIndex):
        logger.warning("DataFrame index is not DatetimeIndex, attempting conversion")
        df = df.copy()
        df.index = pd.to_datetime(df.index)

    rows = []
    for timestamp, row in df.iterrows():
        reading = Reading(timestamp=timestamp.to_pydatetime(), values={k: float(v) for k, v in row.items()})
        status = engine.process_update(reading)

        top = status.recommendations[0] if status.recommendations else None
        rows.append(
            {
                "timestamp": status.timestamp,
                "current_qc": status.current_qc.value,
                "red_parameters": ",".join(status.red_parameters()),
                "top_rule_id": top.rule_id if top else None,
                "top_confidence": top.confidence if top else None,
                "recommendation_count": len(status.recommendations),
            }
        )

    result = pd.DataFrame(
        rows,
        columns=[
            "timestamp",
            "current_qc",
            "red_parameters",
            "top_rule_id",
            "top_confidence",
            "recommendation_count",
        ],
    )
    red_cycles = int((result["current_qc"] == QCStatus.RED.value).sum()) if not result.empty else 0
    logger.info(f"Evaluated {len(result)} rows, {red_cycles} RED cycles")
    return result
