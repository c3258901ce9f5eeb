"""Bounded per-parameter sample history used for trend estimation."""

import math
from collections import defaultdict, deque
from collections.abc import Mapping

from loguru import logger

DEFAULT_HISTORY_SIZE = 120  # 2 minutes at 1 Hz
TIMESTAMP_KEY = "timestamp"


class HistoryBuffer:
    """
    FIFO of recent numeric samples per parameter.

    Each parameter keeps at most ``max_size`` samples; once the cap is
    exceeded the oldest sample is evicted.
    """

    def __init__(self, max_size: int = DEFAULT_HISTORY_SIZE):
        if not 0 < max_size <= DEFAULT_HISTORY_SIZE:
            raise ValueError(f"max_size must be between 1 and {DEFAULT_HISTORY_SIZE}, got {max_size}")

        self.max_size = max_size
        self._buffers: dict[str, deque[float]] = defaultdict(lambda: deque(maxlen=self.max_size))

        logger.debug(f"Initialized HistoryBuffer with max_size={max_size}")

    def update(self, values: Mapping[str, float]) -> None:
        """Append one sample for every parameter in ``values``."""
        for name, value in values.items():
            if name == TIMESTAMP_KEY:
                continue
            self._buffers[name].append(math.nan if value is None else float(value))

    def get(self, parameter_name: str) -> list[float]:
        """Samples for a parameter, oldest first (copy)."""
        buffer = self._buffers.get(parameter_name)
        return list(buffer) if buffer is not None else []

    def recent(self, parameter_name: str, count: int) -> list[float]:
        """The most recent ``count`` samples, or fewer if not enough exist."""
        samples = self.get(parameter_name)
        return samples[-count:] if count > 0 else []

    def size(self, parameter_name: str) -> int:
        buffer = self._buffers.get(parameter_name)
        return len(buffer) if buffer is not None else 0

    def parameters(self) -> list[str]:
        return list(self._buffers)

    def clear(self, parameter_name: str | None = None) -> None:
        """Drop history for one parameter, or all of them."""
        if parameter_name is None:
            self._buffers.clear()
        else:
            self._buffers.pop(parameter_name, None)

    def __contains__(self, parameter_name: str) -> bool:
        return parameter_name in self._buffers
