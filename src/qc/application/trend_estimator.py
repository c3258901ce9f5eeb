"""Linear-regression trend estimate over a parameter's recent history."""

import numpy as np

from src.qc.domain.models import Trend
from src.qc.infrastructure.history_buffer import HistoryBuffer

DEFAULT_TREND_WINDOW = 20
# Normalized slope beyond which a trend is reported (2% of the window's range per sample)
TREND_THRESHOLD = 0.02


def classify_trend(samples: list[float]) -> Trend:
    """
    Fit an OLS line over index positions and classify its slope
    normalized by the value range of ``samples``.
    """
    y = np.asarray(samples, dtype=float)
    if y.size < 2:
        return Trend.STABLE

    x = np.arange(y.size, dtype=float)
    x_centered = x - x.mean()
    slope = float(np.dot(x_centered, y - y.mean()) / np.dot(x_centered, x_centered))

    value_range = float(np.max(y) - np.min(y))
    if value_range == 0:
        return Trend.STABLE

    normalized = slope / value_range

    if normalized > TREND_THRESHOLD:
        return Trend.INCREASING
    if normalized < -TREND_THRESHOLD:
        return Trend.DECREASING
    return Trend.STABLE


class TrendEstimator:
    """Qualitative trend per parameter from the shared history buffer."""

    def __init__(self, history: HistoryBuffer, window: int = DEFAULT_TREND_WINDOW):
        self.history = history
        self.window = window

    def trend(self, parameter_name: str, window: int | None = None) -> Trend:
        """
        Trend over the last ``window`` samples.

        Fewer samples than the window means no trend (STABLE).
        """
        window = self.window if window is None else window

        if self.history.size(parameter_name) < window:
            return Trend.STABLE

        return classify_trend(self.history.recent(parameter_name, window))
