"""Text and tabular views of a histogram.

Presentation only: nothing here changes bin contents or statistics.

The text report has one row per range returned by
:meth:`HistogramAccumulator.bins`, followed by a summary line::

     Start | End
    -------|-------
      -inf | -8.00 |  12 (0.02%)
     -8.00 | -7.40 | ░ 31 (0.06%)
    ...

    Total Count: 50000 Min: -11.36 Max: 15.02 Mean: 2.00 Std Dev: 3.00
"""

from typing import TYPE_CHECKING, Any, Optional

import pandas as pd
from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from hstats.histogram import HistogramAccumulator

DEFAULT_BAR_CHAR = "░"
DEFAULT_PRECISION = 2
MAX_BAR_SIZE = 60


class DisplayConfig(BaseModel):
    """Rendering settings.

    Attributes:
        precision: Digits after the decimal point for bounds and statistics.
        bar_char: Glyph repeated to draw a bar.
        max_bar_size: Length of the bar for the fullest row.
    """

    precision: int = Field(default=DEFAULT_PRECISION, ge=0, description="Digits after the point")
    bar_char: str = Field(default=DEFAULT_BAR_CHAR, min_length=1, description="Bar glyph")
    max_bar_size: int = Field(default=MAX_BAR_SIZE, gt=0, description="Longest bar in characters")


class HistogramRenderer:
    """Render a histogram as an aligned text table.

    Args:
        config: Display settings. When omitted each histogram is rendered
            with its own precision and bar glyph.
    """

    def __init__(self, config: Optional[DisplayConfig] = None):
        self.config = config

    @staticmethod
    def bar_length(count: int, max_count: int, size: int = MAX_BAR_SIZE) -> int:
        """Bar length scaled linearly so ``max_count`` maps to ``size``."""
        if max_count <= 0:
            return 0
        return min(size, int(round(count / max_count * size)))

    @staticmethod
    def percent(count: int, total: int) -> float:
        """Share of ``total`` represented by ``count``, 0 for an empty histogram."""
        if total <= 0:
            return 0.0
        return count / total * 100

    def render(self, histogram: "HistogramAccumulator") -> str:
        """Build the full report.

        Args:
            histogram: Accumulator to display.

        Returns:
            Multi-line report ending with a newline.
        """
        config = self._config_for(histogram)
        p = config.precision
        rows = histogram.bins()
        total = histogram.count

        col1 = max(len("Start"), *(len(_fmt(lower, p)) for lower, _, _ in rows))
        col2 = max(len("End"), *(len(_fmt(upper, p)) for _, upper, _ in rows))
        max_count = max(count for _, _, count in rows)

        lines = [
            f"{'Start':^{col1}} | {'End':^{col2}}",
            f"{'':-^{col1}}-|-{'':-^{col2}}-",
        ]
        for lower, upper, count in rows:
            bar = config.bar_char * self.bar_length(count, max_count, config.max_bar_size)
            pct = self.percent(count, total)
            lines.append(
                f"{_fmt(lower, p):>{col1}} | {_fmt(upper, p):>{col2}} | {bar} {count} ({pct:.2f}%)"
            )
        lines.append("")
        lines.append(
            f"Total Count: {total}"
            f" Min: {_fmt(histogram.min, p)}"
            f" Max: {_fmt(histogram.max, p)}"
            f" Mean: {_fmt(histogram.mean, p)}"
            f" Std Dev: {_fmt(histogram.std_dev, p)}"
        )
        return "\n".join(lines) + "\n"

    def _config_for(self, histogram: "HistogramAccumulator") -> DisplayConfig:
        if self.config is not None:
            return self.config
        return histogram.display_config()


def _fmt(value: Any, precision: int) -> str:
    return f"{value:.{precision}f}"


def render_histogram(
    histogram: "HistogramAccumulator", config: Optional[DisplayConfig] = None
) -> str:
    """Render ``histogram`` as text.

    Args:
        histogram: Accumulator to display.
        config: Display settings overriding the accumulator's own.

    Returns:
        The text report.
    """
    return HistogramRenderer(config).render(histogram)


def histogram_to_dataframe(histogram: "HistogramAccumulator") -> pd.DataFrame:
    """Convert the bin ranges of a histogram to a DataFrame.

    Args:
        histogram: Accumulator to convert.

    Returns:
        DataFrame with one row per range (underflow and overflow included)
        and columns ``lower``, ``upper``, ``count`` and ``percent``.
    """
    total = histogram.count
    rows = [
        {
            "lower": float(lower),
            "upper": float(upper),
            "count": count,
            "percent": HistogramRenderer.percent(count, total),
        }
        for lower, upper, count in histogram.bins()
    ]
    return pd.DataFrame(rows, columns=["lower", "upper", "count", "percent"])
