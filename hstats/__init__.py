"""hstats: streaming histograms with mergeable running statistics."""

from ._version import __version__

# Heavy modules (pandas, scipy, pydantic) load only when their names are used

__all__ = [
    "__version__",
    "DisplayConfig",
    "HistogramAccumulator",
    "HistogramRenderer",
    "HstatsConfig",
    "RunningStats",
    "accumulate",
    "accumulate_parallel",
    "histogram_to_dataframe",
    "merge_all",
    "render_histogram",
]


def __getattr__(name):
    """Lazy import modules to keep ``import hstats`` light."""
    if name == "HistogramAccumulator":
        from .histogram import HistogramAccumulator

        return HistogramAccumulator
    elif name == "RunningStats":
        from .running_stats import RunningStats

        return RunningStats
    elif name in [
        "DisplayConfig",
        "HistogramRenderer",
        "render_histogram",
        "histogram_to_dataframe",
    ]:
        from .rendering import (
            DisplayConfig,
            HistogramRenderer,
            histogram_to_dataframe,
            render_histogram,
        )

        return locals()[name]
    elif name in ["accumulate", "accumulate_parallel", "merge_all"]:
        from .parallel import accumulate, accumulate_parallel, merge_all

        return locals()[name]
    elif name == "HstatsConfig":
        from .config import HstatsConfig

        return HstatsConfig
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
