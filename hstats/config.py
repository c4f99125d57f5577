"""Configuration for the hstats demo driver using Pydantic v2 models.

The histogram core takes plain constructor arguments and reads no
configuration. These models describe a complete demo run: the histogram
domain, where samples come from, how to parallelise, how to display the
result and how to log.

Examples:
    Loading a run description from YAML::

        from pathlib import Path
        from hstats.config import HstatsConfig

        config = HstatsConfig.from_yaml(Path("run.yaml"))
        config.setup_logging()
        hist = config.histogram.build()

    Overriding nested values::

        config = HstatsConfig().override(histogram__bin_count=50, parallel__enabled=True)
"""

import logging
from pathlib import Path
import sys
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, model_validator
import yaml

from hstats.histogram import HistogramAccumulator
from hstats.rendering import DisplayConfig
from hstats.sampling import Distribution


class HistogramSettings(BaseModel):
    """Domain of the accumulated histogram.

    Attributes:
        start: Lower bound (inclusive).
        end: Upper bound (exclusive).
        bin_count: Number of equal-width bins.
        numeric: Numeric domain backing the accumulator.
        nan_policy: Whether NaN samples are counted or rejected.
    """

    start: float = Field(default=-8.0, description="Lower bound of the binned domain")
    end: float = Field(default=10.0, description="Upper bound of the binned domain")
    bin_count: int = Field(default=30, gt=0, description="Number of bins")
    numeric: Literal["float64", "float32", "decimal"] = Field(
        default="float64", description="Numeric domain"
    )
    nan_policy: Literal["count", "raise"] = Field(
        default="count", description="Count NaN samples as invalid or reject them"
    )

    @model_validator(mode="after")
    def validate_range(self):
        """Ensure the domain is a non-empty interval.

        Raises:
            ValueError: If start is not below end.
        """
        if not self.start < self.end:
            raise ValueError(f"start ({self.start}) must be less than end ({self.end})")
        return self

    def build(self) -> HistogramAccumulator:
        """Create an empty accumulator for these settings."""
        return HistogramAccumulator(
            self.start,
            self.end,
            self.bin_count,
            numeric=self.numeric,
            nan_policy=self.nan_policy,
        )


class SamplingConfig(BaseModel):
    """Random sample generation for the demo."""

    distribution: Distribution = Field(default="normal", description="Sample distribution")
    mean: float = Field(default=2.0, description="Target mean")
    std_dev: float = Field(default=3.0, gt=0, description="Target standard deviation")
    num_samples: int = Field(default=1_000_000, ge=0, description="Number of samples")
    seed: Optional[int] = Field(default=42, description="RNG seed (None for fresh entropy)")

    @model_validator(mode="after")
    def validate_lognormal_mean(self):
        """Lognormal samples need a positive mean.

        Raises:
            ValueError: If a lognormal distribution is paired with mean <= 0.
        """
        if self.distribution == "lognormal" and self.mean <= 0:
            raise ValueError(f"lognormal requires a positive mean, got {self.mean}")
        return self


class ParallelConfig(BaseModel):
    """Partition-and-merge settings."""

    enabled: bool = Field(default=False, description="Accumulate in parallel")
    n_workers: Optional[int] = Field(default=None, gt=0, description="Worker count (None=auto)")
    chunk_size: Optional[int] = Field(default=None, gt=0, description="Samples per chunk")
    executor: Literal["thread", "process"] = Field(default="thread", description="Pool type")
    progress: bool = Field(default=False, description="Show a progress bar")


class LoggingConfig(BaseModel):
    """Logging configuration.

    Controls logging behavior including level, output destinations,
    and message formatting.
    """

    enabled: bool = Field(default=True, description="Enable logging")
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING", description="Logging level"
    )
    log_file: Optional[str] = Field(
        default=None, description="Log file path (None=no file logging)"
    )
    console_output: bool = Field(default=True, description="Log to console")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log message format",
    )


class HstatsConfig(BaseModel):
    """Complete configuration of a demo run."""

    histogram: HistogramSettings = Field(default_factory=HistogramSettings)
    sampling: SamplingConfig = Field(default_factory=SamplingConfig)
    parallel: ParallelConfig = Field(default_factory=ParallelConfig)
    display: DisplayConfig = Field(default_factory=DisplayConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_yaml(cls, path: Path) -> "HstatsConfig":
        """Load a run description from a YAML file.

        Top-level keys starting with ``_`` hold YAML anchors and are ignored.

        Args:
            path: Path to the YAML file.

        Raises:
            FileNotFoundError: If the file doesn't exist.
            yaml.YAMLError: If the file is not valid YAML.
            ValueError: If the top level is not a mapping.
            ValidationError: If the values are invalid.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError(
                f"Configuration file {path} must contain a mapping, got {type(data).__name__}"
            )
        return cls(**{k: v for k, v in data.items() if not str(k).startswith("_")})

    @classmethod
    def from_dict(cls, data: dict, base_config: Optional["HstatsConfig"] = None) -> "HstatsConfig":
        """Build a config from nested sections, layered over ``base_config`` if given."""
        if base_config is None:
            return cls(**data)
        return cls(**deep_merge(base_config.model_dump(), data))

    def override(self, **kwargs) -> "HstatsConfig":
        """Return a re-validated copy with dunder-path overrides applied.

        Example:
            ``config.override(histogram__bin_count=50, display__precision=3)``
        """
        return HstatsConfig.from_dict(nest_dunder_keys(kwargs), base_config=self)

    def to_yaml(self, path: Path) -> None:
        """Write the configuration to ``path``, creating parent directories."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            yaml.dump(self.model_dump(), f, default_flow_style=False, sort_keys=False)

    def setup_logging(self) -> None:
        """Configure the ``hstats`` logger from the logging settings.

        Log records go to stderr so the report on stdout stays clean.
        Existing handlers on the ``hstats`` logger are replaced.
        """
        settings = self.logging
        if not settings.enabled:
            return

        pkg_logger = logging.getLogger("hstats")
        pkg_logger.setLevel(settings.level)
        pkg_logger.handlers.clear()
        formatter = logging.Formatter(settings.format)

        handlers: List[logging.Handler] = []
        if settings.console_output:
            handlers.append(logging.StreamHandler(sys.stderr))
        if settings.log_file:
            log_path = Path(settings.log_file)
            log_path.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

        for handler in handlers:
            handler.setFormatter(formatter)
            pkg_logger.addHandler(handler)


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge ``override`` into a copy of ``base``.

    Nested dictionaries are merged rather than replaced; neither input is
    mutated.
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def nest_dunder_keys(flat: Dict[str, Any]) -> Dict[str, Any]:
    """Turn ``{"a__b": 1}`` into ``{"a": {"b": 1}}``."""
    nested: Dict[str, Any] = {}
    for key, value in flat.items():
        *parents, leaf = key.split("__")
        current = nested
        for part in parents:
            current = current.setdefault(part, {})
        current[leaf] = value
    return nested
