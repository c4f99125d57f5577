"""Streaming fixed-width histogram with running statistics.

This module holds :class:`HistogramAccumulator`, the core of the package. It
bins samples into ``bin_count`` equal-width ranges over ``[start, end)``,
counts samples outside that domain as underflow or overflow, and feeds every
sample into a :class:`~hstats.running_stats.RunningStats`.

Boundary policy:
    - ``value < start`` goes to underflow, ``value >= end`` to overflow.
    - Otherwise the bin index is ``floor((value - start) / bin_width)``,
      clamped to ``[0, bin_count - 1]``. The clamp absorbs the case where
      rounding pushes a value just below ``end`` onto index ``bin_count``.
    - ``+inf``/``-inf`` land in overflow/underflow.
    - NaN touches no bin and no statistic. It is counted in ``invalid``, or
      rejected with :class:`~hstats.exceptions.NonFiniteValueError` when the
      accumulator was built with ``nan_policy="raise"``.

Examples:
    Partition-and-merge accumulation::

        from hstats import HistogramAccumulator

        left = HistogramAccumulator(0.0, 10.0, 10)
        right = HistogramAccumulator(0.0, 10.0, 10)
        left.add_many(first_half)
        right.add_many(second_half)

        combined = left.merge(right)
        print(combined.with_precision(3))
"""

import logging
import numbers
from typing import Any, Iterable, List, Sequence, Tuple, Union
import warnings

import numpy as np

from hstats._warnings import DataQualityWarning
from hstats.exceptions import (
    BinCountError,
    HistogramRangeError,
    IncompatibleHistogramError,
    NonFiniteValueError,
)
from hstats.numeric import NumericDomain, resolve_domain
from hstats.rendering import DEFAULT_BAR_CHAR, DEFAULT_PRECISION, DisplayConfig, render_histogram
from hstats.running_stats import RunningStats

logger = logging.getLogger(__name__)

NAN_POLICIES = ("count", "raise")

BinRange = Tuple[Any, Any, int]


class HistogramAccumulator:
    """Fixed-range histogram that also tracks summary statistics.

    Args:
        start: Lower bound of the binned domain (inclusive).
        end: Upper bound of the binned domain (exclusive).
        bin_count: Number of equal-width bins.
        numeric: Numeric domain (instance or registry name). Defaults to
            ``float64``.
        nan_policy: ``"count"`` to tally NaN samples in :attr:`invalid`,
            ``"raise"`` to reject them.

    Raises:
        HistogramRangeError: If ``start >= end`` or a bound is not finite.
        BinCountError: If ``bin_count`` is not a positive integer.
        ValueError: If ``nan_policy`` is unknown.
    """

    def __init__(
        self,
        start: Any,
        end: Any,
        bin_count: int,
        numeric: Union[str, NumericDomain, None] = None,
        nan_policy: str = "count",
    ):
        domain = resolve_domain(numeric)
        start = domain.coerce(start)
        end = domain.coerce(end)

        if domain.is_nan(start) or domain.is_nan(end) or not start < end:
            raise HistogramRangeError(start, end)
        if not (domain.is_finite(start) and domain.is_finite(end)):
            raise HistogramRangeError(start, end, "bounds must be finite")
        if isinstance(bin_count, bool) or not isinstance(bin_count, numbers.Integral):
            raise BinCountError(bin_count)
        if bin_count <= 0:
            raise BinCountError(bin_count)
        if nan_policy not in NAN_POLICIES:
            raise ValueError(f"nan_policy must be one of {NAN_POLICIES}, got {nan_policy!r}")

        self._numeric = domain
        self._nan_policy = nan_policy
        self._start = start
        self._end = end
        self._bin_count = int(bin_count)
        self._bin_width = (end - start) / domain.from_count(self._bin_count)
        self._bins = np.zeros(self._bin_count, dtype=np.int64)
        self._underflow = 0
        self._overflow = 0
        self._invalid = 0
        self._stats = RunningStats(domain)
        self._precision = DEFAULT_PRECISION
        self._bar_char = DEFAULT_BAR_CHAR

    # ------------------------------------------------------------------
    # Accumulation
    # ------------------------------------------------------------------
    def add(self, value: Any) -> None:
        """Add one sample.

        Exactly one of a bin, underflow, overflow or invalid is incremented.

        Args:
            value: Sample value; converted to the accumulator's domain.

        Raises:
            NonFiniteValueError: If ``value`` is NaN and the policy is
                ``"raise"``.
        """
        value = self._numeric.coerce(value)
        if self._numeric.is_nan(value):
            self._record_invalid(value, 1)
            return

        self._stats.update(value)
        if value < self._start:
            self._underflow += 1
        elif value >= self._end:
            self._overflow += 1
        else:
            self._bins[self._bin_index(value)] += 1

    def add_many(self, values: Union[Iterable[Any], np.ndarray]) -> None:
        """Add a batch of samples.

        Produces the same counters as calling :meth:`add` on each element and
        the same statistics up to rounding. Float domains take a vectorized
        numpy path; other domains loop over :meth:`add`.

        Args:
            values: Array, sequence or any iterable (generators included)
                of samples.

        Raises:
            NonFiniteValueError: If any value is NaN and the policy is
                ``"raise"``. Nothing is recorded in that case.
        """
        if not self._numeric.vectorized:
            for value in values:
                self.add(value)
            return

        if isinstance(values, (np.ndarray, Sequence)):
            arr = np.asarray(values, dtype=self._numeric.dtype).ravel()
        else:
            arr = np.fromiter(values, dtype=self._numeric.dtype)
        if arr.size == 0:
            return

        nan_mask = np.isnan(arr)
        n_nan = int(nan_mask.sum())
        if n_nan:
            self._record_invalid(arr[nan_mask][0], n_nan)
            arr = arr[~nan_mask]

        self._stats.update_batch(arr)

        below = arr < self._start
        above = arr >= self._end
        self._underflow += int(below.sum())
        self._overflow += int(above.sum())

        inside = arr[~(below | above)]
        if inside.size:
            indices = np.floor((inside - self._start) / self._bin_width).astype(np.int64)
            np.clip(indices, 0, self._bin_count - 1, out=indices)
            self._bins += np.bincount(indices, minlength=self._bin_count)

    def _bin_index(self, value: Any) -> int:
        index = self._numeric.floor_index((value - self._start) / self._bin_width)
        return min(max(index, 0), self._bin_count - 1)

    def _record_invalid(self, value: Any, n: int) -> None:
        if self._nan_policy == "raise":
            raise NonFiniteValueError(value)
        if self._invalid == 0:
            warnings.warn(
                "NaN samples are excluded from bins and statistics and counted as invalid",
                DataQualityWarning,
                stacklevel=3,
            )
        self._invalid += n

    # ------------------------------------------------------------------
    # Merging
    # ------------------------------------------------------------------
    def merge(self, other: "HistogramAccumulator") -> "HistogramAccumulator":
        """Combine with another accumulator over the same domain.

        Neither input is modified. The result keeps this accumulator's
        display settings and NaN policy.

        Args:
            other: Accumulator built with identical ``start``, ``end`` and
                ``bin_count``.

        Returns:
            New accumulator with pairwise-summed counters and pooled
            statistics.

        Raises:
            IncompatibleHistogramError: If ``start``, ``end``, ``bin_count``
                or the numeric domain differ. ``field`` names the first
                mismatch.
            TypeError: If ``other`` is not a HistogramAccumulator.
        """
        if not isinstance(other, HistogramAccumulator):
            raise TypeError(f"Cannot merge HistogramAccumulator with {type(other).__name__}")
        if self._start != other._start:
            raise IncompatibleHistogramError("start", self._start, other._start)
        if self._end != other._end:
            raise IncompatibleHistogramError("end", self._end, other._end)
        if self._bin_count != other._bin_count:
            raise IncompatibleHistogramError("bin_count", self._bin_count, other._bin_count)
        if self._numeric.name != other._numeric.name:
            raise IncompatibleHistogramError("numeric", self._numeric.name, other._numeric.name)

        merged = HistogramAccumulator(
            self._start,
            self._end,
            self._bin_count,
            numeric=self._numeric,
            nan_policy=self._nan_policy,
        )
        merged._bins = self._bins + other._bins
        merged._underflow = self._underflow + other._underflow
        merged._overflow = self._overflow + other._overflow
        merged._invalid = self._invalid + other._invalid
        merged._stats = self._stats.merge(other._stats)
        merged._precision = self._precision
        merged._bar_char = self._bar_char

        logger.debug(
            "Merged histograms with %d and %d samples into %d",
            self.count,
            other.count,
            merged.count,
        )
        return merged

    def __add__(self, other: Any) -> "HistogramAccumulator":
        if not isinstance(other, HistogramAccumulator):
            return NotImplemented
        return self.merge(other)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    @property
    def start(self) -> Any:
        """Lower bound. Values below it are counted as underflow."""
        return self._start

    @property
    def end(self) -> Any:
        """Upper bound. Values at or above it are counted as overflow."""
        return self._end

    @property
    def bin_count(self) -> int:
        """Number of interior bins."""
        return self._bin_count

    @property
    def bin_width(self) -> Any:
        """``(end - start) / bin_count``."""
        return self._bin_width

    @property
    def numeric(self) -> NumericDomain:
        """Numeric domain of the samples."""
        return self._numeric

    @property
    def nan_policy(self) -> str:
        return self._nan_policy

    @property
    def underflow(self) -> int:
        return self._underflow

    @property
    def overflow(self) -> int:
        return self._overflow

    @property
    def invalid(self) -> int:
        """Number of NaN samples seen (always 0 under ``nan_policy="raise"``)."""
        return self._invalid

    @property
    def counts(self) -> Tuple[int, ...]:
        """Interior bin counts, lowest bin first."""
        return tuple(int(c) for c in self._bins)

    def bins(self) -> List[BinRange]:
        """Ranges and counts for every bin, out-of-range ones included.

        Returns:
            ``bin_count + 2`` triples ``(lower, upper, count)``: first
            ``(-inf, start, underflow)``, then each interior bin
            ``(start + i * bin_width, start + (i + 1) * bin_width, count)``,
            last ``(end, +inf, overflow)``.
        """
        result: List[BinRange] = [(self._numeric.neg_infinity, self._start, self._underflow)]
        width = self._bin_width
        for i, count in enumerate(self._bins):
            result.append((self._start + i * width, self._start + (i + 1) * width, int(count)))
        result.append((self._end, self._numeric.infinity, self._overflow))
        return result

    @property
    def stats(self) -> RunningStats:
        """Copy of the running statistics."""
        return self._stats.copy()

    @property
    def count(self) -> int:
        """Number of samples seen, NaN samples excluded."""
        return self._stats.count

    @property
    def min(self) -> Any:
        """Smallest sample, ``+inf`` when empty."""
        return self._stats.min

    @property
    def max(self) -> Any:
        """Largest sample, ``-inf`` when empty."""
        return self._stats.max

    @property
    def mean(self) -> Any:
        """Mean of the samples, zero when empty."""
        return self._stats.mean

    @property
    def std_dev(self) -> Any:
        """Sample standard deviation, zero below two samples."""
        return self._stats.std_dev

    @property
    def variance(self) -> Any:
        return self._stats.variance

    # ------------------------------------------------------------------
    # Display configuration
    # ------------------------------------------------------------------
    @property
    def precision(self) -> int:
        return self._precision

    @property
    def bar_char(self) -> str:
        return self._bar_char

    def with_precision(self, precision: int) -> "HistogramAccumulator":
        """Set the number of digits used when rendering; returns ``self``."""
        if isinstance(precision, bool) or not isinstance(precision, int) or precision < 0:
            raise ValueError(f"precision ({precision}) must be a non-negative integer")
        self._precision = precision
        return self

    def with_bar_char(self, bar_char: str) -> "HistogramAccumulator":
        """Set the glyph repeated to draw bars; returns ``self``."""
        if not isinstance(bar_char, str) or not bar_char:
            raise ValueError("bar_char must be a non-empty string")
        self._bar_char = bar_char
        return self

    def display_config(self) -> DisplayConfig:
        """Rendering settings carried by this accumulator."""
        return DisplayConfig(precision=self._precision, bar_char=self._bar_char)

    def __str__(self) -> str:
        return render_histogram(self)

    def __repr__(self) -> str:
        return (
            f"HistogramAccumulator(start={self._start}, end={self._end}, "
            f"bin_count={self._bin_count}, count={self.count})"
        )
