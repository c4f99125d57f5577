"""Single-pass, mergeable summary statistics.

:class:`RunningStats` tracks count, min, max, mean and variance of a stream
without retaining samples. Per-sample updates use Welford's recurrence;
batches and partial results are folded in with the pairwise combination of
Chan, Golub & LeVeque, so accumulating partitions separately and merging them
gives the same count, min and max as a single pass, and the same mean and
variance up to rounding.

Zero-count behaviour:
    ``mean``, ``variance`` and ``std_dev`` are the domain's zero, ``min`` is
    ``+inf`` and ``max`` is ``-inf``. These are the identity elements of
    :meth:`RunningStats.merge`.

Infinite samples:
    Counted and reflected in ``min``/``max``. Once any infinite sample has
    been seen, ``mean``, ``variance`` and ``std_dev`` are NaN.

References:
    Chan, T. F., Golub, G. H. & LeVeque, R. J. (1979). "Updating Formulae and
    a Pairwise Algorithm for Computing Sample Variances."
"""

from typing import Any, Dict, Union

import numpy as np

from hstats.numeric import NumericDomain, resolve_domain


class RunningStats:
    """Incremental mean/variance/min/max/count tracker.

    Args:
        numeric: Numeric domain (instance or registry name) the samples
            belong to. Defaults to ``float64``.

    Attributes:
        count: Number of samples seen, infinite ones included.
        min: Smallest sample seen.
        max: Largest sample seen.
    """

    def __init__(self, numeric: Union[str, NumericDomain, None] = None):
        self.numeric = resolve_domain(numeric)
        self.count = 0
        self.min = self.numeric.infinity
        self.max = self.numeric.neg_infinity
        # Welford state covers finite samples only
        self._n = 0
        self._mean = self.numeric.zero
        self._m2 = self.numeric.zero

    def update(self, value: Any) -> None:
        """Add a single observation.

        Args:
            value: Sample, already coerced to the domain's scalar type.
        """
        self.count += 1
        if value < self.min:
            self.min = value
        if value > self.max:
            self.max = value
        if not self.numeric.is_finite(value):
            return

        self._n += 1
        delta = value - self._mean
        self._mean += delta / self._n
        self._m2 += delta * (value - self._mean)

    def update_batch(self, values: np.ndarray) -> None:
        """Add an array of observations.

        Equivalent to calling :meth:`update` for every element, up to
        rounding. Domains without a numpy dtype fall back to that loop.

        Args:
            values: Array of samples. NaN entries must be removed by the
                caller.
        """
        if not self.numeric.vectorized:
            for value in values:
                self.update(self.numeric.coerce(value))
            return

        arr = np.asarray(values, dtype=self.numeric.dtype).ravel()
        if arr.size == 0:
            return

        self.count += int(arr.size)
        batch_min = self.numeric.coerce(arr.min())
        batch_max = self.numeric.coerce(arr.max())
        if batch_min < self.min:
            self.min = batch_min
        if batch_max > self.max:
            self.max = batch_max

        finite = arr[np.isfinite(arr)]
        if finite.size == 0:
            return
        batch_mean = finite.mean(dtype=np.float64)
        batch_m2 = float(np.square(finite - batch_mean, dtype=np.float64).sum())
        self._combine(
            int(finite.size),
            self.numeric.coerce(batch_mean),
            self.numeric.coerce(batch_m2),
        )

    def merge(self, other: "RunningStats") -> "RunningStats":
        """Combine with another tracker into a new one.

        Neither input is modified.

        Args:
            other: Tracker over a disjoint set of samples.

        Returns:
            Tracker equivalent to one fed both sample sets.

        Raises:
            ValueError: If the trackers belong to different numeric domains.
        """
        if self.numeric.name != other.numeric.name:
            raise ValueError(
                f"Cannot merge {self.numeric.name} statistics with "
                f"{other.numeric.name} statistics"
            )
        merged = self.copy()
        merged.count += other.count
        if other.min < merged.min:
            merged.min = other.min
        if other.max > merged.max:
            merged.max = other.max
        merged._combine(other._n, other._mean, other._m2)
        return merged

    def copy(self) -> "RunningStats":
        """Return an independent copy."""
        clone = RunningStats(self.numeric)
        clone.count = self.count
        clone.min = self.min
        clone.max = self.max
        clone._n = self._n
        clone._mean = self._mean
        clone._m2 = self._m2
        return clone

    def _combine(self, n_b: int, mean_b: Any, m2_b: Any) -> None:
        """Pooled (parallel) mean/M2 combination with a summary of ``n_b`` samples."""
        if n_b == 0:
            return
        n_a = self._n
        if n_a == 0:
            self._n, self._mean, self._m2 = n_b, mean_b, m2_b
            return
        n = n_a + n_b
        delta = mean_b - self._mean
        self._mean = self._mean + delta * n_b / n
        self._m2 = self._m2 + m2_b + delta * delta * n_a * n_b / n
        self._n = n

    @property
    def has_non_finite(self) -> bool:
        """True if any infinite sample has been seen."""
        return self._n != self.count

    @property
    def mean(self) -> Any:
        """Arithmetic mean of the samples."""
        if self.has_non_finite:
            return self.numeric.nan
        return self._mean

    @property
    def variance(self) -> Any:
        """Sample variance (n - 1 denominator); zero below two samples."""
        if self.has_non_finite:
            return self.numeric.nan
        if self._n < 2:
            return self.numeric.zero
        return max(self._m2, self.numeric.zero) / (self._n - 1)

    @property
    def population_variance(self) -> Any:
        """Population variance (n denominator); zero when empty."""
        if self.has_non_finite:
            return self.numeric.nan
        if self._n == 0:
            return self.numeric.zero
        return max(self._m2, self.numeric.zero) / self._n

    @property
    def std_dev(self) -> Any:
        """Sample standard deviation."""
        variance = self.variance
        if self.numeric.is_nan(variance):
            return variance
        return self.numeric.sqrt(variance)

    def to_dict(self) -> Dict[str, Any]:
        """Summary as a plain dictionary, ``None`` for undefined extremes."""
        return {
            "count": self.count,
            "mean": self.mean,
            "std_dev": self.std_dev,
            "min": self.min if self.count else None,
            "max": self.max if self.count else None,
        }

    def __repr__(self) -> str:
        return (
            f"RunningStats(count={self.count}, mean={self.mean}, "
            f"std_dev={self.std_dev}, min={self.min}, max={self.max})"
        )
