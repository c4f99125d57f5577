"""Exceptions raised by the histogram core.

All errors are raised eagerly at the call that violates a precondition.
Nothing is corrected or retried; callers decide whether to treat them as
fatal.
"""

from typing import Any


class HstatsError(Exception):
    """Base class for all hstats errors."""


class HistogramConfigError(HstatsError, ValueError):
    """An accumulator was constructed with an invalid domain."""


class HistogramRangeError(HistogramConfigError):
    """The bounds do not describe a finite, non-empty interval.

    Attributes:
        start: The lower bound that was passed.
        end: The upper bound that was passed.
    """

    def __init__(self, start: Any, end: Any, reason: str = "") -> None:
        self.start = start
        self.end = end
        message = f"start ({start}) must be less than end ({end})"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class BinCountError(HistogramConfigError):
    """The bin count is not a positive integer.

    Attributes:
        bin_count: The offending value.
    """

    def __init__(self, bin_count: Any) -> None:
        self.bin_count = bin_count
        super().__init__(f"bin_count ({bin_count}) must be greater than 0")


class IncompatibleHistogramError(HstatsError, ValueError):
    """Two accumulators with different domains were merged.

    Attributes:
        field: Name of the first mismatching field (``"start"``, ``"end"`` or
            ``"bin_count"``).
        left: Value of the field on the receiving accumulator.
        right: Value of the field on the other accumulator.

    Examples:
        Reporting which field differed::

            try:
                merged = left.merge(right)
            except IncompatibleHistogramError as e:
                print(f"cannot merge, {e.field} differs")
    """

    _LABELS = {
        "start": "Starts must be equal",
        "end": "Ends must be equal",
        "bin_count": "Bin counts must be equal",
    }

    def __init__(self, field: str, left: Any, right: Any) -> None:
        self.field = field
        self.left = left
        self.right = right
        label = self._LABELS.get(field, f"{field} must be equal")
        super().__init__(f"{label} (left: {left}, right: {right})")


class NonFiniteValueError(HstatsError, ValueError):
    """A NaN sample was added to an accumulator that rejects them."""

    def __init__(self, value: Any) -> None:
        self.value = value
        super().__init__(f"Histogram does not accept NaN samples: {value}")
