"""Numeric capability interface for the histogram core.

The accumulator never hardcodes a concrete number type. It talks to a
:class:`NumericDomain`, which supplies the handful of operations binning and
running statistics need: coercion of incoming samples, conversion of counts,
flooring to a bin index, infinities and a square root.

Three instantiations ship with the package:

- :data:`FLOAT64` (default): Python ``float``.
- :data:`FLOAT32`: ``numpy.float32`` arithmetic throughout.
- :data:`DECIMAL`: :class:`decimal.Decimal` under the active decimal context.

Examples:
    Building an accumulator over exact decimal bounds::

        from hstats import HistogramAccumulator
        from hstats.numeric import DECIMAL

        hist = HistogramAccumulator("0.0", "1.0", 10, numeric=DECIMAL)
        hist.add("0.35")
"""

from abc import ABC, abstractmethod
from decimal import ROUND_FLOOR, Decimal
import math
from typing import Any, Dict, Optional, Union

import numpy as np


class NumericDomain(ABC):
    """Operations a real-number type must provide to back a histogram.

    Attributes:
        name: Registry key of the domain, also used to check that two
            accumulators are compatible for merging.
        dtype: numpy dtype used by vectorized paths, or ``None`` when the
            domain has no array representation.
    """

    name: str = ""
    dtype: Optional[np.dtype] = None

    @abstractmethod
    def coerce(self, value: Any) -> Any:
        """Convert an incoming value to the domain's scalar type."""

    @abstractmethod
    def from_count(self, count: int) -> Any:
        """Convert an integer count to the domain's scalar type."""

    @abstractmethod
    def floor_index(self, value: Any) -> int:
        """Return ``floor(value)`` as a Python ``int``."""

    @abstractmethod
    def is_nan(self, value: Any) -> bool:
        """Return True if ``value`` is not a number."""

    @abstractmethod
    def is_finite(self, value: Any) -> bool:
        """Return True if ``value`` is neither infinite nor NaN."""

    @abstractmethod
    def sqrt(self, value: Any) -> Any:
        """Square root of a non-negative value."""

    @property
    @abstractmethod
    def zero(self) -> Any:
        """Additive identity."""

    @property
    @abstractmethod
    def infinity(self) -> Any:
        """Positive infinity."""

    @property
    @abstractmethod
    def neg_infinity(self) -> Any:
        """Negative infinity."""

    @property
    @abstractmethod
    def nan(self) -> Any:
        """Quiet NaN, used for undefined statistics."""

    @property
    def vectorized(self) -> bool:
        """Whether numpy fast paths may be used."""
        return self.dtype is not None

    def __reduce__(self):
        # Unpickle to the registered instance so worker processes share identity
        return (resolve_domain, (self.name,))

    def __repr__(self) -> str:
        return f"<NumericDomain {self.name}>"


class FloatDomain(NumericDomain):
    """Binary floating point domain backed by a Python or numpy scalar type.

    Args:
        name: Registry key.
        scalar_type: Callable converting a value to the scalar type
            (``float`` or ``numpy.float32``).
        dtype: Matching numpy dtype.
    """

    def __init__(self, name: str, scalar_type: Any, dtype: Any):
        self.name = name
        self._scalar = scalar_type
        self.dtype = np.dtype(dtype)

    def coerce(self, value: Any) -> Any:
        return self._scalar(value)

    def from_count(self, count: int) -> Any:
        return self._scalar(count)

    def floor_index(self, value: Any) -> int:
        return int(math.floor(value))

    def is_nan(self, value: Any) -> bool:
        return math.isnan(value)

    def is_finite(self, value: Any) -> bool:
        return math.isfinite(value)

    def sqrt(self, value: Any) -> Any:
        return self._scalar(math.sqrt(value))

    @property
    def zero(self) -> Any:
        return self._scalar(0.0)

    @property
    def infinity(self) -> Any:
        return self._scalar("inf")

    @property
    def neg_infinity(self) -> Any:
        return self._scalar("-inf")

    @property
    def nan(self) -> Any:
        return self._scalar("nan")


class DecimalDomain(NumericDomain):
    """Arbitrary precision decimal domain.

    Floats are converted through their shortest ``repr`` so that ``0.1``
    becomes ``Decimal("0.1")`` rather than its binary expansion. There is no
    vectorized path; batch ingestion falls back to per-sample updates.
    """

    name = "decimal"
    dtype = None

    def coerce(self, value: Any) -> Decimal:
        if isinstance(value, Decimal):
            return value
        if isinstance(value, (float, np.floating)):
            return Decimal(repr(float(value)))
        return Decimal(value)

    def from_count(self, count: int) -> Decimal:
        return Decimal(count)

    def floor_index(self, value: Decimal) -> int:
        return int(value.to_integral_value(rounding=ROUND_FLOOR))

    def is_nan(self, value: Decimal) -> bool:
        return value.is_nan()

    def is_finite(self, value: Decimal) -> bool:
        return value.is_finite()

    def sqrt(self, value: Decimal) -> Decimal:
        return value.sqrt()

    @property
    def zero(self) -> Decimal:
        return Decimal(0)

    @property
    def infinity(self) -> Decimal:
        return Decimal("Infinity")

    @property
    def neg_infinity(self) -> Decimal:
        return Decimal("-Infinity")

    @property
    def nan(self) -> Decimal:
        return Decimal("NaN")


FLOAT64 = FloatDomain("float64", float, np.float64)
FLOAT32 = FloatDomain("float32", np.float32, np.float32)
DECIMAL = DecimalDomain()

_DOMAINS: Dict[str, NumericDomain] = {d.name: d for d in (FLOAT64, FLOAT32, DECIMAL)}


def resolve_domain(domain: Union[str, NumericDomain, None]) -> NumericDomain:
    """Look up a numeric domain by name, passing instances through.

    Args:
        domain: Domain instance, registry name (``"float64"``, ``"float32"``,
            ``"decimal"``) or ``None`` for the default.

    Returns:
        The matching :class:`NumericDomain`.

    Raises:
        ValueError: If the name is not registered.
    """
    if domain is None:
        return FLOAT64
    if isinstance(domain, NumericDomain):
        return domain
    try:
        return _DOMAINS[domain]
    except KeyError:
        raise ValueError(
            f"Unknown numeric domain {domain!r}; expected one of {sorted(_DOMAINS)}"
        ) from None


def register_domain(domain: NumericDomain) -> NumericDomain:
    """Make a custom domain resolvable by name.

    Registration is required for accumulators over a custom domain to be
    sent to worker processes, since domains unpickle through
    :func:`resolve_domain`.

    Raises:
        ValueError: If another domain is already registered under the name.
    """
    existing = _DOMAINS.get(domain.name)
    if existing is not None and existing is not domain:
        raise ValueError(f"Numeric domain {domain.name!r} is already registered")
    _DOMAINS[domain.name] = domain
    return domain
