"""Tests for the numeric capability interface."""

from decimal import Decimal
import math
import pickle

import numpy as np
import pytest

from hstats.numeric import (
    DECIMAL,
    FLOAT32,
    FLOAT64,
    DecimalDomain,
    FloatDomain,
    register_domain,
    resolve_domain,
)


class TestResolveDomain:
    """Lookup of domains by name."""

    @pytest.mark.parametrize(
        "name, expected",
        [("float64", FLOAT64), ("float32", FLOAT32), ("decimal", DECIMAL), (None, FLOAT64)],
    )
    def test_known_names(self, name, expected):
        assert resolve_domain(name) is expected

    def test_instance_passes_through(self):
        assert resolve_domain(FLOAT32) is FLOAT32

    def test_unknown_name_raises(self):
        with pytest.raises(ValueError, match="Unknown numeric domain 'float16'"):
            resolve_domain("float16")

    def test_register_rejects_name_clash(self):
        with pytest.raises(ValueError, match="already registered"):
            register_domain(FloatDomain("float64", float, np.float64))

    def test_register_same_instance_is_noop(self):
        assert register_domain(FLOAT64) is FLOAT64

    @pytest.mark.parametrize("domain", [FLOAT64, FLOAT32, DECIMAL])
    def test_pickle_round_trip_keeps_identity(self, domain):
        """Worker processes must see the registered instance."""
        assert pickle.loads(pickle.dumps(domain)) is domain


class TestFloatDomains:
    """Behaviour of the binary floating point domains."""

    def test_float64_coerces_to_python_float(self):
        value = FLOAT64.coerce(3)
        assert type(value) is float
        assert value == 3.0

    def test_float32_coerces_to_numpy_float32(self):
        assert isinstance(FLOAT32.coerce(0.5), np.float32)
        assert isinstance(FLOAT32.from_count(10), np.float32)

    @pytest.mark.parametrize("value, expected", [(2.7, 2), (0.0, 0), (-0.5, -1), (5.0, 5)])
    def test_floor_index(self, value, expected):
        assert FLOAT64.floor_index(value) == expected

    def test_special_values(self):
        assert FLOAT64.infinity == math.inf
        assert FLOAT64.neg_infinity == -math.inf
        assert FLOAT64.is_nan(FLOAT64.nan)
        assert not FLOAT64.is_finite(FLOAT64.infinity)
        assert FLOAT64.is_finite(1.0)
        assert FLOAT32.is_nan(FLOAT32.nan)

    def test_sqrt(self):
        assert FLOAT64.sqrt(9.0) == 3.0
        assert isinstance(FLOAT32.sqrt(np.float32(4.0)), np.float32)

    def test_vectorized(self):
        assert FLOAT64.vectorized
        assert FLOAT32.dtype == np.dtype(np.float32)


class TestDecimalDomain:
    """Behaviour of the decimal domain."""

    def test_float_goes_through_repr(self):
        assert DECIMAL.coerce(0.1) == Decimal("0.1")

    def test_string_and_int(self):
        assert DECIMAL.coerce("2.50") == Decimal("2.50")
        assert DECIMAL.coerce(3) == Decimal(3)

    def test_numpy_float(self):
        assert DECIMAL.coerce(np.float64(0.25)) == Decimal("0.25")

    @pytest.mark.parametrize(
        "value, expected", [("2.7", 2), ("-0.5", -1), ("3", 3), ("-3", -3)]
    )
    def test_floor_index(self, value, expected):
        assert DECIMAL.floor_index(Decimal(value)) == expected

    def test_special_values(self):
        assert DECIMAL.infinity == Decimal("Infinity")
        assert DECIMAL.neg_infinity == Decimal("-Infinity")
        assert DECIMAL.is_nan(DECIMAL.nan)
        assert not DECIMAL.is_finite(DECIMAL.infinity)

    def test_not_vectorized(self):
        assert not DECIMAL.vectorized
        assert isinstance(DECIMAL, DecimalDomain)
