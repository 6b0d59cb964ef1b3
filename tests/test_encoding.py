"""
Encoding Tests
==============
Fixed-point encoding into Z_n and the modulus capacity check.
"""

import math
from decimal import Decimal
from fractions import Fraction

import pytest

from psi_core import (
    Encoding,
    EncodingOverflow,
    ModulusOverflow,
    NegativeOrOutOfRangeInput,
    NumericEncoder,
    NumericKind,
    max_coefficient_bound
)


SMALL_PRIME = 1_000_003


class TestNumericEncoder:
    """Encode/decode on a small ring where values are easy to check"""

    @pytest.fixture
    def encoder(self):
        return NumericEncoder(SMALL_PRIME)

    def test_positive_fraction_scaled_by_exponent(self, encoder):
        """1.5 at base 10, exponent -1 is stored as 15"""
        assert encoder.encode(1.5, Encoding(exponent=-1)) == 15

    def test_negative_value_wraps_around_modulus(self, encoder):
        encoding = Encoding(kind=NumericKind.INT, exponent=0)

        element = encoder.encode(-2, encoding)

        assert element == SMALL_PRIME - 2
        assert encoder.decode(element, encoding) == -2

    def test_signed_midpoint(self, encoder):
        """Elements above n // 2 are negative, at or below are positive"""
        half = SMALL_PRIME // 2
        assert encoder.signed(half) == half
        assert encoder.signed(half + 1) == half + 1 - SMALL_PRIME

    def test_explicit_exponent_overrides_default(self, encoder):
        encoding = Encoding(exponent=-1)
        assert encoder.encode(1.5, encoding, exponent=-2) == 150
        assert encoder.decode(150, encoding, exponent=-2) == 1.5

    def test_positive_exponent_quantizes(self, encoder):
        """Exponent 2 keeps hundreds only"""
        encoding = Encoding(kind=NumericKind.INT, exponent=2)
        element = encoder.encode(1234, encoding)
        assert encoder.decode(element, encoding) == 1200

    def test_value_at_capacity_encodes(self, encoder):
        encoding = Encoding(kind=NumericKind.INT, exponent=0)
        assert encoder.encode(SMALL_PRIME // 2, encoding) == SMALL_PRIME // 2
        assert encoder.encode(-(SMALL_PRIME // 2), encoding) == SMALL_PRIME // 2 + 1

    def test_value_beyond_capacity_raises(self, encoder):
        encoding = Encoding(kind=NumericKind.INT, exponent=0)
        with pytest.raises(EncodingOverflow):
            encoder.encode(SMALL_PRIME // 2 + 1, encoding)
        with pytest.raises(EncodingOverflow):
            encoder.encode(1.0, Encoding(exponent=-7))

    @pytest.mark.parametrize("value", [math.inf, -math.inf, math.nan, Decimal("NaN")])
    def test_non_finite_rejected(self, encoder, value):
        with pytest.raises(EncodingOverflow):
            encoder.encode(value, Encoding(exponent=-2))

    def test_unsupported_type_rejected(self, encoder):
        with pytest.raises(TypeError):
            encoder.encode("1.0", Encoding())
        with pytest.raises(TypeError):
            encoder.encode(True, Encoding())

    def test_decode_out_of_range_raises(self, encoder):
        with pytest.raises(NegativeOrOutOfRangeInput):
            encoder.decode(-1, Encoding())
        with pytest.raises(NegativeOrOutOfRangeInput):
            encoder.decode(SMALL_PRIME, Encoding())

    def test_int_kind_rejects_fractional_decode(self, encoder):
        with pytest.raises(ValueError):
            encoder.decode(15, Encoding(kind=NumericKind.INT, exponent=-1))

    def test_decimal_and_fraction_kinds(self, encoder):
        dec = Encoding(kind=NumericKind.DECIMAL, exponent=-3)
        frac = Encoding(kind=NumericKind.FRACTION, exponent=-3)

        assert encoder.decode(encoder.encode(Decimal("-12.345"), dec), dec) == Decimal("-12.345")
        assert encoder.decode(encoder.encode(Fraction(1, 8), frac), frac) == Fraction(1, 8)

        # More significant digits than the default decimal context holds
        wide = NumericEncoder(2**521 - 1)
        dec = Encoding(kind=NumericKind.DECIMAL, exponent=-10)
        value = Decimal("-12345678901234567890.0123456789")
        decoded = wide.decode(wide.encode(value, dec), dec)
        assert decoded == value
        assert str(decoded) == str(value)

    def test_rounding_to_nearest(self, encoder):
        """Values below the exponent's resolution round to the closest step"""
        encoding = Encoding(exponent=-2)
        assert encoder.decode(encoder.encode(0.456, encoding), encoding) == 0.46
        assert encoder.decode(encoder.encode(-0.454, encoding), encoding) == -0.45


class TestLargeModulusRoundTrip:
    """Round trips at a realistic precision on a 512-bit sized ring"""

    @pytest.fixture
    def encoder(self):
        # Mersenne prime 2^521 - 1 stands in for a Paillier modulus
        return NumericEncoder(2 ** 521 - 1)

    @pytest.mark.parametrize("value", [0.0, 1.0, 0.456, 32.0, 72.0, 0.5, -3.25, -1e-9, 123456.789])
    def test_float_round_trip(self, encoder, value):
        encoding = Encoding(exponent=-10)
        assert encoder.decode(encoder.encode(value, encoding), encoding) == value

    def test_int_and_float_alias(self, encoder):
        """32 and 32.0 are the same element, so they match across parties"""
        encoding = Encoding(exponent=-10)
        assert encoder.encode(32, encoding) == encoder.encode(32.0, encoding)

    def test_distinct_values_distinct_elements(self, encoder):
        encoding = Encoding(exponent=-10)
        values = [0.0, 1.0, 0.456, 32.0, 72.0, 0.5, -0.5]
        elements = encoder.encode_many(values, encoding)
        assert len(set(elements)) == len(values)

    def test_mismatched_exponent_decodes_differently(self, encoder):
        encoding = Encoding(exponent=-10)
        element = encoder.encode(0.5, encoding)
        assert encoder.decode(element, encoding, exponent=-9) == 5.0


class TestCapacityCheck:
    """Coefficient growth of the roots polynomial against n // 2"""

    def test_coefficient_bound(self):
        # (x - 10)^3 = x^3 - 30x^2 + 300x - 1000
        assert max_coefficient_bound(3, 10) == 1000
        assert max_coefficient_bound(2, 1) == 2
        assert max_coefficient_bound(0, 5) == 1

    def test_small_set_within_capacity(self):
        encoder = NumericEncoder(10007)
        encoder.check_capacity([1, 2, 10007 - 3])

    def test_large_roots_overflow(self):
        encoder = NumericEncoder(10007)
        with pytest.raises(ModulusOverflow):
            encoder.check_capacity([100, 200, 300])

    def test_many_roots_overflow(self):
        """Set size alone can push the bound past the ring"""
        encoder = NumericEncoder(2 ** 61 - 1)
        encoder.check_capacity(range(1, 10))
        with pytest.raises(ModulusOverflow):
            encoder.check_capacity(range(1, 40))

    def test_empty_set_passes(self):
        NumericEncoder(10007).check_capacity([])


class TestEncodingConfig:

    def test_dict_round_trip(self):
        encoding = Encoding(kind=NumericKind.DECIMAL, base=16, exponent=-4)
        assert Encoding.from_dict(encoding.to_dict()) == encoding

    def test_invalid_base(self):
        with pytest.raises(ValueError):
            Encoding(base=1)

    def test_encodings_are_hashable_and_comparable(self):
        assert Encoding() == Encoding()
        assert len({Encoding(), Encoding(exponent=-5)}) == 2
